"""
Tests for data models
"""

import pytest

from worklogger.models import Config, Issue, WorklogResult


def make_config(**overrides):
    values = dict(
        jira_base_url="https://test.atlassian.net",
        jira_email="dev@test.com",
        jira_api_token="test-token",
    )
    values.update(overrides)
    return Config(**values)


def test_config_defaults():
    config = make_config(jira_base_url="https://test.atlassian.net/")
    assert config.jira_base_url == "https://test.atlassian.net"
    assert config.timezone == "Europe/London"
    assert config.api_version == "3"
    assert config.log_level == "info"
    assert config.category_aliases == {}


def test_config_validation():
    with pytest.raises(ValueError, match="Invalid Jira URL format"):
        make_config(jira_base_url="jira.example.com")

    with pytest.raises(ValueError, match="placeholder"):
        make_config(jira_api_token="YOUR_API_TOKEN")

    with pytest.raises(ValueError, match="API version"):
        make_config(api_version="4")

    with pytest.raises(ValueError, match="Worklog start time"):
        make_config(worklog_hour=24)

    with pytest.raises(ValueError, match="Missing JIRA_EMAIL"):
        make_config(jira_email="")


def test_config_lowercases_aliases():
    config = make_config(category_aliases={"Docs": "PROJ-3"})
    assert config.category_aliases == {"docs": "PROJ-3"}


def test_worklog_result_display_body():
    result = WorklogResult(issue="A-1", seconds=60, body="e" * 501)
    assert result.display_body == "e" * 500
    assert not result.success


def test_issue_from_api_full():
    issue = Issue.from_api({
        "key": "T-1",
        "fields": {
            "summary": "Write docs",
            "issuetype": {"name": "Story"},
            "parent": {"key": "E-1", "fields": {"summary": "Docs epic"}},
            "customfield_10014": "E-2",
        },
    })
    assert issue == Issue(
        key="T-1",
        summary="Write docs",
        issue_type="Story",
        parent_key="E-1",
        parent_summary="Docs epic",
        epic_link="E-2",
    )


def test_issue_from_api_tolerates_wrong_types():
    issue = Issue.from_api({
        "key": "T-2",
        "fields": {
            "summary": 42,
            "issuetype": "Story",
            "parent": {"key": "E-1", "fields": None},
            "customfield_10014": {"value": "E-2"},
        },
    })
    assert issue == Issue(key="T-2", parent_key="E-1")


@pytest.mark.parametrize("data", [None, [], {"key": "T-3"}, {"key": "", "fields": {}}, {"key": 5, "fields": {}}])
def test_issue_from_api_requires_key_and_fields(data):
    assert Issue.from_api(data) is None
