"""
Tests for the run coordinator
"""

import logging
from unittest.mock import MagicMock

from worklogger.jira_worklog import JiraWorklogError
from worklogger.models import Epic, TimeEntry, WorklogResult
from worklogger.worklog_manager import WorklogManager


def make_manager(config):
    jira = MagicMock()
    return WorklogManager(config, jira=jira), jira


def test_prepare_uses_configured_start_time(config):
    config.worklog_hour = 9
    config.worklog_minute = 15
    manager, _ = make_manager(config)

    started, entries = manager.prepare("2024-03-01", "meetings=1h")

    assert started == "2024-03-01T09:15:00.000+0000"
    assert entries == [TimeEntry("PROJ-1", 3600)]


def test_discover_epics_swallows_lookup_errors(config, caplog):
    manager, jira = make_manager(config)
    jira.get_suggested_epics.side_effect = JiraWorklogError("down")

    with caplog.at_level(logging.WARNING):
        assert manager.discover_epics() == {}
    assert "Failed to load issues: down" in caplog.text


def test_prompt_defaults_date_to_today(config, capsys):
    manager, _ = make_manager(config)
    answers = iter(["", "support=15m"])

    date_str, raw = manager.prompt_user(
        {"E-1": Epic("E-1", "Platform", "epic")}, input_func=lambda prompt: next(answers)
    )

    assert len(date_str) == 10
    assert raw == "support=15m"
    assert "Suggested Epics" in capsys.readouterr().out


def test_report_truncates_failure_bodies(config, caplog):
    manager, _ = make_manager(config)
    failure = WorklogResult(issue="A-1", seconds=60, code=500, body="z" * 600)

    with caplog.at_level(logging.ERROR):
        assert manager.report([], [failure]) is False

    assert "z" * 500 in caplog.text
    assert "z" * 501 not in caplog.text


def test_report_success(config, caplog):
    manager, _ = make_manager(config)
    results = [WorklogResult("A-1", 3600, True, 201), WorklogResult("A-2", 2700, True, 201)]

    with caplog.at_level(logging.INFO):
        assert manager.report(results, []) is True

    assert "Posted 2 worklogs (1h45m)." in caplog.text
    assert "A-2: 0h45m" in caplog.text
