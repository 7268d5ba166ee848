"""Shared fixtures"""

import logging

import pytest

from worklogger.models import Config


@pytest.fixture(autouse=True)
def restore_package_logger():
    """setup_logging reconfigures the package logger; undo it between tests"""
    package_logger = logging.getLogger("worklogger")
    handlers = package_logger.handlers[:]
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def config():
    return Config(
        jira_base_url="https://example.atlassian.net/",
        jira_email="dev@example.com",
        jira_api_token="secret-token",
        category_aliases={"meetings": "PROJ-1", "support": "PROJ-2"},
    )


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def fake_response():
    return FakeResponse
