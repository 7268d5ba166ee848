"""
Jira worklog API integration: worklog submission and issue discovery
"""

import base64
import json
import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .models import Config, Epic, Issue, TimeEntry, WorklogResult
from .time_processor import format_duration

REQUEST_TIMEOUT = 30
SEARCH_FIELDS = ["key", "summary", "parent", "issuetype", "customfield_10014"]
SEARCH_MAX_RESULTS = 100
SKIPPED_BODY = "Skipped zero seconds"


class JiraWorklogError(Exception):
    """Raised when there's an issue talking to the Jira API"""
    pass


def basic_auth_header(email: str, token: str) -> str:
    encoded = base64.b64encode(f"{email}:{token}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def build_worklog_payload(started_iso: str, seconds: int) -> Dict:
    """Worklog body for both API v2 (Server/DC) and v3 (Cloud)"""
    return {
        "started": started_iso,
        "timeSpentSeconds": seconds,
    }


def build_search_jql(excluded_issues: Optional[List[str]] = None) -> str:
    jql = "assignee = currentUser() AND status NOT IN (Done, Closed, Completed)"
    for key in excluded_issues or []:
        jql += f" AND key != '{key}' AND parent != '{key}'"
    return jql


def get_epics_from_issues(issues: List[Issue], excluded_issues: Optional[List[str]] = None) -> Dict[str, Epic]:
    """Derive the epics a user is possibly working on from their assigned issues"""
    excluded = set(excluded_issues or [])
    epics: Dict[str, Epic] = {}

    for issue in issues:
        if issue.issue_type and issue.issue_type.lower() == "epic" and issue.key not in excluded:
            epics[issue.key] = Epic(key=issue.key, summary=issue.summary or "", kind="epic")

        parent_key = issue.parent_key
        if parent_key and parent_key not in excluded and parent_key not in epics:
            epics[parent_key] = Epic(
                key=parent_key,
                summary=issue.parent_summary or "No summary",
                kind="parent",
            )

        epic_link = issue.epic_link
        if epic_link and epic_link not in excluded and epic_link not in epics:
            epics[epic_link] = Epic(key=epic_link, summary=f"Epic: {epic_link}", kind="epic_link")

    return epics


class JiraWorklogIntegration:
    """Posts worklogs to Jira and looks up the current user's issues"""

    def __init__(self, config: Config, session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': basic_auth_header(config.jira_email, config.jira_api_token),
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

    @property
    def api_url(self) -> str:
        return f"{self.config.jira_base_url}/rest/api/{self.config.api_version}"

    def worklog_url(self, issue: str) -> str:
        return f"{self.api_url}/issue/{quote(issue, safe='')}/worklog"

    def _make_request(self, method: str, url: str, **kwargs):
        """Make an HTTP request, raising JiraWorklogError on transport errors and non-200 replies"""
        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.exceptions.Timeout:
            raise JiraWorklogError(f"Request timeout for {method} {url}")
        except requests.exceptions.ConnectionError:
            raise JiraWorklogError(f"Connection error for {method} {url}")
        except requests.exceptions.RequestException as e:
            raise JiraWorklogError(f"Request failed: {e}")

        if response.status_code == 401:
            raise JiraWorklogError("Authentication failed. Please check your Jira email and API token.")
        if response.status_code != 200:
            raise JiraWorklogError(f"API returned error: HTTP {response.status_code} - {response.text}")
        return response

    def submit_worklog(self, issue: str, seconds: int, started_iso: str) -> WorklogResult:
        """Post one worklog; failures are returned, never raised"""
        result = WorklogResult(issue=issue, seconds=seconds)

        if seconds <= 0:
            result.success = True
            result.body = SKIPPED_BODY
            return result

        url = self.worklog_url(issue)
        payload = build_worklog_payload(started_iso, seconds)

        self.logger.debug(
            f"Posting worklog to {issue} with {seconds} seconds using API v{self.config.api_version}"
        )
        self.logger.debug(f"Payload: {json.dumps(payload, indent=2)}")
        self.logger.debug(f"POST request to: {url}")

        try:
            response = self.session.post(url, json=payload, timeout=REQUEST_TIMEOUT)
        except requests.exceptions.Timeout:
            result.body = f"Request timed out after {REQUEST_TIMEOUT}s"
            return result
        except requests.exceptions.RequestException as e:
            result.body = f"Failed to send request: {e}"
            return result

        result.code = response.status_code
        result.body = response.text

        if response.status_code in [200, 201]:
            result.success = True
            self.logger.debug(f"Logged {format_duration(seconds)} to {issue}")
        else:
            self.logger.error(f"HTTP {response.status_code} response: {result.display_body}")

        return result

    def submit_entries(self, entries: List[TimeEntry], started_iso: str) -> Tuple[List[WorklogResult], List[WorklogResult]]:
        """Submit entries one at a time, in order, and split the outcomes"""
        successes = []
        failures = []

        for entry in entries:
            result = self.submit_worklog(entry.issue, entry.seconds, started_iso)
            if result.success:
                successes.append(result)
            else:
                failures.append(result)

        return successes, failures

    def get_assigned_issues(self) -> List[Issue]:
        """Fetch unresolved issues assigned to the current user"""
        jql = build_search_jql(self.config.excluded_issues)

        if self.config.api_version == "3":
            url = f"{self.api_url}/search/jql"
            self.logger.debug(f"Fetching issues from API endpoint: {url}")
            response = self._make_request('POST', url, json={
                "jql": jql,
                "fields": SEARCH_FIELDS,
                "maxResults": SEARCH_MAX_RESULTS,
            })
        else:
            url = f"{self.api_url}/search"
            self.logger.debug(f"Fetching issues from API endpoint: {url}")
            response = self._make_request('GET', url, params={
                "jql": jql,
                "fields": ",".join(SEARCH_FIELDS),
                "maxResults": str(SEARCH_MAX_RESULTS),
            })

        try:
            data = response.json()
        except ValueError as e:
            raise JiraWorklogError(f"Failed to parse response: {e}")

        raw_issues = data.get("issues") if isinstance(data, dict) else None
        if not isinstance(raw_issues, list):
            raise JiraWorklogError("Search response did not contain an issue list")

        issues = []
        for item in raw_issues:
            issue = Issue.from_api(item)
            if issue is not None:
                issues.append(issue)

        self.logger.debug(f"Found {len(issues)} issues assigned to current user")
        return issues

    def get_suggested_epics(self) -> Dict[str, Epic]:
        return get_epics_from_issues(self.get_assigned_issues(), self.config.excluded_issues)
