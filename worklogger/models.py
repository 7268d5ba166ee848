"""
Data models for Jira Worklogger
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

VALID_API_VERSIONS = ("2", "3")
PLACEHOLDER_API_TOKEN = "YOUR_API_TOKEN"
MAX_DISPLAY_BODY = 500


@dataclass(frozen=True)
class TimeEntry:
    """A parsed time entry ready for submission"""
    issue: str
    seconds: int


@dataclass(frozen=True)
class Epic:
    """An epic suggested to the user, derived from assigned issues"""
    key: str
    summary: str
    kind: str  # "epic", "parent" or "epic_link"


@dataclass
class WorklogResult:
    """Outcome of a single worklog submission"""
    issue: str
    seconds: int
    success: bool = False
    code: int = 0
    body: str = ""

    @property
    def display_body(self) -> str:
        return self.body[:MAX_DISPLAY_BODY]


def _str_or_none(value) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _dict_or_empty(value) -> Dict:
    return value if isinstance(value, dict) else {}


@dataclass
class Issue:
    """An issue returned by the Jira search API.

    Fields the response does not carry (or carries with an unexpected type)
    are ``None``.
    """
    key: str
    summary: Optional[str] = None
    issue_type: Optional[str] = None
    parent_key: Optional[str] = None
    parent_summary: Optional[str] = None
    epic_link: Optional[str] = None

    @classmethod
    def from_api(cls, data) -> Optional["Issue"]:
        """Build an Issue from a search response item, or None without a key"""
        data = _dict_or_empty(data)
        key = _str_or_none(data.get("key"))
        fields = data.get("fields")
        if key is None or not isinstance(fields, dict):
            return None

        parent = _dict_or_empty(fields.get("parent"))
        parent_fields = parent.get("fields")

        return cls(
            key=key,
            summary=_str_or_none(fields.get("summary")),
            issue_type=_str_or_none(_dict_or_empty(fields.get("issuetype")).get("name")),
            parent_key=_str_or_none(parent.get("key")),
            parent_summary=(
                _str_or_none(parent_fields.get("summary"))
                if isinstance(parent_fields, dict) else None
            ),
            epic_link=_str_or_none(fields.get("customfield_10014")),
        )


@dataclass
class Config:
    """Configuration settings"""
    jira_base_url: str
    jira_email: str
    jira_api_token: str
    timezone: str = "Europe/London"
    api_version: str = "3"
    log_level: str = "info"
    log_file: Optional[str] = None
    # Worklogs are started at this local time on the chosen date
    worklog_hour: int = 17
    worklog_minute: int = 0
    category_aliases: Dict[str, str] = field(default_factory=dict)
    excluded_issues: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate configuration after initialization"""
        if not self.jira_base_url:
            raise ValueError("Missing JIRA_BASE_URL")
        if not self.jira_email:
            raise ValueError("Missing JIRA_EMAIL")
        if not self.jira_api_token:
            raise ValueError("Missing JIRA_API_TOKEN")

        if not self.jira_base_url.startswith(('http://', 'https://')):
            raise ValueError("Invalid Jira URL format. Must start with http:// or https://")

        if self.jira_api_token == PLACEHOLDER_API_TOKEN:
            raise ValueError(
                f"Jira API token is still set to the placeholder value '{PLACEHOLDER_API_TOKEN}'"
            )

        if self.api_version not in VALID_API_VERSIONS:
            raise ValueError("API version must be 2 (Server/DC) or 3 (Cloud)")

        if not 0 <= self.worklog_hour <= 23 or not 0 <= self.worklog_minute <= 59:
            raise ValueError("Worklog start time must be a valid hour (0-23) and minute (0-59)")

        self.jira_base_url = self.jira_base_url.rstrip('/')
        self.category_aliases = {
            str(alias).lower(): str(key) for alias, key in self.category_aliases.items()
        }
