"""
Time parsing logic for Jira Worklogger: durations, entries and timestamps
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import TimeEntry

DATE_FORMAT = "%Y-%m-%d"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_BARE_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?$", re.ASCII)


class ParseError(Exception):
    """Raised when a duration or time entry cannot be parsed"""
    pass


class DateParseError(ParseError):
    """Raised when a worklog date cannot be parsed"""
    pass


@dataclass(frozen=True)
class DurationMatcher:
    """A duration form: a pattern and the handler turning its match into seconds"""
    name: str
    pattern: re.Pattern
    handler: Callable[[re.Match], int]

    def match(self, token: str) -> Optional[int]:
        found = self.pattern.match(token)
        if found is None:
            return None
        return self.handler(found)


def _hours_to_seconds(hours: float) -> int:
    # Fractional seconds are truncated toward zero
    seconds = hours * 3600
    if not math.isfinite(seconds):
        raise OverflowError("duration out of range")
    return int(seconds)


# Order matters: the first matching form wins.
DURATION_MATCHERS: Tuple[DurationMatcher, ...] = (
    DurationMatcher(
        "hours_and_minutes",
        re.compile(r"^(\d+(?:\.\d+)?)\s*h\s*(\d+)\s*m$", re.ASCII),
        lambda m: _hours_to_seconds(float(m.group(1))) + int(m.group(2)) * 60,
    ),
    DurationMatcher(
        "hours",
        re.compile(r"^(\d+(?:\.\d+)?)\s*h$", re.ASCII),
        lambda m: _hours_to_seconds(float(m.group(1))),
    ),
    DurationMatcher(
        "minutes",
        re.compile(r"^(\d+)\s*m$", re.ASCII),
        lambda m: int(m.group(1)) * 60,
    ),
    DurationMatcher(
        "clock",
        re.compile(r"^(\d+):(\d+)$", re.ASCII),
        lambda m: int(m.group(1)) * 3600 + int(m.group(2)) * 60,
    ),
)


class DurationParser:
    """Converts free-form duration tokens ("1.5h", "90m", "1:30", "2") to seconds"""

    def __init__(self, matchers: Tuple[DurationMatcher, ...] = DURATION_MATCHERS):
        self.matchers = matchers

    def parse(self, token: str) -> int:
        """Return the whole number of seconds described by ``token``.

        Empty input is zero. A bare number is read as hours; a signed bare
        number is accepted as-is, so "-1" yields -3600 and callers are
        expected to drop non-positive durations.
        """
        token = token.strip().lower()
        if not token:
            return 0

        try:
            for matcher in self.matchers:
                seconds = matcher.match(token)
                if seconds is not None:
                    return seconds

            if not _BARE_NUMBER_PATTERN.match(token):
                raise ParseError(f"Unable to parse time: {token}")
            return _hours_to_seconds(float(token))
        except OverflowError:
            raise ParseError(f"Unable to parse time: {token} (too large)")


class EntryParser:
    """Splits a raw entries string into resolved TimeEntry objects"""

    def __init__(self, aliases: Optional[Dict[str, str]] = None,
                 duration_parser: Optional[DurationParser] = None,
                 logger: Optional[logging.Logger] = None):
        self.aliases = {alias.lower(): key for alias, key in (aliases or {}).items()}
        self.duration_parser = duration_parser or DurationParser()
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def split_fragments(raw: str) -> List[str]:
        """Split on newlines, then semicolons, dropping blank fragments"""
        fragments = []
        for line in raw.split("\n"):
            for part in line.split(";"):
                part = part.strip()
                if part:
                    fragments.append(part)
        return fragments

    @staticmethod
    def split_fragment(fragment: str) -> Tuple[str, str]:
        """Extract the (issue, duration) tokens from one fragment"""
        if "=" in fragment:
            issue, duration = fragment.split("=", 1)
            return issue.strip(), duration.strip()

        fields = fragment.split()
        if len(fields) >= 2:
            return fields[0], fields[1]

        # Only an issue key, e.g. an epic label pasted from the suggestions
        return fragment, "0"

    def resolve_issue(self, token: str) -> str:
        token = token.removesuffix(":")
        alias_value = self.aliases.get(token.lower())
        if alias_value is not None:
            self.logger.info(f"Using alias '{token}' -> {alias_value}")
            return alias_value
        return token

    def parse(self, raw: str) -> List[TimeEntry]:
        """Parse ``raw`` into entries; any bad duration aborts the whole parse"""
        entries = []
        for fragment in self.split_fragments(raw or ""):
            issue_token, duration_token = self.split_fragment(fragment)
            issue = self.resolve_issue(issue_token)

            try:
                seconds = self.duration_parser.parse(duration_token)
            except ParseError as e:
                raise ParseError(
                    f"Failed to parse time for entry '{fragment}' ('{duration_token}'): {e}"
                ) from e

            if issue and seconds > 0:
                entries.append(TimeEntry(issue=issue, seconds=seconds))
            else:
                self.logger.debug(f"Skipping entry '{fragment}' with no time to log")

        return entries


def default_date_str() -> str:
    """Today's local date as YYYY-MM-DD"""
    return datetime.now().strftime(DATE_FORMAT)


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}h{remainder // 60}m"


class TimestampBuilder:
    """Builds worklog start timestamps in the Jira wire format"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def parse_date(date_str: str) -> datetime:
        if not date_str:
            date_str = default_date_str()
        if not _DATE_PATTERN.match(date_str):
            raise DateParseError(f"Invalid date '{date_str}'. Use YYYY-MM-DD")
        try:
            return datetime.strptime(date_str, DATE_FORMAT)
        except ValueError as e:
            raise DateParseError(f"Invalid date '{date_str}': {e}") from e

    def resolve_timezone(self, timezone_name: str) -> Optional[ZoneInfo]:
        """Return the named zone, or None for the process local zone"""
        try:
            return ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            self.logger.warning(
                f"Could not load timezone {timezone_name!r}: {e}, using system default"
            )
            return None

    def build(self, date_str: str, hour: int, minute: int, timezone_name: str) -> str:
        """Return e.g. ``2024-03-01T17:00:00.000+0000`` for the given local time"""
        date = self.parse_date(date_str)
        zone = self.resolve_timezone(timezone_name)

        try:
            started = date.replace(hour=hour, minute=minute, second=0, microsecond=0)
        except ValueError as e:
            raise DateParseError(f"Invalid time {hour}:{minute}: {e}") from e

        if zone is None:
            started = started.astimezone()
        else:
            # Round trip through UTC moves wall times in a DST gap forward
            started = started.replace(tzinfo=zone).astimezone(timezone.utc).astimezone(zone)

        millis = started.microsecond // 1000
        return f"{started.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}{started.strftime('%z')}"
