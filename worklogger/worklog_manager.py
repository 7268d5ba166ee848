"""
Run coordinator for Jira Worklogger
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .jira_worklog import JiraWorklogError, JiraWorklogIntegration
from .models import Config, Epic, TimeEntry, WorklogResult
from .time_processor import EntryParser, TimestampBuilder, default_date_str, format_duration


class WorklogManager:
    """Coordinates discovery, input, parsing, submission and reporting"""

    def __init__(self, config: Config, jira: Optional[JiraWorklogIntegration] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.jira = jira or JiraWorklogIntegration(config, logger=logger)
        self.entry_parser = EntryParser(config.category_aliases, logger=logger)
        self.timestamp_builder = TimestampBuilder(logger=logger)

    def discover_epics(self) -> Dict[str, Epic]:
        """Suggested epics, or an empty set when the lookup fails"""
        try:
            return self.jira.get_suggested_epics()
        except JiraWorklogError as e:
            self.logger.warning(f"Failed to load issues: {e}")
            return {}

    def prompt_user(self, epics: Dict[str, Epic], input_func: Optional[Callable[[str], str]] = None) -> Tuple[str, str]:
        """Ask for the date and time entries on the terminal"""
        input_func = input_func or input
        default_date = default_date_str()

        print("=== Jira Worklogger ===")

        if epics:
            print("\nSuggested Epics (You Are Possibly Working On):")
            for i, epic in enumerate(epics.values(), start=1):
                print(f"  {i}. {epic.key}: {epic.summary}")
            print("\nTo log time to an epic, use its key in the time entries field.")

        if self.config.category_aliases:
            print("\nAvailable Category Aliases:")
            for alias in sorted(self.config.category_aliases):
                print(f"  {alias:<10} -> {self.config.category_aliases[alias]}")

        date_str = input_func(f"Date [YYYY-MM-DD] (default {default_date}): ").strip()
        entries = input_func("Time entries (e.g., meetings=1h; support=30m; PROJ-123=1.5h): ").strip()
        return date_str or default_date, entries

    def prepare(self, date_str: str, raw_entries: str) -> Tuple[str, List[TimeEntry]]:
        """Build the start timestamp and parse entries; raises ParseError on bad input"""
        started_iso = self.timestamp_builder.build(
            date_str,
            self.config.worklog_hour,
            self.config.worklog_minute,
            self.config.timezone,
        )
        entries = self.entry_parser.parse(raw_entries)
        return started_iso, entries

    def submit(self, entries: List[TimeEntry], started_iso: str) -> Tuple[List[WorklogResult], List[WorklogResult]]:
        self.logger.info(f"Submitting {len(entries)} worklogs starting {started_iso}")
        return self.jira.submit_entries(entries, started_iso)

    def report(self, successes: List[WorklogResult], failures: List[WorklogResult]) -> bool:
        """Log a summary of the run; True when nothing failed"""
        if successes:
            total_seconds = sum(result.seconds for result in successes)
            self.logger.info(f"Posted {len(successes)} worklogs ({format_duration(total_seconds)}).")
            for result in successes:
                self.logger.info(f"  - {result.issue}: {format_duration(result.seconds)}")

        if failures:
            self.logger.error("Some entries failed:")
            for result in failures:
                self.logger.error(f"  - {result.issue}: HTTP {result.code}\n    {result.display_body}")
            return False

        return True
