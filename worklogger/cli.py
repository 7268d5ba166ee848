#!/usr/bin/env python3
"""
Jira Worklogger
Command-line tool for posting worklogs to Jira Cloud/Server
"""

import argparse
import logging
import sys

from . import __version__
from .config_manager import ConfigurationError, load_config, setup_logging
from .time_processor import ParseError
from .worklog_manager import WorklogManager

logger = logging.getLogger(__name__)


class WorklogArgumentParser(argparse.ArgumentParser):
    """Argument parser whose usage errors exit with status 1"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = WorklogArgumentParser(
        prog="jira-worklogger",
        description="Command-line tool for posting worklogs to Jira Cloud/Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  The tool looks for configuration in the following locations:
  1. --config PATH
  2. Environment variable WORKLOG_CONFIG
  3. Current working directory (worklog_config.yaml)
  4. Script directory (worklog_config.yaml)
  5. User's home directory (~/.worklog_config.yaml)
  6. System-wide config (/etc/jira-worklogger/worklog_config.yaml)

Environment Variables:
  JIRA_BASE_URL     Jira instance URL (e.g. https://company.atlassian.net)
  JIRA_EMAIL        Your Jira email address
  JIRA_API_TOKEN    Your Jira API token
  TIMEZONE          Your timezone (e.g. Europe/London)
  JIRA_API_VERSION  API version (2 for Server, 3 for Cloud)
  LOG_LEVEL         Logging verbosity (debug, info, warn, error)

Category Aliases:
  Define shorthand names for issue keys under defaults.category_aliases:

    defaults:
      category_aliases:
        meetings: "PROJ-123"
        support: "PROJ-456"

  Then log time with: jira-worklogger --entries "meetings=1h; support=30m"
        """
    )

    parser.add_argument(
        '-v', '--version',
        action='version',
        version=f"Jira Worklogger v{__version__}"
    )

    parser.add_argument(
        '--date',
        type=str,
        default='',
        help='Worklog date (YYYY-MM-DD format, default: today)'
    )

    parser.add_argument(
        '--entries',
        type=str,
        default='',
        help='Time entries, e.g. "meetings=1h;support=30m". Skips the interactive prompt'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Configuration file path'
    )

    args, unknown = parser.parse_known_args(argv)
    for arg in unknown:
        logger.warning(f"Unknown flag: {arg}")
    return args


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    logging.basicConfig(level=logging.INFO)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(config)
    logger.info(f"Starting jira-worklogger with log level: {config.log_level}")

    manager = WorklogManager(config)

    try:
        epics = manager.discover_epics()

        if args.entries:
            logger.info("Running in non-interactive mode with provided parameters")
            date_str, raw_entries = args.date, args.entries
        else:
            date_str, raw_entries = manager.prompt_user(epics)

        try:
            started_iso, entries = manager.prepare(date_str, raw_entries)
        except ParseError as e:
            logger.error(f"Failed to parse input: {e}")
            sys.exit(1)

        if not entries:
            logger.info("No time entries to post. Exiting.")
            return

        successes, failures = manager.submit(entries, started_iso)

    except (KeyboardInterrupt, EOFError):
        logger.info("Operation cancelled by user")
        sys.exit(1)

    if not manager.report(successes, failures):
        sys.exit(1)


if __name__ == "__main__":
    main()
