"""
Configuration management for Jira Worklogger
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .models import Config

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "worklog_config.yaml"
HOME_CONFIG_FILENAME = ".worklog_config.yaml"
SYSTEM_CONFIG_PATH = Path("/etc/jira-worklogger") / CONFIG_FILENAME
CONFIG_PATH_ENV = "WORKLOG_CONFIG"

# Environment variable -> config field
ENV_OVERRIDES = {
    "JIRA_BASE_URL": "jira_base_url",
    "JIRA_EMAIL": "jira_email",
    "JIRA_API_TOKEN": "jira_api_token",
    "TIMEZONE": "timezone",
    "JIRA_API_VERSION": "api_version",
    "LOG_LEVEL": "log_level",
}

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ConfigurationError(Exception):
    """Raised when there's an issue with configuration"""
    pass


def config_search_paths() -> List[Path]:
    """Candidate config locations, most specific first"""
    paths = []
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        paths.append(Path(env_path))
    paths.append(Path.cwd() / CONFIG_FILENAME)
    if sys.argv and sys.argv[0]:
        paths.append(Path(sys.argv[0]).resolve().parent / CONFIG_FILENAME)
    paths.append(Path.home() / HOME_CONFIG_FILENAME)
    paths.append(SYSTEM_CONFIG_PATH)
    return paths


def find_config_file() -> Optional[Path]:
    """Return the first existing config file, or None"""
    for path in config_search_paths():
        if path.is_file():
            return path

    logger.warning(
        "No config file found. Checked: " + ", ".join(str(p) for p in config_search_paths())
    )
    return None


def read_config_file(config_file: Path) -> Dict:
    """Read a YAML config file into a dict"""
    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_file}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {config_file}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")
    return data


def apply_env_overrides(config_data: Dict) -> Dict:
    """Overlay non-empty environment variables onto file values"""
    merged = dict(config_data)
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            merged[field_name] = value
    return merged


def _as_int(config_data: Dict, key: str, default: int) -> int:
    value = config_data.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from YAML plus environment overrides and validate it"""
    if config_file:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {config_file}")
    else:
        path = find_config_file()

    config_data = {}
    if path is not None:
        logger.info(f"Using config file: {path}")
        config_data = read_config_file(path)

    config_data = apply_env_overrides(config_data)

    defaults = config_data.get('defaults') or {}
    if not isinstance(defaults, dict):
        raise ConfigurationError("'defaults' must be a mapping")
    aliases = defaults.get('category_aliases') or {}
    if not isinstance(aliases, dict):
        raise ConfigurationError("'defaults.category_aliases' must be a mapping")
    excluded = defaults.get('excluded_issues') or []
    if not isinstance(excluded, list):
        raise ConfigurationError("'defaults.excluded_issues' must be a list")

    try:
        return Config(
            jira_base_url=str(config_data.get('jira_base_url') or ''),
            jira_email=str(config_data.get('jira_email') or ''),
            jira_api_token=str(config_data.get('jira_api_token') or ''),
            timezone=str(config_data.get('timezone') or 'Europe/London'),
            api_version=str(config_data.get('api_version') or '3'),
            log_level=str(config_data.get('log_level') or 'info'),
            log_file=config_data.get('log_file') or None,
            worklog_hour=_as_int(config_data, 'worklog_hour', 17),
            worklog_minute=_as_int(config_data, 'worklog_minute', 0),
            category_aliases=aliases,
            excluded_issues=[str(key) for key in excluded],
        )
    except ValueError as e:
        raise ConfigurationError(str(e))


def setup_logging(config: Config) -> None:
    """Setup logging configuration for the worklogger package"""
    package_logger = logging.getLogger('worklogger')

    # Clear existing handlers
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    log_level = LOG_LEVELS.get(config.log_level.lower())
    invalid_level = log_level is None
    if invalid_level:
        log_level = logging.INFO
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    if invalid_level:
        package_logger.warning(f"Invalid log level '{config.log_level}', defaulting to 'info'")
