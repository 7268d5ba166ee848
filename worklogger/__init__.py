__version__ = "1.0.0"
__all__ = ["main", "Config", "TimeEntry", "Epic", "Issue", "WorklogResult"]
from .models import Config, TimeEntry, Epic, Issue, WorklogResult
from .cli import main
