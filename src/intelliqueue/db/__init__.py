"""IntelliQueue database module."""

from .engine import create_memory_engine, init_database
from .models import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, Task, TaskStatus, UTCDateTime, utcnow

__all__ = [
    "Task",
    "TaskStatus",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "UTCDateTime",
    "utcnow",
    "create_memory_engine",
    "init_database",
]
