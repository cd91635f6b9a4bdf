"""IntelliQueue: single-queue task scheduler with bounded retry and notifications."""

from .config import DEFAULT_TASK_TYPES, TASK_DESCRIPTIONS, Config
from .core import Snapshot, TaskInfo, TaskScheduler, TaskStats, sort_tasks_for_display
from .db import TaskStatus
from .exceptions import (
    DuplicateEntry,
    EmptyPayload,
    IntelliQueueError,
    InvalidArgument,
    InvalidTaskType,
    InvalidTransition,
    InvariantViolation,
    PreconditionFailed,
    TaskNotFound,
    TaskValidationError,
)
from .notifications import Notification, NotificationLog, NotificationType
from .queue import TaskQueue
from .retry import MAX_RETRY_COUNT, RetryDecision, decide
from .store import TaskStore
from .worker import TaskWorker, WorkerState

__version__ = "0.1.0"
__all__ = [
    "Config",
    "DEFAULT_TASK_TYPES",
    "TASK_DESCRIPTIONS",
    "TaskScheduler",
    "Snapshot",
    "TaskInfo",
    "TaskStats",
    "sort_tasks_for_display",
    "TaskStatus",
    "TaskStore",
    "TaskQueue",
    "Notification",
    "NotificationLog",
    "NotificationType",
    "MAX_RETRY_COUNT",
    "RetryDecision",
    "decide",
    "TaskWorker",
    "WorkerState",
    "IntelliQueueError",
    "TaskValidationError",
    "InvalidTaskType",
    "EmptyPayload",
    "InvalidArgument",
    "PreconditionFailed",
    "InvariantViolation",
    "TaskNotFound",
    "DuplicateEntry",
    "InvalidTransition",
]
