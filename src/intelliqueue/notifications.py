"""Capacity-bounded notification log with observer callbacks."""

import logging
import threading
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Callable
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .db import utcnow
from .exceptions import InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    WARNING = "WARNING"


_LOG_LEVELS = {
    NotificationType.INFO: logging.INFO,
    NotificationType.SUCCESS: logging.INFO,
    NotificationType.WARNING: logging.WARNING,
    NotificationType.ERROR: logging.ERROR,
}


class Notification(BaseModel):
    """One observability record."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utcnow)
    type: NotificationType
    message: str


Subscriber = Callable[[Notification], None]


class NotificationLog:
    """
    Append-only log keeping the most recent `capacity` entries.

    Entries are stored newest first; the oldest one falls off the end as soon
    as the bound would be exceeded. Subscribers are called with each new entry
    after it is stored.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise InvalidArgument(f"Notification capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: deque[Notification] = deque(maxlen=capacity)
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def append(self, type: NotificationType, message: str) -> Notification:
        """Record a new entry and notify subscribers."""
        entry = Notification(type=NotificationType(type), message=message)
        with self._lock:
            self._entries.appendleft(entry)
            subscribers = list(self._subscribers)

        logger.log(_LOG_LEVELS[entry.type], f"[{entry.type.value}] {message}")

        for callback in subscribers:
            try:
                callback(entry)
            except Exception:
                logger.exception(f"Notification subscriber {callback!r} failed")
        return entry

    def list(self) -> list[Notification]:
        """Entries, most recent first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
