"""FIFO queue of task ids awaiting dispatch."""

import logging
import threading
from collections import deque
from typing import Optional
from uuid import UUID

from .exceptions import DuplicateEntry

logger = logging.getLogger(__name__)


class TaskQueue:
    """
    Ordered task ids; any number of submitters append, one worker pops.

    The queue only holds identifiers. A given id appears at most once.
    """

    def __init__(self):
        self._items: deque[UUID] = deque()
        self._members: set[UUID] = set()
        self._lock = threading.Lock()

    def enqueue(self, task_id: UUID) -> None:
        """Append to the tail."""
        with self._lock:
            if task_id in self._members:
                raise DuplicateEntry(f"Task {task_id} is already queued")
            self._items.append(task_id)
            self._members.add(task_id)

    def dequeue_front(self) -> Optional[UUID]:
        """Remove and return the head, or None when empty."""
        with self._lock:
            if not self._items:
                return None
            task_id = self._items.popleft()
            self._members.discard(task_id)
            return task_id

    def peek_depth(self) -> int:
        with self._lock:
            return len(self._items)

    def ids(self) -> list[UUID]:
        """Queued ids in dispatch order."""
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._members.clear()

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._members

    def __len__(self) -> int:
        return self.peek_depth()
