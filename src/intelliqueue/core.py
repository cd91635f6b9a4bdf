"""Core intelliqueue functionality: the TaskScheduler facade and its read views."""

import asyncio
import logging
import math
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .config import Config
from .db import TaskStatus
from .exceptions import EmptyPayload, InvalidArgument, InvalidTaskType, PreconditionFailed
from .notifications import Notification, NotificationLog, NotificationType
from .queue import TaskQueue
from .store import TaskStore
from .worker import RandomSource, TaskWorker, WorkerState, short_id

logger = logging.getLogger(__name__)

MIN_PROCESSING_DELAY_MS = 0


class TaskInfo(BaseModel):
    """Read-only copy of a task record."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID
    task_type: str
    payload: str
    status: TaskStatus
    retry_count: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class TaskStats(BaseModel):
    """Task counts per status."""

    model_config = ConfigDict(frozen=True)

    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.processing + self.completed + self.failed


class Snapshot(BaseModel):
    """Point-in-time view of the whole scheduler."""

    model_config = ConfigDict(frozen=True)

    tasks: list[TaskInfo]
    queue: list[UUID]
    queue_depth: int
    notifications: list[Notification]
    stats: TaskStats
    running: bool
    processing_delay_ms: int
    failure_rate: float


_DISPLAY_ORDER = {
    TaskStatus.PROCESSING: 0,
    TaskStatus.PENDING: 1,
    TaskStatus.COMPLETED: 2,
    TaskStatus.FAILED: 2,
}


def sort_tasks_for_display(tasks: list[TaskInfo]) -> list[TaskInfo]:
    """Processing first, then pending, then finished; most recently updated first within each group."""
    by_recency = sorted(tasks, key=lambda t: t.updated_at, reverse=True)
    return sorted(by_recency, key=lambda t: _DISPLAY_ORDER[t.status])


def _validate_processing_delay(ms: int) -> int:
    if isinstance(ms, bool) or not isinstance(ms, int):
        raise InvalidArgument(f"Processing delay must be an integer number of milliseconds, got {ms!r}")
    if ms < MIN_PROCESSING_DELAY_MS:
        raise InvalidArgument(f"Processing delay must be >= {MIN_PROCESSING_DELAY_MS} ms, got {ms}")
    return ms


def _validate_failure_rate(percent: float) -> float:
    if isinstance(percent, bool) or not isinstance(percent, (int, float)) or math.isnan(percent):
        raise InvalidArgument(f"Failure rate must be a number, got {percent!r}")
    if not 0 <= percent <= 100:
        raise InvalidArgument(f"Failure rate must be within [0, 100], got {percent}")
    return percent


class TaskScheduler:
    """
    Task store, queue, notification log and worker behind one interface.

    Example:
        scheduler = TaskScheduler(Config(processing_delay_ms=500))
        await scheduler.start()
        task_id = scheduler.submit("EMAIL", "user@example.com")
        scheduler.set_running(True)
        await scheduler.wait_for_idle(timeout=10)
        print(scheduler.get_snapshot().stats)
        await scheduler.shutdown()
    """

    def __init__(self, config: Optional[Config] = None, *, rng: Optional[RandomSource] = None):
        self.config = config or Config()

        self.store = TaskStore()
        self.queue = TaskQueue()
        self.notifications = NotificationLog(capacity=self.config.notification_capacity)
        self.state = WorkerState(
            running=False,
            processing_delay_ms=_validate_processing_delay(self.config.processing_delay_ms),
            failure_rate=_validate_failure_rate(self.config.failure_rate),
        )
        self.worker = TaskWorker(
            self.store,
            self.queue,
            self.notifications,
            self.state,
            rng=rng,
            poll_interval_seconds=self.config.poll_interval_seconds,
            dispatch_interval_seconds=self.config.dispatch_interval_seconds,
        )
        self._worker_task: Optional[asyncio.Task] = None

    # ---- write API ----

    def submit(self, task_type: str, payload: str) -> UUID:
        """
        Create a task and queue it for dispatch.

        Args:
            task_type: One of config.task_types
            payload: Non-blank string carried through the lifecycle

        Returns:
            Task UUID

        Raises:
            InvalidTaskType: task_type is not configured
            InvalidArgument: payload is not a string
            EmptyPayload: payload is empty or only whitespace
        """
        if task_type not in self.config.task_types:
            raise InvalidTaskType(
                f"Unknown task type {task_type!r}. Expected one of: {', '.join(self.config.task_types)}"
            )
        if not isinstance(payload, str):
            raise InvalidArgument(f"Task payload must be a string, got {type(payload).__name__}")
        if not payload.strip():
            raise EmptyPayload("Task payload must be a non-empty string")

        task_id = self.store.create_task(str(task_type), payload.strip())
        self.queue.enqueue(task_id)
        self.notifications.append(NotificationType.INFO, f"Task {short_id(task_id)} created with type: {task_type}")
        return task_id

    def set_running(self, running: bool) -> None:
        """
        Start or stop dispatching. Stopping lets an attempt in flight finish.

        Dispatch only happens once the worker loop is up (await start()).
        """
        running = bool(running)
        if running == self.state.running:
            return
        self.state.running = running
        logger.info(f"Worker {'started' if running else 'stopped'}")
        if running and not self.worker_alive:
            logger.warning("Worker loop is not running; tasks will not be dispatched until start() is awaited")

    def set_processing_delay(self, ms: int) -> None:
        """Set the simulated execution time per attempt (only while stopped)."""
        ms = _validate_processing_delay(ms)
        self._require_stopped("processing delay")
        self.state.processing_delay_ms = ms

    def set_failure_rate(self, percent: float) -> None:
        """Set the simulated failure probability in percent (only while stopped)."""
        percent = _validate_failure_rate(percent)
        self._require_stopped("failure rate")
        self.state.failure_rate = percent

    def clear_notifications(self) -> None:
        self.notifications.clear()

    def reset(self) -> None:
        """Drop every task, queue entry and notification, and stop the worker."""
        self.state.running = False
        self.state.epoch += 1
        self.store.clear()
        self.queue.clear()
        self.notifications.clear()
        self.notifications.append(NotificationType.INFO, "System reset complete")

    def _require_stopped(self, what: str) -> None:
        if self.state.running:
            raise PreconditionFailed(f"Cannot change {what} while the worker is running; stop it first")

    # ---- read API ----

    def get_task(self, task_id: UUID) -> TaskInfo:
        return TaskInfo.model_validate(self.store.get_task(task_id))

    def get_snapshot(self) -> Snapshot:
        """Read-only view of tasks, queue, notifications and stats."""
        tasks = [TaskInfo.model_validate(t) for t in self.store.list_tasks()]
        queue = self.queue.ids()
        return Snapshot(
            tasks=tasks,
            queue=queue,
            queue_depth=len(queue),
            notifications=self.notifications.list(),
            stats=self._stats(self.store.count_by_status()),
            running=self.state.running,
            processing_delay_ms=self.state.processing_delay_ms,
            failure_rate=self.state.failure_rate,
        )

    @staticmethod
    def _stats(counts: dict[TaskStatus, int]) -> TaskStats:
        return TaskStats(
            pending=counts[TaskStatus.PENDING],
            processing=counts[TaskStatus.PROCESSING],
            completed=counts[TaskStatus.COMPLETED],
            failed=counts[TaskStatus.FAILED],
        )

    @property
    def worker_alive(self) -> bool:
        """True while the worker loop task exists and has not finished."""
        return self._worker_task is not None and not self._worker_task.done()

    def is_idle(self) -> bool:
        """True when nothing is queued and no attempt is in flight."""
        counts = self.store.count_by_status()
        return self.queue.peek_depth() == 0 and counts[TaskStatus.PROCESSING] == 0

    # ---- worker lifecycle ----

    async def start(self) -> None:
        """Launch the worker loop on the running event loop (idempotent)."""
        if self.worker_alive:
            return
        self._worker_task = asyncio.create_task(self.worker.run())

    async def shutdown(self) -> None:
        """Stop the worker loop, waiting for an attempt in flight to finish."""
        if self._worker_task is not None:
            if not self._worker_task.done():
                self.worker.shutdown()
            await asyncio.gather(self._worker_task, return_exceptions=True)
            self._worker_task = None
        logger.info("Scheduler shutdown complete")

    async def wait_for_idle(self, timeout: float, poll_interval_seconds: float = 0.01) -> bool:
        """
        Wait until the queue is drained and no task is processing.

        Returns False if the timeout elapsed first.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self.is_idle():
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(poll_interval_seconds)
        return True
