"""Task worker implementation."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

from .db import TaskStatus
from .exceptions import IntelliQueueError
from .notifications import NotificationLog, NotificationType
from .queue import TaskQueue
from .retry import MAX_RETRY_COUNT, RetryDecision, decide
from .store import TaskStore

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with random.Random's random() -> float in [0, 1)."""

    def random(self) -> float: ...


@dataclass
class WorkerState:
    """Control block shared by the scheduler (writer) and the worker (reader)."""

    running: bool = False
    processing_delay_ms: int = 2000
    failure_rate: float = 30
    epoch: int = 0
    """Bumped on reset so an attempt in flight knows its task is gone."""


def short_id(task_id: UUID) -> str:
    """Last 8 characters of the id, used in notification messages."""
    return str(task_id)[-8:]


class TaskWorker:
    """
    Single logical worker that pulls task ids from the queue one at a time.

    Example:
        worker = TaskWorker(store, queue, notifications, WorkerState(running=True))
        await worker.run()
    """

    def __init__(
        self,
        store: TaskStore,
        queue: TaskQueue,
        notifications: NotificationLog,
        state: WorkerState,
        *,
        rng: Optional[RandomSource] = None,
        poll_interval_seconds: float = 0.5,
        dispatch_interval_seconds: float = 0.3,
        max_retries: int = MAX_RETRY_COUNT,
    ):
        """
        Initialize worker.

        Args:
            store: Task store holding the records
            queue: Queue of ids awaiting dispatch
            notifications: Log receiving one entry per lifecycle transition
            state: Running flag and simulation settings, read before each step
            rng: Random source for simulated outcomes (random.Random() if None)
            poll_interval_seconds: Idle wait when stopped or the queue is empty
            dispatch_interval_seconds: Pause after each dispatched attempt
            max_retries: Failed attempts allowed before a task is FAILED
        """
        self.store = store
        self.queue = queue
        self.notifications = notifications
        self.state = state
        self.rng: RandomSource = rng or random.Random()
        self.poll_interval_seconds = poll_interval_seconds
        self.dispatch_interval_seconds = dispatch_interval_seconds
        self.max_retries = max_retries

        self._shutdown: bool = False
        self._current: Optional[UUID] = None

    @property
    def current_task_id(self) -> Optional[UUID]:
        """Id of the task whose attempt is in flight, if any."""
        return self._current

    async def run(self) -> None:
        """Run the worker loop (blocks until shutdown)."""
        logger.info("Starting TaskWorker")

        try:
            while not self._shutdown:
                if not self.state.running:
                    await asyncio.sleep(self.poll_interval_seconds)
                    continue

                dispatched = await self.run_once()
                if not dispatched:
                    await asyncio.sleep(self.poll_interval_seconds)
                elif self.dispatch_interval_seconds > 0:
                    await asyncio.sleep(self.dispatch_interval_seconds)
        finally:
            self._shutdown = False
            logger.info("TaskWorker stopped")

    async def run_once(self) -> bool:
        """
        Dispatch the task at the head of the queue.

        Returns False when the queue was empty, True otherwise (including when
        the entry had to be skipped). Errors from a single entry are logged and
        recorded as ERROR notifications instead of being raised.
        """
        task_id = self.queue.dequeue_front()
        if task_id is None:
            return False

        try:
            await self._process(task_id)
        except IntelliQueueError as e:
            logger.error(f"Skipping queue entry {task_id}: {e}")
            self.notifications.append(NotificationType.ERROR, f"Skipped task {short_id(task_id)}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error processing task {task_id}")
            self.notifications.append(
                NotificationType.ERROR,
                f"Worker error on task {short_id(task_id)}: {e.__class__.__name__}: {e}",
            )
        finally:
            self._current = None
        return True

    async def _process(self, task_id: UUID) -> None:
        """Execute one attempt of a task."""
        task = self.store.get_task(task_id)
        if task.status != TaskStatus.PENDING:
            logger.warning(f"Discarding queue entry {task_id}: task is {task.status.value}, expected PENDING")
            return

        sid = short_id(task_id)
        # Settings are fixed for the whole attempt, whatever changes during the delay.
        epoch = self.state.epoch
        delay_ms = self.state.processing_delay_ms
        failure_rate = self.state.failure_rate
        self._current = task_id

        self.store.set_status(task_id, TaskStatus.PROCESSING)
        self.notifications.append(
            NotificationType.INFO,
            f"Worker picked task {sid} ({task.task_type}) - Processing...",
        )

        await asyncio.sleep(delay_ms / 1000)

        if epoch != self.state.epoch:
            logger.info(f"Dropping attempt for task {task_id}: scheduler was reset during execution")
            return

        if self._simulate_execution(failure_rate):
            self.store.set_status(task_id, TaskStatus.COMPLETED)
            self.notifications.append(
                NotificationType.SUCCESS,
                f'Task {sid} completed successfully! Payload: "{task.payload}"',
            )
            return

        retry_count = self.store.increment_retry(task_id)
        if decide(retry_count, self.max_retries) == RetryDecision.RETRY:
            self.store.set_status(task_id, TaskStatus.PENDING)
            self.queue.enqueue(task_id)
            self.notifications.append(
                NotificationType.WARNING,
                f"Task {sid} failed. Retry {retry_count}/{self.max_retries} - Re-queuing...",
            )
        else:
            self.store.set_status(task_id, TaskStatus.FAILED)
            self.notifications.append(
                NotificationType.ERROR,
                f'Task {sid} FAILED after {self.max_retries} retries. Payload: "{task.payload}"',
            )

    def _simulate_execution(self, failure_rate: float) -> bool:
        """Draw in [0, 100); the attempt succeeds unless the draw falls below failure_rate."""
        return self.rng.random() * 100 >= failure_rate

    def shutdown(self) -> None:
        """Ask the loop to exit; an attempt in flight finishes first."""
        self._shutdown = True
