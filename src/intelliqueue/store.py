"""Task store: canonical record of every submitted task."""

import logging
import threading
from typing import Optional
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlmodel import Session, delete, func, select

from .db import ALLOWED_TRANSITIONS, Task, TaskStatus, create_memory_engine, init_database, utcnow
from .exceptions import InvalidTransition, TaskNotFound

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Task records keyed by id, backed by an in-memory SQLite database.

    Every method opens its own session under a re-entrant lock, so submitters
    on other threads can insert while the worker reads and updates. Returned
    Task objects are detached copies; mutate through the store methods.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or create_memory_engine()
        init_database(self.engine)
        self._lock = threading.RLock()

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def create_task(self, task_type: str, payload: str) -> UUID:
        """Insert a PENDING task and return its id."""
        now = utcnow()
        task = Task(
            task_type=task_type,
            payload=payload,
            status=TaskStatus.PENDING,
            retry_count=0,
            created_at=now,
            updated_at=now,
        )
        with self._lock, self._session() as session:
            session.add(task)
            session.commit()
            task_id = task.id

        logger.debug(f"Task created id={task_id} type={task_type}")
        return task_id

    def get_task(self, task_id: UUID) -> Task:
        """Get task by ID."""
        with self._lock, self._session() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFound(f"Task {task_id} not found")
            return task

    def list_tasks(self) -> list[Task]:
        """All tasks in creation order."""
        with self._lock, self._session() as session:
            statement = select(Task).order_by(Task.created_at)
            return list(session.exec(statement).all())

    def set_status(self, task_id: UUID, status: TaskStatus) -> Task:
        """
        Move a task to a new status.

        completed_at is stamped the first time the task reaches a terminal
        status. Raises TaskNotFound for unknown ids and InvalidTransition for
        changes the lifecycle does not allow.
        """
        with self._lock, self._session() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFound(f"Task {task_id} not found")
            if status not in ALLOWED_TRANSITIONS[task.status]:
                raise InvalidTransition(f"Task {task_id} cannot move from {task.status.value} to {status.value}")

            now = utcnow()
            task.status = status
            task.updated_at = now
            if status.is_terminal and task.completed_at is None:
                task.completed_at = now
            session.add(task)
            session.commit()

        logger.debug(f"Task {task_id} -> {status.value}")
        return task

    def increment_retry(self, task_id: UUID) -> int:
        """Count one more failed attempt and return the new retry count."""
        with self._lock, self._session() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFound(f"Task {task_id} not found")
            if task.status.is_terminal:
                raise InvalidTransition(f"Task {task_id} is {task.status.value}; retry count is frozen")

            task.retry_count += 1
            task.updated_at = utcnow()
            session.add(task)
            session.commit()
            return task.retry_count

    def count_by_status(self) -> dict[TaskStatus, int]:
        """Number of tasks per status (every status present, zero if unused)."""
        counts = {status: 0 for status in TaskStatus}
        with self._lock, self._session() as session:
            statement = select(Task.status, func.count()).group_by(Task.status)
            for status, n in session.exec(statement).all():
                counts[TaskStatus(status)] = int(n)
        return counts

    def clear(self) -> None:
        """Delete every task."""
        with self._lock, self._session() as session:
            session.execute(delete(Task))
            session.commit()
        logger.debug("Task store cleared")

    def __len__(self) -> int:
        with self._lock, self._session() as session:
            return int(session.exec(select(func.count()).select_from(Task)).one())
