"""Pytest configuration and fixtures."""

import pytest

from intelliqueue import Config, NotificationLog, TaskQueue, TaskScheduler, TaskStore, TaskWorker, WorkerState

from fakes import SUCCEED, ScriptedRandom


@pytest.fixture
def config():
    """Config with no artificial delays."""
    return Config(
        processing_delay_ms=0,
        failure_rate=50,
        poll_interval_seconds=0.01,
        dispatch_interval_seconds=0,
    )


@pytest.fixture
def scheduler(config):
    return TaskScheduler(config, rng=ScriptedRandom(SUCCEED))


@pytest.fixture
def store():
    return TaskStore()


@pytest.fixture
def queue():
    return TaskQueue()


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def make_worker(store, queue, notifications):
    """Build a worker over the shared store/queue/log with scripted outcomes."""

    def factory(*outcomes: float, failure_rate: float = 50, delay_ms: int = 0) -> TaskWorker:
        state = WorkerState(running=True, processing_delay_ms=delay_ms, failure_rate=failure_rate)
        return TaskWorker(
            store,
            queue,
            notifications,
            state,
            rng=ScriptedRandom(*outcomes),
            poll_interval_seconds=0.01,
            dispatch_interval_seconds=0,
        )

    return factory
