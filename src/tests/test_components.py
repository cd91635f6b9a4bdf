"""Tests for the queue, notification log and retry policy."""

from uuid import uuid4

import pytest

from intelliqueue import (
    MAX_RETRY_COUNT,
    DuplicateEntry,
    InvalidArgument,
    NotificationLog,
    NotificationType,
    RetryDecision,
    decide,
)


class TestTaskQueue:
    @pytest.mark.unit
    def test_fifo_order(self, queue):
        ids = [uuid4() for _ in range(5)]
        for task_id in ids:
            queue.enqueue(task_id)

        assert queue.peek_depth() == 5
        assert queue.ids() == ids
        assert [queue.dequeue_front() for _ in ids] == ids
        assert queue.peek_depth() == 0

    @pytest.mark.unit
    def test_dequeue_empty(self, queue):
        assert queue.dequeue_front() is None

    @pytest.mark.unit
    def test_duplicate_rejected(self, queue):
        task_id = uuid4()
        queue.enqueue(task_id)

        with pytest.raises(DuplicateEntry):
            queue.enqueue(task_id)
        assert len(queue) == 1

    @pytest.mark.unit
    def test_requeue_goes_to_tail(self, queue):
        a, b, c = uuid4(), uuid4(), uuid4()
        queue.enqueue(a)
        queue.enqueue(b)

        head = queue.dequeue_front()
        queue.enqueue(c)
        queue.enqueue(head)

        assert queue.ids() == [b, c, a]
        assert a in queue

    @pytest.mark.unit
    def test_clear(self, queue):
        task_id = uuid4()
        queue.enqueue(task_id)
        queue.clear()

        assert queue.peek_depth() == 0
        queue.enqueue(task_id)


class TestNotificationLog:
    @pytest.mark.unit
    def test_append_and_list_most_recent_first(self, notifications):
        first = notifications.append(NotificationType.INFO, "one")
        second = notifications.append(NotificationType.SUCCESS, "two")

        entries = notifications.list()
        assert entries == [second, first]
        assert first.id != second.id
        assert second.type == NotificationType.SUCCESS
        assert second.message == "two"

    @pytest.mark.unit
    def test_capacity_evicts_oldest(self, notifications):
        entries = [notifications.append(NotificationType.INFO, f"n{i}") for i in range(101)]

        listed = notifications.list()
        assert len(listed) == 100
        assert entries[0] not in listed
        assert listed[0] == entries[-1]
        assert listed[-1] == entries[1]

    @pytest.mark.unit
    def test_custom_capacity(self):
        log = NotificationLog(capacity=3)
        for i in range(5):
            log.append(NotificationType.INFO, str(i))

        assert [n.message for n in log.list()] == ["4", "3", "2"]

    @pytest.mark.unit
    def test_invalid_capacity(self):
        with pytest.raises(InvalidArgument, match="capacity"):
            NotificationLog(capacity=0)

    @pytest.mark.unit
    def test_clear(self, notifications):
        notifications.append(NotificationType.ERROR, "boom")
        notifications.clear()
        assert notifications.list() == []

    @pytest.mark.unit
    def test_subscribe(self, notifications):
        received = []
        unsubscribe = notifications.subscribe(received.append)

        entry = notifications.append(NotificationType.WARNING, "careful")
        unsubscribe()
        notifications.append(NotificationType.INFO, "unseen")

        assert received == [entry]

    @pytest.mark.unit
    def test_failing_subscriber_does_not_break_append(self, notifications):
        def broken(entry):
            raise RuntimeError("subscriber bug")

        notifications.subscribe(broken)
        entry = notifications.append(NotificationType.INFO, "still stored")

        assert notifications.list() == [entry]

    @pytest.mark.unit
    def test_entries_are_frozen(self, notifications):
        entry = notifications.append(NotificationType.INFO, "fixed")
        with pytest.raises(Exception):
            entry.message = "changed"


class TestRetryPolicy:
    @pytest.mark.unit
    def test_max_retry_count(self):
        assert MAX_RETRY_COUNT == 3

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "retry_count,expected",
        [
            (1, RetryDecision.RETRY),
            (2, RetryDecision.RETRY),
            (3, RetryDecision.FAIL),
            (4, RetryDecision.FAIL),
        ],
    )
    def test_decide(self, retry_count, expected):
        assert decide(retry_count) == expected

    @pytest.mark.unit
    def test_custom_max(self):
        assert decide(1, max_retries=1) == RetryDecision.FAIL
        assert decide(4, max_retries=5) == RetryDecision.RETRY
