"""Custom exceptions for intelliqueue."""


class IntelliQueueError(Exception):
    """Base exception for intelliqueue."""


class TaskValidationError(IntelliQueueError):
    """Caller-supplied input was rejected."""


class InvalidTaskType(TaskValidationError):
    """Task type is not one of the configured task types."""


class EmptyPayload(TaskValidationError):
    """Task payload is empty or blank."""


class InvalidArgument(TaskValidationError):
    """Configuration value outside its documented bounds."""


class PreconditionFailed(IntelliQueueError):
    """Operation not allowed in the current worker state."""


class InvariantViolation(IntelliQueueError):
    """Task store and queue are out of sync."""


class TaskNotFound(InvariantViolation):
    """Task not found in the store."""


class DuplicateEntry(InvariantViolation):
    """Task id is already waiting in the queue."""


class InvalidTransition(InvariantViolation):
    """Status change not allowed by the task lifecycle."""
