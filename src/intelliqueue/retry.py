"""Retry policy for failed attempts."""

from enum import Enum

MAX_RETRY_COUNT = 3


class RetryDecision(str, Enum):
    RETRY = "RETRY"
    FAIL = "FAIL"


def decide(retry_count: int, max_retries: int = MAX_RETRY_COUNT) -> RetryDecision:
    """
    Decide what happens to a task after a failed attempt.

    Args:
        retry_count: Retry count after it was incremented for this failure
        max_retries: Failed attempts allowed before the task is given up

    Returns:
        RETRY while fewer than max_retries attempts have failed, FAIL otherwise
    """
    if retry_count < max_retries:
        return RetryDecision.RETRY
    return RetryDecision.FAIL
