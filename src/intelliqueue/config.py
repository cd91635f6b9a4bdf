"""Configuration for intelliqueue."""

from dataclasses import dataclass, field

DEFAULT_TASK_TYPES: tuple[str, ...] = ("EMAIL", "REPORT", "BACKUP", "NOTIFICATION", "SYNC")

TASK_DESCRIPTIONS: dict[str, str] = {
    "EMAIL": "Send email notification",
    "REPORT": "Generate data report",
    "BACKUP": "Create data backup",
    "NOTIFICATION": "Push notification",
    "SYNC": "Synchronize data",
}


@dataclass
class Config:
    """IntelliQueue configuration."""

    processing_delay_ms: int = 2000
    """Simulated execution time of one attempt (milliseconds)."""

    failure_rate: float = 30
    """Probability, in percent, that a simulated attempt fails."""

    poll_interval_seconds: float = 0.5
    """How long the worker idles when stopped or when the queue is empty."""

    dispatch_interval_seconds: float = 0.3
    """Pause after each dispatched attempt before looking at the queue again."""

    task_types: tuple[str, ...] = field(default_factory=lambda: DEFAULT_TASK_TYPES)
    """Closed set of task types accepted by submit()."""

    notification_capacity: int = 100
    """Number of most recent notifications kept in the log."""
