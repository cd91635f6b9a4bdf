"""IntelliQueue simulate and task-types commands."""

import asyncio
import logging
import random
from typing import Optional

import click

from intelliqueue import TASK_DESCRIPTIONS, Config, IntelliQueueError, NotificationType, TaskScheduler
from intelliqueue.config import DEFAULT_TASK_TYPES

from .main import resolve_setting, load_config_file, main

logger = logging.getLogger("intelliqueue")

QUICK_PAYLOADS = [
    "user@example.com",
    "Monthly sales report",
    "Database snapshot",
    "New order #12345",
    "Sync user profiles",
]

_COLORS = {
    NotificationType.INFO: "blue",
    NotificationType.SUCCESS: "green",
    NotificationType.WARNING: "yellow",
    NotificationType.ERROR: "red",
}


def build_config(
    config_data: dict,
    delay_ms: Optional[int] = None,
    failure_rate: Optional[float] = None,
) -> Config:
    """Build Config from CLI flags and a loaded config file."""
    defaults = Config()
    try:
        return Config(
            processing_delay_ms=int(
                resolve_setting(delay_ms, config_data, "worker.processing_delay_ms", defaults.processing_delay_ms)
            ),
            failure_rate=float(
                resolve_setting(failure_rate, config_data, "worker.failure_rate", defaults.failure_rate)
            ),
            poll_interval_seconds=float(
                resolve_setting(None, config_data, "worker.poll_interval_seconds", defaults.poll_interval_seconds)
            ),
            dispatch_interval_seconds=float(
                resolve_setting(
                    None, config_data, "worker.dispatch_interval_seconds", defaults.dispatch_interval_seconds
                )
            ),
            task_types=tuple(resolve_setting(None, config_data, "tasks.types", DEFAULT_TASK_TYPES)),
            notification_capacity=int(
                resolve_setting(None, config_data, "notifications.capacity", defaults.notification_capacity)
            ),
        )
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")


def parse_task_spec(spec: str) -> tuple[str, str]:
    """Split TYPE=PAYLOAD."""
    if "=" not in spec:
        raise click.ClickException(f"Invalid task format: {spec}. Use TYPE=PAYLOAD")
    task_type, payload = spec.split("=", 1)
    return task_type.strip().upper(), payload


@main.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to intelliqueue.yaml config file",
    metavar="PATH",
)
@click.option(
    "--task",
    "task_specs",
    multiple=True,
    help="Task to submit as TYPE=PAYLOAD (can be used multiple times)",
    metavar="TYPE=PAYLOAD",
)
@click.option(
    "--quick",
    type=int,
    default=0,
    help="Also submit N tasks with a random type and payload",
    metavar="N",
)
@click.option(
    "--delay-ms",
    type=int,
    default=None,
    help="Simulated processing time per attempt",
    metavar="MS",
)
@click.option(
    "--failure-rate",
    type=float,
    default=None,
    help="Simulated failure probability in percent",
    metavar="PERCENT",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the simulated outcomes",
    metavar="N",
)
@click.option(
    "--timeout",
    type=float,
    default=60.0,
    help="Give up waiting for the queue to drain after this many seconds",
    metavar="SECONDS",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default="WARNING",
    help="Logging level",
)
def simulate(
    config: Optional[str],
    task_specs: tuple[str, ...],
    quick: int,
    delay_ms: Optional[int],
    failure_rate: Optional[float],
    seed: Optional[int],
    timeout: float,
    log_level: str,
) -> None:
    """Submit tasks, run the worker until the queue drains, and print the log.

    Examples:
        intelliqueue simulate --task EMAIL=user@example.com --failure-rate 0
        intelliqueue simulate --quick 5 --delay-ms 200 --seed 7
    """
    logging.getLogger("intelliqueue").setLevel(log_level)

    config_data: dict = {}
    if config:
        config_data = load_config_file(config)
        logger.info(f"Loaded config from {config}")

    cfg = build_config(config_data, delay_ms=delay_ms, failure_rate=failure_rate)
    rng = random.Random(seed)

    submissions = [parse_task_spec(spec) for spec in task_specs]
    for _ in range(quick):
        submissions.append((rng.choice(list(cfg.task_types)), rng.choice(QUICK_PAYLOADS)))
    if not submissions:
        raise click.ClickException("Nothing to simulate. Use --task TYPE=PAYLOAD or --quick N.")

    try:
        scheduler = TaskScheduler(cfg, rng=rng)
        for task_type, payload in submissions:
            scheduler.submit(task_type, payload)
    except IntelliQueueError as e:
        raise click.ClickException(str(e))

    drained = asyncio.run(_run_simulation(scheduler, timeout))

    snapshot = scheduler.get_snapshot()
    for entry in reversed(snapshot.notifications):
        click.secho(
            f"{entry.timestamp:%H:%M:%S} {entry.type.value:<7} {entry.message}",
            fg=_COLORS[entry.type],
        )

    stats = snapshot.stats
    click.echo("")
    click.echo(
        f"pending={stats.pending} processing={stats.processing} "
        f"completed={stats.completed} failed={stats.failed} total={stats.total}"
    )
    if not drained:
        raise click.ClickException(f"Queue did not drain within {timeout}s")


async def _run_simulation(scheduler: TaskScheduler, timeout: float) -> bool:
    """Run the worker until idle or timeout."""
    await scheduler.start()
    scheduler.set_running(True)
    try:
        return await scheduler.wait_for_idle(timeout)
    finally:
        scheduler.set_running(False)
        await scheduler.shutdown()


@main.command("task-types")
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to intelliqueue.yaml config file",
    metavar="PATH",
)
def task_types_cmd(config: Optional[str]) -> None:
    """List the task types accepted by submit."""
    config_data: dict = {}
    if config:
        config_data = load_config_file(config)

    cfg = build_config(config_data)
    for task_type in cfg.task_types:
        description = TASK_DESCRIPTIONS.get(task_type, "")
        click.echo(f"{task_type:<14}{description}".rstrip())
