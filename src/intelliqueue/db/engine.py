"""Engine creation for the in-memory task store.

Each scheduler gets its own private SQLite database that lives only as long
as the engine. StaticPool keeps the single in-memory connection alive across
sessions; the store serializes access to it.
"""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from .models import Task


def create_memory_engine() -> Engine:
    """Create an engine bound to a fresh in-memory SQLite database."""
    return create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def init_database(engine: Engine) -> None:
    """Create the tasks table if it doesn't exist."""
    Task.metadata.create_all(engine)
