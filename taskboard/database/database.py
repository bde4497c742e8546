"""
Database connection for the Taskboard API
Builds the engine from settings and hands out per-request stores
"""
from typing import Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ..config import settings
from ..storage import MemoryStore, SqlStore, Store


def _build_engine(url: str):
    connect_args = {}
    kwargs = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        # In-memory SQLite lives on a single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, echo=settings.sql_echo, connect_args=connect_args, **kwargs)


engine = _build_engine(settings.database_url)

# Shared by every request when STORAGE_BACKEND=memory
memory_store = MemoryStore()


def create_db_and_tables() -> None:
    # Import models so their tables are registered on the metadata
    from .. import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_store() -> Iterator[Store]:
    """Yield the store for one request, per the configured backend."""
    if settings.storage_backend == "memory":
        yield memory_store
        return
    with Session(engine) as session:
        yield SqlStore(session)
