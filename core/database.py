"""
core/database.py -- SQLAlchemy engine factory shared by the auth and shipment stores.

Both repositories accept a database URL rather than a live connection so the
backend can be swapped (SQLite file, PostgreSQL) without touching handler
code. This module owns the SQLite-specific connection details:

  In-memory URLs ("sqlite://", "sqlite:///:memory:") use StaticPool so every
  thread in FastAPI's worker pool sees the same single connection -- and
  therefore the same tables. A normal pool would hand each thread a fresh,
  empty database.

  File-backed SQLite gets WAL journal mode for concurrent read safety.

Layer rule: core/ is the kernel. No imports from api/, auth/, or shipments/.
"""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode. Set per-connection because SQLite PRAGMAs are
    not inherited by new connections from the pool."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def is_memory_url(db_url: str) -> bool:
    return db_url in _MEMORY_URLS or "mode=memory" in db_url


def make_engine(db_url: str) -> Engine:
    """Build an Engine configured for the given URL."""
    if not db_url.startswith("sqlite"):
        return create_engine(db_url)

    # FastAPI runs sync routes on a threadpool; the connection may be used
    # from a different thread than the one that created it.
    connect_args = {"check_same_thread": False}
    if db_url in _MEMORY_URLS:
        return create_engine(db_url, connect_args=connect_args, poolclass=StaticPool)

    engine = create_engine(db_url, connect_args=connect_args)
    if not is_memory_url(db_url):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
