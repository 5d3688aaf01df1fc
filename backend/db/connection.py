"""
db/connection.py
-----------------
Process-wide psycopg2 connection pool for the travel-plan tables.

Usage:
    from db.connection import get_conn

    with get_conn() as conn:
        tour_repo.replace_travel_plan(conn, tour_id, payload)

get_conn() commits when the block exits cleanly and rolls back when it
raises, so a failed travel-plan save never leaves a half-written row.

Environment variables (set in config.py):
    POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB
    POSTGRES_USER / POSTGRES_PASSWORD
    POSTGRES_MIN_CONN / POSTGRES_MAX_CONN
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import psycopg2
import psycopg2.pool

import config

_APPLICATION_NAME = "tour-travel-planner"

# Created lazily; plan saves run in worker threads so the pool must be threaded.
_pool: psycopg2.pool.ThreadedConnectionPool | None = None


def get_pool() -> psycopg2.pool.ThreadedConnectionPool:
    global _pool
    if _pool is None or _pool.closed:
        _pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=config.POSTGRES_MIN_CONN,
            maxconn=config.POSTGRES_MAX_CONN,
            host=config.POSTGRES_HOST,
            port=config.POSTGRES_PORT,
            dbname=config.POSTGRES_DB,
            user=config.POSTGRES_USER,
            password=config.POSTGRES_PASSWORD,
            application_name=_APPLICATION_NAME,
        )
    return _pool


@contextmanager
def get_conn() -> Iterator[psycopg2.extensions.connection]:
    """Borrow a pooled connection for one unit of work."""
    pool = get_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


def close_pool() -> None:
    """Close every pooled connection (application shutdown)."""
    global _pool
    if _pool is not None and not _pool.closed:
        _pool.closeall()
    _pool = None
