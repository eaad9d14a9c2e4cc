"""
Connection pools for PostgreSQL, one per database role.

Reads go through the ``read`` role (SELECT only); mutations go through the
``write`` role. Uses psycopg2 connection pooling for thread safety.

Usage:
    from keyvault.db import get_connection

    with get_connection("read") as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

import psycopg2
import psycopg2.pool

from keyvault.config import get_config

logger = logging.getLogger(__name__)

_ENV_PREFIX = {"read": "SECRETS_READ", "write": "SECRETS_WRITE", "admin": "POSTGRES"}

_pools: dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
_pool_lock = threading.Lock()


def get_pool(role: str = "read", minconn: int = 1, maxconn: int = 5) -> psycopg2.pool.ThreadedConnectionPool:
    """Get or create the connection pool for ``role``."""
    pool = _pools.get(role)
    if pool is not None and not pool.closed:
        return pool

    with _pool_lock:
        pool = _pools.get(role)
        if pool is not None and not pool.closed:
            return pool

        cfg = get_config().db(role)
        logger.info(
            "Creating %s connection pool: %s@%s:%s/%s (min=%d, max=%d)",
            role,
            cfg.user,
            cfg.host,
            cfg.port,
            cfg.name,
            minconn,
            maxconn,
        )
        try:
            pool = psycopg2.pool.ThreadedConnectionPool(
                minconn=minconn,
                maxconn=maxconn,
                connect_timeout=5,
                **cfg.dict,
            )
        except psycopg2.OperationalError as e:
            env_prefix = _ENV_PREFIX.get(role, "POSTGRES")
            raise ConnectionError(
                f"Cannot connect to PostgreSQL at {cfg.host}:{cfg.port}/{cfg.name} as {role} role: {e}\n"
                f"Check PG_HOST, POSTGRES_DB and {env_prefix}_* environment variables."
            ) from e
        _pools[role] = pool
        return pool


@contextmanager
def get_connection(role: str = "read") -> Generator[psycopg2.extensions.connection, None, None]:
    """Borrow a connection from the ``role`` pool.

    The transaction is committed on clean exit and rolled back on exception;
    the connection always goes back to the pool.
    """
    pool = get_pool(role)
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


def close_pools() -> None:
    """Close all connections in every pool."""
    with _pool_lock:
        for pool in _pools.values():
            pool.closeall()
        _pools.clear()
