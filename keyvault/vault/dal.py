"""
Vault DAL — CRUD operations on the secrets table.

Reads use the ``read`` role, mutations the ``write`` role. SQL lives in
``keyvault/db/queries.yaml``. Values are JSONB; psycopg2 decodes them back
into Python objects on read.
"""

from __future__ import annotations

import logging
from typing import Any

from psycopg2.extras import Json, RealDictCursor

from keyvault.db.connection import get_connection
from keyvault.db.queries import get_query
from keyvault.query.record import SecretRecord

logger = logging.getLogger(__name__)


def escape_like(text: str) -> str:
    """Escape ``%``, ``_`` and backslash for a LIKE/ILIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_secret(project_key: str, secret_key: str) -> Any | None:
    """Return the stored JSON value, or None if there is no such secret."""
    with get_connection("read") as conn:
        with conn.cursor() as cur:
            cur.execute(
                get_query("get_secret"),
                {"project_key": project_key, "secret_key": secret_key},
            )
            row = cur.fetchone()
            return row[0] if row else None


def upsert_secret(project_key: str, secret_key: str, value: Any) -> None:
    """Insert or replace the value stored under ``(project_key, secret_key)``."""
    with get_connection("write") as conn:
        with conn.cursor() as cur:
            cur.execute(
                get_query("upsert_secret"),
                {
                    "project_key": project_key,
                    "secret_key": secret_key,
                    "secret_value": Json(value),
                },
            )
    logger.debug("Upserted secret %s/%s", project_key, secret_key)


def delete_secret(project_key: str, secret_key: str) -> bool:
    """Delete a secret. Returns True if a row was deleted."""
    with get_connection("write") as conn:
        with conn.cursor() as cur:
            cur.execute(
                get_query("delete_secret"),
                {"project_key": project_key, "secret_key": secret_key},
            )
            deleted = cur.rowcount > 0
    logger.debug("Delete secret %s/%s: %s", project_key, secret_key, "deleted" if deleted else "absent")
    return deleted


def fetch_candidates(project_key: str, key_contains: str | None = None) -> list[SecretRecord]:
    """Fetch every secret in a project, optionally only keys containing ``key_contains``."""
    key_pattern = f"%{escape_like(key_contains)}%" if key_contains else None
    with get_connection("read") as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(
                get_query("search_secrets"),
                {"project_key": project_key, "key_pattern": key_pattern},
            )
            return [SecretRecord.from_row(r) for r in cur.fetchall()]


def check_health() -> dict:
    """Ping the database through the read role."""
    try:
        with get_connection("read") as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
        return {"status": "ok"}
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        return {"status": "error", "error": str(e)}
