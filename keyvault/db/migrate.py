"""
Migration runner for ``keyvault/db/migrations/*.sql``.

Each file ``NNN_name.sql`` is one version. Applied versions are recorded in
``schema_migrations`` with the SHA-256 of the file, so an edited migration
shows up as DRIFT in ``keyvault migrate --status``.

Migrations run as the admin role (POSTGRES_USER / POSTGRES_PASSWORD): the
reader and writer roles cannot create tables or grant privileges.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import NamedTuple

from keyvault.db.connection import get_connection

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# 001_name.sql, 015b_name.sql, ...
_MIGRATION_RE = re.compile(r"^(\d+[a-z]?)_.+\.sql$")

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version     TEXT PRIMARY KEY,
        filename    TEXT NOT NULL,
        applied_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        checksum    TEXT
    )
"""

_RECORD = (
    "INSERT INTO schema_migrations (version, filename, checksum) VALUES (%s, %s, %s) "
    "ON CONFLICT (version) DO NOTHING"
)


class Migration(NamedTuple):
    version: str
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    def checksum(self) -> str:
        return hashlib.sha256(self.path.read_bytes()).hexdigest()


def discover(migrations_dir: Path | None = None) -> list[Migration]:
    """Migration files in version order. Files not named ``NNN_*.sql`` are ignored."""
    found = []
    for path in sorted((migrations_dir or MIGRATIONS_DIR).glob("*.sql")):
        m = _MIGRATION_RE.match(path.name)
        if m:
            found.append(Migration(m.group(1), path))
    return found


def _applied(conn) -> dict[str, tuple]:
    """Create the bookkeeping table if needed; return ``{version: (applied_at, checksum)}``."""
    with conn.cursor() as cur:
        cur.execute(_CREATE_TABLE)
        cur.execute("SELECT version, applied_at, checksum FROM schema_migrations")
        return {version: (applied_at, checksum) for version, applied_at, checksum in cur.fetchall()}


def status(migrations_dir: Path | None = None) -> list[dict]:
    """One row per migration file: version, filename, status, applied_at.

    ``status`` is "applied", "pending" or "DRIFT" (applied, but the file has
    changed since).
    """
    with get_connection("admin") as conn:
        applied = _applied(conn)

    rows = []
    for mig in discover(migrations_dir):
        applied_at, checksum = applied.get(mig.version, (None, None))
        if applied_at is None:
            state = "pending"
        elif checksum and checksum != mig.checksum():
            state = "DRIFT"
        else:
            state = "applied"
        rows.append({
            "version": mig.version,
            "filename": mig.filename,
            "status": state,
            "applied_at": applied_at,
        })
    return rows


def apply(
    version: str | None = None,
    dry_run: bool = False,
    migrations_dir: Path | None = None,
) -> list[Migration]:
    """Apply pending migrations, or only ``version``. Returns what was (or would be) applied.

    Each migration commits on its own, so a failure leaves earlier ones in
    place and re-raises.
    """
    with get_connection("admin") as conn:
        applied = _applied(conn)
        conn.commit()

        todo = [
            mig
            for mig in discover(migrations_dir)
            if mig.version not in applied and version in (None, mig.version)
        ]
        if dry_run:
            return todo

        for mig in todo:
            try:
                with conn.cursor() as cur:
                    cur.execute(mig.path.read_text(encoding="utf-8"))
                    cur.execute(_RECORD, (mig.version, mig.filename, mig.checksum()))
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error("Migration %s failed: %s", mig.filename, e)
                raise
            logger.info("Applied migration %s", mig.filename)
        return todo


def format_status(rows: list[dict]) -> str:
    if not rows:
        return "No migration files found."
    lines = [f"{'Version':<10} {'Filename':<30} {'Status':<10} Applied At", "-" * 72]
    for r in rows:
        at = str(r["applied_at"])[:19] if r["applied_at"] else ""
        lines.append(f"{r['version']:<10} {r['filename']:<30} {r['status']:<10} {at}")
    return "\n".join(lines)
