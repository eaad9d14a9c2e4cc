"""API dependencies — master-key checks and project scoping."""

from __future__ import annotations

import logging
import secrets

from fastapi import Header, HTTPException

from keyvault.config import get_config

logger = logging.getLogger(__name__)


def _matches(candidate: str | None, expected: str) -> bool:
    if not candidate or not expected:
        return False
    return secrets.compare_digest(candidate.encode(), expected.encode())


def require_read(x_api_key: str | None = Header(None)) -> None:
    """Allow the read key or the write key."""
    auth = get_config().auth
    if _matches(x_api_key, auth.read_key) or _matches(x_api_key, auth.write_key):
        return
    logger.info("Rejected read request: invalid API key")
    raise HTTPException(status_code=401, detail="Read key invalid")


def require_write(x_api_key: str | None = Header(None)) -> None:
    """Allow the write key only."""
    if _matches(x_api_key, get_config().auth.write_key):
        return
    logger.info("Rejected write request: invalid API key")
    raise HTTPException(status_code=401, detail="Write key invalid")


def get_project_key(x_project_key: str | None = Header(None)) -> str:
    """Project the request is scoped to, from the X-Project-Key header."""
    if not x_project_key:
        raise HTTPException(status_code=400, detail="Missing X-PROJECT-KEY")
    return x_project_key
