"""
keyvault vault — project-scoped JSON secrets backed by PostgreSQL.

Public API:
    vault.get(project, key)            → stored JSON value or None
    vault.set(project, key, value)     → upsert
    vault.delete(project, key)         → True if a row was removed
    vault.search(project, query)       → list[SecretRecord] matching the query
"""

from __future__ import annotations

from typing import Any

from keyvault.query.record import SecretRecord
from keyvault.vault.dal import delete_secret, get_secret, upsert_secret
from keyvault.vault.search import search_secrets


def get(project_key: str, secret_key: str) -> Any | None:
    """Retrieve a secret's value. Returns None if not found."""
    return get_secret(project_key, secret_key)


def set(project_key: str, secret_key: str, value: Any) -> None:
    """Store (or replace) a secret's value."""
    upsert_secret(project_key, secret_key, value)


def delete(project_key: str, secret_key: str) -> bool:
    """Delete a secret. Returns True if deleted."""
    return delete_secret(project_key, secret_key)


def search(project_key: str, query: str | None = None, *, key_contains: str | None = None) -> list[SecretRecord]:
    """Search a project's secrets with the query language."""
    return search_secrets(project_key, query, key_contains=key_contains)


__all__ = ["SecretRecord", "delete", "get", "search", "set"]
