"""
Named SQL statements, loaded once from ``queries.yaml``.

Usage:
    from keyvault.db.queries import get_query
    cur.execute(get_query("get_secret"), {"project_key": p, "secret_key": k})
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml

QUERIES_FILE = Path(__file__).with_name("queries.yaml")


@lru_cache(maxsize=1)
def load_queries(path: Path = QUERIES_FILE) -> dict[str, str]:
    """Parse the YAML file into ``{name: sql}``."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of query name to SQL")
    return {str(name): str(sql) for name, sql in data.items()}


def get_query(name: str) -> str:
    """Return the SQL for ``name``. Raises KeyError for an unknown query."""
    queries = load_queries()
    try:
        return queries[name]
    except KeyError:
        raise KeyError(f"Missing query '{name}' in {QUERIES_FILE.name}") from None
