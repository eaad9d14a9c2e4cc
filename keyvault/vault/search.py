"""
Search orchestrator — compile a query, fetch a project's secrets, filter.

The query is compiled before any I/O so a malformed query never touches the
database. Filtering happens in-process over the full candidate set.
"""

from __future__ import annotations

import logging

from keyvault.query import compile_query, dump, parse_query
from keyvault.query.record import SecretRecord
from keyvault.vault.dal import fetch_candidates

logger = logging.getLogger(__name__)


def search_secrets(
    project_key: str,
    query: str | None,
    *,
    key_contains: str | None = None,
) -> list[SecretRecord]:
    """Return the secrets of ``project_key`` that ``query`` accepts.

    Raises:
        QuerySyntaxError: if ``query`` is malformed.
    """
    node = parse_query(query or "")
    matcher = compile_query(node)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Search %s: %r -> %s", project_key, query, dump(node) if node else "<all>")

    candidates = fetch_candidates(project_key, key_contains)
    results = [record for record in candidates if matcher(record)]
    logger.debug("Search %s: %d of %d candidates matched", project_key, len(results), len(candidates))
    return results
