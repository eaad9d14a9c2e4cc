"""
Search query language for secrets.

    (error OR warning) -debug status:open secret_key:db* "exact phrase"

Public API:
    parse(text)              → parse tree, or None for an empty query
    parse_query(text)        → AST node, or None for an empty query
    compile_query(node)      → matcher (SecretRecord) -> bool
    compile_text(text)       → matcher for a query string
    filter_records(text, rs) → the records the query accepts, order kept

QuerySyntaxError (a ValueError with ``position``) is the only error raised.
"""

from __future__ import annotations

from collections.abc import Iterable

from keyvault.query.ast import And, FieldFilter, Node, Not, Or, Phrase, Term, build_ast, dump
from keyvault.query.compiler import Matcher, compile_query
from keyvault.query.errors import QuerySyntaxError
from keyvault.query.parser import ParseNode, parse
from keyvault.query.record import SecretRecord


def parse_query(text: str) -> Node | None:
    """Parse and lower ``text``. Returns None for an empty query."""
    tree = parse(text)
    if tree is None:
        return None
    return build_ast(tree)


def compile_text(text: str) -> Matcher:
    return compile_query(parse_query(text))


def filter_records(text: str, records: Iterable[SecretRecord]) -> list[SecretRecord]:
    """Return the records matching ``text``. Raises QuerySyntaxError before looking at any record."""
    matcher = compile_text(text)
    return [r for r in records if matcher(r)]


__all__ = [
    "And",
    "FieldFilter",
    "Matcher",
    "Node",
    "Not",
    "Or",
    "ParseNode",
    "Phrase",
    "QuerySyntaxError",
    "SecretRecord",
    "Term",
    "build_ast",
    "compile_query",
    "compile_text",
    "dump",
    "filter_records",
    "parse",
    "parse_query",
]
