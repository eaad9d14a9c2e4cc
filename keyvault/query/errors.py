"""Errors raised by the query language."""

from __future__ import annotations


class QuerySyntaxError(ValueError):
    """A query string that does not reduce to a complete expression.

    Attributes:
        reason: short description of what went wrong.
        query: the original input.
        position: 0-based character offset of the offending input.
    """

    def __init__(self, reason: str, query: str, position: int) -> None:
        self.reason = reason
        self.query = query
        self.position = position
        super().__init__(f"Invalid query syntax at position {position}: {reason}")
