"""
Secret record model and field resolution for query evaluation.

A record's searchable surface is its key name plus the leaves of its JSON
value: a depth-first walk over the document where strings are kept as-is,
numbers and booleans become their JSON text, ``null`` is skipped, and
object keys are not rendered. Each leaf is matched on its own.

Named fields only look one level into a JSON object and must land on a
scalar; the deep walk is reserved for unscoped search and
``secret_value:``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

SECRET_KEY_FIELD = "secret_key"
SECRET_VALUE_FIELD = "secret_value"

# Extracts the case-folded strings a field resolves to; empty when absent.
Extractor = Callable[["SecretRecord"], "tuple[str, ...]"]


@dataclass(frozen=True)
class SecretRecord:
    """One ``(project_key, secret_key, secret_value)`` row.

    ``key_text`` and ``value_leaves`` are the case-folded key name and value
    leaves, computed once so many matchers can share them.
    """

    project_key: str
    secret_key: str
    secret_value: Any = None
    key_text: str = field(init=False, repr=False, compare=False)
    value_leaves: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key_text", self.secret_key.casefold())
        object.__setattr__(
            self, "value_leaves", tuple(leaf.casefold() for leaf in iter_leaves(self.secret_value))
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SecretRecord:
        return cls(
            project_key=row["project_key"],
            secret_key=row["secret_key"],
            secret_value=row["secret_value"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret_key": self.secret_key,
            "project_key": self.project_key,
            "secret_value": self.secret_value,
        }


def scalar_text(value: Any) -> str | None:
    """Text form of a JSON scalar; None for null and for containers."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return None


def iter_leaves(value: Any) -> Iterator[str]:
    """Yield the text of every non-null leaf, depth first."""
    if isinstance(value, Mapping):
        for child in value.values():
            yield from iter_leaves(child)
    elif isinstance(value, (list, tuple)):
        for child in value:
            yield from iter_leaves(child)
    else:
        text = scalar_text(value)
        if text is not None:
            yield text


def lookup_field(value: Any, name: str) -> str | None:
    """Resolve ``name`` against the top level of a JSON object.

    An exact key wins; otherwise the first key equal under case folding.
    Returns the scalar's text, or None when ``value`` is not an object, the
    key is absent, or it holds null, an array or an object.
    """
    if not isinstance(value, Mapping):
        return None
    if name in value:
        return scalar_text(value[name])
    folded = name.casefold()
    for key, child in value.items():
        if isinstance(key, str) and key.casefold() == folded:
            return scalar_text(child)
    return None


def field_extractor(name: str) -> Extractor:
    """Return the text extraction rule for a ``name:value`` filter."""
    folded = name.casefold()
    if folded == SECRET_KEY_FIELD:
        return lambda record: (record.key_text,)
    if folded == SECRET_VALUE_FIELD:
        return lambda record: record.value_leaves

    def extract(record: SecretRecord) -> tuple[str, ...]:
        text = lookup_field(record.secret_value, name)
        return () if text is None else (text.casefold(),)

    return extract
