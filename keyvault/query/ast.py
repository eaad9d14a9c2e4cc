"""
Query AST and the parse-tree lowering.

Node kinds: Term, Phrase, FieldFilter, Not, And, Or. Nodes are immutable and
compare by value, so two parses of the same query are equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Union

from keyvault.query.lexer import QUOTED, WILDCARD
from keyvault.query.parser import ParseNode


@dataclass(frozen=True)
class Term:
    """Free-text token. A trailing ``*`` makes it a prefix match."""

    text: str

    @property
    def is_prefix(self) -> bool:
        return self.text.endswith(WILDCARD)

    @property
    def pattern(self) -> str:
        """The text to look for, without the wildcard marker."""
        return self.text[:-1] if self.is_prefix else self.text


@dataclass(frozen=True)
class Phrase:
    """Quoted text matched as an exact contiguous substring."""

    text: str


@dataclass(frozen=True)
class FieldFilter:
    """``field:value``: match ``value`` against one named field only."""

    field: str
    value: Term | Phrase


@dataclass(frozen=True)
class Not:
    child: Node


@dataclass(frozen=True)
class And:
    left: Node
    right: Node


@dataclass(frozen=True)
class Or:
    left: Node
    right: Node


Node = Union[Term, Phrase, FieldFilter, Not, And, Or]


def build_ast(tree: ParseNode) -> Node:
    """Lower a parse tree into an AST. Total over any tree ``parse`` returns."""
    rule = tree.rule
    if rule == "or_expr":
        return reduce(Or, (build_ast(c) for c in tree.children))
    if rule == "and_expr":
        return reduce(And, (build_ast(c) for c in tree.children))
    if rule == "not_expr":
        return Not(build_ast(tree.children[0]))
    if rule == "grouped":
        return build_ast(tree.children[0])
    if rule == "field_filter":
        key, value = tree.children
        return FieldFilter(key.token.value, _leaf(value))
    if rule in ("term", "phrase"):
        return _leaf(tree)
    raise ValueError(f"Unexpected parse rule: {rule!r}")


def _leaf(node: ParseNode) -> Term | Phrase:
    # Quoted values keep whitespace and never act as wildcards.
    if node.token.kind == QUOTED:
        return Phrase(node.token.value)
    return Term(node.token.value)


def operands(node: And | Or) -> list[Node]:
    """Flatten a left-deep chain of ``node``'s kind into its operands, in order.

    A chain is as deep as the query is long; the left spine is walked
    iteratively.
    """
    kind = type(node)
    rights: list[Node] = []
    while isinstance(node, kind):
        rights.append(node.right)
        node = node.left
    rights.append(node)
    rights.reverse()
    return rights


def dump(node: Node) -> str:
    """Render an AST as a compact s-expression, e.g. ``(AND (OR a b) (NOT c))``."""
    if isinstance(node, Term):
        return node.text
    if isinstance(node, Phrase):
        return '"' + node.text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(node, FieldFilter):
        return f"{node.field}:{dump(node.value)}"
    if isinstance(node, Not):
        return f"(NOT {dump(node.child)})"
    if isinstance(node, (And, Or)):
        label = "AND" if isinstance(node, And) else "OR"
        first, *rest = operands(node)
        text = dump(first)
        for operand in rest:
            text = f"({label} {text} {dump(operand)})"
        return text
    raise TypeError(f"Unknown query node: {node!r}")
