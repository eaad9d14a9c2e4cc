"""
Compile a query AST into a matcher: a pure ``(SecretRecord) -> bool``.

Compilation is one bottom-up pass. Patterns are case-folded here, so
evaluating a matcher does no per-record setup beyond field extraction.
AND/OR chains compile to one flat ``all``/``any`` over their operands.
Matchers hold no state and are safe to share across threads.
"""

from __future__ import annotations

from collections.abc import Callable

from keyvault.query.ast import And, FieldFilter, Node, Not, Or, Phrase, Term, operands
from keyvault.query.record import SecretRecord, field_extractor

Matcher = Callable[[SecretRecord], bool]
TextTest = Callable[[str], bool]


def match_all(record: SecretRecord) -> bool:
    return True


def compile_query(node: Node | None) -> Matcher:
    """Compile ``node`` into a matcher. ``None`` (empty query) matches everything."""
    if node is None:
        return match_all
    return _compile(node)


def _compile(node: Node) -> Matcher:
    if isinstance(node, (Term, Phrase)):
        test = text_test(node)
        return lambda record: test(record.key_text) or any(map(test, record.value_leaves))

    if isinstance(node, FieldFilter):
        test = text_test(node.value)
        extract = field_extractor(node.field)
        return lambda record: any(map(test, extract(record)))

    if isinstance(node, Not):
        child = _compile(node.child)
        return lambda record: not child(record)

    if isinstance(node, And):
        matchers = tuple(_compile(op) for op in operands(node))
        return lambda record: all(m(record) for m in matchers)

    if isinstance(node, Or):
        matchers = tuple(_compile(op) for op in operands(node))
        return lambda record: any(m(record) for m in matchers)

    raise TypeError(f"Unknown query node: {node!r}")


def text_test(node: Term | Phrase) -> TextTest:
    """Build the test applied to one already case-folded string."""
    if isinstance(node, Term) and node.is_prefix:
        prefix = node.pattern.casefold()
        return lambda text: text.startswith(prefix)

    needle = node.text.casefold()
    return lambda text: needle in text
