"""
Recursive-descent parser for the search query language.

Grammar (whitespace is silent between tokens)::

    expression   := or_expr EOF
    or_expr      := and_expr ( "OR" and_expr )*
    and_expr     := not_expr ( "AND" not_expr | not_expr )*     # adjacency = AND
    not_expr     := "-"? primary
    primary      := grouped | field_filter | phrase | term
    grouped      := "(" or_expr ")"
    field_filter := (WORD | QUOTED) ":" (WORD | QUOTED)        # no whitespace around ":"
    phrase       := QUOTED
    term         := WORD

Precedence is NOT > AND > OR. The parser produces a concrete ``ParseNode``
tree; ``keyvault.query.ast.build_ast`` lowers it to the AST.
"""

from __future__ import annotations

from dataclasses import dataclass

from keyvault.query.errors import QuerySyntaxError
from keyvault.query.lexer import (
    AND,
    COLON,
    EOF,
    LPAREN,
    MINUS,
    OR,
    QUOTED,
    RPAREN,
    WORD,
    Token,
    tokenize,
)

# Token kinds that can begin a not_expr; used to spot implicit AND.
_OPERAND_START = frozenset({WORD, QUOTED, LPAREN, MINUS})

# Deepest run of open parentheses accepted.
MAX_NESTING = 64


@dataclass(frozen=True)
class ParseNode:
    """One node of the concrete parse tree.

    ``rule`` is one of: or_expr, and_expr, not_expr, grouped, field_filter,
    key, value, phrase, term. Leaf rules carry their ``token``.
    """

    rule: str
    children: tuple[ParseNode, ...] = ()
    token: Token | None = None

    @property
    def pos(self) -> int:
        if self.token is not None:
            return self.token.pos
        return self.children[0].pos


def parse(text: str) -> ParseNode | None:
    """Parse ``text`` into a parse tree.

    Returns None for an empty or whitespace-only query.

    Raises:
        QuerySyntaxError: if the input is not a complete expression.
    """
    if not text.strip():
        return None
    return _Parser(text).parse_expression()


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    # ─── Token cursor ────────────────────────────────────────────────

    def peek(self, offset: int = 0) -> Token:
        i = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[i]

    def advance(self) -> Token:
        tok = self.tokens[self.index]
        if tok.kind != EOF:
            self.index += 1
        return tok

    def error(self, reason: str, position: int) -> QuerySyntaxError:
        return QuerySyntaxError(reason, self.text, position)

    # ─── Rules ───────────────────────────────────────────────────────

    def parse_expression(self) -> ParseNode:
        node = self.or_expr()
        tok = self.peek()
        if tok.kind != EOF:
            raise self.error(f"unexpected {_describe(tok)}", tok.pos)
        return node

    def or_expr(self) -> ParseNode:
        operands = [self.and_expr()]
        while self.peek().kind == OR:
            self.advance()
            operands.append(self.and_expr())
        if len(operands) == 1:
            return operands[0]
        return ParseNode("or_expr", tuple(operands))

    def and_expr(self) -> ParseNode:
        operands = [self.not_expr()]
        while True:
            kind = self.peek().kind
            if kind == AND:
                self.advance()
                operands.append(self.not_expr())
            elif kind in _OPERAND_START:
                operands.append(self.not_expr())
            else:
                break
        if len(operands) == 1:
            return operands[0]
        return ParseNode("and_expr", tuple(operands))

    def not_expr(self) -> ParseNode:
        if self.peek().kind == MINUS:
            minus = self.advance()
            return ParseNode("not_expr", (self.primary(),), token=minus)
        return self.primary()

    def primary(self) -> ParseNode:
        tok = self.peek()
        if tok.kind == LPAREN:
            return self.grouped()
        if tok.kind in (WORD, QUOTED):
            nxt = self.peek(1)
            if nxt.kind == COLON and nxt.pos == tok.end:
                return self.field_filter()
            self.advance()
            return ParseNode("term" if tok.kind == WORD else "phrase", token=tok)
        if tok.kind == EOF:
            raise self.error("expected a search term, found end of query", tok.pos)
        raise self.error(f"expected a search term, found {_describe(tok)}", tok.pos)

    def grouped(self) -> ParseNode:
        lparen = self.advance()
        if self.depth >= MAX_NESTING:
            raise self.error(f"query nested too deeply (more than {MAX_NESTING} levels)", lparen.pos)
        self.depth += 1
        inner = self.or_expr()
        self.depth -= 1
        tok = self.peek()
        if tok.kind != RPAREN:
            raise self.error(
                f"expected ')' to close '(' at position {lparen.pos}, found {_describe(tok)}",
                tok.pos,
            )
        self.advance()
        return ParseNode("grouped", (inner,), token=lparen)

    def field_filter(self) -> ParseNode:
        key = self.advance()
        colon = self.advance()
        value = self.peek()
        if value.kind not in (WORD, QUOTED) or value.pos != colon.end:
            raise self.error(f"field filter '{key.value}' is missing a value", colon.end)
        self.advance()
        return ParseNode(
            "field_filter",
            (ParseNode("key", token=key), ParseNode("value", token=value)),
        )


def _describe(tok: Token) -> str:
    if tok.kind == EOF:
        return "end of query"
    if tok.kind == QUOTED:
        return "quoted string"
    return repr(tok.value)
