"""
Tokenizer for the search query language.

Token kinds:
    WORD    identifier: letters, digits, ``_``, ``-``, ``.``; may end in ``*``
    QUOTED  double-quoted string, ``\\x`` resolves to ``x``
    AND/OR  the exact uppercase keywords (``and``/``or`` are plain words)
    MINUS   negation marker at the start of an operand
    LPAREN, RPAREN, COLON, EOF

Whitespace (space, tab, CR, LF) separates tokens and is never emitted.
"""

from __future__ import annotations

from typing import NamedTuple

from keyvault.query.errors import QuerySyntaxError

WORD = "WORD"
QUOTED = "QUOTED"
AND = "AND"
OR = "OR"
MINUS = "MINUS"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COLON = "COLON"
EOF = "EOF"

KEYWORDS = {"AND": AND, "OR": OR}
WHITESPACE = frozenset(" \t\r\n")
WILDCARD = "*"

_PUNCTUATION = {"(": LPAREN, ")": RPAREN, ":": COLON}


class Token(NamedTuple):
    kind: str
    value: str  # decoded text (quotes and escapes removed for QUOTED)
    pos: int  # offset of the first character
    end: int  # offset one past the last character


def is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_-."


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, always ending with an EOF token.

    Raises:
        QuerySyntaxError: on an unterminated quoted string or a character
            that cannot start any token.
    """
    tokens: list[Token] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in WHITESPACE:
            i += 1
            continue

        if ch in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[ch], ch, i, i + 1))
            i += 1
            continue

        if ch == '"':
            tokens.append(_read_quoted(text, i))
            i = tokens[-1].end
            continue

        # A dash opening an operand negates it, except directly after ``key:``
        # where it belongs to the value (``delta:-5``).
        after_colon = bool(tokens) and tokens[-1].kind == COLON and tokens[-1].end == i
        if ch == "-" and not after_colon:
            tokens.append(Token(MINUS, ch, i, i + 1))
            i += 1
            continue

        if is_ident_char(ch):
            tokens.append(_read_word(text, i))
            i = tokens[-1].end
            continue

        raise QuerySyntaxError(f"unexpected character {ch!r}", text, i)

    tokens.append(Token(EOF, "", n, n))
    return tokens


def _read_word(text: str, start: int) -> Token:
    i = start
    while i < len(text) and is_ident_char(text[i]):
        i += 1
    if i < len(text) and text[i] == WILDCARD:
        i += 1
    word = text[start:i]
    return Token(KEYWORDS.get(word, WORD), word, start, i)


def _read_quoted(text: str, start: int) -> Token:
    chars: list[str] = []
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text):
                break
            chars.append(text[i + 1])
            i += 2
            continue
        if ch == '"':
            return Token(QUOTED, "".join(chars), start, i + 1)
        chars.append(ch)
        i += 1
    raise QuerySyntaxError("unterminated quoted string", text, start)
