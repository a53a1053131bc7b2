"""
  Lisp Reader, Lexer and Parser

- Streaming, lazy parsing
- Emits Python primitives instead of Cons cells:

    - nil -> Nil
    - lists -> Python list
    - dotted lists -> (list_part, tail)
    - symbols and keywords -> Symbol
    - strings -> str
    - integers -> int, decimals/exponents -> float
    - quote forms -> [quote, expr]

Integer and floating-point literals are kept apart at read time: `10` is an
int and `10.0` a float. The bridge relies on that distinction.
"""

from __future__ import annotations

import ast
import re
from typing import Iterator, Optional

from kappa import SExpression
from kappa.errors import KappaSyntaxError
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol


TOKEN_RE = re.compile(
    r"\s*("
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<quote>')"  # '
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r'|(?P<symbol>[^\s()\'",;]+)'  # fallback: symbols
    r")",
    re.DOTALL,
)

INT_RE = re.compile(r"^[+-]?\d+$")
FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")

QUOTE = Symbol("quote")
DOT = ("symbol", ".")


def lex(source: str) -> Iterator[tuple[str, str]]:
    """Token generator: yields (token_type, token_value) tuples."""
    pos = 0
    n = len(source)
    while pos < n:
        if source[pos].isspace():
            pos += 1
            continue
        m = TOKEN_RE.match(source, pos)
        if not m or m.end() == pos:
            raise KappaSyntaxError(f"Unexpected char at {pos}: {source[pos]!r}")
        pos = m.end()
        if m.group("comment"):
            continue
        for nm in ("quote", "lparen", "rparen", "string", "symbol"):
            if m.group(nm):
                yield nm, m.group(nm)
                break


def read_atom(tok_val: str) -> SExpression:
    if tok_val.lower() == "nil":
        return Nil
    if INT_RE.match(tok_val):
        return int(tok_val)
    if FLOAT_RE.match(tok_val):
        return float(tok_val)
    return Symbol(tok_val)


_EOF = (None, None)


class TokenStream:
    """One-token lookahead over `lex` output."""

    def __init__(self, token_iter: Iterator[tuple[str, str]]):
        self._tokens = iter(token_iter)
        self._lookahead: Optional[tuple[Optional[str], Optional[str]]] = None

    def peek(self) -> tuple[Optional[str], Optional[str]]:
        if self._lookahead is None:
            self._lookahead = next(self._tokens, _EOF)
        return self._lookahead

    def advance(self) -> tuple[Optional[str], Optional[str]]:
        token = self.peek()
        if token is not _EOF:
            self._lookahead = None
        return token

    def parse_expr(self) -> SExpression:
        """Read one expression; returns None at end of input."""
        kind, value = self.advance()
        if kind is None:
            return None
        if kind == "symbol":
            return read_atom(value)
        if kind == "string":
            return ast.literal_eval(value)
        if kind == "quote":
            if self.peek() is _EOF:
                raise KappaSyntaxError("Expected an expression after quote")
            return [QUOTE, self.parse_expr()]
        if kind == "lparen":
            return self._parse_list()
        if kind == "rparen":
            raise KappaSyntaxError("Unexpected ')'")
        raise KappaSyntaxError(f"Unknown token: {kind} {value}")

    def _parse_list(self) -> SExpression:
        # Opening paren already consumed; a dotted list comes back as (items, tail)
        items: list[SExpression] = []
        while True:
            token = self.peek()
            if token is _EOF:
                raise KappaSyntaxError("Unmatched '('")
            if token[0] == "rparen":
                self.advance()
                return items
            if token == DOT:
                self.advance()
                tail = self.parse_expr()
                if self.advance()[0] != "rparen":
                    raise KappaSyntaxError("Expected ')' after dotted cdr")
                return items, tail
            items.append(self.parse_expr())

    def parse_all(self) -> Iterator[SExpression]:
        while self.peek() is not _EOF:
            yield self.parse_expr()


def read(source: str) -> list[SExpression]:
    """Read every top-level expression in `source`."""
    return list(TokenStream(lex(source)).parse_all())
