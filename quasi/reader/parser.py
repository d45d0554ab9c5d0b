"""
  S-expression reader: lexer and parser producing quote templates.

- Streaming, lazy parsing
- Emits plain Python values, ready to be handed to `quote`:

    - nil -> None
    - #t / #f -> True / False
    - lists -> Python list
    - symbols -> Symbol
    - strings -> str
    - numbers -> int/float (#b, #o, #x radix integers)
    - 'x, `x, ,x, ,@x -> [quote x], [quasiquote x], [unquote x], [unquote-splicing x]
"""

from __future__ import annotations

import ast
import math
import re
from typing import Iterator, Optional

from quasi import Template
from quasi.errors import QuasiSyntaxError
from quasi.types.symbol import QUASIQUOTE, QUOTE, UNQUOTE, UNQUOTE_SPLICING, Symbol


TOKEN_RE = re.compile(
    r"\s*("
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<ml_start>#\|)"  # multi-line comment start
    r"|(?P<quote>[\'`])"  # ' and `
    r"|(?P<unquote>,@|,)"  # , and ,@
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r"|(?P<radix>#b[01]+|#o[0-7]+|#x[0-9A-Fa-f]+)"  # binary, octal, hex
    r'|(?P<symbol>[^\s()\'",;`]+)'  # fallback: symbols
    r")",
    re.DOTALL,
)

QUOTE_FORMS: dict[str, Symbol] = {
    "'": QUOTE,
    "`": QUASIQUOTE,
    ",": UNQUOTE,
    ",@": UNQUOTE_SPLICING,
}

CONSTANTS: dict[str, object] = {"nil": None, "#t": True, "#f": False}

_INT_RE = re.compile(r"[+-]?\d+\Z")

# Returned by parse_expr when the input is exhausted
EOF_MARKER = object()


def lex(source: str) -> Iterator[tuple[str, str]]:
    """Token generator: yields (token_type, token_value) tuples."""
    pos = 0
    n = len(source)

    while pos < n:
        if source[pos].isspace():
            pos += 1
            continue
        match = TOKEN_RE.match(source, pos)
        if not match or match.end() == pos:
            raise QuasiSyntaxError(f"Unexpected char at {pos}: {source[pos]!r}")
        if match.group("comment"):
            pos = match.end()
            continue
        if match.group("ml_start"):
            pos = match.end()
            depth = 1
            while depth > 0:
                if pos >= n:
                    raise QuasiSyntaxError("Unterminated multi-line comment")
                if source.startswith("#|", pos):
                    depth += 1
                    pos += 2
                elif source.startswith("|#", pos):
                    depth -= 1
                    pos += 2
                else:
                    pos += 1
            continue
        for nm in ("quote", "unquote", "lparen", "rparen", "string", "radix", "symbol"):
            if match.group(nm):
                yield nm, match.group(nm)
                break
        pos = match.end()


def _atom(tok_val: str) -> Template:
    if tok_val in CONSTANTS:
        return CONSTANTS[tok_val]
    if _INT_RE.match(tok_val):
        return int(tok_val)
    # Words like inf and nan stay symbols
    if any(c.isdigit() for c in tok_val):
        try:
            value = float(tok_val)
        except ValueError:
            pass
        else:
            if not math.isfinite(value):
                raise QuasiSyntaxError(f"Number out of range: {tok_val}")
            return value
    return Symbol(tok_val)


class TokenStream:
    def __init__(self, token_iter: Iterator[tuple[str, str]]):
        self.tokens = iter(token_iter)
        self.buffer: list[tuple[str, str]] = []

    def peek(self) -> tuple[Optional[str], Optional[str]]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None, None
        return self.buffer[0]

    def advance(self) -> tuple[Optional[str], Optional[str]]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, (None, None))

    def parse_expr(self) -> Template:
        tok_type, tok_val = self.peek()
        if tok_type is None:
            return EOF_MARKER

        if tok_type == "symbol":
            self.advance()
            return _atom(tok_val)

        # Quote forms
        if tok_type in ("quote", "unquote"):
            self.advance()
            expr = self.parse_expr()
            if expr is EOF_MARKER:
                raise QuasiSyntaxError(f"Expected an expression after {tok_val!r}")
            return [QUOTE_FORMS[tok_val], expr]

        if tok_type == "lparen":
            self.advance()
            items = []
            while True:
                if self.peek()[0] == "rparen":
                    self.advance()
                    break
                if self.peek()[0] is None:
                    raise QuasiSyntaxError("Unmatched '('")
                items.append(self.parse_expr())
            return items

        if tok_type == "rparen":
            raise QuasiSyntaxError("Unexpected ')'")

        if tok_type == "string":
            self.advance()
            try:
                return ast.literal_eval(tok_val)
            except (ValueError, SyntaxError) as exc:
                raise QuasiSyntaxError(f"Invalid string literal {tok_val}") from exc

        if tok_type == "radix":
            self.advance()
            base = {"b": 2, "o": 8, "x": 16}[tok_val[1]]
            return int(tok_val[2:], base)

        raise QuasiSyntaxError(f"Unknown token: {tok_type} {tok_val}")

    def parse_all(self) -> Iterator[Template]:
        while True:
            tok_type, _ = self.peek()
            if tok_type is None:
                break
            yield self.parse_expr()


def read_all(source: str) -> list[Template]:
    """Read every expression in `source`."""
    return list(TokenStream(lex(source)).parse_all())


def read(source: str) -> Template:
    """Read exactly one expression from `source`."""
    exprs = read_all(source)
    if len(exprs) != 1:
        raise QuasiSyntaxError(f"Expected exactly one expression, found {len(exprs)}")
    return exprs[0]
