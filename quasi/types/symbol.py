from __future__ import annotations
import sys


class Symbol:
    """A name in a template, as produced by the reader.

    Symbols starting with ':' are keywords: they quote to literals rather
    than identifiers."""
    __slots__ = ("id",)

    def __init__(self, name: str):
        # Intern to ensure fast equality/hash and reduce memory
        self.id = sys.intern(name)

    @property
    def is_keyword(self) -> bool:
        return len(self.id) > 1 and self.id.startswith(":")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Symbol) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self):
        return f"Symbol({self.id!r})"

    def __str__(self):
        return self.id


QUOTE = Symbol("quote")
QUASIQUOTE = Symbol("quasiquote")
UNQUOTE = Symbol("unquote")
UNQUOTE_SPLICING = Symbol("unquote-splicing")
UNHYGIENIC = Symbol("var!")
