"""Immutable AST for quoted code.

Four node shapes exist: Literal, Identifier, Form and Splice. Code that
dispatches over them should end with an "unhandled shape" QuasiTypeError so
that a new shape cannot be silently ignored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from quasi.errors import QuasiTypeError
from quasi.types.symbol import Symbol

Atom = Union[int, float, str, bool, None, Symbol]


def is_atom(value: object) -> bool:
    """True for Python values that quote to a Literal."""
    if value is None or isinstance(value, (bool, int, str)):
        return True
    if isinstance(value, float):
        # inf and nan have no readable spelling
        return math.isfinite(value)
    return isinstance(value, Symbol) and value.is_keyword


class Node:
    """Base class of all AST nodes."""
    __slots__ = ()


@dataclass(frozen=True)
class Literal(Node):
    value: Atom

    def __post_init__(self):
        if not is_atom(self.value):
            raise QuasiTypeError(f"Literal cannot hold {self.value!r}")


@dataclass(frozen=True)
class Identifier(Node):
    name: str
    lexical_id: int

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise QuasiTypeError(f"Identifier name must be a non-empty str, got {self.name!r}")


@dataclass(frozen=True)
class Form(Node):
    head: Optional[Node]
    args: tuple[Node, ...] = field(default=())

    def __post_init__(self):
        # Accept any iterable for args but store a tuple
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))
        for child in self.args:
            if not isinstance(child, Node):
                raise QuasiTypeError(f"Form argument must be a Node, got {child!r}")
        if self.head is not None and not isinstance(self.head, (Identifier, Form)):
            raise QuasiTypeError(f"Form head must be an Identifier or Form, got {self.head!r}")
        if self.head is None and self.args and isinstance(self.args[0], (Identifier, Form)):
            raise QuasiTypeError(
                f"A bare sequence cannot start with {self.args[0]!r}; make it the head instead"
            )

    @classmethod
    def from_items(cls, items: Iterable[Node]) -> Form:
        """Build a form from its printed elements.

        The first element becomes the head when it can name an operator
        (an Identifier or a Form); otherwise the form is a bare sequence.
        """
        items = tuple(items)
        if items and isinstance(items[0], (Identifier, Form)):
            return cls(items[0], items[1:])
        return cls(None, items)

    @property
    def items(self) -> tuple[Node, ...]:
        if self.head is None:
            return self.args
        return (self.head,) + self.args

    @property
    def head_name(self) -> Optional[str]:
        if isinstance(self.head, Identifier):
            return self.head.name
        return None


@dataclass(frozen=True)
class Splice(Node):
    node: Node


def coerce_node(value: object, what: str = "value") -> Node:
    """Return `value` as a Node, wrapping atoms in Literal."""
    if isinstance(value, Splice):
        raise QuasiTypeError(f"{what} may not be a Splice marker")
    if isinstance(value, Node):
        return value
    if is_atom(value):
        return Literal(value)
    raise QuasiTypeError(f"{what} must be an AST node or an atom, got {value!r}")
