"""Textual rendering of AST nodes and runtime values.

The output of `to_string` reads back through `quasi.reader.parser.read` into
an equivalent template: forms print as parenthesized lists, identifiers by
name, strings JSON-escaped, booleans as #t/#f and None as nil.
"""

from __future__ import annotations

import json
import math
from io import StringIO

from quasi import LispValue
from quasi.errors import QuasiTypeError
from quasi.types.ast_nodes import Form, Identifier, Literal, Node, Splice
from quasi.types.symbol import Symbol


def format_atom(value: object) -> str:
    if value is True:
        return "#t"
    if value is False:
        return "#f"
    if value is None:
        return "nil"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, float) and not math.isfinite(value):
        raise QuasiTypeError(f"Cannot print non-finite number {value!r}")
    if isinstance(value, (int, float, Symbol)):
        return str(value) if not isinstance(value, float) else repr(value)
    raise QuasiTypeError(f"Cannot print atom {value!r}")


def _write(node: Node, buffer: StringIO, show_lexical_ids: bool) -> None:
    if isinstance(node, Literal):
        buffer.write(format_atom(node.value))
    elif isinstance(node, Identifier):
        buffer.write(node.name)
        if show_lexical_ids:
            buffer.write(f"/{node.lexical_id}")
    elif isinstance(node, Form):
        buffer.write("(")
        for i, item in enumerate(node.items):
            if i:
                buffer.write(" ")
            _write(item, buffer, show_lexical_ids)
        buffer.write(")")
    elif isinstance(node, Splice):
        buffer.write(",@")
        _write(node.node, buffer, show_lexical_ids)
    else:
        raise QuasiTypeError(f"Unhandled node shape: {node!r}")


def to_string(node: Node, *, show_lexical_ids: bool = False) -> str:
    """Render `node` as text; `show_lexical_ids` appends /id to identifiers."""
    with StringIO() as buffer:
        _write(node, buffer, show_lexical_ids)
        return buffer.getvalue()


def format_value(value: LispValue) -> str:
    """Render a runtime value produced by the evaluator."""
    if isinstance(value, Node):
        return to_string(value)
    if isinstance(value, (list, tuple)):
        return "(" + " ".join(format_value(v) for v in value) + ")"
    try:
        return format_atom(value)
    except QuasiTypeError:
        return str(value)
