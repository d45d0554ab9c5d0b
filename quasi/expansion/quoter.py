"""Quasiquotation: turning templates into AST nodes.

A template is a nested structure of Python lists, Symbols, atoms and
pre-built nodes. Quoting walks it once, turning every plain Symbol into an
Identifier that carries the lexical id of this quote call, and handling the
escape markers:

    (unquote expr)            insert the quote-time value of expr
    (unquote-splicing expr)   insert each element of a sequence value
    (var! name)               identifier resolved at the macro call site

Escapes only fire at quoting depth 1; nested (quasiquote ...) forms raise the
depth and are kept as data.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from quasi import Template
from quasi.errors import (
    InvalidSpliceTarget,
    QuasiArityError,
    QuasiTypeError,
    QuasiUnboundSymbol,
)
from quasi.logconfig import TRACE
from quasi.types.ast_nodes import (
    Form,
    Identifier,
    Literal,
    Node,
    Splice,
    coerce_node,
    is_atom,
)
from quasi.types.lexical import CALL_SITE, fresh_lexical_id
from quasi.types.symbol import (
    QUASIQUOTE,
    UNHYGIENIC,
    UNQUOTE,
    UNQUOTE_SPLICING,
    Symbol,
)

logger = logging.getLogger(__name__)

Bindings = Mapping[str, Any]


def unquote(expr: Template) -> list:
    """Template marker: insert the value of `expr` as one element."""
    return [UNQUOTE, expr]


def unquote_splicing(expr: Template) -> list:
    """Template marker: insert each element of the sequence `expr` evaluates to."""
    return [UNQUOTE_SPLICING, expr]


def mark_unhygienic(target):
    """Opt an identifier out of hygiene.

    Given an Identifier, return a copy that the renamer will resolve against
    the macro call site by name alone. Given a name (str or Symbol), return
    the (var! name) template marker that quotes to the same thing.
    """
    if isinstance(target, Identifier):
        return Identifier(target.name, CALL_SITE)
    if isinstance(target, str):
        target = Symbol(target)
    if isinstance(target, Symbol) and not target.is_keyword:
        return [UNHYGIENIC, target]
    raise QuasiTypeError(f"mark_unhygienic expects an Identifier or a name, got {target!r}")


def _normalize_bindings(bindings: Optional[Mapping]) -> dict[str, Any]:
    if not bindings:
        return {}
    out: dict[str, Any] = {}
    for k, v in bindings.items():
        if isinstance(k, Symbol):
            k = k.id
        elif isinstance(k, Identifier):
            k = k.name
        if not isinstance(k, str):
            raise QuasiTypeError(f"Binding name must be a str or Symbol, got {k!r}")
        out[k] = v
    return out


def evaluate_unquoted(expr: Template, bindings: Bindings) -> Any:
    """Evaluate an escaped expression at quote time.

    - nodes evaluate to themselves
    - symbols are looked up in `bindings`
    - atoms evaluate to themselves
    - (f arg...) calls f when the head symbol is bound to a Python callable
    - (quasiquote X) quotes X with the same bindings and a fresh lexical id
    - any other list evaluates to the list of its evaluated elements
    """
    if isinstance(expr, Node):
        return expr
    if isinstance(expr, Symbol):
        if expr.is_keyword:
            return expr
        try:
            return bindings[expr.id]
        except KeyError:
            raise QuasiUnboundSymbol(f"Cannot unquote unbound symbol {expr}") from None
    if is_atom(expr):
        return expr
    if isinstance(expr, (list, tuple)):
        if not expr:
            return []
        head = expr[0]
        if head == QUASIQUOTE:
            if len(expr) != 2:
                raise QuasiArityError("quasiquote expects exactly 1 argument")
            return quote(expr[1], bindings)
        if isinstance(head, Symbol) and callable(bindings.get(head.id)):
            fn = bindings[head.id]
            return fn(*[evaluate_unquoted(e, bindings) for e in expr[1:]])
        return [evaluate_unquoted(e, bindings) for e in expr]
    raise QuasiTypeError(f"Cannot evaluate {expr!r} at quote time")


class _Quoter:
    __slots__ = ("bindings", "lexical_id")

    def __init__(self, bindings: Bindings, lexical_id: int):
        self.bindings = bindings
        self.lexical_id = lexical_id

    def quote(self, template: Template, depth: int) -> Node:
        if isinstance(template, Splice):
            raise InvalidSpliceTarget("Splice marker is only valid inside a form")
        if isinstance(template, Node):
            return template
        if isinstance(template, Symbol):
            if template.is_keyword:
                return Literal(template)
            return Identifier(template.id, self.lexical_id)
        if is_atom(template):
            return Literal(template)
        if isinstance(template, (list, tuple)):
            return self._quote_sequence(list(template), depth)
        raise QuasiTypeError(f"Unhandled template shape: {template!r}")

    def _quote_sequence(self, seq: list, depth: int) -> Node:
        if not seq:
            return Form(None, ())

        head, *rest = seq
        if head == UNQUOTE:
            self._check_escape_arity(head, rest)
            if depth == 1:
                value = evaluate_unquoted(rest[0], self.bindings)
                return coerce_node(value, "unquote result")
            return self._escaped_data(head, rest[0], depth - 1)

        if head == UNQUOTE_SPLICING:
            if depth == 1:
                raise InvalidSpliceTarget("unquote-splicing is only valid inside a form")
            self._check_escape_arity(head, rest)
            return self._escaped_data(head, rest[0], depth - 1)

        if head == UNHYGIENIC and depth == 1:
            if len(rest) != 1 or not isinstance(rest[0], Symbol) or rest[0].is_keyword:
                raise QuasiTypeError("var! expects exactly one identifier name")
            return Identifier(rest[0].id, CALL_SITE)

        if head == QUASIQUOTE:
            if len(rest) != 1:
                raise QuasiArityError("quasiquote expects exactly 1 argument")
            return Form(self.quote(head, depth), (self.quote(rest[0], depth + 1),))

        items: list[Node] = []
        for item in seq:
            if isinstance(item, Splice):
                items.extend(_splice_elements(item.node))
            elif (
                depth == 1
                and isinstance(item, (list, tuple))
                and item
                and item[0] == UNQUOTE_SPLICING
            ):
                self._check_escape_arity(item[0], item[1:])
                items.extend(_splice_elements(evaluate_unquoted(item[1], self.bindings)))
            else:
                items.append(self.quote(item, depth))
        return Form.from_items(items)

    def _escaped_data(self, head: Symbol, arg: Template, depth: int) -> Node:
        # An escape belonging to an outer quasiquote level: keep it as data
        return Form(self.quote(head, depth), (self.quote(arg, depth),))

    @staticmethod
    def _check_escape_arity(head: Symbol, rest: list) -> None:
        if len(rest) != 1:
            raise QuasiArityError(f"{head} expects exactly 1 argument")


def _splice_elements(value: Any) -> list[Node]:
    """Elements of a splice value; a bare or headed Form splices its items."""
    if isinstance(value, Form):
        return list(value.items)
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise InvalidSpliceTarget(
            f"unquote-splicing must produce a sequence of nodes, got {value!r}"
        )
    out = []
    for element in value:
        try:
            out.append(coerce_node(element, "spliced element"))
        except QuasiTypeError as exc:
            raise InvalidSpliceTarget(str(exc)) from exc
    return out


def quote(
    template: Template,
    bindings: Optional[Mapping] = None,
    *,
    lexical_id: Optional[int] = None,
) -> Node:
    """Quote `template` into an AST.

    All plain identifiers in the template share one lexical id, freshly
    minted unless `lexical_id` is given. `bindings` supplies the values that
    unquote expressions refer to. The template itself is never modified.
    """
    if lexical_id is None:
        lexical_id = fresh_lexical_id()
    quoter = _Quoter(_normalize_bindings(bindings), lexical_id)
    node = quoter.quote(template, 1)
    logger.log(TRACE, "quoted template with lexical id %d", lexical_id)
    return node
