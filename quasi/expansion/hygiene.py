"""Hygienic renaming of macro expansions.

After a transformer runs, the expander knows which lexical ids were minted
by the transformer's own quote calls. Identifiers carrying those ids were
introduced by the macro; everything else arrived from the call site through
unquote and is left alone.

Macro-introduced identifiers used as variables (anywhere other than the head
of a form) get a fresh, globally unique name, one per (name, lexical_id)
pair. Macro-introduced identifiers that only ever appear as a form head are
function references: they keep their bare name and are resolved wherever the
expansion ends up being evaluated. A call-site function of the same name
therefore captures such a call. That mirrors how the underlying macro system
behaves and is kept on purpose.

Identifiers marked with var! (lexical id CALL_SITE) take the lexical id of
the macro call's head identifier, so they resolve in the caller's scope by
name alone.
"""

from __future__ import annotations

import logging
import re
from itertools import count
from typing import Container, Iterator

from quasi.errors import DuplicateBindingCollision, QuasiTypeError
from quasi.logconfig import TRACE
from quasi.types.ast_nodes import Form, Identifier, Literal, Node, Splice
from quasi.types.lexical import CALL_SITE

logger = logging.getLogger(__name__)

Key = tuple[str, int]

SEPARATOR = "#"
_RENAMED_RE = re.compile(r".+#\d+\Z")


def is_renamed(name: str) -> bool:
    """True for names minted by hygienic renaming."""
    return bool(_RENAMED_RE.match(name))


class FreshNames:
    """Source of globally unique names, in the spirit of gensym."""

    def __init__(self):
        self._counter = count(1)

    def fresh(self, base: str, taken: Container[str]) -> str:
        while True:
            candidate = f"{base}{SEPARATOR}{next(self._counter)}"
            if candidate not in taken:
                return candidate


_fresh_names = FreshNames()


def _walk(node: Node, in_head: bool = False) -> Iterator[tuple[Identifier, bool]]:
    """Yield every identifier in `node` with a flag telling if it is a form head."""
    if isinstance(node, Identifier):
        yield node, in_head
    elif isinstance(node, Form):
        if node.head is not None:
            yield from _walk(node.head, True)
        for arg in node.args:
            yield from _walk(arg, False)
    elif isinstance(node, Literal):
        return
    elif isinstance(node, Splice):
        raise QuasiTypeError("Splice marker found in a macro expansion")
    else:
        raise QuasiTypeError(f"Unhandled node shape: {node!r}")


def identifier_names(node: Node) -> set[str]:
    return {ident.name for ident, _ in _walk(node)}


class _Rewriter:
    __slots__ = ("renames", "call_site_id")

    def __init__(self, renames: dict[Key, str], call_site_id: int):
        self.renames = renames
        self.call_site_id = call_site_id

    def rewrite(self, node: Node) -> Node:
        if isinstance(node, Identifier):
            if node.lexical_id == CALL_SITE:
                return Identifier(node.name, self.call_site_id)
            fresh = self.renames.get((node.name, node.lexical_id))
            if fresh is None:
                return node
            return Identifier(fresh, node.lexical_id)
        if isinstance(node, Form):
            head = self.rewrite(node.head) if node.head is not None else None
            args = tuple(self.rewrite(a) for a in node.args)
            if head is node.head and all(a is b for a, b in zip(args, node.args)):
                return node
            return Form(head, args)
        if isinstance(node, Literal):
            return node
        raise QuasiTypeError(f"Unhandled node shape: {node!r}")


def rename_bindings(
    expanded: Node,
    call_site: Form,
    internal_ids: Container[int],
    fresh_names: FreshNames | None = None,
) -> Node:
    """Rename the identifiers a macro introduced into `expanded`.

    `call_site` is the macro call form that produced the expansion and
    `internal_ids` the lexical ids minted by the macro's own quote calls.
    """
    fresh_names = fresh_names or _fresh_names

    variables: dict[Key, None] = {}
    taken: set[str] = identifier_names(call_site)
    for ident, in_head in _walk(expanded):
        taken.add(ident.name)
        if in_head or ident.lexical_id == CALL_SITE:
            continue
        if ident.lexical_id in internal_ids:
            variables.setdefault((ident.name, ident.lexical_id), None)

    renames: dict[Key, str] = {}
    for key in variables:
        renames[key] = fresh_names.fresh(key[0], taken)
        taken.add(renames[key])

    issued = list(renames.values())
    if len(set(issued)) != len(issued):
        raise DuplicateBindingCollision(f"Hygienic renaming reused a name: {sorted(issued)}")

    call_site_id = CALL_SITE
    if isinstance(call_site.head, Identifier):
        call_site_id = call_site.head.lexical_id

    for (name, lexical_id), fresh in renames.items():
        logger.log(TRACE, "renaming %s/%d to %s", name, lexical_id, fresh)
    return _Rewriter(renames, call_site_id).rewrite(expanded)
