from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from quasi import config
from quasi.errors import ExpansionDepthExceeded, QuasiTypeError, UnboundMacro
from quasi.expansion.hygiene import rename_bindings
from quasi.types.ast_nodes import Form, Identifier, Literal, Node, Splice, coerce_node
from quasi.types.lexical import next_lexical_id
from quasi.types.macro_registry import MacroRegistry, macros as default_macros

logger = logging.getLogger(__name__)

# Forms whose contents are data and must not be expanded
DATA_FORMS = frozenset({"quote", "quasiquote"})

# Forms that bind names a later call head may refer to
BINDING_FORMS = frozenset({"let", "lambda", "defun", "define"})

# Answers whether a call head is already bound outside the tree being expanded
Resolver = Callable[[Identifier], bool]


def default_operators() -> frozenset[str]:
    """Names the evaluator understands without a macro: special forms and builtins."""
    from quasi.builtin.env_builtin import BUILTINS
    from quasi.evaluation.special_forms import SPECIAL_FORMS

    return frozenset(SPECIAL_FORMS) | frozenset(BUILTINS)


def _param_identifiers(params: Node) -> Iterable[Identifier]:
    if isinstance(params, Form):
        return (p for p in params.items if isinstance(p, Identifier))
    return ()


def collect_binders(node: Node, variables: set[Identifier], functions: set[str]) -> None:
    """Gather the variables (exact identifiers) and function names `node` binds.

    let pairs, lambda and defun parameters and define names bind variables;
    defun names bind functions. Quoted data binds nothing.
    """
    if not isinstance(node, Form):
        return
    name = node.head_name
    if name in DATA_FORMS:
        return
    args = node.args
    if name in BINDING_FORMS and args:
        if name == "let" and isinstance(args[0], Form):
            for pair in args[0].items:
                if isinstance(pair, Form) and isinstance(pair.head, Identifier):
                    variables.add(pair.head)
        elif name == "lambda":
            variables.update(_param_identifiers(args[0]))
        elif name == "defun":
            if isinstance(args[0], Identifier):
                functions.add(args[0].name)
            if len(args) > 1:
                variables.update(_param_identifiers(args[1]))
        elif name == "define" and isinstance(args[0], Identifier):
            variables.add(args[0])
    for child in node.items:
        collect_binders(child, variables, functions)


class Expander:
    """
    Macro expander over quoted ASTs.

    Features:
    - Head-position macro expansion with hygienic renaming of each expansion
    - Recursive nested expansion up to a fixpoint
    - Depth guard against macros that expand into themselves forever
    - Optional strict mode rejecting unknown operators

    In strict mode a head is known when it names a macro, a special form or
    builtin (or one of `operators`), something the expanded tree itself binds,
    or something `resolver` reports as bound.
    """

    def __init__(
        self,
        registry: Optional[MacroRegistry] = None,
        *,
        max_depth: Optional[int] = None,
        strict: Optional[bool] = None,
        operators: Optional[Iterable[str]] = None,
        resolver: Optional[Resolver] = None,
    ):
        self.registry = registry if registry is not None else default_macros
        self.max_depth = max_depth if max_depth is not None else config.get_max_expansion_depth()
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        self.strict = config.get_strict_expansion() if strict is None else strict
        self.operators = frozenset(operators) if operators is not None else default_operators()
        self.resolver = resolver

    def _is_macro_call(self, node: Node) -> bool:
        return (
            isinstance(node, Form)
            and isinstance(node.head, Identifier)
            and self.registry.is_macro(node.head.name)
        )

    def _transform(self, form: Form) -> Node:
        """Run the transformer for `form` once and apply hygiene to its result."""
        name = form.head.name
        first_internal = next_lexical_id()
        result = self.registry.invoke(name, form.args)
        internal_ids = range(first_internal, next_lexical_id())
        expansion = coerce_node(result, f"Expansion of macro {name}")
        return rename_bindings(expansion, form, internal_ids)

    # Single-step head expansion
    def expand_1(self, node: Node) -> Node:
        """Expand only the head-position macro if present."""
        if self._is_macro_call(node):
            return self._transform(node)
        return node  # Not a macro call, unchanged

    # Fixed-point head expansion
    def expand_head(self, node: Node) -> Node:
        depth = 0
        while self._is_macro_call(node):
            if depth >= self.max_depth:
                raise self._too_deep(node, depth)
            node = self._transform(node)
            depth += 1
        return node

    # Full expansion
    def expand(self, node: Node) -> Node:
        try:
            expanded = self._expand(node, 0)
            if self.strict:
                variables: set[Identifier] = set()
                functions: set[str] = set()
                collect_binders(expanded, variables, functions)
                self._check_operators(expanded, variables, functions)
            return expanded
        except RecursionError as exc:
            raise ExpansionDepthExceeded(
                "Macro expansion exhausted the interpreter stack", self.max_depth
            ) from exc

    def _expand(self, node: Node, depth: int) -> Node:
        if isinstance(node, (Literal, Identifier)):
            return node
        if isinstance(node, Splice):
            raise QuasiTypeError("Splice marker reached the expander")
        if not isinstance(node, Form):
            raise QuasiTypeError(f"Unhandled node shape: {node!r}")

        name = node.head_name
        if name in DATA_FORMS:
            return node
        if name is not None and self.registry.is_macro(name):
            if depth >= self.max_depth:
                raise self._too_deep(node, depth)
            logger.debug("expanding macro %s at depth %d", name, depth)
            return self._expand(self._transform(node), depth + 1)

        head = node.head
        if isinstance(head, Form):
            head = self._expand(head, depth)
        args = tuple(self._expand(arg, depth) for arg in node.args)
        if head is node.head and all(a is b for a, b in zip(args, node.args)):
            return node
        return Form(head, args)

    def _is_known(self, head: Identifier, variables: set[Identifier], functions: set[str]) -> bool:
        return (
            head.name in self.operators
            or head.name in functions
            or head in variables
            or self.registry.is_macro(head.name)
            or (self.resolver is not None and self.resolver(head))
        )

    def _check_operators(
        self, node: Node, variables: set[Identifier], functions: set[str]
    ) -> None:
        """Strict mode: every call head of the expanded tree must be known."""
        if not isinstance(node, Form) or node.head_name in DATA_FORMS:
            return
        if isinstance(node.head, Identifier) and not self._is_known(node.head, variables, functions):
            raise UnboundMacro(f"{node.head.name} is neither a macro nor a known operator")
        for child in node.items:
            self._check_operators(child, variables, functions)

    def _too_deep(self, node: Form, depth: int) -> ExpansionDepthExceeded:
        return ExpansionDepthExceeded(
            f"Expanding {node.head_name} exceeded the maximum expansion depth of {self.max_depth}",
            depth,
        )


def expand(node: Node, registry: Optional[MacroRegistry] = None, **options) -> Node:
    """Fully expand `node` using `registry` (the process-wide one by default)."""
    return Expander(registry, **options).expand(node)


def expand_1(node: Node, registry: Optional[MacroRegistry] = None, **options) -> Node:
    return Expander(registry, **options).expand_1(node)
