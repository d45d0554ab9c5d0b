from __future__ import annotations

import inspect
import logging
import threading
from typing import Callable, Optional, Union

from quasi import ExpansionFn, Template
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.types.ast_nodes import Identifier, Node
from quasi.types.symbol import Symbol

logger = logging.getLogger(__name__)

MacroName = Union[str, Symbol, Identifier]

REST = Symbol("&rest")


def macro_name(name: MacroName) -> str:
    if isinstance(name, Symbol):
        return name.id
    if isinstance(name, Identifier):
        return name.name
    if isinstance(name, str) and name:
        return name
    raise QuasiTypeError(f"Macro name must be a str, Symbol or Identifier, got {name!r}")


class TemplateMacro:
    """
    A macro written as a template, as produced by (defmacro name (params) body).

    Parameters are bound to the unevaluated argument nodes and the body is
    evaluated at quote time, which for the usual quasiquote body builds the
    expansion. `&rest name` binds the remaining arguments as a list, ready for
    unquote-splicing.
    """

    __slots__ = ("name", "params", "rest", "body")

    def __init__(self, name: str, params: list, body: Template):
        required: list[str] = []
        rest: Optional[str] = None
        it = iter(params)
        for p in it:
            if not isinstance(p, Symbol) or p.is_keyword:
                raise QuasiTypeError(f"Macro parameter must be a Symbol, got {p!r}")
            if p == REST:
                rest_sym = next(it, None)
                if not isinstance(rest_sym, Symbol) or next(it, None) is not None:
                    raise QuasiTypeError("&rest must be followed by exactly one parameter")
                rest = rest_sym.id
                break
            required.append(p.id)
        self.name = name
        self.params = required
        self.rest = rest
        self.body = body

    def __call__(self, *args: Node) -> Node:
        # Imported lazily: the quoter's evaluator is the macro body language
        from quasi.expansion.quoter import evaluate_unquoted

        if len(args) < len(self.params) or (self.rest is None and len(args) > len(self.params)):
            expected = f"at least {len(self.params)}" if self.rest else str(len(self.params))
            raise QuasiArityError(
                f"Macro {self.name} expects {expected} argument(s), got {len(args)}"
            )
        bindings: dict[str, object] = dict(zip(self.params, args))
        if self.rest is not None:
            bindings[self.rest] = list(args[len(self.params):])
        return evaluate_unquoted(self.body, bindings)

    def __repr__(self) -> str:
        params = " ".join(self.params + ([f"&rest {self.rest}"] if self.rest else []))
        return f"<TemplateMacro {self.name} ({params})>"


class MacroRegistry:
    """
    Maps macro names to transformers.

    A transformer is any callable taking the unevaluated argument nodes of a
    call and returning a node. Registration is expected to finish before
    expansion starts; writes are serialized, reads take no lock.
    """

    def __init__(self):
        self.macros: dict[str, ExpansionFn] = {}
        self._lock = threading.Lock()

    def register(self, name: MacroName, transformer: ExpansionFn) -> None:
        if not callable(transformer):
            raise QuasiTypeError(f"Macro transformer must be callable, got {transformer!r}")
        key = macro_name(name)
        with self._lock:
            if key in self.macros:
                logger.debug("redefining macro %s", key)
            self.macros[key] = transformer
        logger.debug("registered macro %s", key)

    define_macro = register

    def defmacro(self, name: MacroName, params: list, body: Template) -> TemplateMacro:
        """Register a template macro and return it."""
        key = macro_name(name)
        macro = TemplateMacro(key, list(params), body)
        self.register(key, macro)
        return macro

    def unregister(self, name: MacroName) -> None:
        with self._lock:
            self.macros.pop(macro_name(name), None)

    def lookup(self, name: MacroName) -> Optional[ExpansionFn]:
        return self.macros.get(macro_name(name))

    def is_macro(self, name: MacroName) -> bool:
        return macro_name(name) in self.macros

    def names(self) -> list[str]:
        return sorted(self.macros)

    def invoke(self, name: MacroName, args: tuple[Node, ...]) -> object:
        """Call the transformer registered under `name` with `args`.

        Python transformers are arity-checked against their signature first so
        a wrong call surfaces as QuasiArityError rather than a bare TypeError.
        """
        key = macro_name(name)
        transformer = self.macros[key]
        if not isinstance(transformer, TemplateMacro):
            _check_signature(key, transformer, args)
        return transformer(*args)

    def __contains__(self, name: MacroName) -> bool:
        return self.is_macro(name)

    def __len__(self) -> int:
        return len(self.macros)


def _check_signature(name: str, fn: Callable, args: tuple) -> None:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without an introspectable signature are called as-is
        return
    try:
        sig.bind(*args)
    except TypeError as exc:
        raise QuasiArityError(f"Macro {name}: {exc}") from None


# -------------------------
# Process-wide default registry
# -------------------------
macros: MacroRegistry = MacroRegistry()
