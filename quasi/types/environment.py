"""Runtime environment for evaluating expanded code.

Variables are keyed by Identifier, so two bindings only meet when both name
and lexical id agree: this is where hygiene becomes observable. Functions
defined with defun (and the builtins) are keyed by bare name, and call heads
fall back to them when no variable matches.
"""

from __future__ import annotations

from io import StringIO
from typing import Optional

from quasi import LispValue
from quasi.errors import QuasiTypeError, QuasiUnboundSymbol
from quasi.types.ast_nodes import Identifier


class Environment:
    """Hierarchical mapping of Identifiers (and function names) to values."""

    __slots__ = ("vars", "functions", "outer")

    def __init__(self, outer: Optional[Environment] = None):
        self.vars: dict[Identifier, LispValue] = {}
        self.functions: dict[str, LispValue] = {}
        self.outer: Environment | None = outer

    def define(self, name: Identifier, value: LispValue) -> None:
        """Bind `name` to `value` in this frame.

        Raises QuasiTypeError if `name` is not an Identifier.
        """
        if not isinstance(name, Identifier):
            raise QuasiTypeError(f"Cannot define {name!r}: not an identifier")
        self.vars[name] = value

    def find(self, name: Identifier) -> Optional[Environment]:
        """Find the nearest environment in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.vars:
                return env
            env = env.outer
        return None

    def set(self, name: Identifier, value: LispValue) -> None:
        """Update an existing binding for `name` in the environment chain.

        Raises QuasiUnboundSymbol if the identifier is not bound.
        """
        env = self.find(name)
        if env is None:
            raise QuasiUnboundSymbol(f"Cannot set unbound variable {name.name}")
        env.vars[name] = value

    def lookup(self, name: Identifier) -> LispValue:
        env = self.find(name)
        if env is None:
            raise QuasiUnboundSymbol(f"Cannot lookup unbound variable {name.name}")
        return env.vars[name]

    def define_function(self, name: str, fn: LispValue) -> None:
        self.functions[name] = fn

    def lookup_function(self, name: str) -> LispValue:
        """Resolve a function by bare name, innermost frame first."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.functions:
                return env.functions[name]
            env = env.outer
        raise QuasiUnboundSymbol(f"Cannot call undefined function {name}")

    def resolves(self, head: Identifier) -> bool:
        """True if `head` would resolve as a call: bound exactly, or a function by name."""
        if self.find(head) is not None:
            return True
        env: Optional[Environment] = self
        while env is not None:
            if head.name in env.functions:
                return True
            env = env.outer
        return False

    def resolve_callable(self, head: Identifier) -> LispValue:
        """Resolve a call head: an exact variable binding wins, else a function by name."""
        env = self.find(head)
        if env is not None:
            return env.vars[head]
        return self.lookup_function(head.name)

    def _write_vars(self, buffer: StringIO) -> None:
        """Write this frame's variables into the buffer in a compact form."""
        buffer.write("{")
        first = True
        for k, v in self.vars.items():
            if not first:
                buffer.write(", ")
            buffer.write(f"{k.name}/{k.lexical_id}: {v!r}")
            first = False
        buffer.write("}")

    def __str__(self) -> str:
        """Human-readable single-frame view with an indicator for parent."""
        with StringIO() as buffer:
            self._write_vars(buffer)
            if self.outer is not None:
                buffer.write(" -> ...")  # indicate parent exists
            return buffer.getvalue()

    def __repr__(self) -> str:
        """Detailed chain representation for debugging purposes."""
        chain = []
        env: Optional[Environment] = self
        while env is not None:
            with StringIO() as env_buf:
                env._write_vars(env_buf)
                chain.append(env_buf.getvalue())
            env = env.outer
        return "<Environment chain: " + " -> ".join(chain) + ">"
