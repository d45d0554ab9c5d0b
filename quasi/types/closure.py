"""Closure representation and argument binding for evaluated lambdas."""

from __future__ import annotations

from io import StringIO
from typing import Optional

from quasi import LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.types.ast_nodes import Form, Identifier, Node
from quasi.types.environment import Environment

REST = "&rest"


class Closure:
    """A first-class function with parameters, body, and closure env."""

    __slots__ = ("params", "rest", "body", "env", "name")

    def __init__(
        self,
        params: list[Identifier],
        body: Node,
        env: Environment,
        name: Optional[str] = None,
    ):
        required: list[Identifier] = []
        rest: Optional[Identifier] = None
        for i, p in enumerate(params):
            if not isinstance(p, Identifier):
                raise QuasiTypeError(f"Parameter must be an identifier, got {p!r}")
            if p.name == REST:
                if i != len(params) - 2:
                    raise QuasiArityError("Malformed parameter list: &rest must be followed by one name")
                rest = params[i + 1]
                break
            required.append(p)
        self.params = required
        self.rest = rest
        self.body = body
        self.env = env
        self.name = name

    @classmethod
    def from_param_form(
        cls, params: Node, body: Node, env: Environment, name: Optional[str] = None
    ) -> Closure:
        if not isinstance(params, Form):
            raise QuasiTypeError(f"Parameter list must be a form, got {params!r}")
        return cls(list(params.items), body, env, name)

    def extend_env(self, args: list[LispValue]) -> Environment:
        """Bind `args` to the parameters in a new frame over the closure env."""
        if len(args) < len(self.params) or (self.rest is None and len(args) > len(self.params)):
            expected = f"at least {len(self.params)}" if self.rest else str(len(self.params))
            raise QuasiArityError(
                f"{self.name or 'lambda'} expects {expected} argument(s), got {len(args)}"
            )
        local_env = Environment(outer=self.env)
        for param, arg in zip(self.params, args):
            local_env.define(param, arg)
        if self.rest is not None:
            local_env.define(self.rest, list(args[len(self.params):]))
        return local_env

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("(λ (")
            names = [p.name for p in self.params]
            if self.rest is not None:
                names += [REST, self.rest.name]
            buffer.write(" ".join(names))
            buffer.write("))")
            return buffer.getvalue()

    def __repr__(self) -> str:
        return str(self)
