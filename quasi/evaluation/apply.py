"""Application engine.

Closures get a fresh frame binding their parameters; Python callables
(builtins) are invoked with the runtime env and the list of evaluated args.
"""

from __future__ import annotations

from typing import Callable

from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiTypeError
from quasi.types.closure import Closure
from quasi.types.environment import Environment


def apply(
    head: Closure | Callable[[Environment, list[LispValue]], LispValue] | object,
    args: list[LispValue],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    """Apply either a Closure or a Python callable."""
    if isinstance(head, Closure):
        call_env = head.extend_env(list(args))
        return evaluate_fn(head.body, call_env, expander)
    elif callable(head):
        return head(env, list(args))
    else:
        raise QuasiTypeError(f"Cannot apply non-function {head!r}")
