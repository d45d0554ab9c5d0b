from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.types.ast_nodes import Identifier, Node
from quasi.types.environment import Environment


def set_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    if len(tail) != 2:
        raise QuasiArityError("set requires exactly 2 arguments: (set var value)")
    var, val_expr = tail
    if not isinstance(var, Identifier):
        raise QuasiTypeError(f"set first argument must be an identifier, got {var!r}")
    value = evaluate_fn(val_expr, env, expander)
    env.set(var, value)

    return value
