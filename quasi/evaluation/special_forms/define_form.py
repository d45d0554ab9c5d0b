from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.types.ast_nodes import Identifier, Node
from quasi.types.environment import Environment


def define_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    """
    (define name value)
    Binds the identifier itself, so the binding keeps its lexical identity.
    """
    if len(tail) != 2:
        raise QuasiArityError("define requires exactly 2 arguments")

    name, val_expr = tail
    if not isinstance(name, Identifier):
        raise QuasiTypeError(f"define name must be an identifier, got {name!r}")
    value = evaluate_fn(val_expr, env, expander)
    env.define(name, value)
    return None
