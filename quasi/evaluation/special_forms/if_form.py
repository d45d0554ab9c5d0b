from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError
from quasi.types.ast_nodes import Node
from quasi.types.environment import Environment


def is_true(value: LispValue) -> bool:
    # Truthiness: anything not nil or #f is true
    return value is not False and value is not None


def if_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    if len(tail) not in (2, 3):
        raise QuasiArityError("if requires a condition, a then-expression and an optional else")

    cond = evaluate_fn(tail[0], env, expander)
    if is_true(cond):
        return evaluate_fn(tail[1], env, expander)
    elif len(tail) > 2:
        return evaluate_fn(tail[2], env, expander)
    else:
        return False  # default "false" if no else
