from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError
from quasi.types.ast_nodes import Node
from quasi.types.environment import Environment


def quote_form(
    tail: tuple[Node, ...], env: Environment, expander, evaluate_fn: EvaluatorFn
) -> LispValue:
    # The quoted node is returned as data, unevaluated
    if len(tail) != 1:
        raise QuasiArityError("quote expects exactly 1 argument")
    return tail[0]
