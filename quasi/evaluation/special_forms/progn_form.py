from quasi import EvaluatorFn, LispValue
from quasi.types.ast_nodes import Node
from quasi.types.environment import Environment


def progn_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    result: LispValue = None
    for e in tail:
        result = evaluate_fn(e, env, expander)
    return result
