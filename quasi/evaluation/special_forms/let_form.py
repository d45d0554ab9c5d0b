"""Special form: let.

(let ((var1 val1) (var2 val2) ...) body...)

Values are evaluated in the enclosing environment, then bound together in a
new frame in which the body runs as an implicit progn.
"""

from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.evaluation.special_forms.progn_form import progn_form
from quasi.types.ast_nodes import Form, Identifier, Node
from quasi.types.environment import Environment


def let_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    if len(tail) < 2:
        raise QuasiArityError("let requires bindings and at least one body form")

    bindings, *body = tail
    if not isinstance(bindings, Form):
        raise QuasiTypeError("let bindings must be a list")

    values: list[tuple[Identifier, LispValue]] = []
    for b in bindings.items:
        if not isinstance(b, Form) or len(b.items) != 2:
            raise QuasiTypeError(f"let binding must be a list of two elements, got {b!r}")
        var, val = b.items
        if not isinstance(var, Identifier):
            raise QuasiTypeError(f"let binding name must be an identifier, got {var!r}")
        values.append((var, evaluate_fn(val, env, expander)))

    local_env = Environment(outer=env)
    for var, value in values:
        local_env.define(var, value)
    return progn_form(tuple(body), local_env, expander, evaluate_fn)
