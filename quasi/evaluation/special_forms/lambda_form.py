from quasi import EvaluatorFn, LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.types.ast_nodes import Form, Identifier, Literal, Node
from quasi.types.closure import Closure
from quasi.types.environment import Environment

PROGN = "progn"


def _body(forms: tuple[Node, ...], head_lexical_id: int) -> Node:
    # Zero forms yield nil, several run as an implicit progn
    if not forms:
        return Literal(None)
    if len(forms) == 1:
        return forms[0]
    return Form(Identifier(PROGN, head_lexical_id), forms)


def lambda_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    """(lambda (params) body...)"""
    if not tail:
        raise QuasiArityError("lambda requires at least a parameter list")
    params, *body_forms = tail
    return Closure.from_param_form(params, _body(tuple(body_forms), 0), env)


def defun_form(
    tail: tuple[Node, ...],
    env: Environment,
    expander,
    evaluate_fn: EvaluatorFn,
) -> LispValue:
    """(defun name (params) body...): define a function callable by bare name."""
    if len(tail) < 2:
        raise QuasiArityError("defun requires a name and a parameter list")
    name, params, *body_forms = tail
    if not isinstance(name, Identifier):
        raise QuasiTypeError(f"defun name must be an identifier, got {name!r}")
    fn = Closure.from_param_form(params, _body(tuple(body_forms), name.lexical_id), env, name.name)
    env.define_function(name.name, fn)
    return fn
