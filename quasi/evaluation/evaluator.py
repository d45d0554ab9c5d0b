"""Evaluator for expanded ASTs.

This is the reference-resolution pass for hygiene: variables resolve by
Identifier (name and lexical id), call heads by exact binding first and by
bare name otherwise. Macro calls still present in the tree are expanded on
the way when an expander is supplied.
"""

from __future__ import annotations

from quasi import LispValue
from quasi.errors import QuasiTypeError
from quasi.evaluation.apply import apply
from quasi.evaluation.special_forms import SPECIAL_FORMS
from quasi.types.ast_nodes import Form, Identifier, Literal, Node, Splice
from quasi.types.environment import Environment


def evaluate(node: Node, env: Environment, expander=None) -> LispValue:
    match node:
        case Literal(value=value):
            return value

        case Identifier():
            return env.lookup(node)

        case Form(head=None, args=args):
            # Bare sequence, e.g. (1 2 3): a list of values
            return [evaluate(arg, env, expander) for arg in args]

        case Form(head=Identifier(name=name) as head, args=args):
            if expander is not None and expander.registry.is_macro(name):
                return evaluate(expander.expand(node), env, expander)
            if name in SPECIAL_FORMS:
                return SPECIAL_FORMS[name](args, env, expander, evaluate)
            fn = env.resolve_callable(head)
            values = [evaluate(arg, env, expander) for arg in args]
            return apply(fn, values, env, expander, evaluate)

        case Form(head=Form() as head, args=args):
            # Evaluate head if it is a form, e.g. ((lambda (x) x) 1)
            fn = evaluate(head, env, expander)
            values = [evaluate(arg, env, expander) for arg in args]
            return apply(fn, values, env, expander, evaluate)

        case Splice():
            raise QuasiTypeError("Splice marker cannot be evaluated")

    raise QuasiTypeError(f"Unhandled node shape: {node!r}")
