from __future__ import annotations

from typing import Optional

from quasi import LispValue, Template
from quasi.builtin.env_builtin import register
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.evaluation.evaluator import evaluate
from quasi.expansion.expander import Expander
from quasi.expansion.quoter import quote
from quasi.reader.parser import read, read_all
from quasi.types.ast_nodes import Node
from quasi.types.environment import Environment
from quasi.types.lexical import fresh_lexical_id
from quasi.types.macro_registry import MacroRegistry, TemplateMacro
from quasi.types.symbol import Symbol

DEFMACRO = Symbol("defmacro")


class Interpreter:
    """
    Reads source text, expands macros hygienically and evaluates the result.

    All call-site code fed to one interpreter is quoted with a single session
    lexical id, so top-level definitions made by one eval() are visible to the
    next. Macro bodies are quoted afresh on every expansion.
    """

    def __init__(
        self,
        registry: Optional[MacroRegistry] = None,
        env: Optional[Environment] = None,
        *,
        prelude: Optional[str] = None,
        **expander_options,
    ):
        self.registry = registry if registry is not None else MacroRegistry()
        self.env = env if env is not None else Environment()
        register(self.env)
        expander_options.setdefault("resolver", self.env.resolves)
        self.expander = Expander(self.registry, **expander_options)
        self.lexical_id = fresh_lexical_id()

        if prelude:
            self.eval_prelude(prelude)

    def eval_prelude(self, code: str) -> None:
        """Evaluate a string of code as prelude, discarding results."""
        for template in read_all(code):
            self._eval_template(template)

    def eval(self, code: str) -> LispValue:
        """Evaluate every expression in `code`.

        Returns None for empty input, the value for a single expression and a
        list of values otherwise.
        """
        results = [self._eval_template(t) for t in read_all(code)]
        if not results:
            return None
        if len(results) == 1:
            return results[0]
        return results

    def quote(self, code: str) -> Node:
        """Read one expression and quote it in this session's lexical context."""
        return quote(read(code), lexical_id=self.lexical_id)

    def macroexpand(self, code: str) -> Node:
        """Fully expand one expression without evaluating it."""
        return self.expander.expand(self.quote(code))

    def macroexpand_1(self, code: str) -> Node:
        """Expand the head macro of one expression a single time."""
        return self.expander.expand_1(self.quote(code))

    def _eval_template(self, template: Template) -> LispValue:
        if isinstance(template, list) and template and template[0] == DEFMACRO:
            self._defmacro(template[1:])
            return None
        node = quote(template, lexical_id=self.lexical_id)
        return evaluate(self.expander.expand(node), self.env, self.expander)

    def _defmacro(self, tail: list) -> TemplateMacro:
        """(defmacro name (params...) body)"""
        if len(tail) != 3:
            raise QuasiArityError("defmacro requires a name, a parameter list and one body form")
        name, params, body = tail
        if not isinstance(name, Symbol) or name.is_keyword:
            raise QuasiTypeError(f"Macro name must be a Symbol, got {name!r}")
        if not isinstance(params, list):
            raise QuasiTypeError("Macro parameter list must be a list")
        return self.registry.defmacro(name, params, body)


#  Example use-age:
if __name__ == "__main__":
    from quasi.logconfig import configure_root_logger
    from quasi.printer import to_string

    configure_root_logger()

    interp = Interpreter(prelude="""
        (defmacro unless (cond body)
          `(if (not ,cond) ,body))

        ;; tmp is introduced by the macro and renamed on every expansion
        (defmacro my-or (a b)
          `(let ((tmp ,a)) (if tmp tmp ,b)))

        ;; var! deliberately reaches into the caller's scope
        (defmacro reset-x ()
          `(set (var! x) 0))
    """)

    tests = [
        "(unless #f 1)                         ;; -> 1",
        "(let ((tmp 5)) (my-or #f tmp))        ;; -> 5",
        "(let ((x 19)) (reset-x) x)            ;; -> 0",
    ]
    for code in tests:
        print(code, "=>", interp.eval(code))
    print(to_string(interp.macroexpand("(my-or #f tmp)"), show_lexical_ids=True))
