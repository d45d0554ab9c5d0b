# Core type aliases for the quasi data model.
#
# Two representations of code exist side by side:
# - Template: what the reader produces and what Python callers hand to `quote`.
#   Plain Python types (list for compound forms, Symbol for names, int/float/str/
#   bool/None for atoms) with already-built AST nodes allowed anywhere.
# - Node: the immutable AST produced by the quoter (see quasi.types.ast_nodes).
#
# Runtime values produced by the evaluator are plain Python objects.

from typing import Any, Callable

# Structural template (reader output / quoter input)
Template = Any
# Runtime value alias
LispValue = Any

# Macro transformer: receives unevaluated argument nodes, returns a node
ExpansionFn = Callable[..., Any]

# Evaluator function type: passed into special forms and the application engine
EvaluatorFn = Callable[..., LispValue]
