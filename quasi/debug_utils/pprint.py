import json
from typing import Optional

from quasi.errors import QuasiTypeError
from quasi.evaluation.special_forms import SPECIAL_FORMS
from quasi.expansion.hygiene import is_renamed
from quasi.printer import format_atom
from quasi.types.ast_nodes import Form, Identifier, Literal, Node, Splice
from quasi.types.macro_registry import MacroRegistry

# ----------------- ANSI colors -----------------
RESET = "\033[0m"
COLOR_IDENTIFIER = "\033[94m"
COLOR_LITERAL = "\033[37m"
COLOR_SPECIAL_FORM = "\033[90m"
COLOR_MACRO = "\033[92m"
COLOR_RENAMED = "\033[96m"
COLOR_CALL_SITE = "\033[93m"
COLOR_SPLICE = "\033[91m"

# ----------------- Defaults -----------------
DEFAULT_OPTIONS = {
    "max_line_length": 80,
    "max_depth": 8,
    "display_legend": False,
    "show_lexical_ids": False,
    "color_identifiers": True,
    "color_literals": True,
    "color_special_forms": True,
    "color_macros": True,
    "color_renamed": True,
    "color_call_site": True,
    "color_splice": True,
}


def _paint(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{RESET}" if enabled else text


# ----------------- Colorize utility -----------------
def colorize(
    node: Node,
    registry: Optional[MacroRegistry] = None,
    call_site_ids: frozenset = frozenset(),
    options: dict = DEFAULT_OPTIONS,
) -> str:
    """Render a leaf node, colored by the role it plays in an expansion."""
    if isinstance(node, Literal):
        return _paint(format_atom(node.value), COLOR_LITERAL, options.get("color_literals", True))
    if not isinstance(node, Identifier):
        raise QuasiTypeError(f"colorize expects a leaf node, got {node!r}")

    text = node.name
    if options.get("show_lexical_ids", False):
        text = f"{text}/{node.lexical_id}"
    if registry is not None and registry.is_macro(node.name):
        return _paint(text, COLOR_MACRO, options.get("color_macros", True))
    if is_renamed(node.name):
        return _paint(text, COLOR_RENAMED, options.get("color_renamed", True))
    if node.lexical_id in call_site_ids:
        return _paint(text, COLOR_CALL_SITE, options.get("color_call_site", True))
    if node.name in SPECIAL_FORMS:
        return _paint(text, COLOR_SPECIAL_FORM, options.get("color_special_forms", True))
    return _paint(text, COLOR_IDENTIFIER, options.get("color_identifiers", True))


def legend() -> str:
    legend_items = [
        f"{COLOR_IDENTIFIER}Identifier{RESET}",
        f"{COLOR_LITERAL}Literal{RESET}",
        f"{COLOR_SPECIAL_FORM}Special Form{RESET}",
        f"{COLOR_MACRO}Macro{RESET}",
        f"{COLOR_RENAMED}Hygienically Renamed{RESET}",
        f"{COLOR_CALL_SITE}Call Site{RESET}",
        f"{COLOR_SPLICE}Splice,@{RESET}",
    ]
    return "Color Key: " + " | ".join(legend_items) + "\n"


# ----------------- Pretty printer -----------------
def pprint_ast(
    node: Node,
    indent: int = 0,
    registry: Optional[MacroRegistry] = None,
    call_site_ids: frozenset = frozenset(),
    options: dict = DEFAULT_OPTIONS,
    _current_depth: int = 0,
) -> str:
    """Pretty-print `node`, breaking forms that exceed max_line_length.

    Forms nested deeper than max_depth are elided, leaves never are.
    `call_site_ids` holds the lexical ids to highlight as call-site code.
    """
    legend_str = legend() if options.get("display_legend", False) and indent == 0 else ""

    if isinstance(node, (Literal, Identifier)):
        return legend_str + colorize(node, registry, call_site_ids, options)

    if _current_depth >= options.get("max_depth", 8):
        return legend_str + "…"

    if isinstance(node, Splice):
        inner = pprint_ast(node.node, indent, registry, call_site_ids, options, _current_depth + 1)
        return legend_str + _paint(",@", COLOR_SPLICE, options.get("color_splice", True)) + inner

    if not isinstance(node, Form):
        raise QuasiTypeError(f"Unhandled node shape: {node!r}")

    if not node.items:
        return legend_str + "()"

    parts = [
        pprint_ast(e, indent + 1, registry, call_site_ids, options, _current_depth + 1)
        for e in node.items
    ]

    single_line = "(" + " ".join(parts) + ")"
    if "\n" not in single_line and _visible_length(single_line) + indent * 2 <= options.get(
        "max_line_length", 80
    ):
        return legend_str + single_line

    aligned_lines = ["(" + parts[0]]
    for part in parts[1:]:
        aligned_lines.append("  " * (indent + 1) + part)
    aligned_lines[-1] += ")"
    return legend_str + "\n".join(aligned_lines)


def _visible_length(text: str) -> int:
    # ANSI escape sequences take no columns
    length = 0
    in_escape = False
    for ch in text:
        if ch == "\033":
            in_escape = True
        elif in_escape:
            if ch == "m":
                in_escape = False
        else:
            length += 1
    return length


# ----------------- Load JSON config -----------------
def load_options_from_json(json_str: str) -> dict:
    """Merge user options from JSON over the defaults; bad JSON yields the defaults."""
    try:
        user_opts = json.loads(json_str)
    except json.JSONDecodeError:
        return dict(DEFAULT_OPTIONS)
    if not isinstance(user_opts, dict):
        return dict(DEFAULT_OPTIONS)
    return {**DEFAULT_OPTIONS, **user_opts}


# ----------------- Example usage -----------------
if __name__ == "__main__":
    from quasi.interpreter import Interpreter

    interp = Interpreter(prelude="""
        (defmacro swap (a b)
          `(let ((tmp ,a)) (set ,a ,b) (set ,b tmp)))
    """)
    options = load_options_from_json(
        '{"max_line_length": 40, "display_legend": true, "show_lexical_ids": true}'
    )
    expanded = interp.macroexpand("(swap x y)")
    print(pprint_ast(expanded, call_site_ids=frozenset({interp.lexical_id}), options=options))
