import pytest

from quasi.errors import ExpansionDepthExceeded, QuasiTypeError, UnboundMacro
from quasi.expansion.expander import Expander, expand, expand_1
from quasi.expansion.hygiene import is_renamed
from quasi.expansion.quoter import quote, unquote
from quasi.printer import to_string
from quasi.reader.parser import read
from quasi.types.ast_nodes import Form, Identifier, Literal
from quasi.types.symbol import Symbol


# -------------------------
# Fixtures
# -------------------------

@pytest.fixture
def unless_registry(registry):
    """(unless cond body) => (if (not cond) body)"""

    def unless(cond, body):
        return quote([Symbol("if"), [Symbol("not"), unquote(cond)], unquote(body)])

    registry.register("unless", unless)
    return registry


# -------------------------
# Simple head-position macro
# -------------------------

def test_unless_expands_and_keeps_call_site_identities(unless_registry):
    ok = Identifier("ok", 500)
    err = Identifier("err", 500)
    call = Form(Identifier("unless", 500), (ok, Form(Identifier("raise", 500), (err,))))

    expanded = expand(call, unless_registry)

    assert expanded.head.name == "if"
    negation, body = expanded.args
    assert negation.head.name == "not"
    assert negation.args == (ok,)
    assert body == Form(Identifier("raise", 500), (err,))
    assert to_string(expanded) == "(if (not ok) (raise err))"


def test_expand_leaves_atoms_alone(registry):
    assert expand(Literal(1), registry) == Literal(1)
    ident = Identifier("x", 3)
    assert expand(ident, registry) is ident


def test_expand_without_macros_returns_same_tree(registry):
    node = quote(read("(f (g 1) (h x))"))
    assert expand(node, registry) is node


# -------------------------
# Nested macro expansion
# -------------------------

def test_macro_expanding_into_macro(registry):
    registry.defmacro("inc", [Symbol("x")], read("`(+ ,x 1)"))
    registry.defmacro("wrapinc", [Symbol("y")], read("`(inc ,y)"))
    expanded = expand(quote(read("(wrapinc 10)")), registry)
    assert to_string(expanded) == "(+ 10 1)"


def test_macros_nested_in_arguments(registry):
    registry.defmacro("inc", [Symbol("x")], read("`(+ ,x 1)"))
    expanded = expand(quote(read("(list (inc 1) (inc (inc 2)))")), registry)
    assert to_string(expanded) == "(list (+ 1 1) (+ (+ 2 1) 1))"


def test_macro_in_head_form(registry):
    registry.defmacro("id-fn", [], read("`(lambda (v) v)"))
    expanded = expand(quote(read("((id-fn) 3)")), registry)
    assert expanded.head.head.name == "lambda"
    assert expanded.args == (Literal(3),)


def test_quoted_forms_are_not_expanded(registry):
    registry.defmacro("inc", [Symbol("x")], read("`(+ ,x 1)"))
    node = quote(read("(list (quote (inc 1)) (inc 2))"))
    assert to_string(expand(node, registry)) == "(list (quote (inc 1)) (+ 2 1))"


def test_expand_1_single_step(registry):
    registry.defmacro("inc", [Symbol("x")], read("`(+ ,x 1)"))
    registry.defmacro("wrapinc", [Symbol("y")], read("`(inc ,y)"))
    node = quote(read("(wrapinc 10)"))
    assert to_string(expand_1(node, registry)) == "(inc 10)"
    not_a_macro = quote(read("(f 1)"))
    assert expand_1(not_a_macro, registry) is not_a_macro


def test_expand_head_only_touches_the_head(registry):
    registry.defmacro("inc", [Symbol("x")], read("`(+ ,x 1)"))
    registry.defmacro("wrapinc", [Symbol("y")], read("`(inc ,y)"))
    node = quote(read("(wrapinc (inc 1))"))
    assert to_string(Expander(registry).expand_head(node)) == "(+ (inc 1) 1)"


# -------------------------
# Hygiene through the expander
# -------------------------

def test_macro_binding_does_not_capture_call_site_variable(registry):
    registry.defmacro("my-or", [Symbol("a"), Symbol("b")], read("`(let ((tmp ,a)) (if tmp tmp ,b))"))
    call = quote(read("(my-or #f tmp)"))
    caller_tmp = call.args[1]

    expanded = expand(call, registry)

    macro_tmp = expanded.args[0].head.head
    if_form = expanded.args[1]
    assert is_renamed(macro_tmp.name)
    assert macro_tmp != caller_tmp
    assert if_form.args[0] == macro_tmp
    assert if_form.args[2] == caller_tmp


# -------------------------
# Depth guard
# -------------------------

def test_self_recursive_macro_hits_depth_limit(registry):
    registry.defmacro("forever", [], read("`(forever)"))
    with pytest.raises(ExpansionDepthExceeded) as info:
        expand(quote(read("(forever)")), registry, max_depth=10)
    assert info.value.depth == 10


def test_self_recursive_macro_in_expand_head(registry):
    registry.defmacro("forever", [], read("`(forever)"))
    with pytest.raises(ExpansionDepthExceeded):
        Expander(registry, max_depth=5).expand_head(quote(read("(forever)")))


def test_growing_recursive_macro_hits_depth_limit(registry):
    registry.defmacro("grow", [Symbol("x")], read("`(list (grow ,x))"))
    with pytest.raises(ExpansionDepthExceeded):
        expand(quote(read("(grow 1)")), registry, max_depth=20)


def test_depth_limit_from_environment(registry, monkeypatch):
    monkeypatch.setenv("QUASI_MAX_EXPANSION_DEPTH", "3")
    registry.defmacro("forever", [], read("`(forever)"))
    expander = Expander(registry)
    assert expander.max_depth == 3
    with pytest.raises(ExpansionDepthExceeded):
        expander.expand(quote(read("(forever)")))


def test_terminating_recursion_within_limit(registry):
    def countdown(n):
        if n.value == 0:
            return Literal("done")
        return quote([Symbol("countdown"), n.value - 1])

    registry.register("countdown", countdown)
    assert expand(quote(read("(countdown 5)")), registry, max_depth=6) == Literal("done")


def test_invalid_max_depth(registry):
    with pytest.raises(ValueError):
        Expander(registry, max_depth=0)


# -------------------------
# Strict mode
# -------------------------

def test_strict_mode_rejects_unknown_heads(registry):
    with pytest.raises(UnboundMacro):
        expand(quote(read("(mystery 1)")), registry, strict=True)


def test_strict_mode_accepts_operators_and_binding_lists(registry):
    node = quote(read("(let ((x 1) (y (+ 1 2))) (defun f (a b) (+ a b)) (lambda (z) z) (if x y nil))"))
    assert expand(node, registry, strict=True) is node


def test_strict_mode_still_checks_binding_values(registry):
    with pytest.raises(UnboundMacro):
        expand(quote(read("(let ((x (mystery))) x)")), registry, strict=True)


def test_strict_mode_accepts_heads_bound_in_the_tree(registry):
    node = quote(read("(let ((f (lambda (v) v))) (defun g (a) (f a)) (g (f 1)))"))
    assert expand(node, registry, strict=True) is node


def test_strict_mode_binding_is_per_lexical_id(registry):
    f_binding = quote(read("(lambda (f) f)"))
    other_f = quote(read("(f 1)"))
    node = Form(Identifier("list", 1), (f_binding, other_f))
    with pytest.raises(UnboundMacro):
        expand(node, registry, strict=True)


def test_strict_mode_resolver(registry):
    node = quote(read("(helper 1)"))
    assert expand(node, registry, strict=True, resolver=lambda head: head.name == "helper") is node
    with pytest.raises(UnboundMacro):
        expand(node, registry, strict=True, resolver=lambda head: False)


def test_strict_mode_custom_operators(registry):
    node = quote(read("(mystery 1)"))
    assert expand(node, registry, strict=True, operators={"mystery"}) is node


def test_strict_mode_from_environment(registry, monkeypatch):
    monkeypatch.setenv("QUASI_STRICT_EXPANSION", "true")
    with pytest.raises(UnboundMacro):
        expand(quote(read("(mystery 1)")), registry)


def test_lenient_mode_passes_unknown_heads(registry):
    node = quote(read("(mystery 1)"))
    assert expand(node, registry) is node


# -------------------------
# Transformer results
# -------------------------

def test_transformer_atoms_are_coerced(registry):
    registry.register("answer", lambda: 42)
    expanded = expand(quote(read("(list (answer))")), registry)
    assert expanded.args == (Literal(42),)


def test_transformer_returning_garbage_fails(registry):
    registry.register("bad", lambda: object())
    with pytest.raises(QuasiTypeError):
        expand(quote(read("(bad)")), registry)
