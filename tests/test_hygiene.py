import pytest

from quasi.errors import QuasiTypeError
from quasi.expansion.expander import Expander
from quasi.expansion.hygiene import FreshNames, is_renamed, rename_bindings
from quasi.expansion.quoter import quote
from quasi.reader.parser import read
from quasi.types.ast_nodes import Form, Identifier, Literal, Splice


CALLER = 1000
MACRO = 2000


def _call(source):
    return quote(read(source), lexical_id=CALLER)


def _expansion(source, bindings=None):
    return quote(read(source), bindings, lexical_id=MACRO)


def test_internal_variables_are_renamed():
    call_site = _call("(m x)")
    expanded = _expansion("(let ((x 1)) (+ x ,y))", {"y": call_site.args[0]})
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1), FreshNames())

    binding_pair = renamed.args[0].head
    body = renamed.args[1]
    fresh = binding_pair.head
    assert fresh.name == "x#1"
    assert fresh.lexical_id == MACRO
    # every occurrence of the internal x resolves to the same fresh name
    assert body.args[0] == fresh
    # the caller's x arrived through unquote and keeps its identity
    assert body.args[1] == Identifier("x", CALLER)


def test_function_heads_keep_their_bare_names():
    call_site = _call("(m a)")
    expanded = _expansion("(helper ,a)", {"a": call_site.args[0]})
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1))
    assert renamed.head == Identifier("helper", MACRO)
    assert renamed is expanded


def test_head_used_as_variable_elsewhere_is_renamed_everywhere():
    call_site = _call("(m)")
    expanded = _expansion("(let ((f (lambda (v) v))) (f f))")
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1), FreshNames())
    call = renamed.args[1]
    assert call.head == call.args[0]
    assert is_renamed(call.head.name)
    assert call.head.name.startswith("f#")
    # the binding site is renamed too
    assert renamed.args[0].head.head == call.head


def test_call_site_identifiers_are_untouched():
    call_site = _call("(m x)")
    expanded = Form(Identifier("list", MACRO), (Identifier("x", CALLER),))
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1))
    assert renamed.args[0] == Identifier("x", CALLER)


def test_unhygienic_identifiers_resolve_at_the_call_site():
    call_site = _call("(m)")
    expanded = _expansion("(set (var! x) 1)")
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1))
    assert renamed.args[0] == Identifier("x", CALLER)


def test_fresh_names_skip_names_in_use():
    call_site = _call("(m tmp#1)")
    expanded = _expansion("(list tmp)")
    renamed = rename_bindings(expanded, call_site, range(MACRO, MACRO + 1), FreshNames())
    assert renamed.args[0].name == "tmp#2"


def test_ids_outside_the_internal_range_are_not_renamed():
    call_site = _call("(m)")
    expanded = _expansion("(list x)")
    renamed = rename_bindings(expanded, call_site, range(1, 10))
    assert renamed.args[0] == Identifier("x", MACRO)


def test_splice_in_expansion_is_rejected():
    call_site = _call("(m)")
    expanded = Form(Identifier("list", MACRO), (Splice(Literal(1)),))
    with pytest.raises(QuasiTypeError):
        rename_bindings(expanded, call_site, range(MACRO, MACRO + 1))


def test_is_renamed():
    assert is_renamed("tmp#12")
    assert not is_renamed("tmp")
    assert not is_renamed("#3")


def test_repeated_expansions_never_collide(registry):
    registry.defmacro("with-tmp", [], read("`(let ((tmp 1)) tmp)"))
    expander = Expander(registry)
    call = quote(read("(with-tmp)"))
    fresh = set()
    for _ in range(50):
        expanded = expander.expand(call)
        name = expanded.args[1].name
        assert is_renamed(name)
        fresh.add(name)
    assert len(fresh) == 50