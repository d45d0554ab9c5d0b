import pytest

from quasi.errors import QuasiTypeError
from quasi.expansion.quoter import quote
from quasi.printer import format_atom, format_value, to_string
from quasi.reader.parser import read
from quasi.types.ast_nodes import Form, Identifier, Literal, Splice
from quasi.types.closure import Closure
from quasi.types.environment import Environment
from quasi.types.symbol import Symbol


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, "#t"),
        (False, "#f"),
        (None, "nil"),
        (42, "42"),
        (-1.5, "-1.5"),
        ("hi", '"hi"'),
        ('say "hi"\n', '"say \\"hi\\"\\n"'),
        (Symbol(":k"), ":k"),
    ],
)
def test_format_atom(value, expected):
    assert format_atom(value) == expected


@pytest.mark.parametrize("value", [object(), float("inf"), float("nan")])
def test_format_atom_rejects_other_values(value):
    with pytest.raises(QuasiTypeError):
        format_atom(value)


@pytest.mark.parametrize("text", ["plain", 'with "quotes"', "tab\tand\nnewline", "back\\slash"])
def test_strings_read_back(text):
    printed = to_string(Literal(text))
    assert read(printed) == text


def test_show_lexical_ids():
    node = Form(Identifier("f", 3), (Identifier("x", 4), Literal(1)))
    assert to_string(node) == "(f x 1)"
    assert to_string(node, show_lexical_ids=True) == "(f/3 x/4 1)"


def test_bare_sequence_and_empty_form():
    assert to_string(Form(None, (Literal(1), Literal(2)))) == "(1 2)"
    assert to_string(Form(None, ())) == "()"


def test_splice_marker():
    assert to_string(Form(Identifier("list", 1), (Splice(Identifier("xs", 1)),))) == "(list ,@xs)"


def test_printed_form_reads_back_to_an_equivalent_template():
    source = '(let ((a 1.5) (b "s")) (if #t nil :k))'
    node = quote(read(source))
    assert read(to_string(node)) == read(source)


@pytest.mark.parametrize(
    "node",
    [
        Form(None, (Literal(1), Identifier("a", 1))),
        Form(Form(Identifier("f", 1), ()), (Literal(-0.5),)),
        Form(Identifier("g", 1), (Form(None, ()), Literal(1e-9))),
    ],
)
def test_hand_built_forms_read_back(node):
    text = to_string(node)
    assert to_string(quote(read(text))) == text
    assert quote(read(text), lexical_id=1) == node


def test_format_value():
    assert format_value([1, [2, "x"], None]) == '(1 (2 "x") nil)'
    assert format_value(float("inf")) == "inf"
    assert format_value(Identifier("a", 1)) == "a"
    assert format_value(Closure([Identifier("a", 1)], Literal(None), Environment())) == "(λ (a))"


def test_unhandled_node_shape():
    with pytest.raises(QuasiTypeError):
        to_string("not a node")
