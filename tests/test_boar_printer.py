import pytest
from boar.boar_printer import Printer
from boar.boar_parser import parse
from boar.boar_datatypes import (
    Integer, String, Array, Hash, Function, Builtin, ReturnValue, Error,
    Environment, TRUE, FALSE, NULL
)


@pytest.fixture
def printer():
    return Printer(indent_width=2)


def make_hash(*pairs):
    h = Hash()
    for k, v in pairs:
        h.set(k, v)
    return h


# Test cases: (id, object, expected_string)
FORMAT_TEST_CASES = [
    ("int", Integer(123), "123"),
    ("negative_int", Integer(-7), "-7"),
    ("str", String("hello"), "hello"),
    ("true", TRUE, "true"),
    ("false", FALSE, "false"),
    ("null", NULL, "null"),
    ("none", None, ""),
    ("empty_array", Array([]), "[]"),
    ("array", Array([Integer(1), Integer(2), Integer(3)]), "[1, 2, 3]"),
    ("array_of_strings", Array([String("a"), String("b")]), '["a", "b"]'),
    ("nested_array", Array([Integer(1), Array([TRUE, NULL])]), "[1, [true, null]]"),
    ("empty_hash", Hash(), "{}"),
    (
        "hash",
        make_hash((String("one"), Integer(1)), (Integer(2), String("two")), (TRUE, NULL)),
        '{"one": 1, 2: "two", true: null}',
    ),
    ("builtin", Builtin("len", lambda *a: NULL), "builtin function len"),
    ("return_value", ReturnValue(Integer(10)), "10"),
    ("error", Error("identifier not found: x"), "identifier not found: x"),
]


@pytest.mark.parametrize("case_id, obj, expected", FORMAT_TEST_CASES, ids=[c[0] for c in FORMAT_TEST_CASES])
def test_pformat(printer, case_id, obj, expected):
    assert printer.pformat(obj) == expected


def test_function_rendering(printer):
    program, errors = parse("fn(x, y) { x + y; }")
    assert errors == []
    literal = program.statements[0].expression
    fn = Function(literal.parameters, literal.body, Environment())
    assert printer.pformat(fn) == "fn(x, y) {\n  (x + y)\n}"


def test_empty_function_rendering(printer):
    program, _ = parse("fn() {}")
    literal = program.statements[0].expression
    fn = Function(literal.parameters, literal.body, Environment())
    assert printer.pformat(fn) == "fn() {}"


def test_indent_width_is_configurable():
    program, _ = parse("fn(a) { a }")
    literal = program.statements[0].expression
    fn = Function(literal.parameters, literal.body, Environment())
    assert Printer(indent_width=4).pformat(fn) == "fn(a) {\n    a\n}"


def test_unknown_objects_fall_back_to_repr(printer):
    assert printer.pformat(3.5) == "3.5"
