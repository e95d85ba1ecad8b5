import pytest
import yaml
from pathlib import Path

from boar import boar_ast as ast
from boar.boar_lexer import Lexer
from boar.boar_parser import Parser, Precedence, parse

# --- Test Setup and Fixtures ---

CASES_DIR = Path(__file__).parent / "cases"


def load_cases(name):
    with (CASES_DIR / name).open() as f:
        return yaml.safe_load(f)


def parse_ok(source):
    program, errors = parse(source)
    assert errors == [], f"unexpected parse errors for {source!r}: {errors}"
    return program


def single_expression(source):
    program = parse_ok(source)
    assert len(program.statements) == 1, program.statements
    stmt = program.statements[0]
    assert isinstance(stmt, ast.ExpressionStatement)
    return stmt.expression


# --- Statements ---

@pytest.mark.parametrize("source, name, value", [
    ("let x = 5;", "x", 5),
    ("let y = true;", "y", True),
    ("let foobar = y;", "foobar", "y"),
])
def test_let_statements(source, name, value):
    program = parse_ok(source)
    stmt = program.statements[0]
    assert isinstance(stmt, ast.LetStatement)
    assert stmt.token_literal() == "let"
    assert stmt.name.value == name
    assert stmt.value.value == value


def test_let_without_semicolon():
    program = parse_ok("let a = 1 let b = 2")
    assert [s.name.value for s in program.statements] == ["a", "b"]


@pytest.mark.parametrize("source, rendered", [
    ("return 5;", "return 5;"),
    ("return x + 1;", "return (x + 1);"),
    ("return;", "return ;"),
])
def test_return_statements(source, rendered):
    program = parse_ok(source)
    stmt = program.statements[0]
    assert isinstance(stmt, ast.ReturnStatement)
    assert str(stmt) == rendered


def test_bare_return_has_no_value():
    stmt = parse_ok("return;").statements[0]
    assert stmt.return_value is None


def test_for_loop_statement():
    program = parse_ok("for (let i = 0; i < 10; i = i + 1) { puts(i); }")
    stmt = program.statements[0]
    assert isinstance(stmt, ast.ForLoopStatement)
    assert stmt.counter_var.name.value == "i"
    assert str(stmt.condition) == "(i < 10)"
    assert isinstance(stmt.update, ast.AssignmentExpression)
    assert str(stmt.update) == "i = (i + 1)"
    assert len(stmt.body.statements) == 1
    assert str(stmt) == "for (let i = 0; (i < 10); i = (i + 1)) puts(i)"


# --- Expressions ---

def test_identifier_expression():
    expr = single_expression("foobar;")
    assert isinstance(expr, ast.Identifier)
    assert expr.value == "foobar"
    assert expr.token_literal() == "foobar"


def test_literals():
    assert single_expression("5;").value == 5
    assert single_expression('"hello world";').value == "hello world"
    assert single_expression("true;").value is True
    assert single_expression("false;").value is False


@pytest.mark.parametrize("source, operator, operand", [
    ("!5;", "!", 5),
    ("-15;", "-", 15),
    ("!true;", "!", True),
])
def test_prefix_expressions(source, operator, operand):
    expr = single_expression(source)
    assert isinstance(expr, ast.PrefixExpression)
    assert expr.operator == operator
    assert expr.right.value == operand


@pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
def test_infix_expressions(operator):
    expr = single_expression(f"5 {operator} 6;")
    assert isinstance(expr, ast.InfixExpression)
    assert expr.left.value == 5
    assert expr.operator == operator
    assert expr.right.value == 6


@pytest.mark.parametrize("case", load_cases("precedence.yaml"), ids=lambda c: c["input"])
def test_operator_precedence_rendering(case):
    assert str(parse_ok(case["input"])) == case["expect"]


def test_if_expression():
    expr = single_expression("if (x < y) { x }")
    assert isinstance(expr, ast.IfExpression)
    assert str(expr.condition) == "(x < y)"
    assert str(expr.consequence) == "x"
    assert expr.alternative is None


def test_if_else_expression():
    expr = single_expression("if (x < y) { x } else { y }")
    assert str(expr.alternative) == "y"
    assert str(expr) == "if(x < y) xelse y"


def test_function_literal():
    expr = single_expression("fn(x, y) { x + y; }")
    assert isinstance(expr, ast.FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert str(expr.body) == "(x + y)"


@pytest.mark.parametrize("source, params", [
    ("fn() {};", []),
    ("fn(x) {};", ["x"]),
    ("fn(x, y, z) {};", ["x", "y", "z"]),
])
def test_function_parameters(source, params):
    expr = single_expression(source)
    assert [p.value for p in expr.parameters] == params


def test_call_expression():
    expr = single_expression("add(1, 2 * 3, 4 + 5);")
    assert isinstance(expr, ast.CallExpression)
    assert str(expr.function) == "add"
    assert [str(a) for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]


def test_array_literal():
    expr = single_expression("[1, 2 * 2, 3 + 3]")
    assert isinstance(expr, ast.ArrayLiteral)
    assert [str(e) for e in expr.elements] == ["1", "(2 * 2)", "(3 + 3)"]
    assert single_expression("[]").elements == ()


def test_index_expression():
    expr = single_expression("myArray[1 + 1]")
    assert isinstance(expr, ast.IndexExpression)
    assert str(expr.left) == "myArray"
    assert str(expr.index) == "(1 + 1)"


def test_hash_literal_with_string_keys():
    expr = single_expression('{"one": 1, "two": 2, "three": 3}')
    assert isinstance(expr, ast.HashLiteral)
    assert [(k.value, v.value) for k, v in expr.pairs] == [("one", 1), ("two", 2), ("three", 3)]


def test_hash_literal_with_expressions():
    expr = single_expression('{"one": 0 + 1, "two": 10 - 8}')
    assert [str(v) for _, v in expr.pairs] == ["(0 + 1)", "(10 - 8)"]


def test_empty_hash_literal():
    expr = single_expression("{}")
    assert isinstance(expr, ast.HashLiteral)
    assert expr.pairs == ()


def test_index_assignment():
    expr = single_expression("arr[0] = 5 * 2")
    assert isinstance(expr, ast.IndexAssignment)
    assert str(expr.left) == "arr"
    assert str(expr.index) == "0"
    assert str(expr.value) == "(5 * 2)"


def test_internal_function_call():
    expr = single_expression("arr.push(4, 5)")
    assert isinstance(expr, ast.InternalFunctionCall)
    assert expr.caller.value == "arr"
    assert expr.function.value == "push"
    assert [str(a) for a in expr.arguments] == ["4", "5"]


def test_assignment_expression():
    expr = single_expression("x = x + 1")
    assert isinstance(expr, ast.AssignmentExpression)
    assert expr.name.value == "x"
    assert str(expr.value) == "(x + 1)"


# --- Errors ---

@pytest.mark.parametrize("source, expected", [
    ("let x 5;", ["expected next token to be =, got INT instead"]),
    ("let = 10;", ["expected next token to be IDENT, got = instead"]),
    ("let 838383;", ["expected next token to be IDENT, got INT instead"]),
    ("let x = ; let y 5 =", [
        "no prefix parse function for ; found",
        "expected next token to be =, got INT instead",
    ]),
    ("(1 + 2", ["expected next token to be ), got EOF instead"]),
    ("fn(x, y) { x + y", ["expected next token to be }, got EOF instead"]),
    ("99999999999999999999", ['could not parse "99999999999999999999" as integer']),
    ("5 = 3", ["invalid assignment target: 5"]),
    ("(1 + 2).len()", ["invalid method call receiver: (1 + 2)"]),
])
def test_parse_errors(source, expected):
    _, errors = parse(source)
    assert errors == expected


def test_parser_recovers_and_keeps_later_statements():
    program, errors = parse("let = 1; let y = 2;")
    assert len(errors) == 1
    assert [str(s) for s in program.statements] == ["let y = 2;"]


def test_errors_accumulate_on_parser_instance():
    parser = Parser(Lexer("let x 5; let = 1; let 7;"))
    parser.parse_program()
    assert len(parser.errors) == 3


def test_largest_int64_literal_parses():
    expr = single_expression("9223372036854775807")
    assert expr.value == 2 ** 63 - 1


def test_precedence_ladder_order():
    assert Precedence.LOWEST < Precedence.EQUALS < Precedence.LESSGREATER < Precedence.SUM
    assert Precedence.SUM < Precedence.PRODUCT < Precedence.PREFIX < Precedence.CALL


# --- Tracing ---

def test_trace_prints_begin_and_end_lines(capsys):
    parse("1 + 2", trace=True)
    err = capsys.readouterr().err
    assert "BEGIN parse_expression_statement" in err
    assert "END parse_expression_statement" in err
    assert "\tBEGIN parse_expression" in err
    assert "BEGIN parse_infix_expression" in err


def test_trace_enabled_by_environment(monkeypatch, capsys):
    monkeypatch.setenv("BOAR_TRACE", "1")
    parse("x")
    assert "BEGIN parse_expression" in capsys.readouterr().err


def test_trace_is_off_by_default(monkeypatch, capsys):
    monkeypatch.delenv("BOAR_TRACE", raising=False)
    parse("1 + 2")
    assert capsys.readouterr().err == ""
