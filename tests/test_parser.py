"""
Tests for the RAScript grammar and AST lowering.
"""

import pytest
from rascript.errors import ParseError
from rascript.parser.ast import (
    Array, Assignment, Comparison, ComparisonOperation, Conditional, ConditionalOperation,
    FunctionCall, FunctionDeclaration, IntegerConstant, Mathematic, MathematicOperation,
    Return, StringConstant, Variable,
)
from rascript.parser.parser import parse_script


def _value(text):
    """Parse `x = <text>` and return the right-hand side."""
    return parse_script(f"x = {text}").statements[0].value


def test_assignment_hex_and_decimal():
    script = parse_script("a = 0x1234\nb = 42")
    assert script.statements == [
        Assignment("a", IntegerConstant(0x1234)),
        Assignment("b", IntegerConstant(42)),
    ]


def test_string_escapes():
    assert _value(r'"say \"hi\""') == StringConstant('say "hi"')


def test_arithmetic_precedence():
    assert _value("a + b * c") == Mathematic(
        Variable("a"), MathematicOperation.ADD,
        Mathematic(Variable("b"), MathematicOperation.MULTIPLY, Variable("c")),
    )


def test_unary_minus():
    assert _value("-5") == IntegerConstant(-5)


def test_comparison():
    assert _value("byte(0x10) >= 3") == Comparison(
        FunctionCall("byte", [IntegerConstant(0x10)]),
        ComparisonOperation.GREATER_THAN_OR_EQUAL,
        IntegerConstant(3),
    )


def test_logical_precedence_and_flattening():
    expr = _value("a == 1 && b == 2 && c == 3 || d == 4")
    assert expr.operation == ConditionalOperation.OR
    assert len(expr.operands) == 2
    assert expr.operands[0].operation == ConditionalOperation.AND
    assert len(expr.operands[0].operands) == 3


def test_not():
    expr = _value("!(a == 1)")
    assert expr == Conditional(
        ConditionalOperation.NOT,
        [Comparison(Variable("a"), ComparisonOperation.EQUAL, IntegerConstant(1))],
    )


def test_named_arguments():
    expr = _value('f(1, title="T")')
    assert expr == FunctionCall("f", [IntegerConstant(1), Assignment("title", StringConstant("T"))])


def test_array():
    assert _value("[1, 2]") == Array([IntegerConstant(1), IntegerConstant(2)])
    assert _value("[]") == Array([])


def test_arrow_function():
    script = parse_script("function level() => byte(0x10)")
    assert script.statements[0] == FunctionDeclaration(
        "level", [], {}, [Return(FunctionCall("byte", [IntegerConstant(0x10)]))]
    )


def test_block_function_with_defaults_and_varargs():
    script = parse_script("function f(a, b = 2, ...) {\n  c = a + b\n  return c\n}")
    decl = script.statements[0]
    assert decl.parameters == ["a", "b", "..."]
    assert decl.defaults == {"b": IntegerConstant(2)}
    assert len(decl.body) == 2
    assert isinstance(decl.body[1], Return)


def test_comments_ignored():
    script = parse_script("/* block\ncomment */ a = 1 // trailing\n// whole line\nb = 2")
    assert len(script.statements) == 2


def test_header_metadata():
    script = parse_script("// Super Game\n// #ID = 1234\na = 1")
    assert script.title == "Super Game"
    assert script.game_id == 1234


def test_locations():
    script = parse_script("a = 1\nb = byte(0x10)")
    call = script.statements[1].value
    assert call.loc == (2, 5)


def test_syntax_error_has_location():
    with pytest.raises(ParseError) as exc:
        parse_script("a = (1 +\nb = 2")
    assert exc.value.code == "E001"
    assert exc.value.loc is not None


def test_varargs_must_be_last():
    with pytest.raises(ParseError, match="last parameter"):
        parse_script("function f(..., a) => a")
