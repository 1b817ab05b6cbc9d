"""
Tests for scopes, function binding and expression reduction.
"""

import pytest
from rascript.config import RAScriptConfig
from rascript.errors import (
    CallDepthExceeded, CompileError, ParameterBindingError, TypeMismatch,
    UndefinedFunction, UndefinedVariable,
)
from rascript.interpreter.evaluator import replace_variables
from rascript.interpreter.functions import FunctionDefinition
from rascript.interpreter.script import AchievementScriptInterpreter
from rascript.parser.ast import Array, FunctionCall, IntegerConstant, StringConstant, Variable


def test_constant_folding(reduce):
    assert reduce("2 + 3 * 4") == IntegerConstant(14)
    assert reduce("7 / 2") == IntegerConstant(3)
    assert reduce("7 % 4") == IntegerConstant(3)


def test_division_truncates_toward_zero(reduce):
    assert reduce("-7 / 2") == IntegerConstant(-3)
    assert reduce("7 / -2") == IntegerConstant(-3)
    assert reduce("-7 % 2") == IntegerConstant(-1)
    assert reduce("7 % -2") == IntegerConstant(1)


def test_division_keeps_large_integers_exact(reduce):
    assert reduce("0x7FFFFFFFFFFFFFFF / 1") == IntegerConstant(0x7FFFFFFFFFFFFFFF)
    assert reduce("0x7FFFFFFFFFFFFFFF / 3") == IntegerConstant(0x7FFFFFFFFFFFFFFF // 3)


def test_string_concatenation(reduce):
    assert reduce('"Level " + 3') == StringConstant("Level 3")


def test_division_by_zero(reduce):
    with pytest.raises(CompileError, match="Division by zero"):
        reduce("1 / 0")


def test_memory_accessor_reduces_to_itself(reduce):
    assert reduce("byte(0x10 + 1)") == FunctionCall("byte", [IntegerConstant(0x11)])


def test_bit_reduces_to_specific_accessor(reduce):
    assert reduce("bit(3, 0x10)") == FunctionCall("bit3", [IntegerConstant(0x10)])


def test_accessor_requires_integer(reduce):
    with pytest.raises(TypeMismatch, match="address is not an integer"):
        reduce('byte("x")')


def test_prev_requires_accessor(reduce):
    with pytest.raises(TypeMismatch, match="memory accessor"):
        reduce("prev(5)")


def test_undefined_function(reduce):
    with pytest.raises(UndefinedFunction, match="Unknown function: nope") as exc:
        reduce("nope(1)")
    assert exc.value.code == "E101"
    assert exc.value.loc == (1, 10)


def test_undefined_variable(reduce):
    with pytest.raises(UndefinedVariable):
        reduce("missing + 1")


def test_too_many_positional_arguments(reduce):
    with pytest.raises(ParameterBindingError, match="Too many parameters passed to byte"):
        reduce("byte(1, 2)")


def test_missing_required_parameter(reduce):
    with pytest.raises(ParameterBindingError, match="Required parameter 'address'"):
        reduce("byte()")


def test_unknown_named_parameter(reduce):
    with pytest.raises(ParameterBindingError, match="does not have a size parameter"):
        reduce("byte(size=1)")


def test_positional_after_named(reduce):
    with pytest.raises(ParameterBindingError, match="follows named"):
        reduce("bit(index=1, 0x10)")


def test_varargs_collects_surplus_unevaluated(global_scope):
    """Surplus arguments are bound as an Array without being reduced."""
    captured = {}

    class Capture(FunctionDefinition):
        def __init__(self):
            super().__init__("capture", ["first", "..."])

        def replace_variables(self, scope):
            captured["first"] = self.get_parameter(scope, "first")
            captured["varargs"] = self.get_varargs(scope)
            return IntegerConstant(0)

    global_scope.add_function(Capture())
    call = FunctionCall("capture", [IntegerConstant(1), Variable("not_defined"), Variable("y")])
    replace_variables(call, global_scope)

    assert captured["first"] == IntegerConstant(1)
    assert captured["varargs"] == Array([Variable("not_defined"), Variable("y")])


def test_max_of_reduces_each_entry(reduce):
    assert reduce("max_of(byte(1), 2 + 3)") == FunctionCall(
        "max_of", [FunctionCall("byte", [IntegerConstant(1)]), IntegerConstant(5)]
    )


def test_max_of_fails_on_first_bad_entry(reduce):
    with pytest.raises(UndefinedFunction, match="first_bad"):
        reduce("max_of(byte(1), first_bad(), second_bad())")


def test_user_function_with_default(compile_script):
    result = compile_script(
        "function pts(a, b = 10) => a + b\n"
        'achievement("t", "d", pts(1), byte(1) == 1)'
    )
    assert result.achievements[0].points == 11


def test_named_argument_overrides_default(compile_script):
    result = compile_script(
        "function pts(a, b = 10) => a + b\n"
        'achievement("t", "d", pts(b=2, a=1), byte(1) == 1)'
    )
    assert result.achievements[0].points == 3


def test_parameters_shadow_globals(compile_script):
    result = compile_script(
        "a = 5\n"
        "function f(a) => a\n"
        'achievement("t", "d", f(7), byte(1) == 1)'
    )
    assert result.achievements[0].points == 7


def test_function_locals_do_not_leak(compile_script):
    with pytest.raises(UndefinedVariable, match="Unknown variable: x"):
        compile_script(
            "function f() {\n  x = 3\n  return x\n}\n"
            'achievement("t", "d", f() + x, byte(1) == 1)'
        )


def test_callee_cannot_see_caller_locals(compile_script):
    with pytest.raises(UndefinedVariable, match="Unknown variable: local"):
        compile_script(
            "function inner() => local\n"
            "function outer() {\n  local = 1\n  return inner()\n}\n"
            "x = outer()"
        )


def test_max_of_entries_see_function_parameters(compile_script):
    result = compile_script(
        "function lb_value(addr) => max_of(byte(addr), word(addr + 1))\n"
        'leaderboard("T", "D", byte(1) == 1, byte(1) == 2, byte(1) == 3, lb_value(0x10))'
    )
    assert result.leaderboards[0].value == "0xH000010$0x 000011"


def test_user_varargs_are_reduced_on_entry(compile_script):
    with pytest.raises(UndefinedVariable, match="undefined_extra"):
        compile_script(
            "function count_points(base, ...) => base\n"
            'achievement("t", "d", count_points(5, undefined_extra), byte(1) == 1)'
        )


def test_user_varargs_accept_surplus(compile_script):
    result = compile_script(
        "function count_points(base, ...) => base\n"
        'achievement("t", "d", count_points(5, 6, 7), byte(1) == 1)'
    )
    assert result.achievements[0].points == 5


def test_function_without_return(compile_script):
    with pytest.raises(TypeMismatch, match="f did not return a value"):
        compile_script("function f() {\n  a = 1\n}\nx = f()")


def test_side_effect_function_in_expression(compile_script):
    with pytest.raises(TypeMismatch, match="achievement did not return a value"):
        compile_script('x = achievement("t", "d", 1, byte(1) == 1)')


def test_return_at_top_level(compile_script):
    with pytest.raises(TypeMismatch, match="only allowed inside a function"):
        compile_script("return 1")


def test_expression_statement_rejected(compile_script):
    with pytest.raises(TypeMismatch, match="as statements"):
        compile_script("1 + 2")


def test_call_depth_limit():
    interpreter = AchievementScriptInterpreter(RAScriptConfig(max_call_depth=8))
    with pytest.raises(CallDepthExceeded):
        interpreter.compile("function f(x) => f(x)\ny = f(1)")


def test_run_reports_first_error():
    interpreter = AchievementScriptInterpreter(RAScriptConfig())
    ok = interpreter.run('achievement(1, 2, "three", byte(1) == 1)')
    assert ok is False
    assert isinstance(interpreter.error, TypeMismatch)
    assert interpreter.error.message == "title is not a string"


def test_run_success():
    interpreter = AchievementScriptInterpreter(RAScriptConfig())
    assert interpreter.run('achievement("t", "d", 5, byte(1) == 1)') is True
    assert interpreter.error is None
    assert len(interpreter.achievements) == 1
