"""
Recursive-descent evaluation of expression trees.

`replace_variables` reduces an expression in a scope: variables are
substituted, constant arithmetic is folded and function calls are bound
and dispatched. `execute` runs statements. The first error raised
anywhere aborts the whole walk unchanged.
"""

import logging
from typing import List, Optional

from ..errors import (
    CallDepthExceeded, CompileError, ParameterBindingError, TypeMismatch,
    UndefinedFunction, UndefinedVariable,
)
from ..parser.ast import (
    Array, Comparison, Conditional, Expression, ExpressionType, FunctionCall,
    FunctionDeclaration, IntegerConstant, Mathematic, MathematicOperation, StringConstant,
)
from .functions import VARARGS, VARARGS_VARIABLE, FunctionDefinition
from .scope import InterpreterScope

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 64


class UserFunction(FunctionDefinition):
    """Function declared in script source."""

    def __init__(self, declaration: FunctionDeclaration):
        super().__init__(declaration.name, declaration.parameters, declaration.defaults)
        self.declaration = declaration

    def _expand_varargs(self, scope: InterpreterScope) -> None:
        if self.has_varargs:
            varargs = self.get_varargs(scope)
            entries = [replace_variables(e, scope.caller) for e in varargs.entries]
            scope.define_variable(VARARGS_VARIABLE, Array(entries, location=varargs.location))

    def evaluate(self, scope: InterpreterScope) -> None:
        self._expand_varargs(scope)
        execute(self.declaration.body, scope)

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        self._expand_varargs(scope)
        result = execute(self.declaration.body, scope)
        if result is None:
            raise TypeMismatch(f"{self.name} did not return a value", loc=scope.function_call.loc)
        return result


def replace_variables(expr: Expression, scope: InterpreterScope) -> Expression:
    t = expr.type
    if t in (ExpressionType.STRING, ExpressionType.INTEGER):
        return expr

    if t == ExpressionType.VARIABLE:
        value = scope.get_variable(expr.name)
        if value is None:
            raise UndefinedVariable(f"Unknown variable: {expr.name}", loc=expr.loc)
        return value

    if t == ExpressionType.ARRAY:
        return Array([replace_variables(e, scope) for e in expr.entries], location=expr.location)

    if t == ExpressionType.MATHEMATIC:
        left = replace_variables(expr.left, scope)
        right = replace_variables(expr.right, scope)
        return _combine(expr, left, right)

    if t == ExpressionType.COMPARISON:
        left = replace_variables(expr.left, scope)
        right = replace_variables(expr.right, scope)
        return Comparison(left, expr.operation, right, location=expr.location)

    if t == ExpressionType.CONDITIONAL:
        operands = [replace_variables(o, scope) for o in expr.operands]
        return Conditional(expr.operation, operands, location=expr.location)

    if t == ExpressionType.FUNCTION_CALL:
        function, function_scope = bind_call(expr, scope)
        logger.debug(f"Reducing {expr.name} at depth {function_scope.depth}")
        return function.replace_variables(function_scope)

    raise TypeMismatch(f"{t.value} is not an expression", loc=expr.loc)


def _combine(expr: Mathematic, left: Expression, right: Expression) -> Expression:
    op = expr.operation
    if left.type == ExpressionType.INTEGER and right.type == ExpressionType.INTEGER:
        a, b = left.value, right.value
        if op == MathematicOperation.ADD:
            value = a + b
        elif op == MathematicOperation.SUBTRACT:
            value = a - b
        elif op == MathematicOperation.MULTIPLY:
            value = a * b
        elif b == 0:
            raise CompileError("Division by zero", loc=expr.loc)
        else:
            # integer division truncates toward zero; the remainder takes the dividend's sign
            quotient = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                quotient = -quotient
            value = quotient if op == MathematicOperation.DIVIDE else a - b * quotient
        return IntegerConstant(value, location=expr.location)

    if op == MathematicOperation.ADD and (
        left.type == ExpressionType.STRING or right.type == ExpressionType.STRING
    ):
        if left.type in (ExpressionType.STRING, ExpressionType.INTEGER) and \
                right.type in (ExpressionType.STRING, ExpressionType.INTEGER):
            return StringConstant(f"{left.value}{right.value}", location=expr.location)
        raise TypeMismatch("Only strings and integers can be appended to a string", loc=expr.loc)

    if left.type == ExpressionType.STRING or right.type == ExpressionType.STRING:
        raise TypeMismatch(f"Cannot apply '{op.value}' to a string", loc=expr.loc)

    return Mathematic(left, op, right, location=expr.location)


def bind_call(call: FunctionCall, scope: InterpreterScope,
              max_depth: Optional[int] = None) -> tuple[FunctionDefinition, InterpreterScope]:
    """Resolve `call` and bind its arguments into a new child scope.

    Arguments are reduced in the caller's scope in call-site order.
    Surplus positional arguments of a variadic function are collected
    unevaluated into an Array bound as "varargs".
    """
    function = scope.get_function(call.name)
    if function is None:
        raise UndefinedFunction(f"Unknown function: {call.name}", loc=call.loc)

    root = scope.root
    if max_depth is None:
        context = root.script_context
        max_depth = context.max_call_depth if context is not None else DEFAULT_MAX_CALL_DEPTH
    if scope.depth >= max_depth:
        raise CallDepthExceeded(f"Maximum call depth ({max_depth}) exceeded calling {call.name}", loc=call.loc)

    function_scope = InterpreterScope(parent=root, caller=scope, function_call=call)
    fixed = function.fixed_parameters
    surplus: List[Expression] = []
    positional_index = 0
    seen_named = False

    for arg in call.parameters:
        if arg.type == ExpressionType.ASSIGNMENT:
            seen_named = True
            if arg.name not in fixed:
                raise ParameterBindingError(f"{function.name} does not have a {arg.name} parameter", loc=arg.loc)
            if arg.name in function_scope.variables:
                raise ParameterBindingError(f"{arg.name} specified more than once", loc=arg.loc)
            function_scope.define_variable(arg.name, replace_variables(arg.value, scope))
            continue

        if seen_named:
            raise ParameterBindingError("Positional argument follows named argument", loc=arg.loc)

        if positional_index < len(fixed):
            function_scope.define_variable(fixed[positional_index], replace_variables(arg, scope))
            positional_index += 1
        elif function.has_varargs:
            surplus.append(arg)
        else:
            raise ParameterBindingError(f"Too many parameters passed to {function.name}", loc=arg.loc)

    for name in fixed:
        if name in function_scope.variables:
            continue
        default = function.defaults.get(name)
        if default is None:
            raise ParameterBindingError(f"Required parameter '{name}' not provided to {function.name}", loc=call.loc)
        function_scope.define_variable(name, replace_variables(default, function_scope))

    if function.has_varargs:
        function_scope.define_variable(VARARGS_VARIABLE, Array(surplus, location=call.location))

    return function, function_scope


def execute(statements: List[Expression], scope: InterpreterScope) -> Optional[Expression]:
    """Run statements in order. Returns the value of the first `return`, if any."""
    for statement in statements:
        t = statement.type
        if t == ExpressionType.RETURN:
            return replace_variables(statement.value, scope)

        if t == ExpressionType.ASSIGNMENT:
            scope.define_variable(statement.name, replace_variables(statement.value, scope))
        elif t == ExpressionType.FUNCTION_DECLARATION:
            if VARARGS in statement.parameters[:-1]:
                raise ParameterBindingError("'...' must be the last parameter", loc=statement.loc)
            scope.root.add_function(UserFunction(statement))
        elif t == ExpressionType.FUNCTION_CALL:
            function, function_scope = bind_call(statement, scope)
            logger.debug(f"Evaluating {statement.name} at depth {function_scope.depth}")
            function.evaluate(function_scope)
        else:
            raise TypeMismatch("Only assignments, function declarations and calls are allowed as statements",
                               loc=statement.loc)
    return None
