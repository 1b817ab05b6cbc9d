"""
Base class for callable script functions.

A function declares an ordered parameter list (a trailing "..." collects
surplus positional arguments into an Array bound as "varargs") and
defaults for trailing optional parameters. It implements one of two
capabilities:

- replace_variables: reduce the call to a replacement expression
- evaluate: perform a side effect (register an achievement or leaderboard)
"""

from typing import Dict, List, Optional

from ..errors import ParameterBindingError, TypeMismatch
from ..parser.ast import (
    Array, Expression, ExpressionType, FunctionCall, IntegerConstant, StringConstant,
)
from .scope import InterpreterScope

VARARGS = "..."
VARARGS_VARIABLE = "varargs"


class FunctionDefinition:
    def __init__(self, name: str, parameters: Optional[List[str]] = None,
                 defaults: Optional[Dict[str, Expression]] = None):
        self.name = name
        self.parameters: List[str] = list(parameters or [])
        self.defaults: Dict[str, Expression] = dict(defaults or {})

    @property
    def has_varargs(self) -> bool:
        return bool(self.parameters) and self.parameters[-1] == VARARGS

    @property
    def fixed_parameters(self) -> List[str]:
        return self.parameters[:-1] if self.has_varargs else list(self.parameters)

    def evaluate(self, scope: InterpreterScope) -> None:
        """Statement context. Functions without side effects just reduce."""
        self.replace_variables(scope)

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        raise TypeMismatch(f"{self.name} did not return a value", loc=_call_loc(scope))

    # Parameter accessors used by builtin implementations

    def get_parameter(self, scope: InterpreterScope, name: str) -> Expression:
        value = scope.variables.get(name)
        if value is None:
            raise ParameterBindingError(f"No value provided for {name} parameter", loc=_call_loc(scope))
        return value

    def get_string_parameter(self, scope: InterpreterScope, name: str) -> StringConstant:
        value = self.get_parameter(scope, name)
        if value.type != ExpressionType.STRING:
            raise TypeMismatch(f"{name} is not a string", loc=value.loc or _call_loc(scope))
        return value

    def get_integer_parameter(self, scope: InterpreterScope, name: str) -> IntegerConstant:
        value = self.get_parameter(scope, name)
        if value.type != ExpressionType.INTEGER:
            raise TypeMismatch(f"{name} is not an integer", loc=value.loc or _call_loc(scope))
        return value

    def get_varargs(self, scope: InterpreterScope) -> Array:
        value = self.get_parameter(scope, VARARGS_VARIABLE)
        if value.type != ExpressionType.ARRAY:
            raise TypeMismatch("unexpected varargs", loc=value.loc or _call_loc(scope))
        return value

    def reemit(self, scope: InterpreterScope, parameters: List[Expression]) -> FunctionCall:
        """Reduce to a call of this function carrying already-reduced parameters."""
        call = scope.function_call
        return FunctionCall(self.name, parameters, location=call.location if call else None)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}({', '.join(self.parameters)})>"


def _call_loc(scope: InterpreterScope):
    return scope.function_call.loc if scope.function_call is not None else None


class OperandFunction(FunctionDefinition):
    """A function whose reduced call denotes one requirement operand (a memory read)."""

    def to_field(self, scope: InterpreterScope, call: FunctionCall):
        raise NotImplementedError


class ConditionFunction(FunctionDefinition):
    """A function whose reduced call compiles to requirements (once, never, ...)."""

    def build_trigger(self, context, call: FunctionCall) -> None:
        raise NotImplementedError

    def negated(self, call: FunctionCall) -> Optional[Expression]:
        """Replacement for `!call`, or None when there is no exact opposite."""
        return None
