"""
Variable and function environments for script evaluation.

A scope chains to a lexical parent (function bodies see globals, never the
caller's locals) and records two context slots instead of typed lookup:
the call expression that created it and the script context collecting
achievements and leaderboards.
"""

from typing import TYPE_CHECKING, Dict, Optional

from ..parser.ast import Expression, FunctionCall

if TYPE_CHECKING:
    from .functions import FunctionDefinition
    from .script import AchievementScriptContext


class InterpreterScope:
    def __init__(
        self,
        parent: Optional["InterpreterScope"] = None,
        caller: Optional["InterpreterScope"] = None,
        function_call: Optional[FunctionCall] = None,
        script_context: Optional["AchievementScriptContext"] = None,
    ):
        self.parent = parent
        self.caller = caller
        self.function_call = function_call
        self._script_context = script_context
        self.variables: Dict[str, Expression] = {}
        self.functions: Dict[str, "FunctionDefinition"] = {}
        self.depth = caller.depth + 1 if caller is not None else 0

    @property
    def root(self) -> "InterpreterScope":
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    @property
    def script_context(self) -> Optional["AchievementScriptContext"]:
        scope = self
        while scope is not None:
            if scope._script_context is not None:
                return scope._script_context
            scope = scope.parent
        return None

    def get_variable(self, name: str) -> Optional[Expression]:
        """Innermost binding of `name`, or None."""
        scope = self
        while scope is not None:
            value = scope.variables.get(name)
            if value is not None:
                return value
            scope = scope.parent
        return None

    def define_variable(self, name: str, value: Expression) -> None:
        self.variables[name] = value

    def get_function(self, name: str) -> Optional["FunctionDefinition"]:
        scope = self
        while scope is not None:
            fn = scope.functions.get(name)
            if fn is not None:
                return fn
            scope = scope.parent
        return None

    def add_function(self, function: "FunctionDefinition") -> None:
        self.functions[function.name] = function
