"""
Builtin script functions.

Memory accessors and condition wrappers reduce to calls of themselves with
reduced parameters; TriggerBuilderContext interprets those calls when it
compiles a condition or value. `achievement` and `leaderboard` are the only
functions with side effects: they register model objects on the active
script context.
"""

import dataclasses
import logging
from typing import List

from ..data.achievement import Leaderboard, ValueFormat, parse_format
from ..data.field import Field, FieldSize, SIZE_NAMES
from ..data.requirement import RequirementType
from ..errors import ParameterBindingError, TypeMismatch, UnsupportedFormat
from ..parser.ast import Expression, ExpressionType, FunctionCall, IntegerConstant, StringConstant
from ..trigger.context import ALWAYS_FALSE, ALWAYS_TRUE, TriggerBuilderContext
from .evaluator import replace_variables
from .functions import ConditionFunction, FunctionDefinition, OperandFunction, VARARGS
from .scope import InterpreterScope

logger = logging.getLogger(__name__)

_BITS = [FieldSize.BIT0, FieldSize.BIT1, FieldSize.BIT2, FieldSize.BIT3,
         FieldSize.BIT4, FieldSize.BIT5, FieldSize.BIT6, FieldSize.BIT7]


def _source_line(function: FunctionDefinition, scope: InterpreterScope):
    call = scope.function_call
    if call is not None and call.name == function.name and call.location is not None:
        return call.location.line
    return None


# Memory operands

class MemoryAccessorFunction(OperandFunction):
    def __init__(self, size: FieldSize):
        super().__init__(SIZE_NAMES[size], ["address"])
        self.size = size

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        address = self.get_integer_parameter(scope, "address")
        if not 0 <= address.value <= 0xFFFFFFFF:
            raise TypeMismatch(f"Address {address.value} is outside the 32-bit range", loc=address.loc)
        return self.reemit(scope, [address])

    def to_field(self, scope: InterpreterScope, call: FunctionCall) -> Field:
        return Field.memory(self.size, call.parameters[0].value)


class BitFunction(FunctionDefinition):
    """bit(index, address) -> bitN(address)"""

    def __init__(self):
        super().__init__("bit", ["index", "address"])

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        index = self.get_integer_parameter(scope, "index")
        if not 0 <= index.value <= 7:
            raise TypeMismatch("index must be between 0 and 7", loc=index.loc)
        address = self.get_integer_parameter(scope, "address")
        call = FunctionCall(SIZE_NAMES[_BITS[index.value]], [address], location=scope.function_call.location)
        return replace_variables(call, scope.root)


class PrevFunction(OperandFunction):
    def __init__(self):
        super().__init__("prev", ["accessor"])

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        accessor = self.get_parameter(scope, "accessor")
        if accessor.type != ExpressionType.FUNCTION_CALL or \
                not isinstance(scope.get_function(accessor.name), MemoryAccessorFunction):
            raise TypeMismatch("accessor did not evaluate to a memory accessor", loc=accessor.loc)
        return self.reemit(scope, [accessor])

    def to_field(self, scope: InterpreterScope, call: FunctionCall) -> Field:
        accessor = call.parameters[0]
        current = scope.get_function(accessor.name).to_field(scope, accessor)
        return Field.previous(current.size, current.value)


# Condition wrappers

class ModifierFunction(ConditionFunction):
    """Wraps a single comparison and adjusts the last requirement it produces."""

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        return self.reemit(scope, [self.get_parameter(scope, p) for p in self.parameters])

    def build_trigger(self, context: TriggerBuilderContext, call: FunctionCall) -> None:
        requirements = context.build_subtrigger(call.parameters[-1], self.name)
        last = self.modify(requirements[-1], call)
        context.trigger.extend(requirements[:-1] + [last])

    def modify(self, requirement, call):
        raise NotImplementedError


class OnceFunction(ModifierFunction):
    def __init__(self):
        super().__init__("once", ["comparison"])

    def modify(self, requirement, call):
        return dataclasses.replace(requirement, hit_count=1)


class RepeatedFunction(ModifierFunction):
    def __init__(self):
        super().__init__("repeated", ["count", "comparison"])

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        count = self.get_integer_parameter(scope, "count")
        if count.value < 1:
            raise TypeMismatch("count must be greater than zero", loc=count.loc)
        return self.reemit(scope, [count, self.get_parameter(scope, "comparison")])

    def modify(self, requirement, call):
        return dataclasses.replace(requirement, hit_count=call.parameters[0].value)


class NeverFunction(ModifierFunction):
    def __init__(self):
        super().__init__("never", ["comparison"])

    def modify(self, requirement, call):
        return dataclasses.replace(requirement, type=RequirementType.RESET_IF)


class UnlessFunction(ModifierFunction):
    def __init__(self):
        super().__init__("unless", ["comparison"])

    def modify(self, requirement, call):
        return dataclasses.replace(requirement, type=RequirementType.PAUSE_IF)


class ConstantConditionFunction(ConditionFunction):
    def __init__(self, name: str, requirement, opposite: str):
        super().__init__(name, [])
        self.requirement = requirement
        self.opposite = opposite

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        return self.reemit(scope, [])

    def build_trigger(self, context: TriggerBuilderContext, call: FunctionCall) -> None:
        context.trigger.append(self.requirement)

    def negated(self, call: FunctionCall) -> Expression:
        return FunctionCall(self.opposite, [], location=call.location)


class MaxOfFunction(FunctionDefinition):
    """max_of(...): only meaningful as a whole leaderboard value."""

    def __init__(self):
        super().__init__("max_of", [VARARGS])

    def replace_variables(self, scope: InterpreterScope) -> Expression:
        varargs = self.get_varargs(scope)
        if not varargs.entries:
            raise ParameterBindingError("max_of requires at least one value", loc=scope.function_call.loc)

        # surplus arguments are bound unevaluated; reduce them where they were written
        parameters = [replace_variables(entry, scope.caller) for entry in varargs.entries]
        return self.reemit(scope, parameters)


# Model registration

class AchievementFunction(FunctionDefinition):
    def __init__(self):
        super().__init__(
            "achievement",
            ["title", "description", "points", "trigger", "id"],
            {"id": IntegerConstant(0)},
        )

    def evaluate(self, scope: InterpreterScope) -> None:
        title = self.get_string_parameter(scope, "title")
        description = self.get_string_parameter(scope, "description")
        points = self.get_integer_parameter(scope, "points")
        if points.value < 0:
            raise TypeMismatch("points must be zero or greater", loc=points.loc)
        trigger = self.get_parameter(scope, "trigger")

        builder = TriggerBuilderContext.build_achievement(trigger, scope)
        builder.title = title.value
        builder.description = description.value
        builder.points = points.value
        builder.id = self.get_integer_parameter(scope, "id").value
        builder.source_line = _source_line(self, scope)

        achievement = builder.to_achievement()
        scope.script_context.achievements.append(achievement)
        logger.info(f"Registered achievement '{achievement.title}': {achievement.trigger}")


class LeaderboardFunction(FunctionDefinition):
    def __init__(self):
        super().__init__(
            "leaderboard",
            ["title", "description", "start", "cancel", "submit", "value", "format"],
            {"format": StringConstant("value")},
        )

    def evaluate(self, scope: InterpreterScope) -> None:
        leaderboard = Leaderboard()
        leaderboard.title = self.get_string_parameter(scope, "title").value
        leaderboard.description = self.get_string_parameter(scope, "description").value
        leaderboard.start = self._process_trigger(scope, "start")
        leaderboard.cancel = self._process_trigger(scope, "cancel")
        leaderboard.submit = self._process_trigger(scope, "submit")
        leaderboard.value = self._process_value(scope, "value")

        format = self.get_string_parameter(scope, "format")
        leaderboard.format = parse_format(format.value)
        if leaderboard.format == ValueFormat.NONE:
            raise UnsupportedFormat(
                f"{format.value} is not a supported leaderboard format", loc=format.loc
            )

        leaderboard.source_line = _source_line(self, scope)
        scope.script_context.leaderboards.append(leaderboard)
        logger.info(f"Registered leaderboard '{leaderboard.title}': {leaderboard.serialize()}")

    def _process_trigger(self, scope: InterpreterScope, parameter: str) -> str:
        return TriggerBuilderContext.get_condition_string(self.get_parameter(scope, parameter), scope)

    def _process_value(self, scope: InterpreterScope, parameter: str) -> str:
        expression = self.get_parameter(scope, parameter)
        if expression.type == ExpressionType.FUNCTION_CALL and \
                isinstance(scope.get_function(expression.name), MaxOfFunction):
            return "$".join(
                TriggerBuilderContext.get_value_string(value, scope) for value in expression.parameters
            )
        return TriggerBuilderContext.get_value_string(expression, scope)


def builtin_functions() -> List[FunctionDefinition]:
    functions: List[FunctionDefinition] = [MemoryAccessorFunction(size) for size in SIZE_NAMES]
    functions.extend([
        BitFunction(),
        PrevFunction(),
        OnceFunction(),
        RepeatedFunction(),
        NeverFunction(),
        UnlessFunction(),
        ConstantConditionFunction("always_true", ALWAYS_TRUE, "always_false"),
        ConstantConditionFunction("always_false", ALWAYS_FALSE, "always_true"),
        MaxOfFunction(),
        AchievementFunction(),
        LeaderboardFunction(),
    ])
    return functions


def register_builtins(scope: InterpreterScope) -> None:
    for function in builtin_functions():
        scope.add_function(function)
