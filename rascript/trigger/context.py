"""
Compiles reduced expression trees into serialized condition and value
strings.

Condition grammar: AND-combined comparisons and condition functions
(once, never, ...). OR is only accepted at the top level of an
achievement trigger, where it splits into alternate groups.

Value grammar: sums of memory operands and literals, optionally scaled by
integer multipliers or divisors.
"""

import logging
import operator
from fractions import Fraction
from typing import List, Optional, Tuple

from ..data.achievement import serialize_group
from ..data.field import Field
from ..data.requirement import Requirement, RequirementOperator, RequirementType
from ..data.value import ValueTerm
from ..errors import GrammarViolation, TypeMismatch
from ..interpreter.functions import ConditionFunction, OperandFunction
from ..interpreter.scope import InterpreterScope
from ..parser.ast import (
    Comparison, ComparisonOperation, Conditional, ConditionalOperation, Expression,
    ExpressionType, IntegerConstant, MathematicOperation,
)
from .achievement_builder import AchievementBuilder

logger = logging.getLogger(__name__)

OPERATORS = {
    ComparisonOperation.EQUAL: RequirementOperator.EQUAL,
    ComparisonOperation.NOT_EQUAL: RequirementOperator.NOT_EQUAL,
    ComparisonOperation.LESS_THAN: RequirementOperator.LESS_THAN,
    ComparisonOperation.LESS_THAN_OR_EQUAL: RequirementOperator.LESS_THAN_OR_EQUAL,
    ComparisonOperation.GREATER_THAN: RequirementOperator.GREATER_THAN,
    ComparisonOperation.GREATER_THAN_OR_EQUAL: RequirementOperator.GREATER_THAN_OR_EQUAL,
}
_COMPARISONS = {v: k for k, v in OPERATORS.items()}

_EVALUATORS = {
    RequirementOperator.EQUAL: operator.eq,
    RequirementOperator.NOT_EQUAL: operator.ne,
    RequirementOperator.LESS_THAN: operator.lt,
    RequirementOperator.LESS_THAN_OR_EQUAL: operator.le,
    RequirementOperator.GREATER_THAN: operator.gt,
    RequirementOperator.GREATER_THAN_OR_EQUAL: operator.ge,
}

ALWAYS_TRUE = Requirement(Field.literal(1), RequirementOperator.EQUAL, Field.literal(1))
ALWAYS_FALSE = Requirement(Field.literal(0), RequirementOperator.EQUAL, Field.literal(1))


def normalize(expr: Expression, negate: bool = False,
              scope: Optional[InterpreterScope] = None) -> Expression:
    """Push `!` down to the comparisons (De Morgan).

    With a scope, negated condition calls that have an exact opposite
    (always_true / always_false) are replaced by it.
    """
    if expr.type == ExpressionType.CONDITIONAL:
        if expr.operation == ConditionalOperation.NOT:
            return normalize(expr.operands[0], not negate, scope)

        operation = expr.operation
        if negate:
            operation = ConditionalOperation.OR if operation == ConditionalOperation.AND else ConditionalOperation.AND

        operands: List[Expression] = []
        for operand in expr.operands:
            operand = normalize(operand, negate, scope)
            if operand.type == ExpressionType.CONDITIONAL and operand.operation == operation:
                operands.extend(operand.operands)
            else:
                operands.append(operand)
        return Conditional(operation, operands, location=expr.location)

    if not negate:
        return expr

    if expr.type == ExpressionType.COMPARISON:
        opposite = _COMPARISONS[OPERATORS[expr.operation].opposite()]
        return Comparison(expr.left, opposite, expr.right, location=expr.location)

    if expr.type == ExpressionType.FUNCTION_CALL and scope is not None:
        function = scope.get_function(expr.name)
        if isinstance(function, ConditionFunction):
            negated = function.negated(expr)
            if negated is not None:
                return negated

    return Conditional(ConditionalOperation.NOT, [expr], location=expr.location)


class TriggerBuilderContext:
    def __init__(self, scope: InterpreterScope):
        self.scope = scope
        self.trigger: List[Requirement] = []

    # Entry points

    @classmethod
    def get_condition_string(cls, expr: Expression, scope: InterpreterScope) -> str:
        context = cls(scope)
        context.build(normalize(expr, scope=context.scope))
        text = serialize_group(context.trigger)
        logger.debug(f"Condition {expr} -> {text}")
        return text

    @classmethod
    def get_value_string(cls, expr: Expression, scope: InterpreterScope) -> str:
        context = cls(scope)
        text = context.build_value(expr)
        logger.debug(f"Value {expr} -> {text}")
        return text

    @classmethod
    def build_achievement(cls, expr: Expression, scope: InterpreterScope) -> AchievementBuilder:
        """Split a trigger into the core group and at most one set of alternates."""
        expr = normalize(expr, scope=scope)
        terms = expr.operands if _is(expr, ConditionalOperation.AND) else [expr]

        alternates = None
        core = cls(scope)
        for term in terms:
            if _is(term, ConditionalOperation.OR):
                if alternates is not None:
                    raise GrammarViolation(
                        "Only one || clause is allowed at the top level of an achievement",
                        loc=term.loc or expr.loc,
                        hint="Combine the alternatives into a single || expression",
                    )
                alternates = term.operands
            else:
                core.build(term)

        builder = AchievementBuilder()
        builder.core_requirements = core.trigger
        for alternate in alternates or []:
            group = cls(scope)
            group.build(alternate)
            builder.alternate_requirements.append(group.trigger)
        return builder

    # Conditions

    def build(self, expr: Expression) -> None:
        """Append the requirements for an AND-only condition."""
        t = expr.type
        if t == ExpressionType.CONDITIONAL:
            if expr.operation == ConditionalOperation.AND:
                for operand in expr.operands:
                    self.build(operand)
            elif expr.operation == ConditionalOperation.OR:
                raise GrammarViolation(
                    "|| is not allowed here; only && may combine these conditions",
                    loc=expr.loc,
                )
            else:
                raise TypeMismatch(f"! cannot be applied to {expr.operands[0]}", loc=expr.loc)
        elif t == ExpressionType.COMPARISON:
            self.build_comparison(expr)
        elif t == ExpressionType.FUNCTION_CALL:
            function = self.scope.get_function(expr.name)
            if not isinstance(function, ConditionFunction):
                raise TypeMismatch(f"{expr.name} is not a condition", loc=expr.loc)
            function.build_trigger(self, expr)
        else:
            raise TypeMismatch(f"Expression is not a condition: {expr}", loc=expr.loc)

    def build_subtrigger(self, expr: Expression, function_name: str) -> List[Requirement]:
        """Compile `expr` separately, requiring exactly one comparison (accumulators allowed)."""
        context = TriggerBuilderContext(self.scope)
        context.build(normalize(expr, scope=context.scope))
        comparisons = [r for r in context.trigger if not r.type.is_accumulator]
        if len(comparisons) != 1:
            raise TypeMismatch(f"{function_name} requires a single condition", loc=expr.loc)
        return context.trigger

    def build_comparison(self, expr: Comparison) -> None:
        left, right = expr.left, expr.right
        op = OPERATORS[expr.operation]

        if left.type == ExpressionType.INTEGER and right.type != ExpressionType.INTEGER:
            left, right = right, left
            op = op.mirrored()

        terms = self._flatten(left)
        constant = sum(sign * e.value for sign, e in terms if e.type == ExpressionType.INTEGER)
        operands = [(sign, e) for sign, e in terms if e.type != ExpressionType.INTEGER]

        if right.type == ExpressionType.INTEGER:
            right_value = right.value - constant
            if not operands:
                self.trigger.append(ALWAYS_TRUE if _EVALUATORS[op](0, right_value) else ALWAYS_FALSE)
                return
            if right_value < 0:
                raise TypeMismatch(f"Comparison against negative value {right_value}", loc=expr.loc)
            right_field = self.to_field(IntegerConstant(right_value, location=right.location))
        else:
            if constant:
                raise TypeMismatch("Constants on the left side require a constant right side", loc=expr.loc)
            right_field = self.to_field(right)

        positives = [e for sign, e in operands if sign > 0]
        negatives = [e for sign, e in operands if sign < 0]
        if not positives:
            raise TypeMismatch("Comparison requires at least one added memory reference", loc=expr.loc)

        for e in negatives:
            self.trigger.append(Requirement(left=self.to_field(e), type=RequirementType.SUB_SOURCE))
        for e in positives[:-1]:
            self.trigger.append(Requirement(left=self.to_field(e), type=RequirementType.ADD_SOURCE))
        self.trigger.append(Requirement(left=self.to_field(positives[-1]), operator=op, right=right_field))

    def _flatten(self, expr: Expression, sign: int = 1) -> List[Tuple[int, Expression]]:
        if expr.type != ExpressionType.MATHEMATIC:
            return [(sign, expr)]
        if expr.operation == MathematicOperation.ADD:
            return self._flatten(expr.left, sign) + self._flatten(expr.right, sign)
        if expr.operation == MathematicOperation.SUBTRACT:
            return self._flatten(expr.left, sign) + self._flatten(expr.right, -sign)
        raise TypeMismatch(
            f"'{expr.operation.value}' is only supported in value expressions", loc=expr.loc
        )

    def to_field(self, expr: Expression) -> Field:
        if expr.type == ExpressionType.INTEGER:
            if not 0 <= expr.value <= 0xFFFFFFFF:
                raise TypeMismatch(f"{expr.value} is outside the 32-bit unsigned range", loc=expr.loc)
            return Field.literal(expr.value)

        if expr.type == ExpressionType.FUNCTION_CALL:
            function = self.scope.get_function(expr.name)
            if isinstance(function, OperandFunction):
                return function.to_field(self.scope, expr)

        raise TypeMismatch(f"{expr} is not a memory reference or constant", loc=expr.loc)

    # Values

    def build_value(self, expr: Expression) -> str:
        return "_".join(t.serialize() for t in self.build_value_terms(expr))

    def build_value_terms(self, expr: Expression) -> List[ValueTerm]:
        terms: List[ValueTerm] = []
        constant = Fraction(0)
        for field, multiplier in self._value_terms(expr, Fraction(1)):
            if field is None:
                constant += multiplier
            else:
                terms.append(ValueTerm(field, multiplier))
        if constant or not terms:
            terms.append(ValueTerm.constant(constant))
        return terms

    def _value_terms(self, expr: Expression, multiplier: Fraction) -> List[Tuple[Optional[Field], Fraction]]:
        t = expr.type
        if t == ExpressionType.INTEGER:
            return [(None, multiplier * expr.value)]

        if t == ExpressionType.MATHEMATIC:
            op = expr.operation
            left, right = expr.left, expr.right
            if op == MathematicOperation.ADD:
                return self._value_terms(left, multiplier) + self._value_terms(right, multiplier)
            if op == MathematicOperation.SUBTRACT:
                return self._value_terms(left, multiplier) + self._value_terms(right, -multiplier)
            if op == MathematicOperation.MULTIPLY:
                if right.type == ExpressionType.INTEGER:
                    return self._value_terms(left, multiplier * right.value)
                if left.type == ExpressionType.INTEGER:
                    return self._value_terms(right, multiplier * left.value)
                raise TypeMismatch("Values can only be multiplied by constants", loc=expr.loc)
            if op == MathematicOperation.DIVIDE and right.type == ExpressionType.INTEGER and right.value:
                return self._value_terms(left, multiplier / right.value)
            raise TypeMismatch(f"'{op.value}' is not supported in value expressions", loc=expr.loc)

        if t == ExpressionType.FUNCTION_CALL:
            function = self.scope.get_function(expr.name)
            if isinstance(function, OperandFunction):
                return [(function.to_field(self.scope, expr), multiplier)]
            raise TypeMismatch(f"{expr.name} is not a value", loc=expr.loc)

        if t == ExpressionType.CONDITIONAL and expr.operation == ConditionalOperation.OR:
            raise GrammarViolation("|| is not allowed in a value expression", loc=expr.loc)

        if t in (ExpressionType.COMPARISON, ExpressionType.CONDITIONAL):
            raise TypeMismatch(f"Condition used where a value was expected: {expr}", loc=expr.loc)

        raise TypeMismatch(f"Expression is not a value: {expr}", loc=expr.loc)


def _is(expr: Expression, operation: ConditionalOperation) -> bool:
    return expr.type == ExpressionType.CONDITIONAL and expr.operation == operation
