"""
A single condition line: a comparison between two fields, plus the flags
that change how the runtime accumulates consecutive requirements.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping

from .field import Field, FieldType


class RequirementType(Enum):
    NONE = ""
    RESET_IF = "R"
    PAUSE_IF = "P"
    ADD_SOURCE = "A"
    SUB_SOURCE = "B"
    ADD_HITS = "C"

    @property
    def is_accumulator(self) -> bool:
        """Accumulator rows only feed the next comparison; they have no operator."""
        return self in (RequirementType.ADD_SOURCE, RequirementType.SUB_SOURCE)


REQUIREMENT_TYPES_BY_PREFIX: Dict[str, RequirementType] = {
    t.value: t for t in RequirementType if t.value
}


class RequirementOperator(Enum):
    NONE = ""
    EQUAL = "="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="

    @property
    def display(self) -> str:
        return "==" if self == RequirementOperator.EQUAL else self.value

    def opposite(self) -> "RequirementOperator":
        """Operator satisfied exactly when this one is not."""
        return _OPPOSITES[self]

    def mirrored(self) -> "RequirementOperator":
        """Operator to use when the operands are swapped."""
        return _MIRRORS[self]


_OPPOSITES = {
    RequirementOperator.NONE: RequirementOperator.NONE,
    RequirementOperator.EQUAL: RequirementOperator.NOT_EQUAL,
    RequirementOperator.NOT_EQUAL: RequirementOperator.EQUAL,
    RequirementOperator.LESS_THAN: RequirementOperator.GREATER_THAN_OR_EQUAL,
    RequirementOperator.LESS_THAN_OR_EQUAL: RequirementOperator.GREATER_THAN,
    RequirementOperator.GREATER_THAN: RequirementOperator.LESS_THAN_OR_EQUAL,
    RequirementOperator.GREATER_THAN_OR_EQUAL: RequirementOperator.LESS_THAN,
}

_MIRRORS = {
    RequirementOperator.NONE: RequirementOperator.NONE,
    RequirementOperator.EQUAL: RequirementOperator.EQUAL,
    RequirementOperator.NOT_EQUAL: RequirementOperator.NOT_EQUAL,
    RequirementOperator.LESS_THAN: RequirementOperator.GREATER_THAN,
    RequirementOperator.LESS_THAN_OR_EQUAL: RequirementOperator.GREATER_THAN_OR_EQUAL,
    RequirementOperator.GREATER_THAN: RequirementOperator.LESS_THAN,
    RequirementOperator.GREATER_THAN_OR_EQUAL: RequirementOperator.LESS_THAN_OR_EQUAL,
}

# operators ordered longest first so "<=" wins over "<" when scanning
OPERATORS_BY_TOKEN = {
    op.value: op
    for op in sorted(RequirementOperator, key=lambda o: -len(o.value))
    if op.value
}


class NumberFormat(Enum):
    DECIMAL = "decimal"
    HEXADECIMAL = "hex"


@dataclass(frozen=True)
class Requirement:
    left: Field = field(default_factory=Field)
    operator: RequirementOperator = RequirementOperator.NONE
    right: Field = field(default_factory=Field)
    hit_count: int = 0
    type: RequirementType = RequirementType.NONE

    def serialize(self) -> str:
        """Render one condition line in the runtime's wire format."""
        parts = []
        if self.type != RequirementType.NONE:
            parts.append(f"{self.type.value}:")

        parts.append(self.left.serialize())
        if self.operator != RequirementOperator.NONE:
            parts.append(self.operator.value)
            parts.append(self.right.serialize())

        if self.hit_count > 0:
            parts.append(f".{self.hit_count}.")

        return "".join(parts)

    def display(self, number_format: NumberFormat = NumberFormat.DECIMAL) -> str:
        """Human-readable rendering, e.g. ``once(byte(0x001234) == 3)``."""
        text = _display_field(self.left, number_format)
        if self.operator != RequirementOperator.NONE:
            text += f" {self.operator.display} {_display_field(self.right, number_format)}"

        if self.hit_count == 1:
            text = f"once({text})"
        elif self.hit_count > 1:
            text = f"repeated({self.hit_count}, {text})"

        if self.type == RequirementType.RESET_IF:
            text = f"never({text})"
        elif self.type == RequirementType.PAUSE_IF:
            text = f"unless({text})"
        elif self.type == RequirementType.ADD_SOURCE:
            text = f"AddSource {text}"
        elif self.type == RequirementType.SUB_SOURCE:
            text = f"SubSource {text}"
        elif self.type == RequirementType.ADD_HITS:
            text = f"AddHits {text}"

        return text

    def notes_text(self, notes: Mapping[int, str]) -> str:
        """Resolve memory notes for the addresses this requirement reads.

        When the right side is a literal, or the previous value of the same
        address, only the left note is relevant and it is returned as-is.
        Otherwise each known address contributes a ``0x%06x:note`` line.
        """
        right = self.right
        if right.type == FieldType.VALUE or (
            right.type == FieldType.PREVIOUS_VALUE and right.value == self.left.value
        ):
            return notes.get(self.left.value, "")

        lines = []
        for operand in (self.left, right):
            if not operand.is_memory_reference:
                continue
            note = notes.get(operand.value)
            if note is not None:
                lines.append(f"0x{operand.value:06x}:{note}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.display()


def _display_field(operand: Field, number_format: NumberFormat) -> str:
    if operand.type == FieldType.VALUE and number_format == NumberFormat.HEXADECIMAL:
        return f"0x{operand.value:02X}"
    return str(operand)
