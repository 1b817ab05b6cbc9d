"""
Accumulates the requirement groups of one achievement and converts them
to and from the serialized trigger format.

Also reads the other serialized forms the compiler emits back into
models: leaderboard value strings and full leaderboard definitions.
"""

import re
from fractions import Fraction
from typing import List, Optional

from ..data.achievement import Achievement, Leaderboard, serialize_group
from ..data.field import Field, FieldSize, FieldType, SIZES_BY_CHAR
from ..data.requirement import (
    OPERATORS_BY_TOKEN, REQUIREMENT_TYPES_BY_PREFIX, Requirement, RequirementOperator, RequirementType,
)
from ..data.value import ValueTerm
from ..errors import TriggerParseError

_HEX_DIGITS = "0123456789abcdefABCDEF"

_LEADERBOARD_SECTION = re.compile(r"(?:^|::)(STA|CAN|SUB|VAL):")
_LEADERBOARD_SECTIONS = ("STA", "CAN", "SUB", "VAL")


class AchievementBuilder:
    def __init__(self):
        self.title = ""
        self.description = ""
        self.points = 0
        self.id = 0
        self.source_line: Optional[int] = None
        self.core_requirements: List[Requirement] = []
        self.alternate_requirements: List[List[Requirement]] = []

    def parse_requirements(self, text: str) -> None:
        """Replace the current groups with those read from a serialized trigger.

        Raises:
            TriggerParseError: On malformed input, with the failing position
        """
        self.core_requirements, self.alternate_requirements = _TriggerReader(text).read_trigger()

    def serialize_requirements(self) -> str:
        text = serialize_group(self.core_requirements)
        for group in self.alternate_requirements:
            text += "S" + serialize_group(group)
        return text

    def to_achievement(self) -> Achievement:
        return Achievement(
            title=self.title,
            description=self.description,
            points=self.points,
            id=self.id,
            core_requirements=list(self.core_requirements),
            alternate_requirements=[list(g) for g in self.alternate_requirements],
            source_line=self.source_line,
        )


def parse_field(text: str) -> Field:
    """Parse a single serialized operand, e.g. ``d0xH0017f3`` or ``1234``."""
    reader = _TriggerReader(text)
    result = reader.read_field()
    if not reader.at_end:
        reader.fail(f"Unexpected '{reader.peek()}' after operand")
    return result


def parse_value(text: str, offset: int = 0) -> List[List[ValueTerm]]:
    """Parse a leaderboard value string into its `$`-separated alternatives.

    `offset` is added to error positions when `text` was cut from a
    larger string.
    """
    reader = _TriggerReader(text, offset)
    alternatives = [reader.read_value_terms()]
    while not reader.at_end:
        reader.expect("$")
        alternatives.append(reader.read_value_terms())
    return alternatives


def parse_leaderboard(text: str) -> Leaderboard:
    """Parse a ``STA:..::CAN:..::SUB:..::VAL:..`` definition.

    Every section is read back to check that it is well formed.

    Raises:
        TriggerParseError: On a malformed definition or section
    """
    matches = list(_LEADERBOARD_SECTION.finditer(text))
    if not matches or matches[0].start() != 0 or matches[0].group(1) != "STA":
        raise TriggerParseError("Expected 'STA:'", position=0)

    sections = {}
    for i, m in enumerate(matches):
        key = m.group(1)
        if key in sections:
            raise TriggerParseError(f"Duplicate '{key}:' section", position=m.start())
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        sections[key] = (text[m.end():end], m.end())

    for key in _LEADERBOARD_SECTIONS:
        if key not in sections:
            raise TriggerParseError(f"Missing '{key}:' section", position=len(text))

    for key in ("STA", "CAN", "SUB"):
        section, offset = sections[key]
        _TriggerReader(section, offset).read_trigger()
    value, offset = sections["VAL"]
    parse_value(value, offset)

    return Leaderboard(
        start=sections["STA"][0],
        cancel=sections["CAN"][0],
        submit=sections["SUB"][0],
        value=value,
    )


class _TriggerReader:
    def __init__(self, text: str, offset: int = 0):
        self.text = text
        self.pos = 0
        self.offset = offset

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def fail(self, message: str):
        raise TriggerParseError(message, position=self.offset + self.pos)

    def expect(self, token: str) -> None:
        if not self.text.startswith(token, self.pos):
            found = self.peek() or "end of input"
            self.fail(f"Expected '{token}', found '{found}'")
        self.pos += len(token)

    def read_trigger(self):
        core = self.read_group()
        alternates: List[List[Requirement]] = []
        while not self.at_end:
            self.expect("S")
            alternates.append(self.read_group())
        return core, alternates

    def read_value_terms(self) -> List[ValueTerm]:
        terms = [self.read_value_term()]
        while self.peek() == "_":
            self.pos += 1
            terms.append(self.read_value_term())
        return terms

    def read_value_term(self) -> ValueTerm:
        if self.peek() == "v":
            self.pos += 1
            return ValueTerm.constant(self.read_number())

        field = self.read_field()
        if self.peek() == "*":
            self.pos += 1
            return ValueTerm(field, self.read_number())
        return ValueTerm(field)

    def read_number(self) -> Fraction:
        """Signed decimal, possibly fractional (``-1``, ``0.5``)."""
        start = self.pos
        if self.peek() == "-":
            self.pos += 1
        self.read_digits()
        if self.peek() == "." and self.peek(1).isdigit():
            self.pos += 1
            self.read_digits()
        return Fraction(self.text[start:self.pos])

    def read_group(self) -> List[Requirement]:
        group: List[Requirement] = []
        if self.at_end or self.peek() == "S":
            return group
        group.append(self.read_requirement())
        while self.peek() == "_":
            self.pos += 1
            group.append(self.read_requirement())
        return group

    def read_requirement(self) -> Requirement:
        kind = None
        if self.peek(1) == ":":
            kind = REQUIREMENT_TYPES_BY_PREFIX.get(self.peek())
            if kind is None:
                self.fail(f"Unknown requirement flag '{self.peek()}'")
            self.pos += 2

        left = self.read_field()
        operator = self.read_operator()
        if operator is None:
            if kind is None or not kind.is_accumulator:
                self.fail("Expected comparison operator")
            return Requirement(left=left, type=kind)

        right = self.read_field()
        hit_count = self.read_hit_count()
        return Requirement(
            left=left, operator=operator, right=right, hit_count=hit_count,
            type=kind or RequirementType.NONE,
        )

    def read_operator(self) -> Optional[RequirementOperator]:
        for token, operator in OPERATORS_BY_TOKEN.items():
            if self.text.startswith(token, self.pos):
                self.pos += len(token)
                return operator
        return None

    def read_hit_count(self) -> int:
        if self.peek() == ".":
            self.pos += 1
            count = self.read_digits()
            self.expect(".")
            return count
        if self.peek() == "(":
            self.pos += 1
            count = self.read_digits()
            self.expect(")")
            return count
        return 0

    def read_digits(self) -> int:
        start = self.pos
        while self.peek().isdigit():
            self.pos += 1
        if start == self.pos:
            self.fail("Expected number")
        return int(self.text[start:self.pos])

    def read_field(self) -> Field:
        field_type = FieldType.MEMORY_ADDRESS
        if self.peek() == "d":
            field_type = FieldType.PREVIOUS_VALUE
            self.pos += 1

        if self.text.startswith("0x", self.pos):
            self.pos += 2
            c = self.peek()
            size = SIZES_BY_CHAR.get(c.upper()) if c else None
            if size is not None:
                self.pos += 1
            elif c and c in _HEX_DIGITS:
                size = FieldSize.WORD  # legacy: no size character
            else:
                self.fail(f"Unknown size character '{c}'")

            start = self.pos
            while self.peek() and self.peek() in _HEX_DIGITS:
                self.pos += 1
            if start == self.pos:
                self.fail("Expected address")
            address = int(self.text[start:self.pos], 16)
            if address > 0xFFFFFFFF:
                self.fail("Address out of range")
            return Field(field_type, size, address)

        if field_type == FieldType.PREVIOUS_VALUE:
            self.fail("Expected memory reference after 'd'")

        value = self.read_digits()
        if value > 0xFFFFFFFF:
            self.fail("Value out of range")
        return Field.literal(value)
