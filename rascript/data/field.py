"""
Operand of a requirement: a memory reference, a previous-value reference,
or a literal.

The single-character size alphabet below is part of the wire contract
consumed by the achievement runtime. Any addition is a contract change:
bump WIRE_FORMAT_VERSION and extend the round-trip tests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

WIRE_FORMAT_VERSION = 1


class FieldType(Enum):
    NONE = 0
    MEMORY_ADDRESS = 1
    PREVIOUS_VALUE = 2  # delta
    VALUE = 3


class FieldSize(Enum):
    """The amount of data to read from the referenced address."""
    NONE = 0
    BIT0 = 1
    BIT1 = 2
    BIT2 = 3
    BIT3 = 4
    BIT4 = 5
    BIT5 = 6
    BIT6 = 7
    BIT7 = 8
    LOW_NIBBLE = 9   # bits 0-3
    HIGH_NIBBLE = 10  # bits 4-7
    BYTE = 11
    WORD = 12   # 16-bit little-endian
    DWORD = 13  # 32-bit little-endian


SIZE_CHARS: Dict[FieldSize, str] = {
    FieldSize.BIT0: "M",
    FieldSize.BIT1: "N",
    FieldSize.BIT2: "O",
    FieldSize.BIT3: "P",
    FieldSize.BIT4: "Q",
    FieldSize.BIT5: "R",
    FieldSize.BIT6: "S",
    FieldSize.BIT7: "T",
    FieldSize.LOW_NIBBLE: "L",
    FieldSize.HIGH_NIBBLE: "U",
    FieldSize.BYTE: "H",
    FieldSize.WORD: " ",
    FieldSize.DWORD: "X",
}

SIZES_BY_CHAR: Dict[str, FieldSize] = {c: s for s, c in SIZE_CHARS.items()}

SIZE_NAMES: Dict[FieldSize, str] = {
    FieldSize.BIT0: "bit0",
    FieldSize.BIT1: "bit1",
    FieldSize.BIT2: "bit2",
    FieldSize.BIT3: "bit3",
    FieldSize.BIT4: "bit4",
    FieldSize.BIT5: "bit5",
    FieldSize.BIT6: "bit6",
    FieldSize.BIT7: "bit7",
    FieldSize.LOW_NIBBLE: "low4",
    FieldSize.HIGH_NIBBLE: "high4",
    FieldSize.BYTE: "byte",
    FieldSize.WORD: "word",
    FieldSize.DWORD: "dword",
}

SIZES_BY_NAME: Dict[str, FieldSize] = {n: s for s, n in SIZE_NAMES.items()}


@dataclass(frozen=True)
class Field:
    """
    One side of a requirement.

    For MEMORY_ADDRESS and PREVIOUS_VALUE fields `value` is the address and
    `size` selects how much to read from it. For VALUE fields `value` is the
    literal and `size` is ignored by the runtime.
    """
    type: FieldType = FieldType.NONE
    size: FieldSize = FieldSize.NONE
    value: int = 0

    def __post_init__(self):
        if not 0 <= self.value <= 0xFFFFFFFF:
            raise ValueError(f"Field value out of 32-bit range: {self.value}")

    @classmethod
    def memory(cls, size: FieldSize, address: int) -> "Field":
        return cls(FieldType.MEMORY_ADDRESS, size, address)

    @classmethod
    def previous(cls, size: FieldSize, address: int) -> "Field":
        return cls(FieldType.PREVIOUS_VALUE, size, address)

    @classmethod
    def literal(cls, value: int) -> "Field":
        return cls(FieldType.VALUE, FieldSize.NONE, value)

    @property
    def is_memory_reference(self) -> bool:
        return self.type in (FieldType.MEMORY_ADDRESS, FieldType.PREVIOUS_VALUE)

    def __str__(self) -> str:
        if self.type == FieldType.NONE:
            return "none"
        if self.type == FieldType.VALUE:
            return str(self.value)

        text = f"{SIZE_NAMES.get(self.size, '')}(0x{self.value:06X})"
        if self.type == FieldType.PREVIOUS_VALUE:
            text = f"prev({text})"
        return text

    def serialize(self) -> str:
        """Render the field in the runtime's custom wire format."""
        if self.type == FieldType.VALUE:
            return str(self.value)

        prefix = "d" if self.type == FieldType.PREVIOUS_VALUE else ""
        # sizes without an entry render no size character
        return f"{prefix}0x{SIZE_CHARS.get(self.size, '')}{self.value:06x}"
