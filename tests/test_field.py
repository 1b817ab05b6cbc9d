"""
Tests for requirement operands and their wire encoding.
"""

import pytest
from rascript.data.field import Field, FieldSize, FieldType, SIZE_CHARS
from rascript.trigger.achievement_builder import parse_field


ADDRESS_SIZES = [s for s in FieldSize if s != FieldSize.NONE]


def test_value_serializes_as_decimal():
    """Literal fields serialize as plain decimal digits."""
    assert Field.literal(1234).serialize() == "1234"


def test_byte_address_serialization():
    """Byte reads use the H size character and six lowercase hex digits."""
    assert Field.memory(FieldSize.BYTE, 0x0017F3).serialize() == "0xH0017f3"


def test_word_uses_space_size_character():
    assert Field.memory(FieldSize.WORD, 0xABC).serialize() == "0x 000abc"


def test_previous_value_prefix():
    assert Field.previous(FieldSize.DWORD, 0x10).serialize() == "d0xX000010"


@pytest.mark.parametrize("size,char", [
    (FieldSize.BIT0, "M"), (FieldSize.BIT1, "N"), (FieldSize.BIT2, "O"), (FieldSize.BIT3, "P"),
    (FieldSize.BIT4, "Q"), (FieldSize.BIT5, "R"), (FieldSize.BIT6, "S"), (FieldSize.BIT7, "T"),
    (FieldSize.LOW_NIBBLE, "L"), (FieldSize.HIGH_NIBBLE, "U"), (FieldSize.BYTE, "H"),
    (FieldSize.WORD, " "), (FieldSize.DWORD, "X"),
])
def test_size_alphabet(size, char):
    """The size character table is a fixed wire contract."""
    assert SIZE_CHARS[size] == char
    assert Field.memory(size, 0x123456).serialize() == f"0x{char}123456"


def test_size_without_entry_has_no_character():
    assert Field(FieldType.MEMORY_ADDRESS, FieldSize.NONE, 0x12).serialize() == "0x000012"


def test_format_none():
    assert str(Field()) == "none"


def test_format_value():
    assert str(Field.literal(42)) == "42"


def test_format_memory():
    assert str(Field.memory(FieldSize.HIGH_NIBBLE, 0x1F)) == "high4(0x00001F)"


def test_format_previous_word():
    """Previous values are wrapped in prev(...) with uppercase hex."""
    assert str(Field.previous(FieldSize.WORD, 0x000ABC)) == "prev(word(0x000ABC))"


@pytest.mark.parametrize("size", ADDRESS_SIZES)
def test_parse_round_trip_memory(size):
    for field in (Field.memory(size, 0xBEEF), Field.previous(size, 0x7)):
        assert parse_field(field.serialize()) == field


def test_parse_round_trip_value():
    field = Field.literal(4294967295)
    assert parse_field(field.serialize()) == field


def test_structural_equality():
    """Fields with equal type, size and value are equal; any difference breaks it."""
    a = Field(FieldType.MEMORY_ADDRESS, FieldSize.BYTE, 0x10)
    assert a == Field(FieldType.MEMORY_ADDRESS, FieldSize.BYTE, 0x10)
    assert a != Field(FieldType.PREVIOUS_VALUE, FieldSize.BYTE, 0x10)
    assert a != Field(FieldType.MEMORY_ADDRESS, FieldSize.WORD, 0x10)
    assert a != Field(FieldType.MEMORY_ADDRESS, FieldSize.BYTE, 0x11)


def test_usable_as_dict_key():
    notes = {Field.memory(FieldSize.BYTE, 0x10): "lives"}
    assert notes[Field.memory(FieldSize.BYTE, 0x10)] == "lives"


def test_value_out_of_range():
    with pytest.raises(ValueError):
        Field.literal(0x100000000)
    with pytest.raises(ValueError):
        Field.literal(-1)
