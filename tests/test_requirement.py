"""
Tests for requirement serialization, display and note lookup.
"""

from rascript.data.field import Field, FieldSize
from rascript.data.requirement import (
    NumberFormat, Requirement, RequirementOperator, RequirementType,
)


def _byte(address):
    return Field.memory(FieldSize.BYTE, address)


def test_serialize_comparison():
    r = Requirement(_byte(0x1234), RequirementOperator.EQUAL, Field.literal(3))
    assert r.serialize() == "0xH001234=3"


def test_serialize_hit_count():
    r = Requirement(_byte(0x1234), RequirementOperator.GREATER_THAN_OR_EQUAL, Field.literal(3), hit_count=2)
    assert r.serialize() == "0xH001234>=3.2."


def test_serialize_flags():
    r = Requirement(_byte(0x1), RequirementOperator.NOT_EQUAL, _byte(0x2), type=RequirementType.RESET_IF)
    assert r.serialize() == "R:0xH000001!=0xH000002"
    r = Requirement(_byte(0x1), RequirementOperator.LESS_THAN, Field.literal(9), type=RequirementType.PAUSE_IF)
    assert r.serialize() == "P:0xH000001<9"


def test_accumulators_serialize_left_only():
    assert Requirement(left=_byte(0x1), type=RequirementType.ADD_SOURCE).serialize() == "A:0xH000001"
    assert Requirement(left=_byte(0x1), type=RequirementType.SUB_SOURCE).serialize() == "B:0xH000001"


def test_operator_opposites_and_mirrors():
    assert RequirementOperator.LESS_THAN.opposite() == RequirementOperator.GREATER_THAN_OR_EQUAL
    assert RequirementOperator.EQUAL.opposite() == RequirementOperator.NOT_EQUAL
    assert RequirementOperator.LESS_THAN.mirrored() == RequirementOperator.GREATER_THAN
    assert RequirementOperator.NOT_EQUAL.mirrored() == RequirementOperator.NOT_EQUAL


def test_display():
    r = Requirement(_byte(0x1234), RequirementOperator.EQUAL, Field.literal(3))
    assert r.display() == "byte(0x001234) == 3"
    assert str(r) == "byte(0x001234) == 3"


def test_display_hex():
    r = Requirement(_byte(0x1234), RequirementOperator.EQUAL, Field.literal(10))
    assert r.display(NumberFormat.HEXADECIMAL) == "byte(0x001234) == 0x0A"


def test_display_wrappers():
    r = Requirement(_byte(0x1), RequirementOperator.EQUAL, Field.literal(1), hit_count=1)
    assert r.display() == "once(byte(0x000001) == 1)"

    r = Requirement(_byte(0x1), RequirementOperator.EQUAL, Field.literal(1), hit_count=4,
                    type=RequirementType.RESET_IF)
    assert r.display() == "never(repeated(4, byte(0x000001) == 1))"

    r = Requirement(left=_byte(0x1), type=RequirementType.ADD_SOURCE)
    assert r.display() == "AddSource byte(0x000001)"


def test_notes_for_literal_comparison():
    notes = {0x10: "Lives", 0x20: "Level"}
    r = Requirement(_byte(0x10), RequirementOperator.EQUAL, Field.literal(3))
    assert r.notes_text(notes) == "Lives"


def test_notes_for_delta_of_same_address():
    notes = {0x10: "Lives"}
    r = Requirement(_byte(0x10), RequirementOperator.LESS_THAN, Field.previous(FieldSize.BYTE, 0x10))
    assert r.notes_text(notes) == "Lives"


def test_notes_for_two_addresses():
    notes = {0x10: "Lives", 0x20: "Level"}
    r = Requirement(_byte(0x10), RequirementOperator.EQUAL, _byte(0x20))
    assert r.notes_text(notes) == "0x000010:Lives\n0x000020:Level"


def test_notes_missing():
    r = Requirement(_byte(0x10), RequirementOperator.EQUAL, _byte(0x20))
    assert r.notes_text({}) == ""
