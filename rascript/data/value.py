"""
Leaderboard value expressions.

A value is one or more `$`-separated alternatives (the runtime reports
the largest). Each alternative is a `_`-joined sum of terms: a field with
an optional `*multiplier`, or a `v<N>` constant.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional

from .field import Field


def format_number(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return repr(float(value))


@dataclass(frozen=True)
class ValueTerm:
    """`field * multiplier`, or a constant when `field` is None."""
    field: Optional[Field]
    multiplier: Fraction = Fraction(1)

    @classmethod
    def constant(cls, value) -> "ValueTerm":
        return cls(None, Fraction(value))

    def serialize(self) -> str:
        if self.field is None:
            return f"v{format_number(self.multiplier)}"
        if self.multiplier == 1:
            return self.field.serialize()
        return f"{self.field.serialize()}*{format_number(self.multiplier)}"

    def display(self) -> str:
        if self.field is None:
            return format_number(self.multiplier)
        if self.multiplier == 1:
            return str(self.field)
        return f"{self.field} * {format_number(self.multiplier)}"


def serialize_value(alternatives: List[List[ValueTerm]]) -> str:
    return "$".join("_".join(t.serialize() for t in terms) for terms in alternatives)
