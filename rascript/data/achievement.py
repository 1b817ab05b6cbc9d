from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .requirement import Requirement


class ValueFormat(Enum):
    NONE = ""
    VALUE = "VALUE"
    SCORE = "SCORE"
    FRAMES = "FRAMES"
    SECS = "SECS"
    MILLISECS = "MILLISECS"
    MINUTES = "MINUTES"
    OTHER = "OTHER"


# Accepted leaderboard format tokens (case-insensitive). Adding a token
# changes what scripts may pass as `format=`.
FORMAT_TOKENS: Dict[str, ValueFormat] = {
    "VALUE": ValueFormat.VALUE,
    "SCORE": ValueFormat.SCORE,
    "POINTS": ValueFormat.SCORE,
    "FRAMES": ValueFormat.FRAMES,
    "TIME": ValueFormat.FRAMES,
    "SECS": ValueFormat.SECS,
    "TIMESECS": ValueFormat.SECS,
    "MILLISECS": ValueFormat.MILLISECS,
    "TIMEMILLISECS": ValueFormat.MILLISECS,
    "MINUTES": ValueFormat.MINUTES,
    "OTHER": ValueFormat.OTHER,
}


def parse_format(text: str) -> ValueFormat:
    """Map a format token to its ValueFormat, or ValueFormat.NONE when unknown."""
    return FORMAT_TOKENS.get(text.strip().upper(), ValueFormat.NONE)


def serialize_group(requirements: List[Requirement]) -> str:
    return "_".join(r.serialize() for r in requirements)


@dataclass
class Achievement:
    title: str = ""
    description: str = ""
    points: int = 0
    id: int = 0
    core_requirements: List[Requirement] = field(default_factory=list)
    alternate_requirements: List[List[Requirement]] = field(default_factory=list)
    source_line: Optional[int] = None

    @property
    def trigger(self) -> str:
        """Serialized trigger: the core group followed by ``S``-prefixed alternates."""
        text = serialize_group(self.core_requirements)
        for group in self.alternate_requirements:
            text += "S" + serialize_group(group)
        return text


@dataclass
class Leaderboard:
    title: str = ""
    description: str = ""
    start: str = ""
    cancel: str = ""
    submit: str = ""
    value: str = ""
    format: ValueFormat = ValueFormat.VALUE
    source_line: Optional[int] = None

    def serialize(self) -> str:
        return f"STA:{self.start}::CAN:{self.cancel}::SUB:{self.submit}::VAL:{self.value}"
