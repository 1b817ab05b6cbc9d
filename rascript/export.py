"""
JSON output models for compiled scripts.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .data.achievement import Achievement, Leaderboard
from .trigger.achievement_builder import AchievementBuilder


class AchievementOutput(BaseModel):
    id: int = 0
    title: str
    description: str
    points: int = Field(ge=0)
    trigger: str
    source_line: Optional[int] = None


class LeaderboardOutput(BaseModel):
    title: str
    description: str
    start: str
    cancel: str
    submit: str
    value: str
    format: str
    definition: str
    source_line: Optional[int] = None


class ScriptOutput(BaseModel):
    game_title: Optional[str] = None
    game_id: Optional[int] = None
    achievements: List[AchievementOutput] = []
    leaderboards: List[LeaderboardOutput] = []


def achievement_output(achievement: Achievement) -> AchievementOutput:
    return AchievementOutput(
        id=achievement.id,
        title=achievement.title,
        description=achievement.description,
        points=achievement.points,
        trigger=achievement.trigger,
        source_line=achievement.source_line,
    )


def leaderboard_output(leaderboard: Leaderboard) -> LeaderboardOutput:
    return LeaderboardOutput(
        title=leaderboard.title,
        description=leaderboard.description,
        start=leaderboard.start,
        cancel=leaderboard.cancel,
        submit=leaderboard.submit,
        value=leaderboard.value,
        format=leaderboard.format.value,
        definition=leaderboard.serialize(),
        source_line=leaderboard.source_line,
    )


def script_output(interpreter) -> ScriptOutput:
    """Build the output document from a successful AchievementScriptInterpreter run."""
    return ScriptOutput(
        game_title=interpreter.game_title,
        game_id=interpreter.game_id,
        achievements=[achievement_output(a) for a in interpreter.achievements],
        leaderboards=[leaderboard_output(lb) for lb in interpreter.leaderboards],
    )


def load_script_output(path: str) -> ScriptOutput:
    """Read a document written by `rascript compile`."""
    with open(path, "r", encoding="utf-8") as f:
        return ScriptOutput.model_validate_json(f.read())


def achievements_from_output(output: ScriptOutput) -> List[Achievement]:
    """Rebuild achievements by parsing their serialized triggers back."""
    achievements = []
    for item in output.achievements:
        builder = AchievementBuilder()
        builder.parse_requirements(item.trigger)
        builder.title = item.title
        builder.description = item.description
        builder.points = item.points
        builder.id = item.id
        builder.source_line = item.source_line
        achievements.append(builder.to_achievement())
    return achievements
