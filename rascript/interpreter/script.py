"""
Top-level driver: parses a script, evaluates it in a fresh global scope and
collects the achievements and leaderboards it declares.

The script context is the one mutable output of a compile pass. It is
created per pass and only the builtins running inside that pass append to
it.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import RAScriptConfig, get_default_config
from ..data.achievement import Achievement, Leaderboard
from ..errors import RAScriptError, TypeMismatch
from ..parser.ast import ExpressionType, Script
from ..parser.parser import parse_script, parse_script_file
from .builtins import register_builtins
from .evaluator import DEFAULT_MAX_CALL_DEPTH, execute
from .scope import InterpreterScope

logger = logging.getLogger(__name__)


@dataclass
class AchievementScriptContext:
    achievements: List[Achievement] = field(default_factory=list)
    leaderboards: List[Leaderboard] = field(default_factory=list)
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH


def create_global_scope(context: AchievementScriptContext) -> InterpreterScope:
    scope = InterpreterScope(script_context=context)
    register_builtins(scope)
    return scope


class AchievementScriptInterpreter:
    """
    Compile RAScript source into achievements and leaderboards.

    `run` reports failure through its return value and the `error`
    attribute; `compile` raises the first RAScriptError encountered.
    """

    def __init__(self, config: Optional[RAScriptConfig] = None):
        self.config = config or get_default_config()
        self.game_title: Optional[str] = None
        self.game_id: Optional[int] = None
        self.achievements: List[Achievement] = []
        self.leaderboards: List[Leaderboard] = []
        self.error: Optional[RAScriptError] = None

    def run(self, source: str) -> bool:
        try:
            self.compile(source)
        except RAScriptError as e:
            logger.warning(f"Script compilation failed: {e.describe()}")
            self.error = e
            return False
        return True

    def run_file(self, path: str) -> bool:
        try:
            self.evaluate(parse_script_file(path))
        except RAScriptError as e:
            logger.warning(f"{path}: {e.describe()}")
            self.error = e
            return False
        return True

    def compile(self, source: str) -> AchievementScriptContext:
        return self.evaluate(parse_script(source))

    def evaluate(self, script: Script) -> AchievementScriptContext:
        self.error = None
        self.achievements = []
        self.leaderboards = []
        self.game_title = script.title
        self.game_id = script.game_id

        for statement in script.statements:
            if statement.type == ExpressionType.RETURN:
                raise TypeMismatch("return is only allowed inside a function", loc=statement.loc)

        context = AchievementScriptContext(max_call_depth=self.config.max_call_depth)
        execute(script.statements, create_global_scope(context))

        self.achievements = context.achievements
        self.leaderboards = context.leaderboards
        logger.info(
            f"Compiled {len(self.achievements)} achievements and {len(self.leaderboards)} leaderboards"
        )
        return context
