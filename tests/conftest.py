import pytest

from rascript.config import RAScriptConfig
from rascript.interpreter.script import AchievementScriptContext, AchievementScriptInterpreter, create_global_scope
from rascript.interpreter.evaluator import replace_variables
from rascript.parser.parser import parse_script


@pytest.fixture
def interpreter():
    return AchievementScriptInterpreter(RAScriptConfig())


@pytest.fixture
def compile_script(interpreter):
    """Compile source and return the interpreter holding the results."""
    def _compile(text):
        interpreter.compile(text)
        return interpreter
    return _compile


@pytest.fixture
def global_scope():
    return create_global_scope(AchievementScriptContext())


@pytest.fixture
def reduce(global_scope):
    """Parse and reduce a single expression in the global scope."""
    def _reduce(text):
        expr = parse_script(f"__expr = {text}").statements[0].value
        return replace_variables(expr, global_scope)
    return _reduce
