"""
Tests for RAScriptConfig environment loading and validation.
"""

import pytest
from rascript.config import RAScriptConfig


def test_defaults():
    config = RAScriptConfig()
    assert config.max_call_depth == 64
    assert config.number_format == "decimal"
    assert config.log_level == "WARNING"
    config.validate()


def test_from_env(monkeypatch):
    monkeypatch.setenv("RASCRIPT_MAX_CALL_DEPTH", "16")
    monkeypatch.setenv("RASCRIPT_NUMBER_FORMAT", "HEX")
    monkeypatch.setenv("RASCRIPT_LOG_LEVEL", "debug")

    config = RAScriptConfig.from_env()
    assert config.max_call_depth == 16
    assert config.number_format == "hex"
    assert config.log_level == "DEBUG"


def test_from_env_defaults(monkeypatch):
    for name in ("RASCRIPT_MAX_CALL_DEPTH", "RASCRIPT_NUMBER_FORMAT", "RASCRIPT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    assert RAScriptConfig.from_env() == RAScriptConfig()


@pytest.mark.parametrize("kwargs,message", [
    ({"max_call_depth": 0}, "max_call_depth"),
    ({"number_format": "octal"}, "number_format"),
    ({"log_level": "LOUD"}, "log_level"),
])
def test_validate_rejects(kwargs, message):
    with pytest.raises(ValueError, match=message):
        RAScriptConfig(**kwargs).validate()


def test_summary():
    summary = RAScriptConfig(max_call_depth=10).get_summary()
    assert "Max Call Depth: 10" in summary
    assert "Number Format: decimal" in summary
