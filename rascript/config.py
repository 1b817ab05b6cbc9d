"""
RAScript Configuration Module

Centralized configuration for the compiler and CLI.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional

NUMBER_FORMATS = ("decimal", "hex")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RAScriptConfig:
    """Configuration for script evaluation and trigger display."""

    max_call_depth: int = 64
    """Maximum nesting of function calls before evaluation aborts.

    Scripts have no loops, so runaway recursion is the only way a
    compile pass can fail to terminate.
    """

    number_format: str = "decimal"
    """How literal operands are rendered in requirement display lines.

    "decimal" or "hex". Serialized triggers are unaffected.
    """

    log_level: str = "WARNING"
    """Root logging level used by the CLI."""

    @classmethod
    def from_env(cls) -> "RAScriptConfig":
        """Load configuration from environment variables.

        Environment variables:
          RASCRIPT_MAX_CALL_DEPTH - Maximum function call nesting
          RASCRIPT_NUMBER_FORMAT - Display format for literals (decimal/hex)
          RASCRIPT_LOG_LEVEL - Logging level for the CLI

        Returns:
            RAScriptConfig instance with values from environment
        """
        return cls(
            max_call_depth=int(os.getenv("RASCRIPT_MAX_CALL_DEPTH", "64")),
            number_format=os.getenv("RASCRIPT_NUMBER_FORMAT", "decimal").lower(),
            log_level=os.getenv("RASCRIPT_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> None:
        """Validate configuration settings.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.max_call_depth < 1:
            raise ValueError(
                f"max_call_depth must be >= 1, got {self.max_call_depth}"
            )

        if self.number_format not in NUMBER_FORMATS:
            raise ValueError(
                f"number_format must be one of {', '.join(NUMBER_FORMATS)}, got {self.number_format!r}"
            )

        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

    def get_summary(self) -> str:
        """Get human-readable configuration summary."""
        lines = [
            "RAScript Configuration Summary",
            "=" * 50,
            "",
            f"  Max Call Depth: {self.max_call_depth}",
            f"  Number Format: {self.number_format}",
            f"  Log Level: {self.log_level}",
        ]
        return "\n".join(lines)


# Default configuration instance (lazy-loaded from environment)
_default_config: Optional[RAScriptConfig] = None


def get_default_config() -> RAScriptConfig:
    """Get default configuration instance (singleton pattern).

    Returns:
        Default RAScriptConfig loaded from environment
    """
    global _default_config
    if _default_config is None:
        _default_config = RAScriptConfig.from_env()
        _default_config.validate()
    return _default_config
