"""
Error taxonomy for the RAScript compiler.

Error code ranges:
- E001-E099: Script syntax errors
- E100-E199: Semantic and compile errors
- E200-E299: Serialized trigger errors
"""


class RAScriptError(Exception):
    """Base class for all RAScript errors."""

    def __init__(
        self,
        code: str,
        message: str,
        loc: tuple[int, int] | None = None,
        hint: str | None = None
    ):
        """
        Initialize RAScript error.

        Args:
            code: Error code (e.g., "E001")
            message: Human-readable error message
            loc: Optional (line, column) location
            hint: Optional suggestion for fixing the error
        """
        self.code = code
        self.message = message
        self.loc = loc
        self.hint = hint
        super().__init__(f"[{code}] {message}")

    def describe(self) -> str:
        """Message prefixed with the source location when one is known."""
        if self.loc is None:
            return str(self)
        line, column = self.loc
        return f"{line}:{column} {self}"


class ParseError(RAScriptError):
    """Script syntax errors (E001-E099)."""

    def __init__(self, message: str, loc: tuple[int, int] | None = None, hint: str | None = None):
        super().__init__("E001", message, loc, hint)


class CompileError(RAScriptError):
    """Compilation errors (E100-E199)."""

    CODE = "E100"

    def __init__(self, message: str, loc: tuple[int, int] | None = None, hint: str | None = None):
        super().__init__(self.CODE, message, loc, hint)


class UndefinedFunction(CompileError):
    """Call to a name not resolvable in any enclosing scope."""
    CODE = "E101"


class ParameterBindingError(CompileError):
    """Missing required parameter, or surplus arguments for a non-variadic function."""
    CODE = "E102"


class TypeMismatch(CompileError):
    """Condition used where a value was required (or vice versa), or wrong literal kind."""
    CODE = "E103"


class UnsupportedFormat(CompileError):
    """Leaderboard format not in the known enumeration."""
    CODE = "E104"


class GrammarViolation(CompileError):
    """Logical OR used where only AND-combination is permitted."""
    CODE = "E105"


class UndefinedVariable(CompileError):
    CODE = "E106"


class CallDepthExceeded(CompileError):
    CODE = "E107"


class TriggerParseError(RAScriptError):
    """Malformed serialized trigger strings (E200-E299)."""

    def __init__(self, message: str, position: int | None = None, hint: str | None = None):
        self.position = position
        super().__init__("E200", message, (1, position + 1) if position is not None else None, hint)


# Specific error codes documentation:
#
# E001: Invalid script syntax
# E100: Generic compile error (e.g. division by zero in a constant)
# E101: Unknown function
# E102: Parameter binding failure
# E103: Expression kind mismatch
# E104: Unknown leaderboard format
# E105: || used in an AND-only slot
# E106: Unknown variable
# E107: Function call nesting too deep
# E200: Malformed serialized trigger
