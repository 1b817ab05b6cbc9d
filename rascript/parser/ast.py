from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict


class ExpressionType(Enum):
    STRING = "string"
    INTEGER = "integer"
    VARIABLE = "variable"
    FUNCTION_CALL = "function_call"
    COMPARISON = "comparison"
    CONDITIONAL = "conditional"
    MATHEMATIC = "mathematic"
    ARRAY = "array"
    ASSIGNMENT = "assignment"
    FUNCTION_DECLARATION = "function_declaration"
    RETURN = "return"


class ComparisonOperation(Enum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="


class ConditionalOperation(Enum):
    AND = "&&"
    OR = "||"
    NOT = "!"


class MathematicOperation(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULUS = "%"


@dataclass(frozen=True)
class Location:
    line: int
    column: int


@dataclass
class Expression:
    type = None  # set by each variant
    location: Optional[Location] = field(default=None, compare=False, repr=False, kw_only=True)

    @property
    def loc(self) -> Optional[tuple[int, int]]:
        """(line, column) for error reporting."""
        if self.location is None:
            return None
        return (self.location.line, self.location.column)


@dataclass
class StringConstant(Expression):
    type = ExpressionType.STRING
    value: str

    def __str__(self):
        return f'"{self.value}"'


@dataclass
class IntegerConstant(Expression):
    type = ExpressionType.INTEGER
    value: int

    def __str__(self):
        return str(self.value)


@dataclass
class Variable(Expression):
    type = ExpressionType.VARIABLE
    name: str

    def __str__(self):
        return self.name


@dataclass
class Assignment(Expression):
    """`name = value`; also used for named arguments inside a call."""
    type = ExpressionType.ASSIGNMENT
    name: str
    value: Expression

    def __str__(self):
        return f"{self.name} = {self.value}"


@dataclass
class FunctionCall(Expression):
    type = ExpressionType.FUNCTION_CALL
    name: str
    parameters: List[Expression] = field(default_factory=list)

    def __str__(self):
        return f"{self.name}({', '.join(str(p) for p in self.parameters)})"


@dataclass
class Comparison(Expression):
    type = ExpressionType.COMPARISON
    left: Expression
    operation: ComparisonOperation
    right: Expression

    def __str__(self):
        return f"{self.left} {self.operation.value} {self.right}"


@dataclass
class Conditional(Expression):
    """AND/OR over two or more operands, or NOT over exactly one."""
    type = ExpressionType.CONDITIONAL
    operation: ConditionalOperation
    operands: List[Expression]

    def __str__(self):
        if self.operation == ConditionalOperation.NOT:
            return f"!({self.operands[0]})"
        joiner = f" {self.operation.value} "
        return "(" + joiner.join(str(o) for o in self.operands) + ")"


@dataclass
class Mathematic(Expression):
    type = ExpressionType.MATHEMATIC
    left: Expression
    operation: MathematicOperation
    right: Expression

    def __str__(self):
        return f"({self.left} {self.operation.value} {self.right})"


@dataclass
class Array(Expression):
    type = ExpressionType.ARRAY
    entries: List[Expression] = field(default_factory=list)

    def __str__(self):
        return "[" + ", ".join(str(e) for e in self.entries) + "]"


@dataclass
class Return(Expression):
    type = ExpressionType.RETURN
    value: Expression


@dataclass
class FunctionDeclaration(Expression):
    """A user-defined function. `...` as the last parameter collects surplus arguments."""
    type = ExpressionType.FUNCTION_DECLARATION
    name: str
    parameters: List[str] = field(default_factory=list)
    defaults: Dict[str, Expression] = field(default_factory=dict)
    body: List[Expression] = field(default_factory=list)


@dataclass
class Script:
    statements: List[Expression] = field(default_factory=list)
    title: Optional[str] = None
    game_id: Optional[int] = None
