import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from ..errors import ParseError
from .ast import (
    Array, Assignment, Comparison, ComparisonOperation, Conditional, ConditionalOperation,
    Expression, FunctionCall, FunctionDeclaration, IntegerConstant, Location, Mathematic,
    MathematicOperation, Return, Script, StringConstant, Variable,
)

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).resolve().parents[1] / "grammar" / "rascript_v0_1.lark"

VARARGS = "..."

_ID_COMMENT = re.compile(r"^\s*//\s*#ID\s*=\s*(\d+)", re.I)


def _loc(meta) -> Optional[Location]:
    if meta is None or getattr(meta, "empty", True):
        return None
    return Location(meta.line, meta.column)


def _tok_loc(tok: Token) -> Optional[Location]:
    if getattr(tok, "line", None) is None:
        return None
    return Location(tok.line, tok.column)


def _unescape(s: str) -> str:
    body = s[1:-1]
    return re.sub(r'\\(.)', lambda m: {"n": "\n", "t": "\t"}.get(m.group(1), m.group(1)), body)


@v_args(meta=True)
class ToAST(Transformer):
    def start(self, meta, items):
        return Script(statements=list(items))

    def assignment(self, meta, items):
        name, value = items
        return Assignment(name.value, value, location=_tok_loc(name))

    def _declaration(self, meta, items, body):
        name = items[0]
        params = items[1] or []
        parameters = [p[0] for p in params]
        defaults = {p[0]: p[1] for p in params if p[1] is not None}
        if VARARGS in parameters[:-1]:
            raise ParseError(f"'...' must be the last parameter of {name.value}", loc=(name.line, name.column))
        return FunctionDeclaration(
            name.value, parameters, defaults, body, location=_tok_loc(name)
        )

    def function_block(self, meta, items):
        return self._declaration(meta, items, items[2])

    def function_arrow(self, meta, items):
        value = items[2]
        return self._declaration(meta, items, [Return(value, location=value.location)])

    def param_list(self, meta, items):
        return list(items)

    def param(self, meta, items):
        return (items[0].value, None)

    def param_default(self, meta, items):
        return (items[0].value, items[1])

    def param_varargs(self, meta, items):
        return (VARARGS, None)

    def block(self, meta, items):
        return list(items)

    def return_stmt(self, meta, items):
        return Return(items[0], location=_loc(meta))

    def or_op(self, meta, items):
        return self._logical(meta, ConditionalOperation.OR, items)

    def and_op(self, meta, items):
        return self._logical(meta, ConditionalOperation.AND, items)

    def _logical(self, meta, operation, items):
        # flatten left-recursive chains: (a && b) && c -> a && b && c
        operands: List[Expression] = []
        for it in items:
            if isinstance(it, Conditional) and it.operation == operation:
                operands.extend(it.operands)
            else:
                operands.append(it)
        return Conditional(operation, operands, location=_loc(meta))

    def not_op(self, meta, items):
        return Conditional(ConditionalOperation.NOT, [items[0]], location=_loc(meta))

    def compare(self, meta, items):
        left, op, right = items
        return Comparison(left, ComparisonOperation(op.value), right, location=_loc(meta))

    def _math(self, meta, items, operation):
        return Mathematic(items[0], operation, items[1], location=_loc(meta))

    def add(self, meta, items):
        return self._math(meta, items, MathematicOperation.ADD)

    def subtract(self, meta, items):
        return self._math(meta, items, MathematicOperation.SUBTRACT)

    def multiply(self, meta, items):
        return self._math(meta, items, MathematicOperation.MULTIPLY)

    def divide(self, meta, items):
        return self._math(meta, items, MathematicOperation.DIVIDE)

    def modulus(self, meta, items):
        return self._math(meta, items, MathematicOperation.MODULUS)

    def negate(self, meta, items):
        operand = items[0]
        if isinstance(operand, IntegerConstant):
            return IntegerConstant(-operand.value, location=_loc(meta))
        return Mathematic(IntegerConstant(0), MathematicOperation.SUBTRACT, operand, location=_loc(meta))

    def number(self, meta, items):
        tok = items[0]
        value = int(tok.value, 16) if tok.type == "HEX_NUMBER" else int(tok.value)
        return IntegerConstant(value, location=_tok_loc(tok))

    def string(self, meta, items):
        tok = items[0]
        return StringConstant(_unescape(tok.value), location=_tok_loc(tok))

    def variable(self, meta, items):
        tok = items[0]
        return Variable(tok.value, location=_tok_loc(tok))

    def call(self, meta, items):
        name = items[0]
        args = items[1] or []
        return FunctionCall(name.value, args, location=_tok_loc(name))

    def arg_list(self, meta, items):
        return list(items)

    def named_arg(self, meta, items):
        name, value = items
        return Assignment(name.value, value, location=_tok_loc(name))

    def array(self, meta, items):
        return Array([i for i in items if i is not None], location=_loc(meta))


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(),
        start="start",
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=True,
    )


def _read_header(text: str) -> tuple[Optional[str], Optional[int]]:
    """First comment line is the game title; `// #ID = n` sets the game id."""
    title = None
    game_id = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith("//"):
            break
        m = _ID_COMMENT.match(stripped)
        if m:
            game_id = int(m.group(1))
        elif title is None:
            title = stripped[2:].strip()
    return title, game_id


def parse_script(text: str) -> Script:
    try:
        tree = _parser().parse(text)
    except UnexpectedEOF as e:
        raise ParseError("Unexpected end of script", hint=f"Expected one of: {', '.join(sorted(e.expected))}") from e
    except UnexpectedToken as e:
        raise ParseError(
            f"Unexpected '{e.token}'", loc=(e.line, e.column),
            hint=f"Expected one of: {', '.join(sorted(e.expected))}"
        ) from e
    except UnexpectedCharacters as e:
        raise ParseError(f"Unexpected character '{e.char}'", loc=(e.line, e.column)) from e
    except UnexpectedInput as e:
        raise ParseError(f"Invalid syntax: {e}", loc=(e.line, e.column)) from e

    try:
        script = ToAST().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise
    script.title, script.game_id = _read_header(text)
    logger.debug(f"Parsed {len(script.statements)} statements")
    return script


def parse_script_file(path: str) -> Script:
    return parse_script(Path(path).read_text())
