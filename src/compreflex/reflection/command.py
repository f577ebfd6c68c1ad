"""
=============================================================================
COMMAND GRAMMAR
=============================================================================

Turns the text of the 'comando' query parameter into a Command.

=============================================================================
THE GRAMMAR
=============================================================================

    Class(<type>)
    invoke(<type>, <method>)
    unaryInvoke(<type>, <method>, <kind>, <value>)
    binaryInvoke(<type>, <method>, <kind1>, <value1>, <kind2>, <value2>)

    <kind> is int | double | string (any case)

There is no nesting, so a single left-to-right scan is enough. The only
state is whether we are inside a quoted span and which quote opened it:

    unaryInvoke(builtins.str, upper, string, "a,b")
                ──────┬───── ──┬── ───┬──  ──┬──
                      │        │      │      └─ comma inside quotes:
                      │        │      │         NOT a separator
                      ▼        ▼      ▼         ▼
              ["builtins.str", "upper", "string", "\"a,b\""]

Quotes are kept on the argument. Only string coercion strips them, which
is why a quoted number passed as `int` fails: int("\"3\"") is not a number.

=============================================================================
SCAN RULES
=============================================================================

    ┌──────────────────────┬───────────────────────────────────────────────┐
    │ Character            │ Effect                                        │
    ├──────────────────────┼───────────────────────────────────────────────┤
    │ " or ' (unescaped)   │ opens a span, or closes the span it opened    │
    │ , outside a span     │ ends the current argument                     │
    │ anything else        │ appended to the current argument              │
    └──────────────────────┴───────────────────────────────────────────────┘

    After the scan: a trailing empty remainder is dropped ("a," → ["a"]),
    other empty pieces are kept (",a" → ["", "a"]).

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union
import re

from .errors import (
    EmptyCommand,
    MalformedCommand,
    UnsupportedType,
    ValueCoercionFailure,
)


QUOTES = ('"', "'")

_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")

# ASCII decimal with optional exponent, or the NaN / Infinity spellings
_DOUBLE_PATTERN = re.compile(r"^[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|NaN|Infinity)$")


@dataclass(frozen=True)
class Command:
    """
    One parsed command.

    Attributes:
        operation: Name before the parenthesis ("Class", "invoke", ...).
                   Not validated here; the engine rejects unknown names.
        arguments: Raw argument strings, left to right, trimmed, quotes kept.
    """

    operation: str
    arguments: tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.arguments)


def parse_command(raw: str) -> Command:
    """
    Parse "Operation(arg1, arg2, ...)".

    Raises:
        EmptyCommand: Nothing but whitespace.
        MalformedCommand: No '(' or ')', or the last ')' precedes the first '('.
    """
    text = (raw or "").strip()
    if not text:
        raise EmptyCommand("Empty command")

    open_at = text.find("(")
    close_at = text.rfind(")")
    if open_at < 0 or close_at < open_at:
        raise MalformedCommand("Malformed command")

    operation = text[:open_at].strip()
    inner = text[open_at + 1:close_at].strip()
    return Command(operation=operation, arguments=tuple(split_arguments(inner)))


def split_arguments(inner: str) -> list[str]:
    """Split the text between the parentheses. See SCAN RULES above."""
    arguments: list[str] = []
    current: list[str] = []
    in_quote = False
    quote_char = ""

    for i, char in enumerate(inner):
        escaped = i > 0 and inner[i - 1] == "\\"
        if char in QUOTES and not escaped:
            if not in_quote:
                in_quote = True
                quote_char = char
            elif char == quote_char:
                in_quote = False
            current.append(char)
        elif char == "," and not in_quote:
            arguments.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    last = "".join(current).strip()
    if last:
        arguments.append(last)
    return arguments


def unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes, if present."""
    text = value.strip()
    if len(text) >= 2 and text[0] in QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


# =============================================================================
# TYPED ARGUMENTS
# =============================================================================

class ValueKind(Enum):
    """
    The three parameter kinds a command may declare.

    Value is the Python type the raw text is coerced to.
    """

    INTEGER = int
    FLOAT64 = float
    TEXT = str

    @classmethod
    def from_token(cls, token: str) -> "ValueKind":
        """
        Map a type token from the command to a kind.

            "int" → INTEGER, "DOUBLE" → FLOAT64, "String" → TEXT

        Raises:
            UnsupportedType: For any other token.
        """
        kind = _KIND_TOKENS.get(token.strip().lower())
        if kind is None:
            raise UnsupportedType(f"Unsupported type: {token}")
        return kind

    @property
    def token(self) -> str:
        return _TOKEN_NAMES[self]


_KIND_TOKENS = {
    "int": ValueKind.INTEGER,
    "double": ValueKind.FLOAT64,
    "string": ValueKind.TEXT,
}
_TOKEN_NAMES = {kind: token for token, kind in _KIND_TOKENS.items()}


@dataclass(frozen=True)
class TypedValue:
    """A raw argument paired with its declared kind."""

    kind: ValueKind
    raw: str

    @classmethod
    def parse(cls, type_token: str, raw: str) -> "TypedValue":
        """Build from the (kind, value) argument pair of an invoke command."""
        return cls(kind=ValueKind.from_token(type_token), raw=raw)

    def coerce(self) -> Union[int, float, str]:
        """
        Convert the raw text to its Python value.

        Raises:
            ValueCoercionFailure: The text is not a valid int / double.
        """
        text = self.raw.strip()
        if self.kind is ValueKind.INTEGER:
            if not _INTEGER_PATTERN.match(text):
                raise ValueCoercionFailure(f"For input string: '{text}' (expected int)")
            return int(text)
        if self.kind is ValueKind.FLOAT64:
            if not _DOUBLE_PATTERN.match(text):
                raise ValueCoercionFailure(f"For input string: '{text}' (expected double)")
            return float(text)
        return unquote(text)
