"""Evaluation of constant-like PHP literal expressions.

Only what may appear in a constant, property or parameter default is
supported: scalar literals, array literals, unary and binary operators, the
ternary operator and parentheses. References to other symbols must already
be resolved; the resolver splices them in as ``Literal`` items.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any, NamedTuple

from phpscope.core.errors import ErrorCode, PhpScopeError
from phpscope.stream.tokens import T, Token

_SKIPPED = frozenset({T.WHITESPACE, T.COMMENT, T.DOC_COMMENT})

_DOUBLE_QUOTED_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9A-Fa-f]+\}|x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)", re.DOTALL)
_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


class Literal(NamedTuple):
    """An already evaluated value spliced into a token range."""

    value: Any
    line: int = 0


class EvaluationError(PhpScopeError):
    """The expression is not a supported literal expression."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.UNSUPPORTED)


def unescape_double_quoted(body: str) -> str:
    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape in _DOUBLE_QUOTED_ESCAPES:
            return _DOUBLE_QUOTED_ESCAPES[escape]
        if escape.startswith("u{"):
            return chr(int(escape[2:-1], 16))
        if escape[0] == "x" and len(escape) > 1:
            return chr(int(escape[1:], 16))
        if escape[0] in "01234567":
            return chr(int(escape, 8) & 0xFF)
        return "\\" + escape

    return _ESCAPE_RE.sub(replace, body)


def unescape_single_quoted(body: str) -> str:
    return re.sub(r"\\([\\'])", r"\1", body)


def parse_string_literal(text: str) -> str:
    """Decode a quoted string literal token."""
    if text[:1] in ("b", "B") and len(text) > 1 and text[1] in "'\"":
        text = text[1:]
    quote = text[:1]
    body = text[1:-1]
    if quote == "'":
        return unescape_single_quoted(body)
    return unescape_double_quoted(body)


def parse_heredoc(text: str) -> str:
    """Decode a heredoc or nowdoc token."""
    lines = text.split("\n")
    opener = lines[0].strip()
    closing = lines[-1] if len(lines) > 1 else ""
    body_lines = lines[1:-1]
    indent = len(closing) - len(closing.lstrip())
    if indent:
        body_lines = [line[indent:] if line[:indent].isspace() else line.lstrip() for line in body_lines]
    body = "\n".join(body_lines)
    if "'" in opener:
        return body
    return unescape_double_quoted(body)


def parse_number(text: str, kind: str) -> int | float:
    text = text.replace("_", "")
    lowered = text.lower()
    if kind == T.DNUMBER:
        return float(lowered)
    if lowered.startswith("0x"):
        return int(lowered[2:], 16)
    if lowered.startswith("0b"):
        return int(lowered[2:], 2)
    if lowered.startswith("0o"):
        return int(lowered[2:], 8)
    if len(lowered) > 1 and lowered.startswith("0"):
        return int(lowered, 8)
    value = int(lowered)
    return value if value <= 0x7FFFFFFFFFFFFFFF else float(value)


def to_php_string(value: Any) -> str:
    """Convert a value the way PHP string conversion does."""
    if value is True:
        return "1"
    if value is False or value is None:
        return ""
    if isinstance(value, float):
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        if math.isnan(value):
            return "NAN"
        if value == int(value) and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        return "Array"
    return str(value)


def to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        match = re.match(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", value)
        if not match:
            return 0
        number = match.group(0)
        if match.group(2) or match.group(3) or number.strip().startswith("."):
            return float(number)
        return int(number)
    if isinstance(value, (list, dict)):
        return 1 if value else 0
    return 0


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def php_type(value: Any) -> str:
    """Return the PHP ``gettype()`` name of a native value."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "double"
    if isinstance(value, (list, dict)):
        return "array"
    return "string"


def php_export(value: Any) -> str:
    """Render a native value as PHP source, like ``var_export()``."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return to_php_string(value)
    if isinstance(value, (list, dict)):
        items = value.items() if isinstance(value, dict) else enumerate(value)
        body = "".join(f"  {php_export(key)} => {php_export(item)},\n" for key, item in items)
        return f"array (\n{body})"
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _normalize_key(key: Any) -> int | str:
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float):
        return int(key)
    if key is None:
        return ""
    if isinstance(key, str) and re.fullmatch(r"-?[1-9]\d*|0", key):
        return int(key)
    if isinstance(key, (list, dict)):
        raise EvaluationError("Illegal offset type.")
    return key


def php_array(pairs: list[tuple[Any, Any]]) -> list | dict:
    """Build a native value from PHP array entries.

    Arrays whose keys are exactly ``0..n-1`` in order become lists, all
    others become dicts preserving insertion order.
    """
    result: dict[int | str, Any] = {}
    next_index = 0
    for key, value in pairs:
        if key is None:
            key = next_index
        else:
            key = _normalize_key(key)
        result[key] = value
        if isinstance(key, int) and key >= next_index:
            next_index = key + 1
    if list(result.keys()) == list(range(len(result))):
        return list(result.values())
    return result


def _array_items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, list):
        return list(enumerate(value))
    if isinstance(value, dict):
        return list(value.items())
    raise EvaluationError("Only arrays can be unpacked or united.")


def _loose_equals(left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        if _NUMERIC_RE.match(left) and _NUMERIC_RE.match(right):
            return to_number(left) == to_number(right)
        return left == right
    if left is None or right is None or isinstance(left, bool) or isinstance(right, bool):
        return to_bool(left) == to_bool(right)
    if isinstance(left, (int, float)) or isinstance(right, (int, float)):
        return to_number(left) == to_number(right)
    return left == right


def _compare(left: Any, right: Any) -> int:
    if isinstance(left, str) and isinstance(right, str) and not (
        _NUMERIC_RE.match(left) and _NUMERIC_RE.match(right)
    ):
        return (left > right) - (left < right)
    a, b = to_number(left), to_number(right)
    return (a > b) - (a < b)


def _divide(left: Any, right: Any) -> int | float:
    a, b = to_number(left), to_number(right)
    if b == 0:
        raise EvaluationError("Division by zero.")
    if isinstance(a, int) and isinstance(b, int) and a % b == 0:
        return a // b
    return a / b


def _modulo(left: Any, right: Any) -> int:
    a, b = int(to_number(left)), int(to_number(right))
    if b == 0:
        raise EvaluationError("Modulo by zero.")
    return int(math.fmod(a, b))


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, (list, dict)) and isinstance(right, (list, dict)):
        pairs = dict(_array_items(left))
        for key, value in _array_items(right):
            pairs.setdefault(key, value)
        return php_array(list(pairs.items()))
    return to_number(left) + to_number(right)


_BINARY = {
    ".": lambda a, b: to_php_string(a) + to_php_string(b),
    "+": _add,
    "-": lambda a, b: to_number(a) - to_number(b),
    "*": lambda a, b: to_number(a) * to_number(b),
    "/": _divide,
    "%": _modulo,
    "**": lambda a, b: to_number(a) ** to_number(b),
    "<<": lambda a, b: int(to_number(a)) << int(to_number(b)),
    ">>": lambda a, b: int(to_number(a)) >> int(to_number(b)),
    "&": lambda a, b: int(to_number(a)) & int(to_number(b)),
    "|": lambda a, b: int(to_number(a)) | int(to_number(b)),
    "^": lambda a, b: int(to_number(a)) ^ int(to_number(b)),
    "==": _loose_equals,
    "!=": lambda a, b: not _loose_equals(a, b),
    "<>": lambda a, b: not _loose_equals(a, b),
    "===": lambda a, b: type(a) is type(b) and a == b,
    "!==": lambda a, b: not (type(a) is type(b) and a == b),
    "<": lambda a, b: _compare(a, b) < 0,
    ">": lambda a, b: _compare(a, b) > 0,
    "<=": lambda a, b: _compare(a, b) <= 0,
    ">=": lambda a, b: _compare(a, b) >= 0,
    "<=>": _compare,
}

# Binary operator precedence levels, loosest first.
_LEVELS: list[tuple[str, ...]] = [
    ("||", "or"),
    ("&&", "and"),
    ("xor",),
    ("|",),
    ("^",),
    ("&",),
    ("==", "!=", "===", "!==", "<>", "<=>"),
    ("<", ">", "<=", ">="),
    (".",),
    ("<<", ">>"),
    ("+", "-"),
    ("*", "/", "%"),
]


class _Parser:
    def __init__(self, items: Sequence[Token | Literal]) -> None:
        self._items = [
            item for item in items if isinstance(item, Literal) or item.type not in _SKIPPED
        ]
        self._position = 0

    def _peek(self) -> Token | Literal | None:
        if self._position < len(self._items):
            return self._items[self._position]
        return None

    def _peek_value(self) -> str | None:
        item = self._peek()
        if item is None or isinstance(item, Literal):
            return None
        return item.value.lower()

    def _advance(self) -> Token | Literal:
        item = self._peek()
        if item is None:
            raise EvaluationError("Unexpected end of expression.")
        self._position += 1
        return item

    def _expect(self, value: str) -> None:
        if self._peek_value() != value:
            raise EvaluationError(f'Expected "{value}".')
        self._position += 1

    def parse(self) -> Any:
        if not self._items:
            raise EvaluationError("Empty expression.")
        value = self._ternary()
        if self._peek() is not None:
            raise EvaluationError(f'Unexpected "{self._peek_value()}" in expression.')
        return value

    def _ternary(self) -> Any:
        condition = self._coalesce()
        while self._peek_value() == "?":
            self._position += 1
            if self._peek_value() == ":":
                self._position += 1
                otherwise = self._coalesce()
                condition = condition if to_bool(condition) else otherwise
                continue
            then = self._ternary()
            self._expect(":")
            otherwise = self._coalesce()
            condition = then if to_bool(condition) else otherwise
        return condition

    def _coalesce(self) -> Any:
        left = self._binary(0)
        if self._peek_value() == "??":
            self._position += 1
            right = self._coalesce()
            return right if left is None else left
        return left

    def _binary(self, level: int) -> Any:
        if level == len(_LEVELS):
            return self._unary()
        left = self._binary(level + 1)
        operators = _LEVELS[level]
        while self._peek_value() in operators:
            operator = self._peek_value()
            self._position += 1
            right = self._binary(level + 1)
            if operator in ("||", "or"):
                left = to_bool(left) or to_bool(right)
            elif operator in ("&&", "and"):
                left = to_bool(left) and to_bool(right)
            elif operator == "xor":
                left = to_bool(left) != to_bool(right)
            else:
                left = _BINARY[operator](left, right)
        return left

    def _unary(self) -> Any:
        operator = self._peek_value()
        if operator in ("!", "-", "+", "~"):
            self._position += 1
            operand = self._unary()
            if operator == "!":
                return not to_bool(operand)
            if operator == "-":
                return -to_number(operand)
            if operator == "+":
                return to_number(operand)
            return ~int(to_number(operand))
        if operator == "@":
            self._position += 1
            return self._unary()
        return self._power()

    def _power(self) -> Any:
        base = self._primary()
        if self._peek_value() == "**":
            self._position += 1
            return _BINARY["**"](base, self._unary())
        return base

    def _primary(self) -> Any:
        item = self._advance()
        if isinstance(item, Literal):
            return item.value
        kind, text = item.type, item.value
        if kind in (T.LNUMBER, T.DNUMBER):
            return parse_number(text, kind)
        if kind == T.CONSTANT_ENCAPSED_STRING:
            return parse_string_literal(text)
        if kind == T.HEREDOC:
            return parse_heredoc(text)
        if kind == "(":
            value = self._ternary()
            self._expect(")")
            return value
        if kind == T.ARRAY and self._peek_value() == "(":
            self._position += 1
            return self._array(")")
        if kind == "[":
            return self._array("]")
        if kind == T.STRING:
            lowered = text.lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            if lowered == "null":
                return None
        raise EvaluationError(f'Unsupported token "{text}" in expression.')

    def _array(self, closing: str) -> list | dict:
        pairs: list[tuple[Any, Any]] = []
        while self._peek_value() != closing:
            if self._peek_value() == "...":
                self._position += 1
                for key, value in _array_items(self._ternary()):
                    pairs.append((None if isinstance(key, int) else key, value))
            else:
                if self._peek_value() == "&":
                    self._position += 1
                first = self._ternary()
                if self._peek_value() == "=>":
                    self._position += 1
                    if self._peek_value() == "&":
                        self._position += 1
                    pairs.append((first, self._ternary()))
                else:
                    pairs.append((None, first))
            if self._peek_value() == ",":
                self._position += 1
            elif self._peek_value() != closing:
                raise EvaluationError("Malformed array literal.")
        self._position += 1
        return php_array(pairs)


def evaluate(items: Sequence[Token | Literal]) -> Any:
    """Evaluate a literal expression.

    Args:
        items: Tokens of the expression, with resolved references already
            replaced by ``Literal`` items.

    Returns:
        The native Python value of the expression.

    Raises:
        EvaluationError: The expression is empty or not a literal expression.
    """
    return _Parser(items).parse()
