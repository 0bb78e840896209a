"""Token kinds and the token record shared by the stream layer.

Token kinds follow the PHP tokenizer naming (``T_CLASS``, ``T_STRING``, ...)
so that parsers can be written against the familiar vocabulary. Single
character punctuation and operators that carry no dedicated kind use their
literal text as the kind (``"{"``, ``";"``, ``"="``...).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class T(str, Enum):
    """Named token kinds."""

    OPEN_TAG = "T_OPEN_TAG"
    CLOSE_TAG = "T_CLOSE_TAG"
    INLINE_HTML = "T_INLINE_HTML"
    WHITESPACE = "T_WHITESPACE"
    COMMENT = "T_COMMENT"
    DOC_COMMENT = "T_DOC_COMMENT"

    STRING = "T_STRING"
    VARIABLE = "T_VARIABLE"
    CONSTANT_ENCAPSED_STRING = "T_CONSTANT_ENCAPSED_STRING"
    HEREDOC = "T_HEREDOC"
    LNUMBER = "T_LNUMBER"
    DNUMBER = "T_DNUMBER"

    NS_SEPARATOR = "T_NS_SEPARATOR"
    DOUBLE_COLON = "T_DOUBLE_COLON"
    DOUBLE_ARROW = "T_DOUBLE_ARROW"
    ELLIPSIS = "T_ELLIPSIS"

    ABSTRACT = "T_ABSTRACT"
    ARRAY = "T_ARRAY"
    AS = "T_AS"
    CALLABLE = "T_CALLABLE"
    CLASS = "T_CLASS"
    CONST = "T_CONST"
    DECLARE = "T_DECLARE"
    EXTENDS = "T_EXTENDS"
    FINAL = "T_FINAL"
    FUNCTION = "T_FUNCTION"
    IMPLEMENTS = "T_IMPLEMENTS"
    INSTEADOF = "T_INSTEADOF"
    INTERFACE = "T_INTERFACE"
    NAMESPACE = "T_NAMESPACE"
    NEW = "T_NEW"
    PRIVATE = "T_PRIVATE"
    PROTECTED = "T_PROTECTED"
    PUBLIC = "T_PUBLIC"
    STATIC = "T_STATIC"
    TRAIT = "T_TRAIT"
    USE = "T_USE"
    VAR = "T_VAR"
    RESERVED = "T_RESERVED"

    FILE = "T_FILE"
    LINE = "T_LINE"
    DIR = "T_DIR"
    FUNC_C = "T_FUNC_C"
    CLASS_C = "T_CLASS_C"
    METHOD_C = "T_METHOD_C"
    TRAIT_C = "T_TRAIT_C"
    NS_C = "T_NS_C"

    def __str__(self) -> str:
        return self.value


KEYWORDS: dict[str, T] = {
    "abstract": T.ABSTRACT,
    "array": T.ARRAY,
    "as": T.AS,
    "callable": T.CALLABLE,
    "class": T.CLASS,
    "const": T.CONST,
    "declare": T.DECLARE,
    "extends": T.EXTENDS,
    "final": T.FINAL,
    "function": T.FUNCTION,
    "implements": T.IMPLEMENTS,
    "insteadof": T.INSTEADOF,
    "interface": T.INTERFACE,
    "namespace": T.NAMESPACE,
    "new": T.NEW,
    "private": T.PRIVATE,
    "protected": T.PROTECTED,
    "public": T.PUBLIC,
    "static": T.STATIC,
    "trait": T.TRAIT,
    "use": T.USE,
    "var": T.VAR,
}

MAGIC_CONSTANTS: dict[str, T] = {
    "__file__": T.FILE,
    "__line__": T.LINE,
    "__dir__": T.DIR,
    "__function__": T.FUNC_C,
    "__class__": T.CLASS_C,
    "__method__": T.METHOD_C,
    "__trait__": T.TRAIT_C,
    "__namespace__": T.NS_C,
}

# Reserved words without a dedicated kind. They must never be mistaken for
# constant names when a value expression is resolved.
RESERVED_WORDS = frozenset(
    {
        "and", "break", "case", "catch", "clone", "continue", "default", "do",
        "echo", "else", "elseif", "empty", "enddeclare", "endfor", "endforeach",
        "endif", "endswitch", "endwhile", "eval", "exit", "die", "for", "foreach",
        "global", "goto", "if", "include", "include_once", "instanceof", "isset",
        "list", "or", "print", "require", "require_once", "return", "switch",
        "throw", "try", "unset", "while", "xor", "yield", "finally", "fn", "match",
    }
)

OPERATORS: dict[str, T] = {
    "\\": T.NS_SEPARATOR,
    "::": T.DOUBLE_COLON,
    "=>": T.DOUBLE_ARROW,
    "...": T.ELLIPSIS,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token.

    Attributes:
        type: Token kind, either a ``T`` member or literal punctuation text.
        value: Raw source text of the token.
        line: 1-based source line the token starts on.
    """

    type: str
    value: str
    line: int


def classify_word(text: str) -> str:
    """Classify a keyword-like or punctuation token by its text."""
    lowered = text.lower()
    if lowered in KEYWORDS:
        return KEYWORDS[lowered]
    if lowered in MAGIC_CONSTANTS:
        return MAGIC_CONSTANTS[lowered]
    if text in OPERATORS:
        return OPERATORS[text]
    if lowered in RESERVED_WORDS:
        return T.RESERVED
    if text[:1].isalpha() or text[:1] == "_":
        return T.STRING
    return text


def classify_comment(text: str) -> T:
    """Tell documentation blocks apart from ordinary comments.

    A documentation block starts with ``/**`` followed by whitespace, the
    same rule the PHP tokenizer applies.
    """
    if text.startswith("/**") and len(text) > 4 and text[3].isspace():
        return T.DOC_COMMENT
    return T.COMMENT
