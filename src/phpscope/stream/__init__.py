"""Token source: tree-sitter backed lexer and seekable token streams."""

from phpscope.stream.lexer import tokenize
from phpscope.stream.stream import FileStream, StringStream, TokenStream
from phpscope.stream.tokens import T, Token

__all__ = [
    "FileStream",
    "StringStream",
    "T",
    "Token",
    "TokenStream",
    "tokenize",
]
