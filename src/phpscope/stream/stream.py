"""Positioned, seekable token streams consumed by the element parsers."""

from __future__ import annotations

from pathlib import Path

from phpscope.core.errors import ErrorCode, StreamError
from phpscope.stream.lexer import tokenize
from phpscope.stream.tokens import T, Token

_SKIPPED = frozenset({T.WHITESPACE, T.COMMENT})
_SKIPPED_WITH_DOC_BLOCKS = frozenset({T.WHITESPACE, T.COMMENT, T.DOC_COMMENT})
_BRACKETS = {"(": ")", "{": "}", "[": "]"}


class TokenStream:
    """Cursor over a token sequence of a single source file."""

    def __init__(self, tokens: list[Token], file_name: str | None = None) -> None:
        self._tokens = tokens
        self._position = 0
        self.file_name = file_name

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self):
        return iter(self._tokens)

    def __str__(self) -> str:
        return self.get_source_part()

    def count(self) -> int:
        return len(self._tokens)

    def key(self) -> int:
        """Return the current position."""
        return self._position

    def valid(self) -> bool:
        return 0 <= self._position < len(self._tokens)

    def current(self) -> Token | None:
        return self._tokens[self._position] if self.valid() else None

    def next(self) -> TokenStream:
        self._position += 1
        return self

    def seek(self, position: int) -> TokenStream:
        self._position = position
        return self

    def rewind(self) -> TokenStream:
        self._position = 0
        return self

    def token_at(self, position: int) -> Token | None:
        if 0 <= position < len(self._tokens):
            return self._tokens[position]
        return None

    def get_type(self, position: int | None = None) -> str | None:
        """Return the kind of the token at ``position`` (current by default)."""
        token = self.token_at(self._position if position is None else position)
        return None if token is None else token.type

    def get_value(self, position: int | None = None) -> str | None:
        """Return the text of the token at ``position`` (current by default)."""
        token = self.token_at(self._position if position is None else position)
        return None if token is None else token.value

    def get_line(self, position: int | None = None) -> int | None:
        token = self.token_at(self._position if position is None else position)
        return None if token is None else token.line

    def is_type(self, token_type: str, position: int | None = None) -> bool:
        return self.get_type(position) == token_type

    def is_whitespace(self, doc_block: bool = False) -> bool:
        skipped = _SKIPPED_WITH_DOC_BLOCKS if doc_block else _SKIPPED
        return self.get_type() in skipped

    def skip_whitespaces(self, skip_doc_blocks: bool = False) -> TokenStream:
        """Advance at least once, then past whitespace and comments.

        Documentation blocks stop the cursor unless ``skip_doc_blocks`` is set,
        so that the following declaration can still claim them.
        """
        skipped = _SKIPPED_WITH_DOC_BLOCKS if skip_doc_blocks else _SKIPPED
        self._position += 1
        while self._position < len(self._tokens) and self._tokens[self._position].type in skipped:
            self._position += 1
        return self

    def find(self, token_type: str) -> TokenStream:
        """Move to the next token of the given kind, starting at the current one."""
        for position in range(self._position, len(self._tokens)):
            if self._tokens[position].type == token_type:
                self._position = position
                return self
        raise StreamError(
            self, f'There is no token of type "{token_type}" in the rest of the stream.', ErrorCode.DOES_NOT_EXIST
        )

    def find_matching_bracket(self) -> TokenStream:
        """Move to the bracket closing the one under the cursor.

        A search for ``}`` also balances nested ``{``.
        """
        if not self.valid():
            raise StreamError(self, "Out of token stream.", ErrorCode.READ_BEYOND_EOS)
        bracket = self._tokens[self._position].type
        if bracket not in _BRACKETS:
            raise StreamError(
                self, f'There is no bracket at position {self._position}.', ErrorCode.DOES_NOT_EXIST
            )
        searching = _BRACKETS[bracket]
        level = 0
        position = self._position
        while position < len(self._tokens):
            token_type = self._tokens[position].type
            if token_type == searching:
                level -= 1
            elif token_type == bracket:
                level += 1
            if level == 0:
                self._position = position
                return self
            position += 1
        raise StreamError(self, "Could not find the end bracket.", ErrorCode.READ_BEYOND_EOS)

    def get_source_part(self, start: int | None = None, end: int | None = None) -> str:
        """Return the source text of tokens ``start`` through ``end`` inclusive."""
        start = 0 if start is None else max(start, 0)
        end = len(self._tokens) - 1 if end is None else end
        return "".join(token.value for token in self._tokens[start : end + 1])

    def tokens(self, start: int = 0, end: int | None = None) -> list[Token]:
        return self._tokens[start:end]


class StringStream(TokenStream):
    """Token stream built from source text."""

    def __init__(self, source: str, file_name: str) -> None:
        super().__init__(tokenize(source), file_name)


class FileStream(TokenStream):
    """Token stream built from a file on disk."""

    def __init__(self, file_name: str | Path) -> None:
        path = Path(file_name)
        if not path.is_file():
            raise StreamError(None, f'File "{path}" does not exist.', ErrorCode.DOES_NOT_EXIST)
        try:
            source = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise StreamError(None, f'Could not read file "{path}": {exc}', ErrorCode.DOES_NOT_EXIST) from exc
        super().__init__(tokenize(source), str(path.resolve()))
