"""Exception hierarchy.

Every error carries an ``ErrorCode`` and, where one is known, the element
(``sender``) that raised it. ``get_detail()`` renders additional diagnostic
text such as the offending token and the surrounding source lines.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from phpscope.stream.stream import TokenStream


class ErrorCode(str, Enum):
    """Reasons an operation can fail."""

    DOES_NOT_EXIST = "does_not_exist"
    INVALID_ARGUMENT = "invalid_argument"
    UNSUPPORTED = "unsupported"
    ALREADY_EXISTS = "already_exists"
    NOT_ACCESSIBLE = "not_accessible"
    UNEXPECTED_TOKEN = "unexpected_token"
    LOGICAL_ERROR = "logical_error"
    INVALID_PARENT = "invalid_parent"
    READ_BEYOND_EOS = "read_beyond_eos"


def _describe(sender: Any) -> str | None:
    if sender is None:
        return None
    # Senders can be half-built while their own parse is failing.
    name = getattr(sender, "name", None)
    return f"{type(sender).__name__} {name}" if name else type(sender).__name__


class PhpScopeError(Exception):
    """Base exception for all phpscope errors."""

    def __init__(self, message: str, code: ErrorCode | None = None, sender: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.sender = sender

    def get_sender_name(self) -> str | None:
        return _describe(self.sender)

    def get_detail(self) -> str:
        """Return extra diagnostic text; empty when there is none."""
        name = self.get_sender_name()
        return f"Thrown when working with {name}." if name else ""


class StreamError(PhpScopeError):
    """Token stream failure (missing file, unbalanced brackets, ...)."""

    def __init__(
        self,
        stream: TokenStream | None,
        message: str,
        code: ErrorCode | None = None,
        sender: Any = None,
    ) -> None:
        super().__init__(message, code, sender)
        self.file_name = stream.file_name if stream is not None else None

    def get_detail(self) -> str:
        if self.file_name:
            return f"Thrown when working with file {self.file_name} token stream."
        return super().get_detail()


class ParseError(StreamError):
    """Raised while turning tokens into elements.

    Scoped to one file: the driver discards that file's elements and carries
    on with the rest of the batch.
    """

    SOURCE_LINES_AROUND = 5

    def __init__(
        self,
        sender: Any,
        stream: TokenStream | None,
        message: str,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(stream, message, code, sender)
        self.token = None
        self.line: int | None = None
        self._source_lines: list[str] = []
        if stream is not None:
            self.token = stream.current()
            if self.token is None and stream.count() > 0:
                self.token = stream.token_at(stream.count() - 1)
            if self.token is not None:
                self.line = self.token.line
                self._source_lines = stream.get_source_part().split("\n")

    def get_detail(self) -> str:
        if self.token is None or self.line is None:
            return super().get_detail()
        first = max(self.line - self.SOURCE_LINES_AROUND, 1)
        last = min(self.line + self.SOURCE_LINES_AROUND, len(self._source_lines))
        width = len(str(last))
        excerpt = "\n".join(
            f"{number:>{width}}: {self._source_lines[number - 1]}" for number in range(first, last + 1)
        )
        where = f"{self.file_name} " if self.file_name else ""
        return (
            f'The cause of the exception was the {self.token.type} token "{self.token.value}" '
            f"(line {self.line}) in the following part of {where}source code:\n\n{excerpt}"
        )


class ReflectionRuntimeError(PhpScopeError):
    """Raised by queries against already parsed elements."""


class BrokerError(PhpScopeError):
    """Raised by the registry and the processing driver."""


class FileProcessingError(BrokerError):
    """Aggregates every reason one file could not be processed."""

    def __init__(self, reasons: list[PhpScopeError], file_name: str | None = None) -> None:
        where = f' "{file_name}"' if file_name else ""
        super().__init__(f"There was an error processing the file{where}.", ErrorCode.UNSUPPORTED)
        self.reasons = list(reasons)
        self.file_name = file_name

    def get_reasons(self) -> list[PhpScopeError]:
        return list(self.reasons)

    def get_detail(self) -> str:
        lines = [f"There were {len(self.reasons)} errors:"]
        for reason in self.reasons:
            lines.append(f"  - {reason.message}")
            detail = reason.get_detail()
            if detail:
                lines.append(f"    {detail.splitlines()[0]}")
        return "\n".join(lines)


class BatchProcessingError(BrokerError):
    """Aggregates the failures of a directory run."""

    def __init__(self, failures: dict[str, PhpScopeError]) -> None:
        super().__init__(f"{len(failures)} file(s) could not be processed.", ErrorCode.UNSUPPORTED)
        self.failures = dict(failures)

    def get_detail(self) -> str:
        return "\n".join(f"{path}: {error.message}" for path, error in self.failures.items())
