"""Base classes of all token-built reflection elements."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import (
    DOCBLOCK_TEMPLATE_END,
    DOCBLOCK_TEMPLATE_START,
    LONG_DESCRIPTION,
    SHORT_DESCRIPTION,
    AnnotationValue,
    Annotations,
    ReflectionAnnotation,
)
from phpscope.reflection.cache import next_element_id
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker


# Marks an omitted ``default`` argument; ``None`` is a valid default.
NO_DEFAULT: Any = object()


class ReflectionBase:
    """Common behaviour of reflections built from tokens."""

    kind: ElementKind

    def __init__(self, broker: Broker) -> None:
        self._broker = broker
        self.element_id = next_element_id()
        self.name = ""
        self._doc_comment = ReflectionAnnotation(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_pretty_name()}>"

    def get_name(self) -> str:
        return self.name

    def get_pretty_name(self) -> str:
        return self.name

    def get_broker(self) -> Broker:
        return self._broker

    def is_internal(self) -> bool:
        return False

    def is_user_defined(self) -> bool:
        return True

    def is_tokenized(self) -> bool:
        return True

    def is_complete(self) -> bool:
        return True

    def get_doc_comment(self) -> str | None:
        return self._doc_comment.get_doc_comment()

    def get_annotation_reflection(self) -> ReflectionAnnotation:
        return self._doc_comment

    def has_annotation(self, name: str) -> bool:
        return self._doc_comment.has_annotation(name)

    def get_annotation(self, name: str) -> AnnotationValue | None:
        return self._doc_comment.get_annotation(name)

    def get_annotations(self) -> Annotations:
        return self._doc_comment.get_annotations()

    def get_short_description(self) -> str | None:
        value = self.get_annotation(SHORT_DESCRIPTION)
        return value if isinstance(value, str) else None

    def get_long_description(self) -> str | None:
        value = self.get_annotation(LONG_DESCRIPTION)
        return value if isinstance(value, str) else None

    def is_deprecated(self) -> bool:
        return self.has_annotation("deprecated")


class ReflectionElement(ReflectionBase):
    """An element parsed from a token stream.

    Subclasses initialise their own state and then call ``_parse_stream``,
    which runs the parse steps in order: parent processing, start position,
    docblock, the element itself, its children and the end position.
    """

    def __init__(self, broker: Broker) -> None:
        super().__init__(broker)
        self._file_name: str | None = None
        self._start_line: int | None = None
        self._end_line: int | None = None
        self._start_position = -1
        self._end_position = -1
        # Namespace block and ``use`` aliases the element was declared under.
        self._namespace_name = ""
        self._aliases: dict[str, str] = {}

    def _parse_stream(
        self,
        stream: TokenStream,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        if stream.count() == 0:
            raise ParseError(self, stream, "Reflection token stream must not be empty.", ErrorCode.INVALID_ARGUMENT)
        self._file_name = stream.file_name
        self._process_parent(parent, stream)
        self._parse_start_line(stream)
        self._parse_doc_comment(stream, templates)
        self._parse(stream, parent)
        self._parse_children(stream, parent)
        self._parse_end_line(stream)

    def get_file_name(self) -> str | None:
        return self._file_name

    def get_file_reflection(self) -> Any:
        return self._broker.get_file(self._file_name)

    def get_start_line(self) -> int | None:
        return self._start_line

    def get_end_line(self) -> int | None:
        return self._end_line

    def get_start_position(self) -> int:
        return self._start_position

    def get_end_position(self) -> int:
        return self._end_position

    def get_source(self) -> str:
        """Return the element's source code, including its docblock."""
        tokens = self._broker.get_file_tokens(self._file_name)
        return tokens.get_source_part(self._start_position, self._end_position)

    def get_extension_name(self) -> bool:
        return False

    def get_namespace_aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def get_scope_namespace(self) -> str:
        """Return the namespace names in the element's source are resolved against."""
        return self._namespace_name

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        pass

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        raise NotImplementedError

    def _parse_children(self, stream: TokenStream, parent: Any) -> None:
        pass

    def _parse_start_line(self, stream: TokenStream) -> None:
        self._start_line = stream.get_line()
        self._start_position = stream.key()

    def _parse_end_line(self, stream: TokenStream) -> None:
        self._end_line = stream.get_line()
        self._end_position = stream.key()

    def _parse_doc_comment(self, stream: TokenStream, templates: Sequence[ReflectionAnnotation]) -> None:
        """Claim a docblock within one or two tokens before the element."""
        position = stream.key()
        doc_comment = None
        if stream.is_type(T.DOC_COMMENT, position - 1):
            offset = 1
        elif stream.is_type(T.DOC_COMMENT, position - 2):
            offset = 2
        else:
            offset = None

        if offset is not None:
            value = stream.get_value(position - offset)
            if value != DOCBLOCK_TEMPLATE_END:
                doc_comment = value
                self._start_position -= offset
        else:
            for offset in (1, 2):
                value = stream.get_value(position - offset)
                if stream.is_type(T.COMMENT, position - offset) and value.startswith(DOCBLOCK_TEMPLATE_START):
                    doc_comment = value
                    self._start_position -= offset
                    break
        self._doc_comment = ReflectionAnnotation(self, doc_comment).set_templates(templates)


def skip_anonymous_function(stream: TokenStream) -> bool:
    """Skip an anonymous function whose ``function`` keyword is under the cursor.

    Returns:
        True when an anonymous function was skipped; the cursor then rests on
        the closing bracket of its body. False leaves the cursor untouched.
    """
    position = stream.key() + 1
    while stream.get_type(position) in (T.WHITESPACE, T.COMMENT, T.DOC_COMMENT, "&"):
        position += 1
    if stream.get_type(position) != "(":
        return False
    stream.seek(position).find_matching_bracket().skip_whitespaces(True)
    if stream.is_type(T.USE):
        stream.skip_whitespaces(True).find_matching_bracket().skip_whitespaces(True)
    stream.find("{").find_matching_bracket()
    return True


def short_name_of(name: str) -> str:
    return name.rsplit("\\", 1)[-1]


def namespace_of(name: str) -> str:
    return name.rsplit("\\", 1)[0] if "\\" in name else ""
