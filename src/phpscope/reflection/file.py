"""Source files and the namespace blocks they consist of."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError, StreamError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import DOCBLOCK_TEMPLATE_END, DOCBLOCK_TEMPLATE_START, ReflectionAnnotation
from phpscope.reflection.base import ReflectionBase, ReflectionElement, skip_anonymous_function
from phpscope.reflection.classes import ReflectionClass
from phpscope.reflection.constant import ReflectionConstant
from phpscope.reflection.functions import ReflectionFunction
from phpscope.reflection.placeholders import InvalidClass, InvalidConstant, InvalidFunction
from phpscope.reflection.resolver import NO_NAMESPACE_NAME
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

logger = logging.getLogger(__name__)

_CLASS_START = frozenset({T.ABSTRACT, T.FINAL, T.CLASS, T.INTERFACE, T.TRAIT})
_SKIPPED = frozenset({T.WHITESPACE, T.COMMENT, T.DOC_COMMENT})


def _significant_type(stream: TokenStream, position: int, step: int) -> str | None:
    position += step
    while stream.get_type(position) in _SKIPPED:
        position += step
    return stream.get_type(position)


class ReflectionFileNamespace(ReflectionElement):
    """One ``namespace`` block of a file (or the implicit global block).

    Besides its declarations the block tracks the ``use`` imports seen so
    far; every declaration captures the imports in effect where it is
    declared.
    """

    kind = ElementKind.NAMESPACE

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._classes: dict[str, Any] = {}
        self._functions: dict[str, Any] = {}
        self._constants: dict[str, Any] = {}
        self._function_aliases: dict[str, str] = {}
        self._constant_aliases: dict[str, str] = {}
        self._parse_stream(stream, parent, templates)

    def get_name(self) -> str:
        return self._namespace_name or NO_NAMESPACE_NAME

    def get_namespace_name(self) -> str:
        """Return the namespace name, empty for the global namespace."""
        return self._namespace_name

    def get_classes(self) -> dict[str, Any]:
        return dict(self._classes)

    def get_functions(self) -> dict[str, Any]:
        return dict(self._functions)

    def get_constants(self) -> dict[str, Any]:
        return dict(self._constants)

    def get_function_aliases(self) -> dict[str, str]:
        return dict(self._function_aliases)

    def get_constant_aliases(self) -> dict[str, str]:
        return dict(self._constant_aliases)

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind != ElementKind.FILE:
            raise ParseError(self, stream, "The parent object has to be a file reflection.", ErrorCode.INVALID_PARENT)

    def _parse_doc_comment(self, stream: TokenStream, templates: Sequence[ReflectionAnnotation]) -> None:
        # The implicit global block must not steal the docblock of its first declaration.
        if stream.is_type(T.NAMESPACE):
            super()._parse_doc_comment(stream, templates)
        else:
            self._doc_comment = ReflectionAnnotation(self).set_templates(templates)

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        if not stream.is_type(T.NAMESPACE):
            self.name = NO_NAMESPACE_NAME
            return
        stream.skip_whitespaces(True)
        name = ""
        while stream.get_type() in (T.STRING, T.NS_SEPARATOR):
            name += stream.get_value()
            stream.skip_whitespaces(True)
        self._namespace_name = name.lstrip("\\")
        self.name = self._namespace_name or NO_NAMESPACE_NAME
        if stream.get_type() not in (";", "{"):
            raise ParseError(self, stream, 'Invalid namespace name end, expecting ";" or "{".', ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces()

    def _parse_children(self, stream: TokenStream, parent: Any) -> None:
        templates: list[ReflectionAnnotation] = []
        while (token_type := stream.get_type()) is not None:
            if token_type in ("}", T.NAMESPACE) and not self._is_relative_namespace(stream):
                break
            if token_type in (T.COMMENT, T.DOC_COMMENT):
                docblock = stream.get_value()
                if docblock.startswith(DOCBLOCK_TEMPLATE_START):
                    templates.insert(0, ReflectionAnnotation(self, docblock))
                elif docblock == DOCBLOCK_TEMPLATE_END and templates:
                    templates.pop(0)
                stream.next()
            elif token_type == "{":
                stream.find_matching_bracket().next()
            elif token_type in _CLASS_START or self._is_readonly_class(stream):
                self._parse_class(stream, tuple(templates))
            elif token_type == T.CONST:
                stream.skip_whitespaces(True)
                while stream.is_type(T.STRING):
                    self._add_constant(ReflectionConstant(stream, self._broker, self, tuple(templates)), stream)
                    if stream.is_type(","):
                        stream.skip_whitespaces(True)
                    else:
                        stream.next()
            elif token_type == T.FUNCTION:
                if skip_anonymous_function(stream) or _significant_type(stream, stream.key(), -1) in (
                    T.DOUBLE_COLON,
                    "->",
                ):
                    stream.next()
                else:
                    self._add_function(ReflectionFunction(stream, self._broker, self, tuple(templates)), stream)
                    stream.next()
            elif token_type == T.USE:
                self._parse_use(stream)
            else:
                stream.next()

    @staticmethod
    def _is_relative_namespace(stream: TokenStream) -> bool:
        # ``namespace\foo()`` refers to the current namespace.
        return stream.is_type(T.NAMESPACE) and stream.is_type(T.NS_SEPARATOR, stream.key() + 1)

    @staticmethod
    def _is_readonly_class(stream: TokenStream) -> bool:
        if not (stream.is_type(T.STRING) and stream.get_value().lower() == "readonly"):
            return False
        return _significant_type(stream, stream.key(), 1) in _CLASS_START

    def _parse_class(self, stream: TokenStream, templates: tuple[ReflectionAnnotation, ...]) -> None:
        position = stream.key()
        previous = _significant_type(stream, position, -1)
        if stream.is_type(T.CLASS) and previous in (T.DOUBLE_COLON, "->"):
            # ``Foo::class`` constant.
            stream.next()
            return
        if stream.is_type(T.CLASS) and previous == T.NEW:
            # Anonymous class: skip the arguments and the body.
            stream.find("{").find_matching_bracket().next()
            return
        self._add_class(ReflectionClass(stream, self._broker, self, templates), stream)
        stream.next()

    def _parse_use(self, stream: TokenStream) -> None:
        stream.skip_whitespaces(True)
        kind = "class"
        if stream.is_type(T.FUNCTION):
            kind = "function"
            stream.skip_whitespaces(True)
        elif stream.is_type(T.CONST):
            kind = "const"
            stream.skip_whitespaces(True)

        while True:
            name = self._read_name(stream)
            if stream.is_type("{"):
                self._parse_group_use(stream, name.strip("\\"), kind)
            else:
                self._add_import(stream, kind, name.lstrip("\\"), self._read_alias(stream))

            token_type = stream.get_type()
            if token_type == ",":
                stream.skip_whitespaces(True)
                continue
            if token_type == ";":
                stream.skip_whitespaces()
                return
            raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)

    def _parse_group_use(self, stream: TokenStream, prefix: str, kind: str) -> None:
        stream.skip_whitespaces(True)
        while not stream.is_type("}"):
            item_kind = kind
            if stream.is_type(T.FUNCTION):
                item_kind = "function"
                stream.skip_whitespaces(True)
            elif stream.is_type(T.CONST):
                item_kind = "const"
                stream.skip_whitespaces(True)
            name = self._read_name(stream).strip("\\")
            self._add_import(stream, item_kind, f"{prefix}\\{name}", self._read_alias(stream))
            if stream.is_type(","):
                stream.skip_whitespaces(True)
            elif not stream.is_type("}"):
                raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces(True)

    def _read_name(self, stream: TokenStream) -> str:
        name = ""
        while stream.get_type() in (T.STRING, T.NS_SEPARATOR):
            name += stream.get_value()
            stream.skip_whitespaces(True)
        if not name.strip("\\"):
            raise ParseError(self, stream, "Imported namespace name could not be determined.", ErrorCode.LOGICAL_ERROR)
        return name

    def _read_alias(self, stream: TokenStream) -> str | None:
        if not stream.is_type(T.AS):
            return None
        stream.skip_whitespaces(True)
        if not stream.is_type(T.STRING):
            raise ParseError(
                self, stream, "The import seems aliased but the alias name could not be determined.", ErrorCode.LOGICAL_ERROR
            )
        alias = stream.get_value()
        stream.skip_whitespaces(True)
        return alias

    def _add_import(self, stream: TokenStream, kind: str, name: str, alias: str | None) -> None:
        if name.endswith("\\"):
            raise ParseError(self, stream, f'Invalid namespace name "{name}".', ErrorCode.LOGICAL_ERROR)
        if alias is None:
            alias = name.rsplit("\\", 1)[-1]
        if kind == "function":
            self._function_aliases[alias] = name
        elif kind == "const":
            self._constant_aliases[alias] = name
        else:
            if alias in self._aliases:
                raise ParseError(self, stream, f'Namespace alias "{alias}" already defined.', ErrorCode.LOGICAL_ERROR)
            self._aliases[alias] = name

    def _conflict(self, stream: TokenStream, what: str, name: str, first: Any, sender: Any) -> ParseError:
        where = first.get_file_name() or "unknown file"
        logger.debug(f"{what} {name} is defined more than once in {stream.file_name}")
        return ParseError(sender, stream, f'{what} "{name}" is already defined; in file "{where}".', ErrorCode.ALREADY_EXISTS)

    def _add_class(self, reflection: ReflectionClass, stream: TokenStream) -> None:
        name = reflection.get_name()
        existing = self._classes.get(name)
        if existing is None:
            self._classes[name] = reflection
            return
        if not isinstance(existing, InvalidClass):
            invalid = InvalidClass(name, existing.get_file_name(), self._broker)
            self._classes[name] = existing = invalid
        existing.add_reason(self._conflict(stream, "Class", name, existing, reflection))

    def _add_function(self, reflection: ReflectionFunction, stream: TokenStream) -> None:
        name = reflection.get_name()
        existing = self._functions.get(name)
        if existing is None:
            self._functions[name] = reflection
            return
        if not isinstance(existing, InvalidFunction):
            invalid = InvalidFunction(name, existing.get_file_name(), self._broker)
            self._functions[name] = existing = invalid
        existing.add_reason(self._conflict(stream, "Function", name, existing, reflection))

    def _add_constant(self, reflection: ReflectionConstant, stream: TokenStream) -> None:
        name = reflection.get_name()
        existing = self._constants.get(name)
        if existing is None:
            self._constants[name] = reflection
            return
        if not isinstance(existing, InvalidConstant):
            invalid = InvalidConstant(name, existing.get_file_name(), self._broker)
            self._constants[name] = existing = invalid
        existing.add_reason(self._conflict(stream, "Constant", name, existing, reflection))


class ReflectionFile(ReflectionBase):
    """A processed source file: its namespace blocks and its own docblock."""

    kind = ElementKind.FILE

    def __init__(self, stream: TokenStream, broker: Broker) -> None:
        super().__init__(broker)
        self._stream = stream
        self.name = stream.file_name or ""
        self._namespaces: list[ReflectionFileNamespace] = []
        self._parse()

    def get_file_name(self) -> str:
        return self.name

    def get_namespaces(self) -> list[ReflectionFileNamespace]:
        return list(self._namespaces)

    def get_token_stream(self) -> TokenStream:
        return self._stream

    def get_source(self) -> str:
        return str(self._stream)

    def get_start_line(self) -> int:
        return 1

    def get_end_line(self) -> int | None:
        return self._stream.get_line(self._stream.count() - 1)

    def __str__(self) -> str:
        return ""

    def _parse(self) -> None:
        stream = self._stream
        try:
            stream.find(T.OPEN_TAG)
        except StreamError:
            # Only inline HTML, no PHP code.
            return
        stream.skip_whitespaces()

        doc_position = -1
        while (token_type := stream.get_type()) is not None:
            if token_type == T.DOC_COMMENT and doc_position < 0:
                doc_position = stream.key()
            if token_type in (T.WHITESPACE, T.COMMENT, T.DOC_COMMENT, T.OPEN_TAG, T.CLOSE_TAG, T.INLINE_HTML, ";"):
                stream.skip_whitespaces()
            elif token_type == T.DECLARE:
                stream.skip_whitespaces(True).find_matching_bracket().skip_whitespaces()
                if stream.is_type(";"):
                    stream.skip_whitespaces()
            elif token_type == T.NAMESPACE and not stream.is_type(T.NS_SEPARATOR, stream.key() + 1):
                break
            else:
                self._namespaces.append(ReflectionFileNamespace(stream, self._broker, self))
                self._parse_doc_comment(doc_position)
                return

        while (token_type := stream.get_type()) is not None:
            if token_type == T.NAMESPACE:
                self._namespaces.append(ReflectionFileNamespace(stream, self._broker, self))
            else:
                stream.skip_whitespaces()
        self._parse_doc_comment(doc_position)

    def _parse_doc_comment(self, position: int = -1) -> None:
        """Claim the header docblock unless a declaration of the first block owns it."""
        if position < 0:
            return
        claimed: set[int] = set()
        if self._namespaces:
            first = self._namespaces[0]
            claimed.add(first.get_start_position())
            for children in (first.get_classes(), first.get_functions(), first.get_constants()):
                claimed.update(child.get_start_position() for child in children.values())
        value = self._stream.get_value(position)
        if position not in claimed and value != DOCBLOCK_TEMPLATE_END:
            self._doc_comment = ReflectionAnnotation(self, value)
