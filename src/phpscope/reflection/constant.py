"""Class and namespace level constants."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import ReflectionAnnotation
from phpscope.reflection.base import ReflectionElement, short_name_of
from phpscope.reflection.evaluator import php_type, to_php_string
from phpscope.reflection.resolver import get_source_code, get_value_definition
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T, Token

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

_OPENING = frozenset({"(", "[", "{"})
_CLOSING = frozenset({")", "]", "}"})
_STATEMENT_BOUNDARIES = frozenset({";", "{", "}"})
_LEADING = frozenset({T.WHITESPACE, T.PUBLIC, T.PROTECTED, T.PRIVATE, T.FINAL})


class ReflectionConstant(ReflectionElement):
    """A constant declared with ``const`` in a class body or a namespace."""

    kind = ElementKind.CONSTANT

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._declaring_class_name: str | None = None
        self._definition: list[Token] = []
        self._parse_stream(stream, parent, templates)

    def get_short_name(self) -> str:
        return short_name_of(self.name)

    def get_namespace_name(self) -> str:
        if self._declaring_class_name is not None:
            return ""
        return self._namespace_name

    def in_namespace(self) -> bool:
        return self.get_namespace_name() != ""

    def get_pretty_name(self) -> str:
        if self._declaring_class_name is None:
            return self.name
        return f"{self._declaring_class_name}::{self.name}"

    def get_declaring_class_name(self) -> str | None:
        return self._declaring_class_name

    def get_declaring_class(self) -> Any:
        if self._declaring_class_name is None:
            return None
        return self._broker.get_class(self._declaring_class_name)

    def get_value(self) -> Any:
        """Evaluate the value definition.

        References to other constants are resolved through the broker; the
        result is memoized once every reference resolved.
        """
        return self._broker.cache.get(self.element_id, "value", self._evaluate)

    def _evaluate(self) -> tuple[Any, bool]:
        return get_value_definition(self._definition, self)

    def get_value_definition(self) -> str | None:
        return get_source_code(self._definition)

    def get_original_value_definition(self) -> list[Token]:
        return list(self._definition)

    def is_valid(self) -> bool:
        return True

    def __str__(self) -> str:
        value = self.get_value()
        return f"Constant [ {php_type(value)} {self.get_pretty_name()} ] {{ {to_php_string(value)} }}\n"

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind == ElementKind.NAMESPACE:
            self._namespace_name = parent.get_namespace_name()
            self._aliases = parent.get_namespace_aliases()
        elif parent.kind == ElementKind.CLASS:
            self._declaring_class_name = parent.get_name()
            self._namespace_name = parent.get_namespace_name()
            self._aliases = parent.get_namespace_aliases()
        else:
            raise ParseError(
                self, stream, f'Invalid parent reflection provided: "{type(parent).__name__}".', ErrorCode.INVALID_PARENT
            )

    def _parse_doc_comment(self, stream: TokenStream, templates: Sequence[ReflectionAnnotation]) -> None:
        # Every constant of a ``const A = 1, B = 2;`` list shares the docblock
        # in front of the ``const`` keyword.
        actual = stream.key()
        start = self._start_position
        position = actual - 1
        while position >= 0 and not stream.is_type(T.CONST, position):
            if stream.get_type(position) in _STATEMENT_BOUNDARIES:
                position = -1
                break
            position -= 1
        if position < 0:
            position = actual
        else:
            previous = position - 1
            while previous > 0 and stream.get_type(previous) in _LEADING:
                if stream.get_type(previous) != T.WHITESPACE:
                    position = previous
                previous -= 1
        stream.seek(position)
        super()._parse_doc_comment(stream, templates)
        stream.seek(actual)
        self._start_position = start

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        if stream.is_type(T.CONST):
            stream.skip_whitespaces(True)
        self._parse_name(stream)
        self._parse_value(stream)

    def _parse_name(self, stream: TokenStream) -> None:
        if not stream.is_type(T.STRING):
            raise ParseError(self, stream, "The constant name could not be determined.", ErrorCode.LOGICAL_ERROR)
        name = stream.get_value()
        if self._declaring_class_name is None and self._namespace_name:
            name = f"{self._namespace_name}\\{name}"
        self.name = name
        stream.skip_whitespaces(True)

    def _parse_value(self, stream: TokenStream) -> None:
        if not stream.is_type("="):
            raise ParseError(self, stream, "Could not find the definition start.", ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces(True)

        level = 0
        while (token_type := stream.get_type()) is not None:
            if token_type in (",", ";") and level == 0:
                break
            if token_type in _OPENING:
                level += 1
            elif token_type in _CLOSING:
                level -= 1
            self._definition.append(stream.current())
            stream.skip_whitespaces(True)

        if not self._definition:
            raise ParseError(self, stream, "Value definition is empty.", ErrorCode.LOGICAL_ERROR)
        if token_type is None:
            raise ParseError(self, stream, "Invalid value definition.", ErrorCode.LOGICAL_ERROR)
