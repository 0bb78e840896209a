"""Namespace level functions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import ReflectionAnnotation
from phpscope.reflection.function_base import ReflectionFunctionBase
from phpscope.stream.stream import TokenStream

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker


class ReflectionFunction(ReflectionFunctionBase):
    """A function declared in a namespace block."""

    kind = ElementKind.FUNCTION

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._parse_stream(stream, parent, templates)

    def is_disabled(self) -> bool:
        return self.has_annotation("disabled")

    def is_valid(self) -> bool:
        return True

    def __str__(self) -> str:
        doc_comment = self.get_doc_comment()
        return (
            f"{doc_comment + chr(10) if doc_comment else ''}"
            f"Function [ <user> function {'&' if self._returns_reference else ''}{self.name} ] {{\n"
            f"  @@ {self._file_name} {self._start_line} - {self._end_line}{self._export_parameters()}\n}}\n"
        )

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind != ElementKind.NAMESPACE:
            raise ParseError(
                self, stream, "The parent object has to be a namespace block reflection.", ErrorCode.INVALID_PARENT
            )
        self._namespace_name = parent.get_namespace_name()
        self._aliases = parent.get_namespace_aliases()

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        self._parse_returns_reference(stream)
        self._parse_name(stream)
        if self._namespace_name:
            self.name = f"{self._namespace_name}\\{self.name}"
