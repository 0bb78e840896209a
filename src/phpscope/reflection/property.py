"""Class and trait properties."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import ReflectionAnnotation
from phpscope.reflection.base import ReflectionElement
from phpscope.reflection.cache import next_element_id, recursion_guard
from phpscope.reflection.evaluator import php_export
from phpscope.reflection.modifiers import NONE, VISIBILITY, Modifier
from phpscope.reflection.resolver import get_source_code, get_value_definition
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T, Token

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

_MODIFIERS = {
    T.PUBLIC: Modifier.PUBLIC,
    T.PRIVATE: Modifier.PRIVATE,
    T.PROTECTED: Modifier.PROTECTED,
    T.STATIC: Modifier.STATIC,
    T.VAR: Modifier.PUBLIC,
}
_TYPE_HINT = frozenset({"?", "|", T.STRING, T.NS_SEPARATOR, T.ARRAY, T.CALLABLE})
_OPENING = frozenset({"(", "[", "{"})
_CLOSING = frozenset({")", "]", "}"})


def _is_readonly(stream: TokenStream) -> bool:
    return stream.is_type(T.STRING) and stream.get_value().lower() == "readonly"


class ReflectionProperty(ReflectionElement):
    """A property declared in a class or trait body.

    In ``public $a, $b = 2;`` every variable becomes its own property; the
    ones after the first take over the modifiers of the previous sibling.
    """

    kind = ElementKind.PROPERTY

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._modifiers = NONE
        self._readonly = False
        self._type_hint: str | None = None
        self._declaring_class_name = ""
        self._declaring_trait_name: str | None = None
        self._default: list[Token] = []
        self._default_override: str | None = None
        self._accessible = False
        self._parse_stream(stream, parent, templates)

    def get_pretty_name(self) -> str:
        return f"{self._declaring_class_name}::${self.name}"

    def get_declaring_class_name(self) -> str:
        return self._declaring_class_name

    def get_declaring_class(self) -> Any:
        return self._broker.get_class(self._declaring_class_name)

    def get_declaring_trait_name(self) -> str | None:
        return self._declaring_trait_name

    def get_declaring_trait(self) -> Any:
        if self._declaring_trait_name is None:
            return None
        return self._broker.get_class(self._declaring_trait_name)

    def is_complete(self) -> bool:
        return self.get_declaring_class().is_complete()

    def is_valid(self) -> bool:
        return True

    def get_modifiers(self) -> Modifier:
        return self._broker.cache.get(self.element_id, "modifiers", self._compute_modifiers)

    @recursion_guard(lambda self: (self._modifiers, False))
    def _compute_modifiers(self) -> tuple[Modifier, bool]:
        modifiers = self._modifiers
        declaring_class = self.get_declaring_class()
        parent = declaring_class.get_parent_class()
        if parent is not None and parent.has_property(self.name):
            ancestor = parent.get_property(self.name)
            if (self.is_public() and not ancestor.is_public()) or (self.is_protected() and ancestor.is_private()):
                modifiers |= Modifier.ACCESS_LEVEL_CHANGED
        return modifiers, declaring_class.is_complete()

    def is_public(self) -> bool:
        return bool(self._modifiers & Modifier.PUBLIC)

    def is_protected(self) -> bool:
        return bool(self._modifiers & Modifier.PROTECTED)

    def is_private(self) -> bool:
        return bool(self._modifiers & Modifier.PRIVATE)

    def is_static(self) -> bool:
        return bool(self._modifiers & Modifier.STATIC)

    def is_readonly(self) -> bool:
        return self._readonly

    def is_default(self) -> bool:
        """Properties read from source are always declared, never dynamic."""
        return True

    def get_type_hint(self) -> str | None:
        return self._type_hint

    def has_type(self) -> bool:
        return self._type_hint is not None

    def is_accessible(self) -> bool:
        return self._accessible

    def set_accessible(self, accessible: bool) -> None:
        self._accessible = bool(accessible)

    def get_default_value(self) -> Any:
        """Evaluate the default value; a property without one defaults to null."""
        return self._broker.cache.get(self.element_id, "default_value", self._evaluate)

    def _evaluate(self) -> tuple[Any, bool]:
        if not self._default:
            return None, True
        return get_value_definition(self._default, self)

    def get_default_value_definition(self) -> str | None:
        if self._default_override is not None:
            return self._default_override
        return get_source_code(self._default)

    def set_default_value(self, value: Any) -> None:
        self._broker.cache.put(self.element_id, "default_value", value)
        self._default_override = php_export(value)

    def alias(self, parent: Any) -> ReflectionProperty:
        """Copy the property into the class importing it from a trait."""
        prop = copy.copy(self)
        prop.element_id = next_element_id()
        prop._declaring_class_name = parent.get_name()
        prop._doc_comment = ReflectionAnnotation(prop, self.get_doc_comment()).set_templates(
            self._doc_comment.get_templates()
        )
        return prop

    def __str__(self) -> str:
        visibility = "public" if self.is_public() else "private" if self.is_private() else "protected"
        return (
            f"Property [ <default> {visibility}{' static' if self.is_static() else ''}"
            f"{' readonly' if self._readonly else ''} ${self.name} ]\n"
        )

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind != ElementKind.CLASS:
            raise ParseError(
                self, stream, "The parent object has to be a class reflection.", ErrorCode.INVALID_PARENT
            )
        self._declaring_class_name = parent.get_name()
        if parent.is_trait():
            self._declaring_trait_name = parent.get_name()
        self._namespace_name = parent.get_namespace_name()
        self._aliases = parent.get_namespace_aliases()

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        self._parse_modifiers(stream, parent)
        self._parse_type_hint(stream)
        self._parse_name(stream)
        self._parse_default_value(stream)

    def _parse_modifiers(self, stream: TokenStream, parent: Any) -> None:
        seen = False
        while stream.get_type() in _MODIFIERS or _is_readonly(stream):
            if _is_readonly(stream):
                self._readonly = True
            else:
                self._modifiers |= _MODIFIERS[stream.get_type()]
            seen = True
            stream.skip_whitespaces()

        if seen:
            if not self._modifiers & VISIBILITY:
                self._modifiers |= Modifier.PUBLIC
            return

        # ``public $a, $b``: the second variable has no modifiers of its own.
        siblings = parent.get_own_properties()
        if not siblings:
            raise ParseError(self, stream, "No access level defined and no previous defining found.", ErrorCode.LOGICAL_ERROR)
        previous = siblings[-1]
        self._modifiers = previous._modifiers & (VISIBILITY | Modifier.STATIC)
        self._readonly = previous._readonly
        self._type_hint = previous._type_hint

    def _parse_type_hint(self, stream: TokenStream) -> None:
        hint = ""
        while stream.get_type() in _TYPE_HINT:
            hint += stream.get_value()
            stream.skip_whitespaces(True)
        if hint:
            self._type_hint = hint

    def _parse_name(self, stream: TokenStream) -> None:
        if not stream.is_type(T.VARIABLE):
            raise ParseError(self, stream, "The property name could not be determined.", ErrorCode.LOGICAL_ERROR)
        self.name = stream.get_value()[1:]
        stream.skip_whitespaces(True)

    def _parse_default_value(self, stream: TokenStream) -> None:
        token_type = stream.get_type()
        if token_type in (";", ","):
            return
        if token_type != "=":
            raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces(True)

        level = 0
        while (token_type := stream.get_type()) is not None:
            if token_type in (",", ";") and level == 0:
                break
            if token_type in _OPENING:
                level += 1
            elif token_type in _CLOSING:
                level -= 1
            self._default.append(stream.current())
            stream.next()
        if token_type is None:
            raise ParseError(self, stream, "The property default value is not terminated properly.", ErrorCode.UNEXPECTED_TOKEN)
        while self._default and self._default[-1].type in (T.WHITESPACE, T.COMMENT):
            self._default.pop()
