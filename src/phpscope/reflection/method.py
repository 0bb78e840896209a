"""Class, interface and trait methods."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError, ReflectionRuntimeError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import ReflectionAnnotation
from phpscope.reflection.cache import next_element_id, recursion_guard
from phpscope.reflection.function_base import ReflectionFunctionBase
from phpscope.reflection.modifiers import COMPUTED, NONE, VISIBILITY, Modifier, is_wider
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

_BASE_MODIFIERS = {
    T.ABSTRACT: Modifier.ABSTRACT,
    T.FINAL: Modifier.FINAL,
    T.PUBLIC: Modifier.PUBLIC,
    T.PRIVATE: Modifier.PRIVATE,
    T.PROTECTED: Modifier.PROTECTED,
    T.STATIC: Modifier.STATIC,
}

# Magic methods that can never be called statically.
_NOT_ALLOWED_STATIC = frozenset({"__clone", "__tostring", "__get", "__set", "__isset", "__unset"})


class ReflectionMethod(ReflectionFunctionBase):
    """A method parsed from a class-like body.

    Methods imported from traits are copies made with ``alias()``: they
    keep the trait as declaring trait and get the importing class as
    declaring class.
    """

    kind = ElementKind.METHOD

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._modifiers = NONE
        self._declaring_class_name = ""
        self._declaring_trait_name: str | None = None
        self._original_name: str | None = None
        self._original_modifiers: Modifier | None = None
        self._accessible = False
        self._parse_stream(stream, parent, templates)

    def get_short_name(self) -> str:
        return self.name

    def get_namespace_name(self) -> str:
        return ""

    def get_pretty_name(self) -> str:
        return f"{self._declaring_class_name or self._declaring_trait_name}::{self.name}()"

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

    def get_modifiers(self) -> Modifier:
        """Return the modifiers including the ones derived from ancestors."""
        return self._broker.cache.get(self.element_id, "modifiers", self._compute_modifiers)

    @recursion_guard(lambda self: (self._modifiers, False))
    def _compute_modifiers(self) -> tuple[Modifier, bool]:
        modifiers = self._modifiers
        declaring_class = self.get_declaring_class()
        parent = declaring_class.get_parent_class()
        if parent is not None and parent.has_method(self.name):
            ancestor = parent.get_method(self.name)
            ancestor_modifiers = ancestor.get_modifiers()
            if is_wider(modifiers, ancestor_modifiers) and not ancestor_modifiers & Modifier.ACCESS_LEVEL_CHANGED:
                modifiers |= Modifier.ACCESS_LEVEL_CHANGED
            if ancestor.is_abstract() and not self.is_abstract():
                modifiers |= Modifier.IMPLEMENTED_ABSTRACT
        else:
            for interface in declaring_class.get_interfaces():
                if interface.has_own_method(self.name):
                    modifiers |= Modifier.IMPLEMENTED_ABSTRACT
                    break
        return modifiers, declaring_class.is_complete()

    def is_(self, modifier_filter: int | None = None) -> bool:
        """Tell whether the method has any of the given modifiers.

        ``None`` matches every method.
        """
        if modifier_filter is None or self._modifiers & modifier_filter:
            return True
        if modifier_filter & COMPUTED:
            return bool(self.get_modifiers() & modifier_filter)
        return False

    def is_abstract(self) -> bool:
        return bool(self._modifiers & Modifier.ABSTRACT)

    def is_final(self) -> bool:
        return bool(self._modifiers & Modifier.FINAL)

    def is_private(self) -> bool:
        return bool(self._modifiers & Modifier.PRIVATE)

    def is_protected(self) -> bool:
        return bool(self._modifiers & Modifier.PROTECTED)

    def is_public(self) -> bool:
        return bool(self._modifiers & Modifier.PUBLIC)

    def is_static(self) -> bool:
        return bool(self._modifiers & Modifier.STATIC)

    def is_constructor(self) -> bool:
        return bool(self._modifiers & Modifier.CONSTRUCTOR)

    def is_destructor(self) -> bool:
        return bool(self._modifiers & Modifier.DESTRUCTOR)

    def is_clone(self) -> bool:
        return bool(self._modifiers & Modifier.CLONE)

    def is_allowed_static(self) -> bool:
        return bool(self._modifiers & Modifier.ALLOWED_STATIC)

    def is_accessible(self) -> bool:
        return self._accessible

    def set_accessible(self, accessible: bool) -> None:
        self._accessible = bool(accessible)

    def get_prototype(self) -> ReflectionMethod | None:
        """Return the declaration this method ultimately overrides.

        Returns:
            The prototype, or None while the declaring class is incomplete and
            no prototype was found yet.

        Raises:
            ReflectionRuntimeError: The class is complete and no prototype
                exists.
        """
        prototype = self._broker.cache.get(self.element_id, "prototype", self._find_prototype)
        if prototype is None and self.is_complete():
            raise ReflectionRuntimeError("Method has no prototype.", ErrorCode.DOES_NOT_EXIST, self)
        return prototype

    @recursion_guard(lambda self: (None, False))
    def _find_prototype(self) -> tuple[ReflectionMethod | None, bool]:
        declaring_class = self.get_declaring_class()
        prototype = None
        parent = declaring_class.get_parent_class()
        if parent is not None and parent.has_method(self.name):
            method = parent.get_method(self.name)
            if not method.is_private():
                try:
                    prototype = method.get_prototype()
                except ReflectionRuntimeError:
                    prototype = None
                if prototype is None:
                    prototype = method
        if prototype is None:
            for interface in declaring_class.get_own_interfaces():
                if interface.has_method(self.name):
                    prototype = interface.get_method(self.name)
                    break
        return prototype, self.is_complete()

    def get_original_name(self) -> str | None:
        return self._original_name

    def get_original_modifiers(self) -> Modifier | None:
        return self._original_modifiers

    def alias(
        self, parent: Any, name: str | None = None, access_level: Modifier | None = None
    ) -> ReflectionMethod:
        """Copy the method into another class, optionally renamed or with another visibility."""
        if access_level is not None and access_level not in (
            Modifier.PUBLIC,
            Modifier.PROTECTED,
            Modifier.PRIVATE,
        ):
            raise ReflectionRuntimeError(
                f'Invalid method access level: "{access_level}".', ErrorCode.INVALID_ARGUMENT, self
            )
        method = copy.copy(self)
        method.element_id = next_element_id()
        method._declaring_class_name = parent.get_name()
        if name is not None:
            method._original_name = self.name
            method.name = name
        if access_level is not None:
            method._original_modifiers = self.get_modifiers()
            method._modifiers = (self._modifiers & ~VISIBILITY) | access_level
        method._doc_comment = ReflectionAnnotation(method, self.get_doc_comment()).set_templates(
            self._doc_comment.get_templates()
        )
        method._parameters = [parameter.alias(method) for parameter in self._parameters]
        return method

    def __str__(self) -> str:
        declaring_class = self.get_declaring_class()
        parent = declaring_class.get_parent_class()
        prototype = ""
        try:
            found = self.get_prototype()
        except ReflectionRuntimeError:
            found = None
        if found is not None:
            prototype = f", prototype {found.get_declaring_class_name()}"
        overwrite = ""
        if parent is not None and parent.has_method(self.name):
            overwrite = f", overwrites {parent.get_method(self.name).get_declaring_class_name()}"
        if self.is_constructor():
            cdtor = ", ctor"
        elif self.is_destructor():
            cdtor = ", dtor"
        else:
            cdtor = ""
        visibility = "public" if self.is_public() else "private" if self.is_private() else "protected"
        doc_comment = self.get_doc_comment()
        return (
            f"{doc_comment + chr(10) if doc_comment else ''}"
            f"Method [ <user{overwrite}{prototype}{cdtor}> "
            f"{'abstract ' if self.is_abstract() else ''}{'final ' if self.is_final() else ''}"
            f"{'static ' if self.is_static() else ''}{visibility} method "
            f"{'&' if self._returns_reference else ''}{self.name} ] {{\n"
            f"  @@ {self._file_name} {self._start_line} - {self._end_line}{self._export_parameters()}\n}}\n"
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
        self._parse_base_modifiers(stream)
        self._parse_returns_reference(stream)
        self._parse_name(stream)
        self._parse_internal_modifiers(parent)

    def _parse_base_modifiers(self, stream: TokenStream) -> None:
        while (token_type := stream.get_type()) not in (T.FUNCTION, None):
            self._modifiers |= _BASE_MODIFIERS.get(token_type, NONE)
            stream.skip_whitespaces()
        if not self._modifiers & (Modifier.PRIVATE | Modifier.PROTECTED):
            self._modifiers |= Modifier.PUBLIC

    def _parse_internal_modifiers(self, parent: Any) -> None:
        name = self.name.lower()
        if name == "__construct" or (not parent.in_namespace() and parent.get_short_name().lower() == name):
            self._modifiers |= Modifier.CONSTRUCTOR
        elif name == "__destruct":
            self._modifiers |= Modifier.DESTRUCTOR
        elif name == "__clone":
            self._modifiers |= Modifier.CLONE

        if parent.is_interface():
            self._modifiers |= Modifier.ABSTRACT
        elif not (
            self.is_static() or self.is_constructor() or self.is_destructor() or name in _NOT_ALLOWED_STATIC
        ):
            self._modifiers |= Modifier.ALLOWED_STATIC
