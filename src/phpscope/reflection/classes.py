"""Classes, interfaces and traits.

A class stores its relations (parent, interfaces, traits) as fully
qualified names and looks them up through the broker on every query, so a
class parsed before its ancestors starts answering correctly as soon as the
ancestors are registered. Composed member sets are frozen in the broker's
lazy cache once the whole hierarchy is known.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError, PhpScopeError, ReflectionRuntimeError
from phpscope.core.models import ClassKind, ElementKind
from phpscope.reflection.annotation import DOCBLOCK_TEMPLATE_END, DOCBLOCK_TEMPLATE_START, ReflectionAnnotation
from phpscope.reflection.base import NO_DEFAULT, ReflectionElement, short_name_of, skip_anonymous_function
from phpscope.reflection.cache import recursion_guard
from phpscope.reflection.constant import ReflectionConstant
from phpscope.reflection.method import ReflectionMethod
from phpscope.reflection.modifiers import NONE, Modifier
from phpscope.reflection.property import ReflectionProperty
from phpscope.reflection.resolver import resolve_class_fqn
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

_NAME_PART = frozenset({T.STRING, T.NS_SEPARATOR})
_MEMBER_START = frozenset(
    {T.PUBLIC, T.PRIVATE, T.PROTECTED, T.STATIC, T.VAR, T.VARIABLE, T.FINAL, T.ABSTRACT}
)
_MEMBER_KIND = frozenset({T.VARIABLE, T.FUNCTION, T.CONST})
_ACCESS_LEVELS = {T.PUBLIC: Modifier.PUBLIC, T.PROTECTED: Modifier.PROTECTED, T.PRIVATE: Modifier.PRIVATE}
_INDENT_RE = re.compile(r"\n(?!$)")
_METHOD_INDENT_RE = re.compile(r"\n(?!$|\n|\s*\*)")


def _is_readonly(stream: TokenStream, position: int | None = None) -> bool:
    return stream.is_type(T.STRING, position) and stream.get_value(position).lower() == "readonly"


def _class_name(value: Any, what: str) -> str:
    if isinstance(value, str):
        return value
    if getattr(value, "kind", None) != ElementKind.CLASS:
        raise ReflectionRuntimeError(
            f'Parameter must be a string or an instance of {what} reflection, "{type(value).__name__}" provided.',
            ErrorCode.INVALID_ARGUMENT,
        )
    return value.get_name()


class ReflectionClass(ReflectionElement):
    """A class, interface or trait parsed from a namespace block."""

    kind = ElementKind.CLASS

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._class_kind = ClassKind.CLASS
        self._modifiers = NONE
        self._parent_class_name: str | None = None
        self._interfaces: list[str] = []
        self._traits: list[str] = []
        self._trait_aliases: dict[str, str] = {}
        self._trait_imports: dict[str, list[tuple[str, Modifier | None] | None]] = {}
        self._methods: dict[str, ReflectionMethod] = {}
        self._properties: dict[str, ReflectionProperty] = {}
        self._constants: dict[str, ReflectionConstant] = {}
        # Trait members copied into this class, reused so that composed lists stay stable.
        self._imported: dict[tuple[Any, ...], Any] = {}
        self._definition_complete = False
        self._parse_stream(stream, parent, templates)

    # Names

    def get_short_name(self) -> str:
        return short_name_of(self.name)

    def get_namespace_name(self) -> str:
        return self._namespace_name

    def in_namespace(self) -> bool:
        return self._namespace_name != ""

    def get_class_kind(self) -> ClassKind:
        return self._class_kind

    # Modifiers and predicates

    def get_modifiers(self) -> Modifier:
        """Return the explicit modifiers plus the ones derived from members and ancestors."""
        return self._broker.cache.get(self.element_id, "modifiers", self._compute_modifiers)

    @recursion_guard(lambda self: (self._modifiers, False))
    def _compute_modifiers(self) -> tuple[Modifier, bool]:
        modifiers = self._modifiers
        if modifiers & Modifier.EXPLICIT_ABSTRACT and any(method.is_abstract() for method in self.get_methods()):
            modifiers |= Modifier.IMPLICIT_ABSTRACT
        if self.is_interface() and self._methods:
            modifiers |= Modifier.IMPLICIT_ABSTRACT
        if self._interfaces:
            modifiers |= Modifier.IMPLEMENTS_INTERFACES
        if self._traits:
            modifiers |= Modifier.IMPLEMENTS_TRAITS
        return modifiers, self.is_complete()

    def is_abstract(self) -> bool:
        if self._modifiers & Modifier.EXPLICIT_ABSTRACT:
            return True
        return self.is_interface() and bool(self._methods)

    def is_final(self) -> bool:
        return bool(self._modifiers & Modifier.FINAL_CLASS)

    def is_interface(self) -> bool:
        return self._class_kind == ClassKind.INTERFACE

    def is_trait(self) -> bool:
        return self._class_kind == ClassKind.TRAIT

    def is_exception(self) -> bool:
        return self.name == "Exception" or self.is_subclass_of("Exception")

    def is_instantiable(self) -> bool:
        if self.is_interface() or self.is_trait() or self.is_abstract():
            return False
        constructor = self.get_constructor()
        return constructor is None or constructor.is_public()

    def is_cloneable(self) -> bool:
        if self.is_interface() or self.is_trait() or self.is_abstract():
            return False
        if self.has_method("__clone"):
            return self.get_method("__clone").is_public()
        return True

    def is_iterateable(self) -> bool:
        return self.implements_interface("Traversable")

    @recursion_guard(lambda self: True)
    def is_valid(self) -> bool:
        """Tell whether no ancestor is a conflicting definition."""
        related = [self.get_parent_class(), *self.get_own_interfaces(), *self.get_own_traits()]
        return all(element.is_valid() for element in related if element is not None)

    def is_complete(self) -> bool:
        """Tell whether the parent, every own interface and every own trait are known.

        Once true, the answer is kept for good.
        """
        if not self._definition_complete:
            self._definition_complete = self._check_complete()
        return self._definition_complete

    @recursion_guard(lambda self: False)
    def _check_complete(self) -> bool:
        parent = self.get_parent_class()
        if parent is not None and not parent.is_complete():
            return False
        return all(element.is_complete() for element in (*self.get_own_interfaces(), *self.get_own_traits()))

    # Parents

    @recursion_guard(lambda self: False)
    def is_subclass_of(self, class_name: Any) -> bool:
        class_name = _class_name(class_name, "class")
        if class_name == self._parent_class_name:
            return True
        parent = self.get_parent_class()
        return parent is not None and parent.is_subclass_of(class_name)

    def get_parent_class_name(self) -> str | None:
        return self._parent_class_name

    def get_parent_class(self) -> Any:
        if self._parent_class_name is None:
            return None
        return self._broker.get_class(self._parent_class_name)

    @recursion_guard(lambda self: [])
    def get_parent_classes(self) -> list[Any]:
        parent = self.get_parent_class()
        if parent is None:
            return []
        return [parent, *parent.get_parent_classes()]

    def get_parent_class_name_list(self) -> list[str]:
        return [parent.get_name() for parent in self.get_parent_classes()]

    # Interfaces

    def implements_interface(self, interface: Any) -> bool:
        if not isinstance(interface, str):
            name = _class_name(interface, "class")
            if not interface.is_interface():
                raise ReflectionRuntimeError(f'"{name}" is not an interface.', ErrorCode.INVALID_ARGUMENT, self)
            interface = name
        return interface in self.get_interface_names()

    @recursion_guard(lambda self: [])
    def get_interface_names(self) -> list[str]:
        """Return every interface implemented, inherited ones first."""
        parent = self.get_parent_class()
        names = dict.fromkeys(parent.get_interface_names()) if parent is not None else {}
        for interface_name in self._interfaces:
            names[interface_name] = None
            interface = self._broker.get_class(interface_name)
            for inherited in reversed(interface.get_interface_names()):
                names[inherited] = None
        return list(names)

    def get_interfaces(self) -> list[Any]:
        return [self._broker.get_class(name) for name in self.get_interface_names()]

    def get_own_interface_names(self) -> list[str]:
        return list(self._interfaces)

    def get_own_interfaces(self) -> list[Any]:
        return [self._broker.get_class(name) for name in self._interfaces]

    # Methods

    def get_constructor(self) -> ReflectionMethod | None:
        return next((method for method in self.get_methods() if method.is_constructor()), None)

    def get_destructor(self) -> ReflectionMethod | None:
        return next((method for method in self.get_methods() if method.is_destructor()), None)

    def has_method(self, name: str) -> bool:
        return name in self._methods or any(method.get_name() == name for method in self.get_methods())

    def get_method(self, name: str) -> ReflectionMethod:
        if name in self._methods:
            return self._methods[name]
        for method in self.get_methods():
            if method.get_name() == name:
                return method
        raise ReflectionRuntimeError(
            f'There is no method "{name}" in class "{self.name}".', ErrorCode.DOES_NOT_EXIST, self
        )

    def get_methods(self, modifier_filter: int | None = None) -> list[ReflectionMethod]:
        """Return own, trait-imported, inherited and interface methods.

        Earlier layers win: own methods shadow trait methods, which shadow
        parent methods, which shadow interface methods.
        """
        methods = self._broker.cache.get(self.element_id, "methods", self._compose_methods)
        return [method for method in methods if method.is_(modifier_filter)]

    @recursion_guard(lambda self: ([], False))
    def _compose_methods(self) -> tuple[list[ReflectionMethod], bool]:
        methods = dict(self._methods)
        for method in self._compose_trait_methods():
            methods.setdefault(method.get_name(), method)
        parent = self.get_parent_class()
        if parent is not None:
            for method in parent.get_methods():
                methods.setdefault(method.get_name(), method)
        for interface in self.get_own_interfaces():
            for method in interface.get_methods():
                methods.setdefault(method.get_name(), method)
        return list(methods.values()), self.is_complete()

    def has_own_method(self, name: str) -> bool:
        return name in self._methods

    def get_own_methods(self, modifier_filter: int | None = None) -> list[ReflectionMethod]:
        return [method for method in self._methods.values() if method.is_(modifier_filter)]

    def has_trait_method(self, name: str) -> bool:
        if name in self._methods:
            return False
        return any(method.get_name() == name for method in self.get_trait_methods())

    def get_trait_methods(self, modifier_filter: int | None = None) -> list[ReflectionMethod]:
        return [method for method in self._compose_trait_methods() if method.is_(modifier_filter)]

    def _compose_trait_methods(self) -> list[ReflectionMethod]:
        methods: dict[str, ReflectionMethod] = {}
        for trait in self.get_own_traits():
            trait_name = trait.get_name()
            for method in trait.get_methods():
                name = method.get_name()
                imports = [*self._trait_imports.get(f"{trait_name}::{name}", []), *self._trait_imports.get(name, [])]
                targets: list[tuple[str, Modifier | None]] = []
                suppressed = False
                for rule in imports:
                    if rule is None:
                        suppressed = True
                        continue
                    new_name, access_level = rule
                    if not new_name:
                        # ``m as protected`` changes the default import.
                        new_name = name
                        suppressed = True
                    targets.append((new_name, access_level))
                if not suppressed:
                    targets.append((name, None))

                for new_name, access_level in targets:
                    if new_name in self._methods:
                        continue
                    existing = methods.get(new_name)
                    if existing is not None:
                        if method.is_abstract():
                            continue
                        if not existing.is_abstract():
                            raise ParseError(
                                self, None, f'Trait method "{new_name}" was already imported.', ErrorCode.ALREADY_EXISTS
                            )
                    methods[new_name] = self._import_method(method, new_name, access_level)
        return list(methods.values())

    def _import_method(
        self, method: ReflectionMethod, name: str, access_level: Modifier | None
    ) -> ReflectionMethod:
        key = ("method", method.element_id, name, access_level)
        if key not in self._imported:
            new_name = None if name == method.get_name() else name
            self._imported[key] = method.alias(self, new_name, access_level)
        return self._imported[key]

    # Constants

    def has_constant(self, name: str) -> bool:
        return name in self._constants or any(constant.get_name() == name for constant in self.get_constant_reflections())

    def get_constant(self, name: str) -> Any:
        """Return the value of a constant, or False when there is none."""
        try:
            return self.get_constant_reflection(name).get_value()
        except PhpScopeError:
            return False

    def get_constant_reflection(self, name: str) -> ReflectionConstant:
        if name in self._constants:
            return self._constants[name]
        for constant in self.get_constant_reflections():
            if constant.get_name() == name:
                return constant
        raise ReflectionRuntimeError(
            f'There is no constant "{name}" in class "{self.name}".', ErrorCode.DOES_NOT_EXIST, self
        )

    def get_constants(self) -> dict[str, Any]:
        constants: dict[str, Any] = {}
        for constant in self.get_constant_reflections():
            if constant.get_name() not in constants:
                constants[constant.get_name()] = constant.get_value()
        return constants

    @recursion_guard(lambda self: [])
    def get_constant_reflections(self) -> list[ReflectionConstant]:
        reflections = list(self._constants.values())
        parent = self.get_parent_class()
        if parent is not None:
            reflections.extend(parent.get_constant_reflections())
        for interface in self.get_own_interfaces():
            reflections.extend(interface.get_constant_reflections())
        return reflections

    def has_own_constant(self, name: str) -> bool:
        return name in self._constants

    def get_own_constants(self) -> dict[str, Any]:
        return {name: constant.get_value() for name, constant in self._constants.items()}

    def get_own_constant_reflections(self) -> list[ReflectionConstant]:
        return list(self._constants.values())

    # Properties

    def has_property(self, name: str) -> bool:
        return name in self._properties or any(prop.get_name() == name for prop in self.get_properties())

    def get_property(self, name: str) -> ReflectionProperty:
        if name in self._properties:
            return self._properties[name]
        for prop in self.get_properties():
            if prop.get_name() == name:
                return prop
        raise ReflectionRuntimeError(
            f'There is no property "{name}" in class "{self.name}".', ErrorCode.DOES_NOT_EXIST, self
        )

    def get_properties(self, modifier_filter: int | None = None) -> list[ReflectionProperty]:
        properties = self._broker.cache.get(self.element_id, "properties", self._compose_properties)
        if modifier_filter is None:
            return list(properties)
        return [prop for prop in properties if prop.get_modifiers() & modifier_filter]

    @recursion_guard(lambda self: ([], False))
    def _compose_properties(self) -> tuple[list[ReflectionProperty], bool]:
        properties = dict(self._properties)
        for prop in self._compose_trait_properties():
            properties.setdefault(prop.get_name(), prop)
        parent = self.get_parent_class()
        if parent is not None:
            for prop in parent.get_properties():
                properties.setdefault(prop.get_name(), prop)
        return list(properties.values()), self.is_complete()

    def has_own_property(self, name: str) -> bool:
        return name in self._properties

    def get_own_properties(self, modifier_filter: int | None = None) -> list[ReflectionProperty]:
        properties = list(self._properties.values())
        if modifier_filter is None:
            return properties
        return [prop for prop in properties if prop.get_modifiers() & modifier_filter]

    def has_trait_property(self, name: str) -> bool:
        if name in self._properties:
            return False
        return any(trait.has_property(name) for trait in self.get_own_traits())

    def get_trait_properties(self, modifier_filter: int | None = None) -> list[ReflectionProperty]:
        properties = self._compose_trait_properties()
        if modifier_filter is None:
            return properties
        return [prop for prop in properties if prop.get_modifiers() & modifier_filter]

    def _compose_trait_properties(self) -> list[ReflectionProperty]:
        properties: dict[str, ReflectionProperty] = {}
        for trait in self.get_own_traits():
            for prop in trait.get_properties():
                name = prop.get_name()
                if name in self._properties or name in properties:
                    continue
                key = ("property", prop.element_id)
                if key not in self._imported:
                    self._imported[key] = prop.alias(self)
                properties[name] = self._imported[key]
        return list(properties.values())

    def get_default_properties(self) -> dict[str, Any]:
        """Return default values of all properties, static ones first."""
        properties = self.get_properties()
        defaults = {prop.get_name(): prop.get_default_value() for prop in properties if prop.is_static()}
        defaults.update({prop.get_name(): prop.get_default_value() for prop in properties if not prop.is_static()})
        return defaults

    def get_static_properties(self) -> dict[str, Any]:
        return {prop.get_name(): prop.get_default_value() for prop in self.get_properties(Modifier.STATIC)}

    def _static_property(self, name: str) -> ReflectionProperty:
        if self.has_property(name):
            prop = self.get_property(name)
            if prop.is_static():
                if not prop.is_public() and not prop.is_accessible():
                    raise ReflectionRuntimeError(
                        f'Static property "{name}" in class "{self.name}" is not accessible.',
                        ErrorCode.NOT_ACCESSIBLE,
                        self,
                    )
                return prop
        raise ReflectionRuntimeError(
            f'There is no static property "{name}" in class "{self.name}".', ErrorCode.DOES_NOT_EXIST, self
        )

    def get_static_property_value(self, name: str, default: Any = NO_DEFAULT) -> Any:
        """Return the value of a static property.

        Args:
            name: Property name without the ``$``.
            default: Returned when the class has no such static property.

        Raises:
            ReflectionRuntimeError: The property is not accessible, or it
                does not exist and no default was given.
        """
        if default is not NO_DEFAULT and not (self.has_property(name) and self.get_property(name).is_static()):
            return default
        return self._static_property(name).get_default_value()

    def set_static_property_value(self, name: str, value: Any) -> None:
        self._static_property(name).set_default_value(value)

    # Traits

    def get_own_trait_names(self) -> list[str]:
        return list(self._traits)

    def get_own_traits(self) -> list[Any]:
        return [self._broker.get_class(name) for name in self._traits]

    @recursion_guard(lambda self: [])
    def get_trait_names(self) -> list[str]:
        parent = self.get_parent_class()
        names = dict.fromkeys(parent.get_trait_names()) if parent is not None else {}
        for trait_name in self._traits:
            names.update(dict.fromkeys(self._broker.get_class(trait_name).get_trait_names()))
            names[trait_name] = None
        return list(names)

    def get_traits(self) -> list[Any]:
        return [self._broker.get_class(name) for name in self.get_trait_names()]

    def get_trait_aliases(self) -> dict[str, str]:
        return dict(self._trait_aliases)

    def uses_trait(self, trait: Any) -> bool:
        name = _class_name(trait, "trait")
        reflection = trait if not isinstance(trait, str) else self._broker.get_class(name)
        if reflection.is_tokenized() and not reflection.is_trait():
            raise ReflectionRuntimeError(f'"{name}" is not a trait.', ErrorCode.INVALID_ARGUMENT, self)
        return name in self.get_trait_names()

    # Discovery

    def get_direct_subclasses(self) -> list[Any]:
        return [
            reflection
            for reflection in self._broker.get_classes()
            if reflection.is_subclass_of(self.name)
            and (reflection.get_parent_class_name() is None or not reflection.get_parent_class().is_subclass_of(self.name))
        ]

    def get_direct_subclass_names(self) -> list[str]:
        return [reflection.get_name() for reflection in self.get_direct_subclasses()]

    def get_indirect_subclasses(self) -> list[Any]:
        return [
            reflection
            for reflection in self._broker.get_classes()
            if reflection.is_subclass_of(self.name)
            and reflection.get_parent_class_name() is not None
            and reflection.get_parent_class().is_subclass_of(self.name)
        ]

    def get_indirect_subclass_names(self) -> list[str]:
        return [reflection.get_name() for reflection in self.get_indirect_subclasses()]

    def get_direct_implementers(self) -> list[Any]:
        if not self.is_interface():
            return []
        return [
            reflection
            for reflection in self._broker.get_classes()
            if not reflection.is_interface()
            and reflection.implements_interface(self.name)
            and (
                reflection.get_parent_class_name() is None
                or not reflection.get_parent_class().implements_interface(self.name)
            )
        ]

    def get_direct_implementer_names(self) -> list[str]:
        return [reflection.get_name() for reflection in self.get_direct_implementers()]

    def get_indirect_implementers(self) -> list[Any]:
        if not self.is_interface():
            return []
        return [
            reflection
            for reflection in self._broker.get_classes()
            if not reflection.is_interface()
            and reflection.implements_interface(self.name)
            and reflection.get_parent_class_name() is not None
            and reflection.get_parent_class().implements_interface(self.name)
        ]

    def get_indirect_implementer_names(self) -> list[str]:
        return [reflection.get_name() for reflection in self.get_indirect_implementers()]

    # Export

    def __str__(self) -> str:
        implements = ""
        interface_names = self.get_interface_names()
        if interface_names:
            keyword = "extends" if self.is_interface() else "implements"
            implements = f" {keyword} {', '.join(interface_names)}"

        constants = "".join(f"    {constant}" for constant in self.get_constant_reflections())
        constant_count = len(self.get_constant_reflections())

        static_properties, properties = [], []
        for prop in self.get_properties():
            text = "    " + _INDENT_RE.sub("\n    ", str(prop))
            (static_properties if prop.is_static() else properties).append(text)

        static_methods, methods = [], []
        for method in self.get_methods():
            inherited = method.get_declaring_class_name() != self.name
            if inherited and method.is_private():
                continue
            text = "\n    " + ("\n    " if method.get_declaring_trait_name() is not None else "")
            text += _METHOD_INDENT_RE.sub("\n    ", str(method))
            if inherited:
                text = re.sub(r"Method \[ <[\w:]+", lambda match: f"{match.group(0)}, inherits {method.get_declaring_class_name()}", text)
                text = re.sub(r", overwrites[^,]+", "", text)
            (static_methods if method.is_static() else methods).append(text)

        doc_comment = self.get_doc_comment()
        parent_name = self.get_parent_class_name()
        return (
            f"{doc_comment + chr(10) if doc_comment else ''}"
            f"{'Interface' if self.is_interface() else 'Class'} [ <user>"
            f"{' <iterateable>' if self.is_iterateable() else ''} "
            f"{'abstract ' if self.is_abstract() and not self.is_interface() else ''}"
            f"{'final ' if self.is_final() else ''}{'interface' if self.is_interface() else 'class'} "
            f"{self.name}{' extends ' + parent_name if parent_name is not None else ''}{implements} ] {{\n"
            f"  @@ {self._file_name} {self._start_line}-{self._end_line}"
            f"\n\n  - Constants [{constant_count}] {{\n{constants}  }}"
            f"\n\n  - Static properties [{len(static_properties)}] {{\n{''.join(static_properties)}  }}"
            f"\n\n  - Static methods [{len(static_methods)}] {{\n{''.join(static_methods).lstrip(chr(10))}  }}"
            f"\n\n  - Properties [{len(properties)}] {{\n{''.join(properties)}  }}"
            f"\n\n  - Methods [{len(methods)}] {{\n{''.join(methods).lstrip(chr(10))}  }}"
            "\n}\n"
        )

    # Parsing

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind != ElementKind.NAMESPACE:
            raise ParseError(
                self, stream, "The parent object has to be a namespace block reflection.", ErrorCode.INVALID_PARENT
            )
        self._namespace_name = parent.get_namespace_name()
        self._aliases = parent.get_namespace_aliases()

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        self._parse_modifiers(stream)
        self._parse_name(stream)
        self._parse_parent(stream)
        self._parse_interfaces(stream)

    def _parse_modifiers(self, stream: TokenStream) -> None:
        while (token_type := stream.get_type()) is not None:
            if token_type == T.ABSTRACT:
                self._modifiers |= Modifier.EXPLICIT_ABSTRACT
            elif token_type == T.FINAL:
                self._modifiers |= Modifier.FINAL_CLASS
            elif token_type in (T.INTERFACE, T.TRAIT, T.CLASS):
                if token_type == T.INTERFACE:
                    self._class_kind = ClassKind.INTERFACE
                elif token_type == T.TRAIT:
                    self._class_kind = ClassKind.TRAIT
                stream.skip_whitespaces(True)
                return
            elif not _is_readonly(stream):
                raise ParseError(self, stream, "Could not parse class modifiers.", ErrorCode.UNEXPECTED_TOKEN)
            stream.skip_whitespaces(True)

    def _parse_name(self, stream: TokenStream) -> None:
        if not stream.is_type(T.STRING):
            raise ParseError(self, stream, "Could not parse class name.", ErrorCode.UNEXPECTED_TOKEN)
        name = stream.get_value()
        self.name = f"{self._namespace_name}\\{name}" if self._namespace_name else name
        stream.skip_whitespaces(True)

    def _read_class_name(self, stream: TokenStream) -> str:
        name = ""
        while stream.get_type() in _NAME_PART:
            name += stream.get_value()
            stream.skip_whitespaces(True)
        if not name.strip("\\"):
            raise ParseError(self, stream, "Empty class name found.", ErrorCode.LOGICAL_ERROR)
        return resolve_class_fqn(name, self._aliases, self._namespace_name)

    def _parse_parent(self, stream: TokenStream) -> None:
        if not stream.is_type(T.EXTENDS):
            return
        while True:
            stream.skip_whitespaces(True)
            name = self._read_class_name(stream)
            if not self.is_interface():
                self._parent_class_name = name
                return
            # Interfaces may extend several interfaces.
            self._interfaces.append(name)
            if not stream.is_type(","):
                return

    def _parse_interfaces(self, stream: TokenStream) -> None:
        if not stream.is_type(T.IMPLEMENTS):
            return
        if self.is_interface():
            raise ParseError(self, stream, f'Interfaces ("{self.name}") cannot implement interfaces.', ErrorCode.LOGICAL_ERROR)
        while True:
            stream.skip_whitespaces(True)
            self._interfaces.append(self._read_class_name(stream))
            token_type = stream.get_type()
            if token_type == "{":
                return
            if token_type != ",":
                raise ParseError(self, stream, 'Invalid token found, expected "{" or ",".', ErrorCode.UNEXPECTED_TOKEN)

    def _parse_children(self, stream: TokenStream, parent: Any) -> None:
        templates: list[ReflectionAnnotation] = []
        while (token_type := stream.get_type()) is not None:
            if token_type == "}":
                break
            if token_type in (T.COMMENT, T.DOC_COMMENT):
                docblock = stream.get_value()
                if docblock.startswith(DOCBLOCK_TEMPLATE_START):
                    templates.insert(0, ReflectionAnnotation(self, docblock))
                elif docblock == DOCBLOCK_TEMPLATE_END and templates:
                    templates.pop(0)
                stream.next()
            elif token_type in _MEMBER_START or _is_readonly(stream):
                self._parse_member(stream, tuple(templates))
            elif token_type == T.FUNCTION:
                if skip_anonymous_function(stream):
                    stream.next()
                else:
                    self._add_method(ReflectionMethod(stream, self._broker, self, tuple(templates)))
                    stream.next()
            elif token_type == T.CONST:
                self._parse_constants(stream, tuple(templates))
            elif token_type == T.USE:
                self._parse_trait_use(stream)
            else:
                stream.next()

    def _parse_member(self, stream: TokenStream, templates: tuple[ReflectionAnnotation, ...]) -> None:
        position = stream.key()
        member_type = stream.get_type()
        if member_type != T.VAR:
            while (member_type := stream.get_type(position)) is not None and member_type not in _MEMBER_KIND:
                position += 1

        if member_type in (T.VARIABLE, T.VAR):
            prop = ReflectionProperty(stream, self._broker, self, templates)
            self._properties[prop.get_name()] = prop
            stream.next()
        elif member_type == T.CONST:
            stream.seek(position)
            self._parse_constants(stream, templates)
        else:
            self._add_method(ReflectionMethod(stream, self._broker, self, templates))
            stream.next()

    def _add_method(self, method: ReflectionMethod) -> None:
        self._methods[method.get_name()] = method

    def _parse_constants(self, stream: TokenStream, templates: tuple[ReflectionAnnotation, ...]) -> None:
        stream.skip_whitespaces(True)
        # Typed constants (``const int A = 1``): skip the type.
        while stream.get_type() in ("?", "|", T.NS_SEPARATOR) or (
            stream.is_type(T.STRING) and self._next_is_name(stream)
        ):
            stream.skip_whitespaces(True)
        while stream.is_type(T.STRING):
            constant = ReflectionConstant(stream, self._broker, self, templates)
            self._constants[constant.get_name()] = constant
            if stream.is_type(","):
                stream.skip_whitespaces(True)
            else:
                stream.next()

    @staticmethod
    def _next_is_name(stream: TokenStream) -> bool:
        position = stream.key() + 1
        while stream.get_type(position) in (T.WHITESPACE, T.COMMENT, T.DOC_COMMENT):
            position += 1
        return stream.get_type(position) == T.STRING

    def _parse_trait_use(self, stream: TokenStream) -> None:
        stream.skip_whitespaces(True)
        while True:
            name = ""
            while stream.get_type() in _NAME_PART:
                name += stream.get_value()
                stream.skip_whitespaces(True)
            if not name.strip("\\"):
                raise ParseError(self, stream, "Empty trait name found.", ErrorCode.LOGICAL_ERROR)
            self._traits.append(resolve_class_fqn(name, self._aliases, self._namespace_name))

            token_type = stream.get_type()
            if token_type == ";":
                stream.skip_whitespaces(True)
                return
            if token_type == ",":
                stream.skip_whitespaces(True)
                continue
            if token_type != "{":
                raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
            self._parse_trait_rules(stream)
            return

    def _parse_trait_rules(self, stream: TokenStream) -> None:
        token_type = stream.skip_whitespaces(True).get_type()
        while token_type != "}":
            if token_type is None:
                raise ParseError(self, stream, "Unexpected end of trait rules.", ErrorCode.UNEXPECTED_TOKEN)
            left = ""
            while token_type in (T.STRING, T.NS_SEPARATOR, T.DOUBLE_COLON):
                left += stream.get_value()
                token_type = stream.skip_whitespaces(True).get_type()
            if not left:
                raise ParseError(self, stream, "An empty method name was found.", ErrorCode.LOGICAL_ERROR)
            if token_type not in (T.AS, T.INSTEADOF):
                raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
            alias = token_type == T.AS
            token_type = stream.skip_whitespaces(True).get_type()

            trait_part, separator, method_name = left.rpartition("::")
            if alias:
                access_level = _ACCESS_LEVELS.get(token_type)
                if access_level is not None:
                    token_type = stream.skip_whitespaces(True).get_type()
                new_name = ""
                while token_type == T.STRING:
                    new_name += stream.get_value()
                    token_type = stream.skip_whitespaces(True).get_type()
                if separator:
                    key = f"{resolve_class_fqn(trait_part, self._aliases, self._namespace_name)}::{method_name}"
                else:
                    key = method_name
                self._trait_imports.setdefault(key, []).append((new_name, access_level))
                if new_name:
                    self._trait_aliases[new_name] = key if separator else f"(null)::{method_name}"
            else:
                if not separator:
                    raise ParseError(
                        self, stream, "A T_DOUBLE_COLON has to be present when using T_INSTEADOF.", ErrorCode.LOGICAL_ERROR
                    )
                while True:
                    if token_type in _ACCESS_LEVELS:
                        raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
                    losing = ""
                    while token_type in _NAME_PART:
                        losing += stream.get_value()
                        token_type = stream.skip_whitespaces(True).get_type()
                    if not losing.strip("\\"):
                        raise ParseError(self, stream, "Empty trait name found.", ErrorCode.LOGICAL_ERROR)
                    losing = resolve_class_fqn(losing, self._aliases, self._namespace_name)
                    self._trait_imports.setdefault(f"{losing}::{method_name}", []).append(None)
                    if token_type != ",":
                        break
                    token_type = stream.skip_whitespaces(True).get_type()

            if token_type != ";":
                raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
            token_type = stream.skip_whitespaces(True).get_type()
        stream.skip_whitespaces(True)
