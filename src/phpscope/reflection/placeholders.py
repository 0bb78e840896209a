"""Stand-ins registered for names that are unresolved or defined more than once.

Placeholders are first-class elements: every query answers with a safe
empty or false default. Lookups of a single member fail the same way they
fail on a real class that lacks the member.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, PhpScopeError, ReflectionRuntimeError
from phpscope.core.models import ClassKind, ElementKind
from phpscope.reflection.base import NO_DEFAULT, ReflectionBase, namespace_of, short_name_of
from phpscope.reflection.modifiers import NONE, Modifier

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker


class ReasonsMixin:
    """Collects the reasons a symbol is invalid."""

    _reasons: list[PhpScopeError]

    def add_reason(self, reason: PhpScopeError) -> ReasonsMixin:
        self._reasons.append(reason)
        return self

    def get_reasons(self) -> list[PhpScopeError]:
        return list(self._reasons)

    def has_reasons(self) -> bool:
        return bool(self._reasons)


class _PlaceholderElement(ReflectionBase):
    def __init__(self, name: str, broker: Broker, file_name: str | None = None) -> None:
        super().__init__(broker)
        self.name = name.lstrip("\\")
        self._file_name = file_name

    def get_short_name(self) -> str:
        return short_name_of(self.name)

    def get_namespace_name(self) -> str:
        return namespace_of(self.name)

    def in_namespace(self) -> bool:
        return "\\" in self.name

    def get_file_name(self) -> str | None:
        return self._file_name

    def get_start_line(self) -> int | None:
        return None

    def get_end_line(self) -> int | None:
        return None

    def get_start_position(self) -> int:
        return -1

    def get_end_position(self) -> int:
        return -1

    def get_source(self) -> str:
        return ""

    def get_doc_comment(self) -> str | None:
        return None

    def get_annotations(self) -> dict:
        return {}

    def has_annotation(self, name: str) -> bool:
        return False

    def get_annotation(self, name: str) -> None:
        return None

    def is_deprecated(self) -> bool:
        return False

    def get_namespace_aliases(self) -> dict[str, str]:
        return {}

    def get_extension_name(self) -> bool:
        return False


class _PlaceholderClass(_PlaceholderElement):
    kind = ElementKind.CLASS

    def _missing(self, what: str, name: str) -> ReflectionRuntimeError:
        return ReflectionRuntimeError(f'There is no {what} "{name}".', ErrorCode.DOES_NOT_EXIST, self)

    def get_class_kind(self) -> ClassKind:
        return ClassKind.CLASS

    def get_modifiers(self) -> Modifier:
        return NONE

    def is_abstract(self) -> bool:
        return False

    def is_final(self) -> bool:
        return False

    def is_interface(self) -> bool:
        return False

    def is_trait(self) -> bool:
        return False

    def is_exception(self) -> bool:
        return self.name == "Exception"

    def is_instantiable(self) -> bool:
        return False

    def is_cloneable(self) -> bool:
        return False

    def is_iterateable(self) -> bool:
        return False

    def is_subclass_of(self, class_name: Any) -> bool:
        return False

    def get_parent_class(self) -> None:
        return None

    def get_parent_class_name(self) -> str | None:
        return None

    def get_parent_classes(self) -> list:
        return []

    def get_parent_class_name_list(self) -> list[str]:
        return []

    def implements_interface(self, interface: Any) -> bool:
        return False

    def get_interfaces(self) -> list:
        return []

    def get_interface_names(self) -> list[str]:
        return []

    def get_own_interfaces(self) -> list:
        return []

    def get_own_interface_names(self) -> list[str]:
        return []

    def get_constructor(self) -> None:
        return None

    def get_destructor(self) -> None:
        return None

    def has_method(self, name: str) -> bool:
        return False

    def get_method(self, name: str) -> Any:
        raise self._missing("method", name)

    def get_methods(self, filter: int | None = None) -> list:
        return []

    def has_own_method(self, name: str) -> bool:
        return False

    def get_own_methods(self, filter: int | None = None) -> list:
        return []

    def has_trait_method(self, name: str) -> bool:
        return False

    def get_trait_methods(self, filter: int | None = None) -> list:
        return []

    def has_constant(self, name: str) -> bool:
        return False

    def get_constant(self, name: str) -> Any:
        return False

    def get_constant_reflection(self, name: str) -> Any:
        raise self._missing("constant", name)

    def get_constants(self) -> dict[str, Any]:
        return {}

    def get_constant_reflections(self) -> list:
        return []

    def has_own_constant(self, name: str) -> bool:
        return False

    def get_own_constants(self) -> dict[str, Any]:
        return {}

    def get_own_constant_reflections(self) -> list:
        return []

    def has_property(self, name: str) -> bool:
        return False

    def get_property(self, name: str) -> Any:
        raise self._missing("property", name)

    def get_properties(self, filter: int | None = None) -> list:
        return []

    def has_own_property(self, name: str) -> bool:
        return False

    def get_own_properties(self, filter: int | None = None) -> list:
        return []

    def has_trait_property(self, name: str) -> bool:
        return False

    def get_trait_properties(self, filter: int | None = None) -> list:
        return []

    def get_default_properties(self) -> dict[str, Any]:
        return {}

    def get_static_properties(self) -> dict[str, Any]:
        return {}

    def get_static_property_value(self, name: str, default: Any = NO_DEFAULT) -> Any:
        if default is not NO_DEFAULT:
            return default
        raise self._missing("static property", name)

    def set_static_property_value(self, name: str, value: Any) -> None:
        raise self._missing("static property", name)

    def get_traits(self) -> list:
        return []

    def get_own_traits(self) -> list:
        return []

    def get_trait_names(self) -> list[str]:
        return []

    def get_own_trait_names(self) -> list[str]:
        return []

    def get_trait_aliases(self) -> dict[str, str]:
        return {}

    def uses_trait(self, trait: Any) -> bool:
        return False

    def get_direct_subclasses(self) -> list:
        return []

    def get_direct_subclass_names(self) -> list[str]:
        return []

    def get_indirect_subclasses(self) -> list:
        return []

    def get_indirect_subclass_names(self) -> list[str]:
        return []

    def get_direct_implementers(self) -> list:
        return []

    def get_direct_implementer_names(self) -> list[str]:
        return []

    def get_indirect_implementers(self) -> list:
        return []

    def get_indirect_implementer_names(self) -> list[str]:
        return []


class UnresolvedClass(_PlaceholderClass):
    """A class that is referenced but never defined."""

    def is_tokenized(self) -> bool:
        return False

    def is_user_defined(self) -> bool:
        return False

    def is_complete(self) -> bool:
        return False

    def is_valid(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"Class [ <unresolved> class {self.name} ] {{}}\n"


class InvalidClass(ReasonsMixin, _PlaceholderClass):
    """A class defined more than once."""

    def __init__(self, name: str, file_name: str | None, broker: Broker) -> None:
        super().__init__(name, broker, file_name)
        self._reasons = []

    def is_complete(self) -> bool:
        return True

    def is_valid(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Class [ <invalid> class {self.name} ] {{}}\n"


class InvalidFunction(ReasonsMixin, _PlaceholderElement):
    """A function defined more than once."""

    kind = ElementKind.FUNCTION

    def __init__(self, name: str, file_name: str | None, broker: Broker) -> None:
        super().__init__(name, broker, file_name)
        self._reasons = []

    def get_pretty_name(self) -> str:
        return f"{self.name}()"

    def is_valid(self) -> bool:
        return False

    def is_disabled(self) -> bool:
        return False

    def is_closure(self) -> bool:
        return False

    def is_variadic(self) -> bool:
        return False

    def returns_reference(self) -> bool:
        return False

    def get_return_type_hint(self) -> None:
        return None

    def get_parameters(self) -> list:
        return []

    def get_parameter(self, parameter: int | str) -> Any:
        raise ReflectionRuntimeError(
            f'There is no parameter "{parameter}".', ErrorCode.DOES_NOT_EXIST, self
        )

    def get_number_of_parameters(self) -> int:
        return 0

    def get_number_of_required_parameters(self) -> int:
        return 0

    def get_static_variables(self) -> dict[str, Any]:
        return {}

    def __str__(self) -> str:
        return f"Function [ <invalid> function {self.name} ] {{}}\n"


class InvalidConstant(ReasonsMixin, _PlaceholderElement):
    """A constant defined more than once."""

    kind = ElementKind.CONSTANT

    def __init__(self, name: str, file_name: str | None, broker: Broker) -> None:
        super().__init__(name, broker, file_name)
        self._reasons = []

    def is_valid(self) -> bool:
        return False

    def get_declaring_class(self) -> None:
        return None

    def get_declaring_class_name(self) -> str | None:
        return None

    def get_value(self) -> Any:
        return None

    def get_value_definition(self) -> str | None:
        return None

    def get_original_value_definition(self) -> str | None:
        return None

    def __str__(self) -> str:
        return f"Constant [ <invalid> {self.name} ] {{ }}\n"
