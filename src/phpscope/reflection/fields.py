"""Property-style reads of reflection elements.

``get_field(element, ElementField.SHORT_NAME)`` reads the same value as
``element.get_short_name()``. Every field maps to exactly one accessor and
the element kinds it applies to.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from phpscope.core.errors import ErrorCode, ReflectionRuntimeError
from phpscope.core.models import ElementKind


class ElementField(str, Enum):
    """Readable element fields."""

    NAME = "name"
    SHORT_NAME = "short_name"
    NAMESPACE_NAME = "namespace_name"
    PRETTY_NAME = "pretty_name"
    FILE_NAME = "file_name"
    START_LINE = "start_line"
    END_LINE = "end_line"
    DOC_COMMENT = "doc_comment"
    ANNOTATIONS = "annotations"
    SHORT_DESCRIPTION = "short_description"
    LONG_DESCRIPTION = "long_description"
    DEPRECATED = "deprecated"
    TOKENIZED = "tokenized"
    INTERNAL = "internal"
    USER_DEFINED = "user_defined"
    MODIFIERS = "modifiers"
    PARENT_CLASS_NAME = "parent_class_name"
    INTERFACE_NAMES = "interface_names"
    TRAIT_NAMES = "trait_names"
    DECLARING_CLASS_NAME = "declaring_class_name"
    DECLARING_TRAIT_NAME = "declaring_trait_name"
    PARAMETERS = "parameters"
    RETURN_TYPE_HINT = "return_type_hint"
    TYPE_HINT = "type_hint"
    POSITION = "position"
    VALUE = "value"
    DEFAULT_VALUE = "default_value"
    NAMESPACES = "namespaces"


_ALL = frozenset(ElementKind)
_DECLARATIONS = frozenset({ElementKind.CLASS, ElementKind.FUNCTION, ElementKind.METHOD, ElementKind.CONSTANT})
_LOCATED = _ALL - {ElementKind.FILE}
_CALLABLES = frozenset({ElementKind.FUNCTION, ElementKind.METHOD})
_MEMBERS = frozenset({ElementKind.METHOD, ElementKind.PROPERTY})


def _type_hint(element: Any) -> str | None:
    if element.kind == ElementKind.PARAMETER:
        return element.get_original_type_hint()
    return element.get_type_hint()


def _default_value(element: Any) -> Any:
    if element.kind == ElementKind.PARAMETER and not element.is_default_value_available():
        return None
    return element.get_default_value()


_ACCESSORS: dict[ElementField, tuple[frozenset[ElementKind], Callable[[Any], Any]]] = {
    ElementField.NAME: (_ALL, lambda element: element.get_name()),
    ElementField.SHORT_NAME: (_DECLARATIONS, lambda element: element.get_short_name()),
    ElementField.NAMESPACE_NAME: (
        _DECLARATIONS | {ElementKind.NAMESPACE},
        lambda element: element.get_namespace_name(),
    ),
    ElementField.PRETTY_NAME: (_ALL, lambda element: element.get_pretty_name()),
    ElementField.FILE_NAME: (_ALL, lambda element: element.get_file_name()),
    ElementField.START_LINE: (_LOCATED, lambda element: element.get_start_line()),
    ElementField.END_LINE: (_LOCATED, lambda element: element.get_end_line()),
    ElementField.DOC_COMMENT: (_ALL, lambda element: element.get_doc_comment()),
    ElementField.ANNOTATIONS: (_ALL, lambda element: element.get_annotations()),
    ElementField.SHORT_DESCRIPTION: (_ALL, lambda element: element.get_short_description()),
    ElementField.LONG_DESCRIPTION: (_ALL, lambda element: element.get_long_description()),
    ElementField.DEPRECATED: (_ALL, lambda element: element.is_deprecated()),
    ElementField.TOKENIZED: (_ALL, lambda element: element.is_tokenized()),
    ElementField.INTERNAL: (_ALL, lambda element: element.is_internal()),
    ElementField.USER_DEFINED: (_ALL, lambda element: element.is_user_defined()),
    ElementField.MODIFIERS: (_MEMBERS | {ElementKind.CLASS}, lambda element: element.get_modifiers()),
    ElementField.PARENT_CLASS_NAME: (frozenset({ElementKind.CLASS}), lambda element: element.get_parent_class_name()),
    ElementField.INTERFACE_NAMES: (frozenset({ElementKind.CLASS}), lambda element: element.get_interface_names()),
    ElementField.TRAIT_NAMES: (frozenset({ElementKind.CLASS}), lambda element: element.get_trait_names()),
    ElementField.DECLARING_CLASS_NAME: (
        _MEMBERS | {ElementKind.CONSTANT, ElementKind.PARAMETER},
        lambda element: element.get_declaring_class_name(),
    ),
    ElementField.DECLARING_TRAIT_NAME: (_MEMBERS, lambda element: element.get_declaring_trait_name()),
    ElementField.PARAMETERS: (_CALLABLES, lambda element: element.get_parameters()),
    ElementField.RETURN_TYPE_HINT: (_CALLABLES, lambda element: element.get_return_type_hint()),
    ElementField.TYPE_HINT: (frozenset({ElementKind.PROPERTY, ElementKind.PARAMETER}), _type_hint),
    ElementField.POSITION: (frozenset({ElementKind.PARAMETER}), lambda element: element.get_position()),
    ElementField.VALUE: (frozenset({ElementKind.CONSTANT}), lambda element: element.get_value()),
    ElementField.DEFAULT_VALUE: (frozenset({ElementKind.PROPERTY, ElementKind.PARAMETER}), _default_value),
    ElementField.NAMESPACES: (frozenset({ElementKind.FILE}), lambda element: element.get_namespaces()),
}


def get_field(element: Any, field: ElementField | str) -> Any:
    """Read a field of a reflection element.

    Args:
        element: Any reflection element or placeholder.
        field: The field, as enum member or its string value.

    Returns:
        The value the corresponding getter returns.

    Raises:
        ReflectionRuntimeError: The field does not exist or does not apply
            to the element's kind.
    """
    try:
        field = ElementField(field)
    except ValueError:
        raise ReflectionRuntimeError(
            f'Cannot read field "{field}", it does not exist.', ErrorCode.DOES_NOT_EXIST, element
        ) from None
    kinds, accessor = _ACCESSORS[field]
    if getattr(element, "kind", None) not in kinds:
        raise ReflectionRuntimeError(
            f'Cannot read field "{field.value}" of {type(element).__name__}.', ErrorCode.UNSUPPORTED, element
        )
    return accessor(element)


def supported_fields(kind: ElementKind) -> list[ElementField]:
    """List the fields readable on elements of ``kind``."""
    return [field for field, (kinds, _) in _ACCESSORS.items() if kind in kinds]
