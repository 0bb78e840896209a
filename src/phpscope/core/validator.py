"""Strict validation of a processed code base.

Registration tolerates duplicate definitions and dangling references; this
module is the place where they are promoted to errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from phpscope.core.errors import PhpScopeError
from phpscope.core.models import ElementKind

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker


class ValidationErrorType(str, Enum):
    """Types of validation errors."""

    DUPLICATE_DEFINITION = "duplicate_definition"
    UNRESOLVED_PARENT = "unresolved_parent"
    UNRESOLVED_INTERFACE = "unresolved_interface"
    UNRESOLVED_TRAIT = "unresolved_trait"
    KIND_MISMATCH = "kind_mismatch"
    TRAIT_CONFLICT = "trait_conflict"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    element_name: str
    field_name: str
    invalid_ref: str
    message: str


@dataclass
class ValidationResult:
    """Result of strict validation."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(
        self,
        error_type: ValidationErrorType,
        element_name: str,
        field_name: str,
        invalid_ref: str,
        message: str,
    ) -> None:
        """Add a validation error."""
        self.errors.append(
            ValidationError(
                error_type=error_type,
                element_name=element_name,
                field_name=field_name,
                invalid_ref=invalid_ref,
                message=message,
            )
        )
        self.is_valid = False


def validate_broker(broker: Broker) -> ValidationResult:
    """Validate every class, function and constant a broker registered.

    Checks that names are defined only once and that parents, interfaces
    and traits exist and are of the right kind.

    Args:
        broker: Broker the code base was processed with.

    Returns:
        ValidationResult containing validation status and any errors found.
    """
    result = ValidationResult(is_valid=True)

    for kind, elements in (
        ("class", broker.get_storage().get_all(ElementKind.CLASS)),
        ("function", broker.get_functions()),
        ("constant", broker.get_constants()),
    ):
        for name, element in elements.items():
            # Only conflict placeholders carry reasons.
            if not hasattr(element, "get_reasons"):
                continue
            for reason in element.get_reasons():
                result.add_error(
                    error_type=ValidationErrorType.DUPLICATE_DEFINITION,
                    element_name=name,
                    field_name=kind,
                    invalid_ref=element.get_file_name() or "",
                    message=reason.message,
                )

    for reflection in broker.get_classes():
        _validate_class(broker, reflection, result)

    return result


def _validate_class(broker: Broker, reflection, result: ValidationResult) -> None:
    name = reflection.get_name()

    parent_name = reflection.get_parent_class_name()
    if parent_name is not None:
        if not broker.has_class(parent_name):
            result.add_error(
                error_type=ValidationErrorType.UNRESOLVED_PARENT,
                element_name=name,
                field_name="parent",
                invalid_ref=parent_name,
                message=f"Class '{name}' extends undefined class '{parent_name}'",
            )
        elif broker.get_class(parent_name).is_interface() or broker.get_class(parent_name).is_trait():
            result.add_error(
                error_type=ValidationErrorType.KIND_MISMATCH,
                element_name=name,
                field_name="parent",
                invalid_ref=parent_name,
                message=f"Class '{name}' extends '{parent_name}', which is not a class",
            )

    for interface_name in reflection.get_own_interface_names():
        if not broker.has_class(interface_name):
            result.add_error(
                error_type=ValidationErrorType.UNRESOLVED_INTERFACE,
                element_name=name,
                field_name="interfaces",
                invalid_ref=interface_name,
                message=f"'{name}' implements undefined interface '{interface_name}'",
            )
        elif not broker.get_class(interface_name).is_interface():
            result.add_error(
                error_type=ValidationErrorType.KIND_MISMATCH,
                element_name=name,
                field_name="interfaces",
                invalid_ref=interface_name,
                message=f"'{name}' implements '{interface_name}', which is not an interface",
            )

    for trait_name in reflection.get_own_trait_names():
        if not broker.has_class(trait_name):
            result.add_error(
                error_type=ValidationErrorType.UNRESOLVED_TRAIT,
                element_name=name,
                field_name="traits",
                invalid_ref=trait_name,
                message=f"'{name}' uses undefined trait '{trait_name}'",
            )
        elif not broker.get_class(trait_name).is_trait():
            result.add_error(
                error_type=ValidationErrorType.KIND_MISMATCH,
                element_name=name,
                field_name="traits",
                invalid_ref=trait_name,
                message=f"'{name}' uses '{trait_name}', which is not a trait",
            )

    if reflection.get_own_trait_names():
        try:
            reflection.get_methods()
        except PhpScopeError as exc:
            result.add_error(
                error_type=ValidationErrorType.TRAIT_CONFLICT,
                element_name=name,
                field_name="traits",
                invalid_ref=", ".join(reflection.get_own_trait_names()),
                message=exc.message,
            )
