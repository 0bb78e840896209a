"""Snapshot building, serialization and deserialization.

A snapshot is a plain pydantic view of everything a broker registered. It
can be written to JSON and read back without any parsing.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from phpscope.core.errors import PhpScopeError
from phpscope.core.models import (
    ClassSummary,
    ConflictSummary,
    ConstantSummary,
    ElementKind,
    FunctionSummary,
    MethodSummary,
    ParameterSummary,
    PropertySummary,
    Snapshot,
    Visibility,
)

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

logger = logging.getLogger(__name__)


class SerializationError(Exception):
    """Error during serialization or deserialization."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


def _visibility(member: Any) -> Visibility:
    if member.is_private():
        return Visibility.PRIVATE
    if member.is_protected():
        return Visibility.PROTECTED
    return Visibility.PUBLIC


def _parameters(function: Any) -> list[ParameterSummary]:
    return [
        ParameterSummary(
            name=parameter.get_name(),
            position=parameter.get_position(),
            type_hint=parameter.get_original_type_hint(),
            allows_null=parameter.allows_null(),
            is_optional=parameter.is_optional(),
            is_variadic=parameter.is_variadic(),
            by_reference=parameter.is_passed_by_reference(),
            default=parameter.get_default_value_definition(),
        )
        for parameter in function.get_parameters()
    ]


def _constant(constant: Any) -> ConstantSummary:
    return ConstantSummary(
        name=constant.get_name(),
        short_name=constant.get_short_name(),
        value=constant.get_value(),
        definition=constant.get_value_definition(),
        declaring_class=constant.get_declaring_class_name(),
    )


def summarize_class(reflection: Any) -> ClassSummary:
    """Build the summary of a tokenized class.

    Members are the composed ones; when composing fails (a trait conflict)
    only the own members are listed.
    """
    try:
        methods = reflection.get_methods()
        properties = reflection.get_properties()
    except PhpScopeError as exc:
        logger.debug(f"Listing own members of {reflection.get_name()} only: {exc.message}")
        methods = reflection.get_own_methods()
        properties = reflection.get_own_properties()

    return ClassSummary(
        name=reflection.get_name(),
        short_name=reflection.get_short_name(),
        namespace=reflection.get_namespace_name(),
        kind=reflection.get_class_kind(),
        file=reflection.get_file_name(),
        start_line=reflection.get_start_line(),
        end_line=reflection.get_end_line(),
        is_abstract=reflection.is_abstract(),
        is_final=reflection.is_final(),
        parent=reflection.get_parent_class_name(),
        interfaces=reflection.get_own_interface_names(),
        traits=reflection.get_own_trait_names(),
        constants=[_constant(constant) for constant in reflection.get_constant_reflections()],
        properties=[
            PropertySummary(
                name=prop.get_name(),
                visibility=_visibility(prop),
                is_static=prop.is_static(),
                default=prop.get_default_value_definition(),
                declaring_class=prop.get_declaring_class_name(),
                declaring_trait=prop.get_declaring_trait_name(),
            )
            for prop in properties
        ],
        methods=[
            MethodSummary(
                name=method.get_name(),
                visibility=_visibility(method),
                is_static=method.is_static(),
                is_abstract=method.is_abstract(),
                is_final=method.is_final(),
                returns_reference=method.returns_reference(),
                declaring_class=method.get_declaring_class_name(),
                declaring_trait=method.get_declaring_trait_name(),
                parameters=_parameters(method),
            )
            for method in methods
        ],
        short_description=reflection.get_short_description(),
    )


def summarize_function(function: Any) -> FunctionSummary:
    return FunctionSummary(
        name=function.get_name(),
        short_name=function.get_short_name(),
        namespace=function.get_namespace_name(),
        file=function.get_file_name(),
        start_line=function.get_start_line(),
        end_line=function.get_end_line(),
        returns_reference=function.returns_reference(),
        parameters=_parameters(function),
        short_description=function.get_short_description(),
    )


def _conflict(kind: ElementKind, placeholder: Any) -> ConflictSummary:
    return ConflictSummary(
        kind=kind,
        name=placeholder.get_name(),
        first_file=placeholder.get_file_name(),
        reasons=[reason.message for reason in placeholder.get_reasons()],
    )


def build_snapshot(broker: Broker) -> Snapshot:
    """Build a snapshot of everything a broker registered.

    Args:
        broker: Broker the code base was processed with.

    Returns:
        Snapshot with classes, functions, constants and conflicts.
    """
    snapshot = Snapshot(files=sorted(broker.get_files()))

    for name, reflection in broker.get_storage().get_all(ElementKind.CLASS).items():
        if hasattr(reflection, "get_reasons"):
            snapshot.conflicts.append(_conflict(ElementKind.CLASS, reflection))
        else:
            snapshot.classes[name] = summarize_class(reflection)

    for name, function in broker.get_functions().items():
        if hasattr(function, "get_reasons"):
            snapshot.conflicts.append(_conflict(ElementKind.FUNCTION, function))
        else:
            snapshot.functions[name] = summarize_function(function)

    for name, constant in broker.get_constants().items():
        if hasattr(constant, "get_reasons"):
            snapshot.conflicts.append(_conflict(ElementKind.CONSTANT, constant))
        else:
            snapshot.constants[name] = _constant(constant)

    return snapshot


def serialize(snapshot: Snapshot) -> str:
    """Serialize a snapshot to a JSON string.

    Args:
        snapshot: The snapshot to serialize.

    Returns:
        JSON string representation of the snapshot.

    Raises:
        SerializationError: If serialization fails.
    """
    try:
        data = snapshot.model_dump(mode="json")
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            message="Failed to serialize snapshot",
            details=str(e),
        ) from e


def deserialize(json_str: str) -> Snapshot:
    """Deserialize a JSON string to a snapshot.

    Args:
        json_str: JSON string representation of a snapshot.

    Returns:
        The deserialized snapshot.

    Raises:
        SerializationError: If deserialization fails with detailed error info.
    """
    try:
        data = json.loads(json_str)
        return Snapshot.model_validate(data)
    except json.JSONDecodeError as e:
        raise SerializationError(
            message="Invalid JSON format",
            details=f"Line {e.lineno}, column {e.colno}: {e.msg}",
        ) from e
    except ValidationError as e:
        error_details = []
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            error_details.append(f"{loc}: {err['msg']}")
        raise SerializationError(
            message="Snapshot validation failed",
            details="; ".join(error_details),
        ) from e
