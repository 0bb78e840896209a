"""Core module containing configuration, errors, snapshot models, serializer and validator."""

from phpscope.core.config import ScopeConfig, get_config, reload_config
from phpscope.core.errors import (
    BatchProcessingError,
    BrokerError,
    ErrorCode,
    FileProcessingError,
    ParseError,
    PhpScopeError,
    ReflectionRuntimeError,
    StreamError,
)
from phpscope.core.models import (
    ClassKind,
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
from phpscope.core.serializer import (
    SerializationError,
    build_snapshot,
    deserialize,
    serialize,
)
from phpscope.core.validator import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    validate_broker,
)

__all__ = [
    "BatchProcessingError",
    "BrokerError",
    "ClassKind",
    "ClassSummary",
    "ConflictSummary",
    "ConstantSummary",
    "ElementKind",
    "ErrorCode",
    "FileProcessingError",
    "FunctionSummary",
    "MethodSummary",
    "ParameterSummary",
    "ParseError",
    "PhpScopeError",
    "PropertySummary",
    "ReflectionRuntimeError",
    "ScopeConfig",
    "SerializationError",
    "Snapshot",
    "StreamError",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "Visibility",
    "build_snapshot",
    "deserialize",
    "get_config",
    "reload_config",
    "serialize",
    "validate_broker",
]
