"""Function and method parameters."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError, ReflectionRuntimeError
from phpscope.core.models import ElementKind
from phpscope.reflection.annotation import ReflectionAnnotation
from phpscope.reflection.base import ReflectionElement
from phpscope.reflection.cache import next_element_id
from phpscope.reflection.evaluator import php_export
from phpscope.reflection.resolver import get_source_code, get_value_definition, resolve_class_fqn
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T, Token

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

ARRAY_TYPE_HINT = "array"
CALLABLE_TYPE_HINT = "callable"

# Hints naming a built-in type, never resolved as class names.
SCALAR_TYPE_HINTS = frozenset(
    {
        "bool", "int", "float", "string", "iterable", "object", "mixed",
        "null", "false", "true", "void", "never", "boolean", "integer", "double",
    }
)

_PROMOTION_MODIFIERS = frozenset({T.PUBLIC, T.PROTECTED, T.PRIVATE})
_CONSTANT_REFERENCE_TYPES = frozenset({T.STRING, T.NS_SEPARATOR, T.DOUBLE_COLON})


class ReflectionParameter(ReflectionElement):
    """A parameter of a function or method.

    Parameters never own a docblock. Their owner is referenced by name
    (declaring function and, for methods, declaring class) and looked up
    through the broker.
    """

    kind = ElementKind.PARAMETER

    def __init__(
        self,
        stream: TokenStream,
        broker: Broker,
        parent: Any,
        templates: Sequence[ReflectionAnnotation] = (),
    ) -> None:
        super().__init__(broker)
        self._declaring_function_name = ""
        self._declaring_class_name: str | None = None
        self._function_pretty_name = ""
        self._position = 0
        self._type_hint: str | None = None
        self._original_type_hint: str | None = None
        self._nullable = False
        self._promoted = False
        self._passed_by_reference = False
        self._variadic = False
        self._default: list[Token] = []
        self._optional = False
        self._parse_stream(stream, parent, templates)

    def get_pretty_name(self) -> str:
        return self._function_pretty_name.replace("()", f"(${self.name})")

    def get_position(self) -> int:
        return self._position

    def get_declaring_function_name(self) -> str:
        return self._declaring_function_name

    def get_declaring_function(self) -> Any:
        if self._declaring_class_name is not None:
            return self._broker.get_class(self._declaring_class_name).get_method(self._declaring_function_name)
        return self._broker.get_function(self._declaring_function_name)

    def get_declaring_class_name(self) -> str | None:
        return self._declaring_class_name

    def get_declaring_class(self) -> Any:
        if self._declaring_class_name is None:
            return None
        return self._broker.get_class(self._declaring_class_name)

    def get_original_type_hint(self) -> str | None:
        if self.is_array() or self.is_callable() or self._original_type_hint is None:
            return None
        return self._original_type_hint.lstrip("\\")

    def is_array(self) -> bool:
        return self._type_hint == ARRAY_TYPE_HINT

    def is_callable(self) -> bool:
        return self._type_hint == CALLABLE_TYPE_HINT

    def get_class_name(self) -> str | None:
        """Resolve the type hint to a class name.

        ``self`` and ``parent`` resolve against the declaring class; built-in
        type hints and union types have no class name.
        """
        hint = self._original_type_hint
        if hint is None or self.is_array() or self.is_callable():
            return None
        if "|" in hint or "&" in hint or hint.lower() in SCALAR_TYPE_HINTS:
            return None
        lowered = hint.lower()
        if lowered in ("self", "parent"):
            if self._declaring_class_name is None:
                raise ReflectionRuntimeError(
                    'Parameter type hint cannot be "self" nor "parent" when not a method.',
                    ErrorCode.UNSUPPORTED,
                    self,
                )
            if lowered == "self":
                return self._declaring_class_name
            parent_name = self.get_declaring_class().get_parent_class_name()
            if parent_name is None:
                raise ReflectionRuntimeError("Class has no parent.", ErrorCode.DOES_NOT_EXIST, self)
            return parent_name
        return resolve_class_fqn(hint, self._aliases, self._namespace_name)

    def get_class(self) -> Any:
        name = self.get_class_name()
        return None if name is None else self._broker.get_class(name)

    def allows_null(self) -> bool:
        if self._nullable or self._original_type_hint is None:
            return True
        definition = self.get_default_value_definition()
        return definition is not None and definition.lower() == "null"

    def is_optional(self) -> bool:
        """Tell whether every later sibling is optional too and this one has a default or is variadic."""
        return self._optional

    def is_default_value_available(self) -> bool:
        return self._optional and self.has_default()

    def get_default_value(self) -> Any:
        if not self.is_default_value_available():
            raise ReflectionRuntimeError("Parameter has no default value.", ErrorCode.UNSUPPORTED, self)
        return self._broker.cache.get(self.element_id, "default_value", self._evaluate)

    def _evaluate(self) -> tuple[Any, bool]:
        return get_value_definition(self._default, self)

    def get_default_value_definition(self) -> str | None:
        return get_source_code(self._default)

    def is_default_value_constant(self) -> bool:
        if not self.is_default_value_available() or not self._default:
            return False
        return all(
            token.type in _CONSTANT_REFERENCE_TYPES
            for token in self._default
            if token.type not in (T.WHITESPACE, T.COMMENT)
        )

    def get_default_value_constant_name(self) -> str | None:
        if not self.is_optional():
            raise ReflectionRuntimeError("Parameter is not optional.", ErrorCode.UNSUPPORTED, self)
        return self.get_default_value_definition() if self.is_default_value_constant() else None

    def is_passed_by_reference(self) -> bool:
        return self._passed_by_reference

    def can_be_passed_by_value(self) -> bool:
        return not self._passed_by_reference

    def is_variadic(self) -> bool:
        return self._variadic

    def is_promoted(self) -> bool:
        return self._promoted

    def has_default(self) -> bool:
        return bool(self._default)

    def alias(self, method: Any) -> ReflectionParameter:
        """Copy the parameter onto an aliased method."""
        parameter = copy.copy(self)
        parameter.element_id = next_element_id()
        parameter._declaring_class_name = method.get_declaring_class_name()
        parameter._declaring_function_name = method.get_name()
        parameter._function_pretty_name = method.get_pretty_name()
        return parameter

    def __str__(self) -> str:
        class_name = self.get_class_name()
        if class_name is not None:
            hint = class_name
        elif self.is_array():
            hint = ARRAY_TYPE_HINT
        elif self.is_callable():
            hint = CALLABLE_TYPE_HINT
        else:
            hint = self.get_original_type_hint() or ""
        if hint and self.allows_null():
            hint += " or NULL"
        default = f" = {php_export(self.get_default_value())}" if self.is_default_value_available() else ""
        return (
            f"Parameter #{self._position} [ <{'optional' if self.is_optional() else 'required'}> "
            f"{hint + ' ' if hint else ''}{'&' if self._passed_by_reference else ''}"
            f"{'...' if self._variadic else ''}${self.name}{default} ]"
        )

    def _process_parent(self, parent: Any, stream: TokenStream) -> None:
        if parent.kind not in (ElementKind.FUNCTION, ElementKind.METHOD):
            raise ParseError(
                self,
                stream,
                "The parent object has to be a function or method reflection.",
                ErrorCode.INVALID_PARENT,
            )
        self._declaring_function_name = parent.get_name()
        self._function_pretty_name = parent.get_pretty_name()
        self._position = len(parent.get_parameters())
        if parent.kind == ElementKind.METHOD:
            self._declaring_class_name = parent.get_declaring_class_name()
        self._namespace_name = parent.get_scope_namespace()
        self._aliases = parent.get_namespace_aliases()

    def _parse_doc_comment(self, stream: TokenStream, templates: Sequence[ReflectionAnnotation]) -> None:
        self._doc_comment = ReflectionAnnotation(self)

    def _parse(self, stream: TokenStream, parent: Any) -> None:
        self._parse_promotion(stream)
        self._parse_type_hint(stream)
        self._parse_passed_by_reference(stream)
        self._parse_is_variadic(stream)
        self._parse_name(stream)
        self._parse_default_value(stream)

    def _parse_promotion(self, stream: TokenStream) -> None:
        while stream.get_type() in _PROMOTION_MODIFIERS or (
            stream.is_type(T.STRING) and stream.get_value().lower() == "readonly"
        ):
            self._promoted = True
            stream.skip_whitespaces(True)

    def _parse_type_hint(self, stream: TokenStream) -> None:
        if stream.is_type("?"):
            self._nullable = True
            stream.skip_whitespaces(True)
        token_type = stream.get_type()
        if token_type == T.ARRAY and not stream.is_type("|", self._next_significant(stream)):
            self._type_hint = self._original_type_hint = ARRAY_TYPE_HINT
            stream.skip_whitespaces(True)
        elif token_type == T.CALLABLE and not stream.is_type("|", self._next_significant(stream)):
            self._type_hint = self._original_type_hint = CALLABLE_TYPE_HINT
            stream.skip_whitespaces(True)
        elif token_type in (T.STRING, T.NS_SEPARATOR, T.ARRAY, T.CALLABLE):
            hint = ""
            while stream.get_type() in (T.STRING, T.NS_SEPARATOR, T.ARRAY, T.CALLABLE, "|"):
                hint += stream.get_value()
                stream.skip_whitespaces(True)
            if hint.strip("\\|") == "":
                raise ParseError(self, stream, f'Invalid class name definition: "{hint}".', ErrorCode.LOGICAL_ERROR)
            self._original_type_hint = hint

    @staticmethod
    def _next_significant(stream: TokenStream) -> int:
        position = stream.key() + 1
        while stream.get_type(position) in (T.WHITESPACE, T.COMMENT, T.DOC_COMMENT):
            position += 1
        return position

    def _parse_passed_by_reference(self, stream: TokenStream) -> None:
        if stream.is_type("&"):
            self._passed_by_reference = True
            stream.skip_whitespaces(True)

    def _parse_is_variadic(self, stream: TokenStream) -> None:
        if stream.is_type(T.ELLIPSIS):
            self._variadic = True
            stream.skip_whitespaces(True)

    def _parse_name(self, stream: TokenStream) -> None:
        if not stream.is_type(T.VARIABLE):
            raise ParseError(self, stream, "The parameter name could not be determined.", ErrorCode.UNEXPECTED_TOKEN)
        self.name = stream.get_value()[1:]
        stream.skip_whitespaces(True)

    def _parse_default_value(self, stream: TokenStream) -> None:
        if not stream.is_type("="):
            return
        stream.skip_whitespaces(True)
        level = 0
        while (token_type := stream.get_type()) is not None:
            if token_type in (")", ",") and level == 0:
                break
            if token_type in ("(", "[", "{"):
                level += 1
            elif token_type in (")", "]", "}"):
                level -= 1
            self._default.append(stream.current())
            stream.next()
        if token_type not in (")", ","):
            raise ParseError(
                self,
                stream,
                'The parameter default value is not terminated properly. Expected "," or ")".',
                ErrorCode.UNEXPECTED_TOKEN,
            )
        while self._default and self._default[-1].type in (T.WHITESPACE, T.COMMENT):
            self._default.pop()
