"""Behaviour shared by functions and methods."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ParseError, ReflectionRuntimeError
from phpscope.reflection.base import ReflectionElement, namespace_of, short_name_of
from phpscope.reflection.parameter import ReflectionParameter
from phpscope.reflection.resolver import get_value_definition
from phpscope.stream.stream import TokenStream
from phpscope.stream.tokens import T, Token

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker

_PARAMETER_START = frozenset(
    {
        T.NS_SEPARATOR, T.STRING, T.ARRAY, T.CALLABLE, T.VARIABLE, T.ELLIPSIS,
        T.PUBLIC, T.PROTECTED, T.PRIVATE, "&", "?",
    }
)
_RETURN_TYPE = frozenset({T.STRING, T.NS_SEPARATOR, T.ARRAY, T.CALLABLE, T.STATIC, "|", "?"})
_OPENING = frozenset({"(", "[", "{"})
_CLOSING = frozenset({")", "]", "}"})


class ReflectionFunctionBase(ReflectionElement):
    """Parameters, return type and static variables of a callable."""

    def __init__(self, broker: Broker) -> None:
        super().__init__(broker)
        self._parameters: list[ReflectionParameter] = []
        self._returns_reference = False
        self._return_type_hint: str | None = None
        self._static_definitions: dict[str, list[Token]] = {}

    def get_short_name(self) -> str:
        return short_name_of(self.name)

    def get_namespace_name(self) -> str:
        return namespace_of(self.name)

    def in_namespace(self) -> bool:
        return self.get_namespace_name() != ""

    def get_pretty_name(self) -> str:
        return f"{self.name}()"

    def returns_reference(self) -> bool:
        return self._returns_reference

    def get_return_type_hint(self) -> str | None:
        return self._return_type_hint

    def is_closure(self) -> bool:
        return False

    def is_variadic(self) -> bool:
        return bool(self._parameters) and self._parameters[-1].is_variadic()

    def get_parameters(self) -> list[ReflectionParameter]:
        return list(self._parameters)

    def get_parameter(self, parameter: int | str) -> ReflectionParameter:
        """Return a parameter by position or by name (without ``$``)."""
        if isinstance(parameter, int):
            if 0 <= parameter < len(self._parameters):
                return self._parameters[parameter]
            raise ReflectionRuntimeError(
                f"There is no parameter at position {parameter}.", ErrorCode.DOES_NOT_EXIST, self
            )
        for reflection in self._parameters:
            if reflection.get_name() == parameter:
                return reflection
        raise ReflectionRuntimeError(f'There is no parameter "{parameter}".', ErrorCode.DOES_NOT_EXIST, self)

    def get_number_of_parameters(self) -> int:
        return len(self._parameters)

    def get_number_of_required_parameters(self) -> int:
        return sum(1 for parameter in self._parameters if not parameter.is_optional())

    def get_static_variables(self) -> dict[str, Any]:
        """Evaluate the initial values of ``static`` variables in the body.

        Only available when function bodies are parsed (see the
        ``parse_function_body`` setting).
        """
        return self._broker.cache.get(self.element_id, "static_variables", self._evaluate_static_variables)

    def _evaluate_static_variables(self) -> tuple[dict[str, Any], bool]:
        values: dict[str, Any] = {}
        complete = True
        for name, definition in self._static_definitions.items():
            if not definition:
                values[name] = None
                continue
            values[name], resolved = get_value_definition(definition, self)
            complete = complete and resolved
        return values, complete

    def _export_parameters(self) -> str:
        if not self._parameters:
            return ""
        lines = "".join(f"\n    {parameter}" for parameter in self._parameters)
        return f"\n\n  - Parameters [{len(self._parameters)}] {{{lines}\n  }}"

    def _parse_returns_reference(self, stream: TokenStream) -> None:
        if not stream.is_type(T.FUNCTION):
            raise ParseError(self, stream, "Could not find the function keyword.", ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces(True)
        if stream.is_type("&"):
            self._returns_reference = True
            stream.skip_whitespaces(True)
        elif not stream.is_type(T.STRING):
            raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)

    def _parse_name(self, stream: TokenStream) -> None:
        if not stream.is_type(T.STRING):
            raise ParseError(self, stream, "The function name could not be determined.", ErrorCode.UNEXPECTED_TOKEN)
        self.name = stream.get_value()
        stream.skip_whitespaces(True)

    def _parse_children(self, stream: TokenStream, parent: Any) -> None:
        self._parse_parameters(stream)
        self._parse_return_type(stream)
        self._parse_static_variables(stream)

    def _parse_parameters(self, stream: TokenStream) -> None:
        if not stream.is_type("("):
            raise ParseError(self, stream, "Could not find the start token.", ErrorCode.UNEXPECTED_TOKEN)
        stream.skip_whitespaces(True)
        while (token_type := stream.get_type()) is not None and token_type != ")":
            if token_type in _PARAMETER_START:
                self._parameters.append(ReflectionParameter(stream, self._broker, self))
            if stream.is_type(")"):
                break
            stream.skip_whitespaces(True)

        # A parameter is optional only when every later one is optional too.
        optional = True
        for parameter in reversed(self._parameters):
            optional = optional and (parameter.has_default() or parameter.is_variadic())
            parameter._optional = optional
        stream.skip_whitespaces(True)

    def _parse_return_type(self, stream: TokenStream) -> None:
        if not stream.is_type(":"):
            return
        stream.skip_whitespaces(True)
        hint = ""
        while stream.get_type() in _RETURN_TYPE:
            hint += stream.get_value()
            stream.skip_whitespaces(True)
        if not hint.strip("?|"):
            raise ParseError(self, stream, "The return type could not be determined.", ErrorCode.UNEXPECTED_TOKEN)
        self._return_type_hint = hint

    def _parse_static_variables(self, stream: TokenStream) -> None:
        token_type = stream.get_type()
        if token_type == ";":
            return
        if token_type != "{":
            raise ParseError(self, stream, "Unexpected token found.", ErrorCode.UNEXPECTED_TOKEN)
        if not self._broker.config.parse_function_body:
            stream.find_matching_bracket()
            return

        stream.skip_whitespaces(True)
        while (token_type := stream.get_type()) != "}":
            if token_type is None:
                raise ParseError(self, stream, "Invalid end of token stream.", ErrorCode.READ_BEYOND_EOS)
            if token_type == T.STATIC:
                self._parse_static_declaration(stream)
            elif token_type == T.FUNCTION:
                # Anonymous function, skip to its end.
                stream.find("{").find_matching_bracket().skip_whitespaces(True)
            elif token_type in _OPENING:
                stream.find_matching_bracket().skip_whitespaces(True)
            else:
                stream.skip_whitespaces()

    def _parse_static_declaration(self, stream: TokenStream) -> None:
        token_type = stream.skip_whitespaces(True).get_type()
        # ``static::`` and ``static function`` are not declarations.
        while token_type == T.VARIABLE:
            name = stream.get_value()[1:]
            definition: list[Token] = []
            token_type = stream.skip_whitespaces(True).get_type()
            if token_type == "=":
                token_type = stream.skip_whitespaces(True).get_type()
                level = 0
                while stream.valid():
                    if token_type in _OPENING:
                        level += 1
                    elif token_type in _CLOSING:
                        level -= 1
                    elif token_type in (";", ",") and level == 0:
                        break
                    definition.append(stream.current())
                    token_type = stream.skip_whitespaces(True).get_type()
                if not stream.valid():
                    raise ParseError(self, stream, "Invalid end of token stream.", ErrorCode.READ_BEYOND_EOS)
            self._static_definitions[name] = definition
            if token_type != ",":
                break
            token_type = stream.skip_whitespaces(True).get_type()
