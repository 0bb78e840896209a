"""Name resolution and value definition evaluation."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator, Sequence
from typing import Any

from phpscope.core.errors import ErrorCode, PhpScopeError, ReflectionRuntimeError
from phpscope.core.models import ElementKind
from phpscope.reflection.evaluator import EvaluationError, Literal, evaluate
from phpscope.stream.tokens import T, Token

logger = logging.getLogger(__name__)

NOT_RESOLVED = "~~NOT RESOLVED~~"
NO_NAMESPACE_NAME = "no-namespace"

_REFERENCE_TYPES = frozenset(
    {
        T.DOUBLE_COLON,
        T.STRING,
        T.NS_SEPARATOR,
        T.CLASS_C,
        T.DIR,
        T.FILE,
        T.FUNC_C,
        T.METHOD_C,
        T.NS_C,
        T.TRAIT_C,
    }
)
_LITERAL_NAMES = frozenset({"true", "false", "null"})

_resolving = threading.local()


def resolve_class_fqn(name: str, aliases: dict[str, str], namespace: str | None = None) -> str:
    """Resolve a possibly aliased class name to its fully qualified name.

    Args:
        name: Name as written in the source.
        aliases: ``use`` aliases of the enclosing namespace block.
        namespace: Name of the enclosing namespace.

    Returns:
        The fully qualified name without a leading separator.
    """
    if name.startswith("\\"):
        return name.lstrip("\\")
    if "\\" not in name:
        if name in aliases:
            return aliases[name]
    else:
        first, rest = name.split("\\", 1)
        if first in aliases:
            return f"{aliases[first]}\\{rest}"
    if not namespace or namespace == NO_NAMESPACE_NAME:
        return name
    return f"{namespace}\\{name}"


def get_source_code(tokens: Sequence[Token]) -> str | None:
    if not tokens:
        return None
    return "".join(token.value for token in tokens)


def contains_unresolved(value: Any) -> bool:
    if isinstance(value, str):
        return NOT_RESOLVED in value
    if isinstance(value, list):
        return any(contains_unresolved(item) for item in value)
    if isinstance(value, dict):
        return any(contains_unresolved(item) for item in value.values())
    return False


def find_constants(tokens: Sequence[Token]) -> Iterator[tuple[int, int, str]]:
    """Find symbol references in a token range.

    Yields:
        ``(start index, end index exclusive, reference text)`` for every run of
        name, ``::``, namespace separator and magic constant tokens.
    """
    start: int | None = None
    for index, token in enumerate([*tokens, None]):
        if token is not None and token.type in _REFERENCE_TYPES:
            if start is None:
                start = index
            continue
        if start is not None:
            reference = "".join(t.value for t in tokens[start:index])
            if reference.lower() not in _LITERAL_NAMES:
                yield start, index, reference
            start = None


def _declaring_class_name(element: Any) -> str | None:
    getter = getattr(element, "get_declaring_class_name", None)
    return getter() if getter is not None else None


def _magic_value(constant: str, element: Any) -> str:
    kind = element.kind
    upper = constant.upper()
    if upper == "__FILE__":
        return element.get_file_name() or ""
    if upper == "__DIR__":
        return os.path.dirname(element.get_file_name() or "")
    if upper == "__FUNCTION__":
        if kind == ElementKind.PARAMETER:
            return element.get_declaring_function_name()
        if kind in (ElementKind.FUNCTION, ElementKind.METHOD):
            return element.get_name()
        return ""
    if upper == "__CLASS__":
        return _declaring_class_name(element) or ""
    if upper == "__TRAIT__":
        if kind in (ElementKind.METHOD, ElementKind.PROPERTY):
            return element.get_declaring_trait_name() or ""
        if kind == ElementKind.PARAMETER:
            function = element.get_declaring_function()
            if function is not None and function.kind == ElementKind.METHOD:
                return function.get_declaring_trait_name() or ""
        return ""
    if upper == "__METHOD__":
        if kind == ElementKind.PARAMETER:
            class_name = element.get_declaring_class_name()
            function_name = element.get_declaring_function_name()
            return f"{class_name}::{function_name}" if class_name else function_name
        if kind in (ElementKind.CONSTANT, ElementKind.PROPERTY):
            return _declaring_class_name(element) or ""
        if kind == ElementKind.METHOD:
            return f"{element.get_declaring_class_name()}::{element.get_name()}"
        if kind == ElementKind.FUNCTION:
            return element.get_name()
        return ""
    if upper == "__NAMESPACE__":
        if kind in (ElementKind.PROPERTY, ElementKind.METHOD) or (
            kind in (ElementKind.CONSTANT, ElementKind.PARAMETER) and _declaring_class_name(element)
        ):
            return element.get_declaring_class().get_namespace_name()
        if kind == ElementKind.PARAMETER:
            return element.get_declaring_function().get_namespace_name()
        return element.get_namespace_name()
    raise ReflectionRuntimeError(f'Unknown magic constant "{constant}".', ErrorCode.DOES_NOT_EXIST, element)


def _namespace_of(element: Any) -> str:
    if element.kind in (ElementKind.FILE, ElementKind.NAMESPACE, ElementKind.CLASS):
        raise ReflectionRuntimeError("Invalid reflection object given.", ErrorCode.INVALID_ARGUMENT, element)
    return element.get_scope_namespace()


def _relative_reference(constant: str, element: Any) -> str:
    """Rewrite ``self::`` and ``parent::`` to the class they stand for."""
    if _declaring_class_name(element) is None:
        what = "Function parameters" if element.kind == ElementKind.PARAMETER else "Top level constants"
        raise ReflectionRuntimeError(
            f"{what} cannot use self:: and parent:: references.", ErrorCode.UNSUPPORTED, element
        )
    prefix, member = constant.split("::", 1)
    if prefix.lower() == "self":
        class_name = element.get_declaring_class_name()
    else:
        class_name = element.get_declaring_class().get_parent_class_name() or NOT_RESOLVED
    return f"{class_name}::{member}"


def _lookup(constant: str, element: Any, namespace: str) -> Any:
    lowered = constant.lower()
    if lowered.startswith(("self::", "parent::")):
        name = _relative_reference(constant, element)
    else:
        name = None
        if "::" in constant:
            class_part, member = constant.split("::", 1)
            name = f"{resolve_class_fqn(class_part, element.get_namespace_aliases(), namespace)}::{member}"
        else:
            name = resolve_class_fqn(constant, element.get_namespace_aliases(), namespace)
    class_part, _, member = name.partition("::")
    if member.lower() == "class":
        return class_part
    broker = element.get_broker()
    if not member and not constant.startswith("\\") and "\\" not in constant:
        # Unqualified constants fall back to the global namespace.
        if not broker.has_constant(name) and broker.has_constant(constant):
            name = constant
    return broker.get_constant(name).get_value()


def get_value_definition(tokens: Sequence[Token], element: Any) -> tuple[Any, bool]:
    """Evaluate a value definition in the context of an element.

    Symbol references are resolved through the element's broker and spliced
    back as literals. A reference that cannot be resolved becomes
    ``NOT_RESOLVED`` instead of failing the whole expression.

    Returns:
        ``(value, complete)`` where ``complete`` tells whether every
        reference resolved to a final value.
    """
    namespace = _namespace_of(element)
    items: list[Token | Literal] = []
    complete = True
    cursor = 0
    for start, end, constant in find_constants(tokens):
        items.extend(_line_literals(tokens[cursor:start]))
        cursor = end
        value = _resolve_reference(constant, element, namespace)
        if contains_unresolved(value):
            complete = False
        items.append(Literal(value, tokens[start].line))
    items.extend(_line_literals(tokens[cursor:]))

    try:
        return evaluate(items), complete
    except EvaluationError as exc:
        logger.debug(f"Could not evaluate {get_source_code(tokens)!r}: {exc}")
        return NOT_RESOLVED, complete


def _line_literals(tokens: Sequence[Token]) -> list[Token | Literal]:
    return [Literal(token.line, token.line) if token.type == T.LINE else token for token in tokens]


def _resolve_reference(constant: str, element: Any, namespace: str) -> Any:
    if constant.upper() in ("__FILE__", "__DIR__", "__FUNCTION__", "__CLASS__", "__TRAIT__", "__METHOD__", "__NAMESPACE__"):
        try:
            return _magic_value(constant, element)
        except PhpScopeError:
            return NOT_RESOLVED

    guard: set[tuple[int, str]] = getattr(_resolving, "active", None) or set()
    _resolving.active = guard
    key = (element.element_id, constant)
    if key in guard:
        return NOT_RESOLVED
    guard.add(key)
    try:
        return _lookup(constant, element, namespace)
    except PhpScopeError:
        return NOT_RESOLVED
    finally:
        guard.discard(key)
