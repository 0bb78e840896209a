"""In-memory symbol registry.

Elements live in one arena list; a ``(kind, fqn)`` index maps every
registered name to its arena slot. Relations between elements are stored
as names and looked up here at query time, never as object references.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from phpscope.broker.namespace import ReflectionNamespace
from phpscope.core.errors import ErrorCode, ParseError, PhpScopeError
from phpscope.core.models import ElementKind
from phpscope.reflection.placeholders import InvalidClass, InvalidConstant, InvalidFunction, UnresolvedClass

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker
    from phpscope.reflection.file import ReflectionFile
    from phpscope.stream.stream import TokenStream

logger = logging.getLogger(__name__)

_PLACEHOLDERS = {
    ElementKind.CLASS: InvalidClass,
    ElementKind.FUNCTION: InvalidFunction,
    ElementKind.CONSTANT: InvalidConstant,
}
_LABELS = {
    ElementKind.CLASS: "Class",
    ElementKind.FUNCTION: "Function",
    ElementKind.CONSTANT: "Constant",
}


class MemoryStorage:
    """Registry of classes, functions, constants, namespaces and files.

    Registration is serialised with a re-entrant lock, so files may be
    parsed in parallel as long as they are registered through ``add_file``.
    """

    def __init__(self) -> None:
        self._arena: list[Any] = []
        self._index: dict[tuple[ElementKind, str], int] = {}
        self._lock = threading.RLock()
        self._files: dict[str, ReflectionFile] = {}
        self._token_streams: dict[str, TokenStream] = {}
        self._namespaces: dict[str, ReflectionNamespace] = {}
        self._unresolved: dict[str, UnresolvedClass] = {}

    def __len__(self) -> int:
        return len(self._index)

    # Symbols

    def has(self, kind: ElementKind, name: str) -> bool:
        return (kind, name.lstrip("\\")) in self._index

    def get(self, kind: ElementKind, name: str) -> Any | None:
        """Return the element registered under ``name``, or None."""
        slot = self._index.get((kind, name.lstrip("\\")))
        return None if slot is None else self._arena[slot]

    def get_all(self, kind: ElementKind) -> dict[str, Any]:
        return {name: self._arena[slot] for (entry_kind, name), slot in self._index.items() if entry_kind == kind}

    def get_unresolved_class(self, name: str, broker: Broker) -> UnresolvedClass:
        """Return the (shared) placeholder for a class nobody defined."""
        name = name.lstrip("\\")
        with self._lock:
            placeholder = self._unresolved.get(name)
            if placeholder is None:
                placeholder = self._unresolved[name] = UnresolvedClass(name, broker)
            return placeholder

    def register(self, kind: ElementKind, element: Any, broker: Broker) -> Any:
        """Register an element, converting the slot into a conflict placeholder on collision.

        Returns:
            Whatever the slot holds after the registration.
        """
        name = element.get_name()
        key = (kind, name)
        with self._lock:
            slot = self._index.get(key)
            if slot is None:
                self._index[key] = len(self._arena)
                self._arena.append(element)
                self._unresolved.pop(name, None)
                return element

            existing = self._arena[slot]
            if not isinstance(existing, _PLACEHOLDERS[kind]):
                placeholder = _PLACEHOLDERS[kind](name, existing.get_file_name(), broker)
                if hasattr(existing, "get_reasons"):
                    for reason in existing.get_reasons():
                        placeholder.add_reason(reason)
                self._arena[slot] = existing = placeholder
                logger.debug(f"{_LABELS[kind]} {name} converted into a conflict placeholder")

            existing.add_reason(self._conflict_reason(kind, element, existing))
            if hasattr(element, "get_reasons"):
                for reason in element.get_reasons():
                    existing.add_reason(reason)
            return existing

    @staticmethod
    def _conflict_reason(kind: ElementKind, element: Any, existing: Any) -> PhpScopeError:
        where = existing.get_file_name() or "unknown file"
        error = ParseError(
            element,
            None,
            f'{_LABELS[kind]} "{element.get_name()}" is already defined; in file "{where}".',
            ErrorCode.ALREADY_EXISTS,
        )
        error.file_name = element.get_file_name()
        return error

    # Files and namespaces

    def has_file(self, file_name: str) -> bool:
        return file_name in self._files

    def get_file(self, file_name: str) -> ReflectionFile | None:
        return self._files.get(file_name)

    def get_files(self) -> dict[str, ReflectionFile]:
        return dict(self._files)

    def get_file_tokens(self, file_name: str) -> TokenStream | None:
        return self._token_streams.get(file_name)

    def has_namespace(self, name: str) -> bool:
        return name in self._namespaces

    def get_namespace(self, name: str) -> ReflectionNamespace | None:
        return self._namespaces.get(name)

    def get_namespaces(self) -> dict[str, ReflectionNamespace]:
        return dict(self._namespaces)

    def add_file(self, file: ReflectionFile, broker: Broker, stream: TokenStream | None = None) -> None:
        """Register a parsed file with its namespaces and declarations."""
        with self._lock:
            file_name = file.get_file_name()
            for block in file.get_namespaces():
                name = block.get_name()
                namespace = self._namespaces.get(name)
                if namespace is None:
                    namespace = self._namespaces[name] = ReflectionNamespace(name, broker)
                namespace.add_file_namespace(block)

                for element in block.get_classes().values():
                    self.register(ElementKind.CLASS, element, broker)
                for element in block.get_functions().values():
                    self.register(ElementKind.FUNCTION, element, broker)
                for element in block.get_constants().values():
                    self.register(ElementKind.CONSTANT, element, broker)

            self._files[file_name] = file
            if stream is not None:
                self._token_streams[file_name] = stream
