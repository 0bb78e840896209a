"""Namespace aggregates spanning every file that contributes to a namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from phpscope.core.errors import ErrorCode, ReflectionRuntimeError
from phpscope.reflection.base import short_name_of
from phpscope.reflection.resolver import NO_NAMESPACE_NAME

if TYPE_CHECKING:
    from phpscope.broker.broker import Broker
    from phpscope.reflection.file import ReflectionFileNamespace


class ReflectionNamespace:
    """All classes, functions and constants of one namespace.

    Only names are kept here; the elements themselves are looked up in the
    broker, so a conflict placeholder registered later is what a query
    returns.
    """

    def __init__(self, name: str, broker: Broker) -> None:
        self.name = name
        self._broker = broker
        self._class_names: dict[str, None] = {}
        self._function_names: dict[str, None] = {}
        self._constant_names: dict[str, None] = {}

    def __repr__(self) -> str:
        return f"<ReflectionNamespace {self.name}>"

    def get_name(self) -> str:
        return self.name

    def get_pretty_name(self) -> str:
        return self.name

    def is_internal(self) -> bool:
        return False

    def is_user_defined(self) -> bool:
        return True

    def is_tokenized(self) -> bool:
        return True

    def get_broker(self) -> Broker:
        return self._broker

    def add_file_namespace(self, namespace: ReflectionFileNamespace) -> ReflectionNamespace:
        """Record the declarations of one namespace block."""
        self._class_names.update(dict.fromkeys(namespace.get_classes()))
        self._function_names.update(dict.fromkeys(namespace.get_functions()))
        self._constant_names.update(dict.fromkeys(namespace.get_constants()))
        return self

    def _fqn(self, name: str) -> str:
        """Qualify a short name with this namespace."""
        name = name.lstrip("\\")
        if "\\" not in name and self.name != NO_NAMESPACE_NAME:
            name = f"{self.name}\\{name}"
        return name

    # Classes

    def has_class(self, name: str) -> bool:
        return self._fqn(name) in self._class_names

    def get_class(self, name: str) -> Any:
        fqn = self._fqn(name)
        if fqn not in self._class_names:
            raise ReflectionRuntimeError(f'Class "{fqn}" does not exist.', ErrorCode.DOES_NOT_EXIST, self)
        return self._broker.get_class(fqn)

    def get_classes(self) -> dict[str, Any]:
        return {name: self._broker.get_class(name) for name in self._class_names}

    def get_class_names(self) -> list[str]:
        return list(self._class_names)

    def get_class_short_names(self) -> list[str]:
        return [short_name_of(name) for name in self._class_names]

    # Functions

    def has_function(self, name: str) -> bool:
        return self._fqn(name) in self._function_names

    def get_function(self, name: str) -> Any:
        fqn = self._fqn(name)
        if fqn not in self._function_names:
            raise ReflectionRuntimeError(f'Function "{fqn}" does not exist.', ErrorCode.DOES_NOT_EXIST, self)
        return self._broker.get_function(fqn)

    def get_functions(self) -> dict[str, Any]:
        return {name: self._broker.get_function(name) for name in self._function_names}

    def get_function_names(self) -> list[str]:
        return list(self._function_names)

    def get_function_short_names(self) -> list[str]:
        return [short_name_of(name) for name in self._function_names]

    # Constants

    def has_constant(self, name: str) -> bool:
        return self._fqn(name) in self._constant_names

    def get_constant(self, name: str) -> Any:
        fqn = self._fqn(name)
        if fqn not in self._constant_names:
            raise ReflectionRuntimeError(f'Constant "{fqn}" does not exist.', ErrorCode.DOES_NOT_EXIST, self)
        return self._broker.get_constant(fqn)

    def get_constants(self) -> dict[str, Any]:
        return {name: self._broker.get_constant(name) for name in self._constant_names}

    def get_constant_names(self) -> list[str]:
        return list(self._constant_names)

    def get_constant_short_names(self) -> list[str]:
        return [short_name_of(name) for name in self._constant_names]

    def get_source(self) -> str:
        raise ReflectionRuntimeError(
            "Cannot export source code of a namespace.", ErrorCode.UNSUPPORTED, self
        )

    def __str__(self) -> str:
        classes = "".join(f"    Class [ {name} ]\n" for name in self._class_names)
        functions = "".join(f"    Function [ {name} ]\n" for name in self._function_names)
        constants = "".join(f"    Constant [ {name} ]\n" for name in self._constant_names)
        return (
            f"Namespace [ <user> namespace {self.name} ] {{\n\n"
            f"  - Constants [{len(self._constant_names)}] {{\n{constants}  }}\n\n"
            f"  - Functions [{len(self._function_names)}] {{\n{functions}  }}\n\n"
            f"  - Classes [{len(self._class_names)}] {{\n{classes}  }}\n}}\n"
        )
