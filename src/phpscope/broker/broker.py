"""Processing driver and query entry point of the reflection model.

The broker turns source files into reflections, registers them in its
storage and answers lookups by fully qualified name. Every reflection keeps
a reference to its broker and resolves related elements through it at
query time.
"""

from __future__ import annotations

import logging
from enum import IntFlag
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from phpscope.broker.namespace import ReflectionNamespace
from phpscope.broker.storage import MemoryStorage
from phpscope.core.config import ScopeConfig, get_config
from phpscope.core.errors import (
    BatchProcessingError,
    BrokerError,
    ErrorCode,
    FileProcessingError,
    PhpScopeError,
    StreamError,
)
from phpscope.core.models import ElementKind
from phpscope.reflection.cache import LazyCache
from phpscope.reflection.file import ReflectionFile
from phpscope.reflection.placeholders import InvalidClass, UnresolvedClass
from phpscope.stream.stream import FileStream, StringStream, TokenStream

logger = logging.getLogger(__name__)


class ClassTypes(IntFlag):
    """Which registry entries ``Broker.get_classes`` returns."""

    TOKENIZED = 1
    INVALID = 2
    UNRESOLVED = 4
    ALL = TOKENIZED | INVALID | UNRESOLVED


class ProcessingReport(BaseModel):
    """Outcome of processing a directory."""

    root: str
    processed: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict, description="File name to error message")

    _errors: dict[str, PhpScopeError] = PrivateAttr(default_factory=dict)

    @property
    def success(self) -> bool:
        """Check if every file was processed."""
        return len(self.failures) == 0

    def add_failure(self, file_name: str, error: PhpScopeError) -> None:
        self.failures[file_name] = error.message
        self._errors[file_name] = error

    def get_errors(self) -> dict[str, PhpScopeError]:
        return dict(self._errors)

    def raise_for_failures(self) -> None:
        """Raise a BatchProcessingError when at least one file failed."""
        if self._errors:
            raise BatchProcessingError(self._errors)


class Broker:
    """Registry front end and batch driver.

    Args:
        config: Settings; the global configuration when omitted.
        storage: Registry backend; a fresh in-memory storage when omitted.
    """

    def __init__(self, config: ScopeConfig | None = None, storage: MemoryStorage | None = None) -> None:
        self.config = config or get_config()
        self.cache = LazyCache()
        self._storage = storage or MemoryStorage()

    def get_storage(self) -> MemoryStorage:
        return self._storage

    # Processing

    def process_string(self, source: str, file_name: str) -> ReflectionFile:
        """Parse PHP source given as text.

        Raises:
            FileProcessingError: The source could not be parsed; nothing of
                it is registered.
        """
        existing = self._storage.get_file(file_name)
        if existing is not None:
            return existing
        return self._process_stream(StringStream(source, file_name))

    def process_file(self, path: str | Path) -> ReflectionFile:
        """Parse one PHP file.

        Raises:
            BrokerError: The file does not exist or cannot be read.
            FileProcessingError: The file could not be parsed.
        """
        file_name = str(Path(path).resolve())
        existing = self._storage.get_file(file_name)
        if existing is not None:
            return existing
        try:
            stream = FileStream(file_name)
        except StreamError as exc:
            raise BrokerError(exc.message, ErrorCode.DOES_NOT_EXIST) from exc
        return self._process_stream(stream)

    def process_directory(self, path: str | Path) -> ProcessingReport:
        """Parse every matching file below a directory.

        Files that fail are logged and recorded in the report; the rest of
        the directory is still processed.

        Raises:
            BrokerError: The path is not a directory.
        """
        root = Path(path).resolve()
        if not root.is_dir():
            raise BrokerError(f'Directory "{root}" does not exist.', ErrorCode.DOES_NOT_EXIST)

        report = ProcessingReport(root=str(root))
        for file_path in self._discover(root):
            try:
                self.process_file(file_path)
            except BrokerError as exc:
                logger.warning(f"Failed to process {file_path}: {exc.message}")
                report.add_failure(str(file_path), exc)
            else:
                report.processed.append(str(file_path))
        logger.info(f"Processed {len(report.processed)} files in {root}, {len(report.failures)} failed")
        return report

    def process(self, path: str | Path) -> ReflectionFile | ProcessingReport:
        """Process a file or a directory, whichever ``path`` is."""
        if Path(path).is_dir():
            return self.process_directory(path)
        return self.process_file(path)

    def _discover(self, root: Path) -> list[Path]:
        extensions = {extension.lower() for extension in self.config.file_extensions}
        excluded = set(self.config.exclude_dirs)
        return sorted(
            file_path
            for file_path in root.rglob("*")
            if file_path.is_file()
            and file_path.suffix.lower() in extensions
            and not excluded.intersection(file_path.relative_to(root).parts[:-1])
        )

    def _process_stream(self, stream: TokenStream) -> ReflectionFile:
        try:
            file = ReflectionFile(stream, self)
        except StreamError as exc:
            raise FileProcessingError([exc], stream.file_name) from exc
        self._storage.add_file(file, self, stream if self.config.save_token_streams else None)
        logger.debug(f"Registered {stream.file_name}")
        return file

    # Classes

    def has_class(self, name: str) -> bool:
        return self._storage.has(ElementKind.CLASS, name)

    def get_class(self, name: str) -> Any:
        """Return the class registered under ``name``.

        Unknown names yield an ``UnresolvedClass`` placeholder, never None.
        """
        found = self._storage.get(ElementKind.CLASS, name)
        if found is None:
            return self._storage.get_unresolved_class(name, self)
        return found

    def get_classes(self, types: ClassTypes = ClassTypes.TOKENIZED) -> list[Any]:
        classes: list[Any] = []
        for reflection in self._storage.get_all(ElementKind.CLASS).values():
            if isinstance(reflection, InvalidClass):
                if types & ClassTypes.INVALID:
                    classes.append(reflection)
            elif types & ClassTypes.TOKENIZED:
                classes.append(reflection)
        if types & ClassTypes.UNRESOLVED:
            classes.extend(self._unresolved_classes(classes))
        return classes

    def _unresolved_classes(self, known: list[Any]) -> list[UnresolvedClass]:
        seen = {reflection.get_name() for reflection in known}
        unresolved: list[UnresolvedClass] = []
        for reflection in self._storage.get_all(ElementKind.CLASS).values():
            if isinstance(reflection, InvalidClass):
                continue
            names = [reflection.get_parent_class_name(), *reflection.get_own_interface_names()]
            names.extend(reflection.get_own_trait_names())
            for name in names:
                if name and name not in seen and not self.has_class(name):
                    seen.add(name)
                    unresolved.append(self.get_class(name))
        return unresolved

    # Functions

    def has_function(self, name: str) -> bool:
        return self._storage.has(ElementKind.FUNCTION, name)

    def get_function(self, name: str) -> Any:
        """Return a function by name.

        Raises:
            BrokerError: No such function was processed.
        """
        found = self._storage.get(ElementKind.FUNCTION, name)
        if found is None:
            raise BrokerError(f'Function "{name}" does not exist.', ErrorCode.DOES_NOT_EXIST)
        return found

    def get_functions(self) -> dict[str, Any]:
        return self._storage.get_all(ElementKind.FUNCTION)

    # Constants

    def has_constant(self, name: str) -> bool:
        if "::" in name:
            class_name, _, constant = name.partition("::")
            return self.has_class(class_name) and self.get_class(class_name).has_constant(constant)
        return self._storage.has(ElementKind.CONSTANT, name)

    def get_constant(self, name: str) -> Any:
        """Return a constant by name; ``Class::NAME`` addresses class constants.

        Raises:
            BrokerError: No such constant was processed.
        """
        if "::" in name:
            class_name, _, constant = name.partition("::")
            if not self.has_class(class_name):
                raise BrokerError(f'Class "{class_name}" does not exist.', ErrorCode.DOES_NOT_EXIST)
            try:
                return self.get_class(class_name).get_constant_reflection(constant)
            except PhpScopeError as exc:
                raise BrokerError(f'Constant "{name}" does not exist.', ErrorCode.DOES_NOT_EXIST) from exc
        found = self._storage.get(ElementKind.CONSTANT, name)
        if found is None:
            raise BrokerError(f'Constant "{name}" does not exist.', ErrorCode.DOES_NOT_EXIST)
        return found

    def get_constants(self) -> dict[str, Any]:
        return self._storage.get_all(ElementKind.CONSTANT)

    # Namespaces

    def has_namespace(self, name: str) -> bool:
        return self._storage.has_namespace(name)

    def get_namespace(self, name: str) -> ReflectionNamespace:
        """Return a namespace aggregate.

        Raises:
            BrokerError: No processed file declares the namespace.
        """
        namespace = self._storage.get_namespace(name.lstrip("\\"))
        if namespace is None:
            raise BrokerError(f'Namespace "{name}" does not exist.', ErrorCode.DOES_NOT_EXIST)
        return namespace

    def get_namespaces(self) -> dict[str, ReflectionNamespace]:
        return self._storage.get_namespaces()

    # Files

    def has_file(self, file_name: str) -> bool:
        return self._storage.has_file(file_name)

    def get_file(self, file_name: str | None) -> ReflectionFile:
        """Return a processed file.

        Raises:
            BrokerError: The file was not processed.
        """
        file = self._storage.get_file(file_name) if file_name is not None else None
        if file is None:
            raise BrokerError(f'File "{file_name}" was not processed.', ErrorCode.DOES_NOT_EXIST)
        return file

    def get_files(self) -> dict[str, ReflectionFile]:
        return self._storage.get_files()

    def get_file_tokens(self, file_name: str | None) -> TokenStream:
        """Return the token stream of a processed file.

        Streams are kept when ``save_token_streams`` is on; otherwise the
        file is tokenized again.

        Raises:
            BrokerError: The file was not processed or cannot be read again.
        """
        file = self.get_file(file_name)
        stream = self._storage.get_file_tokens(file.get_file_name())
        if stream is not None:
            return stream
        try:
            return FileStream(file.get_file_name())
        except StreamError as exc:
            raise BrokerError(
                f'Token stream of "{file_name}" is not available.', ErrorCode.DOES_NOT_EXIST
            ) from exc
