"""Analysis service for coordinating source processing.

This module provides the AnalysisService used by the command line
interface: it feeds a path to a broker and turns the registry into
summaries, validation results and snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from phpscope.broker import Broker, ProcessingReport
from phpscope.core.config import ScopeConfig
from phpscope.core.errors import BrokerError
from phpscope.core.models import ClassSummary, Snapshot
from phpscope.core.serializer import build_snapshot, serialize, summarize_class
from phpscope.core.validator import ValidationResult, validate_broker

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Result of processing a file or a directory."""

    source_path: str
    files_count: int = 0
    classes_count: int = 0
    functions_count: int = 0
    constants_count: int = 0
    conflicts_count: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """Check if every file was processed."""
        return len(self.failures) == 0


class AnalysisService:
    """Service processing PHP sources and answering questions about them."""

    def __init__(self, config: ScopeConfig | None = None) -> None:
        """Initialize analysis service.

        Args:
            config: Settings handed to the broker; the global ones when omitted.
        """
        self._broker = Broker(config)

    @property
    def broker(self) -> Broker:
        return self._broker

    def analyze(self, source_path: Path) -> AnalysisResult:
        """Process a file or a directory.

        Args:
            source_path: PHP file or directory of PHP files.

        Returns:
            AnalysisResult with counts and per-file failures.
        """
        result = AnalysisResult(source_path=str(source_path))

        if not source_path.exists():
            result.failures[str(source_path)] = f"Source path does not exist: {source_path}"
            return result

        if source_path.is_dir():
            report: ProcessingReport = self._broker.process_directory(source_path)
            result.failures.update(report.failures)
        else:
            try:
                self._broker.process_file(source_path)
            except BrokerError as exc:
                logger.warning(f"Failed to process {source_path}: {exc.message}")
                result.failures[str(source_path)] = exc.message

        snapshot = build_snapshot(self._broker)
        result.files_count = len(snapshot.files)
        result.classes_count = len(snapshot.classes)
        result.functions_count = len(snapshot.functions)
        result.constants_count = len(snapshot.constants)
        result.conflicts_count = len(snapshot.conflicts)
        return result

    def find_class(self, name: str) -> ClassSummary | None:
        """Summarize a processed class, or None when it is unknown or conflicting."""
        if not self._broker.has_class(name):
            return None
        reflection = self._broker.get_class(name)
        if not reflection.is_tokenized() or hasattr(reflection, "get_reasons"):
            return None
        return summarize_class(reflection)

    def get_class(self, name: str) -> Any:
        return self._broker.get_class(name)

    def validate(self) -> ValidationResult:
        return validate_broker(self._broker)

    def snapshot(self) -> Snapshot:
        return build_snapshot(self._broker)

    def export(self, output: Path | None = None) -> str:
        """Serialize the snapshot, writing it to ``output`` when given."""
        data = serialize(self.snapshot())
        if output is not None:
            output.write_text(data, encoding="utf-8")
        return data
