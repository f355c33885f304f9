"""Base classes and interfaces for asset processing."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .assets import AssetState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from .assets import AudioAsset


class ProcessingStatus(Enum):
    """Status of a processing operation."""

    SUCCESS = "success"
    OK = "ok"  # Already satisfies the size ceiling, left untouched
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ProcessingResult:
    """Result of processing one asset."""

    source_file: Path
    status: ProcessingStatus
    message: str = ""
    output_file: Path | None = None
    original_size: int | None = None
    new_size: int | None = None
    processing_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class BatchSummary:
    """Per-asset outcomes of one orchestrator pass."""

    results: list[ProcessingResult] = field(default_factory=list)

    def add(self, result: ProcessingResult) -> None:
        self.results.append(result)

    def with_status(self, status: ProcessingStatus) -> list[ProcessingResult]:
        return [r for r in self.results if r.status is status]

    @property
    def succeeded(self) -> int:
        return len(self.with_status(ProcessingStatus.SUCCESS))

    @property
    def failed(self) -> int:
        return len(self.with_status(ProcessingStatus.FAILED))

    @property
    def failures(self) -> list[ProcessingResult]:
        return self.with_status(ProcessingStatus.FAILED)

    @property
    def attempted(self) -> int:
        """Assets that needed work; OK and skipped assets are not counted."""
        return self.succeeded + self.failed


class ProcessingError(Exception):
    """Base exception for asset processing errors."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.cause = cause


class AssetProcessor(ABC):
    """Abstract base class for the orchestrator passes."""

    def __init__(self, name: str, on_result: Callable[[ProcessingResult], None] | None = None) -> None:
        self.name = name
        self.on_result = on_result
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    def should_process(self, asset: AudioAsset) -> bool:
        """Check if the asset needs work in this pass."""

    @abstractmethod
    def process_asset(self, asset: AudioAsset) -> ProcessingResult:
        """Process a single asset."""

    @abstractmethod
    def skip_result(self, asset: AudioAsset) -> ProcessingResult:
        """Result reported for an asset that needs no work."""

    def emit(self, result: ProcessingResult) -> ProcessingResult:
        """Hand a result to the progress callback, if any."""
        if self.on_result is not None:
            self.on_result(result)
        return result

    def process_all(self, assets: Iterable[AudioAsset]) -> BatchSummary:
        """Process every asset one at a time; per-asset errors never abort the pass."""
        summary = BatchSummary()

        for asset in assets:
            if not self.should_process(asset):
                summary.add(self.emit(self.skip_result(asset)))
                continue
            summary.add(self.emit(self.run_guarded(asset)))

        self.logger.info(
            "%s complete: %d succeeded, %d failed", self.name, summary.succeeded, summary.failed
        )
        return summary

    def run_guarded(self, asset: AudioAsset) -> ProcessingResult:
        """Run :meth:`process_asset`, folding unexpected errors into a failed result."""
        start_time = time.time()
        try:
            return self.process_asset(asset)
        except Exception as e:
            self.logger.exception("Error processing %s", asset.path)
            asset.state = AssetState.FAILED
            return ProcessingResult(
                source_file=asset.path,
                status=ProcessingStatus.FAILED,
                message=f"Unexpected error: {e}",
                original_size=asset.size,
                processing_time=time.time() - start_time,
                metadata={"error": str(e)},
            )
