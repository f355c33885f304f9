"""Top-level batch sequencing: scan, convert, compact, summarize."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

from tqdm import tqdm

from ..config.constants import BYTES_PER_MB
from ..core import BatchSummary, FFmpegEncoder, FileManager, ProcessingResult, ProcessingStatus, scan_directory
from .compactor import Compactor
from .converter import Converter
from .search import BitrateSearch

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from ..config import CompactorConfig
    from ..core import AudioAsset

LOG = logging.getLogger(__name__)

STATUS_MARKS = {
    ProcessingStatus.SUCCESS: "✓",
    ProcessingStatus.OK: "✓",
    ProcessingStatus.SKIPPED: "⏭",
    ProcessingStatus.FAILED: "✗",
}


@dataclass
class BatchReport:
    """Summaries of one driver run."""

    compaction: BatchSummary = field(default_factory=BatchSummary)
    conversion: BatchSummary | None = None

    @property
    def failures(self) -> list[ProcessingResult]:
        failed = self.compaction.failures
        if self.conversion is not None:
            failed = self.conversion.failures + failed
        return failed

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0


class BatchDriver:
    """
    Runs the conversion and compaction passes over one directory.

    All settings come from the ``config`` passed in, so independent drivers
    can work on different directories and ceilings side by side.
    """

    def __init__(
        self,
        config: CompactorConfig,
        encoder: FFmpegEncoder | None = None,
        file_manager: FileManager | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.config = config
        self.encoder = encoder or FFmpegEncoder(config.encoder)
        self.file_manager = file_manager or FileManager()
        self.out = out

    @property
    def directory(self) -> Path:
        return self.config.directory

    def echo(self, message: str = "") -> None:
        """Write a progress line without tearing an active progress bar."""
        tqdm.write(message, file=self.out or sys.stdout)

    def run(self, *, convert: bool | None = None) -> BatchReport:
        """Convert legacy sources (when enabled), then enforce the size ceiling."""
        if convert is None:
            convert = self.config.conversion.enabled

        report = BatchReport()
        if convert:
            report.conversion = self.convert()
            self.echo()
        report.compaction = self.compact()

        operations = self.file_manager.get_session_summary()
        LOG.debug(
            "File operations: %d promoted, %d failed",
            operations["successful_operations"],
            operations["failed_operations"],
        )
        return report

    def convert(self) -> BatchSummary:
        """Conversion pass over the source-format files in the directory."""
        source_extensions = self.config.conversion.source_extensions
        label = "/".join(source_extensions)
        self.echo(f"Looking for {label} files in {self.directory}...\n")

        assets = scan_directory(self.directory, source_extensions)
        if not assets:
            self.echo(f"No {label} files found.")
            return BatchSummary()

        self.echo(f"Found {len(assets)} {label} file(s)\n")
        converter = Converter(
            encoder=self.encoder,
            bitrate_kbps=self.config.conversion.bitrate_kbps,
            target_extension=self.config.target_extension,
            temp_suffix=self.config.temp_suffix,
            ceiling_bytes=self.config.ceiling_bytes,
            file_manager=self.file_manager,
        )

        with self._progress(len(assets), "Converting") as on_result:
            converter.on_result = on_result
            summary = converter.convert_all(assets)

        self.echo("\n--- Conversion complete ---")
        self.echo(f"Successfully converted: {summary.succeeded}")
        self.echo(f"Failed: {summary.failed}")
        return summary

    def compact(self) -> BatchSummary:
        """Compaction pass over the target-format files in the directory."""
        ext = self.config.target_extension
        self.echo(
            f"Checking for {ext} files larger than {self.config.max_size_mb:g} MB in {self.directory}...\n"
        )

        assets = scan_directory(self.directory, [ext])
        summary = BatchSummary()
        if not assets:
            self.echo(f"No {ext} files found.")
        else:
            self.echo(f"Found {len(assets)} {ext} file(s)\n")
            summary = self._compact_assets(assets)

        self.echo("\n--- Compression complete ---")
        self.echo(f"Successfully compressed: {summary.succeeded}")
        self.echo(f"Failed: {summary.failed}")
        return summary

    def _compact_assets(self, assets: list[AudioAsset]) -> BatchSummary:
        search = BitrateSearch(
            encoder=self.encoder,
            bitrates_kbps=self.config.bitrates_kbps,
            temp_suffix=self.config.temp_suffix,
            file_manager=self.file_manager,
        )
        ceiling = self.config.ceiling_bytes
        oversized = [a for a in assets if a.size > ceiling]

        compactor = Compactor(
            search=search,
            ceiling_bytes=ceiling,
            file_manager=self.file_manager,
            on_result=self._print_result,
            on_pending=lambda a: self.echo(f"⚠ {a.name}: {a.size / BYTES_PER_MB:.2f} MB (needs compression)"),
        )

        if not oversized:
            summary = compactor.compact_all(assets)
            self.echo("\nAll files are already under the size limit!")
            return summary

        # The bar only tracks files that need encoding
        with self._progress(len(oversized), "Compressing") as on_result:

            def report(result: ProcessingResult) -> None:
                if result.status is ProcessingStatus.OK:
                    self._print_result(result)
                else:
                    on_result(result)

            compactor.on_result = report
            return compactor.compact_all(assets)

    @contextmanager
    def _progress(self, total: int, desc: str) -> Iterator[Callable[[ProcessingResult], None]]:
        progress_bar = tqdm(
            total=total,
            desc=desc,
            unit="file",
            disable=not self.config.show_progress,
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
        )

        def on_result(result: ProcessingResult) -> None:
            self._print_result(result)
            progress_bar.set_description(f"{STATUS_MARKS[result.status]} {result.source_file.name}")
            progress_bar.update(1)

        try:
            yield on_result
        finally:
            progress_bar.close()

    def _print_result(self, result: ProcessingResult) -> None:
        mark = STATUS_MARKS[result.status]
        name = result.source_file.name
        if result.status is ProcessingStatus.OK:
            self.echo(f"{mark} {name}: {(result.original_size or 0) / BYTES_PER_MB:.2f} MB (OK)")
        else:
            self.echo(f"  {mark} {name}: {result.message}")
