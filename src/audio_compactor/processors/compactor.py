"""Size enforcement pass: compact oversized assets in place."""

from __future__ import annotations

import copy
import time
from typing import TYPE_CHECKING

import psutil

from ..config.constants import BYTES_PER_MB
from ..core import (
    AssetProcessor,
    AssetState,
    BatchSummary,
    FileManager,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ..core import AudioAsset
    from .search import BitrateSearch


class Compactor(AssetProcessor):
    """Re-encodes every asset above the ceiling and swaps the result in atomically."""

    def __init__(
        self,
        search: BitrateSearch,
        ceiling_bytes: int,
        file_manager: FileManager | None = None,
        on_result: Callable[[ProcessingResult], None] | None = None,
        on_pending: Callable[[AudioAsset], None] | None = None,
    ) -> None:
        super().__init__("Compaction", on_result)
        self.on_pending = on_pending
        self.search = search
        self.ceiling_bytes = ceiling_bytes
        self.file_manager = file_manager or search.file_manager

    def should_process(self, asset: AudioAsset) -> bool:
        """Only assets above the ceiling need work."""
        return asset.size > self.ceiling_bytes

    def skip_result(self, asset: AudioAsset) -> ProcessingResult:
        asset.state = AssetState.OK
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.OK,
            message="OK",
            original_size=asset.size,
        )

    def compact_all(self, assets: Iterable[AudioAsset], ceiling_bytes: int | None = None) -> BatchSummary:
        """
        Classify ``assets`` against the ceiling, then compact the oversized ones.

        Assets within the ceiling are reported OK and left untouched. Every
        oversized asset ends as ``success`` or ``failed``; no failure stops the
        batch.
        """
        if ceiling_bytes is not None and ceiling_bytes != self.ceiling_bytes:
            # One-off ceiling; this instance keeps its own
            scoped = copy.copy(self)
            scoped.ceiling_bytes = ceiling_bytes
            return scoped.process_all(assets)
        return self.process_all(assets)

    def process_all(self, assets: Iterable[AudioAsset]) -> BatchSummary:
        """Report every in-ceiling asset before the first encode starts."""
        summary = BatchSummary()
        oversized = []
        for asset in assets:
            if self.should_process(asset):
                asset.state = AssetState.PENDING
                oversized.append(asset)
                self.logger.info("%s: %.2f MB (needs compression)", asset.name, asset.size / BYTES_PER_MB)
                if self.on_pending is not None:
                    self.on_pending(asset)
            else:
                summary.add(self.emit(self.skip_result(asset)))

        for asset in oversized:
            summary.add(self.emit(self.run_guarded(asset)))

        self.logger.info(
            "%s complete: %d succeeded, %d failed", self.name, summary.succeeded, summary.failed
        )
        return summary

    def process_asset(self, asset: AudioAsset) -> ProcessingResult:
        """Search for a fitting bitrate, verify the artifact, then promote it over the original."""
        start_time = time.time()
        asset.state = AssetState.COMPACTING
        self.logger.info("Compressing %s...", asset.name)

        if not self._has_room_for(asset):
            return self._failed(asset, "Insufficient free disk space for a temporary copy", start_time)

        try:
            outcome = self.search.search(asset, self.ceiling_bytes)
        except ProcessingError as e:
            return self._failed(asset, str(e), start_time)
        metadata = {"attempted_bitrates": [a.bitrate_kbps for a in outcome.attempts]}
        if not outcome.satisfied or outcome.temp_path is None:
            msg = f"Could not compress below {self.ceiling_bytes / BYTES_PER_MB:.2f} MB with any bitrate"
            return self._failed(asset, msg, start_time, metadata)

        temp_path = outcome.temp_path
        try:
            final_size = temp_path.stat().st_size
        except OSError as e:
            self.file_manager.discard(temp_path)
            return self._failed(asset, f"Compressed file disappeared: {e}", start_time, metadata)

        if final_size > self.ceiling_bytes:
            self.file_manager.discard(temp_path)
            msg = f"Compressed file is still too large: {final_size / BYTES_PER_MB:.2f} MB"
            return self._failed(asset, msg, start_time, metadata)

        original_size = asset.size
        try:
            self.file_manager.promote(temp_path, asset.path)
        except ProcessingError as e:
            self.logger.error("Failed to replace original file %s: %s", asset.name, e)
            return self._failed(asset, str(e), start_time, metadata)

        asset.refresh()
        asset.state = AssetState.COMPACTED
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.SUCCESS,
            message=f"Compressed to {final_size / BYTES_PER_MB:.2f} MB (using {outcome.bitrate_kbps}kbps)",
            output_file=asset.path,
            original_size=original_size,
            new_size=final_size,
            processing_time=time.time() - start_time,
            metadata={**metadata, "bitrate_kbps": outcome.bitrate_kbps},
        )

    def _failed(
        self,
        asset: AudioAsset,
        message: str,
        start_time: float,
        metadata: dict[str, object] | None = None,
    ) -> ProcessingResult:
        asset.state = AssetState.FAILED
        self.logger.warning("Failed to compress %s: %s", asset.name, message)
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.FAILED,
            message=message,
            original_size=asset.size,
            processing_time=time.time() - start_time,
            metadata=metadata or {},
        )

    def _has_room_for(self, asset: AudioAsset) -> bool:
        """
        Whether the asset's filesystem can hold one candidate output.

        A kept candidate is never larger than the ceiling, and a rejected one is
        removed before the next encode starts. An encode that runs out of space
        part way fails like any other attempt.
        """
        try:
            free = psutil.disk_usage(str(asset.path.parent)).free
        except OSError as e:
            self.logger.debug("Could not measure free space for %s: %s", asset.path.parent, e)
            return True
        return free >= min(asset.size, self.ceiling_bytes)
