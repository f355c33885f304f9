"""Format conversion pass: legacy sources to the target container."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from ..config.constants import BYTES_PER_MB
from ..core import (
    AssetProcessor,
    AssetState,
    FileManager,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from ..core import AudioAsset, BatchSummary, FFmpegEncoder


class Converter(AssetProcessor):
    """Encodes each source file once at a fixed bitrate next to the original."""

    def __init__(
        self,
        encoder: FFmpegEncoder,
        bitrate_kbps: int,
        target_extension: str,
        temp_suffix: str,
        ceiling_bytes: int,
        file_manager: FileManager | None = None,
        on_result: Callable[[ProcessingResult], None] | None = None,
    ) -> None:
        super().__init__("Conversion", on_result)
        self.encoder = encoder
        self.bitrate_kbps = bitrate_kbps
        self.target_extension = target_extension
        self.temp_suffix = temp_suffix
        self.ceiling_bytes = ceiling_bytes
        self.file_manager = file_manager or FileManager()

    def target_path(self, asset: AudioAsset) -> Path:
        return asset.path.with_suffix(self.target_extension)

    def should_process(self, asset: AudioAsset) -> bool:
        """Existing targets are never overwritten."""
        return not self.target_path(asset).exists()

    def skip_result(self, asset: AudioAsset) -> ProcessingResult:
        asset.state = AssetState.OK
        target = self.target_path(asset)
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.SKIPPED,
            message=f"{target.name} already exists",
            output_file=target,
            original_size=asset.size,
        )

    def convert_all(self, source_assets: Iterable[AudioAsset]) -> BatchSummary:
        """Convert every source asset; failures are reported per file and never stop the batch."""
        return self.process_all(source_assets)

    def process_asset(self, asset: AudioAsset) -> ProcessingResult:
        """Encode one source file and promote the result onto the target path."""
        start_time = time.time()
        asset.state = AssetState.CONVERTING
        target = self.target_path(asset)
        temp_path = target.with_name(target.name + self.temp_suffix)
        try:
            self._check_scratch_path(asset, temp_path, target)
        except ProcessingError as e:
            return self._failed(asset, str(e), start_time)
        self.logger.info("Converting %s...", asset.name)

        with self.file_manager.scratch(temp_path):
            attempt = self.encoder.encode(asset.path, temp_path, self.bitrate_kbps)
            if not attempt.success or attempt.size is None:
                return self._failed(asset, attempt.message or "Encoding failed", start_time)

            try:
                self.file_manager.promote(temp_path, target)
            except ProcessingError as e:
                return self._failed(asset, str(e), start_time)

        size_mb = attempt.size / BYTES_PER_MB
        oversized = attempt.size > self.ceiling_bytes
        if oversized:
            self.logger.warning(
                "%s converted but is %.2f MB (above %.2f MB target)",
                asset.name,
                size_mb,
                self.ceiling_bytes / BYTES_PER_MB,
            )
            message = f"Converted but is {size_mb:.2f} MB (above {self.ceiling_bytes / BYTES_PER_MB:.2f} MB target)"
        else:
            message = f"Converted to {target.name} ({size_mb:.2f} MB)"

        asset.state = AssetState.OK
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.SUCCESS,
            message=message,
            output_file=target,
            original_size=asset.size,
            new_size=attempt.size,
            processing_time=time.time() - start_time,
            metadata={"bitrate_kbps": self.bitrate_kbps, "oversized": oversized},
        )

    def _check_scratch_path(self, asset: AudioAsset, temp_path: Path, target: Path) -> None:
        if temp_path in (asset.path, target):
            msg = f"Scratch path {temp_path.name} collides with a real file (temp suffix {self.temp_suffix!r})"
            raise ProcessingError(msg, file_path=asset.path)

    def _failed(self, asset: AudioAsset, message: str, start_time: float) -> ProcessingResult:
        asset.state = AssetState.FAILED
        self.logger.error("Failed to convert %s: %s", asset.name, message)
        return ProcessingResult(
            source_file=asset.path,
            status=ProcessingStatus.FAILED,
            message=message,
            original_size=asset.size,
            processing_time=time.time() - start_time,
        )
