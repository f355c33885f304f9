"""Descending bitrate search for a size ceiling."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..config.constants import BYTES_PER_MB
from ..core import FileManager, ProcessingError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ..core import AudioAsset, EncodeAttempt, FFmpegEncoder

LOG = logging.getLogger(__name__)


class SearchStatus(Enum):
    """Terminal state of a bitrate search."""

    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"


@dataclass
class SearchOutcome:
    """Result of searching one asset; ``temp_path`` holds the winning artifact when satisfied."""

    status: SearchStatus
    bitrate_kbps: int | None = None
    final_size: int | None = None
    temp_path: Path | None = None
    attempts: list[EncodeAttempt] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return self.status is SearchStatus.SATISFIED


class BitrateSearch:
    """
    Greedy first-fit search over a fixed descending bitrate sequence.

    Candidates are tried highest quality first and the first one whose output
    fits under the ceiling wins. Encoding is expensive and the candidate list
    is short, so no bisection is attempted; size is assumed to shrink as the
    bitrate drops, and a warning is logged when an attempt contradicts that.
    """

    def __init__(
        self,
        encoder: FFmpegEncoder,
        bitrates_kbps: Sequence[int],
        temp_suffix: str,
        file_manager: FileManager | None = None,
    ) -> None:
        if not bitrates_kbps:
            msg = "At least one candidate bitrate is required"
            raise ValueError(msg)
        self.encoder = encoder
        self.bitrates_kbps = tuple(bitrates_kbps)
        self.temp_suffix = temp_suffix
        self.file_manager = file_manager or FileManager()

    def search(self, asset: AudioAsset, ceiling_bytes: int) -> SearchOutcome:
        """
        Find the highest candidate bitrate whose output is at most ``ceiling_bytes``.

        On success the encoded artifact is left at ``outcome.temp_path`` for
        the caller to promote. When every candidate is exhausted, or anything
        escapes the loop, no temporary artifact remains on disk.

        Raises:
            ProcessingError: If the temp suffix maps the scratch path onto the
                asset itself; nothing is touched on disk in that case.
        """
        temp_path = asset.temp_path(self.temp_suffix)
        if temp_path == asset.path:
            msg = f"Scratch path for {asset.name} is the file itself (temp suffix {self.temp_suffix!r})"
            raise ProcessingError(msg, file_path=asset.path)
        attempts: list[EncodeAttempt] = []

        with self.file_manager.scratch(temp_path) as scratch:
            for bitrate in self.bitrates_kbps:
                attempt = self.encoder.encode(asset.path, temp_path, bitrate)
                attempts.append(attempt)

                if not attempt.success or attempt.size is None:
                    LOG.warning("    Error at %dkbps: %s", bitrate, attempt.message or "encoding failed")
                    self.file_manager.discard(temp_path)
                    continue

                LOG.info("    Tried %dkbps: %.2f MB", bitrate, attempt.size / BYTES_PER_MB)
                self._check_monotonic(asset, attempts)

                if attempt.size <= ceiling_bytes:
                    scratch.keep()
                    return SearchOutcome(
                        status=SearchStatus.SATISFIED,
                        bitrate_kbps=bitrate,
                        final_size=attempt.size,
                        temp_path=temp_path,
                        attempts=attempts,
                    )

                # Still too large, try the next lower bitrate
                self.file_manager.discard(temp_path)

        LOG.warning(
            "Could not compress %s below %.2f MB with any bitrate", asset.name, ceiling_bytes / BYTES_PER_MB
        )
        return SearchOutcome(status=SearchStatus.EXHAUSTED, attempts=attempts)

    def _check_monotonic(self, asset: AudioAsset, attempts: list[EncodeAttempt]) -> None:
        sized = [a for a in attempts if a.success and a.size is not None]
        if len(sized) < 2:  # noqa: PLR2004
            return
        previous, current = sized[-2], sized[-1]
        if current.size > previous.size:  # type: ignore[operator]
            LOG.warning(
                "Non-monotonic output for %s: %dkbps gave %d bytes, %dkbps gave %d bytes",
                asset.name,
                previous.bitrate_kbps,
                previous.size,
                current.bitrate_kbps,
                current.size,
            )
