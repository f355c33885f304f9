from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from audio_compactor.config import CompactorConfig
from audio_compactor.core import EncodeAttempt

KB = 1024
CEILING = 25 * KB
# 25 KiB expressed in MiB, exact in binary floating point
CEILING_MB = 25 / 1024


class FakeEncoder:
    """Deterministic stand-in for ffmpeg that writes artifacts of a chosen size."""

    def __init__(self, size_for: Callable[[Path, int], int | None], *, leave_partial: bool = False) -> None:
        self.size_for = size_for
        self.leave_partial = leave_partial
        self.calls: list[tuple[str, int, bool]] = []

    def check_availability(self) -> None:
        pass

    def encode(self, input_path: Path, output_path: Path, bitrate_kbps: int) -> EncodeAttempt:
        self.calls.append((input_path.name, bitrate_kbps, output_path.exists()))
        size = self.size_for(input_path, bitrate_kbps)

        if size is None:
            if self.leave_partial:
                output_path.write_bytes(b"partial")
            return EncodeAttempt(
                input_path=input_path,
                output_path=output_path,
                bitrate_kbps=bitrate_kbps,
                success=False,
                message="fake encoder failure",
            )

        output_path.write_bytes(b"\x00" * size)
        return EncodeAttempt(
            input_path=input_path,
            output_path=output_path,
            bitrate_kbps=bitrate_kbps,
            success=True,
            size=size,
        )

    @property
    def bitrates(self) -> list[int]:
        return [bitrate for _, bitrate, _ in self.calls]


def sizes_by_bitrate(sizes: dict[int, int], default: int | None = None) -> Callable[[Path, int], int | None]:
    """Size function ignoring the input file."""
    return lambda _path, bitrate: sizes.get(bitrate, default)


def sizes_by_file(table: dict[str, dict[int, int]], default: int | None = None) -> Callable[[Path, int], int | None]:
    """Size function keyed by input file name, then bitrate."""
    return lambda path, bitrate: table.get(path.name, {}).get(bitrate, default)


@pytest.fixture
def make_file(tmp_path):
    """Create a file of ``size`` bytes with recognisable content."""

    def _make(name: str, size: int) -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path

    return _make


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at the test directory with a 25 KiB ceiling."""
    return CompactorConfig(directory=tmp_path, max_size_mb=CEILING_MB, show_progress=False)
