"""Failure table printed after a batch command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config.constants import BYTES_PER_MB

if TYPE_CHECKING:
    from ..core import ProcessingResult

TABLE_WIDTH = 80
NAME_COLUMN = 36
SIZE_COLUMN = 10
REASON_COLUMN = TABLE_WIDTH - NAME_COLUMN - SIZE_COLUMN - 6


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def print_failure_table(failed_results: list[ProcessingResult]) -> None:
    """
    Print the files that could not be converted or compacted.

    Nothing is printed for an empty list. Originals of the listed files are
    unchanged, so the command can simply be re-run after fixing the cause.
    """
    if not failed_results:
        return

    print("\n" + "=" * TABLE_WIDTH)
    print(f"{'FAILURES':^{TABLE_WIDTH}}")
    print("=" * TABLE_WIDTH)
    print(f"{len(failed_results)} file(s) left unchanged\n")

    print(f"{'FILE':<{NAME_COLUMN}} | {'SIZE':>{SIZE_COLUMN}} | REASON")
    print("-" * TABLE_WIDTH)

    for result in failed_results:
        size = f"{result.original_size / BYTES_PER_MB:.2f} MB" if result.original_size is not None else "?"
        print(
            f"{_clip(result.source_file.name, NAME_COLUMN):<{NAME_COLUMN}} | "
            f"{size:>{SIZE_COLUMN}} | "
            f"{_clip(result.message or 'Unknown error', REASON_COLUMN)}"
        )

    print("\n💡 TIP: Check the FFmpeg libopus encoder, free disk space, or extend bitrates_kbps in config.yaml\n")
