"""Directory scanning for audio assets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .assets import AudioAsset

if TYPE_CHECKING:
    from collections.abc import Iterable

LOG = logging.getLogger(__name__)


def scan_directory(directory: Path, extensions: Iterable[str]) -> list[AudioAsset]:
    """
    List the audio files directly inside ``directory``.

    Only regular files whose suffix matches one of ``extensions``
    (case-insensitive) are returned; subdirectories are not descended into.
    An unreadable directory is logged and yields an empty list.

    Args:
        directory: Directory to scan
        extensions: Suffixes to accept, e.g. ``[".webm"]``

    Returns:
        Assets in directory-listing order

    """
    wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    directory = Path(directory).absolute()
    LOG.info("Scanning directory: %s (extensions: %s)", directory, ", ".join(sorted(wanted)))

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        LOG.error("Error reading directory %s: %s", directory, e)
        return []

    assets = []
    for entry in entries:
        if entry.suffix.lower() not in wanted:
            continue
        try:
            if not entry.is_file():
                continue
            assets.append(AudioAsset.from_path(entry))
        except OSError as e:
            # Removed or unreadable between listing and stat
            LOG.warning("Skipping %s: %s", entry.name, e)

    LOG.info("Found %d matching files in %s", len(assets), directory)
    return assets
