"""Audio assets tracked through scan, conversion and compaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class AssetState(Enum):
    """Lifecycle state of an asset within one run."""

    DISCOVERED = "discovered"
    PENDING = "pending"
    CONVERTING = "converting"
    COMPACTING = "compacting"
    COMPACTED = "compacted"
    FAILED = "failed"
    OK = "ok"


@dataclass
class AudioAsset:
    """One audio file on disk."""

    path: Path
    size: int
    extension: str = ""
    state: AssetState = AssetState.DISCOVERED
    name: str = field(init=False)

    def __post_init__(self) -> None:
        """Derive extension and display name from the path."""
        if not self.extension:
            self.extension = self.path.suffix.lower()
        self.name = self.path.name

    @classmethod
    def from_path(cls, path: Path) -> AudioAsset:
        """Create an asset from an existing file, reading its size from disk."""
        return cls(path=path, size=path.stat().st_size)

    def refresh(self) -> int:
        """Re-read the size from disk."""
        self.size = self.path.stat().st_size
        return self.size

    def temp_path(self, suffix: str) -> Path:
        """Scratch path next to the asset, so promotion is a same-filesystem rename."""
        return self.path.with_name(self.path.name + suffix)
