"""Temporary artifact handling and atomic promotion."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .base import ProcessingError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

LOG = logging.getLogger(__name__)


@dataclass
class FileOperation:
    """Represents a promotion of a temporary artifact onto its target path."""

    operation_type: str
    source_path: Path
    target_path: Path | None = None
    success: bool = False
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp == 0.0:
            self.timestamp = time.time()


class ScratchFile:
    """Handle for a temporary artifact that is removed unless kept."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.kept = False

    def keep(self) -> Path:
        """Leave the artifact on disk when the scope exits."""
        self.kept = True
        return self.path


class FileManager:
    """File manager with atomic promotion and guaranteed scratch cleanup."""

    def __init__(self) -> None:
        """Initialize an empty session."""
        self.session_operations: list[FileOperation] = []

    def discard(self, path: Path) -> bool:
        """Remove a temporary artifact if present; returns whether something was removed."""
        try:
            if path.exists():
                path.unlink()
                LOG.debug("Removed temporary artifact: %s", path)
                return True
        except OSError as e:
            LOG.warning("Failed to remove temporary artifact %s: %s", path, e)
        return False

    @contextmanager
    def scratch(self, path: Path) -> Iterator[ScratchFile]:
        """
        Scope a temporary artifact.

        A leftover from an interrupted run is removed on entry. On exit the
        artifact is removed again unless :meth:`ScratchFile.keep` was called,
        whichever way the block is left.
        """
        if self.discard(path):
            LOG.info("Removed stale temporary artifact: %s", path)

        handle = ScratchFile(path)
        try:
            yield handle
        finally:
            if not handle.kept:
                self.discard(path)

    def promote(self, temp_path: Path, target_path: Path) -> FileOperation:
        """
        Atomically rename ``temp_path`` over ``target_path``.

        Both paths must live in the same directory. On failure the temporary
        artifact is removed, the target is left as it was, and
        :class:`ProcessingError` is raised.
        """
        try:
            temp_path.replace(target_path)
        except OSError as e:
            self.discard(temp_path)
            self.session_operations.append(
                FileOperation(operation_type="promote", source_path=temp_path, target_path=target_path)
            )
            msg = f"Failed to replace {target_path.name}: {e}"
            raise ProcessingError(msg, file_path=target_path, cause=e) from e

        operation = FileOperation(
            operation_type="promote",
            source_path=temp_path,
            target_path=target_path,
            success=True,
        )
        self.session_operations.append(operation)
        LOG.debug("Atomically replaced %s -> %s", temp_path, target_path)
        return operation

    def get_session_summary(self) -> dict[str, Any]:
        """Get summary of file operations in this session."""
        successful_ops = [op for op in self.session_operations if op.success]
        failed_ops = [op for op in self.session_operations if not op.success]

        return {
            "total_operations": len(self.session_operations),
            "successful_operations": len(successful_ops),
            "failed_operations": len(failed_ops),
            "operations": self.session_operations,
        }


def find_stale_artifacts(directory: Path, temp_suffix: str) -> list[Path]:
    """Temporary artifacts left behind in ``directory`` by interrupted runs."""
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.name.endswith(temp_suffix))
    except OSError as e:
        LOG.error("Error reading directory %s: %s", directory, e)
        return []
