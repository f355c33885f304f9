"""Audio Compactor - keep a directory of WebM/Opus audio under a size ceiling."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Batch conversion and size-capped re-encoding of audio files"

# Public API exports
from .config import CompactorConfig, load_config
from .core import (
    AssetState,
    AudioAsset,
    BatchSummary,
    EncodeAttempt,
    FFmpegEncoder,
    FFmpegError,
    FileManager,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
    scan_directory,
)
from .processors import BatchDriver, BatchReport, BitrateSearch, Compactor, Converter, SearchOutcome, SearchStatus

__all__ = [
    # Configuration
    "CompactorConfig",
    "load_config",
    # Core functionality
    "AudioAsset",
    "FFmpegEncoder",
    "FileManager",
    "scan_directory",
    # Pipeline
    "BatchDriver",
    "BitrateSearch",
    "Compactor",
    "Converter",
    # Enums and data classes
    "AssetState",
    "BatchReport",
    "BatchSummary",
    "EncodeAttempt",
    "ProcessingResult",
    "ProcessingStatus",
    "SearchOutcome",
    "SearchStatus",
    # Exceptions
    "FFmpegError",
    "ProcessingError",
]
