"""Core abstractions and utilities for the audio compactor."""

from .assets import AssetState, AudioAsset
from .base import AssetProcessor, BatchSummary, ProcessingError, ProcessingResult, ProcessingStatus
from .ffmpeg import EncodeAttempt, FFmpegEncoder, FFmpegError
from .file_manager import FileManager, FileOperation, ScratchFile, find_stale_artifacts
from .scanner import scan_directory

__all__ = [
    "AssetProcessor",
    "AssetState",
    "AudioAsset",
    "BatchSummary",
    "EncodeAttempt",
    "FFmpegEncoder",
    "FFmpegError",
    "FileManager",
    "FileOperation",
    "ProcessingError",
    "ProcessingResult",
    "ProcessingStatus",
    "ScratchFile",
    "find_stale_artifacts",
    "scan_directory",
]
