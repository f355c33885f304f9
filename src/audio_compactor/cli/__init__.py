"""CLI module for the audio compactor."""

from .commands import BatchCommands, UtilityCommands
from .failure_table import print_failure_table
from .main import CompactorCLI

__all__ = [
    "BatchCommands",
    "CompactorCLI",
    "UtilityCommands",
    "print_failure_table",
]
