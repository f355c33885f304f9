"""CLI command modules."""

from .batch import BatchCommands
from .utils import UtilityCommands

__all__ = ["BatchCommands", "UtilityCommands"]
