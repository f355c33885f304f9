"""Search engine and orchestrator passes built on the core layer."""

from .compactor import Compactor
from .converter import Converter
from .driver import BatchDriver, BatchReport
from .search import BitrateSearch, SearchOutcome, SearchStatus

__all__ = [
    "BatchDriver",
    "BatchReport",
    "BitrateSearch",
    "Compactor",
    "Converter",
    "SearchOutcome",
    "SearchStatus",
]
