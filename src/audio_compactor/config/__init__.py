"""Configuration management for the audio compactor."""

from __future__ import annotations

from .constants import *  # noqa: F403, F401
from .settings import CompactorConfig, ConversionConfig, EncoderConfig, GlobalConfig, load_config

__all__ = [
    "CompactorConfig",
    "ConversionConfig",
    "EncoderConfig",
    "GlobalConfig",
    "load_config",
]
