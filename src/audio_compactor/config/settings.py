"""Configuration management for the audio compactor."""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    BYTES_PER_MB,
    DEFAULT_BITRATES_KBPS,
    DEFAULT_CONVERSION_BITRATE_KBPS,
    DEFAULT_MAX_SIZE_MB,
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_TARGET_EXTENSION,
    DEFAULT_TEMP_SUFFIX,
)

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"


@dataclass
class EncoderConfig:
    """ffmpeg invocation settings."""

    executable: str = "ffmpeg"
    codec: str = "libopus"
    vbr: str = "on"
    compression_level: int = 10
    container: str = "webm"
    timeout: float | None = None  # None waits for the encoder indefinitely


@dataclass
class ConversionConfig:
    """Legacy format conversion settings."""

    enabled: bool = True
    source_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    bitrate_kbps: int = DEFAULT_CONVERSION_BITRATE_KBPS


@dataclass
class GlobalConfig:
    """Global settings."""

    log_level: str = "WARNING"


@dataclass
class CompactorConfig:
    """Main configuration class."""

    directory: Path = field(default_factory=lambda: Path("static") / "audio")
    max_size_mb: float = DEFAULT_MAX_SIZE_MB
    bitrates_kbps: list[int] = field(default_factory=lambda: list(DEFAULT_BITRATES_KBPS))
    target_extension: str = DEFAULT_TARGET_EXTENSION
    temp_suffix: str = DEFAULT_TEMP_SUFFIX
    show_progress: bool = True
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    @property
    def ceiling_bytes(self) -> int:
        """Maximum acceptable size of a compacted file in bytes."""
        return int(self.max_size_mb * BYTES_PER_MB)

    def with_overrides(self, **overrides: Any) -> CompactorConfig:
        """Return a copy with the given top-level fields replaced; ``None`` values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "directory" in changes:
            changes["directory"] = Path(changes["directory"])
        if "max_size_mb" in changes:
            changes["max_size_mb"] = self._parse_max_size(changes["max_size_mb"])
        if "temp_suffix" in changes:
            scanned = [changes.get("target_extension", self.target_extension), *self.conversion.source_extensions]
            changes["temp_suffix"] = self._parse_temp_suffix(changes["temp_suffix"], scanned)
        return dataclasses.replace(self, **changes)

    @classmethod
    def load_from_file(cls, config_path: Path) -> CompactorConfig:
        """Load configuration from YAML file."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

            return cls._from_dict(data or {})
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load config from %s: %s", config_path, e)
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> CompactorConfig:
        """Create config from dictionary."""
        compactor_data = data.get("compactor", {}) or {}
        target_extension = _normalize_extension(compactor_data.get("target_extension", DEFAULT_TARGET_EXTENSION))
        conversion = cls._parse_conversion_config(data.get("conversion", {}) or {})

        return cls(
            directory=Path(compactor_data.get("directory", Path("static") / "audio")),
            max_size_mb=cls._parse_max_size(compactor_data.get("max_size_mb", DEFAULT_MAX_SIZE_MB)),
            bitrates_kbps=cls._parse_bitrates(compactor_data.get("bitrates_kbps")),
            target_extension=target_extension,
            temp_suffix=cls._parse_temp_suffix(
                compactor_data.get("temp_suffix", DEFAULT_TEMP_SUFFIX),
                [target_extension, *conversion.source_extensions],
            ),
            show_progress=bool(compactor_data.get("show_progress", True)),
            conversion=conversion,
            encoder=cls._parse_encoder_config(data.get("encoder", {}) or {}),
            global_=GlobalConfig(log_level=(data.get("global", {}) or {}).get("log_level", "WARNING")),
        )

    @classmethod
    def _parse_max_size(cls, value: object) -> float:
        """Parse the size ceiling, falling back to the default on bad input."""
        try:
            max_size = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            LOG.warning("Invalid max_size_mb %r. Using %s", value, DEFAULT_MAX_SIZE_MB)
            return DEFAULT_MAX_SIZE_MB

        if not math.isfinite(max_size) or max_size <= 0:
            LOG.warning("max_size_mb must be positive, got %s. Using %s", max_size, DEFAULT_MAX_SIZE_MB)
            return DEFAULT_MAX_SIZE_MB
        return max_size

    @classmethod
    def _parse_temp_suffix(cls, value: object, scanned_extensions: list[str]) -> str:
        """
        Parse the scratch suffix appended to file names.

        An empty suffix would make the scratch path the file itself, and one
        ending in a scanned extension would make scratch files look like
        assets; both fall back to the default.
        """
        suffix = "" if value is None else str(value)
        if not suffix:
            LOG.warning("temp_suffix must not be empty. Using %s", DEFAULT_TEMP_SUFFIX)
            return DEFAULT_TEMP_SUFFIX

        if any(suffix.lower().endswith(ext.lower()) for ext in scanned_extensions):
            LOG.warning(
                "temp_suffix %r ends with a scanned extension (%s). Using %s",
                suffix,
                ", ".join(scanned_extensions),
                DEFAULT_TEMP_SUFFIX,
            )
            return DEFAULT_TEMP_SUFFIX
        return suffix

    @classmethod
    def _parse_bitrates(cls, value: object) -> list[int]:
        """Parse the candidate bitrates; they must be positive and strictly descending."""
        if value is None:
            return list(DEFAULT_BITRATES_KBPS)

        try:
            bitrates = [int(b) for b in value]  # type: ignore[union-attr]
        except (TypeError, ValueError):
            LOG.warning("Invalid bitrates_kbps %r. Using defaults", value)
            return list(DEFAULT_BITRATES_KBPS)

        descending = all(a > b for a, b in zip(bitrates, bitrates[1:]))
        if not bitrates or not descending or bitrates[-1] <= 0:
            LOG.warning(
                "bitrates_kbps must be strictly descending positive integers, got %s. Using %s",
                bitrates,
                list(DEFAULT_BITRATES_KBPS),
            )
            return list(DEFAULT_BITRATES_KBPS)
        return bitrates

    @classmethod
    def _parse_conversion_config(cls, conversion_data: dict[str, Any]) -> ConversionConfig:
        """Parse conversion configuration."""
        bitrate = conversion_data.get("bitrate_kbps", DEFAULT_CONVERSION_BITRATE_KBPS)
        if not isinstance(bitrate, int) or bitrate <= 0:
            LOG.warning("Invalid conversion bitrate %r. Using %d", bitrate, DEFAULT_CONVERSION_BITRATE_KBPS)
            bitrate = DEFAULT_CONVERSION_BITRATE_KBPS

        return ConversionConfig(
            enabled=bool(conversion_data.get("enabled", True)),
            source_extensions=[
                _normalize_extension(ext)
                for ext in conversion_data.get("source_extensions", list(DEFAULT_SOURCE_EXTENSIONS))
            ],
            bitrate_kbps=bitrate,
        )

    @classmethod
    def _parse_encoder_config(cls, encoder_data: dict[str, Any]) -> EncoderConfig:
        """Parse encoder configuration."""
        defaults = EncoderConfig()
        timeout = encoder_data.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                LOG.warning("Invalid encoder timeout %r. Waiting indefinitely", timeout)
                timeout = None

        # YAML 1.1 reads a bare `on` as a boolean
        vbr = encoder_data.get("vbr", defaults.vbr)
        if isinstance(vbr, bool):
            vbr = "on" if vbr else "off"

        return EncoderConfig(
            executable=encoder_data.get("executable", defaults.executable),
            codec=encoder_data.get("codec", defaults.codec),
            vbr=str(vbr),
            compression_level=int(encoder_data.get("compression_level", defaults.compression_level)),
            container=encoder_data.get("container", defaults.container),
            timeout=timeout,
        )


def _normalize_extension(extension: str) -> str:
    ext = str(extension).lower()
    return ext if ext.startswith(".") else f".{ext}"


def load_config(config_path: Path | None = None) -> CompactorConfig:
    """
    Load configuration from ``config_path``.

    Without a path, ``config.yaml`` in the working directory is used when it
    exists; otherwise the built-in defaults apply.
    """
    if config_path is None:
        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not default_path.exists():
            return CompactorConfig()
        config_path = default_path
    return CompactorConfig.load_from_file(config_path)
