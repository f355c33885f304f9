"""
System constants that should never change.

These are technical/system limits, not user preferences.
User-configurable values should go in config.yaml instead.
"""

BYTES_PER_MB = 1024 * 1024
VERBOSE_LOGGING_THRESHOLD = 2  # Standard logging level

# Defaults mirrored by config.yaml
DEFAULT_MAX_SIZE_MB = 25
DEFAULT_BITRATES_KBPS = (64, 56, 48, 40, 32, 24)  # Highest quality first
DEFAULT_CONVERSION_BITRATE_KBPS = 64
DEFAULT_TARGET_EXTENSION = ".webm"
DEFAULT_SOURCE_EXTENSIONS = (".wma",)
DEFAULT_TEMP_SUFFIX = ".tmp"

# Display limits
STDERR_TAIL_LINES = 5  # ffmpeg stderr lines kept in failure messages
