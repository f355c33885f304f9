"""FFmpeg integration: the encoder adapter."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config.constants import STDERR_TAIL_LINES
from .base import ProcessingError

if TYPE_CHECKING:
    from pathlib import Path

    from ..config import EncoderConfig

LOG = logging.getLogger(__name__)


class FFmpegError(ProcessingError):
    """FFmpeg-specific error."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        file_path: Path | None = None,
    ) -> None:
        """Initialize FFmpeg error with detailed context."""
        super().__init__(message, file_path=file_path)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


@dataclass(frozen=True)
class EncodeAttempt:
    """Result of a single encoder invocation."""

    input_path: Path
    output_path: Path
    bitrate_kbps: int
    success: bool
    size: int | None = None
    message: str = ""
    elapsed: float = 0.0


class FFmpegEncoder:
    """Runs ffmpeg to transcode one file at one bitrate."""

    def __init__(self, config: EncoderConfig) -> None:
        """Initialize the encoder from its configuration."""
        self.config = config

    def check_availability(self) -> None:
        """Raise :class:`FFmpegError` if the ffmpeg executable is not on PATH."""
        if not shutil.which(self.config.executable):
            error_msg = f"Missing FFmpeg executable: {self.config.executable}"
            LOG.error(error_msg)
            raise FFmpegError(error_msg)

    def build_audio_command(self, input_file: Path, output_file: Path, bitrate_kbps: int) -> list[str]:
        """Build an audio-only transcode command; video streams are dropped."""
        return [
            self.config.executable,
            "-y",
            "-i",
            str(input_file),
            "-c:a",
            self.config.codec,
            "-b:a",
            f"{bitrate_kbps}k",
            "-vbr",
            self.config.vbr,
            "-compression_level",
            str(self.config.compression_level),
            "-f",
            self.config.container,
            "-vn",
            str(output_file),
        ]

    def run_command(self, command: list[str], file_path: Path | None = None) -> subprocess.CompletedProcess:
        """Run an FFmpeg command, raising :class:`FFmpegError` on any failure."""
        LOG.debug("Running FFmpeg command: %s", " ".join(command))
        start_time = time.time()

        try:
            result = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,  # We'll handle return code ourselves
                encoding="utf-8",
                errors="replace",
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as e:
            msg = f"FFmpeg command timed out after {self.config.timeout}s"
            raise FFmpegError(msg, command=command, file_path=file_path) from e
        except OSError as e:
            msg = f"Failed to launch FFmpeg: {e}"
            raise FFmpegError(msg, command=command, file_path=file_path) from e

        LOG.debug("FFmpeg command completed in %.2fs", time.time() - start_time)

        if result.returncode != 0:
            error_msg = f"FFmpeg failed with return code {result.returncode}"
            tail = _stderr_tail(result.stderr)
            if tail:
                error_msg += f": {tail}"
            raise FFmpegError(
                error_msg,
                command=command,
                return_code=result.returncode,
                stderr=result.stderr,
                file_path=file_path,
            )
        return result

    def encode(self, input_path: Path, output_path: Path, bitrate_kbps: int) -> EncodeAttempt:
        """
        Transcode ``input_path`` to ``output_path`` at ``bitrate_kbps``.

        Never raises for encoder failures: a failed attempt is returned instead
        and ``output_path`` is guaranteed not to exist afterwards.
        """
        command = self.build_audio_command(input_path, output_path, bitrate_kbps)
        start_time = time.time()

        try:
            self.run_command(command, input_path)
            if not output_path.exists():
                msg = f"Output file not created: {output_path}"
                raise FFmpegError(msg, command=command, file_path=input_path)
            size = output_path.stat().st_size
        except (FFmpegError, OSError) as e:
            LOG.warning("Encoding %s at %dkbps failed: %s", input_path.name, bitrate_kbps, e)
            _remove_partial(output_path)
            return EncodeAttempt(
                input_path=input_path,
                output_path=output_path,
                bitrate_kbps=bitrate_kbps,
                success=False,
                message=str(e),
                elapsed=time.time() - start_time,
            )

        return EncodeAttempt(
            input_path=input_path,
            output_path=output_path,
            bitrate_kbps=bitrate_kbps,
            success=True,
            size=size,
            elapsed=time.time() - start_time,
        )


def _stderr_tail(stderr: str | None) -> str:
    if not stderr:
        return ""
    lines = [line for line in stderr.strip().splitlines() if line.strip()]
    return " | ".join(lines[-STDERR_TAIL_LINES:])


def _remove_partial(output_path: Path) -> None:
    try:
        output_path.unlink(missing_ok=True)
    except OSError as e:
        LOG.warning("Failed to remove partial output %s: %s", output_path, e)
