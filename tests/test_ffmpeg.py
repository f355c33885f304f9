"""Tests for the FFmpeg encoder adapter."""

import subprocess
from unittest.mock import patch

import pytest

from audio_compactor.config import EncoderConfig
from audio_compactor.core import FFmpegEncoder, FFmpegError


@pytest.fixture
def encoder():
    return FFmpegEncoder(EncoderConfig())


def _completed(command, returncode=0, stderr=""):
    return subprocess.CompletedProcess(command, returncode, stdout="", stderr=stderr)


def test_build_audio_command(encoder, tmp_path):
    cmd = encoder.build_audio_command(tmp_path / "in.webm", tmp_path / "in.webm.tmp", 48)

    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-i") + 1] == str(tmp_path / "in.webm")
    assert cmd[cmd.index("-c:a") + 1] == "libopus"
    assert cmd[cmd.index("-b:a") + 1] == "48k"
    assert cmd[cmd.index("-vbr") + 1] == "on"
    assert cmd[cmd.index("-compression_level") + 1] == "10"
    assert cmd[cmd.index("-f") + 1] == "webm"
    assert "-vn" in cmd
    assert cmd[-1] == str(tmp_path / "in.webm.tmp")


def test_encode_success_reports_size(encoder, tmp_path):
    source = tmp_path / "in.webm"
    source.write_bytes(b"x" * 10)
    output = tmp_path / "in.webm.tmp"

    def fake_run(command, **kwargs):
        output.write_bytes(b"y" * 1234)
        return _completed(command)

    with patch("audio_compactor.core.ffmpeg.subprocess.run", side_effect=fake_run) as mock_run:
        attempt = encoder.encode(source, output, 64)

    assert attempt.success
    assert attempt.size == 1234
    assert attempt.bitrate_kbps == 64
    assert mock_run.call_args.kwargs["timeout"] is None


def test_encode_nonzero_exit_removes_partial_output(encoder, tmp_path):
    source = tmp_path / "in.webm"
    source.write_bytes(b"x" * 10)
    output = tmp_path / "in.webm.tmp"

    def fake_run(command, **kwargs):
        output.write_bytes(b"half written")
        return _completed(command, returncode=1, stderr="Invalid data found when processing input")

    with patch("audio_compactor.core.ffmpeg.subprocess.run", side_effect=fake_run):
        attempt = encoder.encode(source, output, 64)

    assert not attempt.success
    assert attempt.size is None
    assert "return code 1" in attempt.message
    assert "Invalid data" in attempt.message
    assert not output.exists()


def test_encode_launch_failure(encoder, tmp_path):
    output = tmp_path / "out.tmp"

    with patch("audio_compactor.core.ffmpeg.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
        attempt = encoder.encode(tmp_path / "in.webm", output, 64)

    assert not attempt.success
    assert "Failed to launch FFmpeg" in attempt.message
    assert not output.exists()


def test_encode_timeout_is_a_failure(tmp_path):
    encoder = FFmpegEncoder(EncoderConfig(timeout=5))
    output = tmp_path / "out.tmp"

    def fake_run(command, **kwargs):
        output.write_bytes(b"partial")
        raise subprocess.TimeoutExpired(cmd=command, timeout=5)

    with patch("audio_compactor.core.ffmpeg.subprocess.run", side_effect=fake_run):
        attempt = encoder.encode(tmp_path / "in.webm", output, 64)

    assert not attempt.success
    assert "timed out" in attempt.message
    assert not output.exists()


def test_encode_without_output_file_fails(encoder, tmp_path):
    output = tmp_path / "out.tmp"

    with patch("audio_compactor.core.ffmpeg.subprocess.run", side_effect=lambda cmd, **kw: _completed(cmd)):
        attempt = encoder.encode(tmp_path / "in.webm", output, 64)

    assert not attempt.success
    assert "Output file not created" in attempt.message


def test_run_command_raises_with_context(encoder):
    command = ["ffmpeg", "-i", "x"]

    with patch(
        "audio_compactor.core.ffmpeg.subprocess.run",
        return_value=_completed(command, returncode=2, stderr="boom"),
    ):
        with pytest.raises(FFmpegError) as exc_info:
            encoder.run_command(command)

    assert exc_info.value.return_code == 2
    assert exc_info.value.command == command
    assert exc_info.value.stderr == "boom"


def test_check_availability(encoder):
    with patch("audio_compactor.core.ffmpeg.shutil.which", return_value=None):
        with pytest.raises(FFmpegError, match="Missing FFmpeg executable"):
            encoder.check_availability()

    with patch("audio_compactor.core.ffmpeg.shutil.which", return_value="/usr/bin/ffmpeg"):
        encoder.check_availability()
