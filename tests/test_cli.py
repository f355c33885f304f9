"""Tests for the command-line interface."""

from unittest.mock import patch

import pytest
from conftest import CEILING_MB, KB, FakeEncoder, sizes_by_bitrate

from audio_compactor.cli import CompactorCLI
from audio_compactor.core import FFmpegError
from audio_compactor.processors import BatchDriver


@pytest.fixture
def cli(tmp_path, monkeypatch):
    # Keep a config.yaml from the developer's checkout out of the picture
    monkeypatch.chdir(tmp_path)
    return CompactorCLI()


def test_compact_command(cli, tmp_path, make_file, capsys):
    make_file("a.webm", 30 * KB)
    make_file("b.webm", 10 * KB)
    encoder = FakeEncoder(sizes_by_bitrate({64: 20 * KB}))

    with patch("audio_compactor.cli.commands.batch.FFmpegEncoder", return_value=encoder):
        exit_code = cli.run(["compact", str(tmp_path), "--max-size-mb", str(CEILING_MB), "--no-progress"])

    assert exit_code == 0
    assert (tmp_path / "a.webm").stat().st_size == 20 * KB
    out = capsys.readouterr().out
    assert "b.webm: 0.01 MB (OK)" in out
    assert "Successfully compressed: 1" in out


def test_run_command_reports_failures(cli, tmp_path, make_file, capsys):
    make_file("a.webm", 30 * KB)
    encoder = FakeEncoder(sizes_by_bitrate({}, default=26 * KB))

    with patch("audio_compactor.cli.commands.batch.FFmpegEncoder", return_value=encoder):
        exit_code = cli.run(["run", str(tmp_path), "--max-size-mb", str(CEILING_MB), "--no-progress"])

    assert exit_code == 1
    out = capsys.readouterr().out
    assert "FAILURES" in out
    assert "a.webm" in out


def test_missing_ffmpeg_exits_with_error(cli, tmp_path, make_file):
    make_file("a.webm", 30 * KB)
    encoder = FakeEncoder(sizes_by_bitrate({64: 20 * KB}))

    with (
        patch("audio_compactor.cli.commands.batch.FFmpegEncoder", return_value=encoder),
        patch.object(encoder, "check_availability", side_effect=FFmpegError("Missing FFmpeg executable: ffmpeg")),
    ):
        exit_code = cli.run(["compact", str(tmp_path), "--no-progress"])

    assert exit_code == 1
    assert encoder.calls == []


def test_cleanup_dry_run_keeps_files(cli, tmp_path, capsys):
    stale = tmp_path / "a.webm.tmp"
    stale.write_bytes(b"partial")

    exit_code = cli.run(["utils", "cleanup", str(tmp_path), "--dry-run"])

    assert exit_code == 0
    assert stale.exists()
    assert "Would remove 1 temporary file(s)" in capsys.readouterr().out


def test_cleanup_removes_stale_files(cli, tmp_path, capsys):
    (tmp_path / "a.webm.tmp").write_bytes(b"partial")
    (tmp_path / "song.webm.tmp").write_bytes(b"partial")
    keep = tmp_path / "b.webm"
    keep.write_bytes(b"audio")

    exit_code = cli.run(["utils", "cleanup", str(tmp_path)])

    assert exit_code == 0
    assert list(tmp_path.glob("*.tmp")) == []
    assert keep.exists()
    assert "Removed 2 temporary file(s)" in capsys.readouterr().out


def test_utils_without_subcommand_fails(cli):
    assert cli.run(["utils"]) == 1


@pytest.mark.parametrize("value", ["0", "nan", "lots"])
def test_max_size_must_be_positive(cli, tmp_path, value):
    with pytest.raises(SystemExit) as exc_info:
        cli.run(["compact", str(tmp_path), "--max-size-mb", value])

    assert exc_info.value.code == 2


def test_unexpected_error_is_logged_and_fails(cli, tmp_path, caplog):
    encoder = FakeEncoder(sizes_by_bitrate({}))

    with (
        patch("audio_compactor.cli.commands.batch.FFmpegEncoder", return_value=encoder),
        patch.object(BatchDriver, "run", side_effect=RuntimeError("driver exploded")),
    ):
        exit_code = cli.run(["run", str(tmp_path), "--no-progress"])

    assert exit_code == 1
    assert any("Fatal error" in r.message and r.exc_info for r in caplog.records)


def test_interrupt_exits_130(cli, tmp_path):
    encoder = FakeEncoder(sizes_by_bitrate({}))

    with (
        patch("audio_compactor.cli.commands.batch.FFmpegEncoder", return_value=encoder),
        patch.object(BatchDriver, "run", side_effect=KeyboardInterrupt),
    ):
        exit_code = cli.run(["run", str(tmp_path), "--no-progress"])

    assert exit_code == 130
