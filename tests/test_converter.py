"""Tests for the format conversion pass."""

import logging

from conftest import CEILING, KB, FakeEncoder, sizes_by_bitrate, sizes_by_file

from audio_compactor.core import AssetState, ProcessingStatus, scan_directory
from audio_compactor.processors import Converter


def _converter(encoder):
    return Converter(
        encoder=encoder,
        bitrate_kbps=64,
        target_extension=".webm",
        temp_suffix=".tmp",
        ceiling_bytes=CEILING,
    )


def test_converts_source_and_keeps_original(tmp_path, make_file):
    source = make_file("song.wma", 40 * KB)
    before = source.read_bytes()
    encoder = FakeEncoder(sizes_by_bitrate({64: 12 * KB}))

    summary = _converter(encoder).convert_all(scan_directory(tmp_path, [".wma"]))

    target = tmp_path / "song.webm"
    assert target.stat().st_size == 12 * KB
    assert source.read_bytes() == before
    assert not (tmp_path / "song.webm.tmp").exists()
    assert encoder.calls == [("song.wma", 64, False)]
    assert summary.succeeded == 1
    result = summary.results[0]
    assert result.status is ProcessingStatus.SUCCESS
    assert result.output_file == target
    assert result.metadata == {"bitrate_kbps": 64, "oversized": False}


def test_oversized_conversion_is_kept_with_warning(tmp_path, make_file, caplog):
    make_file("long.wma", 90 * KB)
    encoder = FakeEncoder(sizes_by_bitrate({64: 30 * KB}))

    with caplog.at_level(logging.WARNING):
        summary = _converter(encoder).convert_all(scan_directory(tmp_path, [".wma"]))

    assert (tmp_path / "long.webm").stat().st_size == 30 * KB
    assert summary.succeeded == 1
    assert summary.results[0].metadata["oversized"] is True
    assert "above" in summary.results[0].message
    assert any("above" in r.message for r in caplog.records)


def test_failed_conversion_does_not_stop_batch(tmp_path, make_file):
    make_file("bad.wma", 10 * KB)
    make_file("good.wma", 10 * KB)
    encoder = FakeEncoder(sizes_by_file({"good.wma": {64: 5 * KB}}), leave_partial=True)
    assets = scan_directory(tmp_path, [".wma"])

    summary = _converter(encoder).convert_all(assets)

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert summary.failures[0].source_file.name == "bad.wma"
    assert not (tmp_path / "bad.webm").exists()
    assert not (tmp_path / "bad.webm.tmp").exists()
    assert (tmp_path / "good.webm").exists()
    states = {asset.name: asset.state for asset in assets}
    assert states["bad.wma"] is AssetState.FAILED


def test_existing_target_is_skipped(tmp_path, make_file):
    make_file("song.wma", 10 * KB)
    existing = make_file("song.webm", 3 * KB)
    before = existing.read_bytes()
    encoder = FakeEncoder(sizes_by_bitrate({64: 5 * KB}))

    summary = _converter(encoder).convert_all(scan_directory(tmp_path, [".wma"]))

    assert encoder.calls == []
    assert existing.read_bytes() == before
    assert summary.results[0].status is ProcessingStatus.SKIPPED
    assert summary.attempted == 0


def test_scratch_path_colliding_with_target_is_refused(tmp_path, make_file):
    source = make_file("song.wma", 10 * KB)
    before = source.read_bytes()
    encoder = FakeEncoder(sizes_by_bitrate({64: 5 * KB}))
    converter = Converter(
        encoder=encoder,
        bitrate_kbps=64,
        target_extension=".webm",
        temp_suffix="",
        ceiling_bytes=CEILING,
    )

    summary = converter.convert_all(scan_directory(tmp_path, [".wma"]))

    assert summary.failed == 1
    assert "collides" in summary.failures[0].message
    assert encoder.calls == []
    assert source.read_bytes() == before
    assert not (tmp_path / "song.webm").exists()
