"""Batch conversion and compaction CLI commands."""

from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING

from ...core import FFmpegEncoder, FFmpegError
from ...processors import BatchDriver
from ..failure_table import print_failure_table

if TYPE_CHECKING:
    from ...config import CompactorConfig

LOG = logging.getLogger(__name__)


def positive_size_mb(value: str) -> float:
    """Argparse type for the size ceiling: a positive number of MiB."""
    try:
        size = float(value)
    except ValueError:
        msg = f"invalid size: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if not math.isfinite(size) or size <= 0:
        msg = f"size must be a positive number, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return size


class BatchCommands:
    """Handlers for ``run``, ``convert`` and ``compact``."""

    names = ("run", "convert", "compact")

    def __init__(self, config: CompactorConfig) -> None:
        """Initialize batch commands handler."""
        self.config = config

    def add_subcommands(self, subparsers: argparse._SubParsersAction) -> None:
        """Add batch commands to the top-level subparsers."""
        run_parser = subparsers.add_parser("run", help="Convert legacy files, then compact oversized ones")
        self._add_common_arguments(run_parser)
        run_parser.add_argument("--no-convert", action="store_true", help="Skip the conversion pass")

        convert_parser = subparsers.add_parser("convert", help="Convert legacy files to the target format only")
        self._add_common_arguments(convert_parser)

        compact_parser = subparsers.add_parser("compact", help="Compact oversized files only")
        self._add_common_arguments(compact_parser)

    @staticmethod
    def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path", type=Path, nargs="?", help="Audio directory (default: from config)")
        parser.add_argument("--max-size-mb", type=positive_size_mb, help="Size ceiling in MiB (default: from config)")
        parser.add_argument("--no-progress", action="store_true", help="Don't show progress bars")

    def effective_config(self, args: argparse.Namespace) -> CompactorConfig:
        """Apply command-line overrides to the loaded configuration."""
        return self.config.with_overrides(
            directory=args.path,
            max_size_mb=args.max_size_mb,
            show_progress=False if args.no_progress else None,
        )

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle batch command execution."""
        config = self.effective_config(args)
        encoder = FFmpegEncoder(config.encoder)
        try:
            encoder.check_availability()
        except FFmpegError:
            LOG.exception("Cannot run without FFmpeg")
            return 1

        driver = BatchDriver(config, encoder=encoder)
        if args.command == "run":
            report = driver.run(convert=False if args.no_convert else None)
            failures = report.failures
        elif args.command == "convert":
            failures = driver.convert().failures
        elif args.command == "compact":
            failures = driver.compact().failures
        else:
            LOG.error("Unknown command: %s", args.command)
            return 1

        print_failure_table(failures)
        return 1 if failures else 0
