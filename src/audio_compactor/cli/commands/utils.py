"""Utility CLI commands."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ...core import FileManager, find_stale_artifacts

if TYPE_CHECKING:
    import argparse

    from ...config import CompactorConfig

LOG = logging.getLogger(__name__)


class UtilityCommands:
    """Utility command handlers."""

    def __init__(self, config: CompactorConfig) -> None:
        """Initialize utility commands handler."""
        self.config = config

    def add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        """Add utility subcommands to parser."""
        subparsers = parser.add_subparsers(dest="util_command", help="Utility commands")

        # Cleanup command
        cleanup_parser = subparsers.add_parser("cleanup", help="Remove temporary files left by interrupted runs")
        cleanup_parser.add_argument("path", type=Path, nargs="?", help="Audio directory (default: from config)")
        cleanup_parser.add_argument("--dry-run", "-n", action="store_true", help="Show what would be deleted")

        # Info command
        subparsers.add_parser("info", help="Show configuration and FFmpeg availability")

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle utility command execution."""
        if not hasattr(args, "util_command") or args.util_command is None:
            LOG.error("No utility command specified")
            return 1

        if args.util_command == "cleanup":
            return self._handle_cleanup(args)
        if args.util_command == "info":
            return self._handle_info(args)
        LOG.error("Unknown utility command: %s", args.util_command)
        return 1

    def _handle_cleanup(self, args: argparse.Namespace) -> int:
        """Handle temporary artifact cleanup."""
        directory = args.path or self.config.directory
        stale_files = find_stale_artifacts(directory, self.config.temp_suffix)

        if args.dry_run:
            print(f"Would remove {len(stale_files)} temporary file(s)")
            for stale_file in stale_files:
                print(f"  {stale_file}")
            return 0

        file_manager = FileManager()
        cleaned_count = sum(1 for stale_file in stale_files if file_manager.discard(stale_file))
        print(f"Removed {cleaned_count} temporary file(s)")
        return 0 if cleaned_count == len(stale_files) else 1

    def _handle_info(self, _args: argparse.Namespace) -> int:
        """Handle info display."""
        executable = self.config.encoder.executable
        ffmpeg_path = shutil.which(executable)

        print(f"FFmpeg:          {ffmpeg_path or f'✗ {executable} not found on PATH'}")
        print(f"Directory:       {self.config.directory}")
        print(f"Size ceiling:    {self.config.max_size_mb:g} MB ({self.config.ceiling_bytes} bytes)")
        print(f"Bitrates (kbps): {', '.join(str(b) for b in self.config.bitrates_kbps)}")
        print(f"Target format:   {self.config.target_extension} ({self.config.encoder.codec})")
        conversion = self.config.conversion
        state = "enabled" if conversion.enabled else "disabled"
        print(
            f"Conversion:      {state}, {', '.join(conversion.source_extensions)} at {conversion.bitrate_kbps}kbps"
        )
        return 0 if ffmpeg_path else 1
