"""Main CLI interface for the audio compactor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from .. import __version__
from ..config import load_config
from ..config.constants import VERBOSE_LOGGING_THRESHOLD
from .commands import BatchCommands, UtilityCommands

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..config import CompactorConfig

LOG = logging.getLogger(__name__)

EPILOG = """
Examples:
  # Convert .wma files, then compact every .webm above 25 MB
  audio-compactor run static/audio

  # Only enforce a 20 MB ceiling
  audio-compactor compact static/audio --max-size-mb 20

  # Remove temporary files left by an interrupted run
  audio-compactor utils cleanup static/audio
"""


class CompactorCLI:
    """Argument parsing, logging setup and command dispatch."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config = load_config(config_path)
        self.batch_commands = BatchCommands(self.config)
        self.utility_commands = UtilityCommands(self.config)

    def use_config(self, config: CompactorConfig) -> None:
        """Swap the configuration seen by every command handler."""
        self.config = config
        self.batch_commands.config = config
        self.utility_commands.config = config

    @staticmethod
    def setup_logging(verbosity: int, default_level: str = "WARNING", *, quiet: bool = False) -> None:
        """
        Configure stderr logging.

        ``-v`` selects INFO and ``-vv`` DEBUG; without either the configured
        ``global.log_level`` applies. ``--quiet`` wins over both.
        """
        if quiet:
            level = logging.ERROR
        elif verbosity:
            level = logging.INFO if verbosity < VERBOSE_LOGGING_THRESHOLD else logging.DEBUG
        else:
            level = logging.getLevelName(default_level.upper())
            if not isinstance(level, int):
                level = logging.WARNING

        if verbosity >= VERBOSE_LOGGING_THRESHOLD:
            log_format = "%(levelname)s: %(name)s: %(message)s"
        else:
            log_format = "%(levelname)s: %(message)s"

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)])

        # Per-attempt encoder chatter only at -vv
        if verbosity < VERBOSE_LOGGING_THRESHOLD:
            logging.getLogger("audio_compactor.core.ffmpeg").setLevel(max(level, logging.WARNING))

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog="audio-compactor",
            description="Convert legacy audio and keep WebM files under a size ceiling",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=EPILOG,
        )
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info, -vv for debug)",
        )
        verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
        parser.add_argument("--config", type=Path, help="Path to configuration file")

        subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")
        self.batch_commands.add_subcommands(subparsers)
        utils_parser = subparsers.add_parser("utils", help="Maintenance commands")
        self.utility_commands.add_subcommands(utils_parser)

        return parser

    def _handler_for(self, command: str) -> Callable[[argparse.Namespace], int]:
        if command in BatchCommands.names:
            return self.batch_commands.handle_command
        return self.utility_commands.handle_command

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with the given arguments; returns the process exit code."""
        parsed_args = self.build_parser().parse_args(args)

        if parsed_args.config:
            self.use_config(load_config(parsed_args.config))

        self.setup_logging(parsed_args.verbose, self.config.global_.log_level, quiet=parsed_args.quiet)

        try:
            return self._handler_for(parsed_args.command)(parsed_args)
        except KeyboardInterrupt:
            LOG.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception:
            LOG.exception("Fatal error")
            return 1


def main() -> int:
    """Entry point for the CLI."""
    return CompactorCLI().run()


if __name__ == "__main__":
    sys.exit(main())
