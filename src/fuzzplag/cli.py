#!/usr/bin/env python3
"""
FuzzPlag CLI: command line interface for near-duplicate submission detection.
Reads config.yaml, fingerprints every file inside the (nested) submission archive
and writes all cross-author pairs within the distance threshold to a report.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from fuzzplag.config import FuzzPlagConfig
from fuzzplag.commands import DetectionCommand
from fuzzplag.core.errors import ArchiveError, ConfigError, ReportError
from fuzzplag.core.models import CandidatePair, DetectionParams
from fuzzplag.services.report_service import ReportService
from fuzzplag.aliases import (
    DISTANCE_METRIC_CHOICES, DISTANCE_METRIC_HELP_TEXT, FORMAT_CHOICES, EPILOG_TEXT
)

logger = logging.getLogger("fuzzplag")


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments. Every option overrides its config key."""
        parser = argparse.ArgumentParser(
            prog="fuzzplag",
            description="FuzzPlag: fuzzy-hash plagiarism finder for archives of student submissions",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "--config", "-c",
            default=None,
            type=str,
            help="Path to config.yaml. Default: ./conf/config.yaml, then ./config.yaml"
        )
        parser.add_argument(
            "--input", "-i",
            default=None,
            type=str,
            help="Root zip archive with all submissions (overrides input.path)"
        )
        parser.add_argument(
            "--output", "-o",
            default=None,
            type=str,
            help="Report file to write (overrides output.path)"
        )
        parser.add_argument(
            "--format",
            choices=FORMAT_CHOICES,
            default=None,
            type=str,
            help="Report format: 'csv' (Source,Dest,Distance) or 'text'. Default: csv"
        )
        parser.add_argument(
            "--parallel", "-j",
            default=None,
            type=int,
            metavar='N',
            help="Number of hashing workers (overrides parallel)"
        )
        parser.add_argument(
            "--distance-metric",
            choices=DISTANCE_METRIC_CHOICES,
            default=None,
            type=str,
            help=DISTANCE_METRIC_HELP_TEXT
        )
        parser.add_argument(
            "--top-level-leaves",
            action="store_true",
            help="Also fingerprint plain files stored directly in the root archive"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show debug logging, progress and statistics"
        )

        return parser.parse_args(args)

    def load_config(self, args: argparse.Namespace) -> FuzzPlagConfig:
        """Load the config file and apply command-line overrides."""
        try:
            config = FuzzPlagConfig.load(args.config)
        except ConfigError as e:
            self.error_exit(str(e))

        if args.input is not None:
            config.input_path = args.input
        if args.output is not None:
            config.output_path = args.output
        if args.format is not None:
            config.output_format = args.format
        if args.parallel is not None:
            config.parallel = args.parallel
        if args.distance_metric is not None:
            config.distance_metric = args.distance_metric
        if args.top_level_leaves:
            config.fingerprint_top_level_leaves = True

        return config

    def setup_logging(self, config: FuzzPlagConfig) -> None:
        """Apply verbosity: -v forces DEBUG, -q forces ERROR, otherwise log-level from config."""
        if self.verbose:
            level = logging.DEBUG
        elif self.quiet:
            level = logging.ERROR
        else:
            level = logging.getLevelName(str(config.log_level).upper())
            if not isinstance(level, int):
                self.warning(f"Unknown log-level '{config.log_level}', using INFO")
                level = logging.INFO
        logging.getLogger().setLevel(level)

    def create_params(self, config: FuzzPlagConfig) -> DetectionParams:
        """Create DetectionParams from the merged configuration."""
        try:
            return config.to_params()
        except ConfigError as e:
            self.error_exit(str(e))

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
            sys.stderr.flush()
        else:
            sys.stderr.write(f"\r  [{stage}] {current} processed...")
            sys.stderr.flush()

    @staticmethod
    def stopped_flag() -> bool:
        """Check if operation should stop (placeholder for signal handling)."""
        return False

    def run_detection(self, params: DetectionParams) -> List[CandidatePair]:
        """Execute detection workflow."""
        command = DetectionCommand()
        try:
            pairs, stats = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag
            )
        except ArchiveError as e:
            self.error_exit(str(e))

        if self.verbose:
            sys.stderr.write("\n")
            print(stats.print_summary())

        return pairs

    def write_report(self, pairs: List[CandidatePair], config: FuzzPlagConfig) -> None:
        try:
            count = ReportService.write(pairs, config.output_path, config.output_format)
        except ReportError as e:
            self.error_exit(str(e))

        if not self.quiet:
            print(f"Found {count} suspect pairs → {config.output_path}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        config = self.load_config(args)
        self.setup_logging(config)
        logger.info("Starting FuzzPlag")
        if config.source:
            logger.info(f"Using config {config.source}")

        params = self.create_params(config)

        if not self.quiet:
            print(f"Scanning archive: {params.input_path}")

        pairs = self.run_detection(params)
        self.write_report(pairs, config)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
