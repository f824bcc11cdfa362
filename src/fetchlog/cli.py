#!/usr/bin/env python3
"""
FetchLog CLI - find files by extension, name pattern and content, then copy
them into an output directory.

The search runs on a background worker; Ctrl+C cancels it cooperatively.
"""
import argparse
import logging
import os
import sys
import time
from concurrent.futures import Future
from typing import List, NoReturn, Optional, Sequence, Tuple

from fetchlog.config.parser import ConfigurationError, create_config_template, load_config
from fetchlog.engine import SearchEngine
from fetchlog.errors import ExportCancelledError, FetchLogError, SearchCancelledError
from fetchlog.models.config import FetchLogConfig
from fetchlog.models.match_record import MatchRecord
from fetchlog.models.search_request import SearchRequest, split_list_value
from fetchlog.tools.cancellation import CancellationToken


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130

EPILOG_TEXT = """\
Lists (-e, -i, -x) accept comma or semicolon separated values and may be repeated.
Patterns use * (any run of characters) and ? (one character), matched against file names.

Examples:
  fetchlog /var/log -e log -c ERROR
  fetchlog ./data -i "*.cfg" -x "temp_*" -o ./staging
  fetchlog ./backups --no-recursive --no-export
"""


def split_arguments(values: Sequence[str]) -> List[str]:
    """Split every repeated list option on commas and semicolons."""
    return [item for value in values for item in split_list_value(value)]


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args: Optional[Sequence[str]] = None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="fetchlog",
            description="FetchLog - search directories and zip archives, then export the matches",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "roots",
            nargs="*",
            metavar="ROOT",
            help="Directories to search"
        )

        # Filtering options
        parser.add_argument(
            "--ext", "-e",
            action="append",
            default=[],
            dest="extensions",
            metavar="EXT",
            help="File extensions to include (e.g. log,txt). Default: any"
        )
        parser.add_argument(
            "--include", "-i",
            action="append",
            default=[],
            dest="include_patterns",
            metavar="PATTERN",
            help="File name patterns, at least one must match (e.g. *.cfg)"
        )
        parser.add_argument(
            "--exclude", "-x",
            action="append",
            default=[],
            dest="exclude_patterns",
            metavar="PATTERN",
            help="File name patterns that exclude a file (e.g. temp_*)"
        )
        parser.add_argument(
            "--content", "-c",
            default=None,
            dest="content_filter",
            metavar="TEXT",
            help="Text that must appear in the file content"
        )
        parser.add_argument(
            "--case-sensitive",
            action="store_true",
            default=None,
            help="Compare the content filter case sensitively"
        )

        # Traversal options
        parser.add_argument(
            "--no-recursive",
            action="store_false",
            default=None,
            dest="recursive",
            help="Only search the top level of each root"
        )
        parser.add_argument(
            "--no-zip",
            action="store_false",
            default=None,
            dest="search_in_archives",
            help="Do not look inside zip archives"
        )

        # Output options
        parser.add_argument(
            "--output", "-o",
            default=None,
            dest="output_path",
            metavar="DIR",
            help="Directory the matches are copied into"
        )
        parser.add_argument(
            "--no-export",
            action="store_true",
            help="Only list the matches, do not copy them"
        )
        parser.add_argument(
            "--config",
            default=None,
            metavar="FILE",
            help="Configuration file (default: .fetchlog.yaml in cwd, home or ~/.config/fetchlog)"
        )
        parser.add_argument(
            "--init-config",
            default=None,
            metavar="FILE",
            help="Write a configuration template to FILE and exit"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress progress and result listing"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show debug logging and statistics"
        )

        return parser.parse_args(args)

    def configure_logging(self, config: FetchLogConfig) -> None:
        """Set up root logging from configuration and verbosity flags."""
        level = config.logging.get_level()
        if self.verbose:
            level = logging.DEBUG
        elif self.quiet:
            level = logging.ERROR
        logging.basicConfig(level=level, format=config.logging.format)
        logging.getLogger().setLevel(level)

    def build_request(self, args: argparse.Namespace, config: FetchLogConfig) -> SearchRequest:
        """Create a SearchRequest from CLI arguments and configured defaults."""
        content_filter = args.content_filter.strip() if args.content_filter else None
        try:
            return config.build_request(
                args.roots,
                recursive=args.recursive,
                search_in_archives=args.search_in_archives,
                case_sensitive=args.case_sensitive,
                extensions=split_arguments(args.extensions),
                include_patterns=split_arguments(args.include_patterns),
                exclude_patterns=split_arguments(args.exclude_patterns),
                content_filter=content_filter,
                output_path=args.output_path,
            )
        except ValueError as e:
            self.error_exit(f"Invalid search parameters: {e}", EXIT_USAGE)

    def progress(self, message: str) -> None:
        """Print a progress line unless quiet."""
        if not self.quiet:
            print(f"  {message}", flush=True)

    def wait(self, future: Future, token: CancellationToken):
        """
        Wait for a background step, turning Ctrl+C into a cancellation request.

        The step itself decides how to finish once it observes the token.
        """
        while True:
            try:
                return future.result()
            except KeyboardInterrupt:
                if not token.is_cancelled:
                    print("\nCancelling...", file=sys.stderr)
                token.cancel()

    def run_pipeline(self, engine: SearchEngine, request: SearchRequest,
                     export: bool) -> Tuple[Tuple[MatchRecord, ...], Optional[int]]:
        """Search, then export if requested. Returns the matches and copy count."""
        token = CancellationToken()

        if not self.quiet:
            print("Searching for files...")
        records = self.wait(engine.submit_search(request, self.progress, token), token)

        if not records or not export:
            return records, None

        if not self.quiet:
            print("Copying files to output directory...")
        copied = self.wait(engine.submit_export(records, request.output_path, self.progress, token), token)
        return records, copied

    def output_results(self, records: Sequence[MatchRecord]) -> None:
        """Print the matches as a plain table."""
        if self.quiet or not records:
            return

        name_width = max(len("Name"), *(len(r.display_name) for r in records))
        print()
        print(f"{'Name':<{name_width}}  {'Type':<4}  {'Size':>10}  Source")
        for record in records:
            print(f"{record.display_name:<{name_width}}  {record.file_type:<4}  "
                  f"{record.size_human:>10}  {record.source_path}")

    def output_stats(self, engine: SearchEngine) -> None:
        """Print engine counters in verbose mode."""
        if not self.verbose:
            return
        print("\nStatistics:")
        for key, value in engine.get_stats().items():
            if isinstance(value, float):
                value = f"{value:.2f}"
            print(f"  {key.replace('_', ' ')}: {value}")

    def run(self, args: Optional[Sequence[str]] = None) -> int:
        """Run the application and return the exit code."""
        args = self.parse_args(args)
        self.verbose = args.verbose
        self.quiet = args.quiet

        if args.init_config:
            try:
                create_config_template(args.init_config)
            except ConfigurationError as e:
                self.error_exit(str(e))
            print(f"Configuration template written to {args.init_config}")
            return EXIT_OK

        if not args.roots:
            self.error_exit("Please specify at least one directory to search.", EXIT_USAGE)

        try:
            parse_result = load_config(args.config)
        except ConfigurationError as e:
            self.error_exit(str(e))

        config = parse_result.config
        self.configure_logging(config)
        for warning in parse_result.warnings:
            logger.debug(warning)

        request = self.build_request(args, config)
        export = not args.no_export

        with SearchEngine(config) as engine:
            try:
                records, copied = self.run_pipeline(engine, request, export)
            except SearchCancelledError:
                print("Search cancelled by user.", file=sys.stderr)
                return EXIT_CANCELLED
            except ExportCancelledError as e:
                print(f"Export cancelled by user. Copied {e.copied_count} file(s) before stopping.",
                      file=sys.stderr)
                return EXIT_CANCELLED
            except FetchLogError as e:
                print(f"Error: {e}", file=sys.stderr)
                return EXIT_ERROR

            elapsed = time.time() - self.start_time
            if not records:
                if not self.quiet:
                    print("No files found matching the search criteria.")
                return EXIT_OK

            self.output_results(records)
            self.output_stats(engine)

        if not self.quiet:
            print(f"\nFiles found: {len(records)}")
            if copied is not None:
                print(f"Files copied: {copied}")
                print(f"Output location: {request.output_path}")
            print(f"Time: {elapsed:.2f}s")

        return EXIT_OK

    @staticmethod
    def error_exit(message: str, code: int = EXIT_ERROR) -> NoReturn:
        """Print an error message and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run(argv))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(EXIT_CANCELLED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
