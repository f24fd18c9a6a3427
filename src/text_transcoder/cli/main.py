"""Main CLI entry point for the text-transcoder command-line tool.

Reads the named file, or else standard input, with the input encoding and
writes the same text to standard output with the output encoding.

Exit statuses: 0 on success, 1 when the data (or I/O) stops the transcode,
2 for usage errors. Listing and version output use a configurable status,
2 by default.
"""

import argparse
import logging
import platform
import sys
import uuid
from pathlib import Path
from typing import BinaryIO, List, Optional, TextIO

from text_transcoder import __version__
from text_transcoder.character import (
    UTF_PREFIX,
    CatalogError,
    EncodingNotFoundError,
    Registry,
    build_catalog,
    transcode,
)
from text_transcoder.shared import (
    EXIT_FAULT,
    EXIT_OK,
    EXIT_USAGE,
    ConfigError,
    TranscoderConfig,
    TranscodeResult,
    get_logger,
)
from text_transcoder.tools import TranscodeProfiler

PROG = "text-transcoder"
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

logger = get_logger(__name__, component="cli")


class UsageError(Exception):
    """Bad command-line arguments; reported with exit status 2."""


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self, transcoder_config: Optional[TranscoderConfig] = None):
        self.transcoder_config = transcoder_config or TranscoderConfig()
        self.verbose = False
        self.quiet = False
        self.stats = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        A missing or invalid file leaves the defaults in place.
        """
        config = cls()
        if config_path.exists():
            try:
                config.transcoder_config = TranscoderConfig.from_json(
                    config_path.read_text(encoding="utf-8")
                )
            except (OSError, ValueError, ConfigError) as e:
                print(f"Warning: Could not load config file: {e}", file=sys.stderr)

        return config

    def with_overrides(self, args: argparse.Namespace) -> "CLIConfig":
        """Apply command-line options on top of the file configuration."""
        overrides = {}
        if args.chunk_size is not None:
            overrides["stream__chunk_size"] = args.chunk_size
        if args.input_encoding is not None:
            overrides["output__input_encoding"] = args.input_encoding
        if args.output_encoding is not None:
            overrides["output__output_encoding"] = args.output_encoding
        if overrides:
            self.transcoder_config = self.transcoder_config.override(**overrides)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.stats = args.stats
        return self


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Transcode text between legacy and Unicode character encodings",
        epilog="Encoding names ignore case, spaces, hyphens and underscores; "
               "use -list to see them all.",
    )

    parser.add_argument(
        "-in", "--in",
        dest="input_encoding",
        metavar="NAME",
        help="input encoding name (default: utf-8)"
    )
    parser.add_argument(
        "-out", "--out",
        dest="output_encoding",
        metavar="NAME",
        help="output encoding name (default: utf-8)"
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "-list", "--list",
        dest="list_all",
        action="store_true",
        help="list all encoding names"
    )
    modes.add_argument(
        "-list-utf", "--list-utf",
        dest="list_utf",
        action="store_true",
        help="list just UTF encoding names"
    )
    modes.add_argument(
        "-version", "--version",
        dest="version",
        action="store_true",
        help="print version/build info"
    )

    parser.add_argument(
        "files",
        nargs="*",
        metavar="file",
        help="file to read (default: standard input)"
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        metavar="BYTES",
        help="bytes read per chunk"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="configuration file path (JSON)"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="print throughput and memory statistics to stderr"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def version_string() -> str:
    """Program name, package version and interpreter version."""
    return f"{PROG}:{__version__}:python{platform.python_version()}"


def print_list(registry: Registry, prefix: str, stream: TextIO) -> None:
    """Print catalog display names, one per line."""
    for name in registry.list_names(prefix):
        print(name, file=stream)


def error_out(message: str, stream: TextIO) -> None:
    print(f"error: {message}", file=stream)


def open_source(files: List[str], stdin: BinaryIO) -> BinaryIO:
    """Select the input stream.

    Raises:
        UsageError: If more than one file is named
        OSError: If the named file cannot be opened
    """
    if not files:
        return stdin
    if len(files) > 1:
        raise UsageError(
            f"got {len(files)} files: {', '.join(files)}; "
            "can only read from stdin or a single file"
        )
    return open(files[0], "rb")


def _is_terminal(stream: BinaryIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False


def report_fault(
    result: TranscodeResult,
    config: TranscoderConfig,
    sink: BinaryIO,
    stderr: TextIO,
) -> int:
    """Print the fault of a failed transcode and return the exit status."""
    fault = result.fault
    if fault is None:
        return EXIT_OK

    if result.bytes_written > 0 and config.output.newline_before_error and _is_terminal(sink):
        try:
            sink.write(b"\n")
            sink.flush()
        except OSError:
            logger.bind(result.correlation_id).debug(
                "Could not separate output from error message", exc_info=True
            )

    if fault.offset is None:
        error_out(f"could not transcode: {fault.describe()}", stderr)
    else:
        error_out(f"could not transcode, {fault.describe()}", stderr)
    return EXIT_FAULT


def run(
    args: argparse.Namespace,
    stdin: BinaryIO,
    stdout: BinaryIO,
    stderr: TextIO,
) -> int:
    """Execute one invocation; returns the exit status."""
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    try:
        config.with_overrides(args)
    except ConfigError as e:
        error_out(str(e), stderr)
        return EXIT_USAGE

    transcoder_config = config.transcoder_config
    correlation_id = str(uuid.uuid4())
    run_logger = logger.bind(correlation_id)

    registry = build_catalog(transcoder_config.registry)
    listing_status = transcoder_config.output.listing_exit_status

    if args.list_all:
        print_list(registry, "", stderr)
        return listing_status
    if args.list_utf:
        print_list(registry, UTF_PREFIX, stderr)
        return listing_status
    if args.version:
        print(version_string(), file=stderr)
        return listing_status

    try:
        encoding_in = registry.require(transcoder_config.output.input_encoding, "input")
        encoding_out = registry.require(transcoder_config.output.output_encoding, "output")
    except EncodingNotFoundError as e:
        error_out(str(e), stderr)
        return EXIT_USAGE

    try:
        source = open_source(args.files, stdin)
    except UsageError as e:
        error_out(str(e), stderr)
        return EXIT_USAGE
    except OSError as e:
        error_out(f"could not read from specified file: {e}", stderr)
        return EXIT_FAULT

    run_logger.debug(
        "Transcoding",
        extra={
            "source": args.files[0] if args.files else "<stdin>",
            "input_encoding": encoding_in.name,
            "output_encoding": encoding_out.name,
        },
    )
    profiler = TranscodeProfiler(enable_memory_tracking=config.stats)
    try:
        with profiler.profile(correlation_id) as session:
            result = transcode(
                source, stdout, encoding_in, encoding_out, transcoder_config, correlation_id
            )
            session.record(result)
    finally:
        if source is not stdin:
            try:
                source.close()
            except OSError as e:
                run_logger.warning("Could not close input file", extra={"error": str(e)})

    if config.stats:
        print(f"stats: {session.summary()}", file=stderr)

    return report_fault(result, transcoder_config, stdout, stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        return run(args, sys.stdin.buffer, sys.stdout.buffer, sys.stderr)
    except CatalogError as e:
        error_out(f"encoding catalog is broken: {e}", sys.stderr)
        return EXIT_FAULT
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
