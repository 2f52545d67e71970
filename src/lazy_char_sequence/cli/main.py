"""Main CLI entry point for the lazy-char-sequence command-line tool.

Decodes files through the streaming engine and reports the decoded text,
its length, single characters, or decode statistics.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from lazy_char_sequence import __version__
from lazy_char_sequence.character.sequence import DecodedCharSequence
from lazy_char_sequence.character.sources import decode_file
from lazy_char_sequence.shared.config import DecodeConfig, ErrorPolicy
from lazy_char_sequence.shared.exceptions import CharSequenceError
from lazy_char_sequence.shared.logging import get_logger

logger = get_logger(__name__, None, "cli")


def build_config(args: argparse.Namespace) -> DecodeConfig:
    """Combine an optional config file with command-line overrides."""
    config = DecodeConfig.from_file(args.config) if args.config else DecodeConfig()

    overrides: Dict[str, Any] = {}
    if args.chunk_size is not None:
        overrides["chunk_size"] = args.chunk_size
    if args.encoding is not None:
        overrides["encoding"] = args.encoding
    if args.on_encoding_error is not None:
        overrides["on_encoding_error"] = args.on_encoding_error

    return config.override(**overrides) if overrides else config


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="lazy-char-sequence",
        description="Decode byte files lazily into character sequences"
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--chunk-size",
        type=int,
        help="Bytes requested per read (default: 4096)"
    )
    parser.add_argument(
        "--encoding", "-e",
        help="Charset of the input (default: UTF-8)"
    )
    parser.add_argument(
        "--on-encoding-error",
        choices=[policy.value for policy in ErrorPolicy],
        help="Handling of malformed input (default: replace)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    decode_parser = subparsers.add_parser("decode", help="Write the decoded text")
    decode_parser.add_argument("path", type=Path, help="File to decode")
    decode_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    length_parser = subparsers.add_parser("length", help="Print the character count")
    length_parser.add_argument("path", type=Path, help="File to decode")

    char_parser = subparsers.add_parser("char-at", help="Print one character")
    char_parser.add_argument("path", type=Path, help="File to decode")
    char_parser.add_argument("index", type=int, help="Zero-based character index")

    stats_parser = subparsers.add_parser("stats", help="Print decode statistics")
    stats_parser.add_argument("path", type=Path, help="File to decode")
    stats_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )

    return parser


def _measure_memory_usage() -> float:
    """Get current memory usage in MB."""
    process = psutil.Process()
    return process.memory_info().rss / 1024 / 1024


def collect_stats(path: Path, sequence: DecodedCharSequence, config: DecodeConfig) -> Dict[str, Any]:
    """Decode ``sequence`` fully and gather its statistics."""
    memory_before = _measure_memory_usage()
    length = sequence.length()
    memory_after = _measure_memory_usage()
    return {
        "file": str(path),
        "length": length,
        "config": config.to_dict(),
        "metrics": sequence.metrics.to_dict(),
        "memory_mb": {
            "before": round(memory_before, 2),
            "after": round(memory_after, 2),
            "delta": round(memory_after - memory_before, 2),
        },
    }


def format_stats(stats: Dict[str, Any], format_type: str) -> str:
    """Format decode statistics for output."""
    if format_type == "json":
        return json.dumps(stats, indent=2)

    metrics = stats["metrics"]
    lines = [
        f"File: {stats['file']}",
        f"Encoding: {stats['config']['encoding']} "
        f"(on error: {stats['config']['on_encoding_error']})",
        f"Characters: {stats['length']}",
        f"Bytes read: {metrics['bytes_pulled']} in {metrics['pulls']} reads",
        f"Chunks: {metrics['chunks_realized']}, merges: {metrics['merges']}, "
        f"overflow retries: {metrics['overflow_retries']}",
    ]
    memory = stats.get("memory_mb")
    if memory:
        lines.append(
            f"Memory: {memory['after']:.2f} MB (delta {memory['delta']:+.2f} MB)"
        )
    return "\n".join(lines)


def cmd_decode(args: argparse.Namespace, config: DecodeConfig) -> int:
    """Handle decode command."""
    with decode_file(args.path, config) as sequence:
        if args.output:
            with args.output.open("w", encoding="utf-8") as handle:
                for chunk_text in sequence.iter_chunks():
                    handle.write(chunk_text)
            print(f"Decoded text written to {args.output}", file=sys.stderr)
        else:
            for chunk_text in sequence.iter_chunks():
                sys.stdout.write(chunk_text)
            sys.stdout.flush()
    return 0


def cmd_length(args: argparse.Namespace, config: DecodeConfig) -> int:
    """Handle length command."""
    with decode_file(args.path, config) as sequence:
        print(sequence.length())
    return 0


def cmd_char_at(args: argparse.Namespace, config: DecodeConfig) -> int:
    """Handle char-at command."""
    with decode_file(args.path, config) as sequence:
        print(sequence.char_at(args.index))
    return 0


def cmd_stats(args: argparse.Namespace, config: DecodeConfig) -> int:
    """Handle stats command."""
    with decode_file(args.path, config) as sequence:
        stats = collect_stats(args.path, sequence, config)
    print(format_stats(stats, args.format))
    return 0


COMMANDS = {
    "decode": cmd_decode,
    "length": cmd_length,
    "char-at": cmd_char_at,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = build_config(args)
        return COMMANDS[args.command](args, config)
    except CharSequenceError as e:
        logger.error(f"{args.command} failed: {e}", extra={"path": str(args.path)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
