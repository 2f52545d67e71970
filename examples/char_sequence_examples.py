#!/usr/bin/env python3
"""
Lazy Character Sequence Examples

This script demonstrates usage patterns for decoding byte sources into lazy
character sequences: in-memory bytes, readers, custom pull functions,
configuration presets and error handling.
"""

import io
import sys
import time
from pathlib import Path

# Add src to path for running examples directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lazy_char_sequence import (
    DecodeConfig,
    MalformedInputError,
    decode_byte_source,
    decode_bytes,
    decode_reader,
)


def example_basic_usage():
    """Example 1: Basic usage with different inputs."""
    print("=== Example 1: Basic Usage ===")

    seq = decode_bytes("Grüße aus Köln".encode("utf-8"))
    print(f"Bytes input: {seq.to_string()}")
    print(f"Length: {seq.length()}, char 2: {seq.char_at(2)!r}")
    print()

    with decode_reader(io.BytesIO("naïve".encode("latin-1")), encoding="latin-1") as seq:
        print(f"Reader input: {seq}")
    print()


def example_lazy_access():
    """Example 2: Only the needed prefix is decoded."""
    print("=== Example 2: Lazy Access ===")

    pulls = []
    data = io.BytesIO(("abcdefghij" * 100).encode("ascii"))

    def pull(max_bytes):
        pulls.append(max_bytes)
        return data.read(max_bytes)

    seq = decode_byte_source(pull, chunk_size=16)
    print(f"Pulls after creation: {len(pulls)}")
    print(f"char_at(20) = {seq.char_at(20)!r}, pulls so far: {len(pulls)}")
    print(f"sub_sequence(30, 40) = {seq.sub_sequence(30, 40)!r}, pulls so far: {len(pulls)}")
    print(f"length = {seq.length()}, pulls total: {len(pulls)}")
    print()


def example_split_characters():
    """Example 3: Multibyte characters split across pulls."""
    print("=== Example 3: Split Characters ===")

    seq = decode_bytes("€ ☃ 😀".encode("utf-8"), chunk_size=1)
    print(f"Decoded: {seq.to_string()}")
    print(f"Metrics: {seq.metrics.to_dict()}")
    print()


def example_configuration_presets():
    """Example 4: Error policies for malformed input."""
    print("=== Example 4: Configuration Presets ===")

    bad_input = b"caf\xe9 au lait"

    for config in (DecodeConfig.lenient(), DecodeConfig.lossy(), DecodeConfig.strict()):
        policy = config.on_encoding_error.value
        try:
            print(f"{policy}: {decode_bytes(bad_input, config).to_string()!r}")
        except MalformedInputError as e:
            print(f"{policy}: failed at byte {e.offset} ({e.reason})")
    print()


def example_performance():
    """Example 5: Decode throughput for different chunk sizes."""
    print("=== Example 5: Chunk Size Comparison ===")

    data = ("Ünïcödé text " * 20000).encode("utf-8")
    for chunk_size in (64, 1024, 4096, 65536):
        start = time.time()
        seq = decode_bytes(data, chunk_size=chunk_size)
        length = seq.length()
        elapsed = time.time() - start
        print(f"chunk_size={chunk_size:>6}: {length} chars in {elapsed * 1000:.1f}ms "
              f"({seq.metrics.chunks_realized} chunks)")
    print()


def main():
    """Run all examples."""
    print("Lazy Character Sequence API Examples")
    print("=" * 50)
    print()

    try:
        example_basic_usage()
        example_lazy_access()
        example_split_characters()
        example_configuration_presets()
        example_performance()

        print("All examples completed successfully!")

    except Exception as e:
        print(f"Error running examples: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
