"""Character layer for lazy character sequence decoding.

This module provides the streaming charset decoder, the memoizing chunk chain
and the character-sequence view built on top of them.
"""

from .buffers import ByteChunk, CharChunk, merge_byte_chunks
from .decoder import DecoderState, average_chars_per_byte, decode_step, flush
from .engine import ByteSource, CloseCallback, CloseOnce, StreamingDecoder
from .lazy import LazySequence
from .policy import CoderResult, DecodeOutcome, classify_result, coding_error_action
from .sequence import CharSequence, DecodedCharSequence, decode_byte_source
from .sources import (
    IterableByteSource,
    decode_bytes,
    decode_file,
    decode_reader,
    iter_byte_source,
    reader_byte_source,
)

__all__ = [
    # Modules
    "buffers",
    "decoder",
    "engine",
    "lazy",
    "policy",
    "sequence",
    "sources",
    # Buffers
    "ByteChunk",
    "CharChunk",
    "merge_byte_chunks",
    # Decode primitives
    "DecoderState",
    "average_chars_per_byte",
    "decode_step",
    "flush",
    "CoderResult",
    "DecodeOutcome",
    "classify_result",
    "coding_error_action",
    # Engine and lazy chain
    "ByteSource",
    "CloseCallback",
    "CloseOnce",
    "StreamingDecoder",
    "LazySequence",
    # Sequence view
    "CharSequence",
    "DecodedCharSequence",
    "decode_byte_source",
    # Byte sources
    "IterableByteSource",
    "decode_bytes",
    "decode_file",
    "decode_reader",
    "iter_byte_source",
    "reader_byte_source",
]
