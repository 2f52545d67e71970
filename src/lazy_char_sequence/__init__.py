"""Lazy Char Sequence.

Streaming charset decoding of pull-based byte sources into a lazily realized,
memoizing, character-addressable sequence.

Progressive API Disclosure:
- Level 1: Simple functions - decode_bytes(), decode_file(), decode_reader()
- Level 2: Any pull function - decode_byte_source() with DecodeConfig
- Level 3: Engine internals - StreamingDecoder, LazySequence, decode_step()
"""

__version__ = "0.1.0"
__author__ = "Lazy Char Sequence Team"

# Level 1 and 2: decoding entry points
from .character.sequence import CharSequence, DecodedCharSequence, decode_byte_source
from .character.sources import decode_bytes, decode_file, decode_reader

# Configuration classes for advanced usage
from .shared.config import DecodeConfig, ErrorPolicy

# Error types raised by all API levels
from .shared.exceptions import (
    CharSequenceError,
    ConfigurationError,
    IndexOutOfRangeError,
    MalformedInputError,
    SequenceClosedError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple decoding functions
    "decode_bytes",
    "decode_file",
    "decode_reader",

    # Level 2: Pull-function decoding
    "decode_byte_source",
    "CharSequence",
    "DecodedCharSequence",

    # Configuration
    "DecodeConfig",
    "ErrorPolicy",

    # Errors
    "CharSequenceError",
    "ConfigurationError",
    "IndexOutOfRangeError",
    "MalformedInputError",
    "SequenceClosedError",
]
