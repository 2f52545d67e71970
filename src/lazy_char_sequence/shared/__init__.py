"""Shared utilities for lazy character sequence decoding.

This module provides the configuration object, the exception hierarchy, session
metrics and logging helpers used across the character layer and the CLI.
"""

from .config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ENCODING,
    DecodeConfig,
    ErrorPolicy,
    resolve_encoding,
)
from .exceptions import (
    CharSequenceError,
    ConfigurationError,
    IndexOutOfRangeError,
    MalformedInputError,
    SequenceClosedError,
)
from .logging import (
    SessionLogger,
    get_logger,
    new_session_id,
)
from .result import DecodeMetrics

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_ENCODING",
    "DecodeConfig",
    "ErrorPolicy",
    "resolve_encoding",
    "CharSequenceError",
    "ConfigurationError",
    "IndexOutOfRangeError",
    "MalformedInputError",
    "SequenceClosedError",
    "SessionLogger",
    "get_logger",
    "new_session_id",
    "DecodeMetrics",
]
