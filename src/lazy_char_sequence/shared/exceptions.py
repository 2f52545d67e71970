"""Exception hierarchy for lazy character sequence decoding.

Every error raised by the package derives from ``CharSequenceError`` so callers
can catch the whole family at once, while the builtin bases keep the errors
usable by code that only knows about ``ValueError`` or ``IndexError``.
"""

from typing import Optional


class CharSequenceError(Exception):
    """Base exception for all decoding and sequence errors."""


class ConfigurationError(CharSequenceError, ValueError):
    """Raised when a decode configuration cannot be resolved."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class MalformedInputError(CharSequenceError, ValueError):
    """Raised when a decode step meets bytes the error policy does not absorb.

    Attributes:
        encoding: Canonical name of the charset being decoded
        reason: Codec-supplied description of the failure
        offset: Offset of the offending byte within the step input, if known
    """

    def __init__(
        self,
        message: str,
        encoding: Optional[str] = None,
        reason: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.encoding = encoding
        self.reason = reason
        self.offset = offset


class IndexOutOfRangeError(CharSequenceError, IndexError):
    """Raised when a character index falls outside the decoded text."""

    def __init__(self, index: int, length: Optional[int] = None) -> None:
        if length is None:
            message = f"Character index out of range: {index}"
        else:
            message = f"Character index out of range: {index} (length {length})"
        super().__init__(message)
        self.index = index
        self.length = length


class SequenceClosedError(CharSequenceError):
    """Raised when a closed sequence is asked to decode more input."""
