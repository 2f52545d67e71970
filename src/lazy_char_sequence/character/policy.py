"""Error-policy resolution and decode-step result classification.

A decode step reports its outcome as a ``DecodeOutcome``. Only underflow and
overflow are ordinary outcomes; anything else is turned into a
``MalformedInputError`` by ``classify_result``.
"""

import codecs
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..shared.config import ErrorPolicy
from ..shared.exceptions import MalformedInputError

# Python codec error handlers for each policy
_CODING_ERROR_ACTIONS = {
    ErrorPolicy.REPORT: "strict",
    ErrorPolicy.IGNORE: "ignore",
    ErrorPolicy.REPLACE: "replace",
}


def coding_error_action(symbol: Union[ErrorPolicy, str]) -> str:
    """Map a policy symbol to the codec error handler that implements it.

    The same handler governs malformed input and unmappable characters.

    Raises:
        ConfigurationError: If the symbol is not a known policy
    """
    return _CODING_ERROR_ACTIONS[ErrorPolicy.resolve(symbol)]


class CoderResult(Enum):
    """Raw outcome of a single decode or flush step."""

    UNDERFLOW = "underflow"      # All input consumed, more input is needed
    OVERFLOW = "overflow"        # Output buffer full, input remains
    MALFORMED = "malformed"      # Invalid byte sequence
    UNMAPPABLE = "unmappable"    # Valid sequence with no character mapping


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of a decode step with failure details when it did not succeed."""

    result: CoderResult
    encoding: Optional[str] = None
    reason: Optional[str] = None
    offset: Optional[int] = None

    @classmethod
    def from_unicode_error(
        cls, error: UnicodeError, encoding: str, base_offset: int = 0
    ) -> "DecodeOutcome":
        """Build a failed outcome from a codec exception."""
        reason = getattr(error, "reason", None) or str(error)
        start = getattr(error, "start", None)
        offset = base_offset + start if isinstance(start, int) else None
        result = (
            CoderResult.UNMAPPABLE if is_charmap_codec(encoding) else CoderResult.MALFORMED
        )
        return cls(result, encoding=encoding, reason=reason, offset=offset)


def is_charmap_codec(encoding: Optional[str]) -> bool:
    """Whether ``encoding`` decodes through a single-byte lookup table.

    Every byte is a complete sequence in such codecs, so any decode failure
    is a byte with no character mapping rather than a malformed sequence.
    The outcome label is the only thing that depends on this.
    """
    if not encoding:
        return False
    try:
        info = codecs.lookup(encoding)
    except LookupError:
        return False
    module = sys.modules.get(getattr(info.incrementaldecoder, "__module__", ""))
    return getattr(module, "decoding_table", None) is not None


UNDERFLOW = DecodeOutcome(CoderResult.UNDERFLOW)
OVERFLOW = DecodeOutcome(CoderResult.OVERFLOW)


def classify_result(outcome: DecodeOutcome) -> CoderResult:
    """Interpret a decode-step outcome as underflow or overflow.

    Raises:
        MalformedInputError: For any outcome that is neither
    """
    if outcome.result in (CoderResult.UNDERFLOW, CoderResult.OVERFLOW):
        return outcome.result

    where = f" at byte offset {outcome.offset}" if outcome.offset is not None else ""
    raise MalformedInputError(
        f"Malformed {outcome.encoding or 'byte-stream'} input{where}: "
        f"{outcome.reason or outcome.result.value}",
        encoding=outcome.encoding,
        reason=outcome.reason,
        offset=outcome.offset,
    )
