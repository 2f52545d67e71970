"""Decode and flush primitives over persistent incremental decoder state.

``decode_step`` is a pure buffer-to-buffer transform: it moves as many decoded
characters as fit from a ``ByteChunk`` into a ``CharChunk`` and never touches
the byte source. Incomplete trailing byte sequences are left unconsumed in the
input chunk so the engine can carry them forward as leftover bytes.
"""

import codecs
from typing import Optional, Tuple

from ..shared.config import ErrorPolicy, resolve_encoding
from ..shared.exceptions import ConfigurationError
from .buffers import ByteChunk, CharChunk
from .policy import (
    OVERFLOW,
    UNDERFLOW,
    CoderResult,
    DecodeOutcome,
    classify_result,
    coding_error_action,
)

# Expected decoded characters per input byte, keyed by codec-name prefix
_AVERAGE_CHARS_PER_BYTE = (
    ("utf-16", 0.5),
    ("utf-32", 0.25),
)
DEFAULT_AVERAGE_CHARS_PER_BYTE = 1.0


def average_chars_per_byte(encoding: str) -> float:
    """Return the sizing heuristic for output buffers of ``encoding``."""
    name = resolve_encoding(encoding)
    for prefix, ratio in _AVERAGE_CHARS_PER_BYTE:
        if name.startswith(prefix):
            return ratio
    return DEFAULT_AVERAGE_CHARS_PER_BYTE


class DecoderState:
    """Charset, error action and the stateful incremental decoder behind them.

    The decoder keeps codec state such as a detected UTF-16 byte order between
    calls. It never keeps partial byte sequences across calls; those are
    handed back to the caller's input chunk.
    """

    def __init__(self, encoding: str, on_encoding_error: ErrorPolicy) -> None:
        self.encoding = resolve_encoding(encoding)
        self.policy = ErrorPolicy.resolve(on_encoding_error)
        self.errors = coding_error_action(self.policy)
        try:
            factory = codecs.getincrementaldecoder(self.encoding)
        except LookupError as e:
            raise ConfigurationError(
                f"Encoding {self.encoding} has no incremental decoder",
                field_name="encoding",
            ) from e
        self.decoder = factory(errors=self.errors)
        self.average_chars_per_byte = average_chars_per_byte(self.encoding)

    def snapshot(self) -> Tuple[bytes, int]:
        return self.decoder.getstate()

    def restore(self, state: Tuple[bytes, int]) -> None:
        self.decoder.setstate(state)

    def release_pending(self) -> int:
        """Drop bytes buffered inside the decoder and return how many there were."""
        pending, flag = self.decoder.getstate()
        if pending:
            self.decoder.setstate((b"", flag))
        return len(pending)

    def __repr__(self) -> str:
        return f"DecoderState(encoding={self.encoding!r}, policy={self.policy.value!r})"


def decode_step(
    state: DecoderState,
    in_bytes: ByteChunk,
    out_chars: CharChunk,
    end_of_input: bool = False,
) -> CoderResult:
    """Decode bytes from ``in_bytes`` into ``out_chars``.

    Args:
        state: Decoder state shared across steps
        in_bytes: Input chunk, advanced past the bytes consumed
        out_chars: Output chunk receiving as many characters as fit
        end_of_input: Treat an incomplete trailing sequence as final

    Returns:
        CoderResult.UNDERFLOW when all decodable input was consumed, or
        CoderResult.OVERFLOW when ``out_chars`` filled up first

    Raises:
        MalformedInputError: If the error policy does not absorb bad input
    """
    return classify_result(_decode(state, in_bytes, out_chars, end_of_input))


def flush(
    state: DecoderState,
    out_chars: CharChunk,
    in_bytes: Optional[ByteChunk] = None,
) -> CoderResult:
    """Signal end of input, then drain remaining decoder state.

    Any bytes left in ``in_bytes`` are decoded as final input, producing
    substitutes for a truncated sequence according to the error policy.

    Returns:
        CoderResult.OVERFLOW if ``out_chars`` filled before everything was
        emitted (call again with a fresh buffer), else CoderResult.UNDERFLOW

    Raises:
        MalformedInputError: If either step meets malformed input
    """
    if in_bytes is None:
        in_bytes = ByteChunk.empty()
    if decode_step(state, in_bytes, out_chars, end_of_input=True) is CoderResult.OVERFLOW:
        return CoderResult.OVERFLOW
    return classify_result(_drain(state, out_chars))


def _decode(
    state: DecoderState, in_bytes: ByteChunk, out_chars: CharChunk, final: bool
) -> DecodeOutcome:
    data = in_bytes.peek()
    before = state.snapshot()
    try:
        text = state.decoder.decode(data, final)
    except UnicodeError as e:
        state.restore(before)
        return DecodeOutcome.from_unicode_error(e, state.encoding)

    if len(text) <= out_chars.free:
        out_chars.put(text)
        in_bytes.advance(len(data) - state.release_pending())
        return UNDERFLOW

    state.restore(before)
    return _decode_bounded(state, data, in_bytes, out_chars, final)


def _decode_bounded(
    state: DecoderState,
    data: bytes,
    in_bytes: ByteChunk,
    out_chars: CharChunk,
    final: bool,
) -> DecodeOutcome:
    """Decode byte by byte, stopping before the output chunk would overflow."""
    consumed = 0
    overflowed = False
    for index in range(len(data)):
        before = state.snapshot()
        last = final and index == len(data) - 1
        try:
            piece = state.decoder.decode(data[index:index + 1], last)
        except UnicodeError as e:
            state.restore(before)
            return DecodeOutcome.from_unicode_error(
                e, state.encoding, base_offset=index - len(before[0])
            )
        if len(piece) > out_chars.free:
            state.restore(before)
            overflowed = True
            break
        out_chars.put(piece)
        consumed = index + 1

    in_bytes.advance(consumed - state.release_pending())
    return OVERFLOW if overflowed else UNDERFLOW


def _drain(state: DecoderState, out_chars: CharChunk) -> DecodeOutcome:
    before = state.snapshot()
    try:
        tail = state.decoder.decode(b"", True)
    except UnicodeError as e:
        state.restore(before)
        return DecodeOutcome.from_unicode_error(e, state.encoding)
    if len(tail) > out_chars.free:
        state.restore(before)
        return OVERFLOW
    out_chars.put(tail)
    state.decoder.reset()
    return UNDERFLOW
