"""Streaming decoder engine producing a lazy sequence of character chunks.

The engine pulls bytes on demand, decodes them against persistent decoder
state and yields flipped ``CharChunk`` objects one at a time. Bytes left over
from a step (a character split by a pull boundary) are always decoded before
new bytes are consumed, so characters come out in exact source order however
the source splits its reads.
"""

import logging
import math
from typing import Callable, Iterator, Optional, Union

from ..shared.config import DecodeConfig
from ..shared.exceptions import MalformedInputError
from ..shared.logging import SessionLogger, get_logger, new_session_id
from ..shared.result import DecodeMetrics
from .buffers import BytesLike, ByteChunk, CharChunk, merge_byte_chunks
from .decoder import DecoderState, decode_step, flush
from .lazy import LazySequence
from .policy import CoderResult

# pull(max_bytes) -> bytes, or None / b"" at end of data
ByteSource = Callable[[int], Optional[BytesLike]]
CloseCallback = Callable[[], None]


class CloseOnce:
    """Close callback wrapper that invokes the wrapped callable at most once."""

    def __init__(self, callback: Optional[CloseCallback] = None) -> None:
        self._callback = callback
        self._called = False

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self) -> None:
        if self._called:
            return
        self._called = True
        if self._callback is not None:
            self._callback()


class StreamingDecoder:
    """Drives decode and flush steps over a pull-based byte source.

    Args:
        pull: Byte source called with the maximum number of bytes wanted
        close: Callback invoked once, when the source is exhausted
        config: Decode configuration (chunk size, encoding, error policy)
        metrics: Optional metrics object to update
        session_id: Optional identifier used to correlate log records

    Raises:
        ConfigurationError: If the encoding or error policy cannot be resolved
    """

    def __init__(
        self,
        pull: ByteSource,
        close: Union[CloseOnce, CloseCallback, None] = None,
        config: Optional[DecodeConfig] = None,
        metrics: Optional[DecodeMetrics] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config = config or DecodeConfig()
        self.state = DecoderState(self.config.encoding, self.config.on_encoding_error)
        self.metrics = metrics if metrics is not None else DecodeMetrics()
        self.session_id = session_id or new_session_id()
        self.close = close if isinstance(close, CloseOnce) else CloseOnce(close)
        self._pull = pull
        self._started = False
        self.logger: SessionLogger = get_logger(
            __name__, self.session_id, "streaming_decoder"
        )

    def sequence(self) -> LazySequence[CharChunk]:
        """Return the memoizing sequence of decoded chunks for this engine."""
        return LazySequence(self.chunks())

    def chunks(self) -> Iterator[CharChunk]:
        """Yield flipped character chunks until the byte source is exhausted.

        May only be iterated once per engine; wrap it in a ``LazySequence`` to
        replay realized chunks.
        """
        if self._started:
            raise RuntimeError("StreamingDecoder.chunks() can only be consumed once")
        self._started = True
        return self._produce()

    def _allocate(self, leftover: Optional[ByteChunk], scale: int = 1) -> CharChunk:
        pending = leftover.remaining if leftover is not None else 0
        capacity = math.ceil(
            (pending + self.config.chunk_size) / self.state.average_chars_per_byte
        )
        return CharChunk.allocate(capacity * scale)

    def _emit(self, out: CharChunk) -> CharChunk:
        out.flip()
        self.metrics.record_chunk(len(out))
        return out

    def _produce(self) -> Iterator[CharChunk]:
        chunk_size = self.config.chunk_size
        leftover: Optional[ByteChunk] = None
        scale = 1

        while True:
            out = self._allocate(leftover, scale)
            scale = 1

            if leftover is not None:
                before = leftover.remaining
                result = self._decode(leftover, out)
                if result is CoderResult.OVERFLOW:
                    # leftover alone does not fit, retry it with a fresh buffer
                    self.metrics.overflow_retries += 1
                    if len(out) == 0 and leftover.remaining == before:
                        scale = 2
                    self.logger.warning(
                        "Leftover bytes overflowed output buffer, retrying",
                        extra={"leftover": leftover.remaining, "capacity": out.capacity},
                    )
                    yield self._emit(out)
                    continue

            data = self._pull(chunk_size)
            if not data:
                yield from self._finish(leftover, out)
                return

            self.metrics.record_pull(len(data))
            incoming = ByteChunk.wrap(data)
            if leftover is not None and leftover.has_remaining():
                self.metrics.merges += 1
                self.logger.debug(
                    "Merging leftover bytes with pulled bytes",
                    extra={"leftover": leftover.remaining, "pulled": incoming.remaining},
                )
                incoming = merge_byte_chunks(leftover, incoming)

            result = self._decode(incoming, out)
            if self.logger.is_enabled_for(logging.DEBUG):
                self.logger.debug(
                    "Decoded pulled bytes",
                    extra={
                        "pulled": len(data),
                        "chars": len(out),
                        "unconsumed": incoming.remaining,
                        "result": result.value,
                    },
                )
            yield self._emit(out)
            leftover = incoming if incoming.has_remaining() else None

    def _finish(self, leftover: Optional[ByteChunk], out: CharChunk) -> Iterator[CharChunk]:
        tail = leftover if leftover is not None else ByteChunk.empty()
        while self._flush(tail, out) is CoderResult.OVERFLOW:
            self.metrics.overflow_retries += 1
            self.logger.warning(
                "Final flush overflowed output buffer, continuing in a new chunk",
                extra={"leftover": tail.remaining, "capacity": out.capacity},
            )
            yield self._emit(out)
            out = self._allocate(tail, 2 if len(out) == 0 else 1)

        self.metrics.exhausted = True
        self.logger.info(
            "Byte source exhausted",
            extra={
                "bytes_pulled": self.metrics.bytes_pulled,
                "characters": self.metrics.characters_decoded + len(out),
            },
        )
        self.close()
        self.metrics.closed = self.close.called
        yield self._emit(out)

    def _decode(self, in_bytes: ByteChunk, out: CharChunk) -> CoderResult:
        try:
            return decode_step(self.state, in_bytes, out)
        except MalformedInputError as e:
            self.logger.error(f"Decoding failed: {e}", extra={"encoding": self.state.encoding})
            raise

    def _flush(self, in_bytes: ByteChunk, out: CharChunk) -> CoderResult:
        try:
            return flush(self.state, out, in_bytes)
        except MalformedInputError as e:
            self.logger.error(f"Final flush failed: {e}", extra={"encoding": self.state.encoding})
            raise
