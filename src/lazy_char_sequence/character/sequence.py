"""Read-only character sequence over lazily decoded chunks.

``DecodedCharSequence`` presents the logical concatenation of a
``LazySequence[CharChunk]`` as one string-like value. Every query walks the
realized chunks from the start and forces more decoding only as far as it needs
to answer.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..shared.config import DecodeConfig
from ..shared.exceptions import IndexOutOfRangeError
from ..shared.logging import get_logger
from ..shared.result import DecodeMetrics
from .buffers import CharChunk
from .engine import ByteSource, CloseCallback, CloseOnce, StreamingDecoder
from .lazy import LazySequence


class CharSequence(ABC):
    """Closeable, read-only sequence of characters."""

    @abstractmethod
    def char_at(self, index: int) -> str:
        """Return the character at ``index``."""

    @abstractmethod
    def length(self) -> int:
        """Return the total number of characters."""

    @abstractmethod
    def to_string(self) -> str:
        """Return all characters as one string."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource."""


class DecodedCharSequence(CharSequence):
    """Character sequence backed by a lazy chain of decoded chunks.

    Args:
        chunks: Memoizing sequence of flipped character chunks
        close: Close callback shared with the producing engine
        metrics: Metrics of the decode session, if tracked
        session_id: Decode session identifier for log correlation
    """

    def __init__(
        self,
        chunks: LazySequence[CharChunk],
        close: Optional[CloseOnce] = None,
        metrics: Optional[DecodeMetrics] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._chunks = chunks
        self._close = close if close is not None else CloseOnce()
        self._metrics = metrics if metrics is not None else DecodeMetrics()
        self.session_id = session_id
        self.logger = get_logger(__name__, session_id, "char_sequence")

    @property
    def metrics(self) -> DecodeMetrics:
        return self._metrics

    @property
    def realized_chunk_count(self) -> int:
        return self._chunks.realized_count

    @property
    def is_exhausted(self) -> bool:
        return self._chunks.is_exhausted

    @property
    def closed(self) -> bool:
        return self._close.called

    def char_at(self, index: int) -> str:
        """Return the character at ``index``.

        Decodes only as many chunks as needed to reach ``index``.

        Raises:
            IndexOutOfRangeError: If ``index`` is negative or not less than the
                total length (established by decoding the whole source)
        """
        if index < 0:
            raise IndexOutOfRangeError(index)
        remaining = index
        for chunk in self._chunks:
            if remaining < chunk.remaining:
                return chunk.char_at(remaining)
            remaining -= chunk.remaining
        raise IndexOutOfRangeError(index, length=index - remaining)

    def length(self) -> int:
        """Return the total number of characters, decoding the whole source."""
        return sum(chunk.remaining for chunk in self._chunks)

    def to_string(self) -> str:
        """Return the whole decoded text."""
        return "".join(str(chunk) for chunk in self._chunks)

    def sub_sequence(self, start: int, end: int) -> str:
        """Return a copy of the characters in ``[start, end)``.

        Decodes only as far as ``end``.

        Raises:
            IndexOutOfRangeError: If ``start < 0``, ``end < start`` or ``end``
                is beyond the total length
        """
        if start < 0:
            raise IndexOutOfRangeError(start)
        if end < start:
            raise IndexOutOfRangeError(end)

        text, reached = self._collect(start, end)
        if reached < end:
            raise IndexOutOfRangeError(end, length=reached)
        return text

    def _collect(self, start: int, end: int) -> Tuple[str, int]:
        """Gather ``[start, end)`` clipped to the text; also return the offset reached."""
        parts: List[str] = []
        offset = 0
        for chunk in self._chunks:
            chunk_end = offset + chunk.remaining
            if chunk_end > start:
                text = str(chunk)
                parts.append(text[max(start - offset, 0):end - offset])
            offset = chunk_end
            if offset >= end:
                break
        return "".join(parts), offset

    def close(self) -> None:
        """Invoke the close callback (at most once) and stop further decoding."""
        if self._close.called:
            return
        self.logger.info(
            "Closing character sequence",
            extra={"realized_chunks": self._chunks.realized_count},
        )
        self._chunks.close()
        self._close()
        self._metrics.closed = True

    def __len__(self) -> int:
        return self.length()

    def __getitem__(self, key: Union[int, slice]) -> str:
        """Index or slice the text.

        Slices clamp to the text like ``str`` slices. Only a negative bound or
        an open stop forces the whole source to be decoded.
        """
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("slice step is not supported")
            start, stop = key.start, key.stop
            if stop is None or stop < 0 or (start is not None and start < 0):
                start, stop, _ = key.indices(self.length())
            elif start is None:
                start = 0
            if stop <= start:
                return ""
            return self._collect(start, stop)[0]
        if isinstance(key, int):
            return self.char_at(key)
        raise TypeError(f"indices must be integers or slices, not {type(key).__name__}")

    def iter_chunks(self) -> Iterator[str]:
        """Yield the text of each decoded chunk in order, decoding as it goes."""
        for chunk in self._chunks:
            if chunk.remaining:
                yield str(chunk)

    def __iter__(self) -> Iterator[str]:
        for chunk in self._chunks:
            yield from chunk

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (
            f"DecodedCharSequence(realized_chunks={self._chunks.realized_count}, "
            f"exhausted={self._chunks.is_exhausted}, closed={self.closed})"
        )

    def __enter__(self) -> "DecodedCharSequence":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def decode_byte_source(
    pull: ByteSource,
    close: Optional[CloseCallback] = None,
    config: Optional[DecodeConfig] = None,
    **options: Any,
) -> DecodedCharSequence:
    """Decode a pull-based byte source into a lazy character sequence.

    Args:
        pull: Called with a maximum byte count; returns bytes, or None / b""
            at end of data
        close: Invoked at most once, on exhaustion or explicit close
        config: Base configuration, defaults to ``DecodeConfig()``
        **options: Overrides for ``chunk_size``, ``encoding`` and
            ``on_encoding_error``

    Returns:
        DecodedCharSequence over the decoded text; nothing is pulled until the
        sequence is first queried

    Raises:
        ConfigurationError: If the configuration cannot be resolved
    """
    base = config or DecodeConfig()
    if options:
        base = base.override(**options)

    once = CloseOnce(close)
    engine = StreamingDecoder(pull, once, base)
    engine.logger.debug("Decode session created", extra=base.to_dict())
    return DecodedCharSequence(
        engine.sequence(), once, engine.metrics, engine.session_id
    )
