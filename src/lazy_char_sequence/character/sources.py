"""Byte-source adapters for readers, files, iterables and in-memory bytes.

A byte source is a function ``pull(max_bytes)`` returning up to ``max_bytes``
bytes, or ``None`` at end of data. These helpers build one from common inputs
and wire up the matching close callback.
"""

from collections import deque
from pathlib import Path
from typing import Any, BinaryIO, Deque, Iterable, List, Optional, Union

from ..shared.config import DecodeConfig
from .buffers import BytesLike
from .engine import ByteSource
from .sequence import DecodedCharSequence, decode_byte_source


def reader_byte_source(reader: BinaryIO) -> ByteSource:
    """Build a byte source over any object with a binary ``read(n)`` method."""
    if not hasattr(reader, "read"):
        raise TypeError(f"Expected a binary reader, got {type(reader).__name__}")

    def pull(max_bytes: int) -> Optional[bytes]:
        data = reader.read(max_bytes)
        if isinstance(data, str):
            raise TypeError("Reader returned text; open it in binary mode")
        return data or None

    return pull


class IterableByteSource:
    """Byte source over an iterable of byte chunks.

    Chunks larger than the requested count are split and the remainder is
    served by the next pull, so byte order is always preserved. Empty chunks
    are skipped rather than treated as end of data.
    """

    def __init__(self, chunks: Iterable[BytesLike]) -> None:
        self._chunks = iter(chunks)
        self._pending: Deque[bytes] = deque()
        self.pull_sizes: List[int] = []

    def __call__(self, max_bytes: int) -> Optional[bytes]:
        if max_bytes <= 0:
            raise ValueError(f"max_bytes must be > 0, got {max_bytes}")
        data = self._next_chunk()
        if data is None:
            return None
        if len(data) > max_bytes:
            self._pending.appendleft(data[max_bytes:])
            data = data[:max_bytes]
        self.pull_sizes.append(len(data))
        return data

    def _next_chunk(self) -> Optional[bytes]:
        if self._pending:
            return self._pending.popleft()
        for chunk in self._chunks:
            if chunk:
                return bytes(chunk)
        return None


def iter_byte_source(chunks: Iterable[BytesLike]) -> IterableByteSource:
    """Build a byte source that replays ``chunks`` in order."""
    return IterableByteSource(chunks)


def decode_reader(
    reader: BinaryIO,
    close: bool = True,
    config: Optional[DecodeConfig] = None,
    **options: Any,
) -> DecodedCharSequence:
    """Decode a binary reader lazily.

    Args:
        reader: Object with a binary ``read(n)`` method
        close: Close the reader once it is exhausted or the sequence is closed
        config: Base decode configuration
        **options: Configuration overrides
    """
    callback = getattr(reader, "close", None) if close else None
    return decode_byte_source(reader_byte_source(reader), callback, config, **options)


def decode_file(
    path: Union[str, Path],
    config: Optional[DecodeConfig] = None,
    **options: Any,
) -> DecodedCharSequence:
    """Open ``path`` in binary mode and decode it lazily.

    The file is closed on exhaustion or when the sequence is closed. The
    configuration is validated before the file is opened.
    """
    base = config or DecodeConfig()
    if options:
        base = base.override(**options)
    handle = open(path, "rb")
    try:
        return decode_reader(handle, close=True, config=base)
    except Exception:
        handle.close()
        raise


def decode_bytes(
    data: BytesLike,
    config: Optional[DecodeConfig] = None,
    **options: Any,
) -> DecodedCharSequence:
    """Decode an in-memory byte string through the streaming engine."""
    return decode_byte_source(iter_byte_source([data]), None, config, **options)
