"""Bounded byte and character buffers used by the streaming decoder.

``ByteChunk`` is a read-positioned view over raw bytes. ``CharChunk`` collects
decoded characters up to a fixed capacity and becomes an immutable, readable
chunk once flipped.
"""

from typing import Iterator, List, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


class ByteChunk:
    """Ordered view over raw bytes with a read position and a limit."""

    __slots__ = ("_data", "_position", "_limit")

    def __init__(self, data: BytesLike, position: int = 0, limit: int = -1) -> None:
        self._data = bytes(data)
        if limit < 0:
            limit = len(self._data)
        if not 0 <= position <= limit <= len(self._data):
            raise ValueError(
                f"Invalid byte chunk bounds: position={position}, limit={limit}, "
                f"size={len(self._data)}"
            )
        self._position = position
        self._limit = limit

    @classmethod
    def wrap(cls, data: BytesLike) -> "ByteChunk":
        """Wrap bytes in a chunk positioned at its start."""
        return cls(data)

    @classmethod
    def empty(cls) -> "ByteChunk":
        return cls(b"")

    @property
    def position(self) -> int:
        return self._position

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def remaining(self) -> int:
        """Number of unread bytes between position and limit."""
        return self._limit - self._position

    def has_remaining(self) -> bool:
        return self._position < self._limit

    def peek(self) -> bytes:
        """Return the unread bytes without consuming them."""
        return self._data[self._position:self._limit]

    def advance(self, count: int) -> None:
        """Mark ``count`` bytes as consumed."""
        if count < 0 or count > self.remaining:
            raise ValueError(
                f"Cannot advance {count} bytes with {self.remaining} remaining"
            )
        self._position += count

    def read(self) -> bytes:
        """Consume and return all unread bytes."""
        data = self.peek()
        self._position = self._limit
        return data

    def __repr__(self) -> str:
        return (
            f"ByteChunk(position={self._position}, limit={self._limit}, "
            f"remaining={self.remaining})"
        )


def merge_byte_chunks(left: ByteChunk, right: ByteChunk) -> ByteChunk:
    """Concatenate the unread bytes of ``left`` then ``right`` into a new chunk.

    Both inputs are consumed. The result is positioned at its start.
    """
    return ByteChunk.wrap(left.read() + right.read())


class CharChunk:
    """Buffer of decoded characters with a fixed capacity.

    The chunk is writable until ``flip`` is called; afterwards it is read-only
    and exposes its filled range ``[0, length)``.
    """

    __slots__ = ("_capacity", "_parts", "_size", "_text")

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self._capacity = capacity
        self._parts: List[str] = []
        self._size = 0
        self._text: Optional[str] = None

    @classmethod
    def allocate(cls, capacity: int) -> "CharChunk":
        return cls(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_flipped(self) -> bool:
        return self._text is not None

    @property
    def free(self) -> int:
        """Number of characters that can still be written."""
        return self._capacity - self._size

    @property
    def remaining(self) -> int:
        """Number of readable characters once flipped (written so far otherwise)."""
        return self._size

    def put(self, text: str) -> None:
        """Append decoded characters."""
        if self._text is not None:
            raise ValueError("Cannot write to a flipped CharChunk")
        if len(text) > self.free:
            raise ValueError(
                f"CharChunk overflow: {len(text)} characters, {self.free} free"
            )
        if text:
            self._parts.append(text)
            self._size += len(text)

    def flip(self) -> "CharChunk":
        """Freeze the chunk to its filled range and return it."""
        if self._text is None:
            self._text = "".join(self._parts)
            self._parts = []
        return self

    def char_at(self, index: int) -> str:
        if self._text is None:
            raise ValueError("CharChunk must be flipped before reading")
        if not 0 <= index < self._size:
            raise IndexError(f"CharChunk index out of range: {index}")
        return self._text[index]

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[str]:
        return iter(str(self))

    def __str__(self) -> str:
        if self._text is None:
            return "".join(self._parts)
        return self._text

    def __repr__(self) -> str:
        state = "flipped" if self.is_flipped else "filling"
        return f"CharChunk({state}, length={self._size}, capacity={self._capacity})"
