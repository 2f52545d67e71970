"""Memoizing, pull-driven lazy sequence.

``LazySequence`` wraps an iterator and realizes its elements only when they are
first observed. Realized elements are cached in order, so every later
traversal replays them without touching the iterator again.
"""

from typing import Generic, Iterator, List, Optional, TypeVar

from ..shared.exceptions import SequenceClosedError

T = TypeVar("T")


class LazySequence(Generic[T]):
    """Ordered sequence that computes each element once, on first observation.

    A failure raised by the underlying iterator is recorded and re-raised on
    every later attempt to realize past the last cached element; the elements
    realized before the failure remain readable.
    """

    def __init__(self, source: Iterator[T]) -> None:
        self._source = source
        self._realized: List[T] = []
        self._exhausted = False
        self._closed = False
        self._failure: Optional[BaseException] = None

    @property
    def realized_count(self) -> int:
        return len(self._realized)

    @property
    def is_exhausted(self) -> bool:
        return self._exhausted

    @property
    def failure(self) -> Optional[BaseException]:
        return self._failure

    def _realize_next(self) -> bool:
        """Realize one more element. Returns False once the source is exhausted."""
        if self._exhausted:
            return False
        if self._failure is not None:
            raise self._failure
        if self._closed:
            raise SequenceClosedError("Cannot decode further input after close()")

        try:
            item = next(self._source)
        except StopIteration:
            self._exhausted = True
            return False
        except BaseException as e:
            # the source iterator is dead after any exception, interrupts included
            self._failure = e
            raise

        self._realized.append(item)
        return True

    def get(self, index: int) -> Optional[T]:
        """Return element ``index``, realizing up to it; None past the end."""
        if index < 0:
            raise IndexError(f"negative indexes are not supported: {index}")
        while index >= len(self._realized):
            if not self._realize_next():
                return None
        return self._realized[index]

    def realize_all(self) -> List[T]:
        """Force the whole sequence and return a copy of the realized elements."""
        while self._realize_next():
            pass
        return list(self._realized)

    def close(self) -> None:
        """Stop further realization and release the underlying iterator."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._source, "close", None)
        if close is not None and not self._exhausted:
            close()

    def __iter__(self) -> Iterator[T]:
        index = 0
        while True:
            if index < len(self._realized):
                yield self._realized[index]
                index += 1
            elif not self._realize_next():
                return

    def __repr__(self) -> str:
        return (
            f"LazySequence(realized={len(self._realized)}, "
            f"exhausted={self._exhausted})"
        )
