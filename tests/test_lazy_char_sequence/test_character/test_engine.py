"""Tests for the streaming decoder engine."""

import pytest

from lazy_char_sequence.character.engine import CloseOnce, StreamingDecoder
from lazy_char_sequence.character.sources import iter_byte_source
from lazy_char_sequence.shared.config import DecodeConfig


class TestCloseOnce:
    """Test the at-most-once close wrapper."""

    def test_callback_invoked_once(self):
        """Test that repeated calls invoke the callback only once."""
        # Arrange
        calls = []
        once = CloseOnce(lambda: calls.append(1))

        # Act
        once()
        once()

        # Assert
        assert calls == [1]
        assert once.called is True

    def test_without_callback(self):
        """Test that a missing callback is tolerated."""
        once = CloseOnce()

        once()

        assert once.called is True


class TestStreamingDecoder:
    """Test chunk production over a pull-based source."""

    def test_split_character_is_carried_forward(self):
        """Test chunk boundaries when a character straddles two pulls."""
        # Arrange
        source = iter_byte_source(["héllo".encode("utf-8")])
        engine = StreamingDecoder(source, config=DecodeConfig(chunk_size=2))

        # Act
        chunks = [str(chunk) for chunk in engine.chunks()]

        # Assert
        assert chunks == ["h", "él", "lo", ""]
        assert source.pull_sizes == [2, 2, 2]
        assert engine.metrics.pulls == 3
        assert engine.metrics.bytes_pulled == 6
        assert engine.metrics.merges == 1
        assert engine.metrics.chunks_realized == 4
        assert engine.metrics.characters_decoded == 5
        assert engine.metrics.exhausted is True

    def test_chunks_consumed_once(self):
        """Test that the chunk generator cannot be restarted."""
        engine = StreamingDecoder(iter_byte_source([b"abc"]))
        engine.chunks()

        with pytest.raises(RuntimeError, match="only be consumed once"):
            engine.chunks()

    def test_no_pull_before_first_chunk_requested(self):
        """Test that creating the generator does not pull bytes."""
        # Arrange
        pulls = []

        def pull(max_bytes):
            pulls.append(max_bytes)
            return None

        engine = StreamingDecoder(pull)

        # Act
        chunks = engine.chunks()

        # Assert
        assert pulls == []
        assert [str(chunk) for chunk in chunks] == [""]
        assert pulls == [4096]

    def test_close_called_only_on_exhaustion(self):
        """Test that the close callback runs when the source ends."""
        # Arrange
        calls = []
        engine = StreamingDecoder(
            iter_byte_source([b"ab", b"cd"]),
            close=lambda: calls.append(1),
            config=DecodeConfig(chunk_size=2),
        )
        chunks = engine.chunks()

        # Act
        next(chunks)
        before_end = list(calls)
        remaining = list(chunks)

        # Assert
        assert before_end == []
        assert calls == [1]
        assert [str(chunk) for chunk in remaining] == ["cd", ""]
        assert engine.metrics.closed is True

    def test_overflowing_leftover_is_retried(self):
        """Test that leftover bytes exceeding the output buffer are not lost."""
        # Arrange
        text = "abcdefghijklmnopqrstuvwxyz"
        engine = StreamingDecoder(
            iter_byte_source([text.encode("ascii")]),
            config=DecodeConfig(chunk_size=8),
        )
        engine.state.average_chars_per_byte = 4.0

        # Act
        decoded = "".join(str(chunk) for chunk in engine.chunks())

        # Assert
        assert decoded == text
        assert engine.metrics.overflow_retries > 0

    def test_final_flush_overflow_continues_in_new_chunk(self):
        """Test that a replaced truncated tail that does not fit gets its own chunk."""
        # Arrange
        calls = []
        engine = StreamingDecoder(
            iter_byte_source([b"abcdxy\xe2\x82"]),
            close=lambda: calls.append(1),
            config=DecodeConfig(chunk_size=8),
        )
        engine.state.average_chars_per_byte = 4.0

        # Act
        chunks = [str(chunk) for chunk in engine.chunks()]

        # Assert
        assert chunks == ["ab", "cdxy", "\ufffd"]
        assert "".join(chunks) == "abcdxy\ufffd"
        assert engine.metrics.overflow_retries == 1
        assert engine.metrics.exhausted is True
        assert calls == [1]

    def test_utf16_byte_order_mark_split(self):
        """Test that a UTF-16 source split inside its code units decodes."""
        # Arrange
        data = "hi".encode("utf-16")
        engine = StreamingDecoder(
            iter_byte_source([data]),
            config=DecodeConfig(chunk_size=3, encoding="UTF-16"),
        )

        # Act
        decoded = "".join(str(chunk) for chunk in engine.chunks())

        # Assert
        assert decoded == "hi"

    def test_session_id_assigned(self):
        """Test that every engine gets a distinct session identifier."""
        first = StreamingDecoder(iter_byte_source([]))
        second = StreamingDecoder(iter_byte_source([]))

        assert first.session_id.startswith("decode-")
        assert first.session_id != second.session_id
