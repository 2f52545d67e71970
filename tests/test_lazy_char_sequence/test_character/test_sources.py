"""Tests for byte-source adapters."""

import io

import pytest

from lazy_char_sequence.character.sources import (
    IterableByteSource,
    decode_bytes,
    decode_file,
    decode_reader,
    iter_byte_source,
    reader_byte_source,
)
from lazy_char_sequence.shared.exceptions import ConfigurationError


class TrackingReader(io.BytesIO):
    """BytesIO that records the sizes it was asked for."""

    def __init__(self, data):
        super().__init__(data)
        self.requests = []

    def read(self, size=-1):
        self.requests.append(size)
        return super().read(size)


class TestReaderByteSource:
    """Test pull functions over binary readers."""

    def test_reads_in_requested_sizes(self):
        """Test that each pull reads at most the requested size."""
        # Arrange
        pull = reader_byte_source(io.BytesIO(b"abcde"))

        # Act
        pulled = [pull(2), pull(2), pull(2), pull(2)]

        # Assert
        assert pulled == [b"ab", b"cd", b"e", None]

    def test_text_reader_rejected(self):
        """Test that a text-mode reader is reported as a type error."""
        pull = reader_byte_source(io.StringIO("abc"))

        with pytest.raises(TypeError, match="binary mode"):
            pull(2)

    def test_non_reader_rejected(self):
        """Test that objects without read are rejected up front."""
        with pytest.raises(TypeError):
            reader_byte_source(b"abc")


class TestIterableByteSource:
    """Test the iterable-backed byte source."""

    def test_oversize_chunks_are_split(self):
        """Test that chunks longer than the request are served across pulls."""
        # Arrange
        source = IterableByteSource([b"abcdef", b"", b"gh"])

        # Act
        pulled = [source(4), source(4), source(4), source(4)]

        # Assert
        assert pulled == [b"abcd", b"ef", b"gh", None]
        assert source.pull_sizes == [4, 2, 2]

    def test_non_positive_request_rejected(self):
        """Test that a zero-byte request is invalid."""
        with pytest.raises(ValueError):
            iter_byte_source([b"a"])(0)

    def test_accepts_bytearray_and_memoryview(self):
        """Test that any bytes-like chunk is accepted."""
        source = iter_byte_source([bytearray(b"ab"), memoryview(b"cd")])

        assert [source(8), source(8)] == [b"ab", b"cd"]


class TestDecodeReader:
    """Test decoding of binary readers."""

    def test_reader_closed_on_exhaustion(self):
        """Test that the reader is closed once fully decoded."""
        # Arrange
        reader = TrackingReader("café".encode("utf-8"))
        seq = decode_reader(reader, chunk_size=3)

        # Act
        text = seq.to_string()

        # Assert
        assert text == "café"
        assert reader.closed is True
        assert set(reader.requests) == {3}

    def test_reader_left_open(self):
        """Test that close=False leaves the reader to the caller."""
        reader = io.BytesIO(b"abc")

        seq = decode_reader(reader, close=False)
        seq.to_string()
        seq.close()

        assert reader.closed is False


class TestDecodeFile:
    """Test decoding of files on disk."""

    def test_decodes_file_and_closes_it(self, tmp_path):
        """Test decoding a latin-1 file in small pulls."""
        # Arrange
        path = tmp_path / "sample.txt"
        path.write_bytes("naïve façade".encode("latin-1"))

        # Act
        with decode_file(path, encoding="latin-1", chunk_size=4) as seq:
            length = seq.length()
            text = seq.to_string()

        # Assert
        assert length == 12
        assert text == "naïve façade"
        assert seq.closed is True

    def test_configuration_checked_before_open(self, tmp_path):
        """Test that a bad encoding fails before the path is touched."""
        with pytest.raises(ConfigurationError):
            decode_file(tmp_path / "missing.txt", encoding="no-such-charset")

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises the usual OSError."""
        with pytest.raises(FileNotFoundError):
            decode_file(tmp_path / "missing.txt")


class TestDecodeBytes:
    """Test in-memory decoding."""

    def test_shift_jis_single_byte_pulls(self):
        """Test a double-byte charset decoded one byte per pull."""
        data = "日本語".encode("shift_jis")

        seq = decode_bytes(data, encoding="shift_jis", chunk_size=1)

        assert seq.to_string() == "日本語"
        assert seq.length() == 3
