"""Tests for the CLI main module."""

import json

import pytest

from lazy_char_sequence.cli.main import (
    build_config,
    create_argument_parser,
    format_stats,
    main,
)
from lazy_char_sequence.shared.config import ErrorPolicy


@pytest.fixture
def sample_file(tmp_path):
    """UTF-8 file containing a multibyte character."""
    path = tmp_path / "sample.txt"
    path.write_bytes("héllo".encode("utf-8"))
    return path


class TestArgumentParser:
    """Test argument parsing and configuration building."""

    def test_global_options(self, sample_file):
        """Test that global options build the decode configuration."""
        # Arrange
        parser = create_argument_parser()

        # Act
        args = parser.parse_args([
            "--chunk-size", "2", "--encoding", "latin-1",
            "--on-encoding-error", "report", "length", str(sample_file),
        ])
        config = build_config(args)

        # Assert
        assert args.command == "length"
        assert config.chunk_size == 2
        assert config.encoding == "latin-1"
        assert config.on_encoding_error is ErrorPolicy.REPORT

    def test_defaults_without_options(self, sample_file):
        """Test that no options give the default configuration."""
        args = create_argument_parser().parse_args(["length", str(sample_file)])

        config = build_config(args)

        assert config.chunk_size == 4096
        assert config.on_encoding_error is ErrorPolicy.REPLACE

    def test_invalid_policy_choice(self, sample_file):
        """Test that argparse rejects unknown policies."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(
                ["--on-encoding-error", "panic", "length", str(sample_file)]
            )


class TestCommands:
    """Test CLI subcommands."""

    def test_length(self, sample_file, capsys):
        """Test printing the character count."""
        exit_code = main(["--chunk-size", "1", "length", str(sample_file)])

        assert exit_code == 0
        assert capsys.readouterr().out == "5\n"

    def test_char_at(self, sample_file, capsys):
        """Test printing one character."""
        exit_code = main(["char-at", str(sample_file), "1"])

        assert exit_code == 0
        assert capsys.readouterr().out == "é\n"

    def test_char_at_out_of_range(self, sample_file, capsys):
        """Test that an out-of-range index fails with an error message."""
        exit_code = main(["char-at", str(sample_file), "10"])

        assert exit_code == 1
        assert "Error" in capsys.readouterr().err

    def test_decode_to_stdout(self, sample_file, capsys):
        """Test writing decoded text to stdout."""
        exit_code = main(["--chunk-size", "2", "decode", str(sample_file)])

        assert exit_code == 0
        assert capsys.readouterr().out == "héllo"

    def test_decode_to_file(self, sample_file, tmp_path):
        """Test writing decoded text to an output file."""
        # Arrange
        output = tmp_path / "out.txt"

        # Act
        exit_code = main(["decode", str(sample_file), "--output", str(output)])

        # Assert
        assert exit_code == 0
        assert output.read_text(encoding="utf-8") == "héllo"

    def test_stats_json(self, sample_file, capsys):
        """Test JSON statistics output."""
        # Act
        exit_code = main(["--chunk-size", "2", "stats", str(sample_file)])

        # Assert
        assert exit_code == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["length"] == 5
        assert stats["config"]["chunk_size"] == 2
        assert stats["metrics"]["bytes_pulled"] == 6
        assert stats["metrics"]["merges"] == 1
        assert stats["metrics"]["exhausted"] is True
        assert set(stats["memory_mb"]) == {"before", "after", "delta"}

    def test_stats_text(self, sample_file, capsys):
        """Test plain-text statistics output."""
        exit_code = main(["stats", str(sample_file), "--format", "text"])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "Characters: 5" in output
        assert "Bytes read: 6" in output
        assert "Memory:" in output

    def test_config_file(self, tmp_path, capsys):
        """Test decoding with settings from a configuration file."""
        # Arrange
        data_path = tmp_path / "latin.txt"
        data_path.write_bytes("café".encode("latin-1"))
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"encoding": "latin-1", "chunkSize": 1}))

        # Act
        exit_code = main(["--config", str(config_path), "decode", str(data_path)])

        # Assert
        assert exit_code == 0
        assert capsys.readouterr().out == "café"


class TestErrors:
    """Test CLI error handling and exit codes."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help and fails."""
        exit_code = main([])

        assert exit_code == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_missing_file(self, tmp_path, capsys):
        """Test that a missing input file fails cleanly."""
        exit_code = main(["length", str(tmp_path / "missing.txt")])

        assert exit_code == 1
        assert "Error" in capsys.readouterr().err

    def test_unknown_encoding(self, sample_file, capsys):
        """Test that an unknown encoding fails cleanly."""
        exit_code = main(["--encoding", "no-such-charset", "length", str(sample_file)])

        assert exit_code == 1
        assert "Unknown encoding" in capsys.readouterr().err

    def test_malformed_input_with_report(self, tmp_path, capsys):
        """Test that malformed input under the report policy fails."""
        # Arrange
        path = tmp_path / "bad.txt"
        path.write_bytes(b"ok\x80")

        # Act
        exit_code = main(["--on-encoding-error", "report", "length", str(path)])

        # Assert
        assert exit_code == 1
        assert "Malformed" in capsys.readouterr().err


class TestFormatStats:
    """Test statistics formatting."""

    def test_text_format(self):
        """Test the text layout of statistics."""
        stats = {
            "file": "a.txt",
            "length": 3,
            "config": {"encoding": "UTF-8", "on_encoding_error": "replace"},
            "metrics": {
                "bytes_pulled": 3, "pulls": 1, "chunks_realized": 2,
                "merges": 0, "overflow_retries": 0,
            },
        }

        lines = format_stats(stats, "text").splitlines()

        assert lines[0] == "File: a.txt"
        assert lines[1] == "Encoding: UTF-8 (on error: replace)"
        assert lines[2] == "Characters: 3"
