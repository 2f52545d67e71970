"""Metrics objects describing a decode session.

The engine updates a single ``DecodeMetrics`` instance as it pulls bytes and
realizes character chunks; the sequence view exposes it read-only to callers.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class DecodeMetrics:
    """Counters for one decode session."""

    pulls: int = 0
    bytes_pulled: int = 0
    chunks_realized: int = 0
    characters_decoded: int = 0
    merges: int = 0
    overflow_retries: int = 0
    exhausted: bool = False
    closed: bool = False

    @property
    def characters_per_byte(self) -> float:
        """Observed decode ratio so far."""
        if self.bytes_pulled == 0:
            return 0.0
        return self.characters_decoded / self.bytes_pulled

    @property
    def average_chunk_length(self) -> float:
        """Mean number of characters per realized chunk."""
        if self.chunks_realized == 0:
            return 0.0
        return self.characters_decoded / self.chunks_realized

    def record_pull(self, byte_count: int) -> None:
        self.pulls += 1
        self.bytes_pulled += byte_count

    def record_chunk(self, char_count: int) -> None:
        self.chunks_realized += 1
        self.characters_decoded += char_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a dictionary including derived ratios."""
        data = asdict(self)
        data["characters_per_byte"] = self.characters_per_byte
        data["average_chunk_length"] = self.average_chunk_length
        return data
