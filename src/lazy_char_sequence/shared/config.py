"""Configuration classes for lazy character sequence decoding.

This module provides the immutable ``DecodeConfig`` object that controls how a
byte source is pulled and decoded, along with the ``ErrorPolicy`` symbols that
select how malformed or unmappable input is handled.
"""

import codecs
import json
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

from .exceptions import ConfigurationError

DEFAULT_CHUNK_SIZE = 4096
DEFAULT_ENCODING = "UTF-8"

# camelCase spellings accepted by from_dict
_FIELD_ALIASES = {
    "chunkSize": "chunk_size",
    "onEncodingError": "on_encoding_error",
}


class ErrorPolicy(Enum):
    """Handling for malformed input and unmappable characters."""

    REPORT = "report"     # Fail with MalformedInputError
    IGNORE = "ignore"     # Drop offending bytes and continue
    REPLACE = "replace"   # Substitute U+FFFD and continue

    @classmethod
    def resolve(cls, symbol: Union["ErrorPolicy", str]) -> "ErrorPolicy":
        """Resolve a policy symbol to an ``ErrorPolicy`` member.

        Args:
            symbol: An ``ErrorPolicy`` or one of "report", "ignore", "replace"
                (case-insensitive, an optional leading ':' is tolerated)

        Returns:
            The matching ErrorPolicy

        Raises:
            ConfigurationError: If the symbol is not recognized
        """
        if isinstance(symbol, cls):
            return symbol
        if isinstance(symbol, str):
            key = symbol.strip().lstrip(":").lower()
            for member in cls:
                if member.value == key:
                    return member
        valid = [member.value for member in cls]
        raise ConfigurationError(
            f"on_encoding_error must be one of {valid}, got {symbol!r}",
            field_name="on_encoding_error",
        )


def resolve_encoding(name: str) -> str:
    """Resolve a charset name to its canonical Python codec name.

    Raises:
        ConfigurationError: If no text codec is registered under ``name``
    """
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(
            f"encoding must be a non-empty string, got {name!r}",
            field_name="encoding",
        )
    try:
        info = codecs.lookup(name.strip())
    except LookupError as e:
        raise ConfigurationError(
            f"Unknown encoding: {name}", field_name="encoding"
        ) from e
    if not getattr(info, "_is_text_encoding", True):
        raise ConfigurationError(
            f"{name} is not a text encoding", field_name="encoding"
        )
    return info.name


@dataclass(frozen=True)
class DecodeConfig:
    """Configuration for decoding a pull-based byte source.

    Attributes:
        chunk_size: Maximum number of bytes requested per pull
        encoding: Charset name understood by the ``codecs`` registry
        on_encoding_error: Policy for malformed and unmappable input
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = DEFAULT_ENCODING
    on_encoding_error: ErrorPolicy = ErrorPolicy.REPLACE

    def __post_init__(self) -> None:
        """Validate the configuration and normalize the error policy."""
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise ConfigurationError(
                f"chunk_size must be an integer, got {self.chunk_size!r}",
                field_name="chunk_size",
            )
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be > 0", field_name="chunk_size")

        resolve_encoding(self.encoding)
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(
            self, "on_encoding_error", ErrorPolicy.resolve(self.on_encoding_error)
        )

    @property
    def canonical_encoding(self) -> str:
        """Canonical codec name for ``encoding``."""
        return resolve_encoding(self.encoding)

    def override(self, **kwargs: Any) -> "DecodeConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> DecodeConfig().override(chunk_size=16).chunk_size
            16
        """
        unknown = set(kwargs) - set(self.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration fields: {sorted(unknown)}"
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        data = asdict(self)
        data["on_encoding_error"] = self.on_encoding_error.value
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecodeConfig":
        """Create configuration from a dictionary.

        Unknown keys are ignored; ``chunkSize`` and ``onEncodingError`` are
        accepted as aliases of their snake_case fields.
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = _FIELD_ALIASES.get(key, key)
            if field_name in cls.__dataclass_fields__:
                field_values[field_name] = value
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "DecodeConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "DecodeConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Could not read config file {path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def strict(cls, **kwargs: Any) -> "DecodeConfig":
        """Preset that fails on the first malformed byte sequence."""
        return cls(on_encoding_error=ErrorPolicy.REPORT, **kwargs)

    @classmethod
    def lenient(cls, **kwargs: Any) -> "DecodeConfig":
        """Preset that substitutes U+FFFD for malformed input (the default)."""
        return cls(on_encoding_error=ErrorPolicy.REPLACE, **kwargs)

    @classmethod
    def lossy(cls, **kwargs: Any) -> "DecodeConfig":
        """Preset that silently drops malformed input."""
        return cls(on_encoding_error=ErrorPolicy.IGNORE, **kwargs)
