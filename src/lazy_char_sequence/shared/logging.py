"""Structured logging utilities for lazy character sequence decoding.

This module provides session-aware logging so that records emitted by the
decoder engine, the lazy chain and the sequence view of one decode session can
be correlated.
"""

import itertools
import logging
from typing import Any, Dict, Optional

_session_counter = itertools.count(1)


def new_session_id() -> str:
    """Return a process-unique identifier for a decode session."""
    return f"decode-{next(_session_counter)}"


class SessionLogger:
    """Logger that automatically includes session ID and component information."""

    def __init__(
        self,
        name: str,
        session_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize session logger.

        Args:
            name: Logger name (typically __name__)
            session_id: Optional decode session ID for record correlation
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.session_id = session_id
        self.component = component or name.split('.')[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge caller extras with the session and component fields."""
        combined_extra = {
            "component": self.component,
            "session_id": self.session_id,
        }

        if extra:
            combined_extra.update(extra)

        return combined_extra

    def is_enabled_for(self, level: int) -> bool:
        """Check whether records at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with session info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with session info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with session info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log error message with session info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)


def get_logger(
    name: str,
    session_id: Optional[str] = None,
    component: Optional[str] = None
) -> SessionLogger:
    """Get a session-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        session_id: Optional decode session ID
        component: Component name for structured logging

    Returns:
        SessionLogger instance
    """
    return SessionLogger(name, session_id, component)
