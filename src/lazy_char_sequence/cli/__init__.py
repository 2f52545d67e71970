"""Command-line interface module for Lazy Char Sequence.

This module provides a CLI for decoding files, printing their length or single
characters, and reporting decode statistics.
"""

from .main import main

__all__ = ["main"]
