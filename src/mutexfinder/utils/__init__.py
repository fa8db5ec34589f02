"""Utility modules for result file handling."""

from mutexfinder.utils.fileio import (
    atomic_write_lines,
    atomic_write_text,
)

__all__ = [
    'atomic_write_lines',
    'atomic_write_text',
]
