"""Bundler utility modules.

Common helpers shared across the bundler: the error kinds and per-file
error handler, and atomic text output.
"""

from .error_handling import (
    BundleError,
    CapacityWarning,
    ClipboardError,
    ErrorContext,
    ErrorHandler,
    NotFoundError,
    ParseError,
    ReadError,
    WriteError,
)
from .file_io import read_text_exact, write_text_atomic

__all__ = [
    'BundleError',
    'CapacityWarning',
    'ClipboardError',
    'ErrorContext',
    'ErrorHandler',
    'NotFoundError',
    'ParseError',
    'ReadError',
    'WriteError',
    'read_text_exact',
    'write_text_atomic',
]
