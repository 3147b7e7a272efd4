"""
ctxbundle - pack a project into one portable bundle for AI chat context.

Aggregates a directory's text and binary files into a structured JSON bundle
or a flattened readable document, optionally split into parts with a
manifest, and reconstructs the original tree from a bundle.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .bundler import (
    Bundle,
    EncodedFileRecord,
    FileRecord,
    IgnoreSet,
    Manifest,
    PackStats,
    TreeWalker,
    build_ignore_set,
    classify,
    format_bundle,
    split_text,
    unpack,
)
from .bundler.utils.error_handling import (
    BundleError,
    CapacityWarning,
    ClipboardError,
    NotFoundError,
    ParseError,
    ReadError,
    WriteError,
)

# High-level API for easier usage
from .library import PackOptions, PackResult, ProjectPacker, pack_project

__all__ = [
    # High-level API (recommended for most users)
    "ProjectPacker",
    "PackOptions",
    "PackResult",
    "pack_project",
    "unpack",

    # Engine
    "Bundle",
    "EncodedFileRecord",
    "FileRecord",
    "IgnoreSet",
    "Manifest",
    "PackStats",
    "TreeWalker",
    "build_ignore_set",
    "classify",
    "format_bundle",
    "split_text",

    # Errors
    "BundleError",
    "CapacityWarning",
    "ClipboardError",
    "NotFoundError",
    "ParseError",
    "ReadError",
    "WriteError",
]
