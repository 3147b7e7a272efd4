"""
Bundling engine for ctxpack.

Turns a project directory into a single portable bundle and back:
- Layered ignore rules (defaults, user patterns, .gitignore with negation)
- Extension-based text/binary classification with utf8/base64 encoding
- Structured (JSON) and flattened (tree + contents) output
- Length-based splitting with an ordered manifest
- Reconstruction of the file tree from a bundle or manifest
"""

from __future__ import annotations

from .classifier import classify, compute_pack_stats, decode_record, encode_record, is_text_file
from .output_formats import (
    FlattenedFormatter,
    JSONFormatter,
    create_directory_structure,
    create_formatter,
    format_bundle,
)
from .pattern_filter import DEFAULT_IGNORE_PATTERNS, IgnoreSet, build_ignore_set
from .splitter import split_output, split_text, write_split_output
from .tree_walker import TreeWalker, walk
from .types import Bundle, BundleMetadata, EncodedFileRecord, FileRecord, Manifest, PackStats
from .unpacker import UnpackResult, parse_bundle, read_serialized_bundle, unpack, unpack_bundle

__all__ = [
    "Bundle",
    "BundleMetadata",
    "EncodedFileRecord",
    "FileRecord",
    "Manifest",
    "PackStats",
    "IgnoreSet",
    "DEFAULT_IGNORE_PATTERNS",
    "build_ignore_set",
    "TreeWalker",
    "walk",
    "classify",
    "is_text_file",
    "encode_record",
    "decode_record",
    "compute_pack_stats",
    "JSONFormatter",
    "FlattenedFormatter",
    "create_directory_structure",
    "create_formatter",
    "format_bundle",
    "split_text",
    "split_output",
    "write_split_output",
    "UnpackResult",
    "parse_bundle",
    "read_serialized_bundle",
    "unpack",
    "unpack_bundle",
]
