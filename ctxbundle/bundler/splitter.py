"""Length-based splitting of serialized output into part files.

Splitting is purely textual: parts are consecutive slices of at most
``chunk_size`` characters and may cut through the middle of a file record.
The manifest lists the part names in order; concatenating the parts in that
order gives back the original text exactly.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .output_formats import STYLE_EXTENSIONS, normalize_style
from .pattern_filter import escape_pattern
from .types import Manifest, utc_timestamp
from .utils.file_io import write_text_atomic

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1_000_000
MANIFEST_SUFFIX = "_manifest.json"
PART_INFIX = "_part_"


def split_text(text: str, chunk_size: int) -> List[str]:
    """Slice ``text`` into consecutive chunks of at most ``chunk_size`` characters."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


def output_base(output_path: Path) -> Path:
    """Output path without a trailing ``.json``/``.txt`` extension."""
    output_path = Path(output_path)
    if output_path.suffix.lower() in STYLE_EXTENSIONS.values():
        return output_path.with_suffix("")
    return output_path


def part_file_name(base_name: str, index: int, extension: str) -> str:
    """Name of the 1-based ``index``-th part."""
    return f"{base_name}{PART_INFIX}{index}{extension}"


def manifest_path_for(output_path: Path) -> Path:
    base = output_base(output_path)
    return base.with_name(base.name + MANIFEST_SUFFIX)


def split_output(
    text: str,
    chunk_size: int,
    output_path: Path,
    style: str,
    source: str,
    created_at: Optional[str] = None,
) -> Tuple[List[str], Manifest]:
    """Partition ``text`` and describe the parts in a manifest.

    Args:
        text: Serialized bundle (either style)
        chunk_size: Maximum characters per part
        output_path: Requested single-file output path; part names derive from it
        style: Output style, selects the part extension
        source: Name of the packed directory
        created_at: Timestamp for the manifest (default: now)

    Returns:
        The chunk contents and the manifest naming them in order
    """
    chunks = split_text(text, chunk_size)
    base_name = output_base(output_path).name
    extension = STYLE_EXTENSIONS[normalize_style(style)]
    parts = tuple(part_file_name(base_name, i, extension) for i in range(1, len(chunks) + 1))
    manifest = Manifest(source=source, created_at=created_at or utc_timestamp(), parts=parts)
    return chunks, manifest


def write_split_output(
    chunks: List[str],
    manifest: Manifest,
    output_path: Path,
) -> Tuple[List[Path], Path]:
    """Write every part, then the manifest, next to ``output_path``.

    Returns:
        The part paths in order and the manifest path
    """
    directory = Path(output_path).parent
    part_paths = []
    for chunk, name in zip(chunks, manifest.parts):
        part_paths.append(write_text_atomic(directory / name, chunk))
        logger.debug(f"Wrote part {name} ({len(chunk)} characters)")

    manifest_path = manifest_path_for(output_path)
    write_text_atomic(manifest_path, json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False))
    return part_paths, manifest_path


def split_ignore_patterns(output_path: Path, root_dir: Path) -> List[str]:
    """Anchored patterns matching this run's outputs when they sit under ``root_dir``.

    Keeps a re-pack from picking up the bundle, parts or manifest written by
    an earlier run. Name-derived parts are escaped, so they match only the
    literal output names. Append these after every other layer.
    """
    try:
        rel = Path(output_path).resolve().relative_to(Path(root_dir).resolve())
    except ValueError:
        return []

    rel_base = escape_pattern(output_base(rel).as_posix())
    return [
        f"/{escape_pattern(rel.as_posix())}",
        f"/{rel_base}{PART_INFIX}*",
        f"/{rel_base}{MANIFEST_SUFFIX}",
    ]
