"""
Bundle reconstruction.

Reads a structured bundle (directly, or by concatenating the parts listed in
a ``*_manifest.json``), decodes every record and recreates the file tree.
Existing files at a record's path are overwritten. Any write failure aborts
the whole unpack.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from tqdm import tqdm

from .classifier import decode_record, encoding_for
from .splitter import MANIFEST_SUFFIX
from .types import Bundle, EncodedFileRecord, Manifest
from .utils.error_handling import NotFoundError, ParseError, WriteError
from .utils.file_io import read_text_exact

logger = logging.getLogger(__name__)

UNPACKED_SUFFIX = "_unpacked"


@dataclass
class UnpackResult:
    """Outcome of one unpack run."""
    output_dir: Path
    files_written: int
    source: str


def is_manifest_path(path: Union[str, Path]) -> bool:
    return Path(path).name.endswith(MANIFEST_SUFFIX)


def _read_input(path: Path, what: str) -> str:
    if not path.is_file():
        raise NotFoundError(f"{what} not found at {path}")
    try:
        return read_text_exact(path)
    except UnicodeDecodeError as e:
        raise ParseError(f"{what} {path} is not UTF-8 text: {e}") from e
    except OSError as e:
        raise NotFoundError(f"Could not read {what.lower()} {path}: {e}") from e


def load_manifest(manifest_path: Path) -> Manifest:
    text = _read_input(manifest_path, "Manifest")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Manifest {manifest_path} is not valid JSON: {e}") from e
    return Manifest.from_dict(data)


def reassemble_parts(manifest_path: Path) -> str:
    """Concatenate the manifest's parts, resolved next to the manifest, in order."""
    manifest = load_manifest(manifest_path)
    base_dir = manifest_path.parent
    chunks = []
    for name in manifest.parts:
        chunks.append(_read_input(base_dir / name, "Part file"))
    logger.debug(f"Reassembled {len(manifest.parts)} parts from {manifest_path}")
    return "".join(chunks)


def read_serialized_bundle(bundle_path: Union[str, Path]) -> str:
    """Serialized bundle text from a bundle file or a manifest."""
    bundle_path = Path(bundle_path)
    if not bundle_path.exists():
        raise NotFoundError(f"Input file not found at {bundle_path}")
    if is_manifest_path(bundle_path):
        return reassemble_parts(bundle_path)
    return _read_input(bundle_path, "Bundle")


def parse_bundle(text: str) -> Bundle:
    """Parse structured bundle text.

    Raises:
        ParseError: if the text is not JSON or lacks the metadata/files shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Bundle is not valid JSON (flattened text bundles cannot be unpacked): {e}") from e
    return Bundle.from_dict(data)


def default_output_dir(bundle: Bundle) -> Path:
    """``<source>_unpacked`` in the current directory."""
    source = PurePosixPath(bundle.metadata.source.replace('\\', '/')).name
    if source in ("", ".", ".."):
        source = "bundle"
    return Path(f"{source}{UNPACKED_SUFFIX}")


def resolve_destination(output_dir: Path, record_path: str) -> Path:
    """Absolute destination for a record, refusing paths outside ``output_dir``."""
    rel = PurePosixPath(record_path.replace('\\', '/'))
    if rel.is_absolute() or '..' in rel.parts or not rel.parts:
        raise WriteError(f"Refusing to write outside the output directory: {record_path!r}")
    return output_dir.joinpath(*rel.parts)


def write_record(output_dir: Path, record: EncodedFileRecord) -> Path:
    destination = resolve_destination(output_dir, record.path)
    if record.encoding != encoding_for(record.path):
        logger.debug(f"{record.path} is tagged {record.encoding}; decoding as tagged")
    data = decode_record(record)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
    except OSError as e:
        raise WriteError(f"Could not write {destination}: {e}") from e
    return destination


def unpack_bundle(
    bundle_path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    show_progress: bool = False,
) -> UnpackResult:
    """Recreate the files of a bundle or split manifest on disk."""
    bundle = parse_bundle(read_serialized_bundle(bundle_path))
    out_dir = Path(output_dir) if output_dir else default_output_dir(bundle)
    out_dir = out_dir.resolve()

    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Could not create output directory {out_dir}: {e}") from e

    written = 0
    with tqdm(bundle.files, desc="📦 Unpacking", unit="file",
              file=sys.stderr, disable=not show_progress) as pbar:
        for record in pbar:
            write_record(out_dir, record)
            written += 1

    logger.info(f"Unpacked {written} files to {out_dir}")
    return UnpackResult(output_dir=out_dir, files_written=written, source=bundle.metadata.source)


def unpack(bundle_path: Union[str, Path], output_dir: Optional[Union[str, Path]] = None) -> int:
    """Unpack and return the number of files written."""
    return unpack_bundle(bundle_path, output_dir).files_written
