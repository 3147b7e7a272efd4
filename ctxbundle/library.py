"""
ctxbundle main library interface.

Provides a small API for packing a project directory into a bundle and
unpacking it again, used by the ``ctxpack`` command line and by other
applications.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from tqdm import tqdm

from .bundler.classifier import compute_pack_stats, encode_record
from .bundler.config_manager import PackConfig
from .bundler.output_formats import STYLE_EXTENSIONS, STYLE_JSON, create_formatter, normalize_style
from .bundler.pattern_filter import build_ignore_set
from .bundler.splitter import DEFAULT_CHUNK_SIZE, split_ignore_patterns, split_output, write_split_output
from .bundler.tree_walker import TreeWalker
from .bundler.types import Bundle, FileRecord, PackStats, utc_timestamp
from .bundler.unpacker import UnpackResult, unpack_bundle
from .bundler.utils.error_handling import BundleError, ErrorHandler, NotFoundError
from .bundler.utils.file_io import write_text_atomic

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_STEM = "project-context"


def default_output_path(style: str) -> Path:
    """``project-context.json`` or ``project-context.txt`` in the current directory."""
    return Path(DEFAULT_OUTPUT_STEM + STYLE_EXTENSIONS[normalize_style(style)])


@dataclass
class PackOptions:
    """Options for one pack run."""
    output_format: str = STYLE_JSON
    output_path: Optional[Path] = None
    split: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    ignore_patterns: List[str] = field(default_factory=list)
    no_binary: bool = False
    use_gitignore: bool = True
    use_default_patterns: bool = True
    show_progress: bool = False

    def __post_init__(self):
        self.output_format = normalize_style(self.output_format)
        if self.output_path is None:
            self.output_path = default_output_path(self.output_format)
        self.output_path = Path(self.output_path)
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")

    @classmethod
    def from_config(cls, config: PackConfig, **overrides) -> 'PackOptions':
        """Build options from a loaded config; ``None`` overrides are ignored."""
        values = dict(
            output_format=config.output_format,
            output_path=Path(config.output_file_path) if config.output_file_path else None,
            split=config.split,
            chunk_size=config.chunk_size,
            ignore_patterns=list(config.ignore_custom_patterns),
            no_binary=config.no_binary,
            use_gitignore=config.ignore_use_gitignore,
            use_default_patterns=config.ignore_use_default_patterns,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class PackResult:
    """Everything produced by one pack run."""
    bundle: Bundle
    output: str
    stats: PackStats
    written_paths: List[Path] = field(default_factory=list)
    manifest_path: Optional[Path] = None
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    read_errors: int = 0

    @property
    def file_count(self) -> int:
        return self.bundle.metadata.file_count

    @property
    def is_split(self) -> bool:
        return self.manifest_path is not None


class ProjectPacker:
    """
    Main interface for packing and unpacking.

    Packing walks the root, encodes each file, renders the bundle in the
    requested style and writes it (whole, or split into parts plus a
    manifest). All content is assembled in memory before anything is written.
    """

    def __init__(self, options: Optional[PackOptions] = None):
        self.options = options or PackOptions()

    def collect(self, root_dir: Union[str, Path]) -> Tuple[List[FileRecord], TreeWalker]:
        """Walk ``root_dir`` with the configured ignore layers."""
        root = Path(root_dir).resolve()
        if not root.is_dir():
            raise NotFoundError(f"Directory not found at {root}")

        ignore_set = build_ignore_set(
            root,
            list(self.options.ignore_patterns),
            use_gitignore=self.options.use_gitignore,
            use_default_patterns=self.options.use_default_patterns,
        )
        # Last, so no project negation can re-include earlier output
        ignore_set = ignore_set.extend(split_ignore_patterns(self.options.output_path, root))

        walker = TreeWalker(
            root,
            ignore_set,
            text_only=self.options.no_binary,
            error_handler=ErrorHandler("TreeWalker"),
        )
        records = walker.walk()
        logger.info(f"Collected {len(records)} files from {root}")
        return records, walker

    def build_bundle(
        self,
        source: str,
        records: List[FileRecord],
        created_at: Optional[str] = None,
    ) -> Bundle:
        encoded = []
        with tqdm(records, desc="📄 Encoding files", unit="file", file=sys.stderr,
                  disable=not self.options.show_progress) as pbar:
            for record in pbar:
                encoded.append(encode_record(record))
        return Bundle.create(source, encoded, created_at=created_at)

    def pack(self, root_dir: Union[str, Path] = ".", write: bool = True) -> PackResult:
        """Pack ``root_dir`` and write the output unless ``write`` is False.

        Nothing is written when no files survive filtering.
        """
        root = Path(root_dir).resolve()
        records, walker = self.collect(root)
        stats = compute_pack_stats(records)

        created_at = utc_timestamp()
        bundle = self.build_bundle(root.name, records, created_at=created_at)
        output = create_formatter(self.options.output_format).format_output(bundle)

        result = PackResult(
            bundle=bundle,
            output=output,
            stats=stats,
            skipped=list(walker.skipped),
            read_errors=walker.error_handler.get_error_summary()['total_errors'],
        )

        if not records:
            logger.warning("No files found to pack. Check ignore patterns.")
            return result
        if not write:
            return result

        output_path = self.options.output_path
        if self.options.split:
            chunks, manifest = split_output(
                output,
                self.options.chunk_size,
                output_path,
                self.options.output_format,
                source=root.name,
                created_at=created_at,
            )
            result.written_paths, result.manifest_path = write_split_output(chunks, manifest, output_path)
            logger.info(f"Split into {len(chunks)} parts; manifest at {result.manifest_path}")
        else:
            result.written_paths = [write_text_atomic(output_path, output)]
            logger.info(f"Packed {bundle.metadata.file_count} files into {output_path}")

        return result

    def unpack(
        self,
        bundle_path: Union[str, Path],
        output_dir: Optional[Union[str, Path]] = None,
    ) -> UnpackResult:
        """Recreate the files of a bundle or manifest under ``output_dir``."""
        return unpack_bundle(bundle_path, output_dir, show_progress=self.options.show_progress)


def pack_project(root_dir: Union[str, Path], **options) -> PackResult:
    """Pack ``root_dir`` with keyword :class:`PackOptions`."""
    return ProjectPacker(PackOptions(**options)).pack(root_dir)


__all__ = [
    "BundleError",
    "PackOptions",
    "PackResult",
    "ProjectPacker",
    "default_output_path",
    "pack_project",
]
