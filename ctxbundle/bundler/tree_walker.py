"""
Directory walking for the bundler.

Enumerates every regular file under a packing root that survives the ignore
predicate, reading each one fully into memory:
- Ignored directories are pruned before they are entered
- Entries are visited in name order within each directory
- Symlinks and special files are skipped
- Unreadable files and subdirectories are logged and skipped, the walk continues
- A starting directory that cannot be listed ends the walk with an error
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from .classifier import is_text_file
from .pattern_filter import IgnoreSet
from .types import FileRecord
from .utils.error_handling import ErrorHandler, NotFoundError

logger = logging.getLogger(__name__)

SKIP_IGNORED = "ignored"
SKIP_BINARY = "binary"
SKIP_UNREADABLE = "unreadable"
SKIP_NOT_REGULAR = "not_regular"


class TreeWalker:
    """
    Recursive file collector driven by an :class:`IgnoreSet`.

    The walk is depth-first with an explicit stack. Within a directory,
    entries are sorted by name so the resulting record order is the same on
    every filesystem.
    """

    def __init__(
        self,
        root_dir: Path,
        ignore_set: IgnoreSet,
        text_only: bool = False,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.root_dir = Path(root_dir)
        self.ignore_set = ignore_set
        self.text_only = text_only
        self.error_handler = error_handler or ErrorHandler("TreeWalker")
        self.skipped: List[Tuple[str, str]] = []  # (relative path, reason)

    def _relative(self, path: str) -> str:
        return Path(os.path.relpath(path, self.root_dir)).as_posix()

    @staticmethod
    def _list_directory(directory: str) -> List[os.DirEntry]:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)

    def _scan_directory(self, directory: str) -> List[os.DirEntry]:
        """Entries of a subdirectory; an unlistable one is logged and skipped."""
        return self.error_handler.safe_file_operation(
            self._relative(directory),
            lambda: self._list_directory(directory),
            [],
            operation_name="scan_directory",
        )

    def _read_file(self, full_path: str, rel: str) -> Optional[bytes]:
        def read() -> bytes:
            with open(full_path, 'rb') as f:
                return f.read()

        return self.error_handler.safe_file_operation(rel, read, None)

    def walk(self, directory: Optional[Path] = None) -> List[FileRecord]:
        """Collect file records under ``directory`` (default: the root).

        Raises:
            NotFoundError: if the starting directory itself cannot be listed
        """
        start = str(directory or self.root_dir)
        try:
            entries = self._list_directory(start)
        except OSError as e:
            raise NotFoundError(f"Could not list directory {start}: {e}") from e

        records: List[FileRecord] = []
        # Reversed on push so children pop in name order
        stack: List[os.DirEntry] = list(reversed(entries))

        while stack:
            entry = stack.pop()
            rel = self._relative(entry.path)

            if entry.is_symlink():
                logger.debug(f"Skipping symlink: {rel}")
                self.skipped.append((rel, SKIP_NOT_REGULAR))
                continue

            if entry.is_dir(follow_symlinks=False):
                if self.ignore_set.matches(rel, is_dir=True):
                    self.skipped.append((rel, SKIP_IGNORED))
                    continue
                stack.extend(reversed(self._scan_directory(entry.path)))
                continue

            if self.ignore_set.matches(rel):
                self.skipped.append((rel, SKIP_IGNORED))
                continue

            if not entry.is_file(follow_symlinks=False):
                logger.debug(f"Skipping special file: {rel}")
                self.skipped.append((rel, SKIP_NOT_REGULAR))
                continue

            if self.text_only and not is_text_file(rel):
                self.skipped.append((rel, SKIP_BINARY))
                continue

            content = self._read_file(entry.path, rel)
            if content is None:
                self.skipped.append((rel, SKIP_UNREADABLE))
                continue

            records.append(FileRecord(path=rel, raw_bytes=content))

        return records


def walk(
    directory: Path,
    ignore_set: IgnoreSet,
    root_dir: Optional[Path] = None,
    text_only: bool = False,
) -> List[FileRecord]:
    """Convenience wrapper returning the records under ``directory``."""
    walker = TreeWalker(root_dir or directory, ignore_set, text_only=text_only)
    return walker.walk(Path(directory))
