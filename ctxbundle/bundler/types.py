"""Bundler common types and data structures.

This module contains the records handed from stage to stage (walker,
encoder, formatter, splitter, unpacker) and the two JSON documents the tool
exchanges: the bundle and the split manifest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .utils.error_handling import ParseError

ENCODING_UTF8 = "utf8"
ENCODING_BASE64 = "base64"
ENCODINGS = (ENCODING_UTF8, ENCODING_BASE64)


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class FileRecord:
    """A file found by the walker: POSIX relative path and raw bytes."""
    path: str
    raw_bytes: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.raw_bytes)


@dataclass(frozen=True)
class EncodedFileRecord:
    """A file as it appears in the bundle."""
    path: str
    content: str
    encoding: str  # "utf8" | "base64"

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "content": self.content, "encoding": self.encoding}

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> 'EncodedFileRecord':
        if not isinstance(data, dict):
            raise ParseError(f"files[{index}] is not an object")
        for key in ("path", "content", "encoding"):
            if not isinstance(data.get(key), str):
                raise ParseError(f"files[{index}] is missing string field '{key}'")
        if data["encoding"] not in ENCODINGS:
            raise ParseError(f"files[{index}] has unknown encoding '{data['encoding']}'")
        return cls(path=data["path"], content=data["content"], encoding=data["encoding"])


@dataclass(frozen=True)
class BundleMetadata:
    """Header of a bundle document."""
    source: str
    created_at: str
    file_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "createdAt": self.created_at, "fileCount": self.file_count}


@dataclass(frozen=True)
class Bundle:
    """
    Structured bundle: metadata plus the ordered encoded file records.

    Created once per pack; ``metadata.file_count`` always equals the number
    of records.
    """
    metadata: BundleMetadata
    files: Tuple[EncodedFileRecord, ...]

    @classmethod
    def create(
        cls,
        source: str,
        files: List[EncodedFileRecord],
        created_at: Optional[str] = None,
    ) -> 'Bundle':
        """Build a bundle whose file count is derived from ``files``."""
        records = tuple(files)
        metadata = BundleMetadata(
            source=source,
            created_at=created_at or utc_timestamp(),
            file_count=len(records),
        )
        return cls(metadata=metadata, files=records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "files": [record.to_dict() for record in self.files],
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'Bundle':
        """Validate the ``metadata``/``files`` shape and build a bundle.

        Raises:
            ParseError: if a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ParseError("Bundle must be a JSON object")
        metadata = data.get("metadata")
        files = data.get("files")
        if not isinstance(metadata, dict):
            raise ParseError("Bundle is missing the 'metadata' object")
        if not isinstance(files, list):
            raise ParseError("Bundle is missing the 'files' array")

        source = metadata.get("source")
        if not isinstance(source, str):
            raise ParseError("Bundle metadata is missing string field 'source'")
        created_at = metadata.get("createdAt", "")
        if not isinstance(created_at, str):
            raise ParseError("Bundle metadata field 'createdAt' must be a string")

        records = tuple(EncodedFileRecord.from_dict(item, i) for i, item in enumerate(files))
        file_count = metadata.get("fileCount", len(records))
        if file_count != len(records):
            raise ParseError(
                f"Bundle metadata says {file_count} files but {len(records)} records are present"
            )
        return cls(
            metadata=BundleMetadata(source=source, created_at=created_at, file_count=len(records)),
            files=records,
        )


@dataclass(frozen=True)
class Manifest:
    """Ordered list of part files making up a split bundle."""
    source: str
    created_at: str
    parts: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "createdAt": self.created_at, "parts": list(self.parts)}

    @classmethod
    def from_dict(cls, data: Any) -> 'Manifest':
        if not isinstance(data, dict):
            raise ParseError("Manifest must be a JSON object")
        parts = data.get("parts")
        if not isinstance(parts, list) or not all(isinstance(p, str) for p in parts):
            raise ParseError("Manifest is missing the 'parts' array of file names")
        return cls(
            source=str(data.get("source", "")),
            created_at=str(data.get("createdAt", "")),
            parts=tuple(parts),
        )


@dataclass(frozen=True)
class PackStats:
    """Reporting-only totals for one pack run."""
    total_size: int = 0
    text_files: int = 0
    binary_files: int = 0

    @property
    def total_files(self) -> int:
        return self.text_files + self.binary_files
