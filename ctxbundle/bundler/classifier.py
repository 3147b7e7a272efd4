"""Text/binary classification and content encoding.

Classification looks only at the file extension, never at the bytes, so the
packer, the flattened formatter and the unpacker always agree on how a path
is treated. Text files travel as UTF-8 strings, everything else as base64.
"""

import base64
import binascii
import logging
from pathlib import PurePosixPath
from typing import Iterable

from .types import (
    ENCODING_BASE64,
    ENCODING_UTF8,
    EncodedFileRecord,
    FileRecord,
    PackStats,
)
from .utils.error_handling import ParseError

logger = logging.getLogger(__name__)

TEXT = "text"
BINARY = "binary"

TEXT_EXTENSIONS = frozenset({
    '.txt', '.md', '.mdx',
    '.js', '.ts', '.tsx', '.jsx',
    '.json', '.yml', '.yaml', '.toml', '.ini', '.cfg', '.env', '.xml',
    '.html', '.css', '.scss', '.less',
    '.py', '.java', '.c', '.cpp', '.cs', '.go', '.rs', '.php', '.rb',
    '.sh', '.bash', '.zsh',
    '.csv', '.tsv',
    '.graphql', '.gql',
    '.svelte', '.astro', '.vue',
})


def file_extension(path: str) -> str:
    """Lower-cased final suffix of ``path`` ('' for dotfiles and bare names)."""
    return PurePosixPath(path.replace('\\', '/')).suffix.lower()


def classify(path: str) -> str:
    """Return ``"text"`` or ``"binary"`` for ``path``."""
    return TEXT if file_extension(path) in TEXT_EXTENSIONS else BINARY


def is_text_file(path: str) -> bool:
    return classify(path) == TEXT


def encoding_for(path: str) -> str:
    """Bundle encoding tag used for ``path``."""
    return ENCODING_UTF8 if is_text_file(path) else ENCODING_BASE64


def encode_record(record: FileRecord) -> EncodedFileRecord:
    """Encode raw bytes into the transport string for the bundle."""
    if is_text_file(record.path):
        try:
            content = record.raw_bytes.decode('utf-8')
        except UnicodeDecodeError:
            logger.warning(
                f"{record.path} is not valid UTF-8; invalid bytes replaced with U+FFFD"
            )
            content = record.raw_bytes.decode('utf-8', errors='replace')
        return EncodedFileRecord(path=record.path, content=content, encoding=ENCODING_UTF8)

    content = base64.b64encode(record.raw_bytes).decode('ascii')
    return EncodedFileRecord(path=record.path, content=content, encoding=ENCODING_BASE64)


def decode_record(record: EncodedFileRecord) -> bytes:
    """Inverse of :func:`encode_record`.

    Raises:
        ParseError: for an unknown encoding tag or malformed base64
    """
    if record.encoding == ENCODING_BASE64:
        try:
            return base64.b64decode(record.content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ParseError(f"Invalid base64 content for {record.path}: {e}") from e
    if record.encoding == ENCODING_UTF8:
        try:
            return record.content.encode('utf-8')
        except UnicodeEncodeError as e:
            raise ParseError(f"Text content for {record.path} is not encodable as UTF-8: {e}") from e
    raise ParseError(f"Unknown encoding '{record.encoding}' for {record.path}")


def compute_pack_stats(records: Iterable[FileRecord]) -> PackStats:
    """Total raw size and text/binary counts for the summary line."""
    total_size = 0
    text_files = 0
    binary_files = 0
    for record in records:
        total_size += record.size_bytes
        if is_text_file(record.path):
            text_files += 1
        else:
            binary_files += 1
    return PackStats(total_size=total_size, text_files=text_files, binary_files=binary_files)
