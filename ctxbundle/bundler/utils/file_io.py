"""File output helpers shared by the splitter and the packer."""

import os
import tempfile
from pathlib import Path
from typing import Union

from .error_handling import WriteError


def write_text_atomic(path: Union[str, Path], content: str) -> Path:
    """Write ``content`` as UTF-8 to ``path`` in one final rename.

    The text goes to a temporary sibling first and is moved into place with
    ``os.replace``, so the destination either holds the old content or the
    complete new content. Newlines are written untranslated.

    Raises:
        WriteError: if the directory cannot be created or the file written
    """
    path = Path(path)
    tmp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            newline='',
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix='.tmp',
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise WriteError(f"Could not write {path}: {e}") from e
    return path


def read_text_exact(path: Union[str, Path]) -> str:
    """Read UTF-8 text without newline translation."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()
