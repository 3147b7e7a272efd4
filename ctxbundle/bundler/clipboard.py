"""Clipboard transfer through the platform's copy command."""

import logging
import platform
import shutil
import subprocess
from typing import List, Optional

from .utils.error_handling import CapacityWarning, ClipboardError

logger = logging.getLogger(__name__)

CLIPBOARD_LIMIT_BYTES = 45 * 1024 * 1024  # 45 MiB

# Tried in order on systems other than macOS and Windows
LINUX_COMMANDS = [
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


def clipboard_command(system: Optional[str] = None) -> List[str]:
    """Copy command for the current platform.

    Raises:
        ClipboardError: if no supported tool is installed
    """
    system = system or platform.system()
    if system == "Darwin":
        return ["pbcopy"]
    if system == "Windows":
        return ["clip"]
    for cmd in LINUX_COMMANDS:
        if shutil.which(cmd[0]):
            return cmd
    raise ClipboardError("No clipboard tool found (install wl-copy, xclip or xsel)")


def copy_to_clipboard(text: str, limit_bytes: int = CLIPBOARD_LIMIT_BYTES) -> int:
    """Copy ``text`` to the clipboard and return its UTF-8 size in bytes.

    Raises:
        CapacityWarning: if the text is larger than ``limit_bytes``
        ClipboardError: if no tool is available or the copy fails
    """
    payload = text.encode("utf-8")
    if len(payload) > limit_bytes:
        raise CapacityWarning(len(payload), limit_bytes)

    cmd = clipboard_command()
    try:
        subprocess.run(cmd, input=payload, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise ClipboardError(f"Clipboard copy with {cmd[0]} failed: {e}") from e

    logger.debug(f"Copied {len(payload)} bytes with {cmd[0]}")
    return len(payload)
