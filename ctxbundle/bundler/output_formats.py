"""
Output formatting for bundles.

Two styles are supported:
- ``json``: the structured bundle document, the only form the unpacker reads
- ``text``: a flattened rendering for reading (directory tree followed by each
  file's contents); binary files appear as a placeholder, so this form cannot
  be unpacked
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .types import Bundle, ENCODING_UTF8, EncodedFileRecord

STYLE_JSON = "json"
STYLE_TEXT = "text"

# Aliases accepted wherever a style name is given
STYLE_ALIASES = {
    "json": STYLE_JSON,
    "structured": STYLE_JSON,
    "text": STYLE_TEXT,
    "flattened": STYLE_TEXT,
}

STYLE_EXTENSIONS = {
    STYLE_JSON: ".json",
    STYLE_TEXT: ".txt",
}

TREE_HEADER = "Project Structure:"
SECTION_SEPARATOR = "\n---\n\n"
BINARY_PLACEHOLDER = "[Binary content not displayed]"

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


def normalize_style(style: str) -> str:
    """Map a style name or alias to ``json`` or ``text``."""
    try:
        return STYLE_ALIASES[style.lower()]
    except KeyError:
        raise ValueError(f"Unknown output format: {style}") from None


@dataclass
class DirectoryNode:
    """Represents a directory structure node."""
    name: str
    path: str
    is_file: bool = False
    children: Dict[str, 'DirectoryNode'] = field(default_factory=dict)


def create_directory_structure(paths: Sequence[str]) -> DirectoryNode:
    """Build a directory tree from relative POSIX paths.

    Children keep first-seen order, and every ancestor directory is created
    exactly once however many descendants it has.
    """
    root = DirectoryNode(name="", path="")

    for rel_path in paths:
        parts = [part for part in rel_path.split("/") if part]
        current_node = root

        for i, part in enumerate(parts):
            is_file = i == len(parts) - 1
            child_node = current_node.children.get(part)
            if child_node is None:
                child_node = DirectoryNode(name=part, path="/".join(parts[:i + 1]))
                current_node.children[part] = child_node
            if is_file:
                child_node.is_file = True
            current_node = child_node

    return root


def render_directory_tree(node: DirectoryNode, lines: List[str], prefix: str = "") -> None:
    """Render ``node``'s children with branch connectors into ``lines``."""
    children = list(node.children.values())
    for i, child in enumerate(children):
        is_last = i == len(children) - 1
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{child.name}")
        if child.children:
            render_directory_tree(child, lines, prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX))


def generate_tree(files: Sequence[EncodedFileRecord]) -> str:
    """Tree diagram block for the flattened format ('' for no files)."""
    if not files:
        return ""
    lines: List[str] = []
    render_directory_tree(create_directory_structure([f.path for f in files]), lines)
    return f"{TREE_HEADER}\n\n" + "\n".join(lines) + "\n" + SECTION_SEPARATOR


class OutputFormatter:
    """Base class for output formatters."""

    style: str = ""

    def format_output(self, bundle: Bundle) -> str:
        """Format the complete output."""
        raise NotImplementedError

    @property
    def extension(self) -> str:
        return STYLE_EXTENSIONS[self.style]


class JSONFormatter(OutputFormatter):
    """Structured bundle document."""

    style = STYLE_JSON

    def __init__(self, indent: Optional[int] = 2):
        self.indent = indent

    def format_output(self, bundle: Bundle) -> str:
        return json.dumps(bundle.to_dict(), indent=self.indent, ensure_ascii=False)


class FlattenedFormatter(OutputFormatter):
    """Tree diagram followed by one section per file."""

    style = STYLE_TEXT

    def format_section(self, record: EncodedFileRecord) -> str:
        body = record.content if record.encoding == ENCODING_UTF8 else BINARY_PLACEHOLDER
        return f"--- File: {record.path} ---\n\n{body}\n"

    def format_output(self, bundle: Bundle) -> str:
        sections = [self.format_section(record) for record in bundle.files]
        return generate_tree(bundle.files) + SECTION_SEPARATOR.join(sections)


def create_formatter(style: str) -> OutputFormatter:
    """Create output formatter for a style name or alias."""
    formatters = {
        STYLE_JSON: JSONFormatter,
        STYLE_TEXT: FlattenedFormatter,
    }
    return formatters[normalize_style(style)]()


def format_bundle(bundle: Bundle, style: str = STYLE_JSON) -> str:
    return create_formatter(style).format_output(bundle)
