"""
Pattern-based path filtering with .gitignore support.

Builds one ignore predicate from three layers, in order:
1. Built-in default patterns (VCS, dependency, build artifacts, lockfiles)
2. User-supplied patterns
3. The project's own .gitignore

Patterns use gitignore syntax and are evaluated last-match-wins, so a
``!pattern`` added later re-includes a path an earlier pattern excluded.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Iterable, List, Optional, Sequence

import pathspec

logger = logging.getLogger(__name__)

PROJECT_IGNORE_FILE = ".gitignore"

# Default patterns applied to every walk
DEFAULT_IGNORE_PATTERNS = [
    # Version control
    '.git',
    PROJECT_IGNORE_FILE,

    # Dependencies
    'node_modules',
    '.venv',
    '__pycache__',

    # Build outputs
    'dist',
    'build',
    'coverage',
    '.pytest_cache',

    # IDE and OS files
    '.vscode',
    '.idea',
    '.DS_Store',

    # Lockfiles
    'yarn.lock',
    'package-lock.json',
    'pnpm-lock.yaml',

    # Environment files
    '.env',
    '.env.*',

    # Logs, archives and compiled files
    '*.log',
    '*.gz',
    '*.zip',
    '*.pyc',
]


@dataclass
class FilterConfig:
    """Configuration for the ignore layers."""
    custom_patterns: List[str] = field(default_factory=list)
    use_gitignore: bool = True
    use_default_patterns: bool = True


GLOB_SPECIAL_CHARS = '\\[]*?!#'


def escape_pattern(literal: str) -> str:
    """Backslash-escape glob metacharacters so ``literal`` matches only itself."""
    return ''.join('\\' + ch if ch in GLOB_SPECIAL_CHARS else ch for ch in literal)


def normalize_relative_path(relative_path: str) -> str:
    """Forward slashes, no leading './' or '/'."""
    path = relative_path.replace('\\', '/')
    while path.startswith('./'):
        path = path[2:]
    return path.lstrip('/')


class IgnoreSet:
    """
    Ordered gitignore-style patterns compiled into one predicate.

    The predicate is pure: for a fixed pattern list the same relative path
    always gets the same answer.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: tuple = tuple(patterns)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """Return True if ``relative_path`` is ignored.

        Directories are matched with a trailing slash so directory-only
        patterns such as ``build/`` apply to them.
        """
        path = normalize_relative_path(relative_path)
        if not path:
            return False
        if is_dir:
            path = path.rstrip('/') + '/'
        return self._spec.match_file(path)

    def extend(self, patterns: Sequence[str]) -> 'IgnoreSet':
        """Return a new set with ``patterns`` appended after the current ones."""
        return IgnoreSet(self.patterns + tuple(patterns))

    def __len__(self) -> int:
        return len(self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreSet({len(self.patterns)} patterns)"


def read_ignore_file(file_path: Path) -> List[str]:
    """Read pattern lines from an ignore file.

    Blank lines and ``#`` comments are skipped; ``!`` negations are kept.
    A missing file yields no patterns.
    """
    if not file_path.is_file():
        return []

    try:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.warning(f"Could not read ignore file {file_path}: {e}")
        return []

    patterns = []
    for line in lines:
        stripped = line.strip()
        # Skip comments and empty lines
        if not stripped or stripped.startswith('#'):
            continue
        patterns.append(stripped)

    logger.debug(f"Loaded {len(patterns)} patterns from {file_path}")
    return patterns


class PatternFilter:
    """Assembles the ignore layers for a packing root."""

    def __init__(self, config: FilterConfig, root_dir: Path):
        self.config = config
        self.root_dir = Path(root_dir)
        self._project_patterns: List[str] = []
        self.ignore_set = self._compile_patterns()

    def _compile_patterns(self) -> IgnoreSet:
        patterns: List[str] = []

        if self.config.use_default_patterns:
            patterns.extend(DEFAULT_IGNORE_PATTERNS)

        if self.config.custom_patterns:
            patterns.extend(self.config.custom_patterns)

        if self.config.use_gitignore:
            self._project_patterns = read_ignore_file(self.root_dir / PROJECT_IGNORE_FILE)
            patterns.extend(self._project_patterns)

        return IgnoreSet(patterns)

    def should_include(self, relative_path: str, is_dir: bool = False) -> bool:
        return not self.ignore_set.matches(relative_path, is_dir=is_dir)

    def get_stats(self) -> Dict[str, Any]:
        """Get filtering statistics."""
        return {
            'default_patterns': len(DEFAULT_IGNORE_PATTERNS) if self.config.use_default_patterns else 0,
            'custom_patterns': len(self.config.custom_patterns),
            'gitignore_patterns': len(self._project_patterns),
            'total_patterns': len(self.ignore_set),
        }


def build_ignore_set(
    root_dir: Path,
    user_patterns: Optional[List[str]] = None,
    use_gitignore: bool = True,
    use_default_patterns: bool = True,
) -> IgnoreSet:
    """Create the ignore predicate for ``root_dir``."""
    config = FilterConfig(
        custom_patterns=list(user_patterns or []),
        use_gitignore=use_gitignore,
        use_default_patterns=use_default_patterns,
    )
    return PatternFilter(config, root_dir).ignore_set
