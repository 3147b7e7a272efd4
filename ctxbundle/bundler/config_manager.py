"""
Configuration manager for pack settings.

Reads ``ctxpack.config.json`` from the directory being packed. Two layouts
are accepted and converted to the same :class:`PackConfig`:

- flat snake_case keys matching the dataclass fields
- nested camelCase sections mirroring the command line flags
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .clipboard import CLIPBOARD_LIMIT_BYTES
from .output_formats import STYLE_JSON, normalize_style
from .splitter import DEFAULT_CHUNK_SIZE
from .utils.error_handling import NotFoundError, ParseError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "ctxpack.config.json"


@dataclass
class PackConfig:
    """Pack settings with the command line defaults."""

    # Output settings
    output_format: str = STYLE_JSON  # "json" | "text"
    output_file_path: Optional[str] = None
    copy_to_clipboard: bool = False
    clipboard_limit_bytes: int = CLIPBOARD_LIMIT_BYTES

    # Splitting
    split: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # Pattern settings
    ignore_custom_patterns: List[str] = field(default_factory=list)
    ignore_use_gitignore: bool = True
    ignore_use_default_patterns: bool = True
    no_binary: bool = False


# Expected types for validation of loaded values
_FIELD_TYPES = {
    'output_format': (str,),
    'output_file_path': (str, type(None)),
    'copy_to_clipboard': (bool,),
    'clipboard_limit_bytes': (int,),
    'split': (bool,),
    'chunk_size': (int,),
    'ignore_custom_patterns': (list,),
    'ignore_use_gitignore': (bool,),
    'ignore_use_default_patterns': (bool,),
    'no_binary': (bool,),
}

# Nested camelCase key -> PackConfig field
_NESTED_KEYS = {
    'output.format': 'output_format',
    'output.filePath': 'output_file_path',
    'copy.enabled': 'copy_to_clipboard',
    'copy.limitBytes': 'clipboard_limit_bytes',
    'split.enabled': 'split',
    'split.chunkSize': 'chunk_size',
    'ignore.customPatterns': 'ignore_custom_patterns',
    'ignore.useGitignore': 'ignore_use_gitignore',
    'ignore.useDefaultPatterns': 'ignore_use_default_patterns',
    'noBinary': 'no_binary',
}


class ConfigManager:
    """
    Loads pack configuration for a project directory.

    Fallback priority:
    1. Custom config path (if provided)
    2. ``ctxpack.config.json`` in the project directory
    3. Default configuration
    """

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path)
        self.config_path: Optional[Path] = None
        self._config: Optional[PackConfig] = None

    def load_config(self, custom_config_path: Optional[Path] = None) -> PackConfig:
        if custom_config_path is not None:
            config_path = Path(custom_config_path)
            if not config_path.is_file():
                raise NotFoundError(f"Config file not found: {config_path}")
        else:
            config_path = self.repo_path / CONFIG_FILE_NAME

        if config_path.is_file():
            config_data = self._load_config_file(config_path)
            self.config_path = config_path
            self._config = self._convert_config(config_data)
            return self._config

        self._config = PackConfig()
        return self._config

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load JSON configuration file."""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Config file {config_path} is not a JSON object; using defaults")
            return {}
        return data

    def _convert_config(self, config_data: Dict[str, Any]) -> PackConfig:
        if self._is_nested_style_config(config_data):
            flat = self._flatten_nested_config(config_data)
        else:
            flat = config_data
        return self._build_config(flat)

    def _is_nested_style_config(self, config_data: Dict[str, Any]) -> bool:
        """Detect if config uses the nested camelCase layout."""
        for key in _NESTED_KEYS:
            if '.' in key and self._has_nested_key(config_data, key):
                return True
        return 'noBinary' in config_data

    def _has_nested_key(self, data: Dict[str, Any], key: str) -> bool:
        """Check if nested key exists in dictionary."""
        current: Any = data
        for k in key.split('.'):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return False
        return True

    def _get_nested(self, data: Dict[str, Any], key: str) -> Any:
        current: Any = data
        for k in key.split('.'):
            current = current[k]
        return current

    def _flatten_nested_config(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        flat = {}
        for nested_key, field_name in _NESTED_KEYS.items():
            if self._has_nested_key(config_data, nested_key):
                flat[field_name] = self._get_nested(config_data, nested_key)
        return flat

    def _build_config(self, flat: Dict[str, Any]) -> PackConfig:
        config = PackConfig()
        known = {f.name for f in fields(PackConfig)}

        for field_name, value in flat.items():
            if field_name not in known:
                logger.debug(f"Ignoring unknown config key: {field_name}")
                continue
            self._check_type(field_name, value)
            setattr(config, field_name, value)

        try:
            config.output_format = normalize_style(config.output_format)
        except ValueError as e:
            raise ParseError(f"Config key 'output_format': {e}") from e
        if config.chunk_size < 1:
            raise ParseError("Config key 'chunk_size' must be at least 1")
        return config

    def _check_type(self, field_name: str, value: Any) -> None:
        expected = _FIELD_TYPES[field_name]
        # bool is an int subclass; reject it for numeric fields
        if isinstance(value, bool) and bool not in expected:
            raise ParseError(f"Config key '{field_name}' has invalid value {value!r}")
        if not isinstance(value, expected):
            raise ParseError(f"Config key '{field_name}' has invalid value {value!r}")
        if field_name == 'ignore_custom_patterns' and not all(isinstance(p, str) for p in value):
            raise ParseError("Config key 'ignore_custom_patterns' must be a list of strings")


def load_config(repo_path: Path, custom_config_path: Optional[Path] = None) -> PackConfig:
    """Convenience function to load configuration."""
    manager = ConfigManager(repo_path)
    return manager.load_config(custom_config_path)
