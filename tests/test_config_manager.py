"""Tests for loading ctxpack.config.json."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from ctxbundle.bundler.clipboard import CLIPBOARD_LIMIT_BYTES
from ctxbundle.bundler.config_manager import CONFIG_FILE_NAME, ConfigManager, PackConfig, load_config
from ctxbundle.bundler.utils.error_handling import NotFoundError, ParseError


class TestConfigManager:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_config(self, data, name=CONFIG_FILE_NAME):
        path = self.temp_dir / name
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    def test_defaults_without_file(self):
        manager = ConfigManager(self.temp_dir)
        config = manager.load_config()
        assert config == PackConfig()
        assert config.output_format == "json"
        assert config.chunk_size == 1_000_000
        assert config.clipboard_limit_bytes == CLIPBOARD_LIMIT_BYTES
        assert manager.config_path is None

    def test_flat_config(self):
        self.write_config({
            "output_format": "text",
            "split": True,
            "chunk_size": 5000,
            "ignore_custom_patterns": ["*.csv"],
            "no_binary": True,
        })
        manager = ConfigManager(self.temp_dir)
        config = manager.load_config()
        assert config.output_format == "text"
        assert config.split is True
        assert config.chunk_size == 5000
        assert config.ignore_custom_patterns == ["*.csv"]
        assert config.no_binary is True
        assert manager.config_path == self.temp_dir / CONFIG_FILE_NAME

    def test_nested_config(self):
        self.write_config({
            "output": {"format": "flattened", "filePath": "out/ctx.txt"},
            "split": {"enabled": True, "chunkSize": 250},
            "ignore": {"customPatterns": ["docs/"], "useGitignore": False},
            "copy": {"enabled": True},
            "noBinary": True,
        })
        config = load_config(self.temp_dir)
        assert config.output_format == "text"
        assert config.output_file_path == "out/ctx.txt"
        assert config.split is True
        assert config.chunk_size == 250
        assert config.ignore_custom_patterns == ["docs/"]
        assert config.ignore_use_gitignore is False
        assert config.ignore_use_default_patterns is True
        assert config.copy_to_clipboard is True
        assert config.no_binary is True

    def test_unknown_keys_are_ignored(self):
        self.write_config({"split": True, "theme": "dark"})
        assert load_config(self.temp_dir).split is True

    def test_invalid_json_falls_back_to_defaults(self, caplog):
        self.write_config("{ not json")
        config = load_config(self.temp_dir)
        assert config == PackConfig()
        assert "Could not load config file" in caplog.text

    def test_non_object_falls_back_to_defaults(self):
        self.write_config([1, 2, 3])
        assert load_config(self.temp_dir) == PackConfig()

    @pytest.mark.parametrize("data", [
        {"chunk_size": "big"},
        {"chunk_size": True},
        {"split": "yes"},
        {"ignore_custom_patterns": "*.csv"},
        {"ignore_custom_patterns": ["*.csv", 3]},
        {"output_format": "yaml"},
        {"chunk_size": 0},
        {"split": {"chunkSize": -1}},
    ])
    def test_invalid_values(self, data):
        self.write_config(data)
        with pytest.raises(ParseError):
            load_config(self.temp_dir)

    def test_custom_config_path(self):
        custom = self.write_config({"output_format": "text"}, name="custom.json")
        manager = ConfigManager(self.temp_dir / "elsewhere")
        assert manager.load_config(custom).output_format == "text"
        assert manager.config_path == custom

    def test_missing_custom_config_path(self):
        with pytest.raises(NotFoundError):
            load_config(self.temp_dir, self.temp_dir / "nope.json")
