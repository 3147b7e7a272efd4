"""Tests for splitting output into parts plus a manifest."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from ctxbundle.bundler.splitter import (
    manifest_path_for,
    output_base,
    part_file_name,
    split_ignore_patterns,
    split_output,
    split_text,
    write_split_output,
)
from ctxbundle.bundler.pattern_filter import IgnoreSet, escape_pattern


class TestSplitText:

    def test_parts_are_bounded_and_ordered(self):
        text = "a" * 1_000_000 + "b" * 1_000_000 + "c" * 500_000
        chunks = split_text(text, 1_000_000)
        assert [len(c) for c in chunks] == [1_000_000, 1_000_000, 500_000]
        assert chunks[0] == "a" * 1_000_000
        assert chunks[2] == "c" * 500_000
        assert "".join(chunks) == text

    def test_exact_multiple(self):
        assert split_text("abcdef", 3) == ["abc", "def"]

    def test_short_text_is_one_part(self):
        assert split_text("hello", 100) == ["hello"]

    def test_empty_text_has_no_parts(self):
        assert split_text("", 10) == []

    def test_chunks_count_characters_not_bytes(self):
        assert split_text("éééé", 2) == ["éé", "éé"]

    @pytest.mark.parametrize("size", [0, -5])
    def test_chunk_size_must_be_positive(self, size):
        with pytest.raises(ValueError):
            split_text("abc", size)


class TestNaming:

    def test_output_base_strips_known_extensions(self):
        assert output_base(Path("out/project-context.json")) == Path("out/project-context")
        assert output_base(Path("context.txt")) == Path("context")
        assert output_base(Path("context.data")) == Path("context.data")

    def test_part_and_manifest_names(self):
        assert part_file_name("project-context", 2, ".json") == "project-context_part_2.json"
        assert manifest_path_for(Path("out/ctx.txt")) == Path("out/ctx_manifest.json")

    def test_split_output_names_parts_by_style(self):
        chunks, manifest = split_output(
            "x" * 25, 10, Path("ctx.json"), "text", source="app", created_at="2024-01-01T00:00:00.000Z"
        )
        assert len(chunks) == 3
        assert manifest.parts == ("ctx_part_1.txt", "ctx_part_2.txt", "ctx_part_3.txt")
        assert manifest.source == "app"
        assert manifest.created_at == "2024-01-01T00:00:00.000Z"


class TestWriteSplitOutput:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_parts_and_manifest_on_disk(self):
        output_path = self.temp_dir / "project-context.json"
        text = '{\r\n  "k": "v"\n}' * 10
        chunks, manifest = split_output(text, 16, output_path, "json", source="app")
        part_paths, manifest_path = write_split_output(chunks, manifest, output_path)

        assert manifest_path == self.temp_dir / "project-context_manifest.json"
        assert [p.name for p in part_paths] == list(manifest.parts)
        assert not output_path.exists()

        data = json.loads(manifest_path.read_text(encoding="utf-8"))
        assert data["source"] == "app"
        assert data["parts"] == list(manifest.parts)

        rebuilt = "".join(p.read_bytes().decode("utf-8") for p in part_paths)
        assert rebuilt == text

    def test_no_temporary_files_left_behind(self):
        output_path = self.temp_dir / "ctx.json"
        chunks, manifest = split_output("abcdef", 2, output_path, "json", source="app")
        write_split_output(chunks, manifest, output_path)
        assert not [p for p in self.temp_dir.iterdir() if p.name.endswith(".tmp")]


class TestSplitIgnorePatterns:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_outputs_inside_root_are_ignored(self):
        patterns = split_ignore_patterns(self.temp_dir / "project-context.json", self.temp_dir)
        ignore_set = IgnoreSet(patterns)
        assert ignore_set.matches("project-context.json")
        assert ignore_set.matches("project-context_part_1.json")
        assert ignore_set.matches("project-context_manifest.json")
        assert not ignore_set.matches("src/project-context.json")
        assert not ignore_set.matches("other.json")

    def test_nested_output_location(self):
        patterns = split_ignore_patterns(self.temp_dir / "out" / "ctx.txt", self.temp_dir)
        ignore_set = IgnoreSet(patterns)
        assert ignore_set.matches("out/ctx.txt")
        assert ignore_set.matches("out/ctx_part_12.txt")
        assert not ignore_set.matches("ctx.txt")

    def test_glob_characters_in_output_name_are_literal(self):
        patterns = split_ignore_patterns(self.temp_dir / "ctx[v].json", self.temp_dir)
        ignore_set = IgnoreSet(patterns)
        assert ignore_set.matches("ctx[v].json")
        assert ignore_set.matches("ctx[v]_part_2.json")
        assert ignore_set.matches("ctx[v]_manifest.json")
        assert not ignore_set.matches("ctxv.json")
        assert not ignore_set.matches("ctxv_part_2.json")

    def test_escape_pattern(self):
        assert escape_pattern("a*b?[c]!#\\.json") == "a\\*b\\?\\[c\\]\\!\\#\\\\.json"
        assert escape_pattern("out/ctx.json") == "out/ctx.json"

    def test_output_outside_root_adds_nothing(self):
        root = self.temp_dir / "project"
        root.mkdir()
        assert split_ignore_patterns(self.temp_dir / "ctx.json", root) == []
