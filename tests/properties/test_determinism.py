"""Property-based tests for deterministic packing.

- Packing the same tree twice yields the same records in the same order
- Re-packing with the output inside the root does not pick up earlier output
- Record order is lexicographic per directory, independent of creation order
- The ignore predicate gives one answer per path
"""

from __future__ import annotations

import random
import tempfile
from pathlib import Path

from hypothesis import given, settings, strategies as st

from ctxbundle.bundler.pattern_filter import IgnoreSet
from ctxbundle.library import PackOptions, ProjectPacker
from tests.project_tree import ProjectTree
from tests.properties.strategies import project_files, relative_paths

PATTERNS = st.lists(
    st.sampled_from(["*.png", "*.md", "!README.md", "docs/", "/top.txt", "a*", "!*.js", "build"]),
    max_size=5,
)


def sort_key(path: str):
    # Directory-by-directory name order, as the walker visits entries
    return path.split("/")


class TestDeterminismProperties:

    @given(project_files(min_size=1), st.sampled_from(["json", "text"]))
    @settings(max_examples=25, deadline=None)
    def test_repack_is_identical(self, files, style):
        with tempfile.TemporaryDirectory() as temp_dir:
            root = ProjectTree("project", files).create_on_disk(temp_dir)
            output_path = Path(root) / ("ctx.json" if style == "json" else "ctx.txt")
            options = PackOptions(
                output_format=style,
                output_path=output_path,
                use_gitignore=False,
                use_default_patterns=False,
            )

            first = ProjectPacker(options).pack(root)
            second = ProjectPacker(options).pack(root)

            assert second.bundle.files == first.bundle.files
            if style == "text":
                assert second.output == first.output

    @given(project_files(min_size=1))
    @settings(max_examples=25, deadline=None)
    def test_order_does_not_depend_on_creation_order(self, files):
        items = list(files.items())
        random.Random(len(items)).shuffle(items)

        with tempfile.TemporaryDirectory() as temp_dir:
            root = ProjectTree("project", dict(items)).create_on_disk(temp_dir)
            options = PackOptions(
                output_path=Path(temp_dir) / "ctx.json",
                use_gitignore=False,
                use_default_patterns=False,
            )
            result = ProjectPacker(options).pack(root, write=False)

            paths = [record.path for record in result.bundle.files]
            assert sorted(paths) == sorted(files)
            assert paths == sorted(paths, key=sort_key)

    @given(PATTERNS, relative_paths(), st.booleans())
    def test_ignore_predicate_is_pure(self, patterns, path, is_dir):
        ignore_set = IgnoreSet(patterns)
        first = ignore_set.matches(path, is_dir=is_dir)
        assert IgnoreSet(patterns).matches(path, is_dir=is_dir) == first
        assert ignore_set.matches(path, is_dir=is_dir) == first

    @given(PATTERNS, project_files(min_size=1))
    @settings(max_examples=25, deadline=None)
    def test_packed_paths_are_never_ignored(self, patterns, files):
        with tempfile.TemporaryDirectory() as temp_dir:
            root = ProjectTree("project", files).create_on_disk(temp_dir)
            options = PackOptions(
                output_path=Path(temp_dir) / "ctx.json",
                ignore_patterns=patterns,
                use_gitignore=False,
                use_default_patterns=False,
            )
            result = ProjectPacker(options).pack(root, write=False)

            ignore_set = IgnoreSet(patterns)
            for record in result.bundle.files:
                assert not ignore_set.matches(record.path)
