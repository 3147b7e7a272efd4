"""Tests for text/binary classification and content encoding."""

import base64

import pytest

from ctxbundle.bundler.classifier import (
    BINARY,
    TEXT,
    classify,
    compute_pack_stats,
    decode_record,
    encode_record,
    encoding_for,
    file_extension,
    is_text_file,
)
from ctxbundle.bundler.types import EncodedFileRecord, FileRecord
from ctxbundle.bundler.utils.error_handling import ParseError


class TestClassify:

    @pytest.mark.parametrize("path", [
        "src/app.js", "README.md", "docs/page.mdx", "config.yaml", "pyproject.toml",
        "main.py", "lib.rs", "styles.scss", "data.csv", "schema.graphql", "App.vue",
        "run.sh", "index.html",
    ])
    def test_text_extensions(self, path):
        assert classify(path) == TEXT
        assert is_text_file(path)
        assert encoding_for(path) == "utf8"

    @pytest.mark.parametrize("path", ["logo.png", "font.woff2", "app.exe", "Makefile", "LICENSE", ".gitignore"])
    def test_everything_else_is_binary(self, path):
        assert classify(path) == BINARY
        assert encoding_for(path) == "base64"

    def test_extension_match_is_case_insensitive(self):
        assert classify("NOTES.MD") == TEXT
        assert classify("Component.TSX") == TEXT

    def test_only_final_suffix_counts(self):
        assert classify("bundle.js.map") == BINARY
        assert classify("archive.png.txt") == TEXT

    def test_file_extension(self):
        assert file_extension("a/b/c.PY") == ".py"
        assert file_extension("Dockerfile") == ""
        assert file_extension("src\\main.go") == ".go"


class TestEncoding:

    def test_text_file_is_decoded_utf8(self):
        record = encode_record(FileRecord("src/app.js", "const s = 'héllo';\n".encode("utf-8")))
        assert record.encoding == "utf8"
        assert record.content == "const s = 'héllo';\n"

    def test_binary_file_is_base64(self):
        raw = bytes(range(256))
        record = encode_record(FileRecord("blob.bin", raw))
        assert record.encoding == "base64"
        assert base64.b64decode(record.content) == raw

    def test_invalid_utf8_text_is_replaced(self, caplog):
        record = encode_record(FileRecord("notes.txt", b"ok \xff\xfe done"))
        assert record.encoding == "utf8"
        assert "�" in record.content
        assert "not valid UTF-8" in caplog.text

    def test_decode_restores_bytes(self):
        raw = b"\x00\x01binary\xff"
        assert decode_record(encode_record(FileRecord("x.dat", raw))) == raw
        text = "line one\r\nline two\n".encode("utf-8")
        assert decode_record(encode_record(FileRecord("x.txt", text))) == text

    def test_decode_rejects_malformed_base64(self):
        with pytest.raises(ParseError, match="Invalid base64"):
            decode_record(EncodedFileRecord("x.png", "not*base64!", "base64"))

    def test_decode_rejects_unknown_encoding(self):
        with pytest.raises(ParseError, match="Unknown encoding"):
            decode_record(EncodedFileRecord("x.txt", "abc", "latin1"))


class TestPackStats:

    def test_counts_and_total_size(self):
        stats = compute_pack_stats([
            FileRecord("a.js", b"12345"),
            FileRecord("b.md", b"12"),
            FileRecord("c.png", b"123"),
        ])
        assert stats.total_size == 10
        assert stats.text_files == 2
        assert stats.binary_files == 1
        assert stats.total_files == 3

    def test_empty(self):
        stats = compute_pack_stats([])
        assert (stats.total_size, stats.total_files) == (0, 0)
