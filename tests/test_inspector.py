"""Tests for inspector logic."""

import gzip
import os

import pytest

from rotatefile.inspector import list_stream_files, read_file, search_files


@pytest.fixture()
def stream_dir(tmp_path):
    (tmp_path / "app.log").write_bytes(b"current ERROR here\n")
    (tmp_path / "app-20250115_x0123456789abcdef.log").write_bytes(b"retired line\n")
    with gzip.open(tmp_path / "app-20250114_000.log.gz", "wb") as f:
        f.write(b"old line\nold ERROR line\n")
    (tmp_path / "other.log").write_bytes(b"ERROR elsewhere\n")
    (tmp_path / "notes.txt").write_bytes(b"ERROR\n")
    return tmp_path


class TestListStreamFiles:
    def test_lists_only_this_stream(self, stream_dir):
        files = list_stream_files(str(stream_dir / "app.log"))
        assert files == [
            "app-20250114_000.log.gz",
            "app-20250115_x0123456789abcdef.log",
            "app.log",
        ]

    def test_empty_directory(self, tmp_path):
        assert list_stream_files(str(tmp_path / "app.log")) == []


class TestReadFile:
    def test_reads_plain(self, stream_dir):
        assert read_file(str(stream_dir), "app.log") == b"current ERROR here\n"

    def test_decompresses_backup(self, stream_dir):
        assert read_file(str(stream_dir), "app-20250114_000.log.gz") == b"old line\nold ERROR line\n"

    def test_missing_file(self, stream_dir):
        with pytest.raises(FileNotFoundError):
            read_file(str(stream_dir), "app-19990101_000.log.gz")


class TestSearchFiles:
    def test_searches_all_stream_files(self, stream_dir):
        results = search_files(str(stream_dir / "app.log"), "ERROR")
        assert results == [
            ("app-20250114_000.log.gz", 2, "old ERROR line"),
            ("app.log", 1, "current ERROR here"),
        ]

    def test_skips_corrupt_backup(self, stream_dir):
        (stream_dir / "app-20250113_000.log.gz").write_bytes(b"not gzip")
        results = search_files(str(stream_dir / "app.log"), "line")
        assert [r[0] for r in results] == [
            "app-20250114_000.log.gz",
            "app-20250114_000.log.gz",
            "app-20250115_x0123456789abcdef.log",
        ]
        assert os.path.exists(stream_dir / "app-20250113_000.log.gz")


class TestListWithoutExtension:
    def test_only_rotated_name_shapes(self, tmp_path):
        for name in ("app", "app-20250115_x0123456789abcdef", "app-20250114_000.gz",
                     "app-notes", "app-20250114_000.txt.gz", "app-20250115_xshort"):
            (tmp_path / name).write_bytes(b"")
        assert list_stream_files(str(tmp_path / "app")) == [
            "app",
            "app-20250114_000.gz",
            "app-20250115_x0123456789abcdef",
        ]
