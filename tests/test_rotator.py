"""Tests for the rotator module."""

import gzip
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from rotatefile.errors import BackupOverrunError, RotateIOError
from rotatefile.rotator import (
    backup_name,
    cleanup_backups,
    compress_file,
    retired_name,
    split_path,
)

TS = "20250115"


class TestNaming(unittest.TestCase):
    def test_split_path(self):
        self.assertEqual(split_path("/var/log/app.log"), ("/var/log", "app", ".log"))
        self.assertEqual(split_path("app.tar.log"), ("", "app.tar", ".log"))
        self.assertEqual(split_path("/tmp/noext"), ("/tmp", "noext", ""))

    def test_retired_name(self):
        name = retired_name("/var/log", "app", ".log", TS)
        self.assertRegex(name, r"^/var/log/app-20250115_x[0-9a-f]{16}\.log$")
        self.assertNotEqual(name, retired_name("/var/log", "app", ".log", TS))

    def test_backup_name(self):
        self.assertEqual(backup_name("/var/log", "app", ".log", TS, 7),
                         "/var/log/app-20250115_007.log.gz")


class TestCompressFile(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _retired(self, content=b"line one\nline two\n"):
        path = retired_name(self.tmpdir, "app", ".log", TS)
        with open(path, "wb") as f:
            f.write(content)
        return path

    def test_compress_creates_gz_and_removes_original(self):
        path = self._retired()
        gz_path = compress_file(path, self.tmpdir, "app", ".log", TS)

        self.assertEqual(gz_path, os.path.join(self.tmpdir, "app-20250115_000.log.gz"))
        self.assertTrue(os.path.exists(gz_path))
        self.assertFalse(os.path.exists(path))

    def test_compressed_content_roundtrips(self):
        content = bytes(range(256)) * 400
        gz_path = compress_file(self._retired(content), self.tmpdir, "app", ".log", TS)
        with gzip.open(gz_path, "rb") as f:
            self.assertEqual(f.read(), content)

    def test_skips_taken_sequence_numbers(self):
        for seq in (0, 1):
            open(backup_name(self.tmpdir, "app", ".log", TS, seq), "w").close()
        gz_path = compress_file(self._retired(), self.tmpdir, "app", ".log", TS)
        self.assertEqual(os.path.basename(gz_path), "app-20250115_002.log.gz")

    def test_backup_overrun(self):
        with patch("rotatefile.rotator.MAX_BACKUP_SEQUENCE", 3):
            for seq in range(3):
                open(backup_name(self.tmpdir, "app", ".log", TS, seq), "w").close()
            path = self._retired()
            with self.assertRaises(BackupOverrunError):
                compress_file(path, self.tmpdir, "app", ".log", TS)
        self.assertTrue(os.path.exists(path))

    def test_missing_retired_file(self):
        missing = os.path.join(self.tmpdir, "app-20250115_x0000000000000000.log")
        with self.assertRaises(RotateIOError) as ctx:
            compress_file(missing, self.tmpdir, "app", ".log", TS)
        self.assertIsInstance(ctx.exception.__cause__, FileNotFoundError)
        self.assertEqual(os.listdir(self.tmpdir), [])


class TestCleanupBackups(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _touch(self, name):
        path = os.path.join(self.tmpdir, name)
        open(path, "w").close()
        return path

    def _backups(self, base="app", ext=".log"):
        names = [
            "20250110_000", "20250111_000", "20250111_001", "20250112_000", "20250113_000",
        ]
        return [self._touch(f"{base}-{n}{ext}.gz") for n in names]

    def test_keeps_newest(self):
        paths = self._backups()
        deleted = cleanup_backups(self.tmpdir, "app", ".log", 2)

        self.assertEqual(deleted, paths[:3])
        for path in paths[:3]:
            self.assertFalse(os.path.exists(path))
        for path in paths[3:]:
            self.assertTrue(os.path.exists(path))

    def test_disabled_when_not_positive(self):
        paths = self._backups()
        self.assertEqual(cleanup_backups(self.tmpdir, "app", ".log", 0), [])
        self.assertEqual(cleanup_backups(self.tmpdir, "app", ".log", -1), [])
        self.assertTrue(all(os.path.exists(p) for p in paths))

    def test_at_limit_is_noop(self):
        self._backups()
        self.assertEqual(cleanup_backups(self.tmpdir, "app", ".log", 5), [])

    def test_ignores_unrelated_files(self):
        self._backups()
        others = [
            self._touch("app.log"),
            self._touch("app-20250101_x0123456789abcdef.log"),
            self._touch("app-20250101_12.log.gz"),
            self._touch("other-20250101_000.log.gz"),
            self._touch("app-20250101_000.txt.gz"),
        ]
        deleted = cleanup_backups(self.tmpdir, "app", ".log", 1)
        self.assertEqual(len(deleted), 4)
        self.assertTrue(all(os.path.exists(p) for p in others))

    def test_glob_characters_in_base_name(self):
        paths = self._backups(base="app[1]")
        deleted = cleanup_backups(self.tmpdir, "app[1]", ".log", 4)
        self.assertEqual(deleted, paths[:1])

    def test_idempotent(self):
        self._backups()
        cleanup_backups(self.tmpdir, "app", ".log", 2)
        self.assertEqual(cleanup_backups(self.tmpdir, "app", ".log", 2), [])

    def test_removal_failure_does_not_stop_sweep(self):
        paths = self._backups()
        real_remove = os.remove

        def flaky_remove(path):
            if path == paths[0]:
                raise PermissionError("denied")
            real_remove(path)

        with patch("rotatefile.rotator.os.remove", side_effect=flaky_remove):
            with self.assertLogs("rotatefile.rotator", level="WARNING"):
                deleted = cleanup_backups(self.tmpdir, "app", ".log", 2)

        self.assertEqual(deleted, paths[1:3])
        self.assertTrue(os.path.exists(paths[0]))


if __name__ == "__main__":
    unittest.main()
