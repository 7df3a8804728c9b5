# -*- coding: utf-8 -*-
"""Tests for the file helpers."""
from __future__ import annotations

import io
import os
import pathlib
import tempfile
import unittest
from unittest import mock

from gnu_gettext.exceptions import CatalogIOError
from gnu_gettext.utils.files import atomic_write, read_input, write_output


class TestAtomicWrite(unittest.TestCase):
    """Test atomic file writing."""

    def test_atomic_write_new_file(self):
        """Test atomic write creates new file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "messages.mo"
            atomic_write(path, b"\xde\x12\x04\x95")

            self.assertTrue(path.exists())
            self.assertEqual(path.read_bytes(), b"\xde\x12\x04\x95")
            self.assertEqual(os.listdir(tmpdir), ["messages.mo"])

    def test_atomic_write_existing_file(self):
        """Test atomic write overwrites existing file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "fr.po"
            path.write_text("Old content", encoding="utf-8")

            atomic_write(path, b"New content")

            self.assertEqual(path.read_text(encoding="utf-8"), "New content")

    def test_atomic_write_preserves_permissions(self):
        """Test that atomic write preserves file permissions."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "fr.po"
            path.write_text("Original", encoding="utf-8")
            os.chmod(str(path), 0o640)

            atomic_write(path, b"Updated")

            self.assertEqual(path.stat().st_mode & 0o777, 0o640)

    def test_atomic_write_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "fr" / "LC_MESSAGES" / "messages.mo"
            atomic_write(path, b"data")
            self.assertEqual(path.read_bytes(), b"data")

    def test_unwritable_target_raises_catalog_io_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = pathlib.Path(tmpdir) / "file"
            blocker.write_text("x", encoding="utf-8")
            with self.assertRaises(CatalogIOError) as ctx:
                atomic_write(blocker / "out.po", b"data")
            self.assertIn("out.po", str(ctx.exception))


class TestReadWrite(unittest.TestCase):
    """Dash-aware input and output."""

    def test_read_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = os.path.join(tmpdir, "missing.po")
            with self.assertRaises(CatalogIOError) as ctx:
                read_input(missing)
            self.assertEqual(ctx.exception.path, missing)
            self.assertIsInstance(ctx.exception, OSError)

    def test_read_stdin(self):
        fake = mock.Mock()
        fake.buffer = io.BytesIO(b'msgid "a"\nmsgstr "b"\n')
        with mock.patch("sys.stdin", fake):
            self.assertEqual(read_input("-"), b'msgid "a"\nmsgstr "b"\n')

    def test_write_stdout(self):
        fake = mock.Mock()
        fake.buffer = io.BytesIO()
        with mock.patch("sys.stdout", fake):
            write_output("-", "Ünïcode")
        self.assertEqual(fake.buffer.getvalue(), "Ünïcode".encode("utf-8"))

    def test_write_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "out.json")
            write_output(path, b"{}")
            self.assertEqual(pathlib.Path(path).read_bytes(), b"{}")


if __name__ == "__main__":
    unittest.main()
