# -*- coding: utf-8 -*-
"""Tests for config loading and logging helpers."""
from __future__ import annotations

import json
import logging
import os
import pathlib
import tempfile
import unittest
from unittest import mock

from gnu_gettext.exceptions import CatalogIOError, ValidationError
from gnu_gettext.utils.config import ENV_CONFIG, load_settings
from gnu_gettext.utils.logging import (
    ENV_LOG_LEVEL,
    compact_json,
    get_logger,
    level_from_string,
    resolve_level,
    temporarily,
)


class TestLoadSettings(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = pathlib.Path(self._tmp.name)
        self._cwd = os.getcwd()
        os.chdir(self.tmpdir)
        self._env = mock.patch.dict(os.environ, {}, clear=False)
        self._env.start()
        os.environ.pop(ENV_CONFIG, None)

    def tearDown(self):
        self._env.stop()
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def _write(self, name, data):
        path = self.tmpdir / name
        path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
        return str(path)

    def test_defaults_without_config(self):
        s = load_settings()
        self.assertEqual(s.default_domain, "messages")
        self.assertEqual(s.wrap_width, 79)
        self.assertEqual(s.byteorder, "little")
        self.assertIsNone(s.comment_tags)
        self.assertIsNone(s.source)

    def test_explicit_file(self):
        path = self._write("conf.json", {"default_domain": "app", "comment_tags": "TRANSLATORS:", "functions": {"t": "gettext"}, "bogus": 1})
        s = load_settings(path)
        self.assertEqual(s.default_domain, "app")
        self.assertEqual(s.comment_tags, ["TRANSLATORS:"])
        self.assertEqual(s.functions, {"t": "gettext"})
        self.assertEqual(s.source, path)

    def test_environment_variable(self):
        path = self._write("env.json", {"wrap_width": 0})
        os.environ[ENV_CONFIG] = path
        self.assertEqual(load_settings().wrap_width, 0)

    def test_implicit_local_file(self):
        self._write("gettext.json", {"byteorder": "big"})
        self.assertEqual(load_settings().byteorder, "big")

    def test_broken_implicit_file_is_ignored(self):
        self._write("gettext.json", "{not json")
        self.assertEqual(load_settings().default_domain, "messages")

    def test_explicit_missing_file(self):
        with self.assertRaises(CatalogIOError):
            load_settings(str(self.tmpdir / "missing.json"))

    def test_explicit_invalid_file(self):
        with self.assertRaises(ValidationError):
            load_settings(self._write("bad.json", "[1, 2]"))
        with self.assertRaises(ValidationError):
            load_settings(self._write("bad2.json", {"byteorder": "middle"}))
        with self.assertRaises(ValidationError):
            load_settings(self._write("bad3.json", {"wrap_width": "wide"}))


class TestLoggingHelpers(unittest.TestCase):

    def test_level_from_string(self):
        self.assertEqual(level_from_string("debug"), logging.DEBUG)
        self.assertEqual(level_from_string("nonsense"), logging.WARNING)
        self.assertEqual(level_from_string(None, logging.ERROR), logging.ERROR)

    def test_environment_overrides_config(self):
        with mock.patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR"}):
            self.assertEqual(resolve_level("DEBUG"), logging.ERROR)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_level("INFO"), logging.INFO)

    def test_child_loggers(self):
        self.assertEqual(get_logger("formats.po").name, "gnu_gettext.formats.po")
        self.assertEqual(get_logger("gnu_gettext.merge").name, "gnu_gettext.merge")
        self.assertEqual(len(get_logger().handlers), 1)

    def test_temporarily_restores_level(self):
        root = get_logger()
        before = root.level
        with temporarily(logging.DEBUG):
            self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(root.level, before)

    def test_compact_json_truncates(self):
        self.assertEqual(compact_json({"a": [1, 2]}), '{"a":[1,2]}')
        self.assertTrue(compact_json("x" * 50, limit=10).endswith("(truncated)"))


if __name__ == "__main__":
    unittest.main()
