# -*- coding: utf-8 -*-
"""Tests for Scanner: domains, entry kinds, comments and file handling."""
from __future__ import annotations

import os
import pathlib
import tempfile
import textwrap
import unittest

from gnu_gettext.exceptions import CatalogIOError, ValidationError
from gnu_gettext.scanners import Scanner, language_for_path, resolve_language


def _source(lines):
    """PHP source with ``lines`` mapping line numbers to code."""
    out = ["<?php"] + [""] * max(lines)
    for number, code in lines.items():
        out[number - 1] = code
    return "\n".join(out) + "\n"


class TestScanner(unittest.TestCase):

    def test_same_message_twice_gives_one_entry(self):
        scanner = Scanner()
        scanner.scan_string(_source({10: "echo gettext('Hello');", 20: "echo gettext('Hello');"}), "a.php")
        catalog = scanner.translations["messages"]
        self.assertEqual(len(catalog), 1)
        self.assertEqual(catalog.find(None, "Hello").references, [("a.php", 10), ("a.php", 20)])

    def test_rescanning_does_not_duplicate_references(self):
        scanner = Scanner()
        for _ in range(2):
            scanner.scan_string("<?php __('Hi');", "a.php")
        self.assertEqual(scanner.translations["messages"].find(None, "Hi").references, [("a.php", 1)])

    def test_entry_kinds(self):
        scanner = Scanner()
        scanner.scan_string(textwrap.dedent("""\
            <?php
            __('Plain');
            n__('%d file', '%d files', $n);
            p__('menu', 'Open');
            np__('menu', '%d item', '%d items', $n);
            noop__('Later');
        """), "k.php")
        catalog = scanner.translations["messages"]
        self.assertEqual(
            sorted((t.context or "", t.msgid, t.plural) for t in catalog),
            [
                ("", "%d file", "%d files"),
                ("", "Later", None),
                ("", "Plain", None),
                ("menu", "%d item", "%d items"),
                ("menu", "Open", None),
            ],
        )

    def test_domains(self):
        scanner = Scanner(default_domain="app")
        scanner.scan_string("<?php d__('admin', 'Save'); dnp__('admin', 'ctx', 'One', 'Many', 2);", "d.php")
        self.assertEqual(set(scanner.translations), {"app", "admin"})
        self.assertEqual(len(scanner.translations["app"]), 0)
        admin = scanner.translations["admin"]
        self.assertEqual(admin.domain, "admin")
        self.assertIsNotNone(admin.find(None, "Save"))
        self.assertEqual(admin.find("ctx", "One").plural, "Many")

    def test_unusable_calls_are_skipped(self):
        scanner = Scanner()
        recorded = scanner.scan_string("<?php n__('only one'); __($var); p__('ctx', $msg); __('ok');", "s.php")
        self.assertEqual(recorded, 1)
        self.assertEqual([t.msgid for t in scanner.translations["messages"]], ["ok"])

    def test_empty_msgid_warns(self):
        scanner = Scanner()
        with self.assertLogs("gnu_gettext.scanners", level="WARNING") as logs:
            scanner.scan_string("<?php __('');", "e.php")
        self.assertIn("e.php:1", logs.output[0])
        self.assertEqual(len(scanner.translations["messages"]), 0)

    def test_custom_functions(self):
        scanner = Scanner(functions={"t": "gettext", "tn": "ngettext"})
        scanner.scan_string("<?php t('Custom'); tn('a', 'b', 1);", "c.php")
        catalog = scanner.translations["messages"]
        self.assertIsNotNone(catalog.find(None, "Custom"))
        self.assertEqual(catalog.find(None, "a").plural, "b")

    def test_unknown_function_kind(self):
        with self.assertRaises(ValidationError):
            Scanner(functions={"t": "translate"})

    def test_comment_tags(self):
        source = textwrap.dedent("""\
            <?php
            // TRANSLATORS: greeting
            // on the home page
            __('Hi');
            // plain note
            __('Bye');
        """)
        cases = {
            None: ([], []),
            ("TRANSLATORS:",): (["TRANSLATORS: greeting", "on the home page"], []),
            ("",): (["TRANSLATORS: greeting", "on the home page"], ["plain note"]),
        }
        for tags, (hi, bye) in cases.items():
            with self.subTest(tags=tags):
                scanner = Scanner(comment_tags=tags)
                scanner.scan_string(source, "t.php")
                catalog = scanner.translations["messages"]
                self.assertEqual(catalog.find(None, "Hi").extracted_comments, hi)
                self.assertEqual(catalog.find(None, "Bye").extracted_comments, bye)


class TestLanguages(unittest.TestCase):

    def test_resolve_language(self):
        self.assertEqual(resolve_language("js"), "JavaScript")
        self.assertEqual(resolve_language("PHP"), "PHP")
        self.assertEqual(resolve_language(" JavaScript "), "JavaScript")
        with self.assertRaises(ValidationError):
            resolve_language("cobol")

    def test_language_for_path(self):
        self.assertEqual(language_for_path("src/app.MJS"), "JavaScript")
        self.assertEqual(language_for_path("index.phtml"), "PHP")
        self.assertIsNone(language_for_path("README"))

    def test_language_choice(self):
        js = "gettext(`Template`);"
        scanner = Scanner()
        self.assertEqual(scanner.scan_string(js, "a.js"), 1)
        self.assertEqual(scanner.scan_string(js, "a.txt"), 0)  # PHP by default: no open tag
        self.assertEqual(scanner.scan_string(js, "a.txt", language="js"), 1)
        self.assertEqual(Scanner(language="JavaScript").scan_string(js, "a.php"), 1)


class TestScanFile(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = pathlib.Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_reference_uses_given_filename(self):
        path = self.tmpdir / "view.js"
        path.write_text("\ufeff__('From file');\r\n__('Second');\r\n", encoding="utf-8")
        scanner = Scanner()
        self.assertEqual(scanner.scan_file(path, filename="src/view.js"), 2)
        catalog = scanner.translations["messages"]
        self.assertEqual(catalog.find(None, "Second").references, [("src/view.js", 2)])

    def test_invalid_utf8_is_replaced(self):
        path = self.tmpdir / "latin.php"
        path.write_bytes(b"<?php __('caf\xe9'); __('ok');")
        scanner = Scanner()
        with self.assertLogs("gnu_gettext.scanners", level="WARNING"):
            scanner.scan_file(path)
        self.assertIsNotNone(scanner.translations["messages"].find(None, "ok"))

    def test_missing_file(self):
        with self.assertRaises(CatalogIOError) as ctx:
            Scanner().scan_file(os.path.join(self._tmp.name, "missing.php"))
        self.assertTrue(ctx.exception.path.endswith("missing.php"))


if __name__ == "__main__":
    unittest.main()
