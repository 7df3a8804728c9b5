# -*- coding: utf-8 -*-
"""Tests for the in-memory catalog model."""
from __future__ import annotations

import unittest

from gnu_gettext.catalog import Catalog, Headers, Translation
from gnu_gettext.exceptions import ValidationError
from gnu_gettext.plurals import PluralRegistry


class TestTranslation(unittest.TestCase):
    """Entry helpers."""

    def test_translate_sets_first_form(self):
        t = Translation(msgid="File", plural="Files", translations=["", ""])
        t.translate("Fichier")
        self.assertEqual(t.translations, ["Fichier", ""])
        self.assertTrue(t.is_translated)

    def test_untranslated(self):
        t = Translation(msgid="Hello")
        self.assertEqual(t.translation, "")
        self.assertFalse(t.is_translated)

    def test_references_are_not_duplicated(self):
        t = Translation(msgid="Hello")
        t.add_reference("index.php", 10)
        t.add_reference("index.php", 10)
        t.add_reference("index.php", 20)
        self.assertEqual(t.references, [("index.php", 10), ("index.php", 20)])

    def test_merge_keeps_existing_translation(self):
        """Incoming plural forms only fill an entry that has none."""
        mine = Translation(msgid="Hello", translations=["Bonjour"], flags=["fuzzy"])
        other = Translation(msgid="Hello", translations=["Salut"], flags=["php-format"], references=[("a.php", 3)])
        mine.merge(other)
        self.assertEqual(mine.translations, ["Bonjour"])
        self.assertEqual(mine.flags, ["fuzzy", "php-format"])
        self.assertEqual(mine.references, [("a.php", 3)])

    def test_merge_fills_missing_plural(self):
        mine = Translation(msgid="%d file")
        mine.merge(Translation(msgid="%d file", plural="%d files", translations=["%d fichier", "%d fichiers"]))
        self.assertEqual(mine.plural, "%d files")
        self.assertEqual(mine.translations, ["%d fichier", "%d fichiers"])

    def test_merge_reactivates_obsolete_entry(self):
        mine = Translation(msgid="Old", disabled=True)
        mine.merge(Translation(msgid="Old"))
        self.assertFalse(mine.disabled)

    def test_copy_is_independent(self):
        t = Translation(msgid="Hello", references=[("a.php", 1)])
        clone = t.copy()
        clone.add_reference("b.php", 2)
        self.assertEqual(t.references, [("a.php", 1)])


class TestHeaders(unittest.TestCase):
    """Ordered header map."""

    def test_order_and_serialization(self):
        h = Headers([("Project-Id-Version", "app 1.0"), ("Language", "fr")])
        h["MIME-Version"] = "1.0"
        self.assertEqual(list(h), ["Project-Id-Version", "Language", "MIME-Version"])
        self.assertEqual(h.to_string(), "Project-Id-Version: app 1.0\nLanguage: fr\nMIME-Version: 1.0\n")

    def test_none_unsets(self):
        h = Headers(Language="fr")
        h["Language"] = None
        self.assertNotIn("Language", h)
        self.assertEqual(h.to_string(), "")

    def test_from_string(self):
        h = Headers.from_string("Language: de\nContent-Type: text/plain; charset=ISO-8859-1\n\n")
        self.assertEqual(h["Language"], "de")
        self.assertEqual(h.charset, "ISO-8859-1")

    def test_merge_fills_only_empty_values(self):
        h = Headers([("Language", "fr"), ("Last-Translator", "")])
        h.merge_with({"Language": "de", "Last-Translator": "Ana", "MIME-Version": "1.0"})
        self.assertEqual(h["Language"], "fr")
        self.assertEqual(h["Last-Translator"], "Ana")
        self.assertEqual(h["MIME-Version"], "1.0")

    def test_keys_are_case_sensitive(self):
        h = Headers(Language="fr")
        h["language"] = "de"
        self.assertEqual(len(h), 2)


class TestCatalog(unittest.TestCase):
    """Keyed, ordered entry collection."""

    def test_add_merges_same_key(self):
        c = Catalog()
        first = Translation(msgid="Hello", references=[("index.php", 10)])
        c.add(first)
        c.add(Translation(msgid="Hello", references=[("index.php", 20)]))
        self.assertEqual(len(c), 1)
        self.assertEqual(c.find(None, "Hello").references, [("index.php", 10), ("index.php", 20)])

    def test_context_makes_a_distinct_key(self):
        c = Catalog()
        c.add(Translation(msgid="Open"))
        c.add(Translation(msgid="Open", context="menu"))
        self.assertEqual(len(c), 2)
        self.assertIsNotNone(c.find("menu", "Open"))

    def test_insertion_order(self):
        c = Catalog()
        for msgid in ("b", "a", "c"):
            c.add(Translation(msgid=msgid))
        self.assertEqual([t.msgid for t in c], ["b", "a", "c"])

    def test_remove_by_key(self):
        c = Catalog()
        c.add(Translation(msgid="Hello", translations=["Bonjour"]))
        self.assertTrue(c.remove(Translation(msgid="Hello")))
        self.assertFalse(c.remove(Translation(msgid="Hello")))
        self.assertEqual(len(c), 0)

    def test_merge_with_self_is_idempotent(self):
        c = Catalog(domain="app", headers=[("Language", "fr")])
        c.add(Translation(msgid="Hello", translations=["Bonjour"], references=[("a.php", 1)]))
        c.add(Translation(msgid="%d file", plural="%d files", translations=["a", "b"]))
        before = [(t.key, t.plural, t.translations, t.references) for t in c]
        c.merge_with(c.copy())
        self.assertEqual([(t.key, t.plural, t.translations, t.references) for t in c], before)
        self.assertEqual(dict(c.headers), {"Language": "fr"})

    def test_merge_with_copies_entries(self):
        a, b = Catalog(), Catalog(domain="app")
        b.add(Translation(msgid="New"))
        a.merge_with(b)
        a.find(None, "New").translate("Nouveau")
        self.assertEqual(b.find(None, "New").translation, "")
        self.assertEqual(a.domain, "app")

    def test_language_is_a_header(self):
        c = Catalog(language="pt_BR")
        self.assertEqual(c.headers["Language"], "pt_BR")
        c.language = None
        self.assertIsNone(c.language)

    def test_plural_formula_from_header(self):
        c = Catalog(headers=[("Plural-Forms", "nplurals=3; plural=(n==1 ? 0 : n==2 ? 1 : 2);")])
        formula = c.plural_formula()
        self.assertEqual(formula.count, 3)
        self.assertEqual(formula.evaluate(2), 1)

    def test_plural_formula_from_registry(self):
        c = Catalog(language="fr")
        self.assertIsNone(c.plural_formula())
        formula = c.plural_formula(PluralRegistry())
        self.assertEqual(formula.count, 2)
        self.assertEqual(formula.evaluate(1), 0)
        self.assertEqual(formula.evaluate(2), 1)

    def test_bad_plural_header_without_registry(self):
        c = Catalog(headers=[("Plural-Forms", "two forms please")])
        with self.assertRaises(ValidationError):
            c.plural_formula()


if __name__ == "__main__":
    unittest.main()
