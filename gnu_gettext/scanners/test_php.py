# -*- coding: utf-8 -*-
"""Tests for the PHP tokenizer and call-site scanner."""
from __future__ import annotations

import textwrap
import unittest

from gnu_gettext.scanners.calls import FUNCTIONS, NAME, PUNCT, STRING
from gnu_gettext.scanners.php import scan, tokenize, unescape_double


def _calls(source):
    return [(site.name, site.line, site.arguments) for site in scan(textwrap.dedent(source).lstrip(), FUNCTIONS)]


class TestTokenize(unittest.TestCase):
    """Lexical rules."""

    def test_simple_statement(self):
        tokens = tokenize("<?php echo gettext('Hello'); ?>")
        self.assertEqual(
            [(t.kind, t.value) for t in tokens],
            [
                (NAME, "echo"),
                (NAME, "gettext"),
                (PUNCT, "("),
                (STRING, "Hello"),
                (PUNCT, ")"),
                (PUNCT, ";"),
                (PUNCT, ";"),
            ],
        )

    def test_line_numbers(self):
        tokens = tokenize("<?php\n\n$a = 'one\ntwo';\n__('x');\n")
        strings = [(t.value, t.line, t.end_line) for t in tokens if t.kind == STRING]
        self.assertEqual(strings, [("one\ntwo", 3, 4), ("x", 5, 5)])

    def test_inline_html_is_skipped(self):
        self.assertEqual(tokenize("<p>__('No')</p>"), [])
        self.assertEqual(_calls("<p>__('No')</p><?php __('Yes') ?><b>__('No')</b>"), [("__", 1, ["Yes"])])

    def test_short_echo_tag(self):
        self.assertEqual(_calls("<h1><?= __('Title') ?></h1>"), [("__", 1, ["Title"])])

    def test_single_quoted_escapes(self):
        tokens = tokenize(r"<?php 'It\'s a \n test \\ ok';")
        self.assertEqual(tokens[0].value, "It's a \\n test \\ ok")

    def test_double_quoted_escapes(self):
        self.assertEqual(unescape_double(r"Tab\there \x41\u{e9}\101 \$5 \q"), "Tab\there AéA $5 \\q")

    def test_octal_and_hex_escapes_are_utf8_bytes(self):
        self.assertEqual(unescape_double(r"caf\xc3\xa9 \303\251"), "café é")


class TestScan(unittest.TestCase):
    """Call-site detection."""

    def test_calls_and_arguments(self):
        self.assertEqual(_calls("""
            <?php
            echo gettext('Hello');
            echo ngettext('%d file', '%d files', $n);
            echo pgettext("menu", "Open");
        """), [
            ("gettext", 2, ["Hello"]),
            ("ngettext", 3, ["%d file", "%d files", None]),
            ("pgettext", 4, ["menu", "Open"]),
        ])

    def test_comments_and_strings_are_not_calls(self):
        self.assertEqual(_calls("""
            <?php
            // gettext('No')
            # __('No')
            /* _('No')
               __('No') */
            $s = 'gettext("No")';
            $t = "__('No')";
            __('Yes');
        """), [("__", 8, ["Yes"])])

    def test_line_comment_ends_at_close_tag(self):
        self.assertEqual(_calls("<?php // note ?> <p>__('No')</p><?php __('Yes');"), [("__", 1, ["Yes"])])

    def test_attribute_is_not_a_comment(self):
        self.assertEqual(_calls("<?php\n#[Attr]\nfunction f() { return __('Yes'); }"), [("__", 3, ["Yes"])])

    def test_interpolated_string_is_not_a_literal(self):
        self.assertEqual(_calls('<?php __("Hello $name"); __("Hi {$user->name}"); __("Cost: \\$5");'), [
            ("__", 1, [None]),
            ("__", 1, [None]),
            ("__", 1, ["Cost: $5"]),
        ])

    def test_concatenation(self):
        self.assertEqual(_calls("""
            <?php
            __('Hello ' . "big " . 'world');
            __('Hello ' . $name);
        """), [("__", 2, ["Hello big world"]), ("__", 3, [None])])

    def test_heredoc_and_nowdoc(self):
        source = textwrap.dedent("""\
            <?php
            $a = __(<<<EOT
                Hello
                  World\\t!
                EOT);
            $b = __(<<<'EOT'
            Raw \\n text
            EOT
            );
            $c = __(<<<"EOT"
            Dear $name
            EOT);
        """)
        sites = scan(source, FUNCTIONS)
        self.assertEqual([(s.line, s.arguments) for s in sites], [
            (2, ["Hello\n  World\t!"]),
            (6, ["Raw \\n text"]),
            (10, [None]),
        ])

    def test_namespaced_and_method_calls(self):
        self.assertEqual(_calls("""
            <?php
            \\gettext('A');
            Foo\\Bar\\__('B');
            $t->gettext('C');
            Translator::_('D');
        """), [("gettext", 2, ["A"]), ("__", 3, ["B"]), ("gettext", 4, ["C"]), ("_", 5, ["D"])])

    def test_function_definitions_are_skipped(self):
        self.assertEqual(_calls("<?php function __($text) { return gettext($text); }"), [("gettext", 1, [None])])

    def test_nested_calls(self):
        self.assertEqual(_calls("<?php printf(_n('%d item', '%d items', $n), __('x'));"), [("__", 1, ["x"])])
        self.assertEqual(
            _calls("<?php sprintf(n__('%d item', '%d items', count($a)), $n);"),
            [("n__", 1, ["%d item", "%d items", None])],
        )

    def test_unterminated_call_is_skipped(self):
        self.assertEqual(_calls("<?php __('a'; __('b');"), [("__", 1, ["b"])])

    def test_leading_comments(self):
        sites = scan(textwrap.dedent("""\
            <?php
            // unrelated

            // TRANSLATORS: greeting
            // shown on top
            echo __('Hi');
            /** Block
             * comment */ __('There');
        """), FUNCTIONS)
        self.assertEqual(sites[0].comments, ["TRANSLATORS: greeting", "shown on top"])
        self.assertEqual(sites[1].comments, ["Block\ncomment"])


if __name__ == "__main__":
    unittest.main()
