# -*- coding: utf-8 -*-
"""PHP tokenizer and call-site scanner.

Only code between ``<?php`` (or ``<?=``) and ``?>`` is tokenized; inline HTML
is skipped. Strings follow PHP quoting: single-quoted strings only know ``\\'``
and ``\\\\``; double-quoted strings and heredocs decode the usual escapes and
are dynamic when they interpolate a variable; nowdocs are raw.
Names may be namespaced (``\\Foo\\__``); only the last segment is matched.
"""
from __future__ import annotations

import re
from typing import List, Mapping, Optional

from .calls import (
	COMMENT,
	DYNAMIC,
	NAME,
	OTHER,
	PUNCT,
	STRING,
	CallSite,
	Token,
	find_call_sites,
)

__all__ = ["tokenize", "scan", "unescape_double"]

_OPEN_TAG = re.compile(r"<\?(?:php\b|=)", re.I)

_IDENT = r"[A-Za-z_\x80-\U0010ffff][\w\x80-\U0010ffff]*"

_TOKEN = re.compile(
	rf"""
	(?P<ws>\s+)
	|(?P<close>\?>)
	|(?P<line_comment>(?://|\#(?!\[))(?P<line_body>[^\n]*?))(?=\?>|\n|$)
	|(?P<block_comment>/\*(?P<block_body>.*?)(?:\*/|$))
	|'(?P<single>(?:[^'\\]|\\.)*)'
	|"(?P<double>(?:[^"\\]|\\.)*)"
	|(?P<heredoc><<<[ \t]*(?P<quote>["']?)(?P<label>[A-Za-z_]\w*)(?P=quote)[ \t]*\r?\n)
	|(?P<variable>\$+{_IDENT})
	|(?P<name>\\?{_IDENT}(?:\\{_IDENT})*)
	|(?P<number>0[xXbBoO][0-9a-fA-F_]+|\d[\d_]*(?:\.\d+)?(?:[eE][+-]?\d+)?)
	|(?P<punct>\.\.\.|\.=|\?->|->|::|=>|\S)
	""",
	re.S | re.X,
)

_DOUBLE_ESCAPE = re.compile(
	r"\\(?:(?P<simple>[nrtvef\\$\"])|(?P<oct>[0-7]{1,3})|x(?P<hex>[0-9A-Fa-f]{1,2})|u\{(?P<uni>[0-9A-Fa-f]+)\})"
)
_SIMPLE = {"n": "\n", "r": "\r", "t": "\t", "v": "\v", "e": "\x1b", "f": "\f", "\\": "\\", "$": "$", '"': '"'}
_INTERPOLATION = re.compile(r"\\.|(\$[A-Za-z_\x80-\U0010ffff{]|\{\$)", re.S)


def unescape_double(body: str, quote: str = '"') -> str:
	"""Decode a double-quoted string or heredoc body.

	Octal and hex escapes are bytes; they are combined with the surrounding
	text as UTF-8. Unknown escapes are kept verbatim, as PHP does.
	"""
	if "\\" not in body:
		return body
	out = bytearray()
	pos = 0
	for m in _DOUBLE_ESCAPE.finditer(body):
		out += body[pos:m.start()].encode("utf-8", "surrogatepass")
		pos = m.end()
		if m.group("simple"):
			char = m.group("simple")
			if char == '"' and quote != '"':
				out += b'\\"'
			else:
				out += _SIMPLE[char].encode("utf-8")
		elif m.group("oct"):
			out.append(int(m.group("oct"), 8) & 0xFF)
		elif m.group("hex"):
			out.append(int(m.group("hex"), 16))
		else:
			code = int(m.group("uni"), 16)
			out += chr(code).encode("utf-8", "surrogatepass") if code <= 0x10FFFF else m.group(0).encode("utf-8")
	out += body[pos:].encode("utf-8", "surrogatepass")
	return out.decode("utf-8", errors="replace")


def _interpolates(body: str) -> bool:
	return any(m.group(1) for m in _INTERPOLATION.finditer(body))


def _heredoc_body(text: str, start: int, label: str) -> Optional[re.Match]:
	closing = re.compile(rf"^(?P<indent>[ \t]*){re.escape(label)}\b", re.M)
	return closing.search(text, start)


def _dedent(body: str, indent: str) -> str:
	if not indent:
		return body
	return "\n".join(line[len(indent):] if line.startswith(indent) else line.lstrip(" \t") for line in body.split("\n"))


def tokenize(text: str) -> List[Token]:
	tokens: List[Token] = []
	line = 1
	pos = 0
	in_php = False
	length = len(text)

	while pos < length:
		if not in_php:
			m = _OPEN_TAG.search(text, pos)
			if m is None:
				break
			line += text.count("\n", pos, m.end())
			pos = m.end()
			in_php = True
			continue

		# never None: an unmatched quote falls through to a one-char punct token
		m = _TOKEN.match(text, pos)
		start_line = line
		kind = m.lastgroup
		end = m.end()

		if m.group("close") is not None:
			tokens.append(Token(PUNCT, ";", line))
			in_php = False
		elif m.group("line_comment") is not None:
			tokens.append(Token(COMMENT, m.group("line_body"), line))
		elif m.group("block_comment") is not None:
			tokens.append(Token(COMMENT, m.group("block_body"), line, line + m.group(0).count("\n")))
		elif m.group("single") is not None:
			value = re.sub(r"\\([\\'])", r"\1", m.group("single"))
			tokens.append(Token(STRING, value, line, line + m.group(0).count("\n")))
		elif m.group("double") is not None:
			body = m.group("double")
			if _interpolates(body):
				tokens.append(Token(DYNAMIC, body, line, line + body.count("\n")))
			else:
				tokens.append(Token(STRING, unescape_double(body), line, line + body.count("\n")))
		elif m.group("heredoc") is not None:
			label = m.group("label")
			closing = _heredoc_body(text, end, label)
			if closing is None:
				break
			body = text[end:closing.start()]
			if body.endswith("\n"):
				body = body[:-1]
			body = _dedent(body.replace("\r\n", "\n"), closing.group("indent"))
			end = closing.end()
			end_line = line + text.count("\n", pos, end)
			if m.group("quote") == "'":
				tokens.append(Token(STRING, body, line, end_line))
			elif _interpolates(body):
				tokens.append(Token(DYNAMIC, body, line, end_line))
			else:
				tokens.append(Token(STRING, unescape_double(body, quote=""), line, end_line))
		elif m.group("variable") is not None:
			tokens.append(Token(OTHER, m.group("variable"), line))
		elif m.group("name") is not None:
			tokens.append(Token(NAME, m.group("name").rsplit("\\", 1)[-1], line))
		elif m.group("number") is not None:
			tokens.append(Token(OTHER, m.group("number"), line))
		elif kind == "punct":
			tokens.append(Token(PUNCT, m.group("punct"), line))

		line = start_line + text.count("\n", pos, end)
		pos = end

	return tokens


def scan(text: str, functions: Mapping[str, str]) -> List[CallSite]:
	"""Call sites of ``functions`` in PHP source ``text``."""
	return list(find_call_sites(tokenize(text), functions, concat="."))
