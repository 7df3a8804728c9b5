# -*- coding: utf-8 -*-
"""JavaScript tokenizer and call-site scanner.

Handles both quote styles, template literals (static only when they contain
no ``${...}``), line and block comments, and regular-expression literals.
A ``/`` starts a regex unless the previous token ends an expression
(identifier, literal, ``)`` or ``]``), in which case it is a division.
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

__all__ = ["tokenize", "scan", "unescape"]

_IDENT = r"[A-Za-z_$\x80-\U0010ffff][\w$\x80-\U0010ffff]*"

_TOKEN = re.compile(
	rf"""
	(?P<ws>\s+)
	|//(?P<line_comment>[^\n]*)
	|/\*(?P<block_comment>.*?)(?:\*/|$)
	|'(?P<single>(?:[^'\\\n]|\\.)*)'
	|"(?P<double>(?:[^"\\\n]|\\.)*)"
	|`(?P<template>(?:[^`\\]|\\.)*)`
	|(?P<name>{_IDENT})
	|(?P<number>0[xXbBoO][0-9a-fA-F_]+n?|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?)
	|(?P<punct>\.\.\.|=>|\?\.|\+\+|--|\+=|&&|\|\||\?\?|===|!==|==|!=|\S)
	""",
	re.S | re.X,
)

_REGEX = re.compile(r"/(?:[^/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+/[A-Za-z]*")

_ESCAPE = re.compile(
	r"\\(?:(?P<simple>[nrtbfv'\"\\`]|0(?![0-9]))|x(?P<hex>[0-9A-Fa-f]{2})|u(?P<u4>[0-9A-Fa-f]{4})|u\{(?P<uni>[0-9A-Fa-f]+)\}|(?P<newline>\r?\n)|(?P<other>.))",
	re.S,
)
_SIMPLE = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}

# keywords after which a slash starts a regex, not a division
_REGEX_KEYWORDS = {
	"return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
	"throw", "case", "do", "else", "yield", "await",
}
_EXPRESSION_END = {")", "]"}


def _combine_surrogates(text: str) -> str:
	return text.encode("utf-16", "surrogatepass").decode("utf-16", errors="replace")


def unescape(body: str) -> str:
	"""Decode the escapes of a JavaScript string literal body."""
	if "\\" not in body:
		return body

	def _sub(m: re.Match) -> str:
		if m.group("simple") is not None:
			char = m.group("simple")
			return _SIMPLE.get(char, char)
		if m.group("hex") is not None:
			return chr(int(m.group("hex"), 16))
		if m.group("u4") is not None:
			return chr(int(m.group("u4"), 16))
		if m.group("uni") is not None:
			code = int(m.group("uni"), 16)
			return chr(code) if code <= 0x10FFFF else m.group(0)
		if m.group("newline") is not None:
			return ""
		return m.group("other")

	value = _ESCAPE.sub(_sub, body)
	# \uD83D\uDE00 pairs arrive as two lone surrogates
	if any("\ud800" <= c <= "\udfff" for c in value):
		value = _combine_surrogates(value)
	return value


def _regex_allowed(previous: Optional[Token]) -> bool:
	if previous is None:
		return True
	if previous.kind == NAME:
		return previous.value in _REGEX_KEYWORDS
	if previous.kind in (STRING, DYNAMIC, OTHER):
		return False
	if previous.kind == PUNCT:
		return previous.value not in _EXPRESSION_END
	return True


def tokenize(text: str) -> List[Token]:
	tokens: List[Token] = []
	previous: Optional[Token] = None
	line = 1
	pos = 0
	length = len(text)

	while pos < length:
		if text[pos] == "/" and _regex_allowed(previous) and not text.startswith(("//", "/*"), pos):
			rm = _REGEX.match(text, pos)
			if rm is not None:
				previous = Token(OTHER, rm.group(0), line)
				tokens.append(previous)
				pos = rm.end()
				continue

		m = _TOKEN.match(text, pos)
		token: Optional[Token] = None
		end_line = line + text.count("\n", pos, m.end())

		if m.group("line_comment") is not None:
			token = Token(COMMENT, m.group("line_comment"), line)
		elif m.group("block_comment") is not None:
			token = Token(COMMENT, m.group("block_comment"), line, end_line)
		elif m.group("single") is not None:
			token = Token(STRING, unescape(m.group("single")), line, end_line)
		elif m.group("double") is not None:
			token = Token(STRING, unescape(m.group("double")), line, end_line)
		elif m.group("template") is not None:
			body = m.group("template")
			if re.search(r"(?<!\\)\$\{", body):
				token = Token(DYNAMIC, body, line, end_line)
			else:
				token = Token(STRING, unescape(body.replace("\r\n", "\n")), line, end_line)
		elif m.group("name") is not None:
			token = Token(NAME, m.group("name"), line)
		elif m.group("number") is not None:
			token = Token(OTHER, m.group("number"), line)
		elif m.group("punct") is not None:
			token = Token(PUNCT, m.group("punct"), line)

		if token is not None:
			tokens.append(token)
			if token.kind != COMMENT:
				previous = token
		line = end_line
		pos = m.end()

	return tokens


def scan(text: str, functions: Mapping[str, str]) -> List[CallSite]:
	"""Call sites of ``functions`` in JavaScript source ``text``."""
	return list(find_call_sites(tokenize(text), functions, concat="+"))
