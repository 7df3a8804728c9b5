# -*- coding: utf-8 -*-
"""Token stream and call-site model shared by the language scanners.

A language tokenizer turns source text into ``Token`` objects; the generic
``find_call_sites`` walks that stream, finds ``name(...)`` calls whose name is
a known translation function, splits the argument list at top-level commas
and folds each argument into a string when it is a literal (or a
concatenation of literals).
"""
from __future__ import annotations

import dataclasses
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

__all__ = [
	"Token",
	"CallSite",
	"FUNCTIONS",
	"SIGNATURES",
	"find_call_sites",
	"comment_text",
]

# token kinds
STRING = "string"      # literal with a fully known value
DYNAMIC = "dynamic"    # string-like literal whose value is not static (interpolation)
NAME = "name"
PUNCT = "punct"
COMMENT = "comment"
OTHER = "other"

# Argument roles of each function kind, in call order. Arguments past the
# listed roles (the count of ngettext, format arguments) are ignored.
SIGNATURES: Dict[str, Tuple[str, ...]] = {
	"gettext": ("msgid",),
	"ngettext": ("msgid", "plural"),
	"pgettext": ("context", "msgid"),
	"dgettext": ("domain", "msgid"),
	"dngettext": ("domain", "msgid", "plural"),
	"dpgettext": ("domain", "context", "msgid"),
	"npgettext": ("context", "msgid", "plural"),
	"dnpgettext": ("domain", "context", "msgid", "plural"),
	"noop": ("msgid",),
}

FUNCTIONS: Dict[str, str] = {
	"gettext": "gettext",
	"_": "gettext",
	"__": "gettext",
	"ngettext": "ngettext",
	"n__": "ngettext",
	"pgettext": "pgettext",
	"p__": "pgettext",
	"dgettext": "dgettext",
	"d__": "dgettext",
	"dngettext": "dngettext",
	"dn__": "dngettext",
	"dpgettext": "dpgettext",
	"dp__": "dpgettext",
	"npgettext": "npgettext",
	"np__": "npgettext",
	"dnpgettext": "dnpgettext",
	"dnp__": "dnpgettext",
	"noop": "noop",
	"noop__": "noop",
}

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


@dataclasses.dataclass
class Token:
	kind: str
	value: str
	line: int
	end_line: int = 0

	def __post_init__(self) -> None:
		if not self.end_line:
			self.end_line = self.line

	def is_punct(self, value: str) -> bool:
		return self.kind == PUNCT and self.value == value


@dataclasses.dataclass
class CallSite:
	"""One call of a translation function.

	``arguments`` holds the static value of each argument, or None where the
	argument is not a literal. ``comments`` are the comment blocks directly
	above the call, oldest first.
	"""
	name: str
	line: int
	arguments: List[Optional[str]]
	comments: List[str] = dataclasses.field(default_factory=list)


def comment_text(raw: str) -> str:
	"""Strip block-comment decoration (leading ``*`` and indentation) from ``raw``."""
	lines = []
	for line in raw.split("\n"):
		line = line.strip()
		if line.startswith("*"):
			line = line[1:].strip()
		lines.append(line)
	while lines and not lines[0]:
		lines.pop(0)
	while lines and not lines[-1]:
		lines.pop()
	return "\n".join(lines)


def _collect_arguments(code: Sequence[Token], start: int) -> Optional[List[List[Token]]]:
	"""Split tokens after an opening parenthesis into top-level arguments.

	Returns None when the closing parenthesis is missing.
	"""
	args: List[List[Token]] = [[]]
	stack: List[str] = []
	for tok in code[start:]:
		if tok.kind == PUNCT:
			if tok.value in _OPENERS:
				stack.append(_OPENERS[tok.value])
			elif tok.value in _CLOSERS:
				if not stack:
					if tok.value != ")":
						return None
					if not args[-1] and len(args) > 1:
						args.pop()  # trailing comma
					return [] if args == [[]] else args
				if stack.pop() != tok.value:
					return None
			elif tok.value == "," and not stack:
				args.append([])
				continue
			elif tok.value == ";" and not stack:
				return None
		args[-1].append(tok)
	return None


def _literal(tokens: Sequence[Token], concat: str) -> Optional[str]:
	"""Value of ``"a"``, ``"a" <concat> "b"``, ... or None for anything else."""
	if not tokens or len(tokens) % 2 == 0:
		return None
	parts = []
	for i, tok in enumerate(tokens):
		if i % 2:
			if not tok.is_punct(concat):
				return None
		elif tok.kind != STRING:
			return None
		else:
			parts.append(tok.value)
	return "".join(parts)


def _leading_comments(tokens: Sequence[Token], index: int) -> List[str]:
	"""Comment block ending on the call line or the line right above it."""
	line = tokens[index].line
	i = index - 1
	while i >= 0 and tokens[i].kind != COMMENT and tokens[i].end_line == line:
		i -= 1
	found: List[str] = []
	while i >= 0 and tokens[i].kind == COMMENT and tokens[i].end_line >= line - 1:
		found.append(comment_text(tokens[i].value))
		line = tokens[i].line
		i -= 1
	return [c for c in reversed(found) if c]


def find_call_sites(
	tokens: Sequence[Token],
	functions: Mapping[str, str],
	concat: str,
	definition_keywords: Tuple[str, ...] = ("function",),
) -> Iterator[CallSite]:
	"""Yield every call of a name in ``functions`` found in ``tokens``.

	Nested calls are found too. Definitions (``function gettext(``) are not
	calls and are skipped.
	"""
	code: List[Token] = []
	positions: List[int] = []
	for i, tok in enumerate(tokens):
		if tok.kind != COMMENT:
			code.append(tok)
			positions.append(i)

	for n, tok in enumerate(code):
		if tok.kind != NAME or tok.value not in functions:
			continue
		if n + 1 >= len(code) or not code[n + 1].is_punct("("):
			continue
		if n and code[n - 1].kind == NAME and code[n - 1].value.lower() in definition_keywords:
			continue
		args = _collect_arguments(code, n + 2)
		if args is None:
			continue
		yield CallSite(
			name=tok.value,
			line=tok.line,
			arguments=[_literal(arg, concat) for arg in args],
			comments=_leading_comments(tokens, positions[n]),
		)
