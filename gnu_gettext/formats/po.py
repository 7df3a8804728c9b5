# -*- coding: utf-8 -*-
"""PO/POT reader and writer.

Reading comes in two flavours:
- lenient (default): malformed entries are logged and skipped, parsing continues;
- strict: the first malformed entry raises FormatError with its line number.

Writing is deterministic: header entry first, then entries in catalog order,
strings escaped C-style and wrapped at ``width`` columns (0 disables wrapping;
embedded newlines always start a new continuation line).
"""
from __future__ import annotations

import codecs
import re
from typing import Dict, List, Optional, Tuple

from ..catalog import Catalog, Headers, Reference, Translation
from ..exceptions import FormatError
from ..plurals import PluralFormula
from ..utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["parse", "dump", "encode", "unescape", "DEFAULT_WIDTH"]

DEFAULT_WIDTH = 79

_KEYWORD_RE = re.compile(r"^(msgctxt|msgid_plural|msgid|msgstr)(?:\[(\d+)\])?\s*(.*)$")
_QUOTED_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"\s*$')
_CHARSET_RE = re.compile(rb'"Content-Type:[^"\n]*?charset\s*=\s*([A-Za-z0-9._:\-]+)')
_REFERENCE_RE = re.compile(r"^(.*):(\d+)$")

_SIMPLE_ESCAPES = {
	"n": "\n", "t": "\t", "r": "\r", "a": "\a", "b": "\b",
	"f": "\f", "v": "\v", "\\": "\\", '"': '"', "'": "'", "?": "?",
}
_WRITE_ESCAPES = {
	"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r",
	"\a": "\\a", "\b": "\\b", "\f": "\\f", "\v": "\\v",
}


# ── String literals ───────────────────────────────────────────────────────────

def unescape(s: str, charset: str = "utf-8") -> str:
	"""Decode the body of a C string literal.

	Octal and hex escapes denote bytes in the catalog charset, so runs of them
	are collected and decoded together. Raises ValueError on a bad escape.
	"""
	if "\\" not in s:
		return s
	out: List[str] = []
	raw = bytearray()

	def _flush() -> None:
		if raw:
			out.append(raw.decode(charset, errors="replace"))
			raw.clear()

	i, n = 0, len(s)
	while i < n:
		c = s[i]
		if c != "\\":
			_flush()
			out.append(c)
			i += 1
			continue
		if i + 1 >= n:
			raise ValueError("dangling backslash")
		e = s[i + 1]
		if e in "01234567":
			j = i + 1
			while j < n and j < i + 4 and s[j] in "01234567":
				j += 1
			raw.append(int(s[i + 1:j], 8) & 0xFF)
			i = j
		elif e == "x":
			j = i + 2
			while j < n and s[j] in "0123456789abcdefABCDEF":
				j += 1
			if j == i + 2:
				raise ValueError("\\x used with no following hex digits")
			raw.append(int(s[i + 2:j], 16) & 0xFF)
			i = j
		elif e in _SIMPLE_ESCAPES:
			_flush()
			out.append(_SIMPLE_ESCAPES[e])
			i += 2
		else:
			raise ValueError(f"invalid escape sequence \\{e}")
	_flush()
	return "".join(out)


def _escape_atoms(s: str) -> List[str]:
	"""Escape ``s`` into atoms; an escape sequence is never split across lines."""
	atoms = []
	for ch in s:
		if ch in _WRITE_ESCAPES:
			atoms.append(_WRITE_ESCAPES[ch])
		elif ord(ch) < 0x20 or ch == "\x7f":
			atoms.append("\\%03o" % ord(ch))
		else:
			atoms.append(ch)
	return atoms


def _wrap_atoms(atoms: List[str], limit: int) -> List[str]:
	if limit <= 0 or sum(map(len, atoms)) <= limit:
		return ["".join(atoms)]
	chunks: List[str] = []
	current: List[str] = []
	size = 0
	brk = -1  # index in current just after the last space
	for atom in atoms:
		if current and size + len(atom) > limit:
			if 0 < brk < len(current):
				head, current = current[:brk], current[brk:]
			else:
				head, current = current, []
			chunks.append("".join(head))
			size = sum(map(len, current))
			brk = -1
			for idx, a in enumerate(current):
				if a == " ":
					brk = idx + 1
		current.append(atom)
		size += len(atom)
		if atom == " ":
			brk = len(current)
	if current:
		chunks.append("".join(current))
	return chunks


def _format_string(keyword: str, value: str, width: int, prefix: str = "") -> List[str]:
	atoms = _escape_atoms(value)
	lines: List[List[str]] = []
	current: List[str] = []
	for atom in atoms:
		current.append(atom)
		if atom == "\\n":
			lines.append(current)
			current = []
	if current or not lines:
		lines.append(current)

	single = f'{prefix}{keyword} "{"".join(atoms)}"'
	if len(lines) == 1 and (width <= 0 or len(single) <= width):
		return [single]

	out = [f'{prefix}{keyword} ""']
	limit = width - len(prefix) - 2 if width > 0 else 0
	for line_atoms in lines:
		for chunk in _wrap_atoms(line_atoms, limit):
			out.append(f'{prefix}"{chunk}"')
	return out


# ── Reader ────────────────────────────────────────────────────────────────────

def _detect_charset(data: bytes) -> str:
	m = _CHARSET_RE.search(data)
	if not m:
		return "utf-8"
	name = m.group(1).decode("ascii")
	if name.upper() == "CHARSET":
		return "utf-8"
	try:
		return codecs.lookup(name).name
	except LookupError:
		logger.warning("Unknown charset %r, reading as UTF-8", name)
		return "utf-8"


def _parse_reference(token: str) -> Reference:
	m = _REFERENCE_RE.match(token)
	if m and m.group(1):
		return (m.group(1), int(m.group(2)))
	return (token, None)


class _Entry:
	"""Fields of the entry being read."""

	def __init__(self, line: int) -> None:
		self.line = line
		self.comments: List[str] = []
		self.extracted: List[str] = []
		self.references: List[Reference] = []
		self.flags: List[str] = []
		self.previous: Dict[str, str] = {}
		self.context: Optional[str] = None
		self.msgid: Optional[str] = None
		self.plural: Optional[str] = None
		self.msgstr: Dict[int, str] = {}
		self.plain_msgstr = False
		self.disabled = False
		self.field: Optional[Tuple[str, int]] = None
		self.previous_field: Optional[str] = None

	@property
	def has_comments(self) -> bool:
		return bool(self.comments or self.extracted or self.references or self.flags or self.previous)


class PoReader:
	def __init__(self, strict: bool = False, path: Optional[str] = None) -> None:
		self.strict = strict
		self.path = path
		self.catalog = Catalog()
		self.charset = "utf-8"
		self._entry: Optional[_Entry] = None
		self._skipping = False
		self._header_seen = False

	# errors ──────────────────────────────────────────────────────────────────
	def _fail(self, line: int, message: str) -> None:
		"""Strict: raise. Lenient: drop the current entry and skip to the next one."""
		if self.strict:
			raise FormatError(message, line=line, path=self.path)
		logger.warning("%s:%d: %s; entry skipped", self.path or "<input>", line, message)
		self._entry = None
		self._skipping = True

	# decoding ────────────────────────────────────────────────────────────────
	def decode(self, data: bytes) -> str:
		if data.startswith(codecs.BOM_UTF8):
			data = data[len(codecs.BOM_UTF8):]
		self.charset = _detect_charset(data)
		try:
			return data.decode(self.charset)
		except UnicodeDecodeError as e:
			line = data.count(b"\n", 0, e.start) + 1
			if self.strict:
				raise FormatError(f"invalid {self.charset} byte sequence", line=line, path=self.path) from e
			logger.warning("%s:%d: invalid %s byte sequence replaced", self.path or "<input>", line, self.charset)
			return data.decode(self.charset, errors="replace")

	def _literal(self, text: str, line: int) -> Optional[str]:
		m = _QUOTED_RE.match(text.strip())
		if not m:
			self._fail(line, f"invalid string literal: {text.strip()[:40]}")
			return None
		try:
			return unescape(m.group(1), self.charset)
		except ValueError as e:
			self._fail(line, str(e))
			return None

	# main loop ───────────────────────────────────────────────────────────────
	def read(self, text: str) -> Catalog:
		lineno = 0
		for lineno, raw in enumerate(text.replace("\r\n", "\n").split("\n"), 1):
			line = raw.strip()
			if not line:
				self._finish(lineno)
				self._skipping = False
				continue

			disabled = False
			if line.startswith("#~"):
				disabled = True
				line = line[2:].strip()
				if not line:
					continue
				if line.startswith("|"):
					line = "#" + line

			if line.startswith("#"):
				self._comment(line, lineno)
				continue

			m = _KEYWORD_RE.match(line)
			if m:
				self._keyword(m.group(1), m.group(2), m.group(3), lineno, disabled)
			elif line.startswith('"'):
				self._continuation(line, lineno)
			elif not self._skipping:
				self._fail(lineno, f"unexpected text: {line[:40]}")
		self._finish(lineno + 1)
		return self.catalog

	def _current(self, lineno: int) -> _Entry:
		if self._entry is None:
			self._entry = _Entry(lineno)
		return self._entry

	def _comment(self, line: str, lineno: int) -> None:
		entry = self._entry
		if entry is not None and (entry.msgid is not None or entry.msgstr):
			# comment after a complete entry without a separating blank line
			self._finish(lineno)
		self._skipping = False

		kind = line[1:2]
		body = line[2:].strip() if kind in (".", ":", ",", "|") else line[1:]
		if kind == "|":
			self._previous(body, lineno)
			return
		entry = self._current(lineno)
		if kind == ".":
			entry.extracted.append(body)
		elif kind == ":":
			for token in body.split():
				ref = _parse_reference(token)
				if ref not in entry.references:
					entry.references.append(ref)
		elif kind == ",":
			for flag in body.split(","):
				flag = flag.strip()
				if flag and flag not in entry.flags:
					entry.flags.append(flag)
		else:
			entry.comments.append(body[1:] if body.startswith(" ") else body)

	def _previous(self, body: str, lineno: int) -> None:
		entry = self._current(lineno)
		m = _KEYWORD_RE.match(body)
		if m and m.group(1) != "msgstr" and m.group(2) is None:
			value = self._literal(m.group(3), lineno)
			if value is not None:
				entry.previous[m.group(1)] = value
				entry.previous_field = m.group(1)
			return
		if body.startswith('"') and entry.previous_field:
			value = self._literal(body, lineno)
			if value is not None:
				entry.previous[entry.previous_field] += value
			return
		self._fail(lineno, f"invalid previous-message comment: {body[:40]}")

	def _keyword(self, keyword: str, index: Optional[str], rest: str, lineno: int, disabled: bool) -> None:
		entry = self._entry
		starts_entry = keyword in ("msgctxt", "msgid")
		if starts_entry and entry is not None and (entry.msgstr or entry.msgid is not None):
			self._finish(lineno)
			entry = None
		if starts_entry:
			self._skipping = False
		if self._skipping:
			return
		entry = self._current(lineno)
		if disabled:
			entry.disabled = True

		if index is not None and keyword != "msgstr":
			self._fail(lineno, f"{keyword} does not take an index")
			return
		value = self._literal(rest, lineno)
		if value is None:
			return

		if keyword == "msgctxt":
			if entry.context is not None:
				self._fail(lineno, "duplicate msgctxt in entry")
				return
			entry.context = value
			entry.field = ("msgctxt", 0)
		elif keyword == "msgid":
			entry.msgid = value
			entry.field = ("msgid", 0)
		elif keyword == "msgid_plural":
			if entry.msgid is None or entry.msgstr:
				self._fail(lineno, "msgid_plural must follow msgid")
				return
			if entry.plural is not None:
				self._fail(lineno, "duplicate msgid_plural in entry")
				return
			entry.plural = value
			entry.field = ("msgid_plural", 0)
		else:
			self._msgstr(entry, index, value, lineno)

	def _msgstr(self, entry: _Entry, index: Optional[str], value: str, lineno: int) -> None:
		if entry.msgid is None:
			self._fail(lineno, "msgstr without msgid")
			return
		if index is None:
			if entry.msgstr:
				self._fail(lineno, "duplicate msgstr in entry")
				return
			if entry.plural is not None and self.strict:
				self._fail(lineno, "plural entry requires msgstr[N]")
				return
			entry.plain_msgstr = True
			idx = 0
		else:
			idx = int(index)
			if entry.plain_msgstr:
				self._fail(lineno, "msgstr[N] mixed with msgstr")
				return
			if entry.plural is None and self.strict:
				self._fail(lineno, "msgstr[N] without msgid_plural")
				return
			if idx in entry.msgstr:
				self._fail(lineno, f"duplicate msgstr[{idx}]")
				return
			if self.strict and idx != len(entry.msgstr):
				self._fail(lineno, f"plural form msgstr[{idx}] out of sequence")
				return
		entry.msgstr[idx] = value
		entry.field = ("msgstr", idx)

	def _continuation(self, line: str, lineno: int) -> None:
		if self._skipping:
			return
		entry = self._entry
		if entry is None or entry.field is None:
			self._fail(lineno, "string continuation without a keyword")
			return
		value = self._literal(line, lineno)
		if value is None:
			return
		name, idx = entry.field
		if name == "msgctxt":
			entry.context += value
		elif name == "msgid":
			entry.msgid += value
		elif name == "msgid_plural":
			entry.plural += value
		else:
			entry.msgstr[idx] += value

	def _finish(self, lineno: int) -> None:
		entry, self._entry = self._entry, None
		if entry is None:
			return
		if entry.msgid is None:
			if entry.context is not None:
				self._fail(entry.line, "msgctxt without msgid")
			elif entry.has_comments:
				logger.debug("%s:%d: dropping comments not attached to an entry", self.path or "<input>", entry.line)
			return
		if not entry.msgstr:
			self._fail(entry.line, "missing msgstr")
			self._skipping = False
			return

		if entry.msgid == "" and entry.context is None and not entry.disabled:
			if self._header_seen:
				if self.strict:
					raise FormatError("duplicate header entry", line=entry.line, path=self.path)
				logger.warning("%s:%d: duplicate header entry ignored", self.path or "<input>", entry.line)
				return
			self._header_seen = True
			self.catalog.headers = Headers.from_string(entry.msgstr.get(0, ""))
			self.catalog.header_comments = entry.comments
			self.catalog.header_flags = entry.flags
			return

		size = max(entry.msgstr) + 1
		forms = [entry.msgstr.get(i, "") for i in range(size)]
		if not any(forms):
			forms = []
		translation = Translation(
			msgid=entry.msgid,
			context=entry.context,
			plural=entry.plural,
			translations=forms,
			references=entry.references,
			comments=entry.comments,
			extracted_comments=entry.extracted,
			flags=entry.flags,
			previous_context=entry.previous.get("msgctxt"),
			previous_msgid=entry.previous.get("msgid"),
			previous_plural=entry.previous.get("msgid_plural"),
			disabled=entry.disabled,
		)
		existing = self.catalog.find(translation.context, translation.msgid)
		if existing is not None:
			if self.strict and not (existing.disabled or translation.disabled):
				raise FormatError("duplicate message definition", line=entry.line, path=self.path)
			logger.warning("%s:%d: duplicate message definition merged", self.path or "<input>", entry.line)
		self.catalog.add(translation)


def parse(data: bytes, strict: bool = False, path: Optional[str] = None) -> Catalog:
	"""Parse PO/POT bytes into a Catalog."""
	reader = PoReader(strict=strict, path=path)
	return reader.read(reader.decode(data))


# ── Writer ────────────────────────────────────────────────────────────────────

def _format_references(refs: List[Reference], width: int) -> List[str]:
	tokens = [f"{name}:{line}" if line is not None else name for name, line in refs]
	if width <= 0:
		return ["#: " + " ".join(tokens)]
	lines: List[str] = []
	current = "#:"
	for token in tokens:
		if current != "#:" and len(current) + 1 + len(token) > width:
			lines.append(current)
			current = "#:"
		current += " " + token
	lines.append(current)
	return lines


def _plural_count(catalog: Catalog) -> int:
	value = catalog.headers.get("Plural-Forms")
	if value:
		try:
			return PluralFormula.parse(value).count
		except ValueError:
			logger.debug("Unparsable Plural-Forms %r; assuming two forms", value)
	return 2


def _format_entry(t: Translation, nplurals: int, width: int) -> List[str]:
	lines: List[str] = []
	lines.extend(f"# {c}" if c else "#" for c in t.comments)
	lines.extend(f"#. {c}" for c in t.extracted_comments)
	if t.references:
		lines.extend(_format_references(t.references, width))
	if t.flags:
		lines.append("#, " + ", ".join(t.flags))

	prev = "#~| " if t.disabled else "#| "
	if t.previous_context is not None:
		lines.extend(_format_string("msgctxt", t.previous_context, width, prev))
	if t.previous_msgid is not None:
		lines.extend(_format_string("msgid", t.previous_msgid, width, prev))
	if t.previous_plural is not None:
		lines.extend(_format_string("msgid_plural", t.previous_plural, width, prev))

	prefix = "#~ " if t.disabled else ""
	if t.context is not None:
		lines.extend(_format_string("msgctxt", t.context, width, prefix))
	lines.extend(_format_string("msgid", t.msgid, width, prefix))
	if t.plural is not None:
		lines.extend(_format_string("msgid_plural", t.plural, width, prefix))
		forms = list(t.translations)
		forms += [""] * (nplurals - len(forms))
		for i, form in enumerate(forms):
			lines.extend(_format_string(f"msgstr[{i}]", form, width, prefix))
	else:
		lines.extend(_format_string("msgstr", t.translation, width, prefix))
	return lines


def dump(catalog: Catalog, width: int = DEFAULT_WIDTH) -> str:
	"""Serialize ``catalog`` to PO text."""
	blocks: List[List[str]] = []
	if len(catalog.headers) or catalog.header_comments or catalog.header_flags:
		header = [f"# {c}" if c else "#" for c in catalog.header_comments]
		if catalog.header_flags:
			header.append("#, " + ", ".join(catalog.header_flags))
		header.extend(_format_string("msgid", "", width))
		header.extend(_format_string("msgstr", catalog.headers.to_string(), width))
		blocks.append(header)

	nplurals = _plural_count(catalog)
	for translation in catalog:
		blocks.append(_format_entry(translation, nplurals, width))
	return "\n\n".join("\n".join(block) for block in blocks) + ("\n" if blocks else "")


def encode(catalog: Catalog, width: int = DEFAULT_WIDTH) -> bytes:
	charset = catalog.headers.charset
	try:
		codec = codecs.lookup(charset).name if charset and charset.upper() != "CHARSET" else "utf-8"
	except LookupError:
		codec = "utf-8"
	try:
		return dump(catalog, width=width).encode(codec)
	except UnicodeEncodeError as e:
		raise FormatError(f"catalog text cannot be encoded as {codec}: {e.reason}") from e
