# -*- coding: utf-8 -*-
"""MO (GNU machine object) encoder/decoder.

Layout: a 7-word header (magic, revision, N, originals offset, translations
offset, hash size, hash offset), two tables of N (length, offset) pairs, the
hash table, then the string pool with every string NUL-terminated.

Entries are written sorted byte-wise ascending on the encoded key
``[context "\\x04"] msgid ["\\x00" msgid_plural]`` so the same catalog always
produces the same file, whatever its insertion order.
"""
from __future__ import annotations

import codecs
import struct
from typing import List, Optional, Tuple

from ..catalog import Catalog, Headers, Translation
from ..exceptions import FormatError
from ..utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["encode", "decode", "LE_MAGIC", "BE_MAGIC"]

LE_MAGIC = 0x950412de
BE_MAGIC = 0xde120495
HEADER_SIZE = 7 * 4

CONTEXT_SEPARATOR = b"\x04"
PLURAL_SEPARATOR = b"\x00"

_ORDER = {"little": "<", "big": ">"}


def hashpjw(key: bytes) -> int:
	"""P.J. Weinberger's hash, as computed by GNU gettext's hash_string."""
	val = 0
	for b in key:
		val = ((val << 4) + b) & 0xFFFFFFFF
		g = val & 0xF0000000
		if g:
			val ^= g >> 24
			val ^= g
	return val


def hash_table_size(count: int) -> int:
	"""First odd prime not below 4/3 of ``count`` (at least 3)."""
	size = max(3, (count * 4) // 3) | 1
	while True:
		for div in range(3, int(size ** 0.5) + 1, 2):
			if size % div == 0:
				size += 2
				break
		else:
			return size


def _charset(headers: Headers) -> str:
	charset = headers.charset
	if not charset or charset.upper() == "CHARSET":
		return "utf-8"
	try:
		return codecs.lookup(charset).name
	except LookupError:
		logger.warning("Unknown charset %r, using UTF-8", charset)
		return "utf-8"


def _entries(catalog: Catalog, charset: str) -> List[Tuple[bytes, bytes]]:
	entries: List[Tuple[bytes, bytes]] = []
	if len(catalog.headers):
		entries.append((b"", catalog.headers.to_string().encode(charset)))
	for t in catalog:
		if t.disabled or not t.is_translated:
			continue
		key = t.msgid.encode(charset)
		if t.context is not None:
			key = t.context.encode(charset) + CONTEXT_SEPARATOR + key
		if t.plural is not None:
			key += PLURAL_SEPARATOR + t.plural.encode(charset)
			value = PLURAL_SEPARATOR.join(form.encode(charset) for form in t.translations)
		else:
			value = t.translation.encode(charset)
		if not key:
			logger.warning("Skipping translated entry with an empty msgid; it would shadow the header")
			continue
		entries.append((key, value))
	entries.sort(key=lambda item: item[0])
	return entries


def encode(catalog: Catalog, byteorder: str = "little", hash_table: bool = True) -> bytes:
	"""Compile ``catalog`` into MO bytes.

	Untranslated and disabled entries are left out. The header entry is
	written only when the catalog has headers.
	"""
	if byteorder not in _ORDER:
		raise ValueError(f"byteorder must be 'little' or 'big', not {byteorder!r}")
	order = _ORDER[byteorder]
	charset = _charset(catalog.headers)
	try:
		entries = _entries(catalog, charset)
	except UnicodeEncodeError as e:
		raise FormatError(f"catalog text cannot be encoded as {charset}: {e.reason}") from e

	count = len(entries)
	htab_size = hash_table_size(count) if hash_table and count else 0
	originals_at = HEADER_SIZE
	translations_at = originals_at + 8 * count
	htab_at = translations_at + 8 * count
	pool_at = htab_at + 4 * htab_size

	# originals first, then translations; every string NUL-terminated
	originals: List[int] = []
	translations: List[int] = []
	pool = bytearray()
	for key, _ in entries:
		originals += [len(key), pool_at + len(pool)]
		pool += key + b"\x00"
	for _, value in entries:
		translations += [len(value), pool_at + len(pool)]
		pool += value + b"\x00"

	table = [0] * htab_size
	if htab_size:
		for index, (key, _) in enumerate(entries, 1):
			# plural part is not hashed: lookups are by msgid only
			hval = hashpjw(key.split(PLURAL_SEPARATOR, 1)[0])
			slot = hval % htab_size
			incr = 1 + (hval % (htab_size - 2))
			while table[slot]:
				slot += incr
				if slot >= htab_size:
					slot -= htab_size
			table[slot] = index

	out = bytearray(struct.pack(
		order + "7I",
		LE_MAGIC,
		0,
		count,
		originals_at,
		translations_at,
		htab_size,
		htab_at,
	))
	out += struct.pack(f"{order}{2 * count}I", *originals)
	out += struct.pack(f"{order}{2 * count}I", *translations)
	out += struct.pack(f"{order}{htab_size}I", *table)
	out += pool
	assert len(out) == pool_at + len(pool)
	return bytes(out)


def _byteorder(data: bytes) -> str:
	(magic,) = struct.unpack("<I", data[:4])
	if magic == LE_MAGIC:
		return "<"
	if magic == BE_MAGIC:
		return ">"
	raise FormatError(f"bad magic number 0x{magic:08x}, not an MO file")


def _slice(data: bytes, length: int, offset: int, what: str) -> bytes:
	end = offset + length
	if end > len(data):
		raise FormatError(f"{what} at offset {offset} (length {length}) runs past end of file")
	return data[offset:end]


def decode(data: bytes, path: Optional[str] = None) -> Catalog:
	"""Read MO bytes of either byte order into a Catalog."""
	try:
		return _decode(data)
	except FormatError as e:
		if path and not e.path:
			e.path = path
		raise


def _decode(data: bytes) -> Catalog:
	if len(data) < HEADER_SIZE:
		raise FormatError("file too short to be an MO file")
	order = _byteorder(data)
	_, revision, count, originals_at, translations_at, _, _ = struct.unpack(order + "7I", data[:HEADER_SIZE])
	if revision >> 16 > 1:
		raise FormatError(f"unsupported MO revision {revision >> 16}.{revision & 0xFFFF}")
	for name, offset in (("originals table", originals_at), ("translations table", translations_at)):
		if offset + 8 * count > len(data):
			raise FormatError(f"{name} runs past end of file")

	pairs: List[Tuple[bytes, bytes]] = []
	for i in range(count):
		olen, ooff = struct.unpack_from(order + "2I", data, originals_at + 8 * i)
		tlen, toff = struct.unpack_from(order + "2I", data, translations_at + 8 * i)
		pairs.append((
			_slice(data, olen, ooff, f"original string #{i}"),
			_slice(data, tlen, toff, f"translated string #{i}"),
		))

	catalog = Catalog()
	for key, value in pairs:
		if key == b"":
			catalog.headers = Headers.from_string(value.decode("utf-8", errors="replace"))
			break
	charset = _charset(catalog.headers)
	if charset != "utf-8":
		for key, value in pairs:
			if key == b"":
				catalog.headers = Headers.from_string(value.decode(charset, errors="replace"))

	for key, value in pairs:
		if key == b"":
			continue
		try:
			catalog.add(_translation(key, value, charset))
		except UnicodeDecodeError as e:
			raise FormatError(f"string is not valid {charset}: {key[:40]!r}") from e
	logger.debug("Decoded MO catalog: %d entries, byte order %s", len(catalog), "big" if order == ">" else "little")
	return catalog


def _translation(key: bytes, value: bytes, charset: str) -> Translation:
	context = None
	if CONTEXT_SEPARATOR in key:
		ctx, key = key.split(CONTEXT_SEPARATOR, 1)
		context = ctx.decode(charset)
	plural = None
	if PLURAL_SEPARATOR in key:
		key, plural_bytes = key.split(PLURAL_SEPARATOR, 1)
		plural = plural_bytes.decode(charset)
		forms = [form.decode(charset) for form in value.split(PLURAL_SEPARATOR)]
	else:
		forms = [value.decode(charset)]
	return Translation(msgid=key.decode(charset), context=context, plural=plural, translations=forms)

