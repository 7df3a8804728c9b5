# -*- coding: utf-8 -*-
"""JSON catalog codec.

Document shape (one key per domain)::

    {
      "messages": {
        "headers": {"Language": "fr", "Plural-Forms": "nplurals=2; plural=(n > 1);"},
        "translations": {
          "": {
            "Hello": "Bonjour",
            "%d file": {"msgid_plural": "%d files", "msgstr": ["%d fichier", "%d fichiers"]}
          },
          "menu": {"Open": "Ouvrir"}
        }
      }
    }

``translations`` is keyed by context ("" for none), then by msgid. Singular
entries map to their translation; plural entries to an object holding the
plural id and all forms. Untranslated and disabled entries are not written.
"""
from __future__ import annotations

import enum
import json
from typing import Any, Dict, Optional

from ..catalog import Catalog, Headers, Translation
from ..exceptions import FormatError, ValidationError
from ..utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["JsonFlags", "parse_flags", "encode", "decode", "decode_all"]

DEFAULT_DOMAIN = "messages"


class JsonFlags(enum.IntFlag):
	"""Formatting bits, numbered like PHP's json_encode option constants."""
	NONE = 0
	UNESCAPED_SLASHES = 64
	PRETTY_PRINT = 128
	UNESCAPED_UNICODE = 256


def parse_flags(value: str) -> int:
	"""Read a flag set: a number, or names joined by ``|`` (``JSON_`` prefix optional)."""
	total = 0
	for part in str(value).split("|"):
		part = part.strip()
		if not part:
			continue
		if part.isdigit():
			total |= int(part)
			continue
		name = part.upper()
		if name.startswith("JSON_"):
			name = name[len("JSON_"):]
		try:
			total |= JsonFlags[name]
		except KeyError:
			raise ValidationError(f"unknown JSON flag {part!r}") from None
	return int(total)


def _entry_value(t: Translation) -> Any:
	if t.plural is None:
		return t.translation
	return {"msgid_plural": t.plural, "msgstr": list(t.translations)}


def to_dict(catalog: Catalog) -> Dict[str, Any]:
	translations: Dict[str, Dict[str, Any]] = {}
	for t in catalog:
		if t.disabled or not t.is_translated:
			continue
		bucket = translations.setdefault(t.context or "", {})
		if t.msgid in bucket:
			logger.warning("Context %r and msgid %r collide in JSON output; keeping the later entry", t.context, t.msgid)
		bucket[t.msgid] = _entry_value(t)
	return {
		catalog.domain or DEFAULT_DOMAIN: {
			"headers": dict(catalog.headers),
			"translations": translations,
		}
	}


def encode(catalog: Catalog, flags: int = 0) -> bytes:
	"""Serialize ``catalog``; ``flags`` is a JsonFlags bit set (plain int accepted)."""
	flags = JsonFlags(int(flags) & (JsonFlags.UNESCAPED_SLASHES | JsonFlags.PRETTY_PRINT | JsonFlags.UNESCAPED_UNICODE))
	text = json.dumps(
		to_dict(catalog),
		ensure_ascii=not flags & JsonFlags.UNESCAPED_UNICODE,
		indent=4 if flags & JsonFlags.PRETTY_PRINT else None,
		separators=(",", ": ") if flags & JsonFlags.PRETTY_PRINT else (",", ":"),
	)
	if not flags & JsonFlags.UNESCAPED_SLASHES:
		# '/' can only occur inside string literals in JSON text
		text = text.replace("/", "\\/")
	return text.encode("utf-8")


def _catalog(domain: str, body: Any) -> Catalog:
	if not isinstance(body, dict):
		raise FormatError(f"domain {domain!r}: expected an object")
	headers = body.get("headers") or {}
	translations = body.get("translations") or {}
	if not isinstance(headers, dict) or not isinstance(translations, dict):
		raise FormatError(f"domain {domain!r}: 'headers' and 'translations' must be objects")

	catalog = Catalog(domain=domain, headers=Headers(headers))
	for context, messages in translations.items():
		if not isinstance(messages, dict):
			raise FormatError(f"domain {domain!r}: context {context!r} must map msgids to translations")
		for msgid, value in messages.items():
			if isinstance(value, str):
				t = Translation(msgid=msgid, context=context or None, translations=[value])
			elif isinstance(value, dict) and isinstance(value.get("msgstr"), list):
				t = Translation(
					msgid=msgid,
					context=context or None,
					plural=value.get("msgid_plural", ""),
					translations=[str(v) for v in value["msgstr"]],
				)
			else:
				raise FormatError(f"domain {domain!r}: bad translation for {msgid!r}")
			catalog.add(t)
	return catalog


def decode_all(data: bytes) -> Dict[str, Catalog]:
	"""Read every domain of a JSON document."""
	try:
		doc = json.loads(data.decode("utf-8-sig"))
	except (UnicodeDecodeError, ValueError) as e:
		raise FormatError(f"invalid JSON catalog: {e}") from e
	if not isinstance(doc, dict):
		raise FormatError("invalid JSON catalog: top level must be an object")
	return {domain: _catalog(domain, body) for domain, body in doc.items()}


def decode(data: bytes, domain: Optional[str] = None) -> Catalog:
	"""Read one domain (the first, unless ``domain`` is given)."""
	catalogs = decode_all(data)
	if not catalogs:
		return Catalog(domain=domain)
	if domain is not None:
		if domain not in catalogs:
			raise FormatError(f"domain {domain!r} not found in JSON catalog")
		return catalogs[domain]
	if len(catalogs) > 1:
		logger.warning("JSON catalog holds %d domains; reading only %r", len(catalogs), next(iter(catalogs)))
	return next(iter(catalogs.values()))
