# -*- coding: utf-8 -*-
"""Source scanners: find translation calls and collect them per domain.

``LANGUAGES`` maps a language name to its scan function
``scan(text, functions) -> [CallSite]``. ``Scanner`` runs one of them over
each file and accumulates the resulting entries into one Catalog per domain;
scanning the same message twice merges the references into one entry.

Usage
-----
scanner = Scanner(default_domain="messages", comment_tags=["TRANSLATORS:"])
scanner.scan_file("src/index.php")
scanner.translations["messages"]   # Catalog
"""
from __future__ import annotations

import os
import pathlib
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..catalog import Catalog, Translation
from ..exceptions import CatalogIOError, ValidationError
from ..utils.logging import get_logger
from . import javascript, php
from .calls import FUNCTIONS, SIGNATURES, CallSite

logger = get_logger(__name__)

__all__ = ["LANGUAGES", "EXTENSIONS", "Scanner", "resolve_language", "language_for_path"]

ScanFunction = Callable[[str, Mapping[str, str]], List[CallSite]]

LANGUAGES: Dict[str, ScanFunction] = {
	"PHP": php.scan,
	"JavaScript": javascript.scan,
}

_ALIASES = {"js": "JavaScript", "javascript": "JavaScript", "php": "PHP"}

EXTENSIONS = {
	".php": "PHP",
	".phtml": "PHP",
	".inc": "PHP",
	".js": "JavaScript",
	".mjs": "JavaScript",
	".cjs": "JavaScript",
	".jsx": "JavaScript",
}

DEFAULT_LANGUAGE = "PHP"


def resolve_language(name: str) -> str:
	"""Canonical language name for ``name`` (case-insensitive)."""
	canonical = _ALIASES.get((name or "").strip().lower())
	if canonical is None:
		raise ValidationError(f"unsupported language {name!r}; expected one of: {', '.join(LANGUAGES)}")
	return canonical


def language_for_path(path: Union[str, os.PathLike]) -> Optional[str]:
	return EXTENSIONS.get(pathlib.PurePath(str(path)).suffix.lower())


def _tagged(comments: Iterable[str], tags: List[str]) -> List[str]:
	"""Comments from the first one that starts with a tag; '' matches any comment."""
	selected: List[str] = []
	for comment in comments:
		if not selected:
			if not any(comment.startswith(tag) for tag in tags):
				continue
		selected.append(comment)
	return selected


class Scanner:
	"""Accumulates the messages of any number of scanned sources.

	``functions`` maps extra function names to a kind of the built-in table
	(``"_t": "gettext"``); ``comment_tags`` enables extracted comments.
	``language`` forces one language for every file instead of guessing it
	from the extension.
	"""

	def __init__(
		self,
		default_domain: str = "messages",
		functions: Optional[Mapping[str, str]] = None,
		comment_tags: Optional[Iterable[str]] = None,
		language: Optional[str] = None,
	) -> None:
		self.default_domain = default_domain
		self.functions: Dict[str, str] = dict(FUNCTIONS)
		for name, kind in (functions or {}).items():
			if kind not in SIGNATURES:
				raise ValidationError(f"function {name!r}: unknown kind {kind!r}; expected one of: {', '.join(SIGNATURES)}")
			self.functions[name] = kind
		self.comment_tags = list(comment_tags) if comment_tags is not None else None
		self.language = resolve_language(language) if language else None
		self.translations: Dict[str, Catalog] = {}
		self.catalog(default_domain)

	def catalog(self, domain: str) -> Catalog:
		if domain not in self.translations:
			self.translations[domain] = Catalog(domain=domain)
		return self.translations[domain]

	def _language(self, filename: str, language: Optional[str]) -> str:
		if language:
			return resolve_language(language)
		if self.language:
			return self.language
		return language_for_path(filename) or DEFAULT_LANGUAGE

	def scan_string(self, text: str, filename: str, language: Optional[str] = None) -> int:
		"""Scan ``text`` as if it were ``filename``; returns the number of messages recorded."""
		lang = self._language(filename, language)
		recorded = 0
		for site in LANGUAGES[lang](text, self.functions):
			if self._record(site, filename):
				recorded += 1
		logger.debug("%s: %d message(s) as %s", filename, recorded, lang)
		return recorded

	def scan_file(
		self,
		path: Union[str, os.PathLike],
		filename: Optional[str] = None,
		language: Optional[str] = None,
	) -> int:
		"""Scan a file; references use ``filename`` (default: ``path`` as given)."""
		filename = filename or str(path)
		try:
			data = pathlib.Path(path).read_bytes()
		except OSError as e:
			raise CatalogIOError(e.strerror or str(e), path=str(path)) from e
		try:
			text = data.decode("utf-8-sig")
		except UnicodeDecodeError:
			logger.warning("%s: not valid UTF-8, undecodable bytes replaced", path)
			text = data.decode("utf-8", errors="replace")
		logger.info("Scanning %s", path)
		return self.scan_string(text.replace("\r\n", "\n"), filename, language)

	def _record(self, site: CallSite, filename: str) -> bool:
		roles = SIGNATURES[self.functions[site.name]]
		if len(site.arguments) < len(roles):
			logger.debug("%s:%d: %s() has too few arguments, skipped", filename, site.line, site.name)
			return False
		values = dict(zip(roles, site.arguments))
		if any(value is None for value in values.values()):
			logger.debug("%s:%d: %s() with non-literal arguments skipped", filename, site.line, site.name)
			return False
		if not values["msgid"]:
			logger.warning("%s:%d: empty msgid in %s() skipped", filename, site.line, site.name)
			return False

		translation = Translation(
			msgid=values["msgid"],
			context=values.get("context"),
			plural=values.get("plural"),
		)
		translation.add_reference(filename, site.line)
		if self.comment_tags is not None:
			for comment in _tagged(site.comments, self.comment_tags):
				translation.extracted_comments.extend(comment.split("\n"))
		self.catalog(values.get("domain") or self.default_domain).add(translation)
		return True
