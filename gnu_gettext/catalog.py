# -*- coding: utf-8 -*-
"""In-memory translation catalog: Translation, Headers and Catalog.

A Catalog keeps its translations in insertion order and keyed by
``(context, msgid)``; adding an entry whose key already exists merges the two
instead of creating a duplicate. Headers are an ordered ``Key: Value`` map
serialized as the msgstr of the empty-msgid header entry.
"""
from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, Iterator, List, MutableMapping, Optional, Tuple

from .exceptions import ValidationError
from .plurals import PluralFormula, PluralRegistry

__all__ = ["Reference", "Translation", "Headers", "Catalog", "HEADER_KEYS"]

Reference = Tuple[str, Optional[int]]
Key = Tuple[Optional[str], str]

HEADER_KEYS = (
    "Project-Id-Version",
    "Report-Msgid-Bugs-To",
    "POT-Creation-Date",
    "PO-Revision-Date",
    "Last-Translator",
    "Language-Team",
    "Language",
    "MIME-Version",
    "Content-Type",
    "Content-Transfer-Encoding",
    "Plural-Forms",
)


def _union(target: List, items: Iterable) -> None:
    """Append the items of ``items`` not yet in ``target``, keeping order."""
    for item in items:
        if item not in target:
            target.append(item)


@dataclasses.dataclass
class Translation:
    """A single catalog entry."""
    msgid: str
    context: Optional[str] = None
    plural: Optional[str] = None
    translations: List[str] = dataclasses.field(default_factory=list)
    references: List[Reference] = dataclasses.field(default_factory=list)
    comments: List[str] = dataclasses.field(default_factory=list)
    extracted_comments: List[str] = dataclasses.field(default_factory=list)
    flags: List[str] = dataclasses.field(default_factory=list)
    previous_context: Optional[str] = None
    previous_msgid: Optional[str] = None
    previous_plural: Optional[str] = None
    disabled: bool = False

    @property
    def key(self) -> Key:
        return (self.context, self.msgid)

    @property
    def translation(self) -> str:
        """First (singular) translated form, or '' when untranslated."""
        return self.translations[0] if self.translations else ""

    def translate(self, text: str) -> None:
        if self.translations:
            self.translations[0] = text
        else:
            self.translations.append(text)

    @property
    def is_translated(self) -> bool:
        return any(self.translations)

    @property
    def fuzzy(self) -> bool:
        return "fuzzy" in self.flags

    def add_reference(self, filename: str, line: Optional[int] = None) -> None:
        _union(self.references, [(filename, line)])

    def add_flag(self, flag: str) -> None:
        _union(self.flags, [flag])

    def merge(self, other: "Translation") -> None:
        """Fold ``other`` (same key) into this entry.

        References, comments and flags are unioned; the plural id and the
        translated forms of ``other`` are taken only where this entry has none.
        """
        _union(self.references, other.references)
        _union(self.comments, other.comments)
        _union(self.extracted_comments, other.extracted_comments)
        _union(self.flags, other.flags)
        if self.plural is None and other.plural is not None:
            self.plural = other.plural
        if not self.is_translated and other.is_translated:
            self.translations = list(other.translations)
        if self.previous_msgid is None and other.previous_msgid is not None:
            self.previous_context = other.previous_context
            self.previous_msgid = other.previous_msgid
            self.previous_plural = other.previous_plural
        if self.disabled and not other.disabled:
            self.disabled = False

    def copy(self) -> "Translation":
        return dataclasses.replace(
            self,
            translations=list(self.translations),
            references=list(self.references),
            comments=list(self.comments),
            extracted_comments=list(self.extracted_comments),
            flags=list(self.flags),
        )


class Headers(MutableMapping):
    """Ordered, case-sensitive ``Key: Value`` header map.

    Assigning ``None`` unsets a key; unset keys are never serialized.
    """

    def __init__(self, items: Optional[Iterable[Tuple[str, Optional[str]]]] = None, **kwargs: str) -> None:
        self._data: Dict[str, str] = {}
        if items is not None:
            pairs = items.items() if isinstance(items, (dict, Headers)) else items
            for key, value in pairs:
                self[key] = value
        for key, value in kwargs.items():
            self[key] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._data.pop(key, None)
            return
        self._data[str(key)] = str(value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Headers({self._data!r})"

    def merge_with(self, other: MutableMapping) -> "Headers":
        """Fill missing or empty values from ``other``; non-empty values are kept."""
        for key, value in other.items():
            if value is None:
                continue
            if not self._data.get(key):
                self[key] = value
        return self

    def to_string(self) -> str:
        """Header entry msgstr: one ``Key: Value\\n`` line per header."""
        return "".join(f"{key}: {value}\n" for key, value in self._data.items())

    @classmethod
    def from_string(cls, text: str) -> "Headers":
        headers = cls()
        for line in (text or "").split("\n"):
            if not line.strip() or ":" not in line:
                continue
            key, value = line.split(":", 1)
            headers[key.strip()] = value.strip()
        return headers

    @property
    def charset(self) -> Optional[str]:
        content_type = self._data.get("Content-Type", "")
        for part in content_type.split(";"):
            name, _, value = part.strip().partition("=")
            if name.strip().lower() == "charset" and value.strip():
                return value.strip()
        return None


class Catalog:
    """Ordered collection of translations plus headers, language and domain."""

    def __init__(
        self,
        domain: Optional[str] = None,
        language: Optional[str] = None,
        headers: Optional[Iterable[Tuple[str, Optional[str]]]] = None,
    ) -> None:
        self.domain = domain
        self.headers = Headers(headers)
        self.header_comments: List[str] = []
        self.header_flags: List[str] = []
        self._entries: Dict[Key, Translation] = {}
        if language:
            self.language = language

    # ── mapping protocol ──────────────────────────────────────────────────────
    def __iter__(self) -> Iterator[Translation]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Translation):
            return item.key in self._entries
        return item in self._entries

    def __repr__(self) -> str:
        return f"<Catalog domain={self.domain!r} language={self.language!r} entries={len(self)}>"

    # ── language / plural forms ──────────────────────────────────────────────
    @property
    def language(self) -> Optional[str]:
        return self.headers.get("Language") or None

    @language.setter
    def language(self, value: Optional[str]) -> None:
        self.headers["Language"] = value

    def plural_formula(self, registry: Optional[PluralRegistry] = None) -> Optional[PluralFormula]:
        """Plural formula from the Plural-Forms header, else from ``registry`` by language."""
        value = self.headers.get("Plural-Forms")
        if value:
            try:
                return PluralFormula.parse(value)
            except ValidationError:
                if registry is None:
                    raise
        if registry is not None and self.language:
            return registry.get(self.language)
        return None

    # ── entry operations ─────────────────────────────────────────────────────
    def add(self, translation: Translation) -> Translation:
        """Insert ``translation`` or merge it into the entry with the same key."""
        existing = self._entries.get(translation.key)
        if existing is None:
            self._entries[translation.key] = translation
            return translation
        existing.merge(translation)
        return existing

    def remove(self, translation: Translation) -> bool:
        """Remove the entry with the same (context, msgid) key, if present."""
        return self._entries.pop(translation.key, None) is not None

    def find(self, context: Optional[str], msgid: str) -> Optional[Translation]:
        return self._entries.get((context, msgid))

    def merge_with(self, other: "Catalog") -> "Catalog":
        """Add every entry of ``other`` (copied) and fill empty headers from it."""
        for translation in other:
            self.add(translation.copy())
        self.headers.merge_with(other.headers)
        _union(self.header_comments, other.header_comments)
        _union(self.header_flags, other.header_flags)
        if self.domain is None:
            self.domain = other.domain
        return self

    def copy(self) -> "Catalog":
        clone = Catalog(domain=self.domain, headers=self.headers.items())
        clone.header_comments = list(self.header_comments)
        clone.header_flags = list(self.header_flags)
        for translation in self:
            clone.add(translation.copy())
        return clone
