# -*- coding: utf-8 -*-
"""Plural-forms formulas and the read-only language database behind them.

The database is Babel's CLDR-derived plural table. Components that need it
receive a ``PluralRegistry`` instance explicitly; nothing here keeps mutable
module state.

Usage
-----
registry = PluralRegistry()
formula = registry.get("fr_FR.UTF-8")
str(formula)          # 'nplurals=2; plural=(n > 1);'
formula.evaluate(2)   # 1
"""
from __future__ import annotations

import dataclasses
import functools
import gettext
import re
from typing import Callable, Optional

from babel.core import Locale, UnknownLocaleError
from babel.messages.plurals import get_plural

from .exceptions import ValidationError

__all__ = ["PluralFormula", "PluralRegistry", "normalize_locale"]

_PLURAL_FORMS_RE = re.compile(
	r"^\s*nplurals\s*=\s*(?P<count>\d+)\s*;\s*plural\s*=\s*(?P<expr>[^;]+?)\s*;?\s*$"
)
_LOCALE_RE = re.compile(r"^(?P<lang>[A-Za-z]{2,3})(?:[_-](?P<rest>[A-Za-z0-9_-]+))?(?:\.(?P<enc>[\w-]+))?(?:@(?P<mod>\w+))?$")


@functools.lru_cache(maxsize=64)
def _compile(expression: str) -> Callable[[int], int]:
	return gettext.c2py(expression)


@dataclasses.dataclass(frozen=True)
class PluralFormula:
	"""Number of plural forms plus the C expression selecting one for ``n``."""
	count: int
	expression: str

	@classmethod
	def parse(cls, value: str) -> "PluralFormula":
		"""Parse a ``Plural-Forms`` header value."""
		m = _PLURAL_FORMS_RE.match(value or "")
		if not m:
			raise ValidationError(f"invalid Plural-Forms value: {value!r}")
		count = int(m.group("count"))
		if count < 1:
			raise ValidationError(f"invalid Plural-Forms value: nplurals must be positive: {value!r}")
		formula = cls(count, m.group("expr"))
		formula.compile()
		return formula

	def compile(self) -> Callable[[int], int]:
		try:
			return _compile(self.expression)
		except (ValueError, SyntaxError, RecursionError) as e:
			raise ValidationError(f"invalid plural expression {self.expression!r}: {e}") from e

	def evaluate(self, n: int) -> int:
		"""Index of the plural form used for count ``n``.

		Out-of-range results select the first form, as gettext runtimes do.
		"""
		index = int(self.compile()(int(n)))
		return index if 0 <= index < self.count else 0

	def __str__(self) -> str:
		return f"nplurals={self.count}; plural={self.expression};"


def normalize_locale(locale_id: str) -> str:
	"""Strip encoding and modifier, normalize separators: 'pt-br.UTF-8' -> 'pt_BR'."""
	m = _LOCALE_RE.match((locale_id or "").strip())
	if not m:
		raise ValidationError(f"invalid locale: {locale_id!r}")
	lang = m.group("lang").lower()
	rest = m.group("rest")
	if not rest:
		return lang
	parts = rest.replace("-", "_").split("_")
	# region codes are upper-case, scripts title-case (sr_Latn_RS)
	fixed = [p.title() if len(p) == 4 else p.upper() for p in parts]
	return "_".join([lang] + fixed)


def locale_encoding(locale_id: str) -> Optional[str]:
	"""Encoding suffix of a POSIX locale id ('de_DE.ISO-8859-1' -> 'ISO-8859-1')."""
	m = _LOCALE_RE.match((locale_id or "").strip())
	return m.group("enc") if m else None


class PluralRegistry:
	"""Immutable lookup service: locale id -> PluralFormula."""

	def get(self, locale_id: str) -> PluralFormula:
		normalized = normalize_locale(locale_id)
		try:
			locale = Locale.parse(normalized)
		except (UnknownLocaleError, ValueError) as e:
			raise ValidationError(f"unknown locale: {locale_id!r}") from e
		plural = get_plural(locale)
		return PluralFormula(plural.num_plurals, plural.plural_expr)

	def __contains__(self, locale_id: object) -> bool:
		if not isinstance(locale_id, str):
			return False
		try:
			self.get(locale_id)
		except ValidationError:
			return False
		return True
