# -*- coding: utf-8 -*-
"""msginit: create a new translation catalog for a locale from a POT template.

    msginit -i messages.pot -l fr_FR.UTF-8 -o fr.po
"""
from __future__ import annotations

import argparse
import datetime
import os
import pathlib
import sys
from typing import List, Optional

from ..catalog import Catalog
from ..exceptions import CatalogIOError, ValidationError
from ..formats import CatalogFormat, load_catalog
from ..plurals import PluralFormula, PluralRegistry, locale_encoding, normalize_locale
from ..utils.config import Settings
from ..utils.files import STDIO, write_output
from ..utils.logging import get_logger
from . import add_common_arguments, command, format_date

logger = get_logger(__name__)

DEFAULT_LOCALE = "en_US"


def configure(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
	parser.add_argument("-i", "--input", help="Input POT file (default: the only *.pot in the current directory); '-' reads standard input")
	parser.add_argument("-o", "--output-file", help="Output PO file (default: LOCALE.po); '-' writes to standard output")
	parser.add_argument("-l", "--locale", help="Target locale, ll_CC[.ENCODING] (default: en_US)")
	parser.add_argument("--no-translator", action="store_true", help="The catalog is generated, not translated by a person")
	add_common_arguments(parser)
	return parser


def build_arg_parser() -> argparse.ArgumentParser:
	return configure(argparse.ArgumentParser(
		prog="msginit",
		description="Create a new PO file, initializing the meta information.",
	))


def find_template(directory: str = ".") -> str:
	"""The single ``*.pot`` file in ``directory``."""
	found = sorted(str(p) for p in pathlib.Path(directory).glob("*.pot"))
	if not found:
		raise CatalogIOError("no .pot file found; use --input", path=directory)
	if len(found) > 1:
		raise ValidationError(f"found several .pot files ({', '.join(found)}); use --input")
	return found[0]


def init_catalog(
	template: Catalog,
	locale: str,
	formula: PluralFormula,
	translator: bool = True,
	created: Optional[datetime.datetime] = None,
) -> Catalog:
	"""Turn a POT catalog into a fresh PO catalog for ``locale`` (in place)."""
	language = normalize_locale(locale)
	encoding = locale_encoding(locale) or "UTF-8"
	headers = template.headers

	headers["Project-Id-Version"] = headers.get("Project-Id-Version", "")
	if created is not None and not headers.get("POT-Creation-Date"):
		headers["POT-Creation-Date"] = format_date(created)
	headers["PO-Revision-Date"] = format_date()
	if translator:
		headers["Last-Translator"] = headers.get("Last-Translator", "")
		headers["Language-Team"] = headers.get("Language-Team", "")
	headers["Language"] = language
	headers["MIME-Version"] = "1.0"
	headers["Content-Type"] = f"text/plain; charset={encoding}"
	headers["Content-Transfer-Encoding"] = "8bit"
	headers["Plural-Forms"] = str(formula)

	# a template header is fuzzy by convention, the new catalog's is not
	template.header_flags = [flag for flag in template.header_flags if flag != "fuzzy"]
	for translation in template:
		if translation.plural is not None and not translation.is_translated:
			translation.translations = [""] * formula.count
	template.domain = template.domain or language
	return template


@command
def run(args: argparse.Namespace, settings: Settings) -> None:
	registry = PluralRegistry()
	locale = args.locale or DEFAULT_LOCALE
	formula = registry.get(locale)

	source = args.input or find_template()
	template = load_catalog(source, CatalogFormat.PO)
	created = None
	if source != STDIO:
		try:
			created = datetime.datetime.fromtimestamp(os.path.getmtime(source), datetime.timezone.utc)
		except OSError:
			logger.debug("Cannot stat %s", source)

	catalog = init_catalog(template, locale, formula, translator=not args.no_translator, created=created)
	output = args.output_file or f"{catalog.language}.po"
	write_output(output, CatalogFormat.PO.encode(catalog, width=settings.wrap_width))
	logger.info("Created %s for %s (%s)", output, catalog.language, formula)


def main(argv: Optional[List[str]] = None) -> None:
	args = build_arg_parser().parse_args(argv)
	sys.exit(run(args))


if __name__ == "__main__":
	main()
