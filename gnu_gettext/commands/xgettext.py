# -*- coding: utf-8 -*-
"""xgettext: extract translatable strings from PHP and JavaScript sources.

    xgettext -D src -d app -p locale index.php lib/form.php
    xgettext -L JavaScript -c TRANSLATORS: -o - app.js
    xgettext -j -x ignore.pot -f files.txt

One ``{domain}.po`` is written per domain found (``-d`` names the default
domain), unless ``-o`` sends everything to a single file.
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Dict, List, Optional, Sequence

from ..catalog import Catalog, Headers
from ..exceptions import CatalogIOError, ValidationError
from ..formats import CatalogFormat, load_catalog
from ..merge import merge_domain, output_path
from ..scanners import LANGUAGES, Scanner
from ..utils.config import Settings
from ..utils.files import STDIO, read_input, write_output
from ..utils.logging import get_logger
from . import add_common_arguments, command, format_date

logger = get_logger(__name__)


def configure(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
	parser.add_argument("inputfile", nargs="*", help="Source files to scan; '-' reads standard input")
	parser.add_argument("-f", "--files-from", metavar="FILE", help="Read input file names from FILE, one per line")
	parser.add_argument("-D", "--directory", action="append", default=[], help="Search input files relative to this directory (repeatable)")
	parser.add_argument("-d", "--default-domain", metavar="NAME", help="Use NAME.po for output (instead of messages.po)")
	parser.add_argument("-o", "--output", metavar="FILE", help="Write all messages to FILE; '-' writes to standard output")
	parser.add_argument("-p", "--output-dir", metavar="DIR", help="Place output files in DIR")
	parser.add_argument("-L", "--language", metavar="NAME", help=f"Language of the input files: {', '.join(LANGUAGES)} (default: by file extension)")
	parser.add_argument("-j", "--join-existing", action="store_true", help="Join messages with the existing output file")
	parser.add_argument("-x", "--exclude-file", metavar="FILE", help="Messages in this PO/POT file are not extracted")
	parser.add_argument("-c", "--add-comments", nargs="?", const="", action="append", metavar="TAG", help="Copy comment blocks above calls (starting with TAG, if given) into the output")
	parser.add_argument("--msgid-bugs-address", metavar="EMAIL", help="Report-Msgid-Bugs-To header value")
	parser.add_argument("--package-name", help="Package name for the Project-Id-Version header")
	parser.add_argument("--package-version", help="Package version for the Project-Id-Version header")
	parser.add_argument("-m", "--msgstr-prefix", nargs="?", const="", default="", metavar="STRING", help="Prefix for msgstr values")
	parser.add_argument("-M", "--msgstr-suffix", nargs="?", const="", default="", metavar="STRING", help="Suffix for msgstr values")
	add_common_arguments(parser)
	return parser


def build_arg_parser() -> argparse.ArgumentParser:
	return configure(argparse.ArgumentParser(
		prog="xgettext",
		description="Extract translatable strings from given input files.",
	))


def default_headers(
	package_name: Optional[str] = None,
	package_version: Optional[str] = None,
	bugs_address: Optional[str] = None,
) -> Headers:
	now = format_date()
	project = " ".join(part for part in (package_name, package_version) if part)
	return Headers([
		("Project-Id-Version", project),
		("Report-Msgid-Bugs-To", bugs_address or ""),
		("POT-Creation-Date", now),
		("PO-Revision-Date", now),
		("Last-Translator", ""),
		("Language-Team", ""),
		("Language", ""),
		("MIME-Version", "1.0"),
		("Content-Type", "text/plain; charset=UTF-8"),
		("Content-Transfer-Encoding", "8bit"),
	])


def read_file_list(path: str) -> List[str]:
	"""Non-empty lines of ``path``; lines starting with '#' are comments."""
	text = read_input(path).decode("utf-8", errors="replace")
	return [line.strip() for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")]


def locate(name: str, directories: Sequence[str]) -> str:
	"""First ``directory/name`` that exists."""
	if os.path.isabs(name):
		if os.path.isfile(name):
			return name
		raise CatalogIOError("no such file", path=name)
	for directory in directories:
		candidate = os.path.join(directory, name)
		if os.path.isfile(candidate):
			return candidate
	raise CatalogIOError(f"not found in {', '.join(directories) or 'any directory'}", path=name)


def scan_inputs(scanner: Scanner, files: Sequence[str], directories: Sequence[str]) -> None:
	for name in files:
		if name == STDIO:
			scanner.scan_string(read_input(STDIO).decode("utf-8", errors="replace"), STDIO)
			continue
		scanner.scan_file(locate(name, directories), filename=name)


def _targets(scanner: Scanner, args: argparse.Namespace) -> Dict[str, Catalog]:
	"""Output path -> catalog to write there."""
	if args.output:
		combined = Catalog(domain=scanner.default_domain)
		for catalog in scanner.translations.values():
			combined.merge_with(catalog)
		return {output_path(scanner.default_domain, args.output_dir, args.output): combined}
	return {output_path(domain, args.output_dir): catalog for domain, catalog in scanner.translations.items()}


@command
def run(args: argparse.Namespace, settings: Settings) -> None:
	if args.join_existing and args.output == STDIO:
		raise ValidationError("--join-existing cannot be used when output is written to standard output")

	files = list(args.inputfile)
	if args.files_from:
		files += read_file_list(args.files_from)
	if not files:
		raise ValidationError("no input file given")

	directories = []
	for directory in args.directory or ["."]:
		if os.path.isdir(directory):
			directories.append(directory)
		else:
			logger.warning("Directory %s does not exist, ignored", directory)

	scanner = Scanner(
		default_domain=args.default_domain or settings.default_domain,
		functions=settings.functions,
		comment_tags=args.add_comments if args.add_comments is not None else settings.comment_tags,
		language=args.language or settings.language,
	)
	scan_inputs(scanner, files, directories)

	exclude = load_catalog(args.exclude_file, CatalogFormat.PO) if args.exclude_file else None
	headers = default_headers(args.package_name, args.package_version, args.msgid_bugs_address)

	for path, scanned in _targets(scanner, args).items():
		existing = None
		if args.join_existing and os.path.exists(path):
			existing = load_catalog(path, CatalogFormat.PO)
		catalog = merge_domain(
			scanned,
			existing=existing,
			exclude=exclude,
			prefix=args.msgstr_prefix or "",
			suffix=args.msgstr_suffix or "",
			headers=headers,
		)
		write_output(path, CatalogFormat.PO.encode(catalog, width=settings.wrap_width))
		logger.info("Domain %s: %d message(s) written to %s", catalog.domain, len(catalog), path)


def main(argv: Optional[List[str]] = None) -> None:
	args = build_arg_parser().parse_args(argv)
	sys.exit(run(args))


if __name__ == "__main__":
	main()
