# -*- coding: utf-8 -*-
"""msgfmt: compile a PO (or JSON/MO) catalog into an MO or JSON catalog.

    msgfmt fr.po -o fr.mo
    msgfmt --json --json-flags "PRETTY_PRINT|UNESCAPED_UNICODE" fr.po -o fr.json
    cat fr.po | msgfmt - > fr.mo
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from ..formats import CatalogFormat, load_catalog
from ..formats.json_catalog import parse_flags
from ..utils.config import Settings
from ..utils.files import STDIO, write_output
from ..utils.logging import get_logger
from . import add_common_arguments, command

logger = get_logger(__name__)


def configure(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
	parser.add_argument("filename", help="Catalog to compile; '-' reads standard input")
	parser.add_argument("-D", "--directory", help="Look for the input file relative to this directory")
	parser.add_argument("-o", "--output-file", help="Write output to this file; '-' or no value writes to standard output")
	parser.add_argument("--json", action="store_true", help="Generate a JSON catalog instead of MO")
	parser.add_argument(
		"--json-flags",
		type=parse_flags,
		default=0,
		metavar="FLAGS",
		help="JSON formatting flags: a number or names such as PRETTY_PRINT|UNESCAPED_SLASHES",
	)
	parser.add_argument("--strict", action="store_true", help="Abort on the first malformed PO entry")
	parser.add_argument("--no-hash", action="store_true", help="Do not include a hash table in the MO file")
	parser.add_argument("--endianness", choices=("little", "big"), help="Byte order of the MO file (default: config, else little)")
	add_common_arguments(parser)
	return parser


def build_arg_parser() -> argparse.ArgumentParser:
	return configure(argparse.ArgumentParser(
		prog="msgfmt",
		description="Generate a binary message catalog from a textual translation description.",
	))


def _input_path(filename: str, directory: Optional[str]) -> str:
	if filename == STDIO or not directory or os.path.isabs(filename):
		return filename
	return os.path.join(directory, filename)


@command
def run(args: argparse.Namespace, settings: Settings) -> None:
	path = _input_path(args.filename, args.directory)
	fmt = CatalogFormat.PO if path == STDIO else CatalogFormat.for_path(path, default=CatalogFormat.PO)
	catalog = load_catalog(path, fmt, strict=args.strict)

	if args.json:
		data = CatalogFormat.JSON.encode(catalog, flags=args.json_flags)
	else:
		data = CatalogFormat.MO.encode(
			catalog,
			byteorder=args.endianness or settings.byteorder,
			hash_table=not args.no_hash,
		)
	write_output(args.output_file or STDIO, data)


def main(argv: Optional[List[str]] = None) -> None:
	args = build_arg_parser().parse_args(argv)
	sys.exit(run(args))


if __name__ == "__main__":
	main()
