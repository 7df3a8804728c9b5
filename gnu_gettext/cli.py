# -*- coding: utf-8 -*-
"""``gettext`` umbrella command: ``gettext msgfmt|msginit|xgettext ...``."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import __version__
from .commands import msgfmt, msginit, xgettext

COMMANDS = {
	"msgfmt": (msgfmt, "Generate a binary message catalog from a textual translation description"),
	"msginit": (msginit, "Create a new PO file for a locale from a POT template"),
	"xgettext": (xgettext, "Extract translatable strings from given input files"),
}


def build_arg_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="gettext", description="GNU gettext catalog tools.")
	parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
	sub = parser.add_subparsers(dest="command", metavar="COMMAND")
	for name, (module, summary) in COMMANDS.items():
		module.configure(sub.add_parser(name, help=summary, description=summary + "."))
	return parser


def run(argv: Optional[List[str]] = None) -> int:
	parser = build_arg_parser()
	args = parser.parse_args(argv)
	if not args.command:
		parser.print_help(sys.stderr)
		return 2
	module, _ = COMMANDS[args.command]
	return module.run(args)


def main(argv: Optional[List[str]] = None) -> None:
	sys.exit(run(argv))


if __name__ == "__main__":
	main()
