# -*- coding: utf-8 -*-
"""Command-line entry points: msgfmt, msginit and xgettext.

Each command module exposes ``configure(parser)``, ``build_arg_parser()``,
``run(args) -> int`` and ``main()``. ``run`` is built with ``@command`` below,
which loads the config file, applies the log level and turns library errors
into exit status 1.
"""
from __future__ import annotations

import argparse
import datetime
import functools
import logging
from typing import Callable, Optional

from ..exceptions import GettextError
from ..utils.config import Settings, load_settings
from ..utils.logging import get_logger, resolve_level, temporarily

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

DATE_FORMAT = "%Y-%m-%d %H:%M%z"


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
	group = parser.add_argument_group("common options")
	group.add_argument("--config", metavar="FILE", help="JSON config file (default: $GETTEXT_CONFIG or ./gettext.json)")
	group.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (repeat for debug output)")
	group.add_argument("-q", "--quiet", action="store_true", help="Log errors only")


def format_date(when: Optional[datetime.datetime] = None) -> str:
	"""Header date, GNU style: ``2024-05-01 13:45+0200``."""
	if when is None:
		when = datetime.datetime.now(datetime.timezone.utc)
	return when.astimezone().strftime(DATE_FORMAT)


def _flag_level(args: argparse.Namespace) -> Optional[int]:
	verbose = getattr(args, "verbose", 0) or 0
	if verbose:
		return logging.DEBUG if verbose > 1 else logging.INFO
	if getattr(args, "quiet", False):
		return logging.ERROR
	return None


def command(func: Callable[[argparse.Namespace, Settings], None]) -> Callable[[argparse.Namespace], int]:
	"""Turn ``func(args, settings)`` into ``run(args) -> exit status``."""

	@functools.wraps(func)
	def run(args: argparse.Namespace) -> int:
		flag = _flag_level(args)
		with temporarily(flag if flag is not None else resolve_level()):
			try:
				settings = load_settings(getattr(args, "config", None))
			except GettextError as e:
				logger.error("%s", e)
				return EXIT_FAILURE

		with temporarily(flag if flag is not None else resolve_level(settings.log_level)):
			try:
				func(args, settings)
			except GettextError as e:
				logger.error("%s", e)
				return EXIT_FAILURE
		return EXIT_SUCCESS

	return run
