# -*- coding: utf-8 -*-
"""Catalog file formats.

``CatalogFormat`` is the closed set of supported formats. Pick one once at
the boundary (explicitly or by file extension) and call its ``encode`` /
``decode`` pair; the codec modules stay independent of each other.
"""
from __future__ import annotations

import enum
import os
import pathlib
from typing import Any, Optional, Union

from ..catalog import Catalog
from ..exceptions import FormatError, ValidationError
from ..utils.files import STDIO, read_input, write_output
from ..utils.logging import get_logger
from . import json_catalog, mo, po

logger = get_logger(__name__)

__all__ = ["CatalogFormat", "load_catalog", "dump_catalog", "save_catalog"]

PathLike = Union[str, os.PathLike]


class CatalogFormat(enum.Enum):
	PO = "po"
	MO = "mo"
	JSON = "json"

	@classmethod
	def for_path(cls, path: PathLike, default: Optional["CatalogFormat"] = None) -> "CatalogFormat":
		"""Format implied by the file extension of ``path``."""
		suffix = pathlib.PurePath(str(path)).suffix.lower()
		fmt = _EXTENSIONS.get(suffix, default)
		if fmt is None:
			raise ValidationError(f"cannot tell the catalog format of {str(path)!r} from its extension")
		return fmt

	def encode(self, catalog: Catalog, **options: Any) -> bytes:
		"""Serialize ``catalog``.

		Options: PO ``width``; MO ``byteorder`` and ``hash_table``; JSON ``flags``.
		"""
		if self is CatalogFormat.PO:
			return po.encode(catalog, width=options.get("width", po.DEFAULT_WIDTH))
		if self is CatalogFormat.MO:
			return mo.encode(
				catalog,
				byteorder=options.get("byteorder", "little"),
				hash_table=options.get("hash_table", True),
			)
		return json_catalog.encode(catalog, flags=options.get("flags", 0))

	def decode(self, data: bytes, **options: Any) -> Catalog:
		"""Parse ``data``. Options: PO ``strict``; PO and MO ``path`` (for error locations)."""
		if self is CatalogFormat.PO:
			return po.parse(data, strict=options.get("strict", False), path=options.get("path"))
		if self is CatalogFormat.MO:
			return mo.decode(data, path=options.get("path"))
		try:
			return json_catalog.decode(data, domain=options.get("domain"))
		except FormatError as e:
			e.path = e.path or options.get("path")
			raise


_EXTENSIONS = {
	".po": CatalogFormat.PO,
	".pot": CatalogFormat.PO,
	".mo": CatalogFormat.MO,
	".gmo": CatalogFormat.MO,
	".json": CatalogFormat.JSON,
}


def _domain_of(path: PathLike) -> Optional[str]:
	if str(path) == STDIO:
		return None
	return pathlib.PurePath(str(path)).stem or None


def load_catalog(path: PathLike, fmt: Optional[CatalogFormat] = None, strict: bool = False) -> Catalog:
	"""Read a catalog file (``-`` for stdin, parsed as PO unless ``fmt`` says otherwise).

	The domain of the result defaults to the file stem, so ``fr.po`` loads as
	domain ``fr`` unless the file itself names one (JSON).
	"""
	if fmt is None:
		fmt = CatalogFormat.PO if str(path) == STDIO else CatalogFormat.for_path(path, default=CatalogFormat.PO)
	data = read_input(path)
	catalog = fmt.decode(data, strict=strict, path=str(path))
	if catalog.domain is None:
		catalog.domain = _domain_of(path)
	logger.info("Loaded %s (%s, %d entries)", path, fmt.name, len(catalog))
	return catalog


def dump_catalog(catalog: Catalog, fmt: CatalogFormat = CatalogFormat.PO, **options: Any) -> bytes:
	return fmt.encode(catalog, **options)


def save_catalog(catalog: Catalog, path: PathLike, fmt: Optional[CatalogFormat] = None, **options: Any) -> None:
	"""Encode and atomically write ``catalog``; ``-`` writes to stdout."""
	if fmt is None:
		fmt = CatalogFormat.PO if str(path) == STDIO else CatalogFormat.for_path(path, default=CatalogFormat.PO)
	write_output(path, fmt.encode(catalog, **options))
