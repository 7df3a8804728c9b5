"""File helpers: ``-`` aware reads/writes and atomic replacement of outputs."""
from __future__ import annotations

import os
import pathlib
import sys
import tempfile
from typing import Union

from ..exceptions import CatalogIOError
from .logging import get_logger

logger = get_logger(__name__)

STDIO = "-"


def read_input(path: Union[str, os.PathLike]) -> bytes:
	"""Read a whole input file; ``-`` reads standard input."""
	if str(path) == STDIO:
		try:
			return sys.stdin.buffer.read()
		except OSError as e:
			raise CatalogIOError(f"cannot read standard input: {e}", path=STDIO) from e
	try:
		return pathlib.Path(path).read_bytes()
	except OSError as e:
		raise CatalogIOError(e.strerror or str(e), path=str(path)) from e


def write_output(path: Union[str, os.PathLike], data: Union[bytes, str]) -> None:
	"""Write a finished document; ``-`` writes to standard output."""
	if isinstance(data, str):
		data = data.encode("utf-8")
	if str(path) == STDIO:
		sys.stdout.buffer.write(data)
		sys.stdout.buffer.flush()
		return
	atomic_write(pathlib.Path(path), data)
	logger.info("Wrote %s (%d bytes)", path, len(data))


def atomic_write(path: pathlib.Path, data: bytes) -> None:
	"""Atomically write ``data`` to ``path``.

	This function writes to a temporary file in the same directory, fsyncs,
	then replaces the target. If the target exists, its permissions are
	preserved when possible.
	"""
	tmp_dir = path.parent
	orig_mode = None
	try:
		tmp_dir.mkdir(parents=True, exist_ok=True)
		try:
			orig_mode = path.stat().st_mode & 0o777
		except OSError:
			orig_mode = None

		with tempfile.NamedTemporaryFile("wb", delete=False, dir=tmp_dir, prefix=f".{path.name}.") as tf:
			tmp_name = tf.name
			try:
				tf.write(data)
				tf.flush()
				os.fsync(tf.fileno())
			except OSError:
				tf.close()
				os.unlink(tmp_name)
				raise
		try:
			os.replace(tmp_name, str(path))
		except OSError:
			os.unlink(tmp_name)
			raise
	except OSError as e:
		raise CatalogIOError(e.strerror or str(e), path=str(path)) from e

	if orig_mode is not None:
		try:
			os.chmod(str(path), orig_mode)
		except OSError:
			logger.debug("Failed to chmod %s", path)
	else:
		# NamedTemporaryFile creates 0600; give new outputs the usual umask-derived mode
		umask = os.umask(0)
		os.umask(umask)
		try:
			os.chmod(str(path), 0o666 & ~umask)
		except OSError:
			logger.debug("Failed to chmod %s", path)
