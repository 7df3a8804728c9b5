# -*- coding: utf-8 -*-
"""Error taxonomy shared by the catalog engine, the scanners and the commands."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "GettextError",
    "CatalogIOError",
    "FormatError",
    "ValidationError",
]


class GettextError(Exception):
    """Base exception for the gettext tools."""


class CatalogIOError(GettextError, OSError):
    """Raised when a file cannot be read or written."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = self.args[0] if self.args else ""
        return f"{self.path}: {msg}" if self.path else str(msg)


class FormatError(GettextError, ValueError):
    """Raised on malformed PO syntax (strict mode) or a corrupt MO/JSON document."""

    def __init__(self, message: str, line: Optional[int] = None, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.line = line
        self.path = path

    def __str__(self) -> str:
        msg = self.args[0] if self.args else ""
        where = self.path or ""
        if self.line is not None:
            where = f"{where}:{self.line}" if where else f"line {self.line}"
        return f"{where}: {msg}" if where else str(msg)


class ValidationError(GettextError, ValueError):
    """Raised for invalid option values: unknown language name, locale id or plural formula."""
