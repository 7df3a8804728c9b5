"""GNU gettext catalog tools: PO/MO/JSON codecs, source scanners and the msgfmt, msginit and xgettext commands."""

__version__ = "0.21.0"
