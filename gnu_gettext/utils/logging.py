# FILE: gnu_gettext/utils/logging.py
"""
Unified logging helpers for the gettext tools.

- One package logger ("gnu_gettext") writing to stderr; modules get children of it.
- Honors the level from the GETTEXT_LOG_LEVEL environment variable or the
  "log_level" key of the config file (e.g. "INFO", "DEBUG").
- Small helper to compact JSON for log lines.
"""

import json
import logging
import os
from contextlib import contextmanager
from typing import Any, Optional


ROOT_LOGGER_NAME = "gnu_gettext"
ENV_LOG_LEVEL = "GETTEXT_LOG_LEVEL"


# ---------------------------
# Level helpers
# ---------------------------

def level_from_string(level_str: Optional[str], default: int = logging.WARNING) -> int:
    """Map string level to logging constant; falls back to ``default`` on unknown."""
    if not level_str:
        return default
    level = getattr(logging, str(level_str).strip().upper(), None)
    return level if isinstance(level, int) else default


def resolve_level(configured: Optional[str] = None, default: int = logging.WARNING) -> int:
    """Environment override first, then the configured value, then ``default``."""
    env = os.environ.get(ENV_LOG_LEVEL)
    if env:
        return level_from_string(env, default)
    return level_from_string(configured, default)


# ---------------------------
# Public logger factory
# ---------------------------

def _root_logger() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(h)
        logger.setLevel(logging.WARNING)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Create or return a logger below the package logger.

    ``gnu_gettext.formats.po`` and ``formats.po`` both resolve to the same child.
    """
    root = _root_logger()
    if name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


# ---------------------------
# Format utilities
# ---------------------------

def compact_json(obj: Any, limit: int = 1200) -> str:
    """Compact JSON string for logging; truncate if too long."""
    try:
        s = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        s = str(obj)
    return s if len(s) <= limit else s[:limit] + "…(truncated)"


# ---------------------------
# Temporary level override
# ---------------------------

@contextmanager
def temporarily(level: int):
    """
    Temporarily raise/lower the package logger level.

    Example:
        with temporarily(logging.DEBUG):
            # noisy section
            ...
    """
    logger = _root_logger()
    old = logger.level
    try:
        logger.setLevel(level)
        yield logger
    finally:
        logger.setLevel(old)
