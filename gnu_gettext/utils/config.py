import dataclasses
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import CatalogIOError, ValidationError
from .logging import compact_json, get_logger

logger = get_logger(__name__)

ENV_CONFIG = "GETTEXT_CONFIG"
DEFAULT_CONFIG_NAME = "gettext.json"

CONFIG_DEFAULTS: Dict[str, Any] = {
    "default_domain": "messages",
    "wrap_width": 79,
    "log_level": "WARNING",
    "language": None,
    "functions": {},
    "comment_tags": None,
    "byteorder": "little",
}


@dataclasses.dataclass
class Settings:
    default_domain: str = "messages"
    wrap_width: int = 79
    log_level: str = "WARNING"
    language: Optional[str] = None
    functions: Dict[str, str] = dataclasses.field(default_factory=dict)
    comment_tags: Optional[List[str]] = None
    byteorder: str = "little"
    source: Optional[str] = None


def _config_path(explicit: Optional[str]) -> Optional[Path]:
    """Return the config file to read, or None when only defaults apply."""
    if explicit:
        return Path(explicit)
    env = os.environ.get(ENV_CONFIG)
    if env:
        return Path(env)
    local = Path.cwd() / DEFAULT_CONFIG_NAME
    return local if local.exists() else None


def _coerce(data: Dict[str, Any], path: Path) -> Settings:
    values = dict(CONFIG_DEFAULTS)
    for key, value in data.items():
        if key not in CONFIG_DEFAULTS:
            logger.debug("Ignoring unknown config key %r in %s", key, path)
            continue
        values[key] = value

    try:
        wrap_width = int(values["wrap_width"])
    except (TypeError, ValueError):
        raise ValidationError(f"{path}: wrap_width must be an integer")
    functions = values["functions"] or {}
    if not isinstance(functions, dict):
        raise ValidationError(f"{path}: functions must be an object of name -> kind")
    tags = values["comment_tags"]
    if isinstance(tags, str):
        tags = [tags]
    if values["byteorder"] not in ("little", "big"):
        raise ValidationError(f"{path}: byteorder must be 'little' or 'big'")

    return Settings(
        default_domain=str(values["default_domain"] or "messages"),
        wrap_width=wrap_width,
        log_level=str(values["log_level"] or "WARNING"),
        language=values["language"],
        functions={str(k): str(v) for k, v in functions.items()},
        comment_tags=list(tags) if tags is not None else None,
        byteorder=values["byteorder"],
        source=str(path),
    )


def load_settings(explicit: Optional[str] = None) -> Settings:
    """Load settings from a JSON config file, falling back to defaults.

    Lookup order: ``explicit`` path, $GETTEXT_CONFIG, ./gettext.json.
    An explicit path (argument or environment) must be readable; an unreadable
    ./gettext.json is logged and ignored.
    """
    path = _config_path(explicit)
    if path is None:
        return Settings()

    strict = bool(explicit or os.environ.get(ENV_CONFIG))
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw or "{}")
    except OSError as e:
        if strict:
            raise CatalogIOError(e.strerror or str(e), path=str(path)) from e
        logger.error("Failed to read %s", path)
        return Settings()
    except ValueError as e:
        if strict:
            raise ValidationError(f"{path}: invalid JSON: {e}") from e
        logger.error("Failed to parse %s", path)
        return Settings()

    if not isinstance(data, dict):
        if strict:
            raise ValidationError(f"{path}: config must be a JSON object")
        logger.error("Ignoring %s: not a JSON object", path)
        return Settings()

    settings = _coerce(data, path)
    logger.debug("Loaded config %s: %s", path, compact_json(data))
    return settings
