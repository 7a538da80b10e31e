"""
Message translation based on the ``Accept-Language`` header.

Catalogs are JSON files under ``app/locales/<lng>/translation.json``.
The first language tag of the header is used; a regional tag such as
``zh-CN`` falls back to its base language and anything unknown falls
back to English.  Messages may contain ``{name}`` placeholders.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from fastapi import Request

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"
FALLBACK_LANGUAGE = "en"


def load_catalogs(locales_dir: Path = LOCALES_DIR) -> Dict[str, Dict[str, str]]:
    """Read every ``<lng>/translation.json`` below ``locales_dir``."""
    catalogs = {}
    for path in sorted(locales_dir.glob("*/translation.json")):
        with path.open(encoding="utf-8") as fh:
            catalogs[path.parent.name] = json.load(fh)
    return catalogs


CATALOGS = load_catalogs()
SUPPORTED_LANGUAGES = frozenset(CATALOGS)


def resolve_language(accept_language: Optional[str]) -> str:
    """Pick a supported language from an ``Accept-Language`` value."""
    if not accept_language:
        return FALLBACK_LANGUAGE
    tag = accept_language.split(",")[0].split(";")[0].strip().lower()
    for candidate in (tag, tag.split("-")[0]):
        if candidate in SUPPORTED_LANGUAGES:
            return candidate
    return FALLBACK_LANGUAGE


def gettext(language: str, key: str, **params) -> str:
    message = CATALOGS.get(language, {}).get(key)
    if message is None:
        message = CATALOGS[FALLBACK_LANGUAGE].get(key)
    if message is None:
        logger.warning("Missing translation key %s", key)
        return key
    if params:
        try:
            return message.format(**params)
        except (KeyError, IndexError):
            logger.warning("Bad placeholders for translation key %s", key)
    return message


def translate(request: Request, key: str, **params) -> str:
    """Translate ``key`` for the language requested by ``request``."""
    language = resolve_language(request.headers.get("accept-language"))
    return gettext(language, key, **params)
