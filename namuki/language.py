"""Lookup of interface strings from the wiki's language files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from namuki.db import Database
from namuki.util import html_escape

logger = logging.getLogger(__name__)

_cache: dict[tuple[str, str, str], str] = {}


def get_language(
    db: Database, key: str, safe: bool = False, lang_dir: str | Path = "./lang"
) -> str:
    """Return the text for ``key`` in the wiki's language, HTML-escaped unless ``safe``."""
    language = "ko-KR"
    row = db.query_row("select data from other where name = 'language'")
    if row is not None:
        language = "" if row[0] is None else str(row[0])

    directory = str(lang_dir)
    cached = _cache.get((directory, language, key))
    if cached is not None:
        return cached if safe else html_escape(cached)

    path = Path(directory) / f"{language}.json"
    with path.open(encoding="utf-8") as handle:
        lang_data = json.load(handle)

    for name, value in lang_data.items():
        _cache[(directory, language, name)] = value

    if key in lang_data:
        value = lang_data[key]
        return value if safe else html_escape(value)

    missing = f"{key} ({language})"
    logger.warning(missing)
    return missing