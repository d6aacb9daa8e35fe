"""Macro markup: ``[name(data)]`` macros rendered to HTML."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from namuki.util import html_unescape, url_parser

logger = logging.getLogger(__name__)

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "'": "&#39;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
    }
)

_MACRO = re.compile(r"\[([^\[(\]]+)\(((?:(?!\(|\)\])[\s\S])+)?\)\]")
_TRAILING = re.compile(r"(\n| )+\Z")
_LEADING = re.compile(r"\A(\n| )+")
_FRONT_BR = re.compile(r"\n?<front_br>")
_BACK_BR = re.compile(r"<back_br>\n?")

_WRAPPERS = {
    "h1": ("<h1>", "</h1><back_br>"),
    "h2": ("<h2>", "</h2><back_br>"),
    "h3": ("<h3>", "</h3><back_br>"),
    "h4": ("<h4>", "</h4><back_br>"),
    "h5": ("<h5>", "</h5><back_br>"),
    "h6": ("<h6>", "</h6><back_br>"),
    "ul": ("<ul><back_br>", "</ul><back_br>"),
    "li": ("<li>", "</li><back_br>"),
    "b": ("<b>", "</b>"),
    "i": ("<i>", "</i>"),
    "u": ("<u>", "</u>"),
    "s": ("<s>", "</s>"),
    "sup": ("<sup>", "</sup>"),
    "sub": ("<sub>", "</sub>"),
}


class _TempStore:
    """Rendered pieces hidden behind markers until the final pass."""

    def __init__(self) -> None:
        self._items: list[tuple[str, str, str]] = []

    def save(self, rendered: str, raw: str) -> str:
        name = f"<temp_save_{len(self._items)}>"
        self._items.append((name, rendered, raw))
        return name

    def restore(self, text: str, to_raw: bool = False) -> str:
        for name, rendered, raw in reversed(self._items):
            text = text.replace(name, raw if to_raw else rendered, 1)
        return text


def _render_link(macro_data: str, store: _TempStore) -> str:
    a_data = store.restore(macro_data, True).replace(",,", "<temp>")
    link_part, sep, view_part = a_data.partition(",")

    link = html_unescape(link_part)
    view = view_part if sep else link

    link = link.replace("<temp>", ",")
    view = view.replace("<temp>", ",")
    return f'<a href="/w/{url_parser(link)}">{view}</a>'


def _render_macros(text: str, store: _TempStore) -> str:
    while (match := _MACRO.search(text)) is not None:
        whole = match.group(0)
        macro_name = match.group(1)
        macro_data = match.group(2) or ""

        if macro_name == "nowiki":
            rendered = store.restore(macro_data, True)
        elif macro_name == "a":
            rendered = _render_link(macro_data, store)
        elif macro_name in _WRAPPERS:
            opening, closing = _WRAPPERS[macro_name]
            rendered = opening + macro_data + closing
        else:
            rendered = ""

        text = text.replace(whole, store.save(rendered, whole), 1)
    return text


def _finish(text: str) -> str:
    text = _TRAILING.sub("", text)
    text = _LEADING.sub("", text)
    text = _FRONT_BR.sub("", text)
    text = _BACK_BR.sub("", text)
    return text.replace("\n", "<br>")


class Macromark:
    """Renderer for macro markup; ``data`` holds the document under ``"data"``."""

    def __init__(self, db: Any, data: Mapping[str, str]) -> None:
        self.db = db
        self.data = dict(data)

    def render(self) -> dict[str, Any]:
        """Render the document and return its HTML, script and link information."""
        text = self.data.get("data", "").translate(_ESCAPES).replace("\r", "")
        text = "\n" + text + "\n"

        store = _TempStore()
        text = _render_macros(text, store)
        text = _finish(store.restore(text))

        logger.debug(text)

        return {
            "data": text,
            "js_data": "opennamu_do_toc();",
            "backlink": [],
            "link_count": 0,
        }