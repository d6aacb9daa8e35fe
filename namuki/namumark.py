"""Wiki markup with quote, caret and tilde styles, rendered through macro markup."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from namuki.macromark import Macromark

logger = logging.getLogger(__name__)

_INLINE = [
    (re.compile(r"'''((?:(?!''').)+)'''"), "b"),
    (re.compile(r"''((?:(?!'').)+)''"), "i"),
    (re.compile(r"__((?:(?!__).)+)__"), "u"),
    (re.compile(r"\^\^\^((?:(?!\^\^\^).)+)\^\^\^"), "sup"),
    (re.compile(r"\^\^((?:(?!\^\^).)+)\^\^"), "sup"),
    (re.compile(r",,,((?:(?!,,,).)+),,,"), "sub"),
    (re.compile(r",,((?:(?!,,).)+),,"), "sub"),
    (re.compile(r"--((?:(?!--).)+)--"), "s"),
    (re.compile(r"~~((?:(?!~~).)+)~~"), "s"),
]

_HEADING = re.compile(r"\n(?:(={1,6})(#?) ?([^\n]+))\n")
_HEADING_TAIL = re.compile(r" ?(#?={1,6}[^=]*)\Z")

_TRAILING = re.compile(r"(\n| )+\Z")
_LEADING = re.compile(r"\A(\n| )+")
_FRONT_BR = re.compile(r"\n?<front_br>")
_BACK_BR = re.compile(r"<back_br>\n?")


def _render_text(text: str) -> str:
    for pattern, tag in _INLINE:
        while (match := pattern.search(text)) is not None:
            text = text[: match.start()] + f"[{tag}({match.group(1)})]" + text[match.end():]
    return text


def _heading(match: re.Match) -> str:
    title = _HEADING_TAIL.sub("", match.group(3))
    return f"[h{len(match.group(1))}({title})]"


def _render_heading(text: str) -> str:
    return _HEADING.sub(_heading, text)


def _render_last(text: str) -> str:
    text = _TRAILING.sub("", text)
    text = _LEADING.sub("", text)
    text = _FRONT_BR.sub("", text)
    text = _BACK_BR.sub("", text)
    return text.replace("\n", "<br>")


class Namumark:
    """Renderer for wiki markup; ``data`` holds the document under ``"data"``."""

    def __init__(self, db: Any, data: Mapping[str, str]) -> None:
        self.db = db
        self.data = dict(data)

    def render(self) -> dict[str, Any]:
        """Convert the document to macro markup and render that."""
        text = ("\n" + self.data.get("data", "") + "\n").replace("\r", "")
        text = _render_text(text)
        text = _render_heading(text)
        text = _render_last(text)

        logger.debug(text)

        converted = dict(self.data)
        converted["data"] = text
        return Macromark(self.db, converted).render()