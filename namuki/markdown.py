"""Markdown rendering with wiki links and backlink collection."""

from __future__ import annotations

import re
from collections.abc import Mapping
from itertools import count
from typing import Any
from urllib.parse import unquote_plus

from markdown_it import MarkdownIt

from namuki.db import Database

_EMPTY_TEXT = re.compile(r"\[\]\(([^()]+)\)")
_EMPTY_LINK = re.compile(r"\[([^\[\]]+)\]\(\)")
_CODE = re.compile(r"<code>[\s\S]*?</code>")
_BRACKET_LINK = re.compile(r"\[([^\[\]]+)\]\(([^()]*)\)")
_CODE_MARK = re.compile(r"<code_[0-9]+>")
_HREF = re.compile(r'<a href="([^"]+)"')
_EXTERNAL = re.compile(r"^https?://")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_MARKDOWN = MarkdownIt(
    "commonmark", {"breaks": True, "html": False, "xhtmlOut": False}
).enable(["table", "strikethrough"])


def _query_unescape(value: str) -> str:
    if _BAD_ESCAPE.search(value):
        return ""
    return unquote_plus(value)


def _stash_code(text: str) -> tuple[str, dict[str, str]]:
    stash: dict[str, str] = {}
    numbers = count()

    def hide(match: re.Match) -> str:
        key = f"code_{next(numbers)}"
        stash[key] = match.group(0)
        return f"<{key}>"

    return _CODE.sub(hide, text), stash


def _bracket_link(match: re.Match) -> str:
    link = match.group(2) or match.group(1)
    return f'<a href="{link}">{match.group(1)}</a>'


def render_markdown(db: Database, data: Mapping[str, str]) -> dict[str, Any]:
    """Render the markdown document in ``data``; links to pages become wiki links."""
    doc_name = data.get("doc_name", "")

    source = data.get("data", "")
    source = _EMPTY_TEXT.sub(lambda m: f"[{m.group(1)}]({m.group(1)})", source)
    source = _EMPTY_LINK.sub(lambda m: f"[{m.group(1)}]({m.group(1)})", source)

    text, stash = _stash_code(_MARKDOWN.render(source))
    text = _BRACKET_LINK.sub(_bracket_link, text)
    text = _CODE_MARK.sub(lambda m: stash.get(m.group(0)[1:-1], ""), text)

    backlinks: dict[str, None] = {}
    link_count = 0

    def rewrite(match: re.Match) -> str:
        nonlocal link_count
        href = match.group(1)
        if _EXTERNAL.match(href):
            return f'<a href="{href}" class="opennamu_link_out" target="_blank"'

        link = _query_unescape(href)
        backlinks.setdefault(link, None)
        link_count += 1

        row = db.query_row("select title from data where title = ?", link)
        exists = row is not None and row[0] not in (None, "")
        css_class = "" if exists else "opennamu_not_exist_link"
        return f'<a href="/w/{href}" class="{css_class}"'

    text = _HREF.sub(rewrite, text)

    return {
        "data": text,
        "js_data": "opennamu_do_toc();",
        "backlink": [[doc_name, link, "", ""] for link in backlinks],
        "link_count": link_count,
    }