"""Choosing a markup renderer for a document and storing its backlinks."""

from __future__ import annotations

import time
from typing import Any

from namuki.db import Database
from namuki.macromark import Macromark
from namuki.markdown import render_markdown
from namuki.namumark import Namumark

_VIEW_TYPES = frozenset({"api_view", "api_from", "api_include", "backlink"})
_MARKUPS = ("namumark", "namumark_beta", "macromark", "markdown", "custom", "raw")


def _scalar(db: Database, query: str, *args: Any) -> str:
    row = db.query_row(query, *args)
    if row is None or row[0] is None:
        return ""
    return str(row[0])


def list_markup() -> list[str]:
    """Names of the markups a wiki or a document may use."""
    return list(_MARKUPS)


def get_render(
    db: Database, doc_name: str, data: str, render_type: str = ""
) -> dict[str, str]:
    """Render ``data`` with the markup set for the document or, failing that, the wiki."""
    markup = ""
    if render_type in _VIEW_TYPES:
        markup = _scalar(
            db,
            "select set_data from data_set where doc_name = ?"
            " and set_name = 'document_markup'",
            doc_name,
        )

    if markup == "":
        markup = _scalar(db, "select data from other where name = 'markup'")

    if markup in ("", "namumark_beta"):
        markup = "namumark"

    render_name = str(time.time_ns())
    return get_render_direct(db, doc_name, data, markup, render_name, render_type)


def _store_backlinks(db: Database, doc_name: str, result: dict[str, Any]) -> None:
    db.execute("delete from back where link = ?", doc_name)
    db.execute("delete from back where title = ? and type = 'no'", doc_name)
    db.execute(
        "delete from data_set where doc_name = ? and set_name = 'link_count'", doc_name
    )
    db.execute(
        "delete from data_set where doc_name = ? and set_name = 'doc_type'", doc_name
    )

    for entry in result.get("backlink", []):
        db.execute(
            "insert into back (link, title, type, data) values (?, ?, ?, ?)", *entry
        )

    db.execute(
        "insert into data_set (doc_name, doc_rev, set_name, set_data)"
        " values (?, '', 'link_count', ?)",
        doc_name,
        str(result.get("link_count", 0)),
    )
    db.execute(
        "insert into data_set (doc_name, doc_rev, set_name, set_data)"
        " values (?, '', 'doc_type', ?)",
        doc_name,
        "",
    )


def get_render_direct(
    db: Database,
    doc_name: str,
    data: str,
    markup: str,
    render_name: str,
    render_type: str = "",
) -> dict[str, str]:
    """Render ``data`` with ``markup``; a ``backlink`` render also stores the links found."""
    include = "1" if render_type == "api_include" else ""
    source = "1" if render_type == "api_from" else ""
    store_backlinks = render_type == "backlink"

    if render_type in _VIEW_TYPES:
        render_type = "view"

    document = {
        "doc_name": doc_name,
        "data": data,
        "render_name": render_name,
        "render_type": render_type,
        "from": source,
        "include": include,
    }

    result: dict[str, Any]
    if markup == "namumark":
        result = Namumark(db, document).render()
    elif markup == "markdown":
        result = render_markdown(db, document)
    elif markup == "macromark":
        result = Macromark(db, document).render()
    else:
        result = {"data": data, "js_data": "", "backlink": [], "link_count": 0}

    if store_backlinks:
        _store_backlinks(db, doc_name, result)

    return {
        "data": '<div id="opennamu_render_complete">' + result["data"] + "</div>",
        "js_data": result["js_data"],
    }