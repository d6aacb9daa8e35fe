"""JSON endpoints for documents: raw text, rendering, settings, watchers and links."""

from __future__ import annotations

import json
import re
from typing import Any

from namuki.acl import check_acl
from namuki.db import Database, connect
from namuki.language import get_language
from namuki.render import get_render
from namuki.settings import get_document_setting
from namuki.users import ip_parser, ip_preprocess
from namuki.util import RequestConfig

_INTEGER = re.compile(r"[+-]?[0-9]+")

_RESET_SETTINGS = ("document_markup", "document_top", "document_editor_top")


def _to_json(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _other_set(config: RequestConfig) -> dict[str, str]:
    try:
        parsed = json.loads(config.other_set)
    except (ValueError, TypeError):
        return {}
    if not isinstance(parsed, dict):
        return {}
    return {key: value for key, value in parsed.items() if isinstance(value, str)}


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _page_offset(value: str) -> int:
    page = int(value) if _INTEGER.fullmatch(value) else 0
    return page * 50 - 50 if page * 50 > 0 else 0


def _raw(db: Database, other_set: dict[str, str], ip: str) -> dict[str, Any]:
    name = other_set.get("name", "")

    if not check_acl(db, name, "", "render", ip):
        return {"response": "require auth"}

    if other_set.get("exist_check", "") != "":
        row = db.query_row("select title from data where title = ?", name)
        return {"exist": row is not None, "response": "ok"}

    rev = other_set.get("rev", "")
    hide = ""
    if rev != "":
        row = db.query_row(
            "select data, hide from history where title = ? and id = ?", name, rev
        )
        if row is not None:
            hide = _text(row[1])
    else:
        row = db.query_row("select data from data where title = ?", name)

    if row is None:
        return {"response": "not exist"}

    if hide != "" and not check_acl(db, "", "", "hidel_auth", ip):
        return {"response": "require auth"}

    return {"title": name, "data": _text(row[0]), "response": "ok"}


def api_w_raw(config: RequestConfig) -> str:
    """Source text of a document or one of its revisions, as JSON."""
    other_set = _other_set(config)
    with connect() as db:
        result = _raw(db, other_set, config.ip)
    return _to_json(result)


def api_w_render(config: RequestConfig) -> str:
    """Rendered HTML and script of the given text, as JSON."""
    other_set = _other_set(config)
    with connect() as db:
        result = get_render(
            db,
            other_set.get("doc_name", ""),
            other_set.get("data", ""),
            other_set.get("render_type", ""),
        )
    return _to_json(result)


def document_set_list() -> dict[str, str]:
    """Names of the per-document settings that may be read."""
    return {
        "document_markup": "",
        "document_top": "",
        "document_editor_top": "",
        "document_comment_code": "",
    }


def api_w_set(config: RequestConfig) -> str:
    """Values of one per-document setting, as JSON."""
    other_set = _other_set(config)
    set_name = other_set.get("set_name", "")

    with connect() as db:
        if set_name in document_set_list():
            result: dict[str, Any] = {
                "data": get_document_setting(
                    db,
                    other_set.get("doc_name", ""),
                    set_name,
                    other_set.get("doc_rev", ""),
                ),
                "response": "ok",
            }
        else:
            result = {"response": "not exist"}
    return _to_json(result)


def api_w_set_reset(config: RequestConfig) -> str:
    """Remove a document's ACL and settings; only an owner may do it."""
    other_set = _other_set(config)
    doc_name = other_set.get("name", "")

    with connect() as db:
        if not check_acl(db, "", "", "owner_auth", config.ip):
            result = {
                "response": "require auth",
                "language": {
                    "authority_error": get_language(db, "authority_error", False)
                },
            }
            return _to_json(result)

        db.execute("delete from acl where title = ?", doc_name)
        db.execute(
            "delete from data_set where doc_name = ? and set_name = 'acl_date'",
            doc_name,
        )
        for set_name in _RESET_SETTINGS:
            db.execute(
                "delete from data_set where doc_name = ? and set_name = ?",
                doc_name,
                set_name,
            )

        result = {
            "response": "ok",
            "language": {"reset": get_language(db, "reset", False)},
        }
    return _to_json(result)


def api_w_watch_list(config: RequestConfig) -> str:
    """Users who watch or starred a document, fifty to a page, as JSON."""
    other_set = _other_set(config)
    offset = _page_offset(other_set.get("num", ""))

    with connect() as db:
        result: dict[str, Any] = {
            "language": {
                "watchlist": get_language(db, "watchlist", False),
                "star_doc": get_language(db, "star_doc", False),
            }
        }

        if not check_acl(db, "", "", "doc_watch_list_view", config.ip):
            result["response"] = "require auth"
            result["data"] = []
            return _to_json(result)

        list_name = "star_doc" if other_set.get("do_type", "") == "star_doc" else "watchlist"
        rows = db.query(
            f"select id from user_set where name = '{list_name}' and data = ? limit ?, 50",
            other_set.get("name", ""),
            offset,
        )

        shown: dict[str, tuple[str, str]] = {}
        data_list = []
        for (user_name,) in rows:
            user_name = _text(user_name)
            if user_name not in shown:
                shown[user_name] = (
                    ip_preprocess(db, user_name, config.ip)[0],
                    ip_parser(db, user_name, config.ip),
                )
            data_list.append(list(shown[user_name]))

        result["response"] = "ok"
        result["data"] = data_list
    return _to_json(result)


def api_w_xref(config: RequestConfig) -> str:
    """Documents linking to (or, with ``do_type`` "1", from) a document, as JSON."""
    other_set = _other_set(config)
    offset = _page_offset(other_set.get("page", ""))

    with connect() as db:
        row = db.query_row("select data from other where name = 'link_case_insensitive'")
        collate = " collate nocase" if row is not None and _text(row[0]) != "" else ""

        if other_set.get("do_type", "") == "1":
            query = (
                "select distinct link, type from back where title" + collate + " = ?"
                " and not type = 'no' and not type = 'nothing'"
                " order by type asc, link asc limit ?, 50"
            )
        else:
            query = (
                "select distinct title, type from back where link" + collate + " = ?"
                " and not type = 'no' and not type = 'nothing'"
                " order by type asc, title asc limit ?, 50"
            )

        rows = db.query(query, other_set.get("name", ""), offset)
        data_list = [[_text(name), _text(kind)] for name, kind in rows]
    return _to_json(data_list)