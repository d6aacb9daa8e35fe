"""Wiki-wide and per-document settings, skins and site identity."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from namuki.db import Database
from namuki.ipban import ip_or_user


def _scalar(db: Database, query: str, *args: Any, default: str = "") -> str:
    row = db.query_row(query, *args)
    if row is None:
        return default
    return "" if row[0] is None else str(row[0])


def _text(value: object) -> str:
    return "" if value is None else str(value)


def get_document_setting(
    db: Database, doc_name: str, set_name: str, doc_rev: str = ""
) -> list[tuple[str, str]]:
    """Values of ``set_name`` stored for a document, as ``(data, revision)`` pairs."""
    if doc_rev != "":
        rows = db.query(
            "select set_data, doc_rev from data_set where doc_name = ?"
            " and doc_rev = ? and set_name = ?",
            doc_name, doc_rev, set_name,
        )
    else:
        rows = db.query(
            "select set_data, doc_rev from data_set where doc_name = ? and set_name = ?",
            doc_name, set_name,
        )
    return [(_text(data), _text(rev)) for data, rev in rows]


def get_setting(
    db: Database, set_name: str, data_coverage: str = ""
) -> list[tuple[str, str]]:
    """Values of the wiki setting ``set_name``, as ``(data, coverage)`` pairs."""
    if data_coverage != "":
        rows = db.query(
            "select data, coverage from other where name = ? and coverage = ?",
            set_name, data_coverage,
        )
    else:
        rows = db.query(
            "select data, coverage from other where name = ?", set_name
        )
    return [(_text(data), _text(coverage)) for data, coverage in rows]


def get_skin_list(
    data: str = "", default_flag: bool = False, views_dir: str | Path = "views"
) -> list[str]:
    """Names of the installed skins, with ``data`` moved to the front when present."""
    try:
        entries = sorted(os.listdir(views_dir))
    except OSError:
        return []

    names = (["default"] if default_flag else []) + entries

    result: list[str] = []
    for name in names:
        if name == "main_css":
            continue
        if name == data:
            result.insert(0, name)
        else:
            result.append(name)
    return result


def get_use_skin_name(db: Database, ip: str, views_dir: str | Path = "views") -> str:
    """The skin to use for ``ip``: the user's choice, else the wiki's, else the first."""
    skin_list = get_skin_list("ringo", True, views_dir)
    if not skin_list:
        raise FileNotFoundError(f"no skin directory at {views_dir}")
    skin = skin_list[0]

    user_skin_name = ""
    if ip_or_user(ip):
        user_skin_name = _scalar(
            db, "select data from user_set where name = 'skin' and id = ?", ip
        )

    if user_skin_name == "default":
        user_skin_name = ""

    if user_skin_name == "":
        user_skin_name = _scalar(db, "select data from other where name = 'skin'")

    if user_skin_name != "" and user_skin_name in skin_list:
        skin = user_skin_name

    return skin


def get_domain(db: Database, full_string: bool = False) -> str:
    """The wiki's domain, with the scheme in front when ``full_string``."""
    sys_host = ""
    db_domain = _scalar(db, "select data from other where name = 'domain'")
    host = db_domain if db_domain != "" else sys_host

    if not full_string:
        return host

    http_select = _scalar(db, "select data from other where name = 'http_select'")
    if http_select == "":
        http_select = "http"
    return f"{http_select}://{host}"


def _top_menu(db: Database, ip: str) -> list[list[str]]:
    wiki_menu = _scalar(db, "select data from other where name = 'top_menu'")
    user_menu = _scalar(
        db, "select data from user_set where name = 'top_menu' and id = ?", ip
    )
    wiki_menu = wiki_menu.replace("\r", "")
    user_menu = user_menu.replace("\r", "")

    if wiki_menu != "" and user_menu != "":
        mixed = wiki_menu + "\n" + user_menu
    else:
        mixed = wiki_menu + user_menu

    if mixed == "":
        return []

    lines = mixed.split("\n")
    if len(lines) % 2 != 0:
        lines.append("")
    return [[title, link] for title, link in zip(lines[::2], lines[1::2])]


def get_wiki_set(db: Database, ip: str, cookies: str = "") -> list[Any]:
    """Site values the page template needs.

    In order: wiki name, licence, two empty slots, logo, extra head markup,
    top menu pairs (or ``""`` when there are none) and the three template
    variables.
    """
    skin_name = get_use_skin_name(db, ip)

    wiki_name = _scalar(db, "select data from other where name = 'name'", default="Wiki")
    license_text = _scalar(db, "select data from other where name = 'license'")

    logo = _scalar(
        db, "select data from other where name = 'logo' and coverage = ?", skin_name
    )
    if logo == "":
        logo = _scalar(
            db, "select data from other where name = 'logo' and coverage = ''"
        )
    if logo == "":
        logo = wiki_name

    head = _scalar(db, "select data from other where name = 'head' and coverage = ''")
    head_skin = _scalar(
        db, "select data from other where name = 'head' and coverage = ?", skin_name
    )
    head_dark = ""
    if "main_css_darkmode=1" in cookies:
        head_dark = _scalar(
            db,
            "select data from other where name = 'head' and coverage = ?",
            skin_name + "-cssdark",
        )

    top_menu = _top_menu(db, ip)

    template_vars = [
        _scalar(db, "select data from other where name = ?", f"template_var_{number}")
        for number in range(1, 4)
    ]

    return [
        wiki_name,
        license_text,
        "",
        "",
        logo,
        head + head_skin + head_dark,
        top_menu if top_menu else "",
        *template_vars,
    ]