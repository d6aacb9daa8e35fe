import sqlite3

import pytest

from namuki.db import Database
from namuki.render import get_render, get_render_direct, list_markup

SCHEMA = """
create table other(name text, data text, coverage text default '');
create table data(title text, data text, type text);
create table data_set(doc_name text, doc_rev text, set_name text, set_data text);
create table back(link text, title text, type text, data text);
"""

WRAP_OPEN = '<div id="opennamu_render_complete">'


@pytest.fixture
def db():
    connection = sqlite3.connect(":memory:", isolation_level=None)
    connection.executescript(SCHEMA)
    database = Database(connection)
    yield database
    database.close()


def test_every_listed_markup_renders_wrapped(db):
    markups = list_markup()
    assert "namumark" in markups and "markdown" in markups
    for markup in markups:
        result = get_render_direct(db, "Doc", "text", markup, "r", "view")
        assert result["data"].startswith(WRAP_OPEN)
        assert result["data"].endswith("</div>")


def test_raw_markup_keeps_data(db):
    result = get_render_direct(db, "Doc", "'''x''' <b>", "raw", "r", "view")
    assert result["data"] == WRAP_OPEN + "'''x''' <b>" + "</div>"
    assert result["js_data"] == ""


def test_namumark_bold(db):
    result = get_render_direct(db, "Doc", "'''bold'''", "namumark", "r", "view")
    assert result["data"] == WRAP_OPEN + "<b>bold</b></div>"
    assert result["js_data"] == "opennamu_do_toc();"


def test_macromark_macro(db):
    result = get_render_direct(db, "Doc", "[i(x)]", "macromark", "r", "view")
    assert result["data"] == WRAP_OPEN + "<i>x</i></div>"


def test_markdown_link(db):
    result = get_render_direct(db, "Doc", "[Other]()", "markdown", "r", "view")
    assert 'href="/w/Other"' in result["data"]


def test_get_render_uses_wiki_markup(db):
    db.execute("insert into other (name, data) values ('markup', 'raw')")
    result = get_render(db, "Doc", "'''x'''", "")
    assert result["data"] == WRAP_OPEN + "'''x'''</div>"


def test_get_render_defaults_to_namumark(db):
    result = get_render(db, "Doc", "'''x'''", "")
    assert result["data"] == WRAP_OPEN + "<b>x</b></div>"


def test_get_render_namumark_beta_is_namumark(db):
    db.execute("insert into other (name, data) values ('markup', 'namumark_beta')")
    result = get_render(db, "Doc", "'''x'''", "")
    assert result["data"] == WRAP_OPEN + "<b>x</b></div>"


def test_document_markup_only_for_view_types(db):
    db.execute(
        "insert into data_set values ('Doc', '', 'document_markup', 'raw')"
    )
    viewed = get_render(db, "Doc", "'''x'''", "api_view")
    plain = get_render(db, "Doc", "'''x'''", "")
    assert viewed["data"] == WRAP_OPEN + "'''x'''</div>"
    assert plain["data"] == WRAP_OPEN + "<b>x</b></div>"


def test_backlink_render_stores_links(db):
    db.execute("insert into back values ('Doc', 'Stale', '', '')")
    db.execute("insert into back values ('Somewhere', 'Doc', 'no', '')")
    db.execute("insert into data_set values ('Doc', '', 'link_count', '9')")

    get_render_direct(db, "Doc", "[Other]()", "markdown", "r", "backlink")

    assert db.query("select link, title, type, data from back where link = 'Doc'") == [
        ("Doc", "Other", "", "")
    ]
    assert db.query("select * from back where title = 'Doc' and type = 'no'") == []
    assert db.query(
        "select set_data from data_set where doc_name = 'Doc' and set_name = 'link_count'"
    ) == [("1",)]
    assert db.query(
        "select set_data from data_set where doc_name = 'Doc' and set_name = 'doc_type'"
    ) == [("",)]


def test_view_render_stores_nothing(db):
    get_render_direct(db, "Doc", "[Other]()", "markdown", "r", "api_view")
    assert db.query("select * from back") == []
    assert db.query("select * from data_set") == []