import sqlite3

import pytest

from namuki.db import Database
from namuki.markdown import render_markdown


@pytest.fixture
def db():
    connection = sqlite3.connect(":memory:")
    connection.execute("create table data (title text, data text)")
    connection.execute("insert into data values ('Home', 'x')")
    connection.commit()
    database = Database(connection, "sqlite")
    yield database
    database.close()


def render(db, text, doc_name="doc"):
    return render_markdown(db, {"data": text, "doc_name": doc_name})


def test_external_link(db):
    result = render(db, "[site](https://example.com)")
    assert 'class="opennamu_link_out"' in result["data"]
    assert 'target="_blank"' in result["data"]
    assert result["backlink"] == []
    assert result["link_count"] == 0


def test_existing_internal_link(db):
    result = render(db, "[Home](Home)")
    assert '<a href="/w/Home" class=""' in result["data"]
    assert result["backlink"] == [["doc", "Home", "", ""]]
    assert result["link_count"] == 1


def test_missing_internal_link(db):
    result = render(db, "[Gone](Gone)")
    assert '<a href="/w/Gone" class="opennamu_not_exist_link"' in result["data"]
    assert result["backlink"] == [["doc", "Gone", "", ""]]


@pytest.mark.parametrize("text", ["[](Home)", "[Home]()"])
def test_shorthand_links_fill_in_missing_part(db, text):
    result = render(db, text)
    assert result["backlink"] == [["doc", "Home", "", ""]]
    assert 'href="/w/Home"' in result["data"]


def test_repeated_links_counted_once_in_backlinks(db):
    result = render(db, "[A](A) [A](A)")
    assert result["link_count"] == 2
    assert len(result["backlink"]) == 1


def test_percent_escapes_are_decoded_for_backlinks(db):
    result = render(db, "[Foo](Foo%20Bar)")
    assert result["backlink"][0][1] == "Foo Bar"
    assert 'href="/w/Foo%20Bar"' in result["data"]


def test_code_span_is_left_alone(db):
    result = render(db, "`[x](y)`")
    assert "<code>[x](y)</code>" in result["data"]
    assert "/w/" not in result["data"]
    assert result["link_count"] == 0


def test_leftover_bracket_syntax_becomes_link(db):
    result = render(db, "[a b](c d)")
    assert result["backlink"] == [["doc", "c d", "", ""]]
    assert "opennamu_not_exist_link" in result["data"]


def test_hard_line_breaks(db):
    assert "<br>" in render(db, "a\nb")["data"]


def test_strikethrough_and_tables(db):
    struck = render(db, "~~gone~~")["data"]
    assert "gone" in struck
    assert "~~" not in struck
    table = render(db, "| a | b |\n|---|---|\n| 1 | 2 |")["data"]
    assert "<table>" in table


def test_script_is_table_of_contents(db):
    assert render(db, "text")["js_data"] == "opennamu_do_toc();"