import sqlite3

import pytest

from namuki.db import Database
from namuki.settings import (
    get_document_setting,
    get_domain,
    get_setting,
    get_skin_list,
    get_use_skin_name,
    get_wiki_set,
)

SCHEMA = """
create table other (name text, data text, coverage text default '');
create table user_set (name text, id text, data text);
create table data_set (doc_name text, doc_rev text, set_name text, set_data text);
"""


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "views" / "ringo").mkdir(parents=True)
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA)
    database = Database(conn, "sqlite")
    yield database
    database.close()


def _other(db, name, data, coverage=""):
    db.execute(
        "insert into other (name, data, coverage) values (?, ?, ?)", name, data, coverage
    )


def test_document_setting_with_and_without_revision(db):
    db.execute(
        "insert into data_set values ('Doc', '', 'document_top', 'top text')"
    )
    db.execute(
        "insert into data_set values ('Doc', '3', 'document_top', 'old top')"
    )
    everything = get_document_setting(db, "Doc", "document_top", "")
    assert sorted(everything) == [("old top", "3"), ("top text", "")]
    assert get_document_setting(db, "Doc", "document_top", "3") == [("old top", "3")]
    assert get_document_setting(db, "Other", "document_top", "") == []


def test_setting_filtered_by_coverage(db):
    _other(db, "head", "<style></style>", "ringo")
    _other(db, "head", "<meta>", "")
    assert sorted(get_setting(db, "head", "")) == [("<meta>", ""), ("<style></style>", "ringo")]
    assert get_setting(db, "head", "ringo") == [("<style></style>", "ringo")]


def test_skin_list_puts_requested_first_and_skips_main_css(tmp_path):
    views = tmp_path / "skins"
    for name in ("tenshi", "main_css", "ringo"):
        (views / name).mkdir(parents=True)
    assert get_skin_list("ringo", True, views) == ["ringo", "default", "tenshi"]
    assert get_skin_list("none", False, views) == ["ringo", "tenshi"]


def test_skin_list_missing_directory(tmp_path):
    assert get_skin_list("ringo", True, tmp_path / "absent") == []


def test_use_skin_name_missing_directory_raises(db, tmp_path):
    with pytest.raises(FileNotFoundError):
        get_use_skin_name(db, "127.0.0.1", tmp_path / "absent")


def test_use_skin_name_prefers_user_then_wiki(db, tmp_path):
    (tmp_path / "views" / "tenshi").mkdir()
    assert get_use_skin_name(db, "127.0.0.1") == "ringo"

    _other(db, "skin", "tenshi")
    assert get_use_skin_name(db, "alice") == "tenshi"

    db.execute("insert into user_set values ('skin', '127.0.0.1', 'ringo')")
    assert get_use_skin_name(db, "127.0.0.1") == "ringo"


def test_use_skin_name_ignores_unknown_skin(db):
    _other(db, "skin", "missing")
    assert get_use_skin_name(db, "alice") == "ringo"


def test_domain(db):
    assert get_domain(db, False) == ""
    assert get_domain(db, True) == "http://"
    _other(db, "domain", "wiki.example.com")
    _other(db, "http_select", "https")
    assert get_domain(db, False) == "wiki.example.com"
    assert get_domain(db, True) == "https://wiki.example.com"


def test_wiki_set_defaults(db):
    result = get_wiki_set(db, "127.0.0.1", "")
    assert result == ["Wiki", "", "", "", "Wiki", "", "", "", "", ""]


def test_wiki_set_values(db):
    _other(db, "name", "Test Wiki")
    _other(db, "license", "CC0")
    _other(db, "logo", "Logo", "ringo")
    _other(db, "head", "<a>", "")
    _other(db, "head", "<b>", "ringo")
    _other(db, "head", "<c>", "ringo-cssdark")
    _other(db, "top_menu", "Home\r\n/w/Home\nRecent")
    _other(db, "template_var_2", "two")
    db.execute("insert into user_set values ('top_menu', 'alice', 'Mine\n/w/Mine')")

    result = get_wiki_set(db, "alice", "main_css_darkmode=1")
    assert result[0] == "Test Wiki"
    assert result[1] == "CC0"
    assert result[4] == "Logo"
    assert result[5] == "<a><b><c>"
    assert result[6] == [["Home", "/w/Home"], ["Recent", "Mine"], ["/w/Mine", ""]]
    assert result[7:] == ["", "two", ""]

    light = get_wiki_set(db, "alice", "")
    assert light[5] == "<a><b>"