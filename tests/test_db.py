import json
import sqlite3

import pytest

from namuki.db import Database, connect, db_change, get_db_type, init_db


@pytest.fixture(autouse=True)
def _reset_settings():
    init_db(json.dumps({"db_type": "sqlite", "db_name": ""}))
    yield
    init_db(json.dumps({"db_type": "sqlite", "db_name": ""}))


class _FakeCursor:
    def __init__(self, owner):
        self.owner = owner

    def execute(self, sql, args):
        self.owner.calls.append((sql, args))
        if self.owner.failures:
            raise self.owner.failures.pop(0)

    def fetchall(self):
        return [("row",)]

    def fetchone(self):
        return ("row",)

    def close(self):
        pass


class _FakeConnection:
    def __init__(self, failures=()):
        self.calls = []
        self.failures = list(failures)
        self.commits = 0
        self.closed = False

    def cursor(self):
        return _FakeCursor(self)

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed = True


def test_init_db_sets_type():
    init_db('{"db_type": "mysql"}')
    assert get_db_type() == "mysql"


def test_init_db_ignores_invalid_json():
    init_db("not json")
    assert get_db_type() == "sqlite"


def test_db_change_for_mysql():
    init_db('{"db_type": "mysql"}')
    query = "select title from data where title collate nocase = ? order by random()"
    changed = db_change(query)
    assert "collate utf8mb4_general_ci" in changed
    assert "rand()" in changed and "random()" not in changed


def test_db_change_for_sqlite_is_identity():
    query = "select title from data order by random()"
    assert db_change(query) == query


def test_sqlite_round_trip(tmp_path):
    init_db(json.dumps({"db_type": "sqlite", "db_name": str(tmp_path / "wiki")}))
    with connect() as db:
        db.execute("create table other (name text, data text)")
        db.execute("insert into other (name, data) values (?, ?)", "skin", "ringo")
        db.execute("insert into other (name, data) values (?, ?)", "name", "Wiki")
        assert db.query_row("select data from other where name = ?", "skin") == ("ringo",)
        assert db.query_row("select data from other where name = ?", "missing") is None
        assert sorted(db.query("select name from other")) == [("name",), ("skin",)]
    assert (tmp_path / "wiki.db").exists()


def test_changes_persist_across_connections(tmp_path):
    init_db(json.dumps({"db_type": "sqlite", "db_name": str(tmp_path / "wiki")}))
    with connect() as db:
        db.execute("create table data (title text, data text)")
        db.execute("insert into data values (?, ?)", "Front", "hello")
    with connect() as db:
        assert db.query("select data from data where title = ?", "Front") == [("hello",)]


def test_mysql_placeholders_are_converted():
    connection = _FakeConnection()
    db = Database(connection, "mysql")
    db.query("select data from other where name like '%a' and id = ?", "x")
    assert connection.calls == [("select data from other where name like '%%a' and id = %s", ("x",))]


def test_locked_database_is_retried():
    connection = _FakeConnection([sqlite3.OperationalError("database is locked")])
    db = Database(connection)
    db.execute("insert into other values (?)", "a")
    assert len(connection.calls) == 2
    assert connection.commits == 1


def test_other_errors_are_raised():
    connection = _FakeConnection([sqlite3.OperationalError("no such table: other")])
    db = Database(connection)
    with pytest.raises(sqlite3.OperationalError, match="no such table"):
        db.query_row("select data from other")
    assert len(connection.calls) == 1


def test_close_closes_connection():
    connection = _FakeConnection()
    with Database(connection):
        pass
    assert connection.closed is True