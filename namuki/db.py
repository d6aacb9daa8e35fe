"""Database access with retry on lock and per-backend query adjustments."""

from __future__ import annotations

import json
import sqlite3
import time
from typing import Any

import pymysql

_RETRY_DELAY = 0.01

_db_set: dict[str, str] = {}


def init_db(settings_json: str) -> None:
    """Merge the JSON object of database settings into the current ones."""
    try:
        settings = json.loads(settings_json)
    except (json.JSONDecodeError, TypeError):
        return
    if not isinstance(settings, dict):
        return
    for key, value in settings.items():
        if isinstance(value, str):
            _db_set[key] = value


def get_db_type() -> str:
    """The configured database type, ``sqlite`` or ``mysql``."""
    return _db_set.get("db_type", "")


def db_change(query: str) -> str:
    """Adapt SQLite-flavoured SQL to the configured database."""
    if get_db_type() == "mysql":
        query = query.replace("random()", "rand()")
        query = query.replace("collate nocase", "collate utf8mb4_general_ci")
    return query


class Database:
    """A DB-API connection that takes ``?`` placeholders and retries when locked."""

    def __init__(self, connection: Any, db_type: str = "sqlite") -> None:
        self._connection = connection
        self.db_type = db_type

    def _prepare(self, query: str) -> str:
        query = db_change(query)
        if self.db_type == "mysql":
            query = query.replace("%", "%%").replace("?", "%s")
        return query

    def _run(self, query: str, args: tuple, fetch):
        sql = self._prepare(query)
        while True:
            cursor = self._connection.cursor()
            try:
                cursor.execute(sql, args)
                return fetch(cursor)
            except Exception as exc:
                if "database is locked" in str(exc):
                    time.sleep(_RETRY_DELAY)
                    continue
                raise
            finally:
                cursor.close()

    def execute(self, query: str, *args: Any) -> None:
        """Run a statement that returns no rows and commit it."""
        self._run(query, args, lambda cursor: None)
        self._connection.commit()

    def query(self, query: str, *args: Any) -> list[tuple]:
        """Run a query and return all of its rows."""
        return self._run(query, args, lambda cursor: list(cursor.fetchall()))

    def query_row(self, query: str, *args: Any) -> tuple | None:
        """Run a query and return its first row, or None when there is none."""
        return self._run(query, args, lambda cursor: cursor.fetchone())

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def connect() -> Database:
    """Open a connection using the settings given to :func:`init_db`."""
    if get_db_type() == "sqlite":
        connection = sqlite3.connect(
            _db_set.get("db_name", "") + ".db",
            timeout=5.0,
            isolation_level=None,
            check_same_thread=False,
        )
        connection.execute("pragma journal_mode=WAL")
        return Database(connection, "sqlite")

    password = _db_set.get("db_mysql_pw", "")
    connection = pymysql.connect(
        user=_db_set.get("db_mysql_user", ""),
        password=password,
        host=_db_set.get("db_mysql_host", ""),
        port=int(_db_set.get("db_mysql_port", "")),
        database=_db_set.get("db_name", ""),
        autocommit=True,
    )
    return Database(connection, "mysql")