"""User notifications."""

from __future__ import annotations

import re

from namuki.db import Database
from namuki.util import get_time

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _atoi(value: object) -> int:
    text = "" if value is None else str(value)
    return int(text) if _INTEGER.fullmatch(text) else 0


def send_alarm(db: Database, sender: str, target: str, data: str) -> None:
    """Store a notice for ``target`` from ``sender``; nothing is sent to oneself."""
    if sender == target:
        return

    message = f"{sender} | {data}"
    now_time = get_time()

    count = "1"
    row = db.query_row(
        "select id from user_notice where name = ? order by id + 0 desc limit 1",
        target,
    )
    if row is not None:
        count = row[0]

    db.execute(
        "insert into user_notice (id, name, data, date, readme) values (?, ?, ?, ?, '')",
        _atoi(count) + 1,
        target,
        message,
        now_time,
    )