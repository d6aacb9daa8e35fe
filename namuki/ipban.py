"""Telling addresses from accounts, user levels and ban lookup."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass

from namuki.db import Database

_ADDRESS_MARK = re.compile(r"[.:]")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_BAN_TYPES = {
    "O": "1",
    "E": "2",
    "A": "3",
    "D": "4",
    "L": "5",
}


@dataclass(frozen=True)
class BanInfo:
    """Whether a user is banned and the kind of ban.

    ``ban_type`` carries a prefix for the ban source: ``a`` for a regex ban,
    ``b`` for a CIDR ban, none for a ban on the exact name, and ``c`` alone
    for an account whose group is ``ban``.
    """

    banned: bool = False
    ban_type: str = ""


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _atoi(value: str) -> int:
    return int(value) if _INTEGER.fullmatch(value) else 0


def ip_or_user(ip: str) -> bool:
    """True when ``ip`` looks like an address rather than an account name."""
    return _ADDRESS_MARK.search(ip) is not None


def get_level(db: Database, ip: str) -> tuple[str, str, str]:
    """Level, experience and experience needed for the next level of ``ip``."""
    level = "0"
    row = db.query_row(
        "select data from user_set where id = ? and name = 'level'", ip
    )
    if row is not None:
        level = _text(row[0])

    exp = "0"
    row = db.query_row(
        "select data from user_set where id = ? and name = 'experience'", ip
    )
    if row is not None:
        exp = _text(row[0])

    max_exp = str(_atoi(level) * 50 + 500)
    return level, exp, max_exp


def get_user_ban_type(ban_type: str) -> str:
    """Map a stored ban letter to its numeric kind, or ``""`` when unknown."""
    return _BAN_TYPES.get(ban_type, "")


def _applies(tool: str, ban_type: str) -> bool:
    if tool == "login":
        return ban_type not in ("1", "5")
    if tool == "register":
        return ban_type != "5"
    if tool == "edit_request":
        return ban_type != "2"
    return True


def _parse_cidr(block: str):
    if "/" not in block:
        return None
    try:
        return ipaddress.ip_network(block, strict=False)
    except ValueError:
        return None


def _cidr_contains(network, ip: str) -> bool:
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    if address.version != network.version:
        return False
    return address in network


def get_user_ban(db: Database, ip: str, tool: str = "") -> BanInfo:
    """Look up the ban that applies to ``ip`` for the action ``tool``."""
    for login, block in db.query(
        "select login, block from rb where band = 'regex' and ongoing = '1'"
    ):
        ban_type = get_user_ban_type(_text(login))
        if re.search(_text(block), ip) and _applies(tool, ban_type):
            return BanInfo(True, "a" + ban_type)

    if ip_or_user(ip):
        for login, block in db.query(
            "select login, block from rb where band = 'cidr' and ongoing = '1'"
        ):
            ban_type = get_user_ban_type(_text(login))
            network = _parse_cidr(_text(block))
            if network is None:
                continue
            if _cidr_contains(network, ip) and _applies(tool, ban_type):
                return BanInfo(True, "b" + ban_type)

    row = db.query_row(
        "select login from rb where block = ? and (band = '' or band = 'private')"
        " and ongoing = '1'",
        ip,
    )
    if row is not None:
        ban_type = get_user_ban_type(_text(row[0]))
        if _applies(tool, ban_type):
            return BanInfo(True, ban_type)

    row = db.query_row(
        "select data from user_set where id = ? and name = 'acl'", ip
    )
    if row is not None and _text(row[0]) == "ban":
        return BanInfo(True, "c")

    return BanInfo()