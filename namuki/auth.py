"""Permission groups and the rights each group implies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from namuki.db import Database
from namuki.ipban import ip_or_user
from namuki.util import get_time

_ACL_USER_DOCUMENT = ["", "user", "all"]
_ACL_ALL = [
    "",
    "all",
    "user",
    "admin",
    "owner",
    "50_edit",
    "email",
    "ban",
    "before",
    "30_day",
    "90_day",
    "ban_admin",
    "not_all",
    "up_to_level_3",
    "up_to_level_10",
    "30_day_50_edit",
]

_ADMIN_AUTH = ("ban", "toron", "check", "acl", "hidel", "give", "bbs", "vote_fix")
_ADMIN_DEFAULT_FEATURE = (
    "treat_as_admin",
    "user_name_bold",
    "multiple_upload",
    "slow_edit_pass",
    "edit_bottom_compulsion_pass",
    "view_hide_user_name",
    "doc_watch_list_view",
    "edit_filter_pass",
    "user",
)
_USER_DEFAULT = ("captcha_pass", "ip")
_IP_DEFAULT = (
    "document",
    "discuss",
    "upload",
    "vote",
    "bbs_use",
    "captcha_one_check_five_pass",
    "edit_filter_view",
)
_DOCUMENT_DEFAULT = ("edit", "edit_request", "move", "new_make", "delete")
_TOPIC_DEFAULT = ("discuss_view", "discuss_make_new_thread")
_BBS_DEFAULT = ("bbs_edit", "bbs_comment")


def list_acl(func_type: str = "") -> list[str]:
    """The ACL values that may be chosen for a document or a user document."""
    if func_type == "user_document":
        return list(_ACL_USER_DOCUMENT)
    return list(_ACL_ALL)


def list_auth(db: Database) -> list[str]:
    """Names of all permission groups."""
    return [row[0] for row in db.query("select distinct name from alist")]


def insert_auth_history(db: Database, ip: str, what: str) -> None:
    """Record an administrative action unless the history is switched off."""
    row = db.query_row("select data from other where name = 'auth_history_off'")
    log_off = "" if row is None or row[0] is None else str(row[0])
    if log_off == "":
        db.execute(
            "insert into re_admin (who, what, time) values (?, ?, ?)",
            ip, what, get_time(),
        )


def get_user_auth(db: Database, ip: str) -> str:
    """Name of the permission group of ``ip``."""
    row = db.query_row(
        "select data from user_set where id = ? and name = 'acl'", ip
    )
    if row is not None:
        return "" if row[0] is None else str(row[0])
    return "ip" if ip_or_user(ip) else "user"


def get_auth_group_info(db: Database, auth: str) -> dict[str, bool]:
    """All rights held by the permission group ``auth``."""
    rights = {
        str(row[0]): True
        for row in db.query("select acl from alist where name = ?", auth)
    }
    if not rights:
        rights["nothing"] = True
    return check_auth(rights)


def auth_include_upper_auth(auth_info: Mapping[str, bool]) -> bool:
    """True when the rights include the owner right."""
    return bool(auth_info.get("owner", False))


def _grant(rights: dict[str, bool], names: Iterable[str]) -> None:
    for name in names:
        rights[name] = True


def _any_present(rights: Mapping[str, bool], names: Iterable[str]) -> bool:
    return any(name in rights for name in names)


def check_auth(auth_info: Mapping[str, bool]) -> dict[str, bool]:
    """Expand a set of rights with every right they imply."""
    rights = dict(auth_info)

    if "owner" in rights:
        rights["admin"] = True
    if "admin" in rights:
        _grant(rights, _ADMIN_AUTH)
    if "check" in rights:
        rights["view_user_watchlist"] = True
    if _any_present(rights, _ADMIN_AUTH):
        rights["admin_default_feature"] = True
    if "admin_default_feature" in rights:
        _grant(rights, _ADMIN_DEFAULT_FEATURE)
    if "user" in rights:
        _grant(rights, _USER_DEFAULT)
    if "ip" in rights:
        _grant(rights, _IP_DEFAULT)
    if "document" in rights:
        _grant(rights, _DOCUMENT_DEFAULT)
    if _any_present(rights, _DOCUMENT_DEFAULT):
        rights["view"] = True
    if "discuss" in rights:
        _grant(rights, _TOPIC_DEFAULT)
    if "bbs_use" in rights:
        _grant(rights, _BBS_DEFAULT)
    if _any_present(rights, _BBS_DEFAULT):
        rights["bbs_view"] = True

    return rights