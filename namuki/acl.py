"""Access control: whether a user may perform an action on a document, topic or board."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta

from namuki.auth import get_auth_group_info, get_user_auth
from namuki.db import Database
from namuki.ipban import get_level, get_user_ban, ip_or_user
from namuki.util import get_time

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_INTEGER = re.compile(r"[+-]?[0-9]+")

_EXCEPT_BAN_TOOLS = frozenset({"render", "topic_view", "bbs_view"})

# Tools that only a right of the user's group can pass.
_ADMIN_TOOLS = {
    "all_admin_auth": "treat_as_admin",
    "owner_auth": "owner",
    "ban_auth": "ban",
    "bbs_auth": "bbs",
    "toron_auth": "toron",
    "check_auth": "check",
    "acl_auth": "acl",
    "hidel_auth": "hidel",
    "give_auth": "give",
    "vote_auth": "vote_fix",
}

# Tools decided by one right alone: tool -> (right that passes, right that allows).
_SINGLE_RIGHT_TOOLS = {
    tool: (pass_auth, right)
    for tool, pass_auth, right in (
        ("upload", "admin_default_feature", "upload"),
        ("many_upload", "admin_default_feature", "multiple_upload"),
        ("slow_edit", "admin_default_feature", "slow_edit_pass"),
        ("edit_bottom_compulsion", "admin_default_feature", "edit_bottom_compulsion_pass"),
        ("discuss_make_new_thread", "toron", "discuss_make_new_thread"),
        ("recaptcha", "admin_default_feature", "captcha_pass"),
        ("recaptcha_five_pass", "admin_default_feature", "captcha_one_check_five_pass"),
        ("edit_filter_pass", "admin_default_feature", "edit_filter_pass"),
        ("edit_filter_view", "edit_filter_pass", "edit_filter_view"),
        ("view_hide_user_name", "admin_default_feature", "view_hide_user_name"),
        ("user_name_bold", "admin_default_feature", "user_name_bold"),
        ("doc_watch_list_view", "admin_default_feature", "doc_watch_list_view"),
        ("document_make_acl", "acl", "new_make"),
    )
}

# Tools governed by a per-document ACL: tool -> (acl type, right that allows).
_DOCUMENT_TOOLS = {
    "": ("decu", "document"),
    "document_move": ("document_move_acl", "move"),
    "document_edit": ("document_edit_acl", "edit"),
    "document_delete": ("document_delete_acl", "delete"),
    "document_edit_request": ("document_edit_request_acl", "edit_request"),
}

Stage = Callable[[], "str | None"]


def _scalar(db: Database, query: str, *args: object) -> str:
    row = db.query_row(query, *args)
    if row is None or row[0] is None:
        return ""
    return str(row[0])


def _atoi(value: str) -> int:
    return int(value) if _INTEGER.fullmatch(value) else 0


def _edit_count(db: Database, ip: str) -> int:
    row = db.query_row("select count(*) from history where ip = ?", ip)
    if row is None or row[0] is None:
        return 0
    return _atoi(str(row[0]))


def _parse_time(value: str) -> datetime:
    try:
        return datetime.strptime(value, _TIME_FORMAT)
    except ValueError:
        return datetime.min


def _signed_up_days_ago(db: Database, ip: str, days: int) -> bool:
    signup_date = get_time()
    row = db.query_row(
        "select data from user_set where id = ? and name = 'date'", ip
    )
    if row is not None:
        signup_date = "" if row[0] is None else str(row[0])
    threshold = _parse_time(signup_date) + timedelta(days=days)
    return _parse_time(get_time()) > threshold


def _stages(
    db: Database,
    tool: str,
    name: str,
    topic_number: str,
    rights: Mapping[str, bool],
) -> tuple[str, list[Stage]]:
    """The right that passes outright and the ACL values to consult in order."""

    def lookup(query: str, *args: object) -> Stage:
        return lambda: _scalar(db, query, *args)

    def fallback(right: str) -> Stage:
        return lambda: "" if rights.get(right) else "owner"

    if tool in _ADMIN_TOOLS:
        return _ADMIN_TOOLS[tool], [lambda: "owner"]

    if tool in _SINGLE_RIGHT_TOOLS:
        pass_auth, right = _SINGLE_RIGHT_TOOLS[tool]
        return pass_auth, [fallback(right)]

    if tool in _DOCUMENT_TOOLS:
        acl_type, right = _DOCUMENT_TOOLS[tool]
        return "acl", [
            lookup("select data from acl where title = ? and type = ?", name, acl_type),
            fallback(right),
        ]

    if tool == "topic":
        return "topic", [
            lookup("select acl from rd where code = ?", topic_number),
            lookup("select data from acl where title = ? and type = 'dis'", name),
            fallback("discuss"),
        ]

    if tool == "topic_view":
        return "topic", [
            lookup(
                "select set_data from topic_set where thread_code = ?"
                " and set_name = 'thread_view_acl'",
                topic_number,
            ),
            fallback("discuss_view"),
        ]

    if tool == "vote":
        first: Stage
        if topic_number != "":
            first = lookup(
                "select acl from vote where id = ? and user = ''", topic_number
            )
        else:
            first = lambda: None
        return "vote_fix", [first, fallback("vote")]

    if tool in ("bbs_edit", "bbs_comment"):
        return "bbs", [
            lookup(
                "select set_data from bbs_set where set_name = ? and set_id = ?",
                tool + "_acl",
                name,
            ),
            lookup(
                "select set_data from bbs_set where set_name = 'bbs_acl' and set_id = ?",
                name,
            ),
            lookup(
                "select set_data from bbs_set where set_name = ?", tool + "_acl_all"
            ),
            fallback(tool),
        ]

    if tool == "bbs_view":
        return "bbs", [
            lookup(
                "select set_data from bbs_set where set_name = 'bbs_view_acl'"
                " and set_id = ?",
                name,
            ),
            fallback("bbs_view"),
        ]

    # Everything else is treated as viewing the document.
    return "acl", [
        lookup("select data from acl where title = ? and type = 'view'", name),
        fallback("view"),
    ]


def _acl_allows(
    db: Database,
    acl_data: str,
    name: str,
    ip: str,
    is_ip: bool,
    level: int,
    banned: bool,
    rights: Mapping[str, bool],
) -> bool:
    if acl_data in ("all", "ban"):
        return True
    if acl_data == "user":
        return not is_ip
    if acl_data == "admin":
        return bool(rights.get("treat_as_admin"))
    if acl_data == "50_edit":
        return not is_ip and _edit_count(db, ip) >= 50
    if acl_data == "before":
        return (
            _scalar(
                db,
                "select ip from history where title = ? and ip = ?"
                " and type != 'edit_request'",
                name,
                ip,
            )
            != ""
        )
    if acl_data == "30_day":
        return not is_ip and _signed_up_days_ago(db, ip, 30)
    if acl_data == "90_day":
        return not is_ip and _signed_up_days_ago(db, ip, 90)
    if acl_data == "email":
        return (
            not is_ip
            and _scalar(
                db, "select data from user_set where id = ? and name = 'email'", ip
            )
            != ""
        )
    if acl_data == "owner":
        return bool(rights.get("owner"))
    if acl_data == "ban_admin":
        return bool(rights.get("treat_as_admin")) or banned
    if acl_data == "up_to_level_3":
        return level >= 3
    if acl_data == "up_to_level_10":
        return level >= 10
    if acl_data == "30_day_50_edit":
        return (
            not is_ip
            and _signed_up_days_ago(db, ip, 30)
            and _edit_count(db, ip) >= 50
        )
    # "not_all" and anything unknown
    return False


def _user_document_allows(
    db: Database, name: str, ip: str, is_ip: bool, banned: bool, rights: Mapping[str, bool]
) -> bool:
    owner = name[len("user:"):].split("/", 1)[0]

    if rights.get("acl"):
        return True
    if banned:
        return False

    acl_data = _scalar(
        db, "select data from acl where title = ? and type = 'decu'", name
    )
    if acl_data == "all":
        return True
    if acl_data == "user":
        return not is_ip
    if ip == owner:
        return not is_ip
    return False


def check_acl(
    db: Database, name: str = "", topic_number: str = "", tool: str = "", ip: str = ""
) -> bool:
    """Whether ``ip`` may use ``tool`` on the document ``name`` or topic ``topic_number``.

    An empty ``tool`` means editing the document; an unknown one means viewing it.
    """
    rights = get_auth_group_info(db, get_user_auth(db, ip))

    is_ip = ip_or_user(ip)
    level = 0 if is_ip else _atoi(get_level(db, ip)[0])

    ban = get_user_ban(db, ip, "edit_request" if tool == "document_edit_request" else "")
    banned = ban.banned
    ban_type = ban.ban_type
    if len(ban_type) == 2:
        ban_type = ban_type[1]

    if tool == "" and name != "":
        if not check_acl(db, name, "", "render", ip):
            return False
        if name.startswith("user:"):
            return _user_document_allows(db, name, ip, is_ip, banned, rights)

    if tool in ("document_edit", "document_edit_request", "document_move", "document_delete"):
        if not check_acl(db, name, topic_number, "render", ip):
            return False
        if not check_acl(db, name, topic_number, "", ip):
            return False
    elif tool in ("bbs_edit", "bbs_comment"):
        if not check_acl(db, name, topic_number, "bbs_view", ip):
            return False
    elif tool == "topic":
        if not check_acl(db, name, topic_number, "topic_view", ip):
            return False

    if tool in ("topic", "topic_view") and name == "":
        row = db.query_row("select title from rd where code = ?", topic_number)
        name = "test" if row is None else ("" if row[0] is None else str(row[0]))

    pass_auth, stages = _stages(db, tool, name, topic_number, rights)
    last = len(stages) - 1

    for index, stage in enumerate(stages):
        acl_data = stage()
        if acl_data is None:
            continue

        if rights.get(pass_auth):
            return True
        if ban_type == "4":
            return False

        if acl_data == "":
            acl_data = "normal"

        if acl_data != "normal":
            if acl_data not in ("ban", "ban_admin") or ban_type == "3":
                if tool not in _EXCEPT_BAN_TOOLS and banned:
                    return False
            return _acl_allows(db, acl_data, name, ip, is_ip, level, banned, rights)

        if index == last:
            if tool not in _EXCEPT_BAN_TOOLS and banned:
                return False
            if tool == "topic":
                stopped = _scalar(
                    db,
                    "select title from rd where code = ? and stop != ''",
                    topic_number,
                )
                if stopped != "":
                    return bool(rights.get("topic"))
            return True

    return False