"""Display of user names and addresses, and the user tool menu."""

from __future__ import annotations

from namuki.acl import check_acl
from namuki.db import Database
from namuki.ipban import get_level, get_user_ban, ip_or_user
from namuki.language import get_language
from namuki.util import html_escape, sha224, url_parser


def _scalar(db: Database, query: str, *args: object) -> str:
    row = db.query_row(query, *args)
    if row is None or row[0] is None:
        return ""
    return str(row[0])


def ip_preprocess(db: Database, ip: str, my_ip: str) -> tuple[str, str]:
    """The name to show for ``ip`` to ``my_ip`` and ``"true"`` when it was hidden."""
    parts = ip.split(":")
    if len(parts) != 1 and parts[0] == "tool":
        return ip, ""

    ip_view = _scalar(db, "select data from other where name = 'ip_view'")
    user_name_view = _scalar(db, "select data from other where name = 'user_name_view'")

    if check_acl(db, "", "", "view_hide_user_name", my_ip):
        ip_view = ""
        user_name_view = ""

    ip_change = ""
    if ip_or_user(ip):
        if ip_view != "" and ip != my_ip:
            ip = sha224(ip)[:10]
            ip_change = "true"
    elif user_name_view != "":
        sub_user_name = _scalar(
            db,
            "select data from user_set where id = ? and name = 'sub_user_name'",
            ip,
        )
        if sub_user_name == "":
            sub_user_name = get_language(db, "member", False)
        ip = sub_user_name
        ip_change = "true"
    else:
        user_name = _scalar(
            db, "select data from user_set where name = 'user_name' and id = ?", ip
        )
        ip = user_name if user_name != "" else ip

    return ip, ip_change


def ip_menu(
    db: Database, ip: str, my_ip: str, option: str = ""
) -> dict[str, list[tuple[str, str]]]:
    """Menu sections of links about ``ip`` as seen by ``my_ip``."""

    def lang(key: str) -> str:
        return get_language(db, key, False)

    menu: dict[str, list[tuple[str, str]]] = {}

    if ip == my_ip and option == "":
        alarm_count = _scalar(
            db,
            "select count(*) from user_notice where name = ? and readme = ''",
            my_ip,
        ) or "0"
        alarm = ("/alarm" + url_parser(my_ip), f"{lang('alarm')} ({alarm_count})")

        if ip_or_user(my_ip):
            menu[lang("login")] = [
                ("/login", lang("login")),
                ("/register", lang("register")),
                ("/change", lang("user_setting")),
                ("/login/find", lang("password_search")),
                alarm,
            ]
        else:
            menu[lang("login")] = [
                ("/logout", lang("logout")),
                ("/change", lang("user_setting")),
            ]
            menu[lang("tool")] = [
                ("/watch_list", lang("watchlist")),
                ("/star_doc", lang("star_doc")),
                ("/challenge", lang("challenge_and_level_manage")),
                ("/acl/user:" + url_parser(my_ip), lang("user_document_acl")),
                alarm,
            ]

    if check_acl(db, "", "", "ban_auth", my_ip):
        menu[lang("admin")] = [
            ("/auth/ban/" + url_parser(ip), lang("ban")),
            ("/auth/give/" + url_parser(ip), lang("authorize")),
            ("/list/user/check_submit/" + url_parser(ip), lang("check")),
        ]

    target = url_parser(ip)
    menu[lang("other")] = [
        ("/record/" + target, lang("edit_record")),
        ("/record/topic/" + target, lang("discussion_record")),
        ("/record/bbs/" + target, lang("bbs_record")),
        ("/record/bbs_comment/" + target, lang("bbs_comment_record")),
        ("/topic/user:" + target, lang("user_discussion")),
        ("/count/" + target, lang("count")),
    ]

    return menu


def ip_parser(db: Database, ip: str, my_ip: str) -> str:
    """HTML showing ``ip`` to ``my_ip``: link, level, title, ban mark and tool button."""
    shown, changed = ip_preprocess(db, ip, my_ip)
    if shown == "":
        return ""
    if changed != "":
        return shown

    raw_ip = ip
    html = html_escape(shown)

    if not ip_or_user(raw_ip):
        user_name_level = _scalar(
            db, "select data from other where name = 'user_name_level'"
        )
        if user_name_level != "":
            html += "<sup>" + get_level(db, raw_ip)[0] + "</sup>"

        html = '<a href="/w/' + url_parser("user:" + raw_ip) + '">' + html + "</a>"

        user_title = _scalar(
            db, "select data from user_set where name = 'user_title' and id = ?", raw_ip
        )

        if check_acl(db, "", "", "user_name_bold", raw_ip):
            html = "<b>" + html + "</b>"

        html = user_title + html

    ban = get_user_ban(db, raw_ip, "")
    if ban.banned:
        html = "<sup>" + ban.ban_type + "</sup><s>" + html + "</s>"

    html += (
        '<a href="javascript:void(0);" name="'
        + url_parser(raw_ip)
        + '" onclick="opennamu_do_ip_click(this);">'
        '<span class="opennamu_svg opennamu_svg_tool">&nbsp;</span></a>'
    )
    return html