"""Small helpers shared across the wiki: hashing, escaping, time and headers."""

from __future__ import annotations

import hashlib
import html
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote_plus

_HTML_ESCAPES = {
    "\0": "\ufffd",
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
}
_HTML_TABLE = str.maketrans(_HTML_ESCAPES)

_SESSION_COOKIE = "session"


@dataclass
class RequestConfig:
    """What a route handler receives about the current request."""

    other_set: str = ""
    ip: str = ""
    cookies: str = ""
    session: str = ""


def sha224(data: str) -> str:
    """Hex digest of the SHA-224 hash of ``data``."""
    return hashlib.sha224(data.encode("utf-8")).hexdigest()


def url_parser(data: str) -> str:
    """Escape ``data`` for use inside a URL query or path segment."""
    return quote_plus(data, safe="")


def html_escape(data: str) -> str:
    """Escape the characters that are special in HTML."""
    return data.translate(_HTML_TABLE)


def html_unescape(data: str) -> str:
    """Turn HTML entities back into characters."""
    return html.unescape(data)


def get_time() -> str:
    """Current local time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def get_date() -> str:
    """Current local date as ``YYYY-MM-DD``."""
    return datetime.now().strftime("%Y-%m-%d")


def get_month() -> str:
    """Current local month as ``YYYY-MM``."""
    return datetime.now().strftime("%Y-%m")


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return ""


def get_ip(headers: Mapping[str, str]) -> str:
    """Client address as forwarded by the front proxy."""
    return _header(headers, "X-Forwarded-For")


def get_cookies(headers: Mapping[str, str]) -> str:
    """Raw ``Cookie`` header of the request."""
    return _header(headers, "Cookie")


def get_session(headers: Mapping[str, str]) -> str:
    """Value of the session cookie of the request, or empty if there is none."""
    return get_cookie_header(get_cookies(headers)).get(_SESSION_COOKIE, "")


def get_cookie_header(cookie_header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name to value mapping."""
    cookies: dict[str, str] = {}
    for part in cookie_header.split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if sep:
            cookies[key.strip()] = value.strip()
    return cookies