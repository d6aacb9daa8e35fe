"""Sending mail through the wiki's configured SMTP server."""

from __future__ import annotations

import smtplib
import ssl
from contextlib import suppress

from namuki.db import Database
from namuki.settings import get_domain, get_wiki_set

_SMTP_KEYS = ("smtp_email", "smtp_pass", "smtp_server", "smtp_port", "smtp_security")
_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class EmailError(Exception):
    """Mail could not be sent."""


def _load_config(db: Database) -> dict[str, str]:
    config = dict.fromkeys(_SMTP_KEYS, "")
    rows = db.query(
        "select name, data from other where name in"
        " ('smtp_email', 'smtp_pass', 'smtp_server', 'smtp_port', 'smtp_security')"
    )
    for name, data in rows:
        config[str(name)] = "" if data is None else str(data)
    return config


def _open(server: str, port: str, security: str) -> smtplib.SMTP:
    try:
        port_number = int(port)
    except ValueError as exc:
        raise EmailError(f"failed to connect to smtp server: bad port {port!r}") from exc

    if security in ("plain", "starttls"):
        try:
            client = smtplib.SMTP(server, port_number)
        except (OSError, smtplib.SMTPException) as exc:
            raise EmailError(f"failed to connect to smtp server: {exc}") from exc
        if security == "starttls":
            try:
                client.starttls(context=ssl.create_default_context())
            except (OSError, smtplib.SMTPException) as exc:
                with suppress(OSError, smtplib.SMTPException):
                    client.quit()
                raise EmailError(f"failed to start tls: {exc}") from exc
        return client

    try:
        return smtplib.SMTP_SSL(
            server, port_number, context=ssl.create_default_context()
        )
    except (OSError, smtplib.SMTPException) as exc:
        raise EmailError(f"failed to establish ssl connection: {exc}") from exc


def send_email(db: Database, ip: str, recipient: str, title: str, body: str) -> None:
    """Send a plain-text mail to ``recipient`` from the wiki's SMTP account."""
    config = _load_config(db)
    sender = config["smtp_email"]
    secret = config["smtp_pass"]
    server = config["smtp_server"]
    port = config["smtp_port"]

    if not (sender and secret and server and port):
        raise EmailError("smtp configuration is incomplete")

    security = config["smtp_security"]
    client = _open(server, port, security)
    try:
        if security == "plain" and server not in _LOCAL_HOSTS:
            raise EmailError("smtp authentication failed: unencrypted connection")
        try:
            client.login(sender, secret)
        except (OSError, smtplib.SMTPException) as exc:
            raise EmailError(f"smtp authentication failed: {exc}") from exc

        domain = get_domain(db, False)
        wiki_name = get_wiki_set(db, ip, "")[0]
        message = (
            f"from: {wiki_name} <noreply@{domain}>\r\n"
            f"to: {recipient}\r\n"
            f"subject: {title}\r\n\r\n{body}"
        )

        try:
            client.sendmail(sender, [recipient], message.encode("utf-8"))
        except smtplib.SMTPSenderRefused as exc:
            raise EmailError(f"failed to set sender: {exc}") from exc
        except smtplib.SMTPRecipientsRefused as exc:
            raise EmailError(f"failed to set recipient: {exc}") from exc
        except smtplib.SMTPDataError as exc:
            raise EmailError(f"failed to send email data: {exc}") from exc
        except (OSError, smtplib.SMTPException) as exc:
            raise EmailError(f"failed to write email content: {exc}") from exc
    finally:
        with suppress(OSError, smtplib.SMTPException):
            client.quit()