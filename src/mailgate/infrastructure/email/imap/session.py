"""imaplib-backed IMAP sessions."""

from __future__ import annotations

import imaplib
from typing import Any, Callable, Iterable

from loguru import logger

from mailgate.application.ports.mail_sessions import FetchedMessage, ImapSession
from mailgate.domain.entities.connection import ConnectionTarget, Credentials, Protocol
from mailgate.domain.entities.folder import MailboxTreeNode
from mailgate.domain.errors import MailboxError, MailConnectionError
from mailgate.infrastructure.email.errors import describe_error
from mailgate.infrastructure.email.imap.responses import (
    build_mailbox_tree,
    parse_fetch_response,
    parse_list_response,
    quote_mailbox,
)
from mailgate.infrastructure.email.tls import build_ssl_context

IMAP_ERRORS = (imaplib.IMAP4.error, OSError)

# BODY.PEEK keeps \Seen untouched even if a server ignores EXAMINE
FETCH_ITEMS = "(UID FLAGS BODY.PEEK[])"


class ImaplibSession(ImapSession):
    def __init__(self, conn: imaplib.IMAP4, target: ConnectionTarget) -> None:
        self._conn = conn
        self.target = target
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> list[Any]:
        if self._closed:
            raise MailboxError(f"IMAP {operation} on a closed session")
        try:
            typ, data = fn(*args, **kwargs)
        except IMAP_ERRORS as e:
            raise MailboxError(f"IMAP {operation} failed: {describe_error(e)}") from e

        if typ != "OK":
            detail = data[0] if data else b"no response"
            if isinstance(detail, bytes):
                detail = detail.decode("utf-8", "replace")
            raise MailboxError(f"IMAP {operation} failed: {detail}")
        return data

    def select_folder(self, folder: str, readonly: bool = True) -> int:
        data = self._call(f"SELECT {folder}", self._conn.select, quote_mailbox(folder), readonly=readonly)
        try:
            total = int(data[0])
        except (IndexError, TypeError, ValueError):
            total = 0
        logger.debug(f"Opened {folder} on {self.target} (readonly={readonly}, {total} messages)")
        return total

    def fetch_range(self, start: int, end: int) -> list[FetchedMessage]:
        data = self._call("FETCH", self._conn.fetch, f"{start}:{end}", FETCH_ITEMS)
        return parse_fetch_response(data)

    def add_flags(self, uids: Iterable[int], flag: str) -> None:
        id_set = ",".join(str(uid) for uid in uids)
        self._call("STORE", self._conn.uid, "STORE", id_set, "+FLAGS", f"({flag})")

    def list_tree(self) -> list[MailboxTreeNode]:
        data = self._call("LIST", self._conn.list)
        return build_mailbox_tree(parse_list_response(data))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._conn.logout()
            logger.debug(f"IMAP session to {self.target} closed")
        except IMAP_ERRORS as e:
            logger.debug(f"Error closing IMAP session to {self.target}: {describe_error(e)}")


def _abandon(conn: imaplib.IMAP4) -> None:
    try:
        conn.shutdown()
    except OSError:
        pass


def open_imap_session(
    credentials: Credentials,
    target: ConnectionTarget,
    *,
    verify_tls: bool,
    connect_timeout: float,
    auth_timeout: float,
    operation_timeout: float,
) -> ImaplibSession:
    """Connect, secure and log in. Any failure becomes a MailConnectionError."""
    context = build_ssl_context(verify_tls)
    logger.info(f"Connecting to IMAP server {target} (implicit_tls={target.use_implicit_tls})")

    try:
        if target.use_implicit_tls:
            conn = imaplib.IMAP4_SSL(target.host, target.port, ssl_context=context, timeout=connect_timeout)
        else:
            conn = imaplib.IMAP4(target.host, target.port, timeout=connect_timeout)
    except IMAP_ERRORS as e:
        logger.warning(f"IMAP connect to {target} failed: {describe_error(e)}")
        raise MailConnectionError(Protocol.IMAP, describe_error(e)) from e

    try:
        if not target.use_implicit_tls:
            conn.starttls(ssl_context=context)
        conn.sock.settimeout(auth_timeout)
        conn.login(credentials.address, credentials.secret)
        conn.sock.settimeout(operation_timeout)
    except IMAP_ERRORS as e:
        _abandon(conn)
        logger.warning(f"IMAP authentication on {target} failed: {describe_error(e)}")
        raise MailConnectionError(Protocol.IMAP, describe_error(e)) from e

    logger.info(f"IMAP session established with {target}")
    return ImaplibSession(conn, target)
