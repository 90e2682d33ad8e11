"""
In-memory stand-ins for the session ports, a recording activity sink and
raw RFC 822 builders. No test touches the network.
"""
from __future__ import annotations

from email.message import EmailMessage
from typing import Iterable, Optional

from mailgate.application.ports.activity_sink import ActivitySink
from mailgate.application.ports.mail_sessions import FetchedMessage, ImapSession, SessionFactory, SmtpSession
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.folder import MailboxTreeNode
from mailgate.domain.errors import GatewayError


def make_raw(
    subject: Optional[str] = "Hello",
    sender: Optional[str] = "Alice <alice@example.com>",
    to: Optional[str] = "bob@example.com",
    date: Optional[str] = "Mon, 06 Oct 2025 10:30:00 +0000",
    text: str = "Hi Bob",
    html: Optional[str] = None,
    attachment: Optional[tuple[str, bytes]] = None,
) -> bytes:
    msg = EmailMessage()
    if sender is not None:
        msg["From"] = sender
    if to is not None:
        msg["To"] = to
    if subject is not None:
        msg["Subject"] = subject
    if date is not None:
        msg["Date"] = date
    msg.set_content(text)
    if html is not None:
        msg.add_alternative(html, subtype="html")
    if attachment is not None:
        filename, data = attachment
        msg.add_attachment(data, maintype="application", subtype="octet-stream", filename=filename)
    return msg.as_bytes()


def fetched(seq: int, uid: Optional[int] = None, flags: Iterable[str] = (), **raw_kwargs) -> FetchedMessage:
    return FetchedMessage(
        sequence_number=seq,
        uid=uid if uid is not None else seq + 100,
        flags=frozenset(flags),
        raw=make_raw(**raw_kwargs),
    )


class FakeImapSession(ImapSession):
    def __init__(
        self,
        total: int = 0,
        messages: Iterable[FetchedMessage] = (),
        tree: Iterable[MailboxTreeNode] = (),
        select_error: Optional[GatewayError] = None,
        fetch_error: Optional[GatewayError] = None,
        store_error: Optional[GatewayError] = None,
    ) -> None:
        self.total = total
        self.messages = list(messages)
        self.tree = list(tree)
        self.select_error = select_error
        self.fetch_error = fetch_error
        self.store_error = store_error
        self.selected: list[tuple[str, bool]] = []
        self.fetch_calls: list[tuple[int, int]] = []
        self.flags_added: list[tuple[tuple[int, ...], str]] = []
        self.close_calls = 0

    def select_folder(self, folder: str, readonly: bool = True) -> int:
        self.selected.append((folder, readonly))
        if self.select_error:
            raise self.select_error
        return self.total

    def fetch_range(self, start: int, end: int) -> list[FetchedMessage]:
        self.fetch_calls.append((start, end))
        if self.fetch_error:
            raise self.fetch_error
        return list(self.messages)

    def add_flags(self, uids, flag: str) -> None:
        if self.store_error:
            raise self.store_error
        self.flags_added.append((tuple(uids), flag))

    def list_tree(self) -> list[MailboxTreeNode]:
        return list(self.tree)

    def close(self) -> None:
        self.close_calls += 1


class FakeSmtpSession(SmtpSession):
    def __init__(self, refused: Optional[dict] = None, send_error: Optional[GatewayError] = None) -> None:
        self.refused = refused or {}
        self.send_error = send_error
        self.sent: list[EmailMessage] = []
        self.close_calls = 0

    def send(self, message: EmailMessage) -> dict:
        if self.send_error:
            raise self.send_error
        self.sent.append(message)
        return dict(self.refused)

    def close(self) -> None:
        self.close_calls += 1


class FakeSessionFactory(SessionFactory):
    def __init__(
        self,
        imap: Optional[FakeImapSession] = None,
        smtp: Optional[FakeSmtpSession] = None,
        imap_error: Optional[GatewayError] = None,
        smtp_error: Optional[GatewayError] = None,
    ) -> None:
        self.imap = imap or FakeImapSession()
        self.smtp = smtp or FakeSmtpSession()
        self.imap_error = imap_error
        self.smtp_error = smtp_error
        self.imap_targets: list[ConnectionTarget] = []
        self.smtp_targets: list[ConnectionTarget] = []
        self.verify_overrides: list[Optional[bool]] = []

    def with_verify_tls(self, verify_tls):
        self.verify_overrides.append(verify_tls)
        return self

    def open_imap(self, credentials: Credentials, target: ConnectionTarget) -> FakeImapSession:
        self.imap_targets.append(target)
        if self.imap_error:
            raise self.imap_error
        return self.imap

    def open_smtp(self, credentials: Credentials, target: ConnectionTarget) -> FakeSmtpSession:
        self.smtp_targets.append(target)
        if self.smtp_error:
            raise self.smtp_error
        return self.smtp


class RecordingActivitySink(ActivitySink):
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def record(self, event, payload) -> None:
        self.events.append((event, dict(payload)))
