from __future__ import annotations
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Iterable, Optional

from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.folder import MailboxTreeNode


@dataclass(frozen=True)
class FetchedMessage:
    # one FETCH response item: sequence number, UID, FLAGS and BODY[]
    sequence_number: int
    uid: Optional[int]
    flags: frozenset[str]
    raw: bytes = field(repr=False)


class ImapSession:
    """An authenticated IMAP connection owned by exactly one operation."""

    def select_folder(self, folder: str, readonly: bool = True) -> int:
        """Open a mailbox and return its message count."""
        raise NotImplementedError

    def fetch_range(self, start: int, end: int) -> list[FetchedMessage]:
        raise NotImplementedError

    def add_flags(self, uids: Iterable[int], flag: str) -> None:
        raise NotImplementedError

    def list_tree(self) -> list[MailboxTreeNode]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "ImapSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SmtpSession:
    """An authenticated SMTP connection owned by exactly one operation."""

    def send(self, message: EmailMessage) -> dict[str, tuple[int, bytes]]:
        """Submit a message; returns the refused-recipient map."""
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "SmtpSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SessionFactory:
    def with_verify_tls(self, verify_tls: Optional[bool]) -> "SessionFactory":
        """Factory variant with certificate validation forced on or off."""
        return self

    def open_imap(self, credentials: Credentials, target: ConnectionTarget) -> ImapSession:
        raise NotImplementedError

    def open_smtp(self, credentials: Credentials, target: ConnectionTarget) -> SmtpSession:
        raise NotImplementedError
