from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

SEEN_FLAG = "\\Seen"
INBOX = "INBOX"


@dataclass(frozen=True)
class Attachment:
    filename: str
    content_type: str
    size_bytes: int
    content_id: Optional[str] = None


@dataclass(frozen=True)
class MailboxMessage:
    sequence_number: int
    uid: Optional[int]
    flags: frozenset[str]
    is_unread: bool
    sender: str
    recipients: str
    subject: str
    date: str                      # display string, already formatted
    body_text: str
    body_html: Optional[str] = None
    attachments: tuple[Attachment, ...] = ()
    timestamp: Optional[datetime] = None

    @property
    def body(self) -> str:
        """HTML wins over plain text when the message carries both."""
        return self.body_html or self.body_text
