from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from email import policy
from email.message import EmailMessage, Message
from email.parser import BytesParser
from typing import Optional

from loguru import logger

from mailgate.domain.entities.mailbox_message import Attachment


@dataclass(frozen=True)
class ParsedEmail:
    sender: Optional[str]
    recipients: Optional[str]
    subject: Optional[str]
    timestamp: Optional[datetime]
    text: str
    html: Optional[str]
    attachments: tuple[Attachment, ...]


def _header(em: EmailMessage, name: str) -> Optional[str]:
    values = em.get_all(name)
    if not values:
        return None
    text = ", ".join(str(v).strip() for v in values if str(v).strip())
    return text or None


def _timestamp(em: EmailMessage) -> Optional[datetime]:
    # Date parsing can be messy; an unparseable header counts as absent
    dt = em.get("Date")
    try:
        return dt.datetime if dt else None
    except (AttributeError, TypeError, ValueError):
        return None


def _content(part: Optional[Message]) -> Optional[str]:
    if part is None:
        return None
    try:
        return part.get_content()
    except (LookupError, UnicodeError, KeyError):
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", errors="replace")


def extract_attachments(em: Message) -> tuple[Attachment, ...]:
    out: list[Attachment] = []
    for part in em.walk():
        if part.is_multipart():
            continue

        filename = part.get_filename()
        disp = (part.get("Content-Disposition") or "").lower()

        # explicit attachments plus inline parts that carry a filename
        if not filename and "attachment" not in disp:
            continue

        payload = part.get_payload(decode=True) or b""
        content_id = part.get("Content-ID")
        out.append(
            Attachment(
                filename=filename or "attachment.bin",
                content_type=part.get_content_type(),
                size_bytes=len(payload),
                content_id=content_id.strip("<> ") if content_id else None,
            )
        )
    return tuple(out)


def parse_rfc822(rfc822_bytes: bytes) -> ParsedEmail:
    em = BytesParser(policy=policy.default).parsebytes(rfc822_bytes)

    html = _content(em.get_body(preferencelist=("html",)))
    text = _content(em.get_body(preferencelist=("plain",)))

    subject = _header(em, "Subject")
    attachments = extract_attachments(em)
    logger.debug(f"Parsed message ({len(rfc822_bytes)} bytes, {len(attachments)} attachments)")

    return ParsedEmail(
        sender=_header(em, "From"),
        recipients=_header(em, "To"),
        subject=subject,
        timestamp=_timestamp(em),
        text=(text or "").strip(),
        html=html.strip() if html else None,
        attachments=attachments,
    )
