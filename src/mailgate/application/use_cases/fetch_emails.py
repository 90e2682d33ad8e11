"""Email listing pipeline: window -> range fetch -> parse -> order."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from mailgate.application.fetch_window import compute_fetch_window
from mailgate.application.ports.mail_sessions import FetchedMessage, SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.mailbox_message import SEEN_FLAG, MailboxMessage
from mailgate.infrastructure.email.rfc822 import parse_rfc822


@dataclass(frozen=True)
class MessageFormat:
    date_format: str = "%d.%m.%Y, %H:%M:%S"
    unknown: str = "Unknown"
    no_subject: str = "No subject"


class FetchEmailsUseCase:
    """Read the most recent messages of one folder without changing their flags.

    Flow:
    1. Open the folder read-only (EXAMINE)
    2. Empty folder -> empty result
    3. Fetch the newest `max_count` messages by sequence number in one range
    4. Parse each body; unread = no \\Seen flag
    5. Sort by sequence number, newest first

    Any SELECT/FETCH failure aborts the whole call; there are no partial results.
    """

    def __init__(self, sessions: SessionFactory, fmt: MessageFormat | None = None) -> None:
        self.sessions = sessions
        self.fmt = fmt or MessageFormat()

    def run(
        self,
        credentials: Credentials,
        target: ConnectionTarget,
        folder: str,
        max_count: int,
    ) -> list[MailboxMessage]:
        messages: list[MailboxMessage] = []
        with self.sessions.open_imap(credentials, target) as session:
            total = session.select_folder(folder, readonly=True)
            window = compute_fetch_window(total, max_count)
            if window is None:
                logger.info(f"{folder} on {target} is empty")
                return []

            fetched = session.fetch_range(window.start, window.end)
            for item in fetched:
                if not window.start <= item.sequence_number <= window.end:
                    continue
                try:
                    messages.append(self._to_message(item))
                except Exception as e:
                    logger.error(f"Failed to parse message #{item.sequence_number} in {folder}: {e}")

            messages.sort(key=lambda m: m.sequence_number, reverse=True)

        logger.info(f"Fetched {len(messages)} of {total} messages from {folder} ({window.as_sequence_set()})")
        return messages

    def _to_message(self, item: FetchedMessage) -> MailboxMessage:
        parsed = parse_rfc822(item.raw)
        date = parsed.timestamp.strftime(self.fmt.date_format) if parsed.timestamp else self.fmt.unknown

        return MailboxMessage(
            sequence_number=item.sequence_number,
            uid=item.uid,
            flags=item.flags,
            is_unread=SEEN_FLAG not in item.flags,
            sender=parsed.sender or self.fmt.unknown,
            recipients=parsed.recipients or self.fmt.unknown,
            subject=parsed.subject or self.fmt.no_subject,
            date=date,
            body_text=parsed.text,
            body_html=parsed.html,
            attachments=parsed.attachments,
            timestamp=parsed.timestamp,
        )
