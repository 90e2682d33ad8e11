from __future__ import annotations

from typing import Sequence

from loguru import logger

from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.mailbox_message import INBOX, SEEN_FLAG


class MarkReadUseCase:
    """Add \\Seen to the given INBOX UIDs.

    Best effort: IMAP STORE is not transactional, so a failure part-way
    may leave some of the messages flagged.
    """

    def __init__(self, sessions: SessionFactory) -> None:
        self.sessions = sessions

    def run(self, credentials: Credentials, target: ConnectionTarget, uids: Sequence[int]) -> bool:
        with self.sessions.open_imap(credentials, target) as session:
            session.select_folder(INBOX, readonly=False)
            session.add_flags(uids, SEEN_FLAG)

        logger.info(f"Marked {len(uids)} messages as read on {target}")
        return True
