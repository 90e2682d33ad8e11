from __future__ import annotations

from email.message import EmailMessage
from email.utils import formatdate, getaddresses, make_msgid
from typing import Sequence

from loguru import logger

from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.delivery import DeliveryReceipt


def text_to_html(text: str) -> str:
    return text.replace("\n", "<br>")


def build_message(sender: str, to: str | Sequence[str], subject: str, text: str) -> EmailMessage:
    """Plain-text message with an HTML alternative derived from the text."""
    recipients = to if isinstance(to, str) else ", ".join(to)
    _, _, domain = sender.rpartition("@")

    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipients
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid(domain=domain or None)
    msg.set_content(text)
    msg.add_alternative(text_to_html(text), subtype="html")
    return msg


class SendEmailUseCase:
    def __init__(self, sessions: SessionFactory) -> None:
        self.sessions = sessions

    def run(
        self,
        credentials: Credentials,
        target: ConnectionTarget,
        to: str | Sequence[str],
        subject: str,
        text: str,
    ) -> DeliveryReceipt:
        message = build_message(credentials.address, to, subject, text)
        with self.sessions.open_smtp(credentials, target) as session:
            refused = session.send(message)

        rejected = {
            addr: f"{code} {reply.decode('utf-8', 'replace') if isinstance(reply, bytes) else reply}".strip()
            for addr, (code, reply) in refused.items()
        }
        accepted = tuple(
            addr for _, addr in getaddresses([str(message["To"])]) if addr and addr not in rejected
        )
        logger.info(f"Sent {message['Message-ID']} via {target} ({len(accepted)} accepted)")
        return DeliveryReceipt(message_id=message["Message-ID"], accepted=accepted, rejected=rejected)
