"""smtplib-backed SMTP sessions."""

from __future__ import annotations

import smtplib
import socket
from email.message import EmailMessage

from loguru import logger

from mailgate.application.ports.mail_sessions import SmtpSession
from mailgate.application.providers import SMTPS_PORT
from mailgate.domain.entities.connection import ConnectionTarget, Credentials, Protocol
from mailgate.domain.errors import MailConnectionError, SendError
from mailgate.infrastructure.email.errors import describe_error
from mailgate.infrastructure.email.tls import build_ssl_context

SMTP_ERRORS = (smtplib.SMTPException, OSError)
SMTP_READY = 220


class _GreetingTimeout:
    """Bound the wait for the 220 greeting separately from the TCP connect."""

    def __init__(self, *args, greeting_timeout: float, **kwargs) -> None:
        self.greeting_timeout = greeting_timeout
        super().__init__(*args, **kwargs)

    def _get_socket(self, host, port, timeout) -> socket.socket:
        sock = super()._get_socket(host, port, timeout)
        sock.settimeout(self.greeting_timeout)
        return sock


class _SMTP(_GreetingTimeout, smtplib.SMTP):
    pass


class _SMTPSSL(_GreetingTimeout, smtplib.SMTP_SSL):
    pass


class SmtplibSession(SmtpSession):
    def __init__(self, smtp: smtplib.SMTP, target: ConnectionTarget) -> None:
        self._smtp = smtp
        self.target = target
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: EmailMessage) -> dict[str, tuple[int, bytes]]:
        if self._closed:
            raise SendError("SMTP send on a closed session")
        try:
            refused = self._smtp.send_message(message)
        except smtplib.SMTPRecipientsRefused as e:
            refused = ", ".join(sorted(e.recipients))
            raise SendError(f"All recipients were refused: {refused}") from e
        except SMTP_ERRORS as e:
            raise SendError(f"SMTP submission failed: {describe_error(e)}") from e
        logger.info(f"Message submitted via {self.target} ({len(refused)} recipients refused)")
        return refused

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._smtp.quit()
            logger.debug(f"SMTP session to {self.target} closed")
        except SMTP_ERRORS as e:
            logger.debug(f"Error closing SMTP session to {self.target}: {describe_error(e)}")
            self._smtp.close()


def open_smtp_session(
    credentials: Credentials,
    target: ConnectionTarget,
    *,
    verify_tls: bool,
    connect_timeout: float,
    greeting_timeout: float,
    operation_timeout: float,
) -> SmtplibSession:
    """Connect, secure and authenticate.

    Port 465 gets an implicit-TLS session; every other port is upgraded
    with STARTTLS when the server offers it.
    """
    context = build_ssl_context(verify_tls)
    implicit_tls = target.port == SMTPS_PORT
    logger.info(f"Connecting to SMTP server {target} (implicit_tls={implicit_tls})")

    if implicit_tls:
        smtp: smtplib.SMTP = _SMTPSSL(timeout=connect_timeout, context=context, greeting_timeout=greeting_timeout)
    else:
        smtp = _SMTP(timeout=connect_timeout, greeting_timeout=greeting_timeout)

    try:
        code, greeting = smtp.connect(target.host, target.port)
        if code != SMTP_READY:
            raise smtplib.SMTPConnectError(code, greeting)

        smtp.sock.settimeout(operation_timeout)
        smtp.ehlo()
        if not implicit_tls and smtp.has_extn("starttls"):
            smtp.starttls(context=context)
            smtp.ehlo()
        smtp.login(credentials.address, credentials.secret)
    except SMTP_ERRORS as e:
        smtp.close()
        logger.warning(f"SMTP connection to {target} failed: {describe_error(e)}")
        raise MailConnectionError(Protocol.SMTP, describe_error(e)) from e

    logger.info(f"SMTP session established with {target}")
    return SmtplibSession(smtp, target)
