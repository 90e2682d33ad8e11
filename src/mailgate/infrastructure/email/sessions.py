"""Session factory: applies TLS and timeout policy to every new session."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.infrastructure.email.imap.session import ImaplibSession, open_imap_session
from mailgate.infrastructure.email.smtp.session import SmtplibSession, open_smtp_session
from mailgate.infrastructure.settings import Settings, get_settings


@dataclass(frozen=True)
class SessionPolicy:
    verify_tls: bool
    imap_connect_timeout: float = 10.0
    imap_auth_timeout: float = 5.0
    imap_operation_timeout: float = 30.0
    smtp_connect_timeout: float = 10.0
    smtp_greeting_timeout: float = 5.0
    smtp_operation_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionPolicy":
        return cls(
            verify_tls=settings.verify_tls,
            imap_connect_timeout=settings.imap_connect_timeout,
            imap_auth_timeout=settings.imap_auth_timeout,
            imap_operation_timeout=settings.imap_operation_timeout,
            smtp_connect_timeout=settings.smtp_connect_timeout,
            smtp_greeting_timeout=settings.smtp_greeting_timeout,
            smtp_operation_timeout=settings.smtp_operation_timeout,
        )


class MailSessionFactory(SessionFactory):
    """Opens transient sessions. Never retries; retry policy belongs to callers."""

    def __init__(self, policy: SessionPolicy) -> None:
        self.policy = policy

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "MailSessionFactory":
        return cls(SessionPolicy.from_settings(settings or get_settings()))

    def with_verify_tls(self, verify_tls: Optional[bool]) -> "MailSessionFactory":
        """Copy of this factory with certificate validation forced on or off."""
        if verify_tls is None or verify_tls == self.policy.verify_tls:
            return self
        return MailSessionFactory(replace(self.policy, verify_tls=verify_tls))

    def open_imap(self, credentials: Credentials, target: ConnectionTarget) -> ImaplibSession:
        return open_imap_session(
            credentials,
            target,
            verify_tls=self.policy.verify_tls,
            connect_timeout=self.policy.imap_connect_timeout,
            auth_timeout=self.policy.imap_auth_timeout,
            operation_timeout=self.policy.imap_operation_timeout,
        )

    def open_smtp(self, credentials: Credentials, target: ConnectionTarget) -> SmtplibSession:
        return open_smtp_session(
            credentials,
            target,
            verify_tls=self.policy.verify_tls,
            connect_timeout=self.policy.smtp_connect_timeout,
            greeting_timeout=self.policy.smtp_greeting_timeout,
            operation_timeout=self.policy.smtp_operation_timeout,
        )
