from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Protocol(str, Enum):
    """Mail protocols the gateway speaks."""

    IMAP = "imap"
    SMTP = "smtp"
    POP3 = "pop3"


@dataclass(frozen=True)
class Credentials:
    """
    Mailbox login for the lifetime of one request.
    The secret is excluded from repr so it never lands in a log line.
    """
    address: str
    secret: str = field(repr=False)

    @property
    def domain(self) -> str:
        _, _, domain = self.address.partition("@")
        return domain.lower()


@dataclass(frozen=True)
class ConnectionTarget:
    host: str
    port: int
    use_implicit_tls: bool = True

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ProviderProfile:
    key: str
    display_name: str
    imap: Optional[ConnectionTarget] = None
    smtp: Optional[ConnectionTarget] = None
    pop3: Optional[ConnectionTarget] = None
    requires_app_password: bool = False
    credential_help_url: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.imap is None and self.smtp is None

    def target_for(self, protocol: Protocol) -> Optional[ConnectionTarget]:
        return {
            Protocol.IMAP: self.imap,
            Protocol.SMTP: self.smtp,
            Protocol.POP3: self.pop3,
        }[protocol]


CUSTOM_PROFILE = ProviderProfile(key="custom", display_name="Custom Server")
