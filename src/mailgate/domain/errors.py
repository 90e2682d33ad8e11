"""Error taxonomy for gateway operations.

Every protocol-layer failure is converted into exactly one of these at the
session boundary, so callers never see raw imaplib/smtplib/socket exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mailgate.domain.entities.connection import Protocol


class GatewayError(Exception):
    """Base class for failures scoped to a single gateway request."""

    def __init__(self, message: str, protocol: Optional[Protocol] = None) -> None:
        super().__init__(message)
        self.message = message
        self.protocol = protocol

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "protocol": self.protocol.value if self.protocol else None,
        }


class MailConnectionError(GatewayError):
    """Connect, TLS handshake or authentication failure."""

    def __init__(self, protocol: Protocol, cause: str) -> None:
        super().__init__(cause, protocol)
        self.cause = cause


class MailboxError(GatewayError):
    """SELECT / FETCH / STORE / LIST failure on an established IMAP session."""

    def __init__(self, message: str) -> None:
        super().__init__(message, Protocol.IMAP)


class SendError(GatewayError):
    """The SMTP server did not accept the message."""

    def __init__(self, message: str) -> None:
        super().__init__(message, Protocol.SMTP)


class PartialFailure(GatewayError):
    """IMAP and SMTP connection checks disagreed."""

    def __init__(self, failures: dict[Protocol, GatewayError]) -> None:
        self.failures = dict(failures)
        message = ", ".join(f"{p.value.upper()}: {e.message}" for p, e in self.failures.items())
        super().__init__(message)


@dataclass(frozen=True)
class ResolutionGap:
    """
    No provider profile covers this protocol and the caller supplied no
    explicit host/port. A normal negative result, not an exception.
    """
    protocol: Protocol
    domain: str
    missing: tuple[str, ...]

    @property
    def message(self) -> str:
        fields = " and ".join(self.missing)
        where = self.domain or "this address"
        return f"No {self.protocol.value.upper()} server known for {where}; {fields} must be supplied"


class UnresolvedTargetError(GatewayError):
    """API-boundary form of a ResolutionGap."""

    def __init__(self, gap: ResolutionGap) -> None:
        super().__init__(gap.message, gap.protocol)
        self.gap = gap
