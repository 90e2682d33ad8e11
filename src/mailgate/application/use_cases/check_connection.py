"""Reachability/authentication checks for IMAP and SMTP."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials, Protocol
from mailgate.domain.errors import GatewayError, PartialFailure


@dataclass(frozen=True)
class ConnectionTestReport:
    """Per-protocol outcome of a combined account check."""

    imap: bool
    smtp: bool
    failures: dict[Protocol, GatewayError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.imap and self.smtp

    @property
    def partial(self) -> bool:
        return self.imap != self.smtp

    @property
    def error(self) -> Optional[GatewayError]:
        if self.success:
            return None
        if self.partial:
            return PartialFailure(self.failures)
        message = ", ".join(f"{p.value.upper()}: {e.message}" for p, e in self.failures.items())
        return GatewayError(message)

    @property
    def error_message(self) -> Optional[str]:
        error = self.error
        return error.message if error else None


class CheckConnectionUseCase:
    """Open a session, and once it is ready, close it again."""

    def __init__(self, sessions: SessionFactory) -> None:
        self.sessions = sessions

    def check_imap(self, credentials: Credentials, target: ConnectionTarget) -> bool:
        with self.sessions.open_imap(credentials, target):
            logger.info(f"IMAP check passed for {target}")
        return True

    def check_smtp(self, credentials: Credentials, target: ConnectionTarget) -> bool:
        with self.sessions.open_smtp(credentials, target):
            logger.info(f"SMTP check passed for {target}")
        return True

    def run(
        self,
        credentials: Credentials,
        imap_target: ConnectionTarget | GatewayError,
        smtp_target: ConnectionTarget | GatewayError,
    ) -> ConnectionTestReport:
        """Run both checks independently; one failing never skips the other.

        A target may already be a GatewayError when it could not be resolved.
        """
        failures: dict[Protocol, GatewayError] = {}
        outcome: dict[Protocol, bool] = {}

        for protocol, target, check in (
            (Protocol.IMAP, imap_target, self.check_imap),
            (Protocol.SMTP, smtp_target, self.check_smtp),
        ):
            if isinstance(target, GatewayError):
                failures[protocol] = target
                outcome[protocol] = False
                continue
            try:
                outcome[protocol] = check(credentials, target)
            except GatewayError as e:
                logger.warning(f"{protocol.value.upper()} check failed for {target}: {e.message}")
                failures[protocol] = e
                outcome[protocol] = False

        return ConnectionTestReport(
            imap=outcome[Protocol.IMAP],
            smtp=outcome[Protocol.SMTP],
            failures=failures,
        )
