"""Account gateway: the five operations exposed to the HTTP layer.

Each call resolves connection targets, runs exactly one use case (one
transient session per protocol) and emits one activity event, success or not.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

from loguru import logger

from mailgate.application.ports.activity_sink import ActivitySink
from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.application.providers import ProviderResolver, resolve_target
from mailgate.application.use_cases.check_connection import CheckConnectionUseCase, ConnectionTestReport
from mailgate.application.use_cases.fetch_emails import FetchEmailsUseCase, MessageFormat
from mailgate.application.use_cases.list_folders import ListFoldersUseCase
from mailgate.application.use_cases.mark_read import MarkReadUseCase
from mailgate.application.use_cases.send_email import SendEmailUseCase
from mailgate.domain.entities.connection import ConnectionTarget, Credentials, Protocol, ProviderProfile
from mailgate.domain.entities.delivery import DeliveryReceipt
from mailgate.domain.entities.folder import FolderNode
from mailgate.domain.entities.mailbox_message import MailboxMessage
from mailgate.domain.errors import GatewayError, ResolutionGap, UnresolvedTargetError

T = TypeVar("T")


@dataclass(frozen=True)
class AccountParams:
    """Credentials plus whatever connection fields the caller supplied."""
    credentials: Credentials
    imap_host: Optional[str] = None
    imap_port: Optional[int] = None
    imap_tls: Optional[bool] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    verify_tls: Optional[bool] = None

    @property
    def address(self) -> str:
        return self.credentials.address


class AccountGateway:
    def __init__(
        self,
        resolver: ProviderResolver,
        sessions: SessionFactory,
        activity: ActivitySink,
        message_format: MessageFormat | None = None,
    ) -> None:
        self.resolver = resolver
        self.sessions = sessions
        self.activity = activity
        self.message_format = message_format or MessageFormat()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _target(self, protocol: Protocol, params: AccountParams) -> ConnectionTarget:
        if protocol is Protocol.IMAP:
            result = resolve_target(
                self.resolver, protocol, params.credentials, params.imap_host, params.imap_port, params.imap_tls
            )
        else:
            result = resolve_target(self.resolver, protocol, params.credentials, params.smtp_host, params.smtp_port)

        if isinstance(result, ResolutionGap):
            raise UnresolvedTargetError(result)
        return result

    def _sessions(self, params: AccountParams) -> SessionFactory:
        return self.sessions.with_verify_tls(params.verify_tls)

    def _record(self, event: str, operation: str, params: AccountParams, success: bool, **details: Any) -> None:
        payload = {"address": params.address, "operation": operation, "success": success, **details}
        try:
            self.activity.record(event, payload)
        except Exception as e:
            logger.warning(f"Activity sink failed for {event}: {e}")

    def _run(self, event: str, operation: str, params: AccountParams, fn: Callable[[], T], **details: Any) -> T:
        try:
            result = fn()
        except GatewayError as e:
            logger.error(f"{operation} failed: {e.message}")
            self._record(event, operation, params, False, error=e.message, protocol=e.to_dict()["protocol"], **details)
            raise
        except Exception as e:
            self._record(event, operation, params, False, error=str(e) or type(e).__name__, **details)
            raise
        self._record(event, operation, params, True, **details)
        return result

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def describe_provider(self, address: str) -> ProviderProfile:
        return self.resolver.resolve(address)

    def test_connection(self, params: AccountParams) -> ConnectionTestReport:
        """Check IMAP and SMTP independently; never raises for protocol failures."""
        targets: dict[Protocol, ConnectionTarget | GatewayError] = {}
        for protocol in (Protocol.IMAP, Protocol.SMTP):
            try:
                targets[protocol] = self._target(protocol, params)
            except UnresolvedTargetError as e:
                targets[protocol] = e

        report = CheckConnectionUseCase(self._sessions(params)).run(
            params.credentials, targets[Protocol.IMAP], targets[Protocol.SMTP]
        )
        details: dict[str, Any] = {"imap": report.imap, "smtp": report.smtp}
        if report.error_message:
            details["error"] = report.error_message
        self._record("connection_test", "test_connection", params, report.success, **details)
        return report

    def fetch_emails(self, params: AccountParams, folder: str = "INBOX", count: int = 10) -> list[MailboxMessage]:
        def op() -> list[MailboxMessage]:
            target = self._target(Protocol.IMAP, params)
            return FetchEmailsUseCase(self._sessions(params), self.message_format).run(
                params.credentials, target, folder, count
            )

        return self._run("emails_fetched", "fetch_emails", params, op, folder=folder, count=count)

    def send_email(self, params: AccountParams, to: str | Sequence[str], subject: str, text: str) -> DeliveryReceipt:
        def op() -> DeliveryReceipt:
            target = self._target(Protocol.SMTP, params)
            return SendEmailUseCase(self._sessions(params)).run(params.credentials, target, to, subject, text)

        recipients = to if isinstance(to, str) else ", ".join(to)
        return self._run("email_sent", "send_email", params, op, to=recipients, subject=subject)

    def mark_read(self, params: AccountParams, message_ids: Sequence[int]) -> bool:
        def op() -> bool:
            target = self._target(Protocol.IMAP, params)
            return MarkReadUseCase(self._sessions(params)).run(params.credentials, target, message_ids)

        return self._run("messages_marked_read", "mark_read", params, op, message_count=len(message_ids))

    def list_folders(self, params: AccountParams) -> list[FolderNode]:
        def op() -> list[FolderNode]:
            target = self._target(Protocol.IMAP, params)
            return ListFoldersUseCase(self._sessions(params)).run(params.credentials, target)

        return self._run("folders_listed", "list_folders", params, op)
