"""FastAPI dependency wiring."""

from __future__ import annotations

from mailgate.application.gateway import AccountGateway
from mailgate.application.providers import ProviderResolver
from mailgate.application.use_cases.fetch_emails import MessageFormat
from mailgate.infrastructure.activity import activity_sink_from_settings
from mailgate.infrastructure.email.sessions import MailSessionFactory
from mailgate.infrastructure.provider_table import get_provider_table
from mailgate.infrastructure.settings import get_settings

# Singleton instance
_gateway: AccountGateway | None = None


def get_gateway() -> AccountGateway:
    """Get the process-wide gateway. It holds only read-only collaborators."""
    global _gateway
    if _gateway is None:
        settings = get_settings()
        _gateway = AccountGateway(
            resolver=ProviderResolver(get_provider_table()),
            sessions=MailSessionFactory.from_settings(settings),
            activity=activity_sink_from_settings(settings),
            message_format=MessageFormat(
                date_format=settings.date_format,
                unknown=settings.unknown_placeholder,
                no_subject=settings.no_subject_placeholder,
            ),
        )
    return _gateway
