"""
Shared test fixtures and configuration for pytest
"""
import pytest

from mailgate.application.gateway import AccountGateway, AccountParams
from mailgate.application.providers import ProviderResolver
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.infrastructure.provider_table import DEFAULT_PROVIDER_TABLE

from .helpers import FakeSessionFactory, RecordingActivitySink


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(address="user@gmail.com", secret="app-password")


@pytest.fixture
def custom_credentials() -> Credentials:
    return Credentials(address="user@example.org", secret="secret")


@pytest.fixture
def imap_target() -> ConnectionTarget:
    return ConnectionTarget(host="imap.example.org", port=993, use_implicit_tls=True)


@pytest.fixture
def smtp_target() -> ConnectionTarget:
    return ConnectionTarget(host="smtp.example.org", port=587, use_implicit_tls=False)


@pytest.fixture
def resolver() -> ProviderResolver:
    return ProviderResolver(DEFAULT_PROVIDER_TABLE)


@pytest.fixture
def activity() -> RecordingActivitySink:
    return RecordingActivitySink()


@pytest.fixture
def sessions() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def gateway(resolver, sessions, activity) -> AccountGateway:
    return AccountGateway(resolver=resolver, sessions=sessions, activity=activity)


@pytest.fixture
def gmail_params(credentials) -> AccountParams:
    return AccountParams(credentials=credentials)
