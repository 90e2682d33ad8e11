"""Static provider table: built-in defaults, optionally replaced from a JSON file."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from mailgate.application.providers import SMTPS_PORT, ProviderRule, ProviderTable
from mailgate.domain.entities.connection import CUSTOM_PROFILE, ConnectionTarget, ProviderProfile
from mailgate.infrastructure.settings import get_settings


def _imap(host: str) -> ConnectionTarget:
    return ConnectionTarget(host=host, port=993, use_implicit_tls=True)


def _pop3(host: str) -> ConnectionTarget:
    return ConnectionTarget(host=host, port=995, use_implicit_tls=True)


def _smtp(host: str, port: int = 587) -> ConnectionTarget:
    return ConnectionTarget(host=host, port=port, use_implicit_tls=port == SMTPS_PORT)


# Order matters: the first rule whose suffix matches the address domain wins.
DEFAULT_RULES: tuple[ProviderRule, ...] = (
    ProviderRule(
        suffixes=("gmail.com",),
        profile=ProviderProfile(
            key="gmail",
            display_name="Gmail",
            imap=_imap("imap.gmail.com"),
            pop3=_pop3("pop.gmail.com"),
            smtp=_smtp("smtp.gmail.com"),
            requires_app_password=True,
            credential_help_url="https://myaccount.google.com/apppasswords",
        ),
    ),
    ProviderRule(
        suffixes=("yandex.ru", "yandex.com", "yandex.ua"),
        profile=ProviderProfile(
            key="yandex",
            display_name="Yandex",
            imap=_imap("imap.yandex.ru"),
            pop3=_pop3("pop.yandex.ru"),
            smtp=_smtp("smtp.yandex.ru"),
            requires_app_password=True,
            credential_help_url="https://passport.yandex.ru/profile/app-passwords",
        ),
    ),
    ProviderRule(
        suffixes=("mail.ru", "inbox.ru", "bk.ru", "list.ru"),
        profile=ProviderProfile(
            key="mailru",
            display_name="Mail.ru",
            imap=_imap("imap.mail.ru"),
            pop3=_pop3("pop.mail.ru"),
            smtp=_smtp("smtp.mail.ru", SMTPS_PORT),
            requires_app_password=True,
            credential_help_url="https://help.mail.ru/mail/security/protection/external",
        ),
    ),
    ProviderRule(
        suffixes=("gmx.com", "gmx.net"),
        profile=ProviderProfile(
            key="gmx",
            display_name="GMX",
            imap=_imap("imap.gmx.com"),
            pop3=_pop3("pop.gmx.com"),
            smtp=_smtp("mail.gmx.com"),
            requires_app_password=False,
        ),
    ),
    ProviderRule(
        suffixes=("zoho.com", "zoho.eu"),
        profile=ProviderProfile(
            key="zoho",
            display_name="Zoho Mail",
            imap=_imap("imap.zoho.com"),
            pop3=_pop3("pop.zoho.com"),
            smtp=_smtp("smtp.zoho.com", SMTPS_PORT),
            requires_app_password=True,
            credential_help_url="https://accounts.zoho.com/home#security/app_password",
        ),
    ),
    ProviderRule(
        suffixes=("yahoo.com", "yahoo.co.uk"),
        profile=ProviderProfile(
            key="yahoo",
            display_name="Yahoo",
            imap=_imap("imap.mail.yahoo.com"),
            pop3=_pop3("pop.mail.yahoo.com"),
            smtp=_smtp("smtp.mail.yahoo.com"),
            requires_app_password=True,
            credential_help_url="https://login.yahoo.com/account/security/app-passwords",
        ),
    ),
    ProviderRule(
        suffixes=("outlook.com", "hotmail.com", "live.com", "office365.com"),
        profile=ProviderProfile(
            key="outlook",
            display_name="Outlook/Hotmail",
            imap=_imap("outlook.office365.com"),
            pop3=_pop3("outlook.office365.com"),
            smtp=_smtp("smtp-mail.outlook.com"),
            requires_app_password=True,
            credential_help_url="https://account.microsoft.com/security/app-passwords",
        ),
    ),
)

DEFAULT_PROVIDER_TABLE = ProviderTable(rules=DEFAULT_RULES, custom=CUSTOM_PROFILE)


# ============================================================================
# File format
# ============================================================================


class TargetEntry(BaseModel):
    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    secure: Optional[bool] = None


class ProviderEntry(BaseModel):
    key: str = Field(min_length=1)
    name: str
    suffixes: list[str] = Field(min_length=1)
    imap: Optional[TargetEntry] = None
    pop3: Optional[TargetEntry] = None
    smtp: Optional[TargetEntry] = None
    requires_app_password: bool = False
    auth_url: Optional[str] = None

    def to_rule(self) -> ProviderRule:
        def target(entry: Optional[TargetEntry], implicit_default: bool) -> Optional[ConnectionTarget]:
            if entry is None:
                return None
            implicit = implicit_default if entry.secure is None else entry.secure
            return ConnectionTarget(host=entry.host, port=entry.port, use_implicit_tls=implicit)

        smtp = None
        if self.smtp is not None:
            smtp = ConnectionTarget(
                host=self.smtp.host,
                port=self.smtp.port,
                use_implicit_tls=self.smtp.port == SMTPS_PORT,
            )

        return ProviderRule(
            suffixes=tuple(s.lower() for s in self.suffixes),
            profile=ProviderProfile(
                key=self.key,
                display_name=self.name,
                imap=target(self.imap, True),
                pop3=target(self.pop3, True),
                smtp=smtp,
                requires_app_password=self.requires_app_password,
                credential_help_url=self.auth_url,
            ),
        )


class ProviderFile(BaseModel):
    providers: list[ProviderEntry]


def load_provider_table(path: Path | None = None) -> ProviderTable:
    """Build the provider table once. Invalid files fail start-up loudly."""
    if path is None:
        logger.info(f"Using built-in provider table ({len(DEFAULT_RULES)} providers)")
        return DEFAULT_PROVIDER_TABLE

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    parsed = ProviderFile.model_validate(data)
    table = ProviderTable(rules=tuple(entry.to_rule() for entry in parsed.providers), custom=CUSTOM_PROFILE)
    logger.info(f"Loaded {len(table)} providers from {path}")
    return table


@lru_cache
def get_provider_table() -> ProviderTable:
    """Process-wide provider table, read-only after the first call."""
    return load_provider_table(get_settings().providers_file)
