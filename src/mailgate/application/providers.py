"""Provider auto-detection and connection-target merging."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from mailgate.domain.entities.connection import (
    CUSTOM_PROFILE,
    ConnectionTarget,
    Credentials,
    Protocol,
    ProviderProfile,
)
from mailgate.domain.errors import ResolutionGap

SMTPS_PORT = 465


@dataclass(frozen=True)
class ProviderRule:
    """Domain suffixes that select one provider profile."""
    suffixes: tuple[str, ...]
    profile: ProviderProfile

    def matches(self, domain: str) -> bool:
        # whole labels only: "mail.ru" covers "corp.mail.ru" but not "gmail.ru"
        return any(domain == suffix or domain.endswith("." + suffix) for suffix in self.suffixes)


@dataclass(frozen=True)
class ProviderTable:
    """
    Ordered, read-only rule table. The first matching rule wins, so rule
    order is part of the resolution behaviour.
    """
    rules: tuple[ProviderRule, ...]
    custom: ProviderProfile = CUSTOM_PROFILE

    def __len__(self) -> int:
        return len(self.rules)

    def profiles(self) -> list[ProviderProfile]:
        return [rule.profile for rule in self.rules]


class ProviderResolver:
    def __init__(self, table: ProviderTable) -> None:
        self.table = table

    def resolve(self, address: str) -> ProviderProfile:
        """Map an email address to a provider profile. Never fails."""
        if not address or "@" not in address:
            return self.table.custom

        domain = address.rsplit("@", 1)[1].strip().lower()
        if not domain:
            return self.table.custom

        for rule in self.table.rules:
            if rule.matches(domain):
                return rule.profile

        return self.table.custom


def merge_target(
    protocol: Protocol,
    profile: ProviderProfile,
    host: Optional[str] = None,
    port: Optional[int] = None,
    use_implicit_tls: Optional[bool] = None,
    domain: str = "",
) -> ConnectionTarget | ResolutionGap:
    """Combine a resolved profile with caller-supplied connection fields.

    Precedence: the profile's target is used whenever the profile has one;
    caller values fill in only when it does not. SMTP TLS mode is always
    derived from the port (465 means implicit TLS, anything else STARTTLS).
    """
    resolved = profile.target_for(protocol)
    if resolved is not None:
        if host and (host, port) != (resolved.host, resolved.port):
            logger.debug(f"{protocol.value}: provider {profile.key} overrides caller target {host}:{port}")
        return resolved

    missing = tuple(name for name, value in (("host", host), ("port", port)) if not value)
    if missing:
        return ResolutionGap(protocol=protocol, domain=domain, missing=missing)

    if protocol is Protocol.SMTP:
        implicit = port == SMTPS_PORT
    else:
        implicit = True if use_implicit_tls is None else use_implicit_tls

    return ConnectionTarget(host=host, port=int(port), use_implicit_tls=implicit)


def resolve_target(
    resolver: ProviderResolver,
    protocol: Protocol,
    credentials: Credentials,
    host: Optional[str] = None,
    port: Optional[int] = None,
    use_implicit_tls: Optional[bool] = None,
) -> ConnectionTarget | ResolutionGap:
    profile = resolver.resolve(credentials.address)
    return merge_target(
        protocol,
        profile,
        host=host,
        port=port,
        use_implicit_tls=use_implicit_tls,
        domain=credentials.domain,
    )
