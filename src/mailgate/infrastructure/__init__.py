"""Infrastructure layer - mail protocols, configuration, logging, activity reporting."""

from mailgate.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
