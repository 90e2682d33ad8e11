"""Activity sinks. Recording is fire-and-forget: failures are logged, never raised."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import httpx
from loguru import logger

from mailgate.application.ports.activity_sink import ActivitySink
from mailgate.infrastructure.settings import Settings, get_settings


class LoggingActivitySink(ActivitySink):
    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        logger.bind(activity=event, payload=dict(payload)).info(f"Activity {event}")


class HttpActivitySink(ActivitySink):
    """POST activity events to an external API."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        body = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": "mail_gateway",
            **payload,
        }
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json=body, headers=headers)
            if response.status_code >= 400:
                logger.warning(f"Activity API rejected {event}: HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Activity API unreachable for {event}: {e}")


class FilteringActivitySink(ActivitySink):
    """Forward only allow-listed events; a sink failure never reaches the caller."""

    def __init__(self, inner: ActivitySink, events: Collection[str]) -> None:
        self.inner = inner
        self.events = frozenset(events)

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        if event not in self.events:
            return
        try:
            self.inner.record(event, payload)
        except Exception as e:
            logger.warning(f"Activity sink failed for {event}: {e}")


class CompositeActivitySink(ActivitySink):
    def __init__(self, *sinks: ActivitySink) -> None:
        self.sinks = sinks

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        for sink in self.sinks:
            sink.record(event, payload)


def activity_sink_from_settings(settings: Settings | None = None) -> ActivitySink:
    settings = settings or get_settings()
    sinks: list[ActivitySink] = [LoggingActivitySink()]
    if settings.activity_api_url:
        api_key = settings.activity_api_key.get_secret_value() if settings.activity_api_key else None
        sinks.append(HttpActivitySink(settings.activity_api_url, api_key=api_key, timeout=settings.activity_timeout))
        logger.info(f"Activity events forwarded to {settings.activity_api_url}")
    return FilteringActivitySink(CompositeActivitySink(*sinks), settings.activity_events)
