from __future__ import annotations
from typing import Any, Mapping


class ActivitySink:
    """One-way activity reporting. Implementations must never raise."""

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError
