from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FetchWindow:
    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start + 1

    def as_sequence_set(self) -> str:
        return f"{self.start}:{self.end}"


def compute_fetch_window(total_messages: int, max_count: int) -> Optional[FetchWindow]:
    """Select the `max_count` most recently arrived messages by sequence position.

    Returns None for an empty mailbox (or a non-positive count).
    """
    if total_messages <= 0 or max_count <= 0:
        return None

    fetch_count = min(max_count, total_messages)
    start = max(1, total_messages - fetch_count + 1)
    return FetchWindow(start=start, end=total_messages)
