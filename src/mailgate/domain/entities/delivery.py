from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DeliveryReceipt:
    message_id: str
    accepted: tuple[str, ...]
    rejected: dict[str, str] = field(default_factory=dict)
