from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MailboxTreeNode:
    """
    One level of a mailbox hierarchy as the server reported it.
    `name` is the local segment only; the full path is rebuilt when flattening.
    """
    name: str
    delimiter: str | None
    attributes: tuple[str, ...] = ()
    children: tuple["MailboxTreeNode", ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FolderNode:
    name: str                      # fully qualified
    delimiter: str | None
    has_children: bool
    attributes: tuple[str, ...] = ()
