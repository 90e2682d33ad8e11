from __future__ import annotations
from typing import Iterable

from mailgate.domain.entities.folder import FolderNode, MailboxTreeNode


def flatten(tree: Iterable[MailboxTreeNode], path_prefix: str = "") -> list[FolderNode]:
    """Flatten a mailbox hierarchy depth-first, parents before children."""
    folders: list[FolderNode] = []
    for node in tree:
        full_name = path_prefix + node.name
        folders.append(
            FolderNode(
                name=full_name,
                delimiter=node.delimiter,
                has_children=bool(node.children),
                attributes=node.attributes,
            )
        )
        if node.children:
            folders.extend(flatten(node.children, full_name + (node.delimiter or "")))
    return folders
