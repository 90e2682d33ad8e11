"""Parsing helpers for raw imaplib FETCH and LIST responses."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from loguru import logger

from mailgate.application.ports.mail_sessions import FetchedMessage
from mailgate.domain.entities.folder import MailboxTreeNode

_SEQ_RE = re.compile(rb"^\s*(\d+) \(")
_UID_RE = re.compile(rb"\bUID (\d+)")
_FLAGS_RE = re.compile(rb"\bFLAGS \(([^)]*)\)")
_LIST_RE = re.compile(r'^\((?P<attrs>[^)]*)\) (?P<delim>"(?:[^"\\]|\\.)*"|NIL)\s*(?P<name>.*)$')
_LITERAL_RE = re.compile(r"\{\d+\}$")


@dataclass(frozen=True)
class MailboxListing:
    name: str
    delimiter: Optional[str]
    attributes: tuple[str, ...] = ()


# ============================================================================
# Mailbox names (RFC 3501 modified UTF-7)
# ============================================================================


def _b64_to_text(chunk: str) -> str:
    padded = chunk.replace(",", "/") + "=" * (-len(chunk) % 4)
    return base64.b64decode(padded).decode("utf-16-be")


def _decode_shift(match: re.Match) -> str:
    chunk = match.group(1)
    if not chunk:
        return "&"
    try:
        return _b64_to_text(chunk)
    except (binascii.Error, UnicodeDecodeError):
        # non-compliant servers send a bare "&"; keep such names as they are
        return match.group(0)


def decode_mailbox_name(name: str) -> str:
    return re.sub(r"&([^-]*)-", _decode_shift, name)


def encode_mailbox_name(name: str) -> str:
    out: list[str] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            raw = "".join(pending).encode("utf-16-be")
            out.append("&" + base64.b64encode(raw).decode("ascii").rstrip("=").replace("/", ",") + "-")
            pending.clear()

    for ch in name:
        if 0x20 <= ord(ch) <= 0x7E:
            flush()
            out.append("&-" if ch == "&" else ch)
        else:
            pending.append(ch)
    flush()
    return "".join(out)


def quote_mailbox(name: str) -> str:
    escaped = encode_mailbox_name(name).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


# ============================================================================
# FETCH
# ============================================================================


@dataclass
class _PendingFetch:
    meta: bytes
    raw: bytes
    trailer: list[bytes] = field(default_factory=list)


def _to_fetched(item: _PendingFetch) -> Optional[FetchedMessage]:
    meta = item.meta + b" " + b" ".join(item.trailer)
    seq = _SEQ_RE.match(meta)
    if not seq:
        logger.debug(f"Ignoring FETCH item without sequence number: {item.meta[:60]!r}")
        return None
    uid = _UID_RE.search(meta)
    flags = _FLAGS_RE.search(meta)
    return FetchedMessage(
        sequence_number=int(seq.group(1)),
        uid=int(uid.group(1)) if uid else None,
        flags=frozenset(flags.group(1).decode("ascii", "replace").split()) if flags else frozenset(),
        raw=item.raw or b"",
    )


def parse_fetch_response(data: Iterable[Any]) -> list[FetchedMessage]:
    """Group an imaplib FETCH result into one FetchedMessage per message.

    Literal bodies arrive as (meta, bytes) tuples; attributes the server sends
    after the literal arrive as a following bytes item (often just b")").
    """
    pending: list[_PendingFetch] = []
    for item in data or ():
        if isinstance(item, tuple):
            pending.append(_PendingFetch(meta=item[0], raw=item[1]))
        elif isinstance(item, bytes):
            if _SEQ_RE.match(item) or not pending:
                # unsolicited FETCH (e.g. a flag update) without a body
                continue
            pending[-1].trailer.append(item)

    messages = [m for m in (_to_fetched(p) for p in pending) if m is not None]
    return messages


# ============================================================================
# LIST
# ============================================================================


def parse_list_response(data: Iterable[Any]) -> list[MailboxListing]:
    listings: list[MailboxListing] = []
    for item in data or ():
        if item is None:
            continue
        if isinstance(item, tuple):
            line = item[0].decode("utf-8", "replace")
            literal_name = item[1].decode("utf-8", "replace")
        else:
            line = item.decode("utf-8", "replace")
            literal_name = None

        match = _LIST_RE.match(line.strip())
        if not match:
            logger.debug(f"Skipping unparseable LIST line: {line!r}")
            continue

        delim = match.group("delim")
        delimiter = None if delim == "NIL" else _unquote(delim)
        if literal_name is not None and _LITERAL_RE.search(match.group("name")):
            name = literal_name
        else:
            name = _unquote(match.group("name").strip())

        listings.append(
            MailboxListing(
                name=decode_mailbox_name(name),
                delimiter=delimiter,
                attributes=tuple(match.group("attrs").split()),
            )
        )
    return listings


@dataclass
class _Branch:
    name: str
    delimiter: Optional[str]
    attributes: tuple[str, ...] = ()
    children: dict[str, "_Branch"] = field(default_factory=dict)

    def freeze(self) -> MailboxTreeNode:
        return MailboxTreeNode(
            name=self.name,
            delimiter=self.delimiter,
            attributes=self.attributes,
            children=tuple(child.freeze() for child in self.children.values()),
        )


def build_mailbox_tree(listings: Iterable[MailboxListing]) -> list[MailboxTreeNode]:
    """Nest flat LIST entries by their hierarchy delimiter, keeping server order."""
    roots: dict[str, _Branch] = {}
    for listing in listings:
        parts = listing.name.split(listing.delimiter) if listing.delimiter else [listing.name]
        level = roots
        for depth, part in enumerate(parts):
            branch = level.get(part)
            if branch is None:
                branch = level[part] = _Branch(name=part, delimiter=listing.delimiter)
            if depth == len(parts) - 1:
                branch.attributes = listing.attributes
            level = branch.children
    return [branch.freeze() for branch in roots.values()]
