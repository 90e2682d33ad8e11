"""Domain models, entities and errors."""

from mailgate.domain.entities.connection import (
    CUSTOM_PROFILE,
    ConnectionTarget,
    Credentials,
    Protocol,
    ProviderProfile,
)
from mailgate.domain.entities.delivery import DeliveryReceipt
from mailgate.domain.entities.folder import FolderNode, MailboxTreeNode
from mailgate.domain.entities.mailbox_message import Attachment, MailboxMessage
from mailgate.domain.errors import (
    GatewayError,
    MailboxError,
    MailConnectionError,
    PartialFailure,
    ResolutionGap,
    SendError,
    UnresolvedTargetError,
)

__all__ = [
    "CUSTOM_PROFILE",
    "Attachment",
    "ConnectionTarget",
    "Credentials",
    "DeliveryReceipt",
    "FolderNode",
    "MailboxMessage",
    "MailboxTreeNode",
    "Protocol",
    "ProviderProfile",
    "GatewayError",
    "MailboxError",
    "MailConnectionError",
    "PartialFailure",
    "ResolutionGap",
    "SendError",
    "UnresolvedTargetError",
]
