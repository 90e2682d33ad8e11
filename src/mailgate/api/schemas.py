"""Request/response models for the HTTP API.

Bodies use camelCase on the wire (snake_case is accepted too). Message
payloads keep the field names the web client has always consumed
(`seqno`, `unread`, `from`, `body`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PositiveInt, SecretStr, field_validator
from pydantic.alias_generators import to_camel

from mailgate.application.gateway import AccountParams
from mailgate.domain.entities.connection import ConnectionTarget, Credentials, ProviderProfile
from mailgate.domain.entities.delivery import DeliveryReceipt
from mailgate.domain.entities.folder import FolderNode
from mailgate.domain.entities.mailbox_message import Attachment, MailboxMessage


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Requests
# ============================================================================


class AccountRequest(ApiModel):
    """Credentials common to every operation."""

    email: EmailStr
    password: SecretStr
    verify_tls: Optional[bool] = Field(None, description="Force certificate validation on/off")

    @field_validator("password")
    @classmethod
    def _password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value

    def credentials(self) -> Credentials:
        return Credentials(address=str(self.email), secret=self.password.get_secret_value())

    def to_params(self) -> AccountParams:
        return AccountParams(
            credentials=self.credentials(),
            imap_host=getattr(self, "imap_host", None),
            imap_port=getattr(self, "imap_port", None),
            imap_tls=getattr(self, "imap_tls", None),
            smtp_host=getattr(self, "smtp_host", None),
            smtp_port=getattr(self, "smtp_port", None),
            verify_tls=self.verify_tls,
        )


class ImapAccountRequest(AccountRequest):
    imap_host: Optional[str] = Field(None, min_length=1)
    imap_port: Optional[int] = Field(None, ge=1, le=65535)
    imap_tls: Optional[bool] = Field(None, description="Implicit TLS (default) or STARTTLS")


class SmtpAccountRequest(AccountRequest):
    smtp_host: Optional[str] = Field(None, min_length=1)
    smtp_port: Optional[int] = Field(None, ge=1, le=65535)


class ConnectionTestRequest(ImapAccountRequest, SmtpAccountRequest):
    pass


class FetchEmailsRequest(ImapAccountRequest):
    folder: str = Field("INBOX", min_length=1)
    count: Optional[PositiveInt] = None


class SendEmailRequest(SmtpAccountRequest):
    to: str | list[EmailStr] = Field(..., description="Recipient address(es)")
    subject: str = ""
    text: str = ""

    @field_validator("to")
    @classmethod
    def _recipients_present(cls, value: str | list[str]) -> str | list[str]:
        if not value or (isinstance(value, str) and not value.strip()):
            raise ValueError("at least one recipient is required")
        return value


class MarkReadRequest(ImapAccountRequest):
    message_ids: list[PositiveInt] = Field(..., min_length=1)


class FoldersRequest(ImapAccountRequest):
    pass


# ============================================================================
# Responses
# ============================================================================


class AttachmentOut(ApiModel):
    filename: str
    content_type: str
    size: int
    content_id: Optional[str] = None

    @classmethod
    def from_domain(cls, attachment: Attachment) -> "AttachmentOut":
        return cls(
            filename=attachment.filename,
            content_type=attachment.content_type,
            size=attachment.size_bytes,
            content_id=attachment.content_id,
        )


class EmailOut(ApiModel):
    seqno: int
    uid: Optional[int] = None
    flags: list[str]
    unread: bool
    sender: str = Field(alias="from")
    to: str
    subject: str
    date: str
    timestamp: Optional[datetime] = None
    body: str
    body_text: str
    body_html: Optional[str] = None
    attachments: list[AttachmentOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, message: MailboxMessage) -> "EmailOut":
        return cls(
            seqno=message.sequence_number,
            uid=message.uid,
            flags=sorted(message.flags),
            unread=message.is_unread,
            sender=message.sender,
            to=message.recipients,
            subject=message.subject,
            date=message.date,
            timestamp=message.timestamp,
            body=message.body,
            body_text=message.body_text,
            body_html=message.body_html,
            attachments=[AttachmentOut.from_domain(a) for a in message.attachments],
        )


class FolderOut(ApiModel):
    name: str
    delimiter: Optional[str] = None
    has_children: bool
    attributes: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, folder: FolderNode) -> "FolderOut":
        return cls(
            name=folder.name,
            delimiter=folder.delimiter,
            has_children=folder.has_children,
            attributes=list(folder.attributes),
        )


class ReceiptOut(ApiModel):
    message_id: str
    accepted: list[str]
    rejected: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, receipt: DeliveryReceipt) -> "ReceiptOut":
        return cls(
            message_id=receipt.message_id,
            accepted=list(receipt.accepted),
            rejected=dict(receipt.rejected),
        )


class TargetOut(ApiModel):
    host: str
    port: int
    secure: bool

    @classmethod
    def from_domain(cls, target: Optional[ConnectionTarget]) -> Optional["TargetOut"]:
        if target is None:
            return None
        return cls(host=target.host, port=target.port, secure=target.use_implicit_tls)


class ProviderOut(ApiModel):
    key: str
    name: str
    imap: Optional[TargetOut] = None
    pop3: Optional[TargetOut] = None
    smtp: Optional[TargetOut] = None
    requires_app_password: bool
    auth_url: Optional[str] = None
    custom: bool

    @classmethod
    def from_domain(cls, profile: ProviderProfile) -> "ProviderOut":
        return cls(
            key=profile.key,
            name=profile.display_name,
            imap=TargetOut.from_domain(profile.imap),
            pop3=TargetOut.from_domain(profile.pop3),
            smtp=TargetOut.from_domain(profile.smtp),
            requires_app_password=profile.requires_app_password,
            auth_url=profile.credential_help_url,
            custom=profile.is_custom,
        )


class ConnectionTestResponse(ApiModel):
    success: bool
    imap: bool
    smtp: bool
    error: Optional[str] = None


class FetchEmailsResponse(ApiModel):
    success: bool = True
    emails: list[EmailOut]
    count: int


class SendEmailResponse(ApiModel):
    success: bool = True
    message: str = "Email sent successfully"
    receipt: ReceiptOut


class MarkReadResponse(ApiModel):
    success: bool = True
    message: str = "Messages marked as read"


class FoldersResponse(ApiModel):
    success: bool = True
    folders: list[FolderOut]


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
    protocol: Optional[str] = None


class HealthResponse(ApiModel):
    status: str
    timestamp: str
    version: str
