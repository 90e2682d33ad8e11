"""
API routes for the mail gateway.

Handlers are plain `def` so FastAPI runs each request in its own worker
thread; the blocking IMAP/SMTP calls never stall the event loop.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from mailgate.api.dependencies import get_gateway
from mailgate.api.schemas import (
    ConnectionTestRequest,
    ConnectionTestResponse,
    EmailOut,
    FetchEmailsRequest,
    FetchEmailsResponse,
    FolderOut,
    FoldersRequest,
    FoldersResponse,
    HealthResponse,
    MarkReadRequest,
    MarkReadResponse,
    ProviderOut,
    ReceiptOut,
    SendEmailRequest,
    SendEmailResponse,
)
from mailgate.application.gateway import AccountGateway
from mailgate.infrastructure import get_settings

router = APIRouter(prefix="/api", tags=["mail"])
health_router = APIRouter(tags=["health"])


# ============================================================================
# Mail Endpoints
# ============================================================================


@router.post("/test-connection", response_model=ConnectionTestResponse)
def test_connection(
    request: ConnectionTestRequest,
    gateway: AccountGateway = Depends(get_gateway),
) -> ConnectionTestResponse:
    """Check IMAP and SMTP separately and report both outcomes."""
    report = gateway.test_connection(request.to_params())
    return ConnectionTestResponse(
        success=report.success,
        imap=report.imap,
        smtp=report.smtp,
        error=report.error_message,
    )


@router.post("/fetch-emails", response_model=FetchEmailsResponse)
def fetch_emails(
    request: FetchEmailsRequest,
    gateway: AccountGateway = Depends(get_gateway),
) -> FetchEmailsResponse:
    """Return the newest messages of a folder, newest first, without marking them read."""
    settings = get_settings()
    count = min(request.count or settings.default_fetch_count, settings.max_fetch_count)

    messages = gateway.fetch_emails(request.to_params(), folder=request.folder, count=count)
    emails = [EmailOut.from_domain(m) for m in messages]
    return FetchEmailsResponse(emails=emails, count=len(emails))


@router.post("/send-email", response_model=SendEmailResponse)
def send_email(
    request: SendEmailRequest,
    gateway: AccountGateway = Depends(get_gateway),
) -> SendEmailResponse:
    receipt = gateway.send_email(request.to_params(), to=request.to, subject=request.subject, text=request.text)
    return SendEmailResponse(receipt=ReceiptOut.from_domain(receipt))


@router.post("/mark-read", response_model=MarkReadResponse)
def mark_read(
    request: MarkReadRequest,
    gateway: AccountGateway = Depends(get_gateway),
) -> MarkReadResponse:
    gateway.mark_read(request.to_params(), request.message_ids)
    return MarkReadResponse()


@router.post("/get-folders", response_model=FoldersResponse)
def get_folders(
    request: FoldersRequest,
    gateway: AccountGateway = Depends(get_gateway),
) -> FoldersResponse:
    folders = gateway.list_folders(request.to_params())
    return FoldersResponse(folders=[FolderOut.from_domain(f) for f in folders])


@router.get("/providers", response_model=ProviderOut)
def resolve_provider(
    email: str = Query(..., min_length=1, description="Address to resolve"),
    gateway: AccountGateway = Depends(get_gateway),
) -> ProviderOut:
    """Provider defaults for an address. No network access."""
    return ProviderOut.from_domain(gateway.describe_provider(email))


# ============================================================================
# Health Endpoints
# ============================================================================


@health_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
    )


@health_router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}
