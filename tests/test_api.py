"""
Tests for the HTTP API
"""
import pytest
from fastapi.testclient import TestClient

from mailgate.api.dependencies import get_gateway
from mailgate.api.main import create_app
from mailgate.application.gateway import AccountGateway
from mailgate.domain.entities.connection import Protocol
from mailgate.domain.entities.folder import MailboxTreeNode
from mailgate.domain.errors import MailboxError, MailConnectionError

from .helpers import FakeImapSession, FakeSessionFactory, FakeSmtpSession, RecordingActivitySink, fetched

ACCOUNT = {"email": "user@gmail.com", "password": "app-password"}


@pytest.fixture
def sessions() -> FakeSessionFactory:
    return FakeSessionFactory(
        imap=FakeImapSession(
            total=2,
            messages=[fetched(1, flags=("\\Seen",)), fetched(2, html="<p>Hi</p>", attachment=("a.txt", b"abc"))],
            tree=[MailboxTreeNode("INBOX", "/", children=(MailboxTreeNode("Sent", "/"),))],
        ),
        smtp=FakeSmtpSession(),
    )


@pytest.fixture
def app(resolver, sessions):
    app = create_app()
    gateway = AccountGateway(resolver=resolver, sessions=sessions, activity=RecordingActivitySink())
    app.dependency_overrides[get_gateway] = lambda: gateway
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}


class TestConnectionEndpoint:
    def test_success(self, client):
        response = client.post("/api/test-connection", json=ACCOUNT)

        assert response.status_code == 200
        assert response.json() == {"success": True, "imap": True, "smtp": True, "error": None}

    def test_partial_failure_is_a_normal_result(self, client, sessions):
        sessions.smtp_error = MailConnectionError(Protocol.SMTP, "auth rejected")

        response = client.post("/api/test-connection", json=ACCOUNT)

        assert response.status_code == 200
        assert response.json() == {"success": False, "imap": True, "smtp": False, "error": "SMTP: auth rejected"}

    def test_custom_server_fields(self, client, sessions):
        body = {
            "email": "me@example.org",
            "password": "pw",
            "imapHost": "mail.example.org",
            "imapPort": 993,
            "smtpHost": "mail.example.org",
            "smtpPort": 465,
        }

        assert client.post("/api/test-connection", json=body).json()["success"] is True
        assert sessions.smtp_targets[0].use_implicit_tls is True

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "user@gmail.com"},
            {"email": "user@gmail.com", "password": ""},
            {"email": "not-an-address", "password": "pw"},
            {"email": "user@gmail.com", "password": "pw", "imapPort": 70000},
        ],
    )
    def test_invalid_requests(self, client, body):
        assert client.post("/api/test-connection", json=body).status_code == 422


class TestFetchEndpoint:
    def test_emails_newest_first(self, client):
        response = client.post("/api/fetch-emails", json={**ACCOUNT, "count": 10})

        data = response.json()
        assert data["success"] is True
        assert data["count"] == 2
        newest, oldest = data["emails"]
        assert newest["seqno"] == 2
        assert newest["from"] == "Alice <alice@example.com>"
        assert newest["unread"] is True
        assert newest["body"] == "<p>Hi</p>"
        assert newest["bodyText"] == "Hi Bob"
        assert newest["date"] == "06.10.2025, 10:30:00"
        assert newest["attachments"] == [
            {"filename": "a.txt", "contentType": "application/octet-stream", "size": 3, "contentId": None}
        ]
        assert oldest["unread"] is False
        assert oldest["flags"] == ["\\Seen"]

    def test_count_is_capped(self, client, sessions):
        sessions.imap.total = 1000

        client.post("/api/fetch-emails", json={**ACCOUNT, "count": 5000})

        assert sessions.imap.fetch_calls == [(801, 1000)]

    def test_default_count(self, client, sessions):
        sessions.imap.total = 50

        client.post("/api/fetch-emails", json=ACCOUNT)

        assert sessions.imap.fetch_calls == [(41, 50)]

    def test_mailbox_error_body(self, client, sessions):
        sessions.imap.select_error = MailboxError("IMAP SELECT Nope failed: Mailbox doesn't exist")

        response = client.post("/api/fetch-emails", json={**ACCOUNT, "folder": "Nope"})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "IMAP SELECT Nope failed: Mailbox doesn't exist",
            "protocol": "imap",
        }

    def test_unresolved_custom_domain(self, client):
        response = client.post("/api/fetch-emails", json={"email": "me@example.org", "password": "pw"})

        assert response.json()["success"] is False
        assert response.json()["protocol"] == "imap"


class TestSendEndpoint:
    def test_send(self, client, sessions):
        response = client.post(
            "/api/send-email",
            json={**ACCOUNT, "to": "friend@example.com", "subject": "Hi", "text": "line1\nline2"},
        )

        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Email sent successfully"
        assert data["receipt"]["accepted"] == ["friend@example.com"]
        sent = sessions.smtp.sent[0]
        assert sent["To"] == "friend@example.com"
        assert sent.get_body(("html",)).get_content().strip() == "line1<br>line2"

    def test_recipient_list(self, client, sessions):
        client.post("/api/send-email", json={**ACCOUNT, "to": ["a@example.com", "b@example.com"], "subject": "s"})

        assert sessions.smtp.sent[0]["To"] == "a@example.com, b@example.com"

    def test_missing_recipient(self, client):
        assert client.post("/api/send-email", json={**ACCOUNT, "to": " "}).status_code == 422


class TestMarkReadEndpoint:
    def test_mark_read(self, client, sessions):
        response = client.post("/api/mark-read", json={**ACCOUNT, "messageIds": [101, 102]})

        assert response.json() == {"success": True, "message": "Messages marked as read"}
        assert sessions.imap.flags_added == [((101, 102), "\\Seen")]

    def test_empty_id_list(self, client):
        assert client.post("/api/mark-read", json={**ACCOUNT, "messageIds": []}).status_code == 422


class TestFoldersEndpoint:
    def test_folders(self, client):
        response = client.post("/api/get-folders", json=ACCOUNT)

        assert response.json()["folders"] == [
            {"name": "INBOX", "delimiter": "/", "hasChildren": True, "attributes": []},
            {"name": "INBOX/Sent", "delimiter": "/", "hasChildren": False, "attributes": []},
        ]


class TestProvidersEndpoint:
    def test_known_provider(self, client):
        data = client.get("/api/providers", params={"email": "user@gmail.com"}).json()

        assert data["key"] == "gmail"
        assert data["imap"] == {"host": "imap.gmail.com", "port": 993, "secure": True}
        assert data["smtp"] == {"host": "smtp.gmail.com", "port": 587, "secure": False}
        assert data["requiresAppPassword"] is True
        assert data["custom"] is False

    def test_unknown_domain(self, client):
        data = client.get("/api/providers", params={"email": "user@example.org"}).json()

        assert data["custom"] is True
        assert data["imap"] is None


def test_unexpected_error_is_500(app, sessions):
    sessions.imap_error = RuntimeError("boom")
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/api/get-folders", json=ACCOUNT)

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error", "protocol": None}
