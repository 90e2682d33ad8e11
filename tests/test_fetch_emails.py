"""
Tests for the email listing pipeline
"""
import pytest

from mailgate.application.use_cases import fetch_emails as fetch_module
from mailgate.application.use_cases.fetch_emails import FetchEmailsUseCase, MessageFormat
from mailgate.domain.errors import MailboxError

from .helpers import FakeImapSession, FakeSessionFactory, fetched


def _use_case(session: FakeImapSession, fmt: MessageFormat | None = None) -> FetchEmailsUseCase:
    return FetchEmailsUseCase(FakeSessionFactory(imap=session), fmt)


class TestFetchEmails:
    def test_fetches_newest_window_in_descending_order(self, credentials, imap_target):
        session = FakeImapSession(total=25, messages=[fetched(seq) for seq in range(16, 26)])

        messages = _use_case(session).run(credentials, imap_target, "INBOX", 10)

        assert session.selected == [("INBOX", True)]
        assert session.fetch_calls == [(16, 25)]
        assert [m.sequence_number for m in messages] == list(range(25, 15, -1))
        assert session.close_calls == 1

    def test_small_mailbox_returns_everything(self, credentials, imap_target):
        session = FakeImapSession(total=3, messages=[fetched(1), fetched(2), fetched(3)])

        messages = _use_case(session).run(credentials, imap_target, "INBOX", 50)

        assert session.fetch_calls == [(1, 3)]
        assert len(messages) == 3

    def test_empty_mailbox_skips_fetch(self, credentials, imap_target):
        session = FakeImapSession(total=0)

        assert _use_case(session).run(credentials, imap_target, "INBOX", 10) == []
        assert session.fetch_calls == []
        assert session.close_calls == 1

    def test_items_outside_window_are_dropped(self, credentials, imap_target):
        session = FakeImapSession(total=5, messages=[fetched(1), fetched(4), fetched(5)])

        messages = _use_case(session).run(credentials, imap_target, "INBOX", 2)

        assert [m.sequence_number for m in messages] == [5, 4]

    def test_message_fields(self, credentials, imap_target):
        session = FakeImapSession(
            total=1,
            messages=[
                fetched(1, uid=42, flags=("\\Seen", "\\Answered"), html="<b>Hi</b>"),
            ],
        )

        message = _use_case(session).run(credentials, imap_target, "INBOX", 10)[0]

        assert message.uid == 42
        assert message.is_unread is False
        assert message.sender == "Alice <alice@example.com>"
        assert message.recipients == "bob@example.com"
        assert message.subject == "Hello"
        assert message.date == "06.10.2025, 10:30:00"
        assert message.body_text == "Hi Bob"
        assert message.body_html == "<b>Hi</b>"
        assert message.body == "<b>Hi</b>"

    def test_unread_when_seen_flag_absent(self, credentials, imap_target):
        session = FakeImapSession(total=1, messages=[fetched(1, flags=("\\Flagged",))])

        assert _use_case(session).run(credentials, imap_target, "INBOX", 10)[0].is_unread is True

    def test_placeholders_for_missing_headers(self, credentials, imap_target):
        session = FakeImapSession(total=1, messages=[fetched(1, subject=None, sender=None, to=None, date=None)])

        message = _use_case(session).run(credentials, imap_target, "INBOX", 10)[0]

        assert message.sender == "Unknown"
        assert message.recipients == "Unknown"
        assert message.subject == "No subject"
        assert message.date == "Unknown"
        assert message.timestamp is None

    def test_custom_format(self, credentials, imap_target):
        session = FakeImapSession(total=1, messages=[fetched(1, subject=None)])
        fmt = MessageFormat(date_format="%Y-%m-%d", unknown="?", no_subject="(none)")

        message = _use_case(session, fmt).run(credentials, imap_target, "INBOX", 10)[0]

        assert message.subject == "(none)"
        assert message.date == "2025-10-06"

    def test_unparseable_message_is_skipped(self, credentials, imap_target, monkeypatch):
        real_parse = fetch_module.parse_rfc822
        broken = fetched(2, subject="broken").raw

        def parse(raw):
            if raw == broken:
                raise ValueError("bad MIME")
            return real_parse(raw)

        monkeypatch.setattr(fetch_module, "parse_rfc822", parse)
        session = FakeImapSession(total=3, messages=[fetched(1), fetched(2, subject="broken"), fetched(3)])

        messages = _use_case(session).run(credentials, imap_target, "INBOX", 10)

        assert [m.sequence_number for m in messages] == [3, 1]
        assert session.close_calls == 1

    @pytest.mark.parametrize("stage", ["select", "fetch"])
    def test_mailbox_failure_aborts_and_closes(self, credentials, imap_target, stage):
        error = MailboxError("NO such mailbox")
        session = FakeImapSession(
            total=5,
            messages=[fetched(5)],
            select_error=error if stage == "select" else None,
            fetch_error=error if stage == "fetch" else None,
        )

        with pytest.raises(MailboxError):
            _use_case(session).run(credentials, imap_target, "Nope", 10)

        assert session.close_calls == 1
