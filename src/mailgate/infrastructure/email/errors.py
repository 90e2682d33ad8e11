from __future__ import annotations
import smtplib


def describe_error(exc: BaseException) -> str:
    """Readable one-line message for imaplib / smtplib / socket exceptions."""
    if isinstance(exc, smtplib.SMTPResponseException):
        detail = exc.smtp_error
        if isinstance(detail, bytes):
            detail = detail.decode("utf-8", "replace")
        return f"{exc.smtp_code} {detail}".strip()

    if exc.args and isinstance(exc.args[0], bytes):
        return exc.args[0].decode("utf-8", "replace")

    return str(exc) or type(exc).__name__
