"""Mail Gateway - HTTP access to arbitrary IMAP/SMTP mailboxes."""

__version__ = "0.1.0"
