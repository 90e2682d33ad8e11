"""Mail protocol adapters (IMAP, SMTP, RFC 822 parsing)."""
