"""IMAP session implementation."""
