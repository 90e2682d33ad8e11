"""SMTP session implementation."""
