from __future__ import annotations
import ssl


def build_ssl_context(verify: bool) -> ssl.SSLContext:
    """
    TLS context for mail sessions. With verify=False certificate and hostname
    checks are off so self-signed and test servers are reachable.
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
