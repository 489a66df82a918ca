"""Shared HTTP client construction for the metadata backends."""
import logging
import ssl
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


def build_backend_client(
    base_url: str,
    token: str = "",
    ca_file: str = "",
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the long-lived client used for every call to one backend.

    Args:
        base_url: Backend root URL, e.g. ``https://vmregistry:9000``
        token: Bearer token; no Authorization header is sent when empty
        ca_file: CA bundle used to verify the backend's certificate
        timeout: Per-call timeout in seconds
        transport: Optional transport override (tests use ``httpx.MockTransport``)

    Returns:
        Configured ``httpx.AsyncClient``; the caller owns closing it
    """
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    verify: ssl.SSLContext | bool = True
    if ca_file:
        verify = ssl.create_default_context(cafile=ca_file)

    logger.debug("Backend client for %s (auth=%s, custom_ca=%s)", base_url, bool(token), bool(ca_file))
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        timeout=timeout,
        verify=verify,
        transport=transport,
    )
