"""Request utility functions."""
from fastapi import Request

from metaserver.exceptions import BackendError
from metaserver.services.vmregistry_service import strip_port


def caller_address(request: Request) -> str:
    """
    Extract the address the request came from, without any port.

    Args:
        request: FastAPI Request object

    Returns:
        Caller IP address as text

    Raises:
        BackendError: the server did not report a client address
    """
    if request.client is None or not request.client.host:
        raise BackendError("request has no client address")
    return strip_port(request.client.host)
