"""Mapping of metadata failures onto HTTP responses."""
from fastapi import FastAPI, Request, status
from fastapi.responses import Response

from metaserver.exceptions import MetaserverError


def server_error() -> Response:
    """
    Return an empty 500 Internal Server Error response.

    Metadata clients (cloud-init, ec2metadata) treat any non-200 as a miss.

    Returns:
        Response with status 500 and zero-length body
    """
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def metaserver_error_handler(request: Request, exc: MetaserverError) -> Response:
    """Handle backend, validation and rendering failures raised by a renderer."""
    return server_error()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MetaserverError, metaserver_error_handler)
