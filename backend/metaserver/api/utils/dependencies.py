"""Common dependency injection utilities.

The renderer for the configured mode is built once by the application
factory and stored on ``app.state``; these dependencies hand it to routes.
"""
from fastapi import Request

from metaserver.services.ec2_service import EC2MetadataService
from metaserver.services.nocloud_service import NoCloudService


def get_ec2_service(request: Request) -> EC2MetadataService:
    """
    Get the EC2MetadataService instance.

    Args:
        request: Current request, used to reach the application state

    Returns:
        The process-wide EC2MetadataService
    """
    return request.app.state.ec2_service


def get_nocloud_service(request: Request) -> NoCloudService:
    """
    Get the NoCloudService instance.

    Args:
        request: Current request, used to reach the application state

    Returns:
        The process-wide NoCloudService
    """
    return request.app.state.nocloud_service
