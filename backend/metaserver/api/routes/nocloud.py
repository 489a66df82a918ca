"""NoCloud datasource API routes (``/meta-data`` and ``/user-data``)."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from metaserver.api.utils.dependencies import get_nocloud_service
from metaserver.api.utils.request import caller_address
from metaserver.services.nocloud_service import NoCloudService

router = APIRouter(tags=["NoCloud"])


@router.get("/meta-data", response_class=PlainTextResponse)
async def metadata(request: Request, service: NoCloudService = Depends(get_nocloud_service)):
    """Return the meta-data YAML document for the calling VM."""
    return await service.metadata(caller_address(request))


@router.get("/user-data", response_class=PlainTextResponse)
async def userdata(request: Request, service: NoCloudService = Depends(get_nocloud_service)):
    """Return the rendered user-data for the calling VM."""
    return await service.userdata(caller_address(request))
