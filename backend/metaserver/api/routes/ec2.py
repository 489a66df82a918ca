"""EC2 metadata API routes (``/2009-04-04/meta-data/...``)."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from metaserver.api.utils.dependencies import get_ec2_service
from metaserver.api.utils.request import caller_address
from metaserver.services.ec2_service import API_VERSION, EC2MetadataService

router = APIRouter(prefix=f"/{API_VERSION}/meta-data", tags=["EC2 Metadata"])


@router.get("/", response_class=PlainTextResponse)
async def metadata_index(service: EC2MetadataService = Depends(get_ec2_service)):
    """List the metadata categories."""
    return service.metadata_index()


@router.get("/hostname", response_class=PlainTextResponse)
async def hostname(request: Request, service: EC2MetadataService = Depends(get_ec2_service)):
    """Return the calling VM's name."""
    return await service.hostname(caller_address(request))


@router.get("/instance-id", response_class=PlainTextResponse)
async def instance_id(request: Request, service: EC2MetadataService = Depends(get_ec2_service)):
    """Return the calling VM's instance id."""
    return await service.instance_id(caller_address(request))


@router.get("/public-keys")
async def public_keys_redirect(service: EC2MetadataService = Depends(get_ec2_service)):
    """Redirect to the directory form, as EC2 does. Backends are not queried."""
    return RedirectResponse(service.public_keys_redirect_url(), status_code=301)


@router.get("/public-keys/", response_class=PlainTextResponse)
async def public_keys(request: Request, service: EC2MetadataService = Depends(get_ec2_service)):
    """List the calling VM's keys as ``<index>=<label>``."""
    return await service.public_keys(caller_address(request))


@router.get("/public-keys/{index}/", response_class=PlainTextResponse)
async def public_key(
    index: str,
    request: Request,
    service: EC2MetadataService = Depends(get_ec2_service),
):
    """List the formats available for one key."""
    return await service.public_key(caller_address(request), index)


@router.get("/public-keys/{index}/openssh-key", response_class=PlainTextResponse)
async def public_key_data(
    index: str,
    request: Request,
    service: EC2MetadataService = Depends(get_ec2_service),
):
    """Return one key in OpenSSH ``authorized_keys`` form."""
    return await service.public_key_data(caller_address(request), index)
