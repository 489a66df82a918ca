"""VM registry client: resolves a caller address to its VM."""
import ipaddress
import logging

import httpx
import pydantic

from metaserver.exceptions import BackendError
from metaserver.schemas.backend import VM, FindBy, FindRequest

logger = logging.getLogger(__name__)


def strip_port(address: str) -> str:
    """Remove a ``:port`` suffix from a caller address.

    Bare IPv4/IPv6 literals are returned unchanged and ``[v6]:port`` loses
    its brackets; anything else is cut at the first colon.
    """
    address = address.strip()
    try:
        ipaddress.ip_address(address)
        return address
    except ValueError:
        pass

    if address.startswith("["):
        host, sep, _ = address[1:].partition("]")
        if sep:
            return host

    return address.split(":", 1)[0]


class VMRegistryService:
    """Client for the VM registry's find-by-IP call (implements VMResolver)."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def resolve(self, address: str) -> VM:
        """Find the VM registered for ``address``.

        Raises:
            BackendError: transport failure, non-2xx reply, malformed reply,
                or no VM with that address
        """
        ip = strip_port(address)
        request = FindRequest(find_by=FindBy.IP, value=ip)

        try:
            resp = await self.client.post("/v1/vms:find", json=request.model_dump(mode="json"))
        except httpx.HTTPError as e:
            raise BackendError(f"vmregistry unavailable: {e}") from e

        if resp.status_code == 404:
            raise BackendError(f"no vm registered for ip {ip}")
        try:
            resp.raise_for_status()
            vm = VM.model_validate(resp.json())
        except httpx.HTTPStatusError as e:
            raise BackendError(f"vmregistry returned {resp.status_code}: {resp.text}") from e
        except (ValueError, pydantic.ValidationError) as e:
            raise BackendError(f"malformed vmregistry reply: {e}") from e

        logger.debug("Resolved %s to vm %s", ip, vm.name)
        return vm
