"""Public key store client."""
import logging

import httpx
import pydantic

from metaserver.exceptions import BackendError
from metaserver.schemas.backend import GetKeysReply, GetKeysRequest, PublicKey

logger = logging.getLogger(__name__)


class PubkeyStoreService:
    """Client for the key store's GetKeys call (implements KeyAccessor)."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def keys_for(self, vm_name: str) -> list[PublicKey]:
        """Return the keys registered for ``vm_name`` in store order.

        The order is whatever the store returns; it is the index used by
        ``/meta-data/public-keys/{index}/`` and is not re-sorted here.
        """
        request = GetKeysRequest(vm_name=vm_name)

        try:
            resp = await self.client.post("/v1/keys:get", json=request.model_dump())
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(f"pubkeystore returned {e.response.status_code}: {e.response.text}") from e
        except httpx.HTTPError as e:
            raise BackendError(f"pubkeystore unavailable: {e}") from e

        try:
            reply = GetKeysReply.model_validate(resp.json())
        except (ValueError, pydantic.ValidationError) as e:
            raise BackendError(f"malformed pubkeystore reply: {e}") from e

        logger.debug("Fetched %d keys for %s", len(reply.keys), vm_name)
        return reply.keys
