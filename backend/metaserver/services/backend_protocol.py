"""Protocols for the backends the metadata renderers depend on."""
from typing import Protocol

from metaserver.schemas.backend import VM, PublicKey


class VMResolver(Protocol):
    """Resolves the address a request came from to the VM that sent it."""

    async def resolve(self, address: str) -> VM:
        """Return the VM owning ``address``.

        Raises:
            BackendError: the lookup failed or found no VM
        """
        ...


class KeyAccessor(Protocol):
    """Fetches the SSH public keys registered for a VM."""

    async def keys_for(self, vm_name: str) -> list[PublicKey]:
        """Return the VM's keys in the store's order (possibly empty).

        Raises:
            BackendError: the key store could not be queried
        """
        ...
