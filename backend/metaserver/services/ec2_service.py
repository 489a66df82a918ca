"""EC2-style metadata tree.

Mirrors the 2009-04-04 EC2 instance metadata layout::

    meta-data/
    meta-data/hostname
    meta-data/instance-id
    meta-data/public-keys            -> 301 to public-keys/
    meta-data/public-keys/
    meta-data/public-keys/{index}/
    meta-data/public-keys/{index}/openssh-key

Directory listings are newline separated with no trailing newline.
"""
import logging
import re

from metaserver.exceptions import BackendError, ValidationError
from metaserver.schemas.backend import VM, PublicKey, instance_id_for
from metaserver.services.backend_protocol import KeyAccessor, VMResolver

logger = logging.getLogger(__name__)

API_VERSION = "2009-04-04"
METADATA_KEYS = ["hostname", "instance-id", "public-keys"]
OPENSSH_KEY = "openssh-key"

_INDEX_RE = re.compile(r"[+-]?[0-9]+")


def render_list(items: list[str]) -> str:
    return "\n".join(items)


def parse_key_index(raw: str) -> int:
    """Parse the ``{index}`` path segment.

    Raises:
        ValidationError: not a decimal integer, or negative
    """
    if not _INDEX_RE.fullmatch(raw):
        logger.error("cannot parse key index: %r", raw)
        raise ValidationError(f"invalid key index {raw!r}")
    index = int(raw)
    if index < 0:
        logger.error("negative key index: %d", index)
        raise ValidationError(f"key index {index} out of range")
    return index


class EC2MetadataService:
    """Renders the EC2 metadata tree for the VM behind a caller address."""

    def __init__(
        self,
        vm_resolver: VMResolver,
        key_accessor: KeyAccessor,
        redirect_host: str = "169.254.169.254",
    ):
        self.vm_resolver = vm_resolver
        self.key_accessor = key_accessor
        self.redirect_host = redirect_host

    async def _vm(self, ip: str) -> VM:
        try:
            return await self.vm_resolver.resolve(ip)
        except BackendError as e:
            logger.error("failed to get vm by ip %s: %s", ip, e)
            raise

    async def _keys(self, vm: VM) -> list[PublicKey]:
        try:
            return await self.key_accessor.keys_for(vm.name)
        except BackendError as e:
            logger.error("failed to get public keys for vm %s: %s", vm.name, e)
            raise

    async def _key_at(self, ip: str, raw_index: str) -> PublicKey:
        index = parse_key_index(raw_index)
        vm = await self._vm(ip)
        keys = await self._keys(vm)
        if index >= len(keys):
            logger.error("cannot find key with index %d for %s (got %d keys)", index, vm.name, len(keys))
            raise ValidationError(f"key index {index} out of range")
        return keys[index]

    def metadata_index(self) -> str:
        """Handle ``meta-data/``; needs no backend call."""
        return render_list(METADATA_KEYS)

    async def hostname(self, ip: str) -> str:
        vm = await self._vm(ip)
        return vm.name

    async def instance_id(self, ip: str) -> str:
        vm = await self._vm(ip)
        return instance_id_for(vm.name)

    def public_keys_redirect_url(self) -> str:
        """Location for ``meta-data/public-keys`` requests, as real EC2 sends it."""
        return f"http://{self.redirect_host}/{API_VERSION}/meta-data/public-keys/"

    async def public_keys(self, ip: str) -> str:
        """Handle ``public-keys/``: one ``<index>=<label>`` line per key."""
        vm = await self._vm(ip)
        keys = await self._keys(vm)
        return render_list([f"{i}={key.label}" for i, key in enumerate(keys)])

    async def public_key(self, ip: str, raw_index: str) -> str:
        """Handle ``public-keys/{index}/``: lists the single ``openssh-key`` entry."""
        await self._key_at(ip, raw_index)
        return render_list([OPENSSH_KEY])

    async def public_key_data(self, ip: str, raw_index: str) -> str:
        """Handle ``public-keys/{index}/openssh-key``."""
        key = await self._key_at(ip, raw_index)
        return key.openssh_line()
