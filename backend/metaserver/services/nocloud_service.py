"""NoCloud datasource: flat ``meta-data`` document and templated ``user-data``."""
import logging

import yaml
from jinja2 import Template

from metaserver.exceptions import BackendError, RenderError
from metaserver.schemas.backend import VM, PublicKey, instance_id_for
from metaserver.schemas.nocloud import MetadataDocument, UserDataContext
from metaserver.services.backend_protocol import KeyAccessor, VMResolver

logger = logging.getLogger(__name__)


class NoCloudService:
    """Renders NoCloud meta-data and user-data for the VM behind a caller address."""

    def __init__(
        self,
        vm_resolver: VMResolver,
        key_accessor: KeyAccessor,
        dns_name: str,
        userdata_template: Template,
    ):
        self.vm_resolver = vm_resolver
        self.key_accessor = key_accessor
        self.dns_name = dns_name
        self.userdata_template = userdata_template

    async def _vm_and_keys(self, ip: str) -> tuple[VM, list[PublicKey]]:
        try:
            vm = await self.vm_resolver.resolve(ip)
        except BackendError as e:
            logger.error("failed to get vm by ip %s: %s", ip, e)
            raise

        try:
            keys = await self.key_accessor.keys_for(vm.name)
        except BackendError as e:
            logger.error("failed to get public keys for vm %s: %s", vm.name, e)
            raise

        return vm, keys

    async def metadata(self, ip: str) -> str:
        """Build and serialize the meta-data document as YAML."""
        vm, keys = await self._vm_and_keys(ip)

        md = MetadataDocument(
            local_hostname=vm.name,
            instance_id=instance_id_for(vm.name),
            public_keys=[key.openssh_line() for key in keys],
        )

        try:
            return yaml.safe_dump(
                md.model_dump(by_alias=True),
                sort_keys=False,
                default_flow_style=False,
            )
        except yaml.YAMLError as e:
            logger.error("failed to serialize metadata for vm %s md %r: %s", vm.name, md, e)
            raise RenderError(str(e)) from e

    async def userdata(self, ip: str) -> str:
        """Render the user-data template.

        The whole template is rendered before anything is returned; a
        rendering error yields no output at all.
        """
        vm, keys = await self._vm_and_keys(ip)

        context = UserDataContext(
            hostname=f"{vm.name}.{self.dns_name}",
            public_keys=[key.openssh_line() for key in keys],
        )

        try:
            return self.userdata_template.render(**context.model_dump())
        except Exception as e:
            logger.error("failed to render user-data for vm %s: %s", vm.name, e)
            raise RenderError(str(e)) from e
