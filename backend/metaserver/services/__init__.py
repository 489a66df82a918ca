"""Service layer: backend clients and metadata renderers."""
from metaserver.services.ec2_service import EC2MetadataService
from metaserver.services.nocloud_service import NoCloudService
from metaserver.services.pubkeystore_service import PubkeyStoreService
from metaserver.services.vmregistry_service import VMRegistryService

__all__ = [
    "EC2MetadataService",
    "NoCloudService",
    "PubkeyStoreService",
    "VMRegistryService",
]
