"""
Unit tests for EC2MetadataService.

Tests the EC2 metadata tree against in-memory backends: listings, key
indexing, the public-keys redirect, and failure propagation.
"""

import pytest

from metaserver.exceptions import BackendError, ValidationError
from metaserver.schemas.backend import PublicKey
from metaserver.services.ec2_service import EC2MetadataService, parse_key_index
from tests.helpers.backends import CALLER_IP, UNKNOWN_IP, VM_NAME, FakePubkeyStore, FakeVMRegistry


@pytest.fixture
def service(vm_registry, pubkey_store) -> EC2MetadataService:
    return EC2MetadataService(vm_registry, pubkey_store)


@pytest.mark.unit
class TestParseKeyIndex:
    """Test parsing of the {index} path segment."""

    def test_plain_digits(self):
        assert parse_key_index("0") == 0
        assert parse_key_index("12") == 12
        assert parse_key_index("007") == 7

    def test_explicit_sign(self):
        assert parse_key_index("+1") == 1
        assert parse_key_index("-0") == 0

    @pytest.mark.parametrize("raw", ["-1", "-12"])
    def test_rejects_negative(self, raw):
        with pytest.raises(ValidationError, match="out of range"):
            parse_key_index(raw)

    @pytest.mark.parametrize("raw", ["", "+", "++1", " 1", "1.0", "abc", "0x1", "1_0", "²"])
    def test_rejects_non_decimal(self, raw):
        with pytest.raises(ValidationError):
            parse_key_index(raw)


@pytest.mark.unit
@pytest.mark.asyncio
class TestEC2Listings:
    """Test the directory-style responses."""

    async def test_metadata_index_is_fixed(self, service, vm_registry):
        assert service.metadata_index() == "hostname\ninstance-id\npublic-keys"
        assert vm_registry.calls == []

    async def test_hostname(self, service):
        assert await service.hostname(CALLER_IP) == VM_NAME

    async def test_instance_id_prefixed(self, service):
        assert await service.instance_id(CALLER_IP) == "i-" + VM_NAME

    async def test_public_keys_listing_in_backend_order(self, service):
        assert await service.public_keys(CALLER_IP) == "0=k0\n1=ops"

    async def test_public_keys_listing_has_one_line_per_key(self, vm_registry):
        keys = [PublicKey(algo="ssh-rsa", material=f"AAAA{i}", comment="c", label=f"key{i}") for i in range(5)]
        service = EC2MetadataService(vm_registry, FakePubkeyStore({VM_NAME: keys}))

        listing = await service.public_keys(CALLER_IP)

        lines = listing.split("\n")
        assert lines == [f"{i}=key{i}" for i in range(5)]
        assert not listing.endswith("\n")

    async def test_public_keys_listing_empty(self, vm_registry):
        service = EC2MetadataService(vm_registry, FakePubkeyStore({VM_NAME: []}))
        assert await service.public_keys(CALLER_IP) == ""


@pytest.mark.unit
@pytest.mark.asyncio
class TestEC2KeyIndexing:
    """Test public-keys/{index}/ and public-keys/{index}/openssh-key."""

    async def test_key_directory_lists_openssh_key(self, service):
        assert await service.public_key(CALLER_IP, "1") == "openssh-key"

    async def test_openssh_key_line(self, service, sample_keys):
        assert await service.public_key_data(CALLER_IP, "0") == "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQC7 host1"
        assert await service.public_key_data(CALLER_IP, "1") == sample_keys[1].openssh_line()

    @pytest.mark.parametrize("index", ["2", "99"])
    async def test_out_of_range_index(self, service, index):
        with pytest.raises(ValidationError):
            await service.public_key(CALLER_IP, index)
        with pytest.raises(ValidationError):
            await service.public_key_data(CALLER_IP, index)

    async def test_signed_index_selects_key(self, service, sample_keys):
        assert await service.public_key_data(CALLER_IP, "+1") == sample_keys[1].openssh_line()

    async def test_unparsable_index_skips_backends(self, service, vm_registry, pubkey_store):
        with pytest.raises(ValidationError):
            await service.public_key_data(CALLER_IP, "first")
        assert vm_registry.calls == []
        assert pubkey_store.calls == []

    async def test_any_index_out_of_range_without_keys(self, vm_registry):
        service = EC2MetadataService(vm_registry, FakePubkeyStore())
        with pytest.raises(ValidationError):
            await service.public_key(CALLER_IP, "0")


@pytest.mark.unit
@pytest.mark.asyncio
class TestEC2Failures:
    """Test backend failure propagation."""

    async def test_unknown_vm(self, service):
        with pytest.raises(BackendError):
            await service.hostname(UNKNOWN_IP)
        with pytest.raises(BackendError):
            await service.public_keys(UNKNOWN_IP)

    async def test_key_store_failure(self, vm_registry):
        service = EC2MetadataService(vm_registry, FakePubkeyStore(fail=True))
        with pytest.raises(BackendError):
            await service.public_keys(CALLER_IP)

    async def test_key_store_not_called_for_hostname(self, service, pubkey_store):
        await service.hostname(CALLER_IP)
        await service.instance_id(CALLER_IP)
        assert pubkey_store.calls == []

    async def test_vm_resolved_on_every_call(self, service, vm_registry):
        await service.hostname(CALLER_IP)
        await service.hostname(CALLER_IP)
        assert vm_registry.calls == [CALLER_IP, CALLER_IP]


@pytest.mark.unit
class TestRedirect:
    def test_default_host(self, service):
        assert service.public_keys_redirect_url() == "http://169.254.169.254/2009-04-04/meta-data/public-keys/"

    def test_configured_host(self):
        service = EC2MetadataService(FakeVMRegistry(), FakePubkeyStore(), redirect_host="metadata.internal")
        assert service.public_keys_redirect_url() == "http://metadata.internal/2009-04-04/meta-data/public-keys/"
