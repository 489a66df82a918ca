"""
Pytest configuration and fixtures for the metaserver test suite.

This module provides in-memory backends, settings for both serving modes,
and HTTP test clients bound to a fixed caller address.
"""

import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add parent directory to path to import metaserver modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from metaserver.config import Settings
from metaserver.main import create_app
from metaserver.schemas.backend import PublicKey
from tests.helpers.backends import CALLER_IP, VM_NAME, FakePubkeyStore, FakeVMRegistry


USERDATA_TEMPLATE = """
#cloud-config
hostname: {{ hostname }}
ssh_authorized_keys:
{% for key in public_keys %}  - {{ key }}
{% endfor %}
"""


# ============================================================================
# Backend Fixtures
# ============================================================================

@pytest.fixture
def sample_keys() -> list[PublicKey]:
    """Two keys in the order the store returns them."""
    return [
        PublicKey(algo="ssh-rsa", material="AAAAB3NzaC1yc2EAAAADAQABAAABAQC7", comment="host1", label="k0"),
        PublicKey(algo="ssh-ed25519", material="AAAAC3NzaC1lZDI1NTE5AAAAIOMq", comment="ops@bastion", label="ops"),
    ]


@pytest.fixture
def vm_registry() -> FakeVMRegistry:
    return FakeVMRegistry({CALLER_IP: VM_NAME})


@pytest.fixture
def pubkey_store(sample_keys) -> FakePubkeyStore:
    return FakePubkeyStore({VM_NAME: sample_keys})


# ============================================================================
# Test Configuration
# ============================================================================

@pytest.fixture
def userdata_template_file(tmp_path) -> Path:
    path = tmp_path / "user-data.tmpl"
    path.write_text(USERDATA_TEMPLATE)
    return path


@pytest.fixture
def ec2_settings() -> Settings:
    return Settings(API_MODE="ec2", _env_file=None)


@pytest.fixture
def nocloud_settings(userdata_template_file) -> Settings:
    return Settings(
        API_MODE="nocloud",
        DNS_NAME="cluster.local",
        USERDATA_TEMPLATE_FILE=str(userdata_template_file),
        _env_file=None,
    )


# ============================================================================
# HTTP Client Fixtures
# ============================================================================

def _client_for(app, ip: str = CALLER_IP) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, client=(ip, 40123)),
        base_url="http://169.254.169.254",
    )


@pytest_asyncio.fixture
async def ec2_client(ec2_settings, vm_registry, pubkey_store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an EC2-mode app, calling from CALLER_IP."""
    app = create_app(ec2_settings, vm_resolver=vm_registry, key_accessor=pubkey_store)
    async with _client_for(app) as client:
        yield client


@pytest_asyncio.fixture
async def nocloud_client(nocloud_settings, vm_registry, pubkey_store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for a NoCloud-mode app, calling from CALLER_IP."""
    app = create_app(nocloud_settings, vm_resolver=vm_registry, key_accessor=pubkey_store)
    async with _client_for(app) as client:
        yield client


@pytest.fixture
def client_factory():
    """Build a client for an arbitrary app and caller address."""
    return _client_for


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """
    Configure pytest markers.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
