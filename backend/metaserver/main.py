"""FastAPI application factory and server entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from metaserver.api.exceptions import register_exception_handlers
from metaserver.api.routes import ec2 as ec2_routes, nocloud as nocloud_routes
from metaserver.config import Settings, get_settings
from metaserver.middleware.disconnect import CancelOnDisconnectMiddleware
from metaserver.services.backend_client import build_backend_client
from metaserver.services.backend_protocol import KeyAccessor, VMResolver
from metaserver.services.ec2_service import EC2MetadataService
from metaserver.services.nocloud_service import NoCloudService
from metaserver.services.pubkeystore_service import PubkeyStoreService
from metaserver.services.vmregistry_service import VMRegistryService
from metaserver.utils.templates import load_userdata_template
from metaserver.version import VERSION

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger().setLevel(level.upper())

    # Request logging is uvicorn's access log; keep httpx's per-call lines quiet
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    vm_resolver: Optional[VMResolver] = None,
    key_accessor: Optional[KeyAccessor] = None,
) -> FastAPI:
    """Build the application for the configured serving mode.

    Exactly one of the EC2 and NoCloud routers is mounted. Backend clients
    are created here unless a resolver/accessor is passed in, and closed
    when the application shuts down.

    Raises:
        ConfigurationError: the user-data template cannot be loaded
    """
    settings = settings or get_settings()

    userdata_template = None
    if settings.API_MODE == "nocloud":
        userdata_template = load_userdata_template(settings.USERDATA_TEMPLATE_FILE)

    owned_clients: list[httpx.AsyncClient] = []

    if vm_resolver is None:
        client = build_backend_client(
            settings.VMREGISTRY_ADDRESS,
            token=settings.VMREGISTRY_TOKEN,
            ca_file=settings.VMREGISTRY_CA,
            timeout=settings.BACKEND_TIMEOUT,
        )
        owned_clients.append(client)
        vm_resolver = VMRegistryService(client)

    if key_accessor is None:
        client = build_backend_client(
            settings.PUBKEYSTORE_ADDRESS,
            token=settings.PUBKEYSTORE_TOKEN,
            ca_file=settings.PUBKEYSTORE_CA,
            timeout=settings.BACKEND_TIMEOUT,
        )
        owned_clients.append(client)
        key_accessor = PubkeyStoreService(client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown events."""
        logger.info("metaserver %s starting...", VERSION)
        logger.info("  Mode: %s", settings.API_MODE)
        logger.info("  vmregistry: %s", settings.VMREGISTRY_ADDRESS)
        logger.info("  pubkeystore: %s", settings.PUBKEYSTORE_ADDRESS)

        yield

        logger.info("metaserver shutting down...")
        for owned in owned_clients:
            await owned.aclose()

    app = FastAPI(
        title="metaserver",
        description="Instance metadata service (EC2 and NoCloud flavours)",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.API_MODE == "ec2":
        app.state.ec2_service = EC2MetadataService(
            vm_resolver,
            key_accessor,
            redirect_host=settings.METADATA_REDIRECT_HOST,
        )
        app.include_router(ec2_routes.router)
    else:
        if not settings.DNS_NAME:
            logger.warning("DNS_NAME is empty; user-data hostnames will end with '.'")
        app.state.nocloud_service = NoCloudService(
            vm_resolver,
            key_accessor,
            dns_name=settings.DNS_NAME,
            userdata_template=userdata_template,
        )
        app.include_router(nocloud_routes.router)

    register_exception_handlers(app)
    app.add_middleware(CancelOnDisconnectMiddleware)

    return app


def run() -> None:
    """Serve the configured application with uvicorn."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    logger.info("serving on %s", settings.LISTEN_ADDRESS)
    uvicorn.run(
        "metaserver.main:create_app",
        factory=True,
        host=settings.listen_host,
        port=settings.listen_port,
        access_log=settings.LOG_HTTP,
        log_config=None,
    )


if __name__ == "__main__":
    run()
