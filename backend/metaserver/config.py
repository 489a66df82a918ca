"""Application configuration management."""
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, built once and passed into create_app()."""

    # Serving
    LISTEN_ADDRESS: str = "127.0.0.1:8080"
    API_MODE: Literal["ec2", "nocloud"] = "ec2"
    LOG_HTTP: bool = True  # uvicorn access log
    LOG_LEVEL: str = "INFO"

    # VM registry backend
    VMREGISTRY_ADDRESS: str = "http://127.0.0.1:9000"
    VMREGISTRY_CA: str = ""  # CA bundle path, empty uses system trust store
    VMREGISTRY_TOKEN: str = ""  # Bearer token, empty sends no Authorization header

    # Public key store backend
    PUBKEYSTORE_ADDRESS: str = "http://127.0.0.1:9001"
    PUBKEYSTORE_CA: str = ""
    PUBKEYSTORE_TOKEN: str = ""

    BACKEND_TIMEOUT: float = 10.0  # seconds, per backend call

    # NoCloud
    USERDATA_TEMPLATE_FILE: str = ""
    DNS_NAME: str = ""  # appended to the VM name in user-data hostnames

    # EC2
    METADATA_REDIRECT_HOST: str = "169.254.169.254"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @model_validator(mode="after")
    def _check_mode_requirements(self) -> "Settings":
        if self.API_MODE == "nocloud" and not self.USERDATA_TEMPLATE_FILE:
            raise ValueError("USERDATA_TEMPLATE_FILE is required in nocloud mode")
        if self.BACKEND_TIMEOUT <= 0:
            raise ValueError("BACKEND_TIMEOUT must be positive")
        _, _, port = self.LISTEN_ADDRESS.rpartition(":")
        if not port.isascii() or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"LISTEN_ADDRESS must be host:port, got {self.LISTEN_ADDRESS!r}")
        return self

    @property
    def listen_host(self) -> str:
        host, _, _ = self.LISTEN_ADDRESS.rpartition(":")
        return host.strip("[]") or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        _, _, port = self.LISTEN_ADDRESS.rpartition(":")
        return int(port)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
