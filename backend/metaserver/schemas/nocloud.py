"""Schemas for the NoCloud meta-data document and user-data binding."""
from pydantic import BaseModel, ConfigDict, Field


class MetadataDocument(BaseModel):
    """The ``meta-data`` document cloud-init's NoCloud datasource reads."""

    model_config = ConfigDict(populate_by_name=True)

    local_hostname: str = Field(..., alias="local-hostname")
    instance_id: str = Field(..., alias="instance-id")
    public_keys: list[str] = Field(default_factory=list, alias="public-keys")


class UserDataContext(BaseModel):
    """Variables available to the user-data template."""

    hostname: str
    public_keys: list[str] = Field(default_factory=list)
