"""Schemas for the vmregistry and pubkeystore wire contracts."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FindBy(str, Enum):
    IP = "IP"


class FindRequest(BaseModel):
    find_by: FindBy = FindBy.IP
    value: str


class VM(BaseModel):
    """Identity record of a running instance, owned by vmregistry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)


class PublicKey(BaseModel):
    """One SSH public key as stored in pubkeystore.

    The store calls the key material ``pubkey`` and the label ``name``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    algo: str
    material: str = Field(..., alias="pubkey")
    comment: str = ""
    label: str = Field("", alias="name")

    def openssh_line(self) -> str:
        """Return the key in ``authorized_keys`` form: ``algo material comment``."""
        return f"{self.algo} {self.material} {self.comment}"


class GetKeysRequest(BaseModel):
    vm_name: str


class GetKeysReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keys: list[PublicKey] = Field(default_factory=list)


def instance_id_for(vm_name: str) -> str:
    """Derive the instance id both metadata flavours report for a VM."""
    return "i-" + vm_name
