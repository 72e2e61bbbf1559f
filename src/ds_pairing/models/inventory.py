from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class CustomFieldDef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: int
    name: str


class CustomFieldValue(BaseModel):
    """A Custom Attribute value set on a managed object.

    ``value`` is left untyped: the inventory may carry non-string values and
    those are reported as retrieval failures, not coerced.
    """

    model_config = ConfigDict(extra="ignore")

    key: int
    value: Any = None


class ManagedEntity(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    available_field: list[CustomFieldDef] = Field(default_factory=list)
    custom_value: list[CustomFieldValue] = Field(default_factory=list)


class HostSystem(ManagedEntity):
    pass


class Datastore(ManagedEntity):
    pass


class ResourcePool(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    vms: list[str] = Field(default_factory=list)


class VirtualMachine(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    host: Optional[str] = None
    datastores: list[str] = Field(default_factory=list)
    power_state: str = "poweredOn"
    resource_pool: Optional[str] = None

    @field_validator("host", mode="before")
    @classmethod
    def _blank_host_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def powered_on(self) -> bool:
        return self.power_state.lower() == "poweredon"


class InventoryMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    server: str = "unknown"
    collected_at: Optional[str] = None


class InventorySnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: InventoryMetadata = Field(default_factory=InventoryMetadata)
    hosts: list[HostSystem] = Field(default_factory=list)
    datastores: list[Datastore] = Field(default_factory=list)
    resource_pools: list[ResourcePool] = Field(default_factory=list)
    virtual_machines: list[VirtualMachine] = Field(default_factory=list)
