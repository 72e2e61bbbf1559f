from pydantic import BaseModel, Field, ConfigDict


class MismatchedDatastore(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    tag_value: str


class MismatchRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host_name: str
    host_tag_value: str
    datastores: list[MismatchedDatastore] = Field(default_factory=list)

    @property
    def datastore_names(self) -> list[str]:
        return [ds.name for ds in self.datastores]


class EvaluationResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # VM name -> mismatch details; clean VMs never appear here
    mismatches: dict[str, MismatchRecord] = Field(default_factory=dict)
    evaluated_vms: int = 0
    total_vms: int = 0
    resource_pools: list[str] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.mismatches

    @property
    def evaluated_resource_pools(self) -> int:
        return len(self.resource_pools)
