from .inventory import (
    CustomFieldDef,
    CustomFieldValue,
    Datastore,
    HostSystem,
    InventoryMetadata,
    InventorySnapshot,
    ManagedEntity,
    ResourcePool,
    VirtualMachine,
)
from .results import EvaluationResult, MismatchedDatastore, MismatchRecord

__all__ = [
    "CustomFieldDef",
    "CustomFieldValue",
    "Datastore",
    "EvaluationResult",
    "HostSystem",
    "InventoryMetadata",
    "InventorySnapshot",
    "ManagedEntity",
    "MismatchRecord",
    "MismatchedDatastore",
    "ResourcePool",
    "VirtualMachine",
]
