"""
Error taxonomy.

Errors are split so callers can tell a data quality gap from an operational
fault.
TagNotSet may be tolerated when the caller asked for lenient tagging.
TagRetrievalFailed always aborts, it usually means a typo or a permission gap.
IndexDesynchronized and DatastoreUnresolvable abort the whole evaluation.
"""

from __future__ import annotations


class PairingError(Exception):
    """Base class for all pairing check exceptions."""


class ConfigError(PairingError):
    """Raised when check settings are missing or contradict each other."""


class InventoryLoadError(PairingError):
    """Raised when an inventory snapshot cannot be read or validated."""


class TagNotSet(PairingError):
    """Raised when the requested Custom Attribute is not set on an entity."""

    def __init__(self, attribute_name: str, entity_name: str) -> None:
        self.attribute_name = attribute_name
        self.entity_name = entity_name
        super().__init__(f"custom attribute {attribute_name!r} not set on {entity_name!r}")


class TagRetrievalFailed(PairingError):
    """Raised for any Custom Attribute lookup failure other than "not set"."""

    def __init__(self, attribute_name: str, entity_name: str, reason: str) -> None:
        self.attribute_name = attribute_name
        self.entity_name = entity_name
        self.reason = reason
        super().__init__(
            f"error retrieving custom attribute {attribute_name!r} for {entity_name!r}: {reason}"
        )


class PairingCompilationFailed(PairingError):
    """Raised when host/datastore pairings cannot be compiled."""


class HostReferenceMissing(PairingError):
    """Raised when a VM has no current host reference."""

    def __init__(self, vm_name: str) -> None:
        self.vm_name = vm_name
        super().__init__(
            f"host reference missing for VM {vm_name!r}; "
            "verify the account has read access to the VM runtime properties"
        )


class IndexDesynchronized(PairingError):
    """Raised when a VM's host is absent from the pairing index entirely."""

    def __init__(self, host_id: str, vm_name: str) -> None:
        self.host_id = host_id
        self.vm_name = vm_name
        super().__init__(
            f"host id {host_id!r} for VM {vm_name!r} not found in host/datastore index"
        )


class DatastoreUnresolvable(PairingError):
    """Raised when a datastore ID is in neither the pairing index nor the inventory."""

    def __init__(self, datastore_id: str, vm_name: str | None = None, host_id: str | None = None) -> None:
        self.datastore_id = datastore_id
        self.vm_name = vm_name
        self.host_id = host_id
        where = ""
        if vm_name:
            where = f" (VM {vm_name!r} on host {host_id!r})" if host_id else f" (VM {vm_name!r})"
        super().__init__(
            f"failed to locate datastore id {datastore_id!r} in index or full datastores list{where}"
        )
