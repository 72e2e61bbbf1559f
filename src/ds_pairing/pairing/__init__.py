from .index import (
    DatastoreLookup,
    HostDatastoresPairing,
    HostLookup,
    LookupStatus,
    PairingIndex,
    build_pairing_index,
    comparison_key,
)
from .tagging import (
    NOT_SET,
    TaggedEntity,
    custom_attributes,
    get_attribute_value,
    tag_datastores,
    tag_entity,
    tag_hosts,
)
from .validate import evaluate_all, validate_vm

__all__ = [
    "NOT_SET",
    "DatastoreLookup",
    "HostDatastoresPairing",
    "HostLookup",
    "LookupStatus",
    "PairingIndex",
    "TaggedEntity",
    "build_pairing_index",
    "comparison_key",
    "custom_attributes",
    "evaluate_all",
    "get_attribute_value",
    "tag_datastores",
    "tag_entity",
    "tag_hosts",
    "validate_vm",
]
