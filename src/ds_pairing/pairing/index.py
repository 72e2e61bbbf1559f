"""Host to datastore pairing index.

Hosts and datastores are paired when their pairing attribute values are
equal, ignoring case. In prefix mode only the part of each value before the
first separator is compared, so a host tagged ``DC1-RACK3`` pairs with a
datastore tagged ``DC1-RACK9`` when the separator is ``-``.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from ds_pairing.errors import DatastoreUnresolvable, PairingCompilationFailed
from ds_pairing.pairing.tagging import NOT_SET, TaggedEntity

logger = logging.getLogger(__name__)


class LookupStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class HostDatastoresPairing:
    host: TaggedEntity
    datastores: tuple[TaggedEntity, ...] = ()

    @property
    def is_stub(self) -> bool:
        return not self.datastores

    @property
    def datastore_ids(self) -> frozenset[str]:
        return frozenset(ds.id for ds in self.datastores)


@dataclass(frozen=True)
class HostLookup:
    status: LookupStatus
    pairing: Optional[HostDatastoresPairing] = None


@dataclass(frozen=True)
class DatastoreLookup:
    status: LookupStatus
    datastore: Optional[TaggedEntity] = None


def comparison_key(value: Optional[str], separator: str = "") -> str:
    """Return the casefolded key used to compare a tag value.

    An unset value compares as the NOT_SET marker, so untagged hosts pair with
    untagged datastores.
    """
    if value is None:
        value = NOT_SET
    if separator:
        value = value.split(separator, 1)[0]
    return value.casefold()


class PairingIndex(Mapping[str, HostDatastoresPairing]):
    """Read-only mapping of host ID to its paired datastores."""

    def __init__(self, entries: Mapping[str, HostDatastoresPairing]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, host_id: str) -> HostDatastoresPairing:
        return self._entries[host_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PairingIndex(hosts={len(self)}, datastores={len(self.datastore_id_to_name_index())})"

    def lookup_host(self, host_id: str) -> HostLookup:
        pairing = self._entries.get(host_id)
        if pairing is None:
            return HostLookup(LookupStatus.NOT_FOUND)
        return HostLookup(LookupStatus.FOUND, pairing)

    def lookup_datastore(self, datastore_id: str) -> DatastoreLookup:
        for pairing in self._entries.values():
            for ds in pairing.datastores:
                if ds.id == datastore_id:
                    return DatastoreLookup(LookupStatus.FOUND, ds)
        return DatastoreLookup(LookupStatus.NOT_FOUND)

    def datastore_id_to_name(self, datastore_id: str) -> str:
        found = self.lookup_datastore(datastore_id)
        if found.status is LookupStatus.NOT_FOUND or found.datastore is None:
            raise DatastoreUnresolvable(datastore_id)
        return found.datastore.name

    def datastore_id_to_name_index(self) -> dict[str, str]:
        return {ds.id: ds.name for pairing in self._entries.values() for ds in pairing.datastores}

    def contains_datastore(self, datastore_id: str) -> bool:
        wanted = datastore_id.casefold()
        return any(
            ds.id.casefold() == wanted
            for pairing in self._entries.values()
            for ds in pairing.datastores
        )

    def datastore_names(self) -> list[str]:
        """All datastore names in the index, sorted case-insensitively. Display only."""
        names = [ds.name for pairing in self._entries.values() for ds in pairing.datastores]
        return sorted(names, key=str.lower)

    def hosts_missing_attribute(self) -> list[str]:
        return [p.host.name for p in self._entries.values() if not p.host.is_set]


def build_pairing_index(
    hosts: Sequence[TaggedEntity],
    datastores: Sequence[TaggedEntity],
    using_prefixes: bool = False,
    host_separator: str = "",
    datastore_separator: str = "",
    log: logging.Logger | None = None,
) -> PairingIndex:
    """Pair every host with the datastores sharing its attribute value (or prefix).

    Every host gets an entry, hosts without a matching datastore get an empty
    one. Unset attribute values compare as the NOT_SET marker.
    """
    log = log or logger

    if not hosts:
        raise PairingCompilationFailed("failed to compile host/datastore pairings: no hosts provided")
    if not datastores:
        raise PairingCompilationFailed("failed to compile host/datastore pairings: no datastores provided")
    if using_prefixes and not (host_separator and datastore_separator):
        raise PairingCompilationFailed(
            "failed to compile host/datastore pairings: "
            "prefix matching requires both host and datastore separators"
        )

    host_sep = host_separator if using_prefixes else ""
    ds_sep = datastore_separator if using_prefixes else ""

    ds_keys = [(ds, comparison_key(ds.value, ds_sep)) for ds in datastores]

    entries: dict[str, HostDatastoresPairing] = {}
    for host in hosts:
        host_key = comparison_key(host.value, host_sep)
        matched = [ds for ds, key in ds_keys if key == host_key]

        if not matched:
            log.debug("no datastores paired with host %r (attribute value %r)", host.name, host.tag_value)
        else:
            log.debug("host %r paired with %d datastore(s)", host.name, len(matched))

        entries[host.id] = HostDatastoresPairing(host=host, datastores=tuple(matched))

    if not entries:
        raise PairingCompilationFailed("failed to compile host/datastore pairings")

    return PairingIndex(entries)
