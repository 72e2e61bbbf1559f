"""VM placement validation against the host/datastore pairing index."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ds_pairing.errors import DatastoreUnresolvable, HostReferenceMissing, IndexDesynchronized
from ds_pairing.models.inventory import Datastore, ResourcePool, VirtualMachine
from ds_pairing.models.results import EvaluationResult, MismatchedDatastore, MismatchRecord
from ds_pairing.pairing.index import LookupStatus, PairingIndex
from ds_pairing.pairing.tagging import NOT_SET, tag_entity

logger = logging.getLogger(__name__)


def _in_list(name: str, names: Iterable[str]) -> bool:
    wanted = name.casefold()
    return any(n.casefold() == wanted for n in names)


def _find_datastore(datastores: Iterable[Datastore], datastore_id: str) -> Datastore | None:
    for ds in datastores:
        if ds.id == datastore_id:
            return ds
    return None


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


def validate_vm(
    vm: VirtualMachine,
    index: PairingIndex,
    all_datastores: Sequence[Datastore],
    ignored_datastores: Sequence[str] = (),
    attribute_name: str | None = None,
    log: logging.Logger | None = None,
) -> list[MismatchedDatastore]:
    """
    Return the datastores used by *vm* that are not paired with its current host.

    Datastores named in *ignored_datastores* are never reported. A datastore
    missing from the index is looked up again in *all_datastores* (the full,
    unfiltered inventory) since datastores without a matching attribute never
    enter the index. *attribute_name* is only used to show the attribute value
    of such datastores.

    An empty list means the VM is correctly placed.
    """
    log = log or logger

    if not vm.host:
        raise HostReferenceMissing(vm.name)

    found = index.lookup_host(vm.host)
    if found.status is LookupStatus.NOT_FOUND or found.pairing is None:
        raise IndexDesynchronized(vm.host, vm.name)

    paired_ids = found.pairing.datastore_ids
    candidates = [ds_id for ds_id in _unique(vm.datastores) if ds_id not in paired_ids]

    mismatches: list[MismatchedDatastore] = []
    for ds_id in candidates:
        ds_found = index.lookup_datastore(ds_id)

        if ds_found.status is LookupStatus.FOUND and ds_found.datastore is not None:
            if _in_list(ds_found.datastore.name, ignored_datastores):
                log.debug("VM %r: datastore %r is ignored", vm.name, ds_found.datastore.name)
                continue
            mismatches.append(
                MismatchedDatastore(
                    id=ds_id,
                    name=ds_found.datastore.name,
                    tag_value=ds_found.datastore.tag_value,
                )
            )
            continue

        # Not paired with any host; fall back to the full inventory.
        log.debug("VM %r: initial lookup failed for datastore id %r", vm.name, ds_id)
        datastore = _find_datastore(all_datastores, ds_id)
        if datastore is None:
            raise DatastoreUnresolvable(ds_id, vm.name, vm.host)

        if _in_list(datastore.name, ignored_datastores):
            log.debug("VM %r: second lookup resolved ignored datastore %r (%s)", vm.name, datastore.name, ds_id)
            continue

        tag_value = NOT_SET
        if attribute_name:
            tag_value = tag_entity(datastore, attribute_name, ignore_missing=True, log=log).tag_value
        mismatches.append(MismatchedDatastore(id=ds_id, name=datastore.name, tag_value=tag_value))

    return mismatches


def evaluate_all(
    vms: Sequence[VirtualMachine],
    index: PairingIndex,
    all_datastores: Sequence[Datastore],
    ignored_datastores: Sequence[str] = (),
    resource_pools: Sequence[ResourcePool] = (),
    total_vms: int | None = None,
    attribute_name: str | None = None,
    log: logging.Logger | None = None,
) -> EvaluationResult:
    """
    Validate every VM and collect the ones with mismatched datastores.

    The first fatal error aborts the run; no partial result is returned.
    """
    log = log or logger

    mismatches: dict[str, MismatchRecord] = {}
    for vm in vms:
        found = validate_vm(vm, index, all_datastores, ignored_datastores, attribute_name, log)
        if not found:
            continue

        # validate_vm has already confirmed the host is indexed
        host = index[vm.host or ""].host
        log.debug("VM %r on host %r: %d mismatched datastore(s)", vm.name, host.name, len(found))
        key = vm.name
        if key in mismatches:
            # VM names are only unique per folder
            key = f"{vm.name} ({vm.id})"
            log.warning("duplicate VM name %r; reporting %s as %r", vm.name, vm.id, key)
        mismatches[key] = MismatchRecord(
            host_name=host.name,
            host_tag_value=host.tag_value,
            datastores=found,
        )

    log.debug("evaluated %d VMs, %d mismatched", len(vms), len(mismatches))

    return EvaluationResult(
        mismatches=mismatches,
        evaluated_vms=len(vms),
        total_vms=len(vms) if total_vms is None else total_vms,
        resource_pools=[rp.name for rp in resource_pools],
    )
