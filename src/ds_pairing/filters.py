"""Resource pool and VM selection ahead of pairing evaluation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ds_pairing.models.inventory import ResourcePool, VirtualMachine

logger = logging.getLogger(__name__)


def _folded(names: Iterable[str]) -> set[str]:
    return {n.casefold() for n in names}


def filter_resource_pools(
    pools: Sequence[ResourcePool],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[ResourcePool]:
    """
    Apply an include list (only those pools) or an exclude list (all but those).

    Names compare case-insensitively. With neither list every pool is kept.
    """
    if include:
        wanted = _folded(include)
        return [rp for rp in pools if rp.name.casefold() in wanted]
    if exclude:
        unwanted = _folded(exclude)
        return [rp for rp in pools if rp.name.casefold() not in unwanted]
    return list(pools)


def filter_vms(
    vms: Sequence[VirtualMachine],
    pools: Sequence[ResourcePool],
    ignored_vms: Sequence[str] = (),
    include_powered_off: bool = False,
    restrict_to_pools: bool = False,
    all_pools: Sequence[ResourcePool] | None = None,
) -> list[VirtualMachine]:
    """
    Select the VMs to evaluate.

    A VM is kept when it belongs to one of *pools* (or, unless
    *restrict_to_pools*, belongs to none of *all_pools*), is not named in
    *ignored_vms* and is powered on (or *include_powered_off* is set). A VM
    whose pool ID is not among *all_pools* counts as belonging to none.
    """
    known_pools = all_pools if all_pools is not None else pools
    pool_ids = {rp.id for rp in pools}
    pool_members = {vm_id for rp in pools for vm_id in rp.vms}
    known_ids = {rp.id for rp in known_pools}
    known_members = {vm_id for rp in known_pools for vm_id in rp.vms}
    ignored = _folded(ignored_vms)

    selected = []
    for vm in vms:
        in_pool = vm.id in pool_members or (vm.resource_pool is not None and vm.resource_pool in pool_ids)
        poolless = vm.id not in known_members and (vm.resource_pool is None or vm.resource_pool not in known_ids)
        if poolless and vm.resource_pool is not None:
            logger.debug("VM %r references unknown resource pool %r", vm.name, vm.resource_pool)

        if not in_pool and (restrict_to_pools or not poolless):
            logger.debug("Skipping VM %r: not in an evaluated resource pool", vm.name)
            continue
        if vm.name.casefold() in ignored:
            logger.debug("Skipping VM %r: in ignore list", vm.name)
            continue
        if not include_powered_off and not vm.powered_on:
            logger.debug("Skipping VM %r: powered off", vm.name)
            continue
        selected.append(vm)

    return selected
