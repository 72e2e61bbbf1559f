"""End-to-end pairing check over an inventory snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ds_pairing.alerts import NagiosState, health_rollup, mismatch_alerts, nagios_state
from ds_pairing.config import CheckConfig
from ds_pairing.filters import filter_resource_pools, filter_vms
from ds_pairing.models.inventory import InventorySnapshot
from ds_pairing.models.results import EvaluationResult
from ds_pairing.pairing.index import PairingIndex, build_pairing_index
from ds_pairing.pairing.tagging import tag_datastores, tag_hosts
from ds_pairing.pairing.validate import evaluate_all
from ds_pairing.report import long_report, one_line_summary

logger = logging.getLogger(__name__)


@dataclass
class CheckOutcome:
    index: PairingIndex
    result: EvaluationResult
    state: NagiosState
    summary_line: str
    report: str
    alerts: list[dict[str, Any]] = field(default_factory=list)


def compile_index(
    snapshot: InventorySnapshot,
    config: CheckConfig,
    log: logging.Logger | None = None,
) -> tuple[PairingIndex, list[str]]:
    """
    Tag hosts and datastores and build the pairing index.

    Ignored datastores are left out before tagging so a missing attribute on
    them is never fatal. Returns the index and the names of datastores whose
    attribute is not set.
    """
    log = log or logger
    ignored = {n.casefold() for n in config.ignored_datastores}
    datastores = [ds for ds in snapshot.datastores if ds.name.casefold() not in ignored]

    tagged_hosts = tag_hosts(
        snapshot.hosts, config.host_attribute_name, config.ignore_missing_custom_attribute, log
    )
    tagged_datastores = tag_datastores(
        datastores, config.datastore_attribute_name, config.ignore_missing_custom_attribute, log
    )

    index = build_pairing_index(
        tagged_hosts,
        tagged_datastores,
        using_prefixes=config.using_prefixes,
        host_separator=config.host_separator,
        datastore_separator=config.datastore_separator,
        log=log,
    )
    missing = sorted((ds.name for ds in tagged_datastores if not ds.is_set), key=str.lower)
    if missing:
        log.warning("%d datastore(s) missing custom attribute %r", len(missing), config.datastore_attribute_name)
    return index, missing


def run_check(
    snapshot: InventorySnapshot,
    config: CheckConfig,
    log: logging.Logger | None = None,
) -> CheckOutcome:
    """Filter, index, validate and render. Any PairingError propagates to the caller."""
    log = log or logger

    pools = filter_resource_pools(
        snapshot.resource_pools,
        include=config.include_resource_pools,
        exclude=config.exclude_resource_pools,
    )
    vms = filter_vms(
        snapshot.virtual_machines,
        pools,
        ignored_vms=config.ignored_vms,
        include_powered_off=config.evaluate_powered_off_vms,
        restrict_to_pools=bool(config.include_resource_pools),
        all_pools=snapshot.resource_pools,
    )
    log.debug("Selected %d of %d VMs across %d resource pools", len(vms), len(snapshot.virtual_machines), len(pools))

    index, datastores_missing = compile_index(snapshot, config, log)

    result = evaluate_all(
        vms,
        index,
        snapshot.datastores,
        config.ignored_datastores,
        resource_pools=pools,
        total_vms=len(snapshot.virtual_machines),
        attribute_name=config.datastore_attribute_name,
        log=log,
    )

    alerts = mismatch_alerts(result)
    state = nagios_state(health_rollup(alerts))

    return CheckOutcome(
        index=index,
        result=result,
        state=state,
        summary_line=one_line_summary(state, result),
        report=long_report(
            result,
            index,
            config,
            server=snapshot.metadata.server,
            datastores_missing=datastores_missing,
        ),
        alerts=alerts,
    )
