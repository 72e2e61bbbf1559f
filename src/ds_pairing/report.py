"""Plugin output: the one-line summary and the long service output."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from ds_pairing.alerts import NagiosState
from ds_pairing.config import CheckConfig
from ds_pairing.models.results import EvaluationResult
from ds_pairing.pairing.index import PairingIndex


@functools.lru_cache(maxsize=1)
def get_jinja_env() -> Environment:
    """Return a cached Jinja2 Environment for the plain-text templates."""
    template_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def one_line_summary(state: NagiosState, result: EvaluationResult) -> str:
    counts = f"(evaluated {result.evaluated_vms} VMs, {result.evaluated_resource_pools} Resource Pools)"
    if result.mismatches:
        return f"{state.label}: {len(result.mismatches)} mismatched Host/Datastore/VM pairings detected {counts}"
    return f"{state.label}: No mismatched Host/Datastore/VM pairings detected {counts}"


def mismatch_rows(result: EvaluationResult) -> list[dict[str, Any]]:
    """Mismatches ordered by VM name, datastore names sorted within each row."""
    rows = []
    for vm_name in sorted(result.mismatches, key=str.lower):
        record = result.mismatches[vm_name]
        rows.append(
            {
                "vm": vm_name,
                "host": record.host_name,
                "datastores": sorted(record.datastore_names),
            }
        )
    return rows


def long_report(
    result: EvaluationResult,
    index: PairingIndex,
    config: CheckConfig,
    server: str = "unknown",
    datastores_missing: list[str] | None = None,
) -> str:
    tpl = get_jinja_env().get_template("long_report.txt.j2")
    return tpl.render(
        mismatches=mismatch_rows(result),
        ignore_missing=config.ignore_missing_custom_attribute,
        host_attribute=config.host_attribute_name,
        datastore_attribute=config.datastore_attribute_name,
        hosts_missing=index.hosts_missing_attribute(),
        datastores_missing=datastores_missing or [],
        host_separator=config.host_separator,
        datastore_separator=config.datastore_separator,
        server=server,
        evaluated_vms=result.evaluated_vms,
        total_vms=result.total_vms,
        powered_off=config.evaluate_powered_off_vms,
        ignored_vms=config.ignored_vms,
        ignored_datastores=config.ignored_datastores,
        include_pools=config.include_resource_pools,
        exclude_pools=config.exclude_resource_pools,
        resource_pools=result.resource_pools,
    )
