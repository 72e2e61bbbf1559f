"""Alert construction and rollups for pairing check results."""

from __future__ import annotations

import enum
from typing import Any

from ds_pairing.models.results import EvaluationResult


class NagiosState(enum.IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def label(self) -> str:
        return self.name


def canonical_severity(value: Any) -> str:
    sev = str(value or "INFO").upper()
    return sev if sev in ("CRITICAL", "WARNING") else "INFO"


def build_alert(
    severity: str,
    category: str,
    message: str,
    detail: dict[str, Any] | None = None,
    affected_items: list[str] | None = None,
) -> dict[str, Any]:
    out: dict[str, Any] = {
        "severity": canonical_severity(severity),
        "category": category,
        "message": message,
        "detail": dict(detail or {}),
    }
    if affected_items is not None:
        out["affected_items"] = affected_items
    return out


def mismatch_alerts(result: EvaluationResult) -> list[dict[str, Any]]:
    """One CRITICAL alert per VM placed on datastores not paired with its host."""
    alerts = []
    for vm_name in sorted(result.mismatches, key=str.lower):
        record = result.mismatches[vm_name]
        names = sorted(record.datastore_names, key=str.lower)
        alerts.append(
            build_alert(
                "CRITICAL",
                "pairing",
                f"VM {vm_name} on host {record.host_name} uses unpaired datastore(s): {', '.join(names)}",
                {
                    "vm": vm_name,
                    "host": record.host_name,
                    "host_attribute_value": record.host_tag_value,
                    "datastores": {ds.name: ds.tag_value for ds in record.datastores},
                },
                affected_items=names,
            )
        )
    return alerts


def health_rollup(alerts: list[dict[str, Any]]) -> str:
    """Overall health from the highest alert severity."""
    if not alerts:
        return "HEALTHY"

    severities = {canonical_severity(a.get("severity")) for a in alerts}
    if "CRITICAL" in severities:
        return "CRITICAL"
    if "WARNING" in severities:
        return "WARNING"
    return "HEALTHY"


def nagios_state(health: str) -> NagiosState:
    return {
        "HEALTHY": NagiosState.OK,
        "WARNING": NagiosState.WARNING,
        "CRITICAL": NagiosState.CRITICAL,
    }.get(health, NagiosState.UNKNOWN)
