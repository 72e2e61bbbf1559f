import logging
import sys
from typing import Any, Callable

import click
import yaml

from .alerts import NagiosState
from .check import compile_index, run_check
from .config import CheckConfig, build_config, load_config_file, merge_settings
from .errors import PairingError, TagNotSet
from .pairing.tagging import custom_attributes
from .snapshot import load_snapshot

logger = logging.getLogger("ds_pairing")


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_SETTINGS_OPTIONS = [
    click.option("--inventory", "-i", "inventory_file", required=True, type=click.Path(exists=True), help="Path to inventory snapshot (YAML or JSON)."),
    click.option("--config", "-c", "config_file", type=click.Path(exists=True), help="Path to check settings YAML."),
    click.option("--ca-name", "custom_attribute_name", help="Custom Attribute name shared by hosts and datastores."),
    click.option("--host-ca-name", "host_custom_attribute_name", help="Custom Attribute name for hosts."),
    click.option("--ds-ca-name", "datastore_custom_attribute_name", help="Custom Attribute name for datastores."),
    click.option("--ca-prefix-sep", "custom_attribute_prefix_separator", help="Prefix separator shared by hosts and datastores."),
    click.option("--host-ca-prefix-sep", "host_custom_attribute_prefix_separator", help="Prefix separator for host Custom Attribute values."),
    click.option("--ds-ca-prefix-sep", "datastore_custom_attribute_prefix_separator", help="Prefix separator for datastore Custom Attribute values."),
    click.option("--ignore-missing-ca/--no-ignore-missing-ca", "ignore_missing_custom_attribute", default=None, help="Tolerate hosts and datastores without the Custom Attribute."),
    click.option("--ignore-ds", "ignored_datastores", multiple=True, help="Datastore name to ignore (may be repeated)."),
    click.option("--ignore-vm", "ignored_vms", multiple=True, help="VM name to skip (may be repeated)."),
    click.option("--include-rp", "include_resource_pools", multiple=True, help="Only evaluate this resource pool (may be repeated)."),
    click.option("--exclude-rp", "exclude_resource_pools", multiple=True, help="Skip this resource pool (may be repeated)."),
    click.option("--powered-off/--no-powered-off", "evaluate_powered_off_vms", default=None, help="Also evaluate powered off VMs."),
]


def settings_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_SETTINGS_OPTIONS):
        func = option(func)
    return func


def _resolve_config(config_file: str | None, overrides: dict[str, Any]) -> CheckConfig:
    file_settings = load_config_file(config_file) if config_file else {}
    return build_config(merge_settings(file_settings, overrides))


def _unknown(exc: Exception) -> None:
    logger.debug("Check aborted", exc_info=True)
    click.echo(f"{NagiosState.UNKNOWN.label}: {exc}")
    sys.exit(int(NagiosState.UNKNOWN))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug-level logging.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error", "critical"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Logging level (ignored with --verbose).",
)
def main(verbose: bool, log_level: str) -> None:
    """Host / Datastore / VM pairing check for vSphere inventory snapshots."""
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------

@main.command()
@settings_options
def check(inventory_file: str, config_file: str | None, **overrides: Any) -> None:
    """Validate that every VM uses datastores paired with its current host.

    Exits 0 (OK) when no mismatches are found, 2 (CRITICAL) when at least one
    VM is misplaced and 3 (UNKNOWN) when the evaluation could not complete.
    """
    try:
        config = _resolve_config(config_file, overrides)
        snapshot = load_snapshot(inventory_file)
        outcome = run_check(snapshot, config)
    except PairingError as exc:
        _unknown(exc)
        return

    click.echo(outcome.summary_line)
    click.echo("")
    click.echo(outcome.report, nl=False)
    sys.exit(int(outcome.state))


# ---------------------------------------------------------------------------
# index command
# ---------------------------------------------------------------------------

@main.command()
@settings_options
def index(inventory_file: str, config_file: str | None, **overrides: Any) -> None:
    """Print the compiled host/datastore pairings as YAML."""
    try:
        config = _resolve_config(config_file, overrides)
        snapshot = load_snapshot(inventory_file)
        pairing_index, _ = compile_index(snapshot, config)
    except PairingError as exc:
        _unknown(exc)
        return

    data = {
        pairing.host.name: {
            "id": host_id,
            "attribute_value": pairing.host.tag_value,
            "datastores": sorted((ds.name for ds in pairing.datastores), key=str.lower),
        }
        for host_id, pairing in pairing_index.items()
    }
    click.echo(yaml.safe_dump({"hosts": data}, default_flow_style=False, sort_keys=True), nl=False)


# ---------------------------------------------------------------------------
# attributes command
# ---------------------------------------------------------------------------

@main.command()
@click.option("--inventory", "-i", "inventory_file", required=True, type=click.Path(exists=True), help="Path to inventory snapshot (YAML or JSON).")
@click.option("--kind", "-k", type=click.Choice(["host", "datastore"]), default="host", show_default=True, help="Entity type to list.")
def attributes(inventory_file: str, kind: str) -> None:
    """List the Custom Attributes set on each host or datastore."""
    try:
        snapshot = load_snapshot(inventory_file)
    except PairingError as exc:
        _unknown(exc)
        return

    entities = snapshot.hosts if kind == "host" else snapshot.datastores
    for entity in sorted(entities, key=lambda e: e.name.lower()):
        try:
            values = custom_attributes(entity)
        except TagNotSet:
            click.echo(f"  {entity.name:30s}  (no custom attributes set)")
            continue
        except PairingError as exc:
            _unknown(exc)
            return
        rendered = ", ".join(f"{name}={value!r}" for name, value in sorted(values.items()))
        click.echo(f"  {entity.name:30s}  {rendered}")


if __name__ == "__main__":
    main()
