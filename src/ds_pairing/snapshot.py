"""Inventory snapshot loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ds_pairing.errors import InventoryLoadError
from ds_pairing.models.inventory import InventorySnapshot

logger = logging.getLogger(__name__)


def load_document(path: str | Path) -> dict[str, Any]:
    """Load a YAML or JSON file and return the top-level mapping."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InventoryLoadError(f"failed to read inventory snapshot {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise InventoryLoadError(f"inventory snapshot {path} is not a mapping")
    return data


def parse_snapshot(data: dict[str, Any]) -> InventorySnapshot:
    try:
        snapshot = InventorySnapshot.model_validate(data)
    except ValidationError as exc:
        raise InventoryLoadError(f"invalid inventory snapshot: {exc}") from exc

    logger.debug(
        "Snapshot from %s: %d hosts, %d datastores, %d VMs, %d resource pools",
        snapshot.metadata.server,
        len(snapshot.hosts),
        len(snapshot.datastores),
        len(snapshot.virtual_machines),
        len(snapshot.resource_pools),
    )
    return snapshot


def load_snapshot(path: str | Path) -> InventorySnapshot:
    return parse_snapshot(load_document(path))
