"""Check settings: pairing attribute names, prefix separators and filters."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ds_pairing.errors import ConfigError

logger = logging.getLogger(__name__)


class CheckConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Either the shared attribute name, or both resource-specific names.
    custom_attribute_name: str = ""
    host_custom_attribute_name: str = ""
    datastore_custom_attribute_name: str = ""

    # No separator means literal value matching.
    custom_attribute_prefix_separator: str = ""
    host_custom_attribute_prefix_separator: str = ""
    datastore_custom_attribute_prefix_separator: str = ""

    ignore_missing_custom_attribute: bool = False
    ignored_datastores: list[str] = Field(default_factory=list)
    ignored_vms: list[str] = Field(default_factory=list)
    include_resource_pools: list[str] = Field(default_factory=list)
    exclude_resource_pools: list[str] = Field(default_factory=list)
    evaluate_powered_off_vms: bool = False

    @model_validator(mode="after")
    def _check_attribute_names(self) -> "CheckConfig":
        shared = self.custom_attribute_name
        host = self.host_custom_attribute_name
        ds = self.datastore_custom_attribute_name

        if not shared and not host and not ds:
            raise ValueError("one of shared or resource-specific Custom Attribute name must be specified")
        if shared and (host or ds):
            raise ValueError("only one of shared or resource-specific Custom Attribute name may be specified")
        if not shared and host and not ds:
            raise ValueError(
                "datastore Custom Attribute name must be specified if providing Custom Attribute name for hosts"
            )
        if not shared and ds and not host:
            raise ValueError(
                "host Custom Attribute name must be specified if providing Custom Attribute name for datastores"
            )
        return self

    @model_validator(mode="after")
    def _check_separators(self) -> "CheckConfig":
        shared = self.custom_attribute_prefix_separator
        host = self.host_custom_attribute_prefix_separator
        ds = self.datastore_custom_attribute_prefix_separator

        if shared and (host or ds):
            raise ValueError(
                "Custom Attribute prefix separators may only be specified as a shared value, "
                "or for both datastores and hosts"
            )
        if not shared and host and not ds:
            raise ValueError("datastore Custom Attribute prefix must be specified if providing prefix for hosts")
        if not shared and ds and not host:
            raise ValueError("host Custom Attribute prefix must be specified if providing prefix for datastores")
        return self

    @model_validator(mode="after")
    def _check_resource_pools(self) -> "CheckConfig":
        if self.include_resource_pools and self.exclude_resource_pools:
            raise ValueError("only one of include_resource_pools or exclude_resource_pools may be specified")
        return self

    @property
    def host_attribute_name(self) -> str:
        return self.custom_attribute_name or self.host_custom_attribute_name

    @property
    def datastore_attribute_name(self) -> str:
        return self.custom_attribute_name or self.datastore_custom_attribute_name

    @property
    def host_separator(self) -> str:
        return self.custom_attribute_prefix_separator or self.host_custom_attribute_prefix_separator

    @property
    def datastore_separator(self) -> str:
        return self.custom_attribute_prefix_separator or self.datastore_custom_attribute_prefix_separator

    @property
    def using_prefixes(self) -> bool:
        return bool(self.host_separator and self.datastore_separator)


def build_config(settings: dict[str, Any]) -> CheckConfig:
    """Validate a settings mapping, raising ConfigError with pydantic's message."""
    try:
        return CheckConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load raw settings from a YAML file. The result still needs build_config()."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"configuration file {path} is not a YAML mapping")

    logger.debug("Loaded %d setting(s) from %s", len(data), path)
    return data


def merge_settings(file_settings: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay CLI-provided values on file settings. Empty values do not override."""
    merged = dict(file_settings)
    for key, value in overrides.items():
        if value is None or value == "" or value == () or value == []:
            continue
        if isinstance(value, tuple):
            value = list(value)
        merged[key] = value
    return merged
