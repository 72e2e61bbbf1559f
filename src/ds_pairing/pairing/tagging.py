"""Custom Attribute resolution for hosts and datastores.

A Custom Attribute lookup is a two step affair: the attribute *name* is
resolved to a numeric key using the inventory-wide field definitions
(``available_field``), then that key is looked up in the values set on the
object itself (``custom_value``).
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from ds_pairing.errors import TagNotSet, TagRetrievalFailed
from ds_pairing.models.inventory import Datastore, HostSystem, ManagedEntity

logger = logging.getLogger(__name__)

# Rendered in place of a tag value when the attribute is absent and tolerated.
NOT_SET = "NotSet"


class TaggedEntity(BaseModel):
    """A host or datastore together with its resolved pairing attribute."""

    model_config = ConfigDict(frozen=True)

    entity: ManagedEntity
    attribute: str
    # None when the attribute is not set and the caller tolerated that
    value: Optional[str] = None

    @property
    def id(self) -> str:
        return self.entity.id

    @property
    def name(self) -> str:
        return self.entity.name

    @property
    def is_set(self) -> bool:
        return self.value is not None

    @property
    def tag_value(self) -> str:
        return self.value if self.value is not None else NOT_SET


def _attribute_key(entity: ManagedEntity, attribute_name: str) -> int:
    if not entity.available_field:
        raise TagRetrievalFailed(
            attribute_name,
            entity.name,
            "no custom attributes defined within inventory for this type",
        )
    wanted = attribute_name.casefold()
    for field in entity.available_field:
        if field.name.casefold() == wanted:
            return field.key
    raise TagRetrievalFailed(attribute_name, entity.name, "failed to find a matching available field name")


def get_attribute_value(entity: ManagedEntity, attribute_name: str) -> str:
    """Return the value of *attribute_name* on *entity*.

    Raises TagNotSet when the attribute is defined but not applied to this
    object, TagRetrievalFailed for every other failure.
    """
    key = _attribute_key(entity, attribute_name)

    if not entity.custom_value:
        raise TagNotSet(attribute_name, entity.name)

    for custom in entity.custom_value:
        if not isinstance(custom.value, str):
            raise TagRetrievalFailed(
                attribute_name,
                entity.name,
                f"value for custom field key {custom.key} is not a string",
            )
        if custom.key == key:
            return custom.value

    raise TagNotSet(attribute_name, entity.name)


def custom_attributes(entity: ManagedEntity) -> dict[str, str]:
    """Return every Custom Attribute set on *entity* as a name -> value mapping."""
    if not entity.available_field or not entity.custom_value:
        raise TagNotSet("*", entity.name)

    values: dict[int, str] = {}
    for custom in entity.custom_value:
        if not isinstance(custom.value, str):
            raise TagRetrievalFailed(
                "*", entity.name, f"value for custom field key {custom.key} is not a string"
            )
        values[custom.key] = custom.value

    return {field.name: values[field.key] for field in entity.available_field if field.key in values}


def tag_entity(
    entity: ManagedEntity,
    attribute_name: str,
    ignore_missing: bool = False,
    log: logging.Logger | None = None,
) -> TaggedEntity:
    """Wrap *entity* with the value of *attribute_name*.

    With *ignore_missing* an absent attribute yields a TaggedEntity whose value
    is unset instead of raising TagNotSet. Retrieval failures always raise.
    """
    log = log or logger
    try:
        value: Optional[str] = get_attribute_value(entity, attribute_name)
    except TagNotSet:
        log.debug("custom attribute %r not set on %r", attribute_name, entity.name)
        if not ignore_missing:
            raise
        value = None
    except TagRetrievalFailed as exc:
        log.debug("custom attribute retrieval failed: %s", exc)
        raise

    return TaggedEntity(entity=entity, attribute=attribute_name, value=value)


def _tag_all(
    entities: Iterable[ManagedEntity],
    attribute_name: str,
    ignore_missing: bool,
    log: logging.Logger | None,
) -> list[TaggedEntity]:
    return [tag_entity(e, attribute_name, ignore_missing, log) for e in entities]


def tag_hosts(
    hosts: Iterable[HostSystem],
    attribute_name: str,
    ignore_missing: bool = False,
    log: logging.Logger | None = None,
) -> list[TaggedEntity]:
    return _tag_all(hosts, attribute_name, ignore_missing, log)


def tag_datastores(
    datastores: Iterable[Datastore],
    attribute_name: str,
    ignore_missing: bool = False,
    log: logging.Logger | None = None,
) -> list[TaggedEntity]:
    return _tag_all(datastores, attribute_name, ignore_missing, log)
