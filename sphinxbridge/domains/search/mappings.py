"""
Mapping Table - Bindings between index attributes and model properties.

Each mapping carries a getter (used to build realtime write payloads) and a
setter (used to hydrate search results). Mappings are registered while an
index is set up and are read-only afterwards, so one table can be shared by
any number of concurrent searches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from sphinxbridge.config.errors import IndexConfigurationError, MappingLookupError

from .contracts import Property

logger = logging.getLogger(__name__)

__all__ = ["IDENTITY", "AttributeMapping", "MappingTable", "default_getter", "default_setter"]

# Name of the document identity attribute on the search server.
IDENTITY = "id"

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


@dataclass(frozen=True)
class AttributeMapping:
    """A single attribute <-> property binding."""

    attribute: str
    property: str
    get: Getter
    set: Setter


def default_getter(properties: Mapping[str, Property], name: str) -> Getter:
    """Read ``name`` from an instance, dumping through its typed property."""
    prop = properties.get(name)

    def get(instance: Any) -> Any:
        value = getattr(instance, name, None)
        if prop is None or value is None:
            return value
        return prop.dump(value)

    return get


def default_setter(properties: Mapping[str, Property], name: str) -> Setter:
    """Assign ``name`` on an instance, loading through its typed property."""
    prop = properties.get(name)

    def set_(instance: Any, value: Any) -> None:
        if prop is not None and value is not None:
            value = prop.load(value)
        setattr(instance, name, value)

    return set_


class MappingTable:
    """
    Per-index table of attribute mappings.

    Example:
        >>> table = MappingTable(properties)
        >>> table.register("views", with_="view_count")
        >>> table.get("views", post)
        7
    """

    def __init__(
        self,
        properties: Mapping[str, Property] | None = None,
        index_name: str | None = None,
    ) -> None:
        self._properties = properties or {}
        self._index_name = index_name
        self._mappings: dict[str, AttributeMapping] = {}
        self._frozen = False

    def register(
        self,
        attribute: str,
        *,
        with_: str | None = None,
        get: Getter | None = None,
        set: Setter | None = None,
    ) -> AttributeMapping:
        """
        Map an index attribute onto a model property.

        Args:
            attribute: Attribute name in the search index
            with_: Model property, if not named the same as the attribute
            get: Callable returning the value to write for an instance
            set: Callable assigning a search value onto a new instance

        Returns:
            The registered mapping
        """
        if self._frozen:
            raise IndexConfigurationError(
                f"Cannot map {attribute!r} after the index has been set up",
                {"attribute": attribute, "index": self._index_name},
            )

        prop = with_ or attribute
        mapping = AttributeMapping(
            attribute=attribute,
            property=prop,
            get=get or default_getter(self._properties, prop),
            set=set or default_setter(self._properties, prop),
        )
        self._mappings[attribute] = mapping
        logger.debug("Mapped %s.%s -> %s", self._index_name, attribute, prop)
        return mapping

    def freeze(self) -> None:
        """Disallow further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, attribute: str) -> AttributeMapping:
        try:
            return self._mappings[attribute]
        except KeyError:
            raise MappingLookupError(attribute, self._index_name) from None

    def __contains__(self, attribute: object) -> bool:
        return attribute in self._mappings

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def get(self, attribute: str, instance: Any) -> Any:
        """Read the mapped value of ``attribute`` from an instance."""
        return self[attribute].get(instance)

    def set(self, attribute: str, instance: Any, value: Any) -> Any:
        """Assign ``value`` to the property mapped by ``attribute``."""
        self[attribute].set(instance, value)
        return instance

    def record_for(self, instance: Any) -> dict[str, Any]:
        """Build a write payload by invoking every getter."""
        return {attr: mapping.get(instance) for attr, mapping in self._mappings.items()}
