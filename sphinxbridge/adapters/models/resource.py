"""
Pydantic Resource Adapter - Domain objects for the search bridge.

Features:
- ``Resource`` base model with persistence state and loaded-property tracking
- ``ResourceAdapter`` exposing a Resource subclass through ``ModelAdapter``
- Property load/dump through ``pydantic.TypeAdapter``
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, PrivateAttr, TypeAdapter

from sphinxbridge.config import Settings, get_settings
from sphinxbridge.domains.search.models import PaginationDefaults

logger = logging.getLogger(__name__)

__all__ = ["FieldProperty", "PersistenceState", "Resource", "ResourceAdapter"]


class PersistenceState(str, Enum):
    """Lifecycle state of a resource."""

    TRANSIENT = "transient"  # built in memory, never loaded
    CLEAN = "clean"  # loaded and unmodified
    DIRTY = "dirty"  # loaded, then modified


class Resource(BaseModel):
    """
    Base model for searchable domain objects.

    Example:
        >>> class Post(Resource):
        ...     id: int | None = None
        ...     title: str = ""
        ...     view_count: int = 0
        >>> Post.storage_name()
        'posts'
    """

    __storage_name__: ClassVar[str | None] = None
    __primary_key__: ClassVar[str] = "id"

    _state: PersistenceState = PrivateAttr(default=PersistenceState.TRANSIENT)
    _loaded: set[str] = PrivateAttr(default_factory=set)

    @classmethod
    def storage_name(cls) -> str:
        return cls.__storage_name__ or f"{cls.__name__.lower()}s"

    @property
    def persistence_state(self) -> PersistenceState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is PersistenceState.DIRTY

    @property
    def loaded_properties(self) -> frozenset[str]:
        """Properties holding loaded values; everything for transient resources."""
        if self._state is PersistenceState.TRANSIENT:
            return frozenset(type(self).model_fields)
        return frozenset(self._loaded)

    def is_loaded(self, name: str) -> bool:
        return name in self.loaded_properties

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name in type(self).model_fields and self._state is PersistenceState.CLEAN:
            self._state = PersistenceState.DIRTY


class FieldProperty:
    """A typed property backed by a pydantic field annotation."""

    def __init__(self, name: str, annotation: Any) -> None:
        self.name = name
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    def load(self, raw: Any) -> Any:
        return self._adapter.validate_python(raw)

    def dump(self, value: Any) -> Any:
        return self._adapter.dump_python(value, mode="json")

    def __repr__(self) -> str:
        return f"FieldProperty({self.name!r})"


class ResourceAdapter:
    """
    ``ModelAdapter`` implementation for ``Resource`` subclasses.

    Example:
        >>> adapter = ResourceAdapter(Post, settings=Settings(default_per_page=10))
        >>> adapter.primary_key()
        'id'
    """

    def __init__(self, model: type[Resource], settings: Settings | None = None) -> None:
        """
        Initialize adapter.

        Args:
            model: Resource subclass stored in the index
            settings: Settings providing pagination defaults
        """
        self.model = model
        self._settings = settings or get_settings()
        self._properties = {
            name: FieldProperty(name, field.annotation)
            for name, field in model.model_fields.items()
        }

    def storage_name(self) -> str:
        return self.model.storage_name()

    def primary_key(self) -> str:
        return self.model.__primary_key__

    def properties(self) -> dict[str, FieldProperty]:
        return self._properties

    def new_instance(self) -> Resource:
        return self.model.model_construct()

    def mark_clean(self, instance: Resource) -> None:
        instance._state = PersistenceState.CLEAN

    def mark_loaded(self, instance: Resource, name: str) -> None:
        if name in self._properties:
            instance._loaded.add(name)
        else:
            logger.debug("Ignoring unknown property %s.%s", self.model.__name__, name)

    def pagination_defaults(self) -> PaginationDefaults | None:
        if not self._settings.pagination_enabled:
            return None
        return PaginationDefaults(
            per_page=self._settings.default_per_page,
            page_param=self._settings.default_page_param,
        )
