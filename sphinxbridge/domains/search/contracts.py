"""
Search Contracts - Interfaces for the collaborators of the search domain.

The domain layer (models and instances) and the search transport are
external to the engine; it only relies on the protocols below.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .models import PaginationDefaults, RawResult


@runtime_checkable
class Property(Protocol):
    """A typed model property."""

    name: str

    def load(self, raw: Any) -> Any:
        """Convert a raw index value into the property's type."""
        ...

    def dump(self, value: Any) -> Any:
        """Convert a typed value into its raw index form."""
        ...


@runtime_checkable
class ModelAdapter(Protocol):
    """Contract for the domain/object layer."""

    def storage_name(self) -> str:
        """Default index name for the model."""
        ...

    def primary_key(self) -> str:
        """Name of the model's primary key property."""
        ...

    def properties(self) -> Mapping[str, Property]:
        """Typed properties declared by the model."""
        ...

    def new_instance(self) -> Any:
        """Construct an empty instance to hydrate."""
        ...

    def mark_clean(self, instance: Any) -> None:
        """Flag an instance as freshly loaded and unmodified."""
        ...

    def mark_loaded(self, instance: Any, name: str) -> None:
        """Flag a property as loaded; the rest stay subject to lazy fetch."""
        ...

    def pagination_defaults(self) -> PaginationDefaults | None:
        """Pagination defaults, or None when pagination is unsupported."""
        ...


@runtime_checkable
class IndexTransport(Protocol):
    """Contract for a single index on the search server."""

    def extract_query_data(
        self,
        args: Sequence[Any],
        options: Mapping[Any, Any] | None = None,
    ) -> tuple[str, dict[Any, Any]]:
        """Separate the fulltext query from option keys."""
        ...

    async def search(self, query: str, options: dict[str, Any]) -> RawResult:
        """Execute a search."""
        ...

    async def multi_search(
        self,
        queries: dict[str, tuple[str, dict[str, Any]]],
    ) -> dict[str, RawResult]:
        """Execute a batch of named searches."""
        ...

    async def insert(self, id: Any, record: dict[str, Any]) -> int:
        """Insert a document; returns affected rows."""
        ...

    async def update(self, id: Any, record: dict[str, Any]) -> int:
        """Update a document; returns affected rows."""
        ...

    async def replace(self, id: Any, record: dict[str, Any]) -> int:
        """Insert or overwrite a document; returns affected rows."""
        ...

    async def delete(self, id: Any) -> int:
        """Delete a document; returns affected rows."""
        ...


@runtime_checkable
class SearchConnection(Protocol):
    """Contract for a connection to the search server."""

    def __getitem__(self, name: str) -> IndexTransport:
        """Get the transport for a named index."""
        ...
