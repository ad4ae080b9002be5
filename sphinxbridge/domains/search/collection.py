"""
Collection - Hydrated search results with their metadata.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .models import Pager

__all__ = ["Collection"]


class Collection(list):
    """
    A list of hydrated domain objects carrying search metadata.

    Attributes:
        total_found: Number of matches ignoring limit/offset
        count: Number of records actually returned (``len(self)``)
        facets: Facet name -> nested Collection
        pager: Pagination metadata, if a page was requested
        time: Query time reported by the backend, in seconds
        keywords: Keywords the backend matched on
        docs: Per-keyword document counts
        fields: Model properties loaded on the records
        key: Name of the model's primary key property
    """

    def __init__(
        self,
        resources: Iterable[Any] = (),
        *,
        total_found: int = 0,
        facets: dict[str, Collection] | None = None,
        pager: Pager | None = None,
        time: float | None = None,
        keywords: list[str] | None = None,
        docs: dict[str, int] | None = None,
        fields: tuple[str, ...] = (),
        key: str = "id",
    ) -> None:
        super().__init__(resources)
        self.total_found = total_found
        self.facets = facets or {}
        self.pager = pager
        self.time = time
        self.keywords = keywords or []
        self.docs = docs or {}
        self.fields = fields
        self.key = key

    @property
    def count(self) -> int:  # type: ignore[override]
        return len(self)

    @property
    def ids(self) -> list[Any]:
        """Primary key values of the records, in result order."""
        return [getattr(resource, self.key, None) for resource in self]

    def __repr__(self) -> str:
        return (
            f"<Collection count={self.count} total_found={self.total_found} "
            f"facets={sorted(self.facets)}>"
        )
