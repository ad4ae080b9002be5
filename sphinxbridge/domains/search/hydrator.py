"""
Result Hydrator - Turns raw search records into domain objects.

No query is issued to the domain's own storage: only the mapped attributes
are populated and marked loaded, any other property is left for the domain
layer to fetch lazily.
"""

from __future__ import annotations

import logging
from typing import Any

from .collection import Collection
from .contracts import ModelAdapter
from .mappings import MappingTable
from .models import PagerOptions, RawResult
from .pagination import PaginationResolver

logger = logging.getLogger(__name__)

__all__ = ["ResultHydrator"]


class ResultHydrator:
    """
    Builds result collections for one index.

    Example:
        >>> hydrator = ResultHydrator(model, mappings)
        >>> posts = hydrator.hydrate(raw_result)
        >>> posts.total_found, posts.count
        (3, 2)
    """

    def __init__(self, model: ModelAdapter, mappings: MappingTable) -> None:
        self._model = model
        self._mappings = mappings

    def hydrate_record(self, record: dict[str, Any]) -> tuple[Any, list[str]]:
        """
        Construct one domain object from a raw record.

        Returns:
            The new instance and the properties that were loaded onto it
        """
        instance = self._model.new_instance()
        loaded: list[str] = []
        for attribute, value in record.items():
            if attribute not in self._mappings:
                continue
            mapping = self._mappings[attribute]
            mapping.set(instance, value)
            loaded.append(mapping.property)

        self._model.mark_clean(instance)
        for name in loaded:
            self._model.mark_loaded(instance, name)
        return instance, loaded

    def hydrate(
        self,
        raw: RawResult,
        pager_options: PagerOptions | None = None,
    ) -> Collection:
        """
        Hydrate a raw result, including nested facet results.

        Args:
            raw: Result returned by the transport
            pager_options: Resolved pagination for this call, if any

        Returns:
            Collection of domain objects with metadata
        """
        resources = []
        fields: list[str] = []
        for record in raw.records:
            instance, loaded = self.hydrate_record(record)
            resources.append(instance)
            fields.extend(name for name in loaded if name not in fields)

        facets = {name: self.hydrate(facet) for name, facet in raw.facets.items()}

        if raw.returned_count != len(resources):
            logger.warning(
                "Transport reported %d returned rows but sent %d records",
                raw.returned_count,
                len(resources),
            )

        collection = Collection(
            resources,
            total_found=raw.total_found,
            facets=facets,
            pager=PaginationResolver.build_pager(raw, pager_options),
            time=raw.time,
            keywords=raw.keywords,
            docs=raw.docs,
            fields=tuple(fields),
            key=self._model.primary_key(),
        )
        logger.debug(
            "Hydrated %d of %d record(s), %d facet(s)",
            collection.count,
            collection.total_found,
            len(facets),
        )
        return collection
