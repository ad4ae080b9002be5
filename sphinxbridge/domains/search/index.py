"""
Index - Gateway between a domain model and a search index.

Features:
- Fulltext and attribute search returning hydrated collections
- Nested facets and batched multi-search
- Page-based pagination
- Realtime insert/update/replace/delete through the mapping table
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sphinxbridge.config.errors import ArgumentTypeError, MissingIdentifierError

from .collection import Collection
from .contracts import IndexTransport, ModelAdapter, SearchConnection
from .hydrator import ResultHydrator
from .mappings import IDENTITY, AttributeMapping, Getter, MappingTable, Setter
from .models import PagerOptions, TranslatedQuery
from .pagination import PaginationResolver
from .translator import FilterTranslator

logger = logging.getLogger(__name__)

__all__ = ["Index"]


class Index:
    """
    Searches a realtime index and hydrates domain objects from the results.

    Example:
        >>> index = Index(
        ...     ResourceAdapter(Post),
        ...     connection,
        ...     name="posts_rt",
        ...     setup=lambda idx: idx.map("views", with_="view_count"),
        ... )
        >>> posts = await index.search("badgers", views__gte=7, order=Attr("views").desc)
        >>> posts.total_found
        2
    """

    def __init__(
        self,
        model: ModelAdapter,
        connection: SearchConnection,
        *,
        name: str | None = None,
        setup: Callable[[Index], None] | None = None,
    ) -> None:
        """
        Initialize an index for a model.

        Args:
            model: Domain collaborator for the model stored in the index
            connection: Connection to the search server
            name: Index name (defaults to the model's storage name)
            setup: Called with the index so mappings can be configured
        """
        self.model = model
        self.name = name or model.storage_name()
        self.connection = connection
        self.mappings = MappingTable(model.properties(), self.name)

        self.map(IDENTITY, with_=model.primary_key())
        if setup is not None:
            setup(self)
        self.mappings.freeze()

        self._pagination = PaginationResolver(model.pagination_defaults())
        self._hydrator = ResultHydrator(model, self.mappings)

    @property
    def transport(self) -> IndexTransport:
        return self.connection[self.name]

    def map(
        self,
        attribute: str,
        *,
        with_: str | None = None,
        get: Getter | None = None,
        set: Setter | None = None,
    ) -> AttributeMapping:
        """
        Map an attribute in the index onto a property of the model.

        Args:
            attribute: Attribute name in the search index
            with_: Model property, if not named the same as the attribute
            get: Returns the value to write for an instance (realtime writes)
            set: Assigns a search value onto a new instance (hydration)
        """
        return self.mappings.register(attribute, with_=with_, get=get, set=set)

    def prepare(self, *args: Any, **options: Any) -> tuple[TranslatedQuery, PagerOptions | None]:
        """
        Translate search arguments without executing them.

        Returns:
            The query as the transport will receive it, and resolved pagination
        """
        query = FilterTranslator(self.transport, self._pagination).translate(args, options)
        pager_options = self._pagination.resolve(query.options)
        return query, pager_options

    async def search(self, *args: Any, **options: Any) -> Collection:
        """
        Perform a fulltext and/or attribute search.

        Args:
            *args: Optional fulltext query, and/or mappings of conditions
                keyed by ``Attr(...)`` operators
            **options: ``limit``, ``offset``, ``order``, ``facets``,
                ``pager``; any other key is an attribute filter, with an
                optional ``__not``/``__lt``/``__lte``/``__gt``/``__gte`` suffix

        Returns:
            Collection of hydrated domain objects
        """
        query, pager_options = self.prepare(*args, **options)
        raw = await self.transport.search(query.fulltext, query.options)

        logger.info(
            "Search %s: query='%s' -> %d of %d record(s)",
            self.name,
            query.fulltext[:50],
            raw.returned_count,
            raw.total_found,
        )
        return self._hydrator.hydrate(raw, pager_options)

    async def multi_search(self, searches: Mapping[str, Any]) -> dict[str, Collection]:
        """
        Perform several unrelated searches in one batch.

        Args:
            searches: Search name -> arguments, where arguments are a fulltext
                string, a mapping of options, or a tuple/list of positional
                search arguments

        Returns:
            Search name -> Collection
        """
        if not isinstance(searches, Mapping):
            raise ArgumentTypeError(
                "multi_search requires a mapping of name -> search arguments",
                {"received": type(searches).__name__},
            )

        prepared: dict[str, tuple[TranslatedQuery, PagerOptions | None]] = {}
        for name, spec in searches.items():
            if isinstance(spec, (str, Mapping)):
                prepared[name] = self.prepare(spec)
            elif isinstance(spec, (tuple, list)):
                prepared[name] = self.prepare(*spec)
            else:
                raise ArgumentTypeError(
                    f"Cannot interpret search arguments for {name!r}",
                    {"name": name, "received": type(spec).__name__},
                )

        results = await self.transport.multi_search(
            {name: (query.fulltext, query.options) for name, (query, _) in prepared.items()}
        )
        logger.info("Multi-search %s: %d search(es)", self.name, len(prepared))

        return {
            name: self._hydrator.hydrate(results[name], pager_options)
            for name, (_, pager_options) in prepared.items()
        }

    async def insert(self, resource: Any) -> int:
        """
        Insert a resource into the realtime index.

        Returns:
            Number of documents inserted
        """
        id_, record = self._write_payload(resource, "insert")
        count = await self.transport.insert(id_, record)
        logger.info("Inserted %s #%s (%d)", self.name, id_, count)
        return count

    async def update(self, resource: Any) -> int:
        """
        Update a resource's attributes in the realtime index.

        Returns:
            Number of documents updated
        """
        id_, record = self._write_payload(resource, "update")
        count = await self.transport.update(id_, record)
        logger.info("Updated %s #%s (%d)", self.name, id_, count)
        return count

    async def replace(self, resource: Any) -> int:
        """
        Insert or overwrite a resource in the realtime index.

        Returns:
            Number of documents replaced
        """
        id_, record = self._write_payload(resource, "replace")
        count = await self.transport.replace(id_, record)
        logger.info("Replaced %s #%s (%d)", self.name, id_, count)
        return count

    async def delete(self, resource: Any) -> int:
        """
        Delete a resource from the realtime index.

        Returns:
            Number of documents deleted
        """
        id_ = self.mappings.get(IDENTITY, resource)
        if id_ is None:
            raise MissingIdentifierError("delete", self.name)

        count = await self.transport.delete(id_)
        logger.info("Deleted %s #%s (%d)", self.name, id_, count)
        return count

    def _write_payload(self, resource: Any, operation: str) -> tuple[Any, dict[str, Any]]:
        record = self.mappings.record_for(resource)
        id_ = record.pop(IDENTITY, None)
        if id_ is None:
            raise MissingIdentifierError(operation, self.name)
        return id_, record
