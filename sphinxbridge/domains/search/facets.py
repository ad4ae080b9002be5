"""
Facet Expander - Recursive translation of named facet sub-queries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sphinxbridge.config.errors import QueryTranslationError

from .models import TranslatedQuery

if TYPE_CHECKING:
    from .translator import FilterTranslator

logger = logging.getLogger(__name__)

__all__ = ["FacetExpander"]


class FacetExpander:
    """
    Expands a ``facets`` option into a tree of translated sub-queries.

    A facet is given as a fulltext string, a mapping of options, or a
    tuple/list of positional search arguments. A facet's options may carry
    their own ``facets`` key; the tree has no depth limit, but a facet
    definition must not contain itself. A facet's ``pager`` is resolved into
    ``limit``/``offset`` by the translator's pagination resolver, or dropped
    when there is none.
    """

    def __init__(self, translator: FilterTranslator) -> None:
        self._translator = translator

    def expand(self, facets: Any) -> dict[str, TranslatedQuery]:
        """
        Translate every facet definition.

        Args:
            facets: Mapping of facet name -> facet definition

        Returns:
            Mapping of facet name -> translated query
        """
        if not isinstance(facets, Mapping):
            raise QueryTranslationError(
                "Facets must be a mapping of name -> search arguments",
                {"facets": type(facets).__name__},
            )

        try:
            expanded: dict[str, TranslatedQuery] = {}
            for name, spec in facets.items():
                query = self._translator.translate(*self._split(spec))
                self._apply_pager(query.options)
                expanded[str(name)] = query
        except RecursionError:
            raise QueryTranslationError(
                "Facet definitions are self-referential",
                {"facets": list(map(str, facets))},
            ) from None

        logger.debug("Expanded %d facet(s): %s", len(expanded), ", ".join(expanded))
        return expanded

    def _apply_pager(self, options: dict[str, Any]) -> None:
        # A facet's pager only becomes limit/offset; facets carry no Pager.
        pagination = self._translator.pagination
        if pagination is None:
            options.pop("pager", None)
        else:
            pagination.resolve(options)

    @staticmethod
    def _split(spec: Any) -> tuple[tuple[Any, ...], Mapping[Any, Any] | None]:
        if spec is None:
            return (), None
        if isinstance(spec, (str, Mapping)):
            return (spec,), None
        if isinstance(spec, (tuple, list)):
            return tuple(spec), None
        raise QueryTranslationError(
            f"Cannot interpret facet definition {spec!r}",
            {"facet": repr(spec)},
        )
