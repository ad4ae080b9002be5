"""
Filter/Order Translator - Compiles high-level query options into backend primitives.

Features:
- Typed conditions (``Attr("views").gt`` keys or ``views__gt`` keywords)
  rewritten into ``Comparison`` primitives on the target attribute
- Multi-field ordering normalized to ``[(attribute, SortDirection), ...]``
- Nested facet definitions expanded recursively
- Every other option passed through unchanged
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sphinxbridge.config.errors import QueryTranslationError, UnsupportedOperatorError

from .facets import FacetExpander
from .models import (
    FILTER_OPERATORS,
    ORDER_OPERATORS,
    Comparison,
    ComparisonOp,
    Operator,
    SortDirection,
    TranslatedQuery,
)

if TYPE_CHECKING:
    from .contracts import IndexTransport
    from .pagination import PaginationResolver

logger = logging.getLogger(__name__)

__all__ = ["FilterTranslator", "convert_condition", "convert_order"]

# Separator for keyword-style typed conditions, e.g. ``views__gte=7``.
# Any string key containing it is read as attr__op, so an equality filter on
# an attribute named like ``user__id`` is rejected as an unknown operator.
LOOKUP_SEP = "__"

OrderSpec = list[tuple[str, SortDirection]]


def convert_condition(target: str, operator: str, value: Any) -> Comparison:
    """Rewrite a typed condition into the backend's comparison primitive."""
    if operator not in FILTER_OPERATORS:
        raise UnsupportedOperatorError(operator, "filter", target)
    return Comparison(operator=ComparisonOp(operator), value=value)


def _direction(value: Any) -> SortDirection:
    if value is None:
        return SortDirection.ASC
    if isinstance(value, SortDirection):
        return value
    if isinstance(value, str) and value.lower() in ORDER_OPERATORS:
        return SortDirection(value.lower())
    raise UnsupportedOperatorError(str(value), "order")


def _is_pair(entry: Any) -> bool:
    return (
        isinstance(entry, tuple)
        and len(entry) == 2
        and isinstance(entry[0], (str, Operator))
        and (entry[1] is None or isinstance(entry[1], str))
    )


def _is_direction(value: Any) -> bool:
    return (
        value is None
        or isinstance(value, SortDirection)
        or (isinstance(value, str) and value.lower() in ORDER_OPERATORS)
    )


def _order_entry(entry: Any) -> tuple[str, SortDirection]:
    if isinstance(entry, Operator):
        if entry.operator not in ORDER_OPERATORS:
            raise UnsupportedOperatorError(entry.operator, "order")
        return entry.target, SortDirection(entry.operator)
    if isinstance(entry, str):
        return entry, SortDirection.ASC
    if _is_pair(entry):
        key, direction = entry
        if isinstance(key, Operator):
            return _order_entry(key)
        return key, _direction(direction)
    raise QueryTranslationError(
        f"Cannot interpret order entry {entry!r}",
        {"entry": repr(entry)},
    )


def convert_order(order: Any) -> OrderSpec:
    """
    Normalize an order specification.

    Accepts a bare attribute, an ``Operator`` with ``asc``/``desc``, an
    ``(attribute, direction)`` tuple, a mapping of attribute -> direction,
    or a sequence of any of these. A top-level 2-tuple is a pair only when
    its second item is a direction, so ``("user_id", "views")`` orders by
    both attributes. Bare attributes sort ascending.
    """
    if order is None:
        return []
    if isinstance(order, Mapping):
        entries: Sequence[Any] = list(order.items())
    elif isinstance(order, (str, Operator)) or (_is_pair(order) and _is_direction(order[1])):
        entries = [order]
    elif isinstance(order, Sequence):
        entries = order
    else:
        raise QueryTranslationError(
            f"Cannot interpret order {order!r}",
            {"order": repr(order)},
        )
    return [_order_entry(entry) for entry in entries]


class FilterTranslator:
    """
    Translates caller arguments into a ``(fulltext, options)`` pair.

    Example:
        >>> translator = FilterTranslator(connection["posts_rt"])
        >>> query, options = translator.translate(("badgers",), {"views__gt": 7, "order": "id"})
        >>> options["order"]
        [('id', <SortDirection.ASC: 'asc'>)]
    """

    def __init__(
        self,
        transport: IndexTransport,
        pagination: PaginationResolver | None = None,
    ) -> None:
        self._transport = transport
        self.pagination = pagination
        self._facets = FacetExpander(self)

    def translate(
        self,
        args: Sequence[Any] = (),
        options: Mapping[Any, Any] | None = None,
    ) -> TranslatedQuery:
        """
        Translate positional arguments and keyword options.

        Args:
            args: Positional search arguments (fulltext and/or condition mappings)
            options: Keyword options

        Returns:
            Normalized query ready for the transport
        """
        query, extracted = self._transport.extract_query_data(args, options)
        translated = TranslatedQuery(query, self.convert_options(extracted))
        logger.debug("Translated query %r -> %r", query, translated.options)
        return translated

    def convert_options(self, options: Mapping[Any, Any]) -> dict[str, Any]:
        """Rewrite typed conditions, order and facets; pass the rest through."""
        converted: dict[str, Any] = {}
        for key, value in options.items():
            if isinstance(key, Operator):
                converted[key.target] = convert_condition(key.target, key.operator, value)
            elif key == "order":
                converted["order"] = convert_order(value)
            elif key == "facets":
                converted["facets"] = self._facets.expand(value)
            elif isinstance(key, str) and LOOKUP_SEP in key.strip("_"):
                target, _, operator = key.rpartition(LOOKUP_SEP)
                converted[target] = convert_condition(target, operator, value)
            else:
                converted[key] = value
        return converted
