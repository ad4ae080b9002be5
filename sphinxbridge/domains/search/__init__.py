"""
Search Domain - Query translation and result hydration.

This domain handles:
- Attribute mappings between index and model
- Filter/order translation into backend primitives
- Page-based pagination
- Recursive facet expansion
- Search and multi-search execution
- Hydration of domain objects and result metadata
"""

from .collection import Collection
from .contracts import IndexTransport, ModelAdapter, Property, SearchConnection
from .facets import FacetExpander
from .hydrator import ResultHydrator
from .index import Index
from .mappings import IDENTITY, AttributeMapping, MappingTable
from .models import (
    Attr,
    Comparison,
    ComparisonOp,
    Operator,
    Pager,
    PagerOptions,
    PaginationDefaults,
    RawResult,
    SortDirection,
    TranslatedQuery,
)
from .pagination import PaginationResolver
from .translator import FilterTranslator, convert_order

__all__ = [
    # Contracts
    "ModelAdapter",
    "Property",
    "IndexTransport",
    "SearchConnection",
    # Models
    "Attr",
    "Operator",
    "Comparison",
    "ComparisonOp",
    "SortDirection",
    "TranslatedQuery",
    "RawResult",
    "Pager",
    "PagerOptions",
    "PaginationDefaults",
    # Engine
    "IDENTITY",
    "AttributeMapping",
    "MappingTable",
    "FilterTranslator",
    "convert_order",
    "FacetExpander",
    "PaginationResolver",
    "ResultHydrator",
    "Collection",
    "Index",
]
