"""
Search Models - Data types for the translation and hydration engine.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, Field


class SortDirection(str, Enum):
    """Order directions understood by the backend."""

    ASC = "asc"
    DESC = "desc"


class ComparisonOp(str, Enum):
    """Primitive comparison operators understood by the backend."""

    NOT = "not"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    ComparisonOp.NOT: "!=",
    ComparisonOp.LT: "<",
    ComparisonOp.LTE: "<=",
    ComparisonOp.GT: ">",
    ComparisonOp.GTE: ">=",
}

FILTER_OPERATORS = frozenset(op.value for op in ComparisonOp)
ORDER_OPERATORS = frozenset(d.value for d in SortDirection)


class Comparison(BaseModel):
    """
    Backend filter primitive, e.g. ``views > 7``.

    A ``NOT`` comparison against a list or tuple means "not any of".
    """

    operator: ComparisonOp
    value: Any

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.operator.symbol} {self.value!r}"


class Operator(BaseModel):
    """
    A typed condition key: an attribute paired with an operator name.

    Used as a filter key (``{Attr("views").gt: 7}``) or as an order entry
    (``order=Attr("views").desc``). The operator name is not validated here;
    the translator decides what it accepts.
    """

    target: str
    operator: str

    model_config = {"frozen": True}


class Attr:
    """
    Builder for typed condition keys.

    Example:
        >>> index.search("badgers", {Attr("views").gte: 7}, order=Attr("views").desc)
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def op(self, operator: str) -> Operator:
        return Operator(target=self.name, operator=operator)

    @property
    def not_(self) -> Operator:
        return self.op("not")

    @property
    def lt(self) -> Operator:
        return self.op("lt")

    @property
    def lte(self) -> Operator:
        return self.op("lte")

    @property
    def gt(self) -> Operator:
        return self.op("gt")

    @property
    def gte(self) -> Operator:
        return self.op("gte")

    @property
    def asc(self) -> Operator:
        return self.op("asc")

    @property
    def desc(self) -> Operator:
        return self.op("desc")

    def __repr__(self) -> str:
        return f"Attr({self.name!r})"


class TranslatedQuery(NamedTuple):
    """Normalized (fulltext, options) pair handed to the transport."""

    fulltext: str
    options: dict[str, Any]


class RawResult(BaseModel):
    """Result as returned by a search transport."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    total_found: int = 0
    count: int | None = None  # returned rows; defaults to len(records)
    facets: dict[str, RawResult] = Field(default_factory=dict)
    time: float | None = None
    keywords: list[str] = Field(default_factory=list)
    docs: dict[str, int] = Field(default_factory=dict)

    @property
    def returned_count(self) -> int:
        return len(self.records) if self.count is None else self.count


class PaginationDefaults(BaseModel):
    """Pagination defaults supplied by the domain collaborator."""

    per_page: int = Field(default=20, ge=1)
    page_param: str = "page"

    model_config = {"frozen": True}


class PagerOptions(BaseModel):
    """Resolved pagination for a single search call."""

    page: int = Field(..., ge=1)
    page_param: str
    per_page: int = Field(..., ge=1)
    limit: int
    offset: int

    model_config = {"frozen": True}


class Pager(BaseModel):
    """Pagination metadata attached to a result collection."""

    current_page: int
    per_page: int
    total: int
    page_param: str = "page"
    limit: int
    offset: int

    model_config = {"frozen": True}

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def previous_page(self) -> int | None:
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.current_page + 1 if self.current_page < self.total_pages else None
