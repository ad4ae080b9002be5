"""
Pagination Resolver - Page-based limit/offset resolution and pager metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .models import Pager, PagerOptions, PaginationDefaults, RawResult

logger = logging.getLogger(__name__)

__all__ = ["PaginationResolver"]


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class PaginationResolver:
    """
    Resolves a ``pager`` option into ``limit``/``offset``.

    The resolver is inert when ``defaults`` is None, i.e. when the domain
    collaborator has no pagination support.

    Example:
        >>> resolver = PaginationResolver(PaginationDefaults(per_page=10))
        >>> options = {"pager": {"page": 3}}
        >>> resolver.resolve(options).offset
        20
    """

    def __init__(self, defaults: PaginationDefaults | None) -> None:
        self._defaults = defaults

    @property
    def enabled(self) -> bool:
        return self._defaults is not None

    def resolve(self, options: dict[str, Any]) -> PagerOptions | None:
        """
        Pop ``pager`` from the options and apply it.

        Explicit ``limit``/``offset`` options win over the derived values.
        Page numbers below 1, or not numbers at all, are clamped to 1; pages
        past the end are left as they are and simply return no records.

        Args:
            options: Translated search options, mutated in place

        Returns:
            Resolved pager options, or None when no page was requested
        """
        pager = options.pop("pager", None)
        if self._defaults is None or not isinstance(pager, Mapping):
            return None

        page = pager.get("page")
        if page is None:
            return None

        page = max(_to_int(page, 1), 1)
        per_page = _to_int(pager.get("per_page"), 0)
        if per_page < 1:
            per_page = self._defaults.per_page
        page_param = pager.get("page_param") or self._defaults.page_param

        if options.get("limit") is None:
            options["limit"] = per_page
        if options.get("offset") is None:
            options["offset"] = (page - 1) * per_page

        resolved = PagerOptions(
            page=page,
            page_param=page_param,
            per_page=per_page,
            limit=int(options["limit"]),
            offset=int(options["offset"]),
        )
        logger.debug(
            "Resolved page %d (%s) -> limit=%d offset=%d",
            resolved.page,
            resolved.page_param,
            resolved.limit,
            resolved.offset,
        )
        return resolved

    @staticmethod
    def build_pager(raw: RawResult, options: PagerOptions | None) -> Pager | None:
        """Build pager metadata from the final total, if a page was requested."""
        if options is None:
            return None
        return Pager(
            current_page=options.page,
            per_page=options.per_page,
            total=raw.total_found,
            page_param=options.page_param,
            limit=options.limit,
            offset=options.offset,
        )
