"""
SQLite Realtime Index - A searchd-like realtime index on SQLite FTS5.

Features:
- Async operations via aiosqlite
- Fulltext matching with FTS5 (porter stemming), relevance ordering
- Attribute filters: equality, lists (IN), ranges, comparisons
- Multi-field ordering, limit/offset, total_found ignoring limits
- Facets inheriting the parent query, nested to any depth
- Realtime insert/update/replace/delete
"""

from __future__ import annotations

import logging
import re
import sqlite3
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import aiosqlite

from sphinxbridge.config import Settings, get_settings
from sphinxbridge.config.errors import (
    ArgumentTypeError,
    IndexConfigurationError,
    TransportError,
)
from sphinxbridge.domains.search.models import Comparison, ComparisonOp, RawResult, SortDirection

logger = logging.getLogger(__name__)

__all__ = ["SQLiteConnection", "SQLiteIndex", "connect"]

# searchd applies this limit when a query does not set one.
DEFAULT_LIMIT = 20

# Placeholder a facet query can use to embed its parent's fulltext query.
QUERY_PLACEHOLDER = "%{query}"

ATTRIBUTE_TYPES = {
    "uint": "INTEGER",
    "bigint": "INTEGER",
    "bool": "INTEGER",
    "timestamp": "INTEGER",
    "float": "REAL",
    "string": "TEXT",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_KEYWORD = re.compile(r"\w+", re.UNICODE)


def _identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise IndexConfigurationError(f"Invalid identifier {name!r}", {"name": name})
    return f'"{name}"'


def _sql_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    return value


class SQLiteIndex:
    """
    Transport for one realtime index.

    Obtained from ``SQLiteConnection``; not constructed directly.
    """

    def __init__(
        self,
        connection: SQLiteConnection,
        name: str,
        fields: Sequence[str],
        attributes: Mapping[str, str],
    ) -> None:
        self._connection = connection
        self.name = name
        self.fields = tuple(fields)
        self.attributes = dict(attributes)
        self.columns = frozenset(("id", *self.fields, *self.attributes))
        self._table = _identifier(name)
        self._fts = _identifier(f"{name}_fts")

    def extract_query_data(
        self,
        args: Sequence[Any],
        options: Mapping[Any, Any] | None = None,
        default_query: str = "",
    ) -> tuple[str, dict[Any, Any]]:
        """
        Separate the fulltext query from option keys.

        A leading string is the fulltext query; mappings among the remaining
        positional arguments and the keyword options are merged, in order.
        """
        remaining = list(args)
        query = default_query
        if remaining and isinstance(remaining[0], str):
            query = remaining.pop(0)

        extracted: dict[Any, Any] = {}
        for arg in remaining:
            if isinstance(arg, Mapping):
                extracted.update(arg)
            elif arg is not None:
                raise ArgumentTypeError(
                    f"Unexpected search argument {arg!r}",
                    {"received": type(arg).__name__},
                )
        if options:
            extracted.update(options)
        return query, extracted

    async def search(self, query: str, options: dict[str, Any]) -> RawResult:
        """
        Execute a search.

        Args:
            query: Fulltext query (empty for attribute-only searches)
            options: Translated options: ``limit``, ``offset``, ``order``,
                ``facets`` and attribute filters

        Returns:
            Raw result including nested facet results
        """
        started = time.perf_counter()
        opts = dict(options)
        facets = opts.pop("facets", None) or {}
        limit = opts.pop("limit", None)
        offset = opts.pop("offset", None) or 0
        order = opts.pop("order", None) or []

        from_sql, where, params = self._compile_filters(query, opts)
        order_sql = self._compile_order(query, order)
        limit = DEFAULT_LIMIT if limit is None else int(limit)

        conn = await self._connection._get_connection()
        try:
            cursor = await conn.execute(f"SELECT COUNT(*) {from_sql} {where}", params)
            row = await cursor.fetchone()
            total_found = row[0] if row else 0

            cursor = await conn.execute(
                f"SELECT d.* {from_sql} {where} {order_sql} LIMIT ? OFFSET ?",
                (*params, limit, int(offset)),
            )
            records = [dict(r) for r in await cursor.fetchall()]

            keywords, docs = await self._keyword_stats(conn, query)
        except sqlite3.Error as exc:
            raise TransportError(
                f"Search on {self.name} failed: {exc}",
                {"index": self.name, "query": query},
            ) from exc

        facet_results: dict[str, RawResult] = {}
        for facet_name, (facet_query, facet_options) in facets.items():
            inherited = {k: v for k, v in options.items() if k != "facets"}
            inherited.update(facet_options)
            facet_results[facet_name] = await self.search(
                self._facet_query(query, facet_query),
                inherited,
            )

        logger.debug(
            "SQLite search %s: query='%s' -> %d of %d",
            self.name,
            query[:50],
            len(records),
            total_found,
        )
        return RawResult(
            records=records,
            total_found=total_found,
            count=len(records),
            facets=facet_results,
            time=round(time.perf_counter() - started, 6),
            keywords=keywords,
            docs=docs,
        )

    async def multi_search(
        self,
        queries: dict[str, tuple[str, dict[str, Any]]],
    ) -> dict[str, RawResult]:
        """Execute a batch of named searches, one after another."""
        return {name: await self.search(query, options) for name, (query, options) in queries.items()}

    async def insert(self, id: Any, record: dict[str, Any]) -> int:
        """Insert a document; fails if the id already exists."""
        columns, values = self._columns(id, record)
        placeholders = ", ".join("?" for _ in values)
        return await self._write(
            f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})",
            values,
            "insert",
        )

    async def update(self, id: Any, record: dict[str, Any]) -> int:
        """Update attributes of an existing document."""
        self._check_columns(record)
        if not record:
            return 0
        assignments = ", ".join(f"{_identifier(k)} = ?" for k in record)
        return await self._write(
            f"UPDATE {self._table} SET {assignments} WHERE id = ?",
            [*(_sql_value(v) for v in record.values()), id],
            "update",
        )

    async def replace(self, id: Any, record: dict[str, Any]) -> int:
        """Insert a document, overwriting any document with the same id."""
        columns, values = self._columns(id, record)
        placeholders = ", ".join("?" for _ in values)
        conn = await self._connection._get_connection()
        try:
            await conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (id,))
            cursor = await conn.execute(
                f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})",
                values,
            )
            await conn.commit()
        except sqlite3.Error as exc:
            await conn.rollback()
            raise TransportError(
                f"replace on {self.name} failed: {exc}",
                {"index": self.name, "id": id},
            ) from exc
        return cursor.rowcount

    async def delete(self, id: Any) -> int:
        """Delete a document."""
        return await self._write(f"DELETE FROM {self._table} WHERE id = ?", [id], "delete")

    async def _write(self, sql: str, values: Sequence[Any], operation: str) -> int:
        conn = await self._connection._get_connection()
        try:
            cursor = await conn.execute(sql, tuple(values))
            await conn.commit()
        except sqlite3.Error as exc:
            await conn.rollback()
            raise TransportError(
                f"{operation} on {self.name} failed: {exc}",
                {"index": self.name, "operation": operation},
            ) from exc
        return cursor.rowcount

    def _check_columns(self, keys: Any) -> None:
        unknown = sorted(set(keys) - self.columns)
        if unknown:
            raise TransportError(
                f"Unknown attribute(s) on {self.name}: {', '.join(map(str, unknown))}",
                {"index": self.name, "attributes": unknown},
            )

    def _columns(self, id: Any, record: dict[str, Any]) -> tuple[str, list[Any]]:
        self._check_columns(record)
        names = ["id", *record]
        values = [id, *(_sql_value(v) for v in record.values())]
        return ", ".join(_identifier(n) for n in names), values

    def _compile_filters(
        self,
        query: str,
        filters: dict[str, Any],
    ) -> tuple[str, str, list[Any]]:
        self._check_columns(filters)
        clauses: list[str] = []
        params: list[Any] = []

        if query:
            if not self.fields:
                raise TransportError(
                    f"Index {self.name} has no fulltext fields",
                    {"index": self.name, "query": query},
                )
            from_sql = f"FROM {self._fts} JOIN {self._table} AS d ON d.id = {self._fts}.rowid"
            clauses.append(f"{self._fts} MATCH ?")
            params.append(query)
        else:
            from_sql = f"FROM {self._table} AS d"

        for attr, value in filters.items():
            column = f"d.{_identifier(attr)}"
            if isinstance(value, Comparison):
                clause, values = self._compile_comparison(column, value)
            elif isinstance(value, range):
                clause, values = f"{column} BETWEEN ? AND ?", [value.start, value.stop - 1]
            elif isinstance(value, (list, tuple, set, frozenset)):
                values = [_sql_value(v) for v in value]
                clause = f"{column} IN ({', '.join('?' for _ in values)})" if values else "0"
            else:
                clause, values = f"{column} = ?", [_sql_value(value)]
            clauses.append(clause)
            params.extend(values)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return from_sql, where, params

    @staticmethod
    def _compile_comparison(column: str, comparison: Comparison) -> tuple[str, list[Any]]:
        value = comparison.value
        if comparison.operator is ComparisonOp.NOT:
            if isinstance(value, (list, tuple, set, frozenset)):
                values = [_sql_value(v) for v in value]
                if not values:
                    return "1", []
                return f"{column} NOT IN ({', '.join('?' for _ in values)})", values
            if isinstance(value, range):
                return f"{column} NOT BETWEEN ? AND ?", [value.start, value.stop - 1]
        return f"{column} {comparison.operator.symbol} ?", [_sql_value(value)]

    def _compile_order(self, query: str, order: Sequence[tuple[str, Any]]) -> str:
        if not order:
            return f"ORDER BY {self._fts}.rank, d.id" if query else "ORDER BY d.id"
        self._check_columns(attr for attr, _ in order)
        terms = []
        for attr, direction in order:
            direction = SortDirection(direction)
            terms.append(f"d.{_identifier(attr)} {direction.value.upper()}")
        return f"ORDER BY {', '.join(terms)}"

    @staticmethod
    def _facet_query(parent: str, facet: str) -> str:
        if not facet:
            return parent
        return facet.replace(QUERY_PLACEHOLDER, parent)

    async def _keyword_stats(
        self,
        conn: aiosqlite.Connection,
        query: str,
    ) -> tuple[list[str], dict[str, int]]:
        keywords = [k.lower() for k in _KEYWORD.findall(query)]
        docs: dict[str, int] = {}
        for keyword in keywords:
            if keyword in docs:
                continue
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM {self._fts} WHERE {self._fts} MATCH ?",
                (f'"{keyword}"',),
            )
            row = await cursor.fetchone()
            docs[keyword] = row[0] if row else 0
        return keywords, docs


class SQLiteConnection:
    """
    SQLite-backed connection to a set of realtime indexes.

    Example:
        >>> conn = SQLiteConnection("data/indexes.db")
        >>> await conn.define_index(
        ...     "posts_rt",
        ...     fields=["title", "body"],
        ...     attributes={"views": "uint", "user_id": "uint"},
        ... )
        >>> await conn["posts_rt"].insert(1, {"title": "Badgers", "views": 7})
        1
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        if str(db_path) == ":memory:":
            self.db_path: str | Path = ":memory:"
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None
        self._indexes: dict[str, SQLiteIndex] = {}

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def define_index(
        self,
        name: str,
        fields: Sequence[str] = (),
        attributes: Mapping[str, str] | None = None,
    ) -> SQLiteIndex:
        """
        Declare a realtime index, creating its tables if needed.

        Args:
            name: Index name
            fields: Fulltext fields
            attributes: Attribute name -> type (uint, bigint, bool,
                timestamp, float, string)

        Returns:
            The index transport
        """
        attributes = dict(attributes or {})
        unknown_types = {t for t in attributes.values() if t not in ATTRIBUTE_TYPES}
        if unknown_types:
            raise IndexConfigurationError(
                f"Unknown attribute type(s): {', '.join(sorted(unknown_types))}",
                {"index": name},
            )
        if "id" in fields or "id" in attributes:
            raise IndexConfigurationError("'id' is reserved for the document id", {"index": name})

        index = SQLiteIndex(self, name, fields, attributes)
        columns = ["id INTEGER PRIMARY KEY"]
        columns += [f"{_identifier(f)} TEXT" for f in index.fields]
        columns += [f"{_identifier(a)} {ATTRIBUTE_TYPES[t]}" for a, t in attributes.items()]

        conn = await self._get_connection()
        await conn.execute(f"CREATE TABLE IF NOT EXISTS {_identifier(name)} ({', '.join(columns)})")

        if index.fields:
            table = name
            fts = f"{name}_fts"
            field_list = ", ".join(_identifier(f) for f in index.fields)
            new_values = ", ".join(f"new.{_identifier(f)}" for f in index.fields)
            old_values = ", ".join(f"old.{_identifier(f)}" for f in index.fields)
            await conn.executescript(f"""
                CREATE VIRTUAL TABLE IF NOT EXISTS "{fts}" USING fts5(
                    {field_list},
                    content='{table}',
                    content_rowid='id',
                    tokenize='porter'
                );

                CREATE TRIGGER IF NOT EXISTS "{table}_ai" AFTER INSERT ON "{table}" BEGIN
                    INSERT INTO "{fts}"(rowid, {field_list}) VALUES (new.id, {new_values});
                END;

                CREATE TRIGGER IF NOT EXISTS "{table}_ad" AFTER DELETE ON "{table}" BEGIN
                    INSERT INTO "{fts}"("{fts}", rowid, {field_list})
                    VALUES ('delete', old.id, {old_values});
                END;

                CREATE TRIGGER IF NOT EXISTS "{table}_au" AFTER UPDATE ON "{table}" BEGIN
                    INSERT INTO "{fts}"("{fts}", rowid, {field_list})
                    VALUES ('delete', old.id, {old_values});
                    INSERT INTO "{fts}"(rowid, {field_list}) VALUES (new.id, {new_values});
                END;
            """)

        await conn.commit()
        self._indexes[name] = index
        logger.info(
            "Index defined: %s (%d field(s), %d attribute(s))",
            name,
            len(index.fields),
            len(attributes),
        )
        return index

    def __getitem__(self, name: str) -> SQLiteIndex:
        try:
            return self._indexes[name]
        except KeyError:
            raise IndexConfigurationError(f"Unknown index {name!r}", {"index": name}) from None

    def __contains__(self, name: object) -> bool:
        return name in self._indexes

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None


def connect(settings: Settings | None = None) -> SQLiteConnection:
    """Create a connection from explicit settings (or the environment)."""
    settings = settings or get_settings()
    return SQLiteConnection(settings.index_db_path)
