"""Tests for the SQLite realtime index transport."""

import pytest
from pathlib import Path

from sphinxbridge.config.errors import ArgumentTypeError, IndexConfigurationError, TransportError
from sphinxbridge.domains.search.models import (
    Comparison,
    ComparisonOp,
    SortDirection,
    TranslatedQuery,
)

from .transport import DEFAULT_LIMIT, SQLiteConnection, SQLiteIndex


@pytest.fixture
async def conn(tmp_path: Path):
    """Create a connection with a books index."""
    conn = SQLiteConnection(tmp_path / "test.db")
    await conn.define_index(
        "books_rt",
        fields=["title", "summary"],
        attributes={"year": "uint", "price": "float", "in_print": "bool"},
    )
    yield conn
    await conn.close()


@pytest.fixture
async def books(conn: SQLiteConnection):
    """Books index with a few documents."""
    books = conn["books_rt"]
    await books.insert(1, {"title": "The Hobbit", "summary": "A dragon and a burglar", "year": 1937, "price": 8.5, "in_print": True})
    await books.insert(2, {"title": "Dune", "summary": "Spice and sand worms", "year": 1965, "price": 9.99, "in_print": True})
    await books.insert(3, {"title": "Dragonflight", "summary": "Dragons of Pern", "year": 1968, "price": 6.0, "in_print": False})
    await books.insert(4, {"title": "Earthsea", "summary": "A wizard and a dragon", "year": 1968, "price": 7.25, "in_print": True})
    return books


# --- Definition Tests ---


async def test_define_index_creates_tables(conn: SQLiteConnection):
    """Test the document and FTS tables exist."""
    db = await conn._get_connection()
    cursor = await db.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in await cursor.fetchall()}

    assert "books_rt" in tables
    assert "books_rt_fts" in tables


async def test_unknown_index(conn: SQLiteConnection):
    """Test looking up an undeclared index fails."""
    assert "books_rt" in conn
    with pytest.raises(IndexConfigurationError, match="missing_rt"):
        conn["missing_rt"]


@pytest.mark.parametrize(
    ("fields", "attributes"),
    [
        (["title"], {"year": "decimal"}),
        (["id"], {}),
        (["bad name"], {}),
    ],
)
async def test_define_index_validates(conn: SQLiteConnection, fields, attributes):
    """Test bad declarations are rejected."""
    with pytest.raises(IndexConfigurationError):
        await conn.define_index("other_rt", fields=fields, attributes=attributes)


# --- Query Data Tests ---


def test_extract_query_data():
    """Test fulltext and options are separated."""
    index = SQLiteIndex(SQLiteConnection(":memory:"), "books_rt", ["title"], {})

    assert index.extract_query_data(("dragons",)) == ("dragons", {})
    assert index.extract_query_data(("dragons", {"year": 1968}), {"limit": 2}) == (
        "dragons",
        {"year": 1968, "limit": 2},
    )
    assert index.extract_query_data(({"year": 1968},)) == ("", {"year": 1968})
    assert index.extract_query_data((), {"limit": 1}) == ("", {"limit": 1})

    with pytest.raises(ArgumentTypeError):
        index.extract_query_data(("dragons", 42))


# --- Search Tests ---


async def test_fulltext_search(books: SQLiteIndex):
    """Test fulltext matching with stemming."""
    result = await books.search("dragon", {"order": [("id", SortDirection.ASC)]})

    assert [r["id"] for r in result.records] == [1, 3, 4]
    assert result.total_found == 3
    assert result.count == 3
    assert result.keywords == ["dragon"]
    assert result.docs == {"dragon": 3}
    assert result.time is not None


async def test_records_include_all_columns(books: SQLiteIndex):
    """Test records carry id, fields and attributes."""
    result = await books.search("dune", {})
    assert result.records == [
        {"id": 2, "title": "Dune", "summary": "Spice and sand worms", "year": 1965, "price": 9.99, "in_print": 1}
    ]


async def test_filters(books: SQLiteIndex):
    """Test equality, list, range, bool and comparison filters."""
    async def ids(options):
        result = await books.search("", {**options, "order": [("id", SortDirection.ASC)]})
        return [r["id"] for r in result.records]

    assert await ids({"year": 1968}) == [3, 4]
    assert await ids({"year": [1937, 1965]}) == [1, 2]
    assert await ids({"year": range(1960, 1966)}) == [2]
    assert await ids({"in_print": False}) == [3]
    assert await ids({"price": Comparison(operator=ComparisonOp.LT, value=8)}) == [3, 4]
    assert await ids({"year": Comparison(operator=ComparisonOp.NOT, value=1968)}) == [1, 2]
    assert await ids({"year": Comparison(operator=ComparisonOp.NOT, value=[1937, 1965])}) == [3, 4]
    assert await ids({"year": Comparison(operator=ComparisonOp.GTE, value=1965), "in_print": True}) == [2, 4]


async def test_order_limit_offset(books: SQLiteIndex):
    """Test multi-field order with limit and offset."""
    result = await books.search(
        "",
        {
            "order": [("year", SortDirection.DESC), ("price", SortDirection.ASC)],
            "limit": 2,
            "offset": 1,
        },
    )
    assert [r["id"] for r in result.records] == [4, 2]
    assert result.total_found == 4


async def test_default_limit(conn: SQLiteConnection):
    """Test searches without a limit return the default page size."""
    await conn.define_index("numbers_rt", attributes={"n": "uint"})
    numbers = conn["numbers_rt"]
    for i in range(1, DEFAULT_LIMIT + 6):
        await numbers.insert(i, {"n": i})

    result = await numbers.search("", {})
    assert len(result.records) == DEFAULT_LIMIT
    assert result.total_found == DEFAULT_LIMIT + 5


async def test_unknown_attribute(books: SQLiteIndex):
    """Test filtering on an undeclared attribute fails."""
    with pytest.raises(TransportError, match="author"):
        await books.search("", {"author": "Tolkien"})


async def test_invalid_fulltext_syntax(books: SQLiteIndex):
    """Test backend syntax errors surface as transport errors."""
    with pytest.raises(TransportError):
        await books.search('"unterminated', {})


async def test_facets_inherit_parent(books: SQLiteIndex):
    """Test facets inherit query and options, and nest."""
    result = await books.search(
        "dragon",
        {
            "order": [("id", SortDirection.ASC)],
            "facets": {
                "in_print": TranslatedQuery("", {
                    "in_print": True,
                    "facets": {"old": TranslatedQuery("", {"year": Comparison(operator=ComparisonOp.LT, value=1950)})},
                }),
                "sand": TranslatedQuery("sand", {}),
            },
        },
    )

    assert result.total_found == 3
    in_print = result.facets["in_print"]
    assert [r["id"] for r in in_print.records] == [1, 4]
    assert [r["id"] for r in in_print.facets["old"].records] == [1]
    assert [r["id"] for r in result.facets["sand"].records] == [2]


async def test_multi_search(books: SQLiteIndex):
    """Test named searches run as a batch."""
    results = await books.multi_search(
        {
            "dragons": ("dragon", {}),
            "sixties": ("", {"year": range(1960, 1970)}),
        }
    )
    assert set(results) == {"dragons", "sixties"}
    assert results["dragons"].total_found == 3
    assert results["sixties"].total_found == 3


# --- Write Tests ---


async def test_insert_duplicate_fails(books: SQLiteIndex):
    """Test inserting an existing id fails."""
    with pytest.raises(TransportError):
        await books.insert(1, {"title": "Again"})


async def test_update(books: SQLiteIndex):
    """Test updates change attributes and fulltext."""
    assert await books.update(2, {"year": 1966, "title": "Dune Messiah"}) == 1
    assert await books.update(99, {"year": 1966}) == 0

    result = await books.search("messiah", {})
    assert [(r["id"], r["year"]) for r in result.records] == [(2, 1966)]


async def test_replace(books: SQLiteIndex):
    """Test replace upserts documents."""
    assert await books.replace(1, {"title": "The Silmarillion", "year": 1977}) == 1
    assert await books.replace(5, {"title": "Neuromancer", "year": 1984}) == 1

    assert (await books.search("hobbit", {})).total_found == 0
    assert [r["id"] for r in (await books.search("silmarillion", {})).records] == [1]
    assert (await books.search("", {})).total_found == 5


async def test_delete(books: SQLiteIndex):
    """Test delete removes the document from search."""
    assert await books.delete(3) == 1
    assert await books.delete(3) == 0
    assert [r["id"] for r in (await books.search("dragon", {"order": [("id", SortDirection.ASC)]})).records] == [1, 4]
