"""
Tests for result hydration and collections.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sphinxbridge.adapters.models import PersistenceState, Resource, ResourceAdapter

from .collection import Collection
from .hydrator import ResultHydrator
from .mappings import IDENTITY, MappingTable
from .models import Pager, PagerOptions, RawResult


class Post(Resource):
    id: int | None = None
    title: str = ""
    body: str = ""
    view_count: int = 0


@pytest.fixture
def adapter() -> ResourceAdapter:
    """Adapter for the Post model."""
    return ResourceAdapter(Post)


@pytest.fixture
def mappings(adapter: ResourceAdapter) -> MappingTable:
    """Mapping table with id, title and views."""
    table = MappingTable(adapter.properties(), "posts_rt")
    table.register(IDENTITY, with_="id")
    table.register("title")
    table.register("views", with_="view_count")
    table.freeze()
    return table


@pytest.fixture
def hydrator(adapter: ResourceAdapter, mappings: MappingTable) -> ResultHydrator:
    """Hydrator for posts."""
    return ResultHydrator(adapter, mappings)


@pytest.fixture
def raw_result() -> RawResult:
    """Two records out of three matches."""
    return RawResult(
        records=[
            {"id": 1, "title": "Badgers on the run", "views": 7, "user_id": 1},
            {"id": 2, "title": "Do it for the badgers!", "views": 11, "user_id": 1},
        ],
        total_found=3,
        count=2,
        time=0.002,
        keywords=["badgers"],
        docs={"badgers": 3},
    )


# --- Record Tests ---


def test_hydrate_record_sets_mapped_attributes(hydrator: ResultHydrator) -> None:
    """Test mapped attributes are populated through their setters."""
    post, loaded = hydrator.hydrate_record({"id": 4, "title": "Rabbits", "views": "9"})

    assert isinstance(post, Post)
    assert (post.id, post.title, post.view_count) == (4, "Rabbits", 9)
    assert loaded == ["id", "title", "view_count"]


def test_hydrate_record_ignores_unmapped_attributes(hydrator: ResultHydrator) -> None:
    """Test record attributes without a mapping are skipped."""
    post, loaded = hydrator.hydrate_record({"id": 4, "user_id": 2, "weight": 1500})

    assert loaded == ["id"]
    assert not hasattr(post, "user_id")


def test_hydrated_resource_is_clean(hydrator: ResultHydrator) -> None:
    """Test hydrated resources are not considered modified."""
    post, _ = hydrator.hydrate_record({"id": 1, "title": "Badgers"})

    assert post.persistence_state is PersistenceState.CLEAN
    assert not post.is_dirty

    post.title = "Changed"
    assert post.is_dirty


def test_only_mapped_properties_are_loaded(hydrator: ResultHydrator) -> None:
    """Test unmapped properties stay subject to lazy loading."""
    post, _ = hydrator.hydrate_record({"id": 1, "views": 7})

    assert post.loaded_properties == frozenset({"id", "view_count"})
    assert not post.is_loaded("title")
    assert not post.is_loaded("body")


def test_missing_identity_is_not_an_error(hydrator: ResultHydrator) -> None:
    """Test records without an id still hydrate."""
    post, loaded = hydrator.hydrate_record({"title": "Anonymous"})
    assert post.title == "Anonymous"
    assert loaded == ["title"]


def test_callbacks_go_through_model_adapter(mappings: MappingTable) -> None:
    """Test clean/loaded marking is delegated to the domain collaborator."""
    model = MagicMock()
    model.new_instance.return_value = Post.model_construct()
    hydrator = ResultHydrator(model, mappings)

    instance, _ = hydrator.hydrate_record({"id": 1, "views": 3, "unmapped": True})

    model.mark_clean.assert_called_once_with(instance)
    assert [c.args for c in model.mark_loaded.call_args_list] == [
        (instance, "id"),
        (instance, "view_count"),
    ]


# --- Collection Tests ---


def test_hydrate_builds_collection(hydrator: ResultHydrator, raw_result: RawResult) -> None:
    """Test the collection carries the result metadata."""
    posts = hydrator.hydrate(raw_result)

    assert isinstance(posts, Collection)
    assert posts.total_found == 3
    assert posts.count == 2 == len(posts)
    assert posts.ids == [1, 2]
    assert [p.title for p in posts] == ["Badgers on the run", "Do it for the badgers!"]
    assert posts.fields == ("id", "title", "view_count")
    assert posts.time == 0.002
    assert posts.keywords == ["badgers"]
    assert posts.docs == {"badgers": 3}
    assert posts.facets == {}
    assert posts.pager is None


def test_count_follows_hydrated_records(hydrator: ResultHydrator) -> None:
    """Test count reflects the records actually hydrated."""
    raw = RawResult(records=[{"id": 1}], total_found=10, count=5)
    posts = hydrator.hydrate(raw)

    assert posts.count == 1
    assert posts.total_found == 10


def test_hydrate_empty_result(hydrator: ResultHydrator) -> None:
    """Test an empty result gives an empty collection."""
    posts = hydrator.hydrate(RawResult(total_found=0))

    assert posts == []
    assert posts.count == 0
    assert posts.fields == ()


def test_hydrate_nested_facets(hydrator: ResultHydrator, raw_result: RawResult) -> None:
    """Test facet results become nested collections, recursively."""
    inner = RawResult(records=[{"id": 2, "views": 11}], total_found=1)
    outer = RawResult(
        records=[{"id": 1}, {"id": 2}],
        total_found=2,
        facets={"popular": inner},
    )
    raw = raw_result.model_copy(update={"facets": {"by_user": outer}})

    posts = hydrator.hydrate(raw)

    by_user = posts.facets["by_user"]
    assert isinstance(by_user, Collection)
    assert by_user.total_found == 2
    assert by_user.ids == [1, 2]

    popular = by_user.facets["popular"]
    assert isinstance(popular, Collection)
    assert popular.total_found == 1
    assert popular[0].view_count == 11


def test_hydrate_attaches_pager(hydrator: ResultHydrator, raw_result: RawResult) -> None:
    """Test the pager uses the final total_found."""
    options = PagerOptions(page=1, page_param="page", per_page=2, limit=2, offset=0)
    posts = hydrator.hydrate(raw_result, options)

    assert isinstance(posts.pager, Pager)
    assert posts.pager.current_page == 1
    assert posts.pager.total == 3
    assert posts.pager.total_pages == 2


def test_facets_have_no_pager(hydrator: ResultHydrator, raw_result: RawResult) -> None:
    """Test pagination only applies to the top-level collection."""
    raw = raw_result.model_copy(update={"facets": {"all": RawResult(total_found=0)}})
    options = PagerOptions(page=1, page_param="page", per_page=2, limit=2, offset=0)

    posts = hydrator.hydrate(raw, options)
    assert posts.pager is not None
    assert posts.facets["all"].pager is None
