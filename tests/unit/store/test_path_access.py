"""Unit tests for the path-string convenience layer."""

from __future__ import annotations

import pytest

from core.errors import InvalidPathError, NotFoundError, TypeMismatchError
from core.types import LazyType
from store.path_access import (
    follow_link,
    open_container,
    search_container,
    search_database,
    walk_containers,
    write_database,
)


def test_write_then_search_leaf(lazy_db) -> None:
    """A leaf written by path should be found by the same path."""
    write_database(lazy_db, "/people/Dave::fav_colour", LazyType.STRING, "Blue")

    leaf = search_database(lazy_db, "/people/Dave::fav_colour")

    assert leaf.collect_string() == "Blue"


def test_write_to_root_leaf(lazy_db) -> None:
    """Leaves can live directly in the root container."""
    write_database(lazy_db, "::unemployed", LazyType.BOOL, True)

    assert search_database(lazy_db, "/::unemployed").collect_bool() is True


def test_search_does_not_create_containers(lazy_db) -> None:
    """Read-only lookups on missing paths must not create directories."""
    with pytest.raises(NotFoundError):
        search_database(lazy_db, "/people/Dave::age")

    assert not (lazy_db.path / "people").exists()


def test_search_container_and_open_container(lazy_db) -> None:
    """open_container creates the chain that search_container then finds."""
    created = open_container(lazy_db, "/a/b/c")

    found = search_container(lazy_db, "/a/b/c")

    assert found.path == created.path == lazy_db.path / "a" / "b" / "c"


def test_leaf_and_container_paths_are_not_interchangeable(lazy_db) -> None:
    """Leaf helpers need '::' paths and container helpers reject them."""
    with pytest.raises(InvalidPathError):
        search_database(lazy_db, "/people/Dave")
    with pytest.raises(InvalidPathError):
        search_container(lazy_db, "/people/Dave::age")

    assert not (lazy_db.path / "people").exists()


def test_invalid_value_leaves_tree_untouched(lazy_db) -> None:
    """A value that does not fit must not create intermediate containers."""
    with pytest.raises(TypeMismatchError):
        write_database(lazy_db, "/people/Dave::age", LazyType.U8, 1000)

    assert not (lazy_db.path / "people").exists()


def test_walk_containers_stops_at_first_missing(lazy_db) -> None:
    """Non-creating walks fail at the first absent segment."""
    open_container(lazy_db, "/a")

    with pytest.raises(NotFoundError):
        walk_containers(lazy_db.as_container(), ("a", "b", "c"), create=False)

    assert not (lazy_db.path / "a" / "b").exists()


def test_write_array_by_path(lazy_db) -> None:
    """Arrays are written through the same helper with an element type."""
    write_database(lazy_db, "/stats::scores", LazyType.ARRAY, [1, 2, 3], LazyType.U16)

    leaf = search_database(lazy_db, "/stats::scores")

    assert leaf.collect_array(LazyType.U16) == [1, 2, 3]


def test_follow_link_reaches_target_leaf(lazy_db) -> None:
    """A collected link resolves to the leaf it names."""
    write_database(lazy_db, "/people/Dave::age", LazyType.U8, 21)
    write_database(lazy_db, "/people/Emma::friend_age", LazyType.LINK, "/people/Dave::age")
    target = search_database(lazy_db, "/people/Emma::friend_age").collect_link()

    leaf = follow_link(lazy_db, target)

    assert leaf.collect_u8() == 21


def test_follow_link_to_container_and_dangling_target(lazy_db) -> None:
    """Container links resolve to containers; dangling links raise NotFound."""
    open_container(lazy_db, "/people/Dave")
    write_database(lazy_db, "::owner", LazyType.LINK, "/people/Dave")
    write_database(lazy_db, "::lost", LazyType.LINK, "/people/Zed::age")

    owner = follow_link(lazy_db, search_database(lazy_db, "::owner").collect_link())

    assert owner.path == lazy_db.path / "people" / "Dave"
    with pytest.raises(NotFoundError):
        follow_link(lazy_db, search_database(lazy_db, "::lost").collect_link())
