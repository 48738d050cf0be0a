"""Path-string convenience layer over the container API.

These helpers walk a parsed path one container per call, so only the
named directories are touched. Reads never create anything; writes
create missing containers on the way down.
"""

from __future__ import annotations

from typing import Any

from core.errors import InvalidPathError
from core.types import LazyType, ResolvedPath
from store.container import LazyContainer
from store.data_codec import encode_value
from store.database import LazyDB
from store.lazy_data import LazyData
from store.path_resolver import parse_path


def walk_containers(
    root: LazyContainer,
    containers: tuple[str, ...],
    create: bool,
) -> LazyContainer:
    """Descend from ``root`` through ``containers`` one level at a time.

    Args:
        root: Starting container.
        containers: Names to descend through, in order.
        create: Create missing containers instead of failing.

    Returns:
        The final container.

    Raises:
        NotFoundError: If a container is missing and ``create`` is False.
    """
    container = root
    for name in containers:
        if create:
            container = container.open_or_create_child(name)
        else:
            container = container.child_container(name)
    return container


def search_container(database: LazyDB, path: str) -> LazyContainer:
    """Resolve an existing container path such as ``/people/Dave``."""
    resolved = _parse(path, expect_leaf=False)
    return walk_containers(database.as_container(), resolved.containers, create=False)


def open_container(database: LazyDB, path: str) -> LazyContainer:
    """Resolve a container path, creating missing containers."""
    resolved = _parse(path, expect_leaf=False)
    return walk_containers(database.as_container(), resolved.containers, create=True)


def search_database(database: LazyDB, path: str) -> LazyData:
    """Return a lazy read handle for a leaf path such as ``/people/Dave::age``.

    Raises:
        InvalidPathError: If ``path`` does not name a leaf.
        NotFoundError: If a container or the leaf does not exist.
    """
    resolved = _parse(path, expect_leaf=True)
    container = walk_containers(database.as_container(), resolved.containers, create=False)
    return container.data_reader(str(resolved.leaf))


def write_database(
    database: LazyDB,
    path: str,
    lazy_type: LazyType,
    value: Any,
    element_type: LazyType | None = None,
) -> None:
    """Write ``value`` to a leaf path, creating containers as needed.

    The value is encoded before any container is created, so a value
    that does not fit ``lazy_type`` leaves the tree untouched.
    """
    resolved = _parse(path, expect_leaf=True)
    data = encode_value(lazy_type, value, element_type)
    container = walk_containers(database.as_container(), resolved.containers, create=True)
    container.data_writer(str(resolved.leaf)).write(data)


def _parse(path: str, expect_leaf: bool) -> ResolvedPath:
    resolved = parse_path(path)
    if expect_leaf and not resolved.is_leaf:
        raise InvalidPathError(f"Path '{path}' addresses a container; expected a '::leaf' path.")
    if not expect_leaf and resolved.is_leaf:
        raise InvalidPathError(f"Path '{path}' addresses a leaf; expected a container path.")
    return resolved


def follow_link(database: LazyDB, target: ResolvedPath) -> LazyContainer | LazyData:
    """Resolve a collected Link target without creating anything.

    Returns:
        The linked leaf handle, or the linked container for container paths.

    Raises:
        NotFoundError: If the target no longer exists.
    """
    container = walk_containers(database.as_container(), target.containers, create=False)
    if target.leaf is None:
        return container
    return container.data_reader(target.leaf)
