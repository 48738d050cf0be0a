"""Directory-backed container nodes.

A container maps 1:1 onto a directory. Child containers are
subdirectories and leaves are ``.ld`` files inside it. Every operation
touches only the requested name, one level deep; nothing is cached
between calls.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable, Iterator

from core.constants import LEAF_FILE_SUFFIX, RESERVED_NAME_PREFIX
from core.errors import LazyIOError, NotFoundError
from core.logging_config import get_logger
from store.lazy_data import LazyData, LeafWriter
from store.path_resolver import validate_container_name, validate_leaf_name

_LOGGER = get_logger(__name__)


class DirectoryListing:
    """Restartable listing of one container directory.

    Each iteration performs a single fresh ``os.scandir`` of the
    directory, so a listing object can be iterated any number of times.
    """

    def __init__(self, directory: Path, select: Callable[[os.DirEntry[str]], str | None]) -> None:
        self._directory = directory
        self._select = select

    def __iter__(self) -> Iterator[str]:
        try:
            with os.scandir(self._directory) as entries:
                for entry in entries:
                    if entry.name.startswith(RESERVED_NAME_PREFIX):
                        continue
                    name = self._select(entry)
                    if name is not None:
                        yield name
        except FileNotFoundError as error:
            raise NotFoundError(f"Container {self._directory} does not exist.") from error
        except OSError as error:
            raise LazyIOError(f"Failed to list container {self._directory}: {error}.") from error


class LazyContainer:
    """A node of the database tree backed by one directory."""

    def __init__(self, path: Path, fsync: bool = True) -> None:
        self._path = path
        self._fsync = fsync

    @classmethod
    def load(cls, path: Path, fsync: bool = True) -> "LazyContainer":
        """Bind to an existing container directory.

        Raises:
            NotFoundError: If ``path`` is not a directory.
        """
        if not path.is_dir():
            raise NotFoundError(f"Container directory {path} does not exist.")
        return cls(path, fsync=fsync)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    def open_or_create_child(self, name: str) -> "LazyContainer":
        """Open child container ``name``, creating its directory if absent.

        Existing children are never cleared, so the call is idempotent.

        Raises:
            InvalidPathError: If ``name`` is not a legal container name.
            LazyIOError: On permission or OS failures.
        """
        child_path = self._path / validate_container_name(name)
        if child_path.is_dir():
            return LazyContainer(child_path, fsync=self._fsync)
        try:
            child_path.mkdir(exist_ok=True)
        except OSError as error:
            raise LazyIOError(
                f"Failed to create container {child_path}: {error}. "
                "Check permissions on the parent container and retry."
            ) from error
        _LOGGER.debug("container_created", path=str(child_path))
        return LazyContainer(child_path, fsync=self._fsync)

    def child_container(self, name: str) -> "LazyContainer":
        """Open an existing child container without creating it.

        Raises:
            NotFoundError: If the child does not exist.
        """
        child_path = self._path / validate_container_name(name)
        if not child_path.is_dir():
            raise NotFoundError(
                f"Container '{name}' not found in {self._path}. "
                "Create it with open_or_create_child first."
            )
        return LazyContainer(child_path, fsync=self._fsync)

    def data_writer(self, name: str) -> LeafWriter:
        """Return a write handle for leaf ``name``; storage is untouched."""
        return LeafWriter(self._leaf_path(name), fsync=self._fsync)

    def data_reader(self, name: str) -> LazyData:
        """Return a lazy read handle for the existing leaf ``name``.

        Raises:
            NotFoundError: If the leaf does not exist. No file is created.
        """
        leaf_path = self._leaf_path(name)
        if not leaf_path.is_file():
            raise NotFoundError(f"Leaf '{name}' not found in container {self._path}.")
        return LazyData(leaf_path)

    def read_data(self, name: str) -> LazyData:
        """Alias of :meth:`data_reader`."""
        return self.data_reader(name)

    def has_child(self, name: str) -> bool:
        return (self._path / validate_container_name(name)).is_dir()

    def has_data(self, name: str) -> bool:
        return self._leaf_path(name).is_file()

    def list_children(self) -> DirectoryListing:
        """Return a restartable listing of child container names."""
        return DirectoryListing(self._path, _select_container)

    def list_data(self) -> DirectoryListing:
        """Return a restartable listing of leaf names."""
        return DirectoryListing(self._path, _select_leaf)

    def remove_data(self, name: str) -> None:
        """Delete leaf ``name``.

        Raises:
            NotFoundError: If the leaf does not exist.
            LazyIOError: On OS failures.
        """
        leaf_path = self._leaf_path(name)
        try:
            leaf_path.unlink()
        except FileNotFoundError as error:
            raise NotFoundError(f"Leaf '{name}' not found in container {self._path}.") from error
        except OSError as error:
            raise LazyIOError(f"Failed to remove leaf {leaf_path}: {error}.") from error
        _LOGGER.info("leaf_removed", path=str(leaf_path))

    def remove_child(self, name: str) -> None:
        """Delete child container ``name`` and everything below it.

        Raises:
            NotFoundError: If the child does not exist.
            LazyIOError: On OS failures.
        """
        child_path = self._path / validate_container_name(name)
        if not child_path.is_dir():
            raise NotFoundError(f"Container '{name}' not found in {self._path}.")
        try:
            shutil.rmtree(child_path)
        except OSError as error:
            raise LazyIOError(f"Failed to remove container {child_path}: {error}.") from error
        _LOGGER.info("container_removed", path=str(child_path))

    def _leaf_path(self, name: str) -> Path:
        return self._path / (validate_leaf_name(name) + LEAF_FILE_SUFFIX)

    def __repr__(self) -> str:
        return f"LazyContainer({str(self._path)!r})"


def _select_container(entry: os.DirEntry[str]) -> str | None:
    if entry.is_dir(follow_symlinks=False):
        return entry.name
    return None


def _select_leaf(entry: os.DirEntry[str]) -> str | None:
    if entry.name.endswith(LEAF_FILE_SUFFIX) and entry.is_file(follow_symlinks=False):
        return entry.name[: -len(LEAF_FILE_SUFFIX)]
    return None
