"""Public SDK surface for LazyDB.

This module provides a stable import path for library users.
It re-exports the database, container, leaf and lazy object APIs.
"""

from __future__ import annotations

from core.config import LazyDBConfig
from core.errors import (
    CorruptError,
    IncompatibleVersionError,
    InvalidPathError,
    LazyDBConfigError,
    LazyDBError,
    LazyIOError,
    NotFoundError,
    TypeMismatchError,
)
from core.types import FormatVersion, LazyType, ResolvedPath
from store.container import LazyContainer
from store.database import LazyDB, init_db
from store.lazy_data import LazyData, LeafWriter
from store.lazy_object import (
    LazyObject,
    LazyRecord,
    flush_quietly,
    lazy_field,
    lazy_scope,
)
from store.path_access import (
    follow_link,
    open_container,
    search_container,
    search_database,
    write_database,
)
from store.path_resolver import format_path, parse_path

__all__ = [
    "CorruptError",
    "FormatVersion",
    "IncompatibleVersionError",
    "InvalidPathError",
    "LazyContainer",
    "LazyDB",
    "LazyDBConfig",
    "LazyDBConfigError",
    "LazyDBError",
    "LazyData",
    "LazyIOError",
    "LazyObject",
    "LazyRecord",
    "LazyType",
    "LeafWriter",
    "NotFoundError",
    "ResolvedPath",
    "TypeMismatchError",
    "flush_quietly",
    "follow_link",
    "format_path",
    "init_db",
    "lazy_field",
    "lazy_scope",
    "open_container",
    "parse_path",
    "search_container",
    "search_database",
    "write_database",
]
