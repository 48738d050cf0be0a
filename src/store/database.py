"""Database root handling.

The database is the root container plus a reserved ``.meta`` leaf
recording the on-disk format version. Opening checks that version.
"""

from __future__ import annotations

from pathlib import Path

from core.config import LazyDBConfig
from core.constants import FORMAT_VERSION, META_FILE_NAME
from core.errors import CorruptError, IncompatibleVersionError, LazyIOError, NotFoundError
from core.logging_config import get_logger
from core.types import FormatVersion, LazyType
from store.container import LazyContainer
from store.lazy_data import LazyData, LeafWriter

_LOGGER = get_logger(__name__)
CURRENT_VERSION = FormatVersion(*FORMAT_VERSION)


class LazyDB:
    """A lazily loaded database rooted at one directory."""

    def __init__(self, path: Path, fsync: bool = True) -> None:
        self._path = path
        self._fsync = fsync

    @classmethod
    def init(cls, path: str | Path, fsync: bool = True) -> "LazyDB":
        """Create or open a database directory.

        Creates ``path`` when absent and writes the meta leaf when it is
        missing. Existing content is left untouched.

        Args:
            path: Database root directory.
            fsync: Whether leaf writes are fsynced.

        Returns:
            Database handle.

        Raises:
            LazyIOError: If the directory or meta leaf cannot be created.
        """
        root = Path(path)
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise LazyIOError(
                f"Failed to create database root {root}: {error}. "
                "Check that the parent directory is writable."
            ) from error
        meta_path = root / META_FILE_NAME
        if not meta_path.is_file():
            writer = LeafWriter(meta_path, fsync=fsync)
            LazyData.new_bytes(writer, CURRENT_VERSION.as_bytes())
            _LOGGER.info("database_initialized", path=str(root), version=str(CURRENT_VERSION))
        return cls(root, fsync=fsync)

    @classmethod
    def load_dir(cls, path: str | Path, fsync: bool = True) -> "LazyDB":
        """Open an existing database directory without creating anything.

        Raises:
            NotFoundError: If the directory or its meta leaf is missing.
            IncompatibleVersionError: If the stored version is incompatible.
            CorruptError: If the meta leaf cannot be decoded.
        """
        root = Path(path)
        if not root.is_dir():
            raise NotFoundError(f"Database directory {root} does not exist.")
        meta_path = root / META_FILE_NAME
        if not meta_path.is_file():
            raise NotFoundError(
                f"Database meta file {meta_path} is missing. "
                "Initialise the directory with init_db first."
            )
        stored_version = _read_version(LazyData(meta_path))
        if not CURRENT_VERSION.is_compatible(stored_version):
            raise IncompatibleVersionError(
                f"Database at {root} uses format {stored_version}, "
                f"incompatible with {CURRENT_VERSION}."
            )
        return cls(root, fsync=fsync)

    @classmethod
    def from_config(cls, config: LazyDBConfig) -> "LazyDB":
        """Create or open the database described by ``config``."""
        return cls.init(config.data_root, fsync=config.fsync_writes)

    @property
    def path(self) -> Path:
        return self._path

    def version(self) -> FormatVersion:
        """Return the format version recorded in the meta leaf."""
        return _read_version(LazyData(self._path / META_FILE_NAME))

    def as_container(self) -> LazyContainer:
        """Return the root container.

        Raises:
            NotFoundError: If the root directory was removed.
        """
        return LazyContainer.load(self._path, fsync=self._fsync)

    def __repr__(self) -> str:
        return f"LazyDB({str(self._path)!r})"


def init_db(root_path: str | Path, fsync: bool = True) -> LazyDB:
    """Create or open the database at ``root_path``."""
    return LazyDB.init(root_path, fsync=fsync)


def _read_version(meta: LazyData) -> FormatVersion:
    raw_version = meta.collect(LazyType.BYTES)
    if len(raw_version) != 3:
        raise CorruptError(
            f"Database meta file {meta.path} holds {len(raw_version)} version bytes, expected 3."
        )
    return FormatVersion(*raw_version)
