"""Leaf handles: lazy reads and atomic writes.

A ``LazyData`` handle is bound to one leaf file and decodes only when a
``collect_*`` method is called; every call re-reads storage. A
``LeafWriter`` is bound to one leaf location and touches storage only
when a value is encoded through one of the ``LazyData.new_*`` functions.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Sequence

from core.constants import DEFAULT_LEAF_MODE, TEMP_FILE_PREFIX
from core.errors import LazyIOError, NotFoundError
from core.logging_config import get_logger
from core.types import LazyType, ResolvedPath
from store.data_codec import decode_value, encode_value, read_tag

_LOGGER = get_logger(__name__)


class LeafWriter:
    """Write handle for one leaf location."""

    def __init__(self, path: Path, fsync: bool = True) -> None:
        self._path = path
        self._fsync = fsync

    @property
    def path(self) -> Path:
        return self._path

    def write(self, data: bytes) -> None:
        """Replace the leaf file with ``data`` atomically.

        The bytes go to a temporary sibling that is moved over the leaf
        with ``os.replace``, so readers see the old or the new leaf only.

        Args:
            data: Complete encoded leaf bytes.

        Raises:
            LazyIOError: If the temporary file cannot be written or moved.
        """
        try:
            handle_fd, temp_name = tempfile.mkstemp(
                prefix=TEMP_FILE_PREFIX,
                dir=self._path.parent,
            )
        except OSError as error:
            raise LazyIOError(
                f"Failed to create temporary file for leaf {self._path}: {error}. "
                "Check that the container exists and is writable."
            ) from error
        temp_path = Path(temp_name)
        try:
            with os.fdopen(handle_fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                if self._fsync:
                    os.fsync(handle.fileno())
            os.chmod(temp_path, _leaf_mode(self._path))
            os.replace(temp_path, self._path)
        except OSError as error:
            temp_path.unlink(missing_ok=True)
            raise LazyIOError(
                f"Failed to write leaf {self._path}: {error}. "
                "The previous leaf content is unchanged; retry the write."
            ) from error
        _LOGGER.debug("leaf_written", path=str(self._path), size=len(data))


def _leaf_mode(path: Path) -> int:
    """Permission bits for a leaf: keep an existing leaf's mode, else follow the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    current_umask = os.umask(0)
    os.umask(current_umask)
    return DEFAULT_LEAF_MODE & ~current_umask


class LazyData:
    """Read handle for one existing leaf."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def peek_type(self) -> LazyType:
        """Read only the tag byte of the leaf."""
        try:
            with self._path.open("rb") as handle:
                head = handle.read(1)
        except FileNotFoundError as error:
            raise NotFoundError(f"Leaf {self._path} does not exist.") from error
        except OSError as error:
            raise LazyIOError(f"Failed to read leaf {self._path}: {error}.") from error
        return read_tag(head)

    def collect(self, lazy_type: LazyType, element_type: LazyType | None = None) -> Any:
        """Read and decode the leaf as ``lazy_type``.

        Args:
            lazy_type: Requested tag.
            element_type: Requested element tag for arrays.

        Returns:
            Decoded value.

        Raises:
            NotFoundError: If the leaf no longer exists.
            TypeMismatchError: If the stored tag differs.
            CorruptError: If the payload is inconsistent with the tag.
            LazyIOError: On OS read failures.
        """
        return decode_value(self._read_bytes(), lazy_type, element_type)

    def collect_void(self) -> None:
        return self.collect(LazyType.VOID)

    def collect_bool(self) -> bool:
        return self.collect(LazyType.BOOL)

    def collect_u8(self) -> int:
        return self.collect(LazyType.U8)

    def collect_u16(self) -> int:
        return self.collect(LazyType.U16)

    def collect_u32(self) -> int:
        return self.collect(LazyType.U32)

    def collect_u64(self) -> int:
        return self.collect(LazyType.U64)

    def collect_i8(self) -> int:
        return self.collect(LazyType.I8)

    def collect_i16(self) -> int:
        return self.collect(LazyType.I16)

    def collect_i32(self) -> int:
        return self.collect(LazyType.I32)

    def collect_i64(self) -> int:
        return self.collect(LazyType.I64)

    def collect_f32(self) -> float:
        return self.collect(LazyType.F32)

    def collect_f64(self) -> float:
        return self.collect(LazyType.F64)

    def collect_string(self) -> str:
        return self.collect(LazyType.STRING)

    def collect_bytes(self) -> bytes:
        return self.collect(LazyType.BYTES)

    def collect_array(self, element_type: LazyType | None = None) -> list[Any]:
        return self.collect(LazyType.ARRAY, element_type)

    def collect_link(self) -> ResolvedPath:
        """Return the database path this Link leaf refers to."""
        return self.collect(LazyType.LINK)

    @staticmethod
    def new(
        writer: LeafWriter,
        lazy_type: LazyType,
        value: Any,
        element_type: LazyType | None = None,
    ) -> None:
        """Encode ``value`` under ``lazy_type`` and write it through ``writer``.

        Raises:
            TypeMismatchError: If the value does not fit the type; nothing is written.
            LazyIOError: If the write fails.
        """
        writer.write(encode_value(lazy_type, value, element_type))

    @staticmethod
    def new_void(writer: LeafWriter, value: None = None) -> None:
        LazyData.new(writer, LazyType.VOID, value)

    @staticmethod
    def new_bool(writer: LeafWriter, value: bool) -> None:
        LazyData.new(writer, LazyType.BOOL, value)

    @staticmethod
    def new_u8(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.U8, value)

    @staticmethod
    def new_u16(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.U16, value)

    @staticmethod
    def new_u32(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.U32, value)

    @staticmethod
    def new_u64(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.U64, value)

    @staticmethod
    def new_i8(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.I8, value)

    @staticmethod
    def new_i16(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.I16, value)

    @staticmethod
    def new_i32(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.I32, value)

    @staticmethod
    def new_i64(writer: LeafWriter, value: int) -> None:
        LazyData.new(writer, LazyType.I64, value)

    @staticmethod
    def new_f32(writer: LeafWriter, value: float) -> None:
        LazyData.new(writer, LazyType.F32, value)

    @staticmethod
    def new_f64(writer: LeafWriter, value: float) -> None:
        LazyData.new(writer, LazyType.F64, value)

    @staticmethod
    def new_string(writer: LeafWriter, value: str) -> None:
        LazyData.new(writer, LazyType.STRING, value)

    @staticmethod
    def new_bytes(writer: LeafWriter, value: bytes) -> None:
        LazyData.new(writer, LazyType.BYTES, value)

    @staticmethod
    def new_array(writer: LeafWriter, element_type: LazyType, values: Sequence[Any]) -> None:
        LazyData.new(writer, LazyType.ARRAY, values, element_type)

    @staticmethod
    def new_link(writer: LeafWriter, target: str | ResolvedPath) -> None:
        """Write a reference to another database path, e.g. ``/people/Dave::age``."""
        LazyData.new(writer, LazyType.LINK, target)

    def _read_bytes(self) -> bytes:
        try:
            return self._path.read_bytes()
        except FileNotFoundError as error:
            raise NotFoundError(
                f"Leaf {self._path} does not exist. Write it before collecting."
            ) from error
        except OSError as error:
            raise LazyIOError(f"Failed to read leaf {self._path}: {error}.") from error
