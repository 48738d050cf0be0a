"""Shared typed models.

This module defines the leaf type tags and the small immutable models
used by the codec, storage, path and CLI layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class LazyType(IntEnum):
    """Type tag stored as the first byte of every leaf."""

    VOID = 0
    BOOL = 1
    U8 = 2
    U16 = 3
    U32 = 4
    U64 = 5
    I8 = 6
    I16 = 7
    I32 = 8
    I64 = 9
    F32 = 10
    F64 = 11
    STRING = 12
    BYTES = 13
    ARRAY = 14
    LINK = 15

    @classmethod
    def from_name(cls, name: str) -> "LazyType":
        """Resolve a tag from its case-insensitive name, e.g. ``u8``."""
        try:
            return cls[name.strip().upper()]
        except KeyError as error:
            choices = ", ".join(member.name.lower() for member in cls)
            raise ValueError(f"Unknown lazy type '{name}'. Choose one of: {choices}.") from error


@dataclass(frozen=True)
class ResolvedPath:
    """Parsed textual path.

    Attributes:
        containers: Container names from the root, in order.
        leaf: Trailing data-leaf name, or None for a container-only path.
    """

    containers: tuple[str, ...]
    leaf: str | None = None

    @property
    def is_leaf(self) -> bool:
        return self.leaf is not None


@dataclass(frozen=True)
class FormatVersion:
    """On-disk format version recorded in the database meta leaf."""

    major: int
    minor: int
    build: int

    def is_compatible(self, other: "FormatVersion") -> bool:
        """Return whether a database written at ``other`` can be opened."""
        return self.major == other.major

    def as_bytes(self) -> bytes:
        return bytes((self.major, self.minor, self.build))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"
