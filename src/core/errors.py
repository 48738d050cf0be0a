"""LazyDB exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure kind maps to one error type so callers can branch on it.
"""

from __future__ import annotations


class LazyDBError(Exception):
    """Base exception for all LazyDB failures."""


class LazyDBConfigError(LazyDBError):
    """Raised for invalid runtime configuration."""


class LazyIOError(LazyDBError):
    """Raised for OS-level failures such as permissions or disk errors."""


class InvalidPathError(LazyDBError):
    """Raised for malformed path text or reserved names."""


class NotFoundError(LazyDBError):
    """Raised when a container or leaf is absent on read-only access."""


class TypeMismatchError(LazyDBError):
    """Raised when a leaf tag or value disagrees with the requested type."""


class CorruptError(LazyDBError):
    """Raised when a leaf payload is inconsistent with its tag."""


class IncompatibleVersionError(CorruptError):
    """Raised when a database was written by an incompatible format version."""
