"""Unit tests for shared type models."""

from __future__ import annotations

import pytest

from core.types import FormatVersion, LazyType, ResolvedPath


def test_lazy_type_from_name_is_case_insensitive() -> None:
    """Type names should resolve regardless of case."""
    assert LazyType.from_name("u8") is LazyType.U8
    assert LazyType.from_name(" String ") is LazyType.STRING


def test_lazy_type_from_name_rejects_unknown() -> None:
    """Unknown type names should raise ValueError listing choices."""
    with pytest.raises(ValueError, match="u128"):
        LazyType.from_name("u128")


def test_format_version_compatibility_follows_major() -> None:
    """Only the major version decides compatibility."""
    current = FormatVersion(1, 2, 1)

    assert current.is_compatible(FormatVersion(1, 0, 9))
    assert not current.is_compatible(FormatVersion(2, 2, 1))


def test_resolved_path_is_leaf() -> None:
    """A resolved path is a leaf path only when it carries a leaf name."""
    assert ResolvedPath(containers=("a",), leaf="b").is_leaf
    assert not ResolvedPath(containers=("a",)).is_leaf
