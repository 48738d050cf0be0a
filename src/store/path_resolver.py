"""Textual path parsing and name validation.

Paths look like ``/people/Dave::age``: container names separated by
``/`` with an optional ``::leaf`` suffix on the final segment. Parsing
is purely textual and never touches the filesystem.
"""

from __future__ import annotations

import os

from core.constants import (
    CONTAINER_SEPARATOR,
    LEAF_FILE_SUFFIX,
    LEAF_SEPARATOR,
    RESERVED_NAME_PREFIX,
)
from core.errors import InvalidPathError
from core.types import ResolvedPath


def parse_path(text: str) -> ResolvedPath:
    """Parse a path string into container names and an optional leaf.

    Args:
        text: Path text, e.g. ``/people/Dave::age`` or ``/a/b/c``.

    Returns:
        Resolved container chain and leaf name.

    Raises:
        InvalidPathError: On empty segments, misplaced or repeated leaf
            separators, or reserved names.
    """
    if not text:
        raise InvalidPathError("Path is empty. Use '/' to address the root container.")
    body = text[len(CONTAINER_SEPARATOR) :] if text.startswith(CONTAINER_SEPARATOR) else text
    if not body:
        return ResolvedPath(containers=())
    segments = body.split(CONTAINER_SEPARATOR)
    containers: list[str] = []
    for segment in segments[:-1]:
        if LEAF_SEPARATOR in segment:
            raise InvalidPathError(
                f"Path '{text}' has a leaf separator '{LEAF_SEPARATOR}' before its final segment."
            )
        containers.append(_checked_segment(text, segment, container=True))
    final_parts = segments[-1].split(LEAF_SEPARATOR)
    if len(final_parts) > 2:
        raise InvalidPathError(
            f"Path '{text}' has more than one leaf separator '{LEAF_SEPARATOR}'."
        )
    if len(final_parts) == 1:
        containers.append(_checked_segment(text, final_parts[0], container=True))
        return ResolvedPath(containers=tuple(containers))
    container_part, leaf_part = final_parts
    if container_part:
        containers.append(_checked_segment(text, container_part, container=True))
    elif segments[:-1]:
        raise InvalidPathError(f"Path '{text}' has an empty segment before '{LEAF_SEPARATOR}'.")
    leaf = _checked_segment(text, leaf_part, container=False)
    return ResolvedPath(containers=tuple(containers), leaf=leaf)


def format_path(resolved: ResolvedPath) -> str:
    """Render a resolved path back into its canonical text form."""
    text = CONTAINER_SEPARATOR + CONTAINER_SEPARATOR.join(resolved.containers)
    if resolved.leaf is not None:
        text += LEAF_SEPARATOR + resolved.leaf
    return text


def validate_container_name(name: str) -> str:
    """Return ``name`` if it is a legal container name.

    Raises:
        InvalidPathError: If the name is empty, reserved or ambiguous.
    """
    _validate_name(name, "Container")
    if name.endswith(LEAF_FILE_SUFFIX):
        raise InvalidPathError(
            f"Container name '{name}' may not end with '{LEAF_FILE_SUFFIX}'; "
            "that suffix marks leaf files."
        )
    return name


def validate_leaf_name(name: str) -> str:
    """Return ``name`` if it is a legal leaf name."""
    _validate_name(name, "Leaf")
    return name


def _validate_name(name: str, kind: str) -> None:
    if not name:
        raise InvalidPathError(f"{kind} name is empty.")
    if name in (".", ".."):
        raise InvalidPathError(f"{kind} name '{name}' is not allowed.")
    if name.startswith(RESERVED_NAME_PREFIX):
        raise InvalidPathError(
            f"{kind} name '{name}' starts with '{RESERVED_NAME_PREFIX}', "
            "which is reserved for database metadata."
        )
    forbidden = {CONTAINER_SEPARATOR, LEAF_SEPARATOR[0], os.sep, "\0"}
    if os.altsep:
        forbidden.add(os.altsep)
    if any(char in name for char in forbidden):
        raise InvalidPathError(f"{kind} name '{name}' contains a separator character.")


def _checked_segment(text: str, segment: str, container: bool) -> str:
    if not segment:
        raise InvalidPathError(
            f"Path '{text}' has an empty segment; remove doubled or trailing separators."
        )
    if container:
        return validate_container_name(segment)
    return validate_leaf_name(segment)
