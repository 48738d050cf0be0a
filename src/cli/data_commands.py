"""Leaf read, write and remove commands for the LazyDB CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.types import LazyType
from store.database import LazyDB
from store.path_access import search_container, search_database, write_database
from store.path_resolver import format_path, parse_path

_TYPE_CHOICES = tuple(member.name.lower() for member in LazyType)
_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


def add_write_command(subparsers: Any) -> None:
    """Register write subcommand."""
    parser = subparsers.add_parser("write", help="Write a typed value to a leaf path")
    parser.add_argument("path", help="Leaf path, e.g. /people/Dave::age")
    parser.add_argument("type", choices=_TYPE_CHOICES, help="Leaf type")
    parser.add_argument(
        "value",
        nargs="?",
        default=None,
        help="Value text; hex for bytes, comma-separated numbers for arrays",
    )
    parser.add_argument("--element-type", choices=_TYPE_CHOICES, help="Array element type")


def add_read_command(subparsers: Any) -> None:
    """Register read subcommand."""
    parser = subparsers.add_parser("read", help="Read a typed value from a leaf path")
    parser.add_argument("path", help="Leaf path, e.g. /people/Dave::age")
    parser.add_argument(
        "type",
        nargs="?",
        choices=_TYPE_CHOICES,
        help="Expected leaf type; the stored tag is used when omitted",
    )


def add_remove_command(subparsers: Any) -> None:
    """Register rm subcommand."""
    parser = subparsers.add_parser("rm", help="Remove a leaf or a container subtree")
    parser.add_argument("path", help="Leaf or container path")


def run_write_command(database: LazyDB, args: argparse.Namespace) -> int:
    """Encode the value text and write it to the leaf path."""
    lazy_type = LazyType.from_name(args.type)
    element_type = LazyType.from_name(args.element_type) if args.element_type else None
    value = parse_value_text(lazy_type, args.value, element_type)
    write_database(database, args.path, lazy_type, value, element_type)
    return 0


def run_read_command(database: LazyDB, args: argparse.Namespace) -> int:
    """Collect the leaf and print its value."""
    leaf = search_database(database, args.path)
    lazy_type = LazyType.from_name(args.type) if args.type else leaf.peek_type()
    print(render_value(lazy_type, leaf.collect(lazy_type)))
    return 0


def run_remove_command(database: LazyDB, args: argparse.Namespace) -> int:
    """Remove the leaf or container the path names."""
    resolved = parse_path(args.path)
    if resolved.leaf is not None:
        container = search_container(database, "/" + "/".join(resolved.containers))
        container.remove_data(resolved.leaf)
        return 0
    if not resolved.containers:
        raise ValueError("Refusing to remove the root container.")
    parent = search_container(database, "/" + "/".join(resolved.containers[:-1]))
    parent.remove_child(resolved.containers[-1])
    return 0


def parse_value_text(
    lazy_type: LazyType,
    text: str | None,
    element_type: LazyType | None = None,
) -> Any:
    """Convert command-line text into a value for ``lazy_type``.

    Raises:
        ValueError: If the text cannot be parsed.
    """
    if lazy_type is LazyType.VOID:
        if text:
            raise ValueError("Void leaves take no value.")
        return None
    if text is None:
        raise ValueError(f"A value is required for {lazy_type.name.lower()} leaves.")
    if lazy_type is LazyType.ARRAY:
        if element_type is None:
            raise ValueError("Array writes need --element-type.")
        items = [item for item in text.split(",") if item.strip()]
        return [parse_value_text(element_type, item.strip()) for item in items]
    if lazy_type is LazyType.BOOL:
        word = text.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"Invalid bool value '{text}'.")
    if lazy_type in (LazyType.F32, LazyType.F64):
        return float(text)
    if lazy_type in (LazyType.STRING, LazyType.LINK):
        return text
    if lazy_type is LazyType.BYTES:
        return bytes.fromhex(text)
    return int(text, 0)


def render_value(lazy_type: LazyType, value: Any) -> str:
    """Render a collected value for terminal output."""
    if lazy_type is LazyType.VOID:
        return ""
    if lazy_type is LazyType.BOOL:
        return "true" if value else "false"
    if lazy_type is LazyType.BYTES:
        return bytes(value).hex()
    if lazy_type is LazyType.ARRAY:
        return ",".join(str(item) for item in value)
    if lazy_type is LazyType.LINK:
        return format_path(value)
    return str(value)
