"""Container listing command for the LazyDB CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.constants import LEAF_SEPARATOR
from store.database import LazyDB
from store.path_access import search_container


def add_list_command(subparsers: Any) -> None:
    """Register ls subcommand."""
    parser = subparsers.add_parser("ls", help="List child containers and leaves")
    parser.add_argument("path", nargs="?", default="/", help="Container path")


def run_list_command(database: LazyDB, args: argparse.Namespace) -> int:
    """Print child containers with a trailing slash, then leaves."""
    container = search_container(database, args.path)
    for name in sorted(container.list_children()):
        print(f"{name}/")
    for name in sorted(container.list_data()):
        print(f"{LEAF_SEPARATOR}{name}")
    return 0
