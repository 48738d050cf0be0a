"""LazyDB CLI entry points.

This module exposes init, read, write, ls and rm commands.
It maps argparse commands onto the public storage API.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from cli.data_commands import (
    add_read_command,
    add_remove_command,
    add_write_command,
    run_read_command,
    run_remove_command,
    run_write_command,
)
from cli.listing_command import add_list_command, run_list_command
from core.config import LazyDBConfig
from core.errors import LazyDBError
from store.database import LazyDB


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="lazydb", description="LazyDB command line")
    parser.add_argument("--data-root", help="Override LAZYDB_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Create or open the database and print its version")
    add_write_command(subparsers)
    add_read_command(subparsers)
    add_list_command(subparsers)
    add_remove_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the LazyDB CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        database = _build_database(args.data_root)
        if args.command == "init":
            print(f"{database.path}\t{database.version()}")
            return 0
        if args.command == "write":
            return run_write_command(database, args)
        if args.command == "read":
            return run_read_command(database, args)
        if args.command == "ls":
            return run_list_command(database, args)
        if args.command == "rm":
            return run_remove_command(database, args)
    except LazyDBError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    except ValueError as error:
        parser.error(str(error))
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_database(data_root: str | None) -> LazyDB:
    """Open the database with an optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Database handle.
    """
    config = LazyDBConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return LazyDB.from_config(config)
