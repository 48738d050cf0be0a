"""Core constants used across LazyDB modules.

This module centralizes on-disk names and textual separators.
Keeping values here avoids magic literals in storage logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".lazydb")
META_FILE_NAME = ".meta"
LEAF_FILE_SUFFIX = ".ld"
RESERVED_NAME_PREFIX = "."
TEMP_FILE_PREFIX = ".tmp-"
DEFAULT_LEAF_MODE = 0o666
CONTAINER_SEPARATOR = "/"
LEAF_SEPARATOR = "::"
FORMAT_VERSION = (1, 2, 1)
LENGTH_PREFIX_FORMAT = ">Q"
TRUTHY_ENV_VALUES = ("1", "true", "yes", "on")
FALSY_ENV_VALUES = ("0", "false", "no", "off")
