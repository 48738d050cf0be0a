"""Runtime configuration model for LazyDB.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, FALSY_ENV_VALUES, TRUTHY_ENV_VALUES
from core.errors import LazyDBConfigError


@dataclass(frozen=True)
class LazyDBConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Root directory of the database.
        fsync_writes: Whether leaf writes are fsynced before the atomic replace.
    """

    data_root: Path
    fsync_writes: bool = True

    @classmethod
    def from_env(cls) -> "LazyDBConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LazyDBConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("LAZYDB_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        fsync_value = os.getenv("LAZYDB_FSYNC", "1")
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            fsync_writes=_parse_bool("LAZYDB_FSYNC", fsync_value),
        )


def _parse_bool(variable: str, raw_value: str) -> bool:
    """Parse a boolean environment value.

    Args:
        variable: Environment variable name, for error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed flag.

    Raises:
        LazyDBConfigError: If value is not a recognised boolean spelling.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUTHY_ENV_VALUES:
        return True
    if normalized in FALSY_ENV_VALUES:
        return False
    raise LazyDBConfigError(
        f"Invalid {variable} value: expected one of "
        f"{', '.join(TRUTHY_ENV_VALUES + FALSY_ENV_VALUES)}, got '{raw_value}'. "
        f"Set {variable} to a boolean value."
    )
