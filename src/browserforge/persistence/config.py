"""Database configuration and adapter factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from browserforge.persistence.adapter import PersistenceAdapter


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports the sqlite:/// URL scheme.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. BROWSERFORGE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/browserforge.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("BROWSERFORGE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'browserforge.db'}")

        return cls(url="sqlite:///browserforge.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a sqlite:/// URL (":memory:" when empty)."""
        return self.url.replace("sqlite:///", "") or ":memory:"


def create_adapter(config: DatabaseConfig) -> PersistenceAdapter:
    """Create a persistence adapter based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A PersistenceAdapter instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from browserforge.persistence.sqlite import SQLiteAdapter

        return SQLiteAdapter(config.sqlite_path)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
