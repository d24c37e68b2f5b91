"""Database configuration and store factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sbe_earthing.persistence.store import DocumentStore


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// URLs.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. SBE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/sbe.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("SBE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'sbe.db'}")

        return cls(url="sqlite:///sbe.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path from a sqlite:/// URL (":memory:" when empty)."""
        return self.url.replace("sqlite:///", "", 1) or ":memory:"


def create_store(config: DatabaseConfig) -> DocumentStore:
    """Create a document store based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A DocumentStore instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from sbe_earthing.persistence.store import SQLiteDocumentStore

        return SQLiteDocumentStore(config.sqlite_path)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
