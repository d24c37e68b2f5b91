"""Runtime settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from sbe_earthing.persistence.config import DatabaseConfig

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"
DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_TRUTHY = ("1", "true", "yes")


def resolve_base_path(cwd: Path | None = None) -> Path:
    """Project root; steps out of backend/ when run from there."""
    cwd = cwd or Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


@dataclass
class Settings:
    """Application settings.

    Attributes:
        base_path: Project root holding metadata/ and data/
        metadata_path: Directory with forms/*.yaml
        database: Document store configuration
        secret_key: HS256 signing key for admin tokens
        auth_disabled: Skip the admin token gate (local development, tests)
        cors_origins: Allowed storefront origins
        log_level: Root logging level name
    """

    base_path: Path
    metadata_path: Path
    database: DatabaseConfig
    secret_key: str = DEFAULT_SECRET_KEY
    auth_disabled: bool = False
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @property
    def forms_path(self) -> Path:
        return self.metadata_path / "forms"

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        """Create settings from environment variables.

        Reads SBE_METADATA_PATH, DATABASE_URL / SBE_DB_PATH, SBE_SECRET_KEY,
        SBE_DISABLE_AUTH, SBE_CORS_ORIGINS and SBE_LOG_LEVEL.
        """
        base_path = base_path or resolve_base_path()

        metadata_path = os.environ.get("SBE_METADATA_PATH")
        origins = os.environ.get("SBE_CORS_ORIGINS")

        return cls(
            base_path=base_path,
            metadata_path=Path(metadata_path) if metadata_path else base_path / "metadata",
            database=DatabaseConfig.from_env(base_path),
            secret_key=os.environ.get("SBE_SECRET_KEY", DEFAULT_SECRET_KEY),
            auth_disabled=os.environ.get("SBE_DISABLE_AUTH", "").lower() in _TRUTHY,
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else list(DEFAULT_CORS_ORIGINS)
            ),
            log_level=os.environ.get("SBE_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Set the root logger format and level for the CLI and dev server."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
