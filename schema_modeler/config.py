"""Configuration management for schema-modeler."""

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.schema-modeler/.env
    3. Package directory (where this file is located)
    """
    if os.path.exists(".env"):
        return ".env"

    user_env = Path.home() / ".schema-modeler" / ".env"
    if user_env.exists():
        return str(user_env)

    package_env = Path(__file__).parent.parent / ".env"
    if package_env.exists():
        return str(package_env)

    return None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_MODELER_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL DSN used by the catalog collaborator"
    )
    catalog_pool_size: int = Field(
        default=4,
        description="Maximum concurrent catalog connections"
    )

    # Filters applied when the CLI is given none
    default_schemas: List[str] = Field(
        default_factory=list,
        description="Schema allow-list (empty means all user schemas)"
    )
    default_tables: List[str] = Field(
        default_factory=list,
        description="Table allow-list (empty means all tables)"
    )

    migration_quantum_seconds: int = Field(
        default=30,
        description="Seconds between consecutive migration timestamps"
    )
    add_null_type_for_nullable: bool = Field(
        default=True,
        description="Append ' | null' to the host type of nullable columns"
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI"
    )


# Global settings instance
settings = Settings()
