"""Relational store connection settings."""

from __future__ import annotations

from pydantic import Field
from sqlalchemy.engine import URL

from redsum.config.base import BaseConfig
from redsum.config.utils import resolve_env_reference


class DatabaseConfig(BaseConfig):
    """Connection settings for the Redmine database (read-only access)."""

    url: str | None = Field(
        None,
        description="Full SQLAlchemy URL; overrides the component fields when set. Accepts 'env:VAR_NAME'",
    )
    driver: str = Field("postgresql+psycopg", description="SQLAlchemy dialect+driver")
    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, ge=1, le=65535, description="Database port")
    name: str = Field("redmine", description="Database name")
    user: str = Field("redmine", description="Database user")
    password: str = Field("", description="Database password, can use 'env:VAR_NAME' format")
    echo: bool = Field(False, description="Echo SQL statements for debugging")

    @property
    def effective_url(self) -> str | URL:
        """Return the explicit URL, or one assembled from the component fields."""

        explicit = resolve_env_reference(self.url)
        if explicit:
            return explicit
        return URL.create(
            self.driver,
            username=self.user,
            password=resolve_env_reference(self.password) or None,
            host=self.host,
            port=self.port,
            database=self.name,
        )


__all__ = ["DatabaseConfig"]
