"""Issue tracker (Redmine REST API) configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from redsum.config.base import BaseConfig
from redsum.config.utils import require_env_reference


class TrackerConfig(BaseConfig):
    """Connection settings for the Redmine REST API."""

    url: str = Field(..., description="Redmine base URL")
    api_key: str = Field(..., description="REST API key, can use 'env:VAR_NAME' format")
    insecure: bool = Field(False, description="Disable TLS certificate and host verification")
    tracker_id: int = Field(1, ge=1, description="Tracker id used when creating issues")
    default_project_id: int = Field(1, ge=1, description="Project receiving global summaries")
    connect_timeout: float = Field(10.0, gt=0, description="Connect timeout (seconds)")
    read_timeout: float = Field(30.0, gt=0, description="Total request timeout (seconds)")

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def api_key_secret(self) -> str:
        return require_env_reference(self.api_key)


__all__ = ["TrackerConfig"]
