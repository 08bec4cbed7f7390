"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field

from redsum.config.base import BaseConfig
from redsum.config.database import DatabaseConfig
from redsum.config.llm import LLMConfig
from redsum.config.summary import SummaryConfig
from redsum.config.tracker import TrackerConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration, built once per process."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig, description="Activity database")
    llm: LLMConfig
    tracker: TrackerConfig
    summary: SummaryConfig = Field(default_factory=SummaryConfig, description="Run defaults")


__all__ = ["AppConfig"]
