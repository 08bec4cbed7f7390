"""Configuration namespace for redsum."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .database import DatabaseConfig
from .llm import LLMConfig
from .summary import SummaryConfig
from .tracker import TrackerConfig
from .utils import mask_secret, require_env_reference, resolve_env_reference

__all__ = [
    "AppConfig",
    "BaseConfig",
    "DatabaseConfig",
    "LLMConfig",
    "SummaryConfig",
    "TrackerConfig",
    "load_config",
    "mask_secret",
    "require_env_reference",
    "resolve_env_reference",
]
