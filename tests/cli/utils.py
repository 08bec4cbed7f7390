"""Shared helpers for CLI tests."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from pytest import MonkeyPatch

from redsum.config import AppConfig, DatabaseConfig, LLMConfig, SummaryConfig, TrackerConfig


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def make_app_config(base_dir: Path, *, insecure: bool = False) -> AppConfig:
    """Construct an in-memory AppConfig tailored for CLI tests."""

    return AppConfig(
        logging_level="INFO",
        database=DatabaseConfig(url=f"sqlite:///{base_dir / 'redmine.db'}"),
        llm=LLMConfig(api_key="dummy-gemini-key", model="gemini-test"),
        tracker=TrackerConfig(
            url="https://redmine.example.com/",
            api_key="dummy-redmine-key",
            insecure=insecure,
            default_project_id=1,
        ),
        summary=SummaryConfig(
            activity_days=7,
            checkpoint_dir=base_dir / "checkpoints",
            prune_after_days=7,
            export_dir=base_dir / "exports",
        ),
    )


def patch_load_config(monkeypatch: MonkeyPatch, config: AppConfig) -> None:
    """Force the CLI to return the provided config instead of reading from disk."""

    def _fake_load_config(model: object, path: Path) -> AppConfig:
        if model is not AppConfig:
            raise AssertionError("Unexpected config model request")
        return config

    monkeypatch.setattr("redsum.cli.load_config", _fake_load_config)
