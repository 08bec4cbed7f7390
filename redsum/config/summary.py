"""Summary run configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from redsum.config.base import BaseConfig


class SummaryConfig(BaseConfig):
    """Defaults for a summarisation run and its checkpoint store."""

    activity_days: int = Field(7, ge=1, description="Default look-back window in days")
    checkpoint_dir: Path = Field(Path("./tmp"), description="Directory for summary checkpoint files")
    prune_after_days: int = Field(7, ge=0, description="Age threshold for checkpoint pruning")
    include_token_usage: bool = Field(False, description="Append token usage to generated summaries")
    export_dir: Path = Field(Path("./exports"), description="Default directory for activity exports")


__all__ = ["SummaryConfig"]
