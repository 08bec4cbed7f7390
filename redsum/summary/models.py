"""Data models produced by the summary generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from redsum.activity.models import RunScope, SourceWindow


@dataclass(slots=True, frozen=True)
class TokenUsage:
    """Usage counters reported by the backend; any of them may be missing."""

    prompt_tokens: int | None = None
    candidates_tokens: int | None = None
    total_tokens: int | None = None

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> "TokenUsage":
        return cls(
            prompt_tokens=metadata.get("promptTokenCount"),
            candidates_tokens=metadata.get("candidatesTokenCount"),
            total_tokens=metadata.get("totalTokenCount"),
        )

    def to_markdown(self) -> str:
        def _fmt(value: int | None) -> str:
            return "N/A" if value is None else str(value)

        lines = [
            "## トークン使用量情報",
            "",
            f"- プロンプトトークン数: {_fmt(self.prompt_tokens)}",
            f"- 生成トークン数: {_fmt(self.candidates_tokens)}",
            f"- 合計トークン数: {_fmt(self.total_tokens)}",
        ]
        return "\n".join(lines)


@dataclass(slots=True)
class SummaryArtifact:
    """Generated summary text plus provenance."""

    body: str
    generated_at: datetime
    model: str
    source_window: SourceWindow | None = None
    scope: RunScope = field(default_factory=RunScope)
    token_usage: TokenUsage | None = None
    prompt: str = field(default="", repr=False)


__all__ = ["SummaryArtifact", "TokenUsage"]
