"""Summary generation package."""

from __future__ import annotations

from .generator import GeminiClient, GenerationResult, SummaryGenerator
from .models import SummaryArtifact, TokenUsage
from .prompt import ACTIVITIES_PLACEHOLDER, PromptBuilder

__all__ = [
    "ACTIVITIES_PLACEHOLDER",
    "GeminiClient",
    "GenerationResult",
    "PromptBuilder",
    "SummaryArtifact",
    "SummaryGenerator",
    "TokenUsage",
]
