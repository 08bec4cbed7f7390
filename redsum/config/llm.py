"""Generative-text backend configuration."""

from __future__ import annotations

from pydantic import Field

from redsum.config.base import BaseConfig
from redsum.config.utils import require_env_reference


class LLMConfig(BaseConfig):
    """Configuration for the Gemini ``generateContent`` endpoint."""

    api_key: str = Field(..., description="API key, can use 'env:VAR_NAME' format")
    model: str = Field("gemini-1.5-pro", description="Default model name for API calls")
    base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        description="API base URL (the model path is appended)",
    )
    temperature: float = Field(0.2, ge=0.0, le=2.0, description="Sampling temperature")
    top_k: int = Field(40, ge=1, description="Top-k sampling parameter")
    top_p: float = Field(0.95, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    max_output_tokens: int = Field(1024, ge=1, description="Output token ceiling")

    @property
    def api_key_secret(self) -> str:
        """Return the resolved API key, expanding any ``env:VAR`` references."""

        return require_env_reference(self.api_key)


__all__ = ["LLMConfig"]
