"""Summary generation through the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests
from loguru import logger

from redsum.activity.models import ActivityRecord, RunScope, SourceWindow
from redsum.config.llm import LLMConfig
from redsum.errors import GenerationFailed

from .models import SummaryArtifact, TokenUsage
from .prompt import PromptBuilder


@dataclass(slots=True, frozen=True)
class GenerationResult:
    text: str
    usage: TokenUsage | None


class GeminiClient:
    """Minimal non-streaming client for ``models/{model}:generateContent``."""

    def __init__(self, config: LLMConfig, *, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def endpoint(self, model: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/models/{model}:generateContent"

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "topK": self._config.top_k,
                "topP": self._config.top_p,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }

    def generate(self, prompt: str, *, model: str | None = None) -> GenerationResult:
        model_name = model or self._config.model
        logger.debug("Calling Gemini model {} ({} prompt chars)", model_name, len(prompt))
        try:
            response = self._session.post(
                self.endpoint(model_name),
                params={"key": self._config.api_key_secret},
                json=self.build_payload(prompt),
            )
        except requests.RequestException as exc:
            raise GenerationFailed(f"Gemini request failed: {exc}", status=0, body="") from exc

        body = response.text
        if response.status_code != 200:
            raise GenerationFailed("Gemini API returned an error", status=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as exc:
            raise GenerationFailed("Gemini API returned malformed JSON", status=response.status_code, body=body) from exc

        text = _extract_text(data)
        if not text:
            raise GenerationFailed("Gemini API response has no generated text", status=response.status_code, body=body)

        usage_metadata = data.get("usageMetadata") if isinstance(data, dict) else None
        usage = TokenUsage.from_metadata(usage_metadata) if isinstance(usage_metadata, dict) else None
        return GenerationResult(text=text, usage=usage)


class SummaryGenerator:
    """Turn activity records into a markdown summary."""

    def __init__(
        self,
        config: LLMConfig,
        *,
        client: GeminiClient | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._config = config
        self._client = client or GeminiClient(config)
        self._prompts = prompt_builder or PromptBuilder()

    def build_prompt(self, records: Sequence[ActivityRecord], template: str | None = None) -> str:
        return self._prompts.build(records, template)

    def summarize(
        self,
        records: Sequence[ActivityRecord],
        custom_prompt_template: str | None = None,
        include_token_usage: bool = False,
        *,
        model: str | None = None,
        window: SourceWindow | None = None,
        scope: RunScope | None = None,
    ) -> SummaryArtifact:
        if not records:
            raise ValueError("summarize() requires at least one activity record")

        prompt = self.build_prompt(records, custom_prompt_template)
        model_name = model or self._config.model
        result = self._client.generate(prompt, model=model_name)

        body = result.text
        if include_token_usage and result.usage is not None:
            body = f"{body.rstrip()}\n\n---\n\n{result.usage.to_markdown()}\n"

        logger.info("Generated summary with {} ({} chars)", model_name, len(body))
        return SummaryArtifact(
            body=body,
            generated_at=datetime.now(),
            model=model_name,
            source_window=window,
            scope=scope or RunScope(),
            token_usage=result.usage,
            prompt=prompt,
        )


def _extract_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(text, str):
        return ""
    return text if text.strip() else ""


__all__ = ["GeminiClient", "GenerationResult", "SummaryGenerator"]
