"""Anthropic API engine for drafting invitation text."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from meetbook.engines.base import EngineResponse
from meetbook.errors import EngineError

logger = logging.getLogger(__name__)


@dataclass
class AnthropicAPIEngine:
    """Direct Anthropic API via the `anthropic` SDK. Single-turn, no tools."""

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    timeout: int = 60

    def __post_init__(self) -> None:
        try:
            import anthropic

            self._client = anthropic.Anthropic(timeout=self.timeout)
        except ImportError:
            raise ImportError("anthropic package required. Install with: pip install anthropic")

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def send(self, message: str, *, system_prompt: str | None = None) -> EngineResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": message}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except Exception as e:
            raise EngineError(f"Anthropic API error: {e}") from e

        text = response.content[0].text if response.content else ""
        if not text.strip():
            raise EngineError("Anthropic API returned an empty response")

        return EngineResponse(text=text.strip(), model=response.model)
