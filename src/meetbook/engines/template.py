"""Offline engine used when no API key is configured."""

from __future__ import annotations

from meetbook.engines.base import EngineResponse

PLACEHOLDER_BODY = (
    "Hello,\n\nYou are invited to a meeting.\n\n"
    "Topic: [Meeting Topic]\nPlease see details below.\n\nBest regards,"
)


class TemplateEngine:
    """Returns a fixed invitation body without any network call."""

    @property
    def name(self) -> str:
        return "template"

    async def send(self, message: str, *, system_prompt: str | None = None) -> EngineResponse:
        return EngineResponse(text=PLACEHOLDER_BODY, model=self.name)
