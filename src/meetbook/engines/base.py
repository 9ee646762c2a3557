"""Engine protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class EngineResponse:
    """Text produced by a generation engine."""

    text: str
    model: str | None = None


@runtime_checkable
class Engine(Protocol):
    """Protocol that all text-generation backends must implement."""

    @property
    def name(self) -> str: ...

    async def send(self, message: str, *, system_prompt: str | None = None) -> EngineResponse:
        """Send a prompt and return the generated text.

        Raises EngineError when the backend fails.
        """
        ...
