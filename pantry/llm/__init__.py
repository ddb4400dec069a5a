"""Text-generation backends used for delegated receipt extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import PantryConfig


class TextGenerator(ABC):
    """Abstract base for a prompt-in, text-out language model call."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's free-text completion for *prompt*."""
        ...


def create_generator(config: PantryConfig) -> TextGenerator:
    """Create a text generator based on configuration."""
    backend_name = config.extraction.llm_backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiTextGenerator

            return GeminiTextGenerator(
                api_key=config.extraction.gemini.api_key,
                model=config.extraction.gemini.model,
            )
        case "claude":
            from .claude import ClaudeTextGenerator

            return ClaudeTextGenerator(
                api_key=config.extraction.claude.api_key,
                model=config.extraction.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown LLM backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )
