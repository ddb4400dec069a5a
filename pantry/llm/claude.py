"""Claude API text generator."""

from __future__ import annotations

from . import TextGenerator


class ClaudeTextGenerator(TextGenerator):
    """Generate text with Anthropic's Claude."""

    def __init__(
        self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929"
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = None

    async def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not configured. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        if self._client is None:
            try:
                import anthropic
            except ImportError:
                raise ImportError(
                    "anthropic SDK is required: pip install anthropic"
                ) from None

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=4096,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text
