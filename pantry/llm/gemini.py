"""Gemini API text generator."""

from __future__ import annotations

from . import TextGenerator


class GeminiTextGenerator(TextGenerator):
    """Generate text with Google Gemini."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.5-flash") -> None:
        self._api_key = api_key
        self._model_name = model
        self._model = None

    async def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not configured. "
                "Check the config file or the GOOGLE_GEMINI_API_KEY environment variable."
            )

        if self._model is None:
            try:
                import google.generativeai as genai
            except ImportError:
                raise ImportError(
                    "google-generativeai SDK is required: pip install google-generativeai"
                ) from None

            genai.configure(api_key=self._api_key)
            self._model = genai.GenerativeModel(self._model_name)

        response = await self._model.generate_content_async(prompt)
        return response.text
