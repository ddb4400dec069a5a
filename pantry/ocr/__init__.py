"""OCR backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import PantryConfig


class OCRBackend(ABC):
    """Abstract base for full-text detection in a single image."""

    @abstractmethod
    async def detect_text(self, image_bytes: bytes) -> str:
        """Return all recognized text, or an empty string if none was found."""
        ...


def create_ocr_backend(config: PantryConfig) -> OCRBackend:
    """Create an OCR backend based on configuration."""
    backend_name = config.ocr.backend

    match backend_name:
        case "google_vision":
            from .google_vision import GoogleVisionOCRBackend

            return GoogleVisionOCRBackend(
                credentials_path=config.ocr.google_vision.credentials_path,
            )
        case _:
            raise ValueError(
                f"Unknown OCR backend: {backend_name!r} (choose google_vision)"
            )
