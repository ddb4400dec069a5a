"""Google Cloud Vision OCR backend."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from . import OCRBackend

logger = logging.getLogger(__name__)


class GoogleVisionOCRBackend(OCRBackend):
    """Detect document text with the Cloud Vision ``text_detection`` call.

    When ``credentials_path`` points to an existing service-account file it is
    used directly; otherwise the client falls back to application default
    credentials.
    """

    def __init__(self, credentials_path: str = "", client=None) -> None:
        self._credentials_path = credentials_path
        self._client = client

    @property
    def has_credentials(self) -> bool:
        return bool(self._credentials_path) and Path(
            self._credentials_path
        ).expanduser().exists()

    def _get_client(self):
        if self._client is not None:
            return self._client

        try:
            from google.cloud import vision
        except ImportError:
            raise ImportError(
                "google-cloud-vision SDK is required: pip install google-cloud-vision"
            ) from None

        if self.has_credentials:
            path = str(Path(self._credentials_path).expanduser())
            logger.info("Initializing Google Vision client with %s", path)
            self._client = vision.ImageAnnotatorClient.from_service_account_file(path)
        else:
            logger.info("Initializing Google Vision client with default credentials")
            self._client = vision.ImageAnnotatorClient()
        return self._client

    async def detect_text(self, image_bytes: bytes) -> str:
        client = self._get_client()
        response = await asyncio.to_thread(
            client.text_detection, image={"content": image_bytes}
        )
        if response.error.message:
            raise RuntimeError(f"Vision API error: {response.error.message}")

        annotations = response.text_annotations
        text = annotations[0].description if annotations else ""
        logger.debug("Detected text: %.200s", text)
        return text
