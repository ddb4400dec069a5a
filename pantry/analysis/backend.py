"""Analysis backends: the real OCR pipeline and a mock for development."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..errors import AnalysisInputError
from .barcode import BARCODE_CONFIDENCE
from .models import (
    AnalysisResult,
    BarcodeResult,
    NoneResult,
    RawLineItem,
    ReceiptResult,
)
from .orchestrator import (
    NO_DETECTION_MESSAGE,
    RECEIPT_CONFIDENCE,
    AnalysisOrchestrator,
    ProductLookup,
)
from .validator import FoodCategoryValidator

if TYPE_CHECKING:
    from ..config import PantryConfig

logger = logging.getLogger(__name__)


class AnalysisBackend(ABC):
    """Abstract base for turning a captured image into an analysis result."""

    name: str = ""

    @abstractmethod
    async def analyze_document(self, image_bytes: bytes) -> AnalysisResult:
        ...


class PipelineAnalysisBackend(AnalysisBackend):
    """OCR followed by the classification/extraction pipeline."""

    name = "pipeline"

    def __init__(self, orchestrator: AnalysisOrchestrator) -> None:
        self._orchestrator = orchestrator

    @property
    def orchestrator(self) -> AnalysisOrchestrator:
        return self._orchestrator

    async def analyze_document(self, image_bytes: bytes) -> AnalysisResult:
        return await self._orchestrator.analyze_document(image_bytes)


_MOCK_BARCODES = ["87436 12389", "12345 67890", "98765 43210"]

_MOCK_ITEMS = [
    RawLineItem(name="Bananas", quantity=6, unit="item", price=2.49, category="Produce"),
    RawLineItem(name="Whole Milk", quantity=1, unit="item", price=3.99, category="Dairy"),
    RawLineItem(name="Sourdough Bread", quantity=1, unit="item", price=4.50, category="Bakery"),
    RawLineItem(name="Chicken Breast", quantity=2, unit="lbs", price=12.98, category="Meat"),
    RawLineItem(name="Roma Tomatoes", quantity=4, unit="item", price=3.20, category="Produce"),
]


class MockAnalysisBackend(AnalysisBackend):
    """Return canned results without calling any external service.

    Roughly 40% barcodes, 40% receipts and 20% "nothing detected".
    """

    name = "mock"

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._validator = FoodCategoryValidator()

    async def analyze_document(self, image_bytes: bytes) -> AnalysisResult:
        if not image_bytes:
            raise AnalysisInputError("No image data provided")

        roll = self._rng.random()
        if roll < 0.4:
            return BarcodeResult(
                barcode=self._rng.choice(_MOCK_BARCODES),
                confidence=BARCODE_CONFIDENCE,
            )
        if roll < 0.8:
            count = self._rng.randint(2, 4)
            items = self._rng.sample(_MOCK_ITEMS, count)
            return ReceiptResult(
                items=self._validator.validate(items),
                confidence=RECEIPT_CONFIDENCE,
            )
        return NoneResult(message=NO_DETECTION_MESSAGE)


def create_analysis_backend(
    config: PantryConfig, products: ProductLookup | None = None
) -> AnalysisBackend:
    """Select the analysis backend once, based on configuration.

    ``analysis.backend = "auto"`` uses the pipeline when OCR credentials are
    available and the mock otherwise.
    """
    backend_name = config.analysis.backend

    if backend_name == "auto":
        from ..ocr.google_vision import GoogleVisionOCRBackend

        probe = GoogleVisionOCRBackend(
            credentials_path=config.ocr.google_vision.credentials_path
        )
        if config.ocr.backend == "google_vision" and not probe.has_credentials:
            logger.info("Google Vision credentials not found - using mock analysis")
            backend_name = "mock"
        else:
            backend_name = "pipeline"

    match backend_name:
        case "mock":
            return MockAnalysisBackend(seed=config.analysis.mock_seed)
        case "pipeline":
            from ..ocr import create_ocr_backend
            from .receipt import create_line_item_extractor

            orchestrator = AnalysisOrchestrator(
                create_line_item_extractor(config),
                ocr=create_ocr_backend(config),
                products=products,
            )
            return PipelineAnalysisBackend(orchestrator)
        case _:
            raise ValueError(
                f"Unknown analysis backend: {backend_name!r} "
                f"(choose auto, pipeline or mock)"
            )
