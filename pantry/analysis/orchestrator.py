"""Sequencing of classification, extraction and validation for one document."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from ..errors import AnalysisInputError, UpstreamOCRError
from .barcode import BarcodeExtractor
from .classifier import ReceiptIndicatorScorer, TextClassifier
from .models import (
    AnalysisResult,
    BarcodeCandidate,
    BarcodeResult,
    DocumentType,
    NoneResult,
    ReceiptResult,
)
from .validator import FoodCategoryValidator

if TYPE_CHECKING:
    from ..ocr import OCRBackend
    from .receipt import LineItemExtractor

logger = logging.getLogger(__name__)

RECEIPT_CONFIDENCE = 0.8

NO_DETECTION_MESSAGE = (
    "No barcode or receipt detected. "
    "Please try again with better lighting or positioning."
)
PRODUCT_NOT_FOUND_NOTE = "Product not found in database"


class ProductLookup(Protocol):
    def find_product_by_code(self, code: str) -> dict | None: ...


class AnalysisOrchestrator:
    """Turn OCR text into a barcode, receipt or "none" result.

    The receipt gate runs first; a gated receipt that yields no usable items
    is reported as "none" rather than falling through to barcode detection.
    Collaborator failures after OCR are folded into the result instead of
    propagating.
    """

    def __init__(
        self,
        extractor: LineItemExtractor,
        *,
        ocr: OCRBackend | None = None,
        products: ProductLookup | None = None,
        classifier: TextClassifier | None = None,
        scorer: ReceiptIndicatorScorer | None = None,
        barcodes: BarcodeExtractor | None = None,
        validator: FoodCategoryValidator | None = None,
    ) -> None:
        self._extractor = extractor
        self._ocr = ocr
        self._products = products
        if classifier is None:
            scorer = scorer or ReceiptIndicatorScorer()
            classifier = TextClassifier(scorer, barcodes or BarcodeExtractor(scorer))
        self._classifier = classifier
        self._validator = validator or FoodCategoryValidator()

    async def analyze_document(self, image_bytes: bytes) -> AnalysisResult:
        """Run OCR on an image and analyze the recognized text.

        Raises:
            AnalysisInputError: If the image payload is empty.
            UpstreamOCRError: If the OCR backend fails.
        """
        if not image_bytes:
            raise AnalysisInputError("No image data provided")
        if self._ocr is None:
            raise UpstreamOCRError("No OCR backend configured")

        try:
            text = await self._ocr.detect_text(image_bytes)
        except Exception as exc:
            logger.error("OCR backend failed: %s", exc)
            raise UpstreamOCRError(str(exc)) from exc

        return await self.analyze(text)

    async def analyze(self, text: str | None) -> AnalysisResult:
        verdict, candidate = self._classifier.detect(text)

        match verdict:
            case DocumentType.RECEIPT:
                logger.info("Text passed the receipt gate")
                return await self._receipt_path(text)
            case DocumentType.BARCODE:
                return self._barcode_path(candidate)
            case _:
                return NoneResult(message=NO_DETECTION_MESSAGE)

    async def _receipt_path(self, text: str) -> AnalysisResult:
        try:
            items = await self._extractor.extract(text)
        except Exception as exc:
            logger.warning("Line-item extraction failed: %s", exc)
            items = None

        if not items:
            logger.info("Extraction returned no items; not falling back to another parser")
            return NoneResult(message=NO_DETECTION_MESSAGE)

        validated = self._validator.validate(items)
        if not validated:
            return NoneResult(message=NO_DETECTION_MESSAGE)

        logger.info("Extracted %d items from receipt", len(validated))
        return ReceiptResult(items=validated, confidence=RECEIPT_CONFIDENCE)

    def _barcode_path(self, candidate: BarcodeCandidate) -> AnalysisResult:
        result = BarcodeResult(barcode=candidate.code, confidence=candidate.confidence)
        if self._products is None:
            return result

        normalized = re.sub(r"\s+", "", candidate.code)
        try:
            product = self._products.find_product_by_code(normalized)
        except Exception as exc:
            logger.warning("Product lookup failed for %s: %s", normalized, exc)
            product = None

        if product is None:
            result.note = PRODUCT_NOT_FOUND_NOTE
        else:
            result.product = product
        return result
