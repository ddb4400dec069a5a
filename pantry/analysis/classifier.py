"""Document type classification for OCR text."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .models import BarcodeCandidate, DocumentType

if TYPE_CHECKING:
    from .barcode import BarcodeExtractor

logger = logging.getLogger(__name__)

# Case-insensitive substrings that mark text as receipt-like on their own
STRONG_RECEIPT_INDICATORS: tuple[str, ...] = (
    "receipt",
    "total",
    "subtotal",
    "tax",
    "thank you",
    "store",
    "cashier",
    "register",
    "transaction",
    "purchase",
    "sale",
    "change due",
    "amount tendered",
    "visa",
    "mastercard",
    "debit",
)

PRICE_PATTERN = re.compile(r"\$?\d+\.\d{2}(?!\d)", re.ASCII)

MIN_PRICE_MATCHES = 2


class ReceiptIndicatorScorer:
    """Decides whether OCR text carries enough signal to be read as a receipt."""

    def __init__(
        self,
        indicators: tuple[str, ...] = STRONG_RECEIPT_INDICATORS,
        price_pattern: re.Pattern[str] = PRICE_PATTERN,
        min_prices: int = MIN_PRICE_MATCHES,
    ) -> None:
        self._indicators = indicators
        self._price_pattern = price_pattern
        self._min_prices = min_prices

    def has_strong_indicator(self, text: str) -> bool:
        lowered = text.lower()
        return any(indicator in lowered for indicator in self._indicators)

    def price_count(self, text: str) -> int:
        return len(self._price_pattern.findall(text))

    def has_prices(self, text: str) -> bool:
        return self.price_count(text) >= self._min_prices

    def should_attempt(self, text: str | None) -> bool:
        """Return True when receipt line-item extraction should be tried."""
        if not text:
            return False
        strong = self.has_strong_indicator(text)
        prices = self.price_count(text)
        accepted = strong or prices >= self._min_prices
        logger.debug(
            "Receipt gate: strong_indicator=%s prices=%d accepted=%s",
            strong, prices, accepted,
        )
        return accepted


class TextClassifier:
    """Classify OCR text as a barcode, a receipt, or neither.

    The receipt gate is evaluated before barcode detection: receipts
    routinely contain 12/13-digit runs (loyalty IDs, register numbers)
    that would otherwise read as standalone barcodes.
    """

    def __init__(
        self,
        scorer: ReceiptIndicatorScorer | None = None,
        barcode_extractor: BarcodeExtractor | None = None,
    ) -> None:
        self._scorer = scorer or ReceiptIndicatorScorer()
        if barcode_extractor is None:
            from .barcode import BarcodeExtractor

            barcode_extractor = BarcodeExtractor(self._scorer)
        self._barcodes = barcode_extractor

    def classify(self, text: str | None) -> DocumentType:
        return self.detect(text)[0]

    def detect(
        self, text: str | None
    ) -> tuple[DocumentType, BarcodeCandidate | None]:
        """Classify *text* and return the barcode candidate that decided it.

        The candidate is None unless the verdict is BARCODE.
        """
        if not text:
            return DocumentType.NONE, None
        if self._scorer.should_attempt(text):
            return DocumentType.RECEIPT, None
        candidate = self._barcodes.extract(text)
        if candidate is not None:
            return DocumentType.BARCODE, candidate
        return DocumentType.NONE, None
