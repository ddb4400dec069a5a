"""Barcode extraction from OCR text."""

from __future__ import annotations

import logging
import re

from .classifier import ReceiptIndicatorScorer
from .models import BarcodeCandidate

logger = logging.getLogger(__name__)

BARCODE_CONFIDENCE = 0.9

# Evaluated in order; the first pattern whose first match is standalone wins.
BARCODE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("UPC-A", re.compile(r"\b\d{12}\b", re.ASCII)),
    ("EAN-13", re.compile(r"\b\d{13}\b", re.ASCII)),
    ("EAN-8", re.compile(r"\b\d{8}\b", re.ASCII)),
    ("spaced", re.compile(r"\b\d{5}\s+\d{5}\b", re.ASCII)),
)

# A line shorter than this always counts as standalone.
MAX_SHORT_LINE = 30

_WHITESPACE = re.compile(r"\s+")


def _strip_ws(value: str) -> str:
    return _WHITESPACE.sub("", value)


class BarcodeExtractor:
    """Pick the most likely printed barcode number out of OCR text."""

    def __init__(
        self,
        scorer: ReceiptIndicatorScorer | None = None,
        patterns: tuple[tuple[str, re.Pattern[str]], ...] = BARCODE_PATTERNS,
    ) -> None:
        self._scorer = scorer or ReceiptIndicatorScorer()
        self._patterns = patterns

    def extract(self, text: str | None) -> BarcodeCandidate | None:
        if not text:
            return None

        # Receipt-shaped text yields no barcode even when called directly.
        if self._scorer.has_strong_indicator(text) and self._scorer.has_prices(text):
            logger.info("Skipping barcode detection: text looks like a receipt")
            return None

        lines = [line.strip() for line in text.split("\n")]

        for label, pattern in self._patterns:
            match = pattern.search(text)
            if match is None:
                continue
            code = _WHITESPACE.sub(" ", match.group(0))
            if self._is_standalone(code, lines):
                logger.info("Found standalone %s barcode: %s", label, code)
                return BarcodeCandidate(code=code, confidence=BARCODE_CONFIDENCE)
            logger.debug("%s match %s is not standalone", label, code)

        logger.info("No standalone barcode found")
        return None

    @staticmethod
    def _is_standalone(code: str, lines: list[str]) -> bool:
        """Check that the code dominates at least one line it appears on."""
        digits = _strip_ws(code)
        for line in lines:
            compact = _strip_ws(line)
            if digits not in compact:
                continue
            if len(line) < MAX_SHORT_LINE or len(compact) < len(digits) * 2:
                return True
        return False
