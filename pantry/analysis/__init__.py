"""Classification and extraction pipeline for scanned barcodes and receipts."""

from .backend import (
    AnalysisBackend,
    MockAnalysisBackend,
    PipelineAnalysisBackend,
    create_analysis_backend,
)
from .barcode import BarcodeExtractor
from .classifier import ReceiptIndicatorScorer, TextClassifier
from .models import (
    AnalysisResult,
    BarcodeCandidate,
    BarcodeResult,
    DocumentType,
    NoneResult,
    RawLineItem,
    ReceiptResult,
    ValidatedLineItem,
)
from .orchestrator import AnalysisOrchestrator, ProductLookup
from .receipt import (
    DelegatedLineItemExtractor,
    LineItemExtractor,
    LocalLineItemExtractor,
    create_line_item_extractor,
)
from .validator import ACCEPTED_CATEGORIES, FoodCategoryValidator

__all__ = [
    "AnalysisBackend",
    "PipelineAnalysisBackend",
    "MockAnalysisBackend",
    "create_analysis_backend",
    "AnalysisOrchestrator",
    "ProductLookup",
    "TextClassifier",
    "ReceiptIndicatorScorer",
    "BarcodeExtractor",
    "LineItemExtractor",
    "DelegatedLineItemExtractor",
    "LocalLineItemExtractor",
    "create_line_item_extractor",
    "FoodCategoryValidator",
    "ACCEPTED_CATEGORIES",
    "DocumentType",
    "BarcodeCandidate",
    "RawLineItem",
    "ValidatedLineItem",
    "BarcodeResult",
    "ReceiptResult",
    "NoneResult",
    "AnalysisResult",
]
