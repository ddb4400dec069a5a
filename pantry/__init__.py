"""Household pantry tracker: barcode and receipt scanning into a food inventory."""

from .analysis import (
    AnalysisBackend,
    AnalysisOrchestrator,
    BarcodeResult,
    NoneResult,
    ReceiptResult,
    TextClassifier,
    create_analysis_backend,
)
from .config import (
    AnalysisConfig,
    DatabaseConfig,
    ExtractionConfig,
    OCRConfig,
    PantryConfig,
    ServerConfig,
    load_config,
)
from .db import InventoryDB, ProductDB
from .errors import (
    AnalysisInputError,
    ExtractionError,
    PantryError,
    UpstreamOCRError,
)

__all__ = [
    "AnalysisBackend",
    "AnalysisOrchestrator",
    "TextClassifier",
    "BarcodeResult",
    "ReceiptResult",
    "NoneResult",
    "create_analysis_backend",
    "PantryConfig",
    "OCRConfig",
    "ExtractionConfig",
    "AnalysisConfig",
    "DatabaseConfig",
    "ServerConfig",
    "load_config",
    "InventoryDB",
    "ProductDB",
    "PantryError",
    "AnalysisInputError",
    "UpstreamOCRError",
    "ExtractionError",
]
