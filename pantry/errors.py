"""Exception types raised by the analysis pipeline."""

from __future__ import annotations


class PantryError(Exception):
    """Base class for pantry errors."""


class AnalysisInputError(PantryError):
    """The image payload was missing or could not be decoded."""


class UpstreamOCRError(PantryError):
    """The OCR service failed; no partial text is used."""


class ExtractionError(PantryError):
    """The text-generation service failed or returned no usable JSON array."""
