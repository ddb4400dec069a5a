"""Data types passed between the analysis stages."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar


class DocumentType(enum.Enum):
    BARCODE = "barcode"
    RECEIPT = "receipt"
    NONE = "none"


@dataclass
class BarcodeCandidate:
    code: str  # digits as matched, whitespace collapsed
    confidence: float


@dataclass
class RawLineItem:
    """A receipt line item as produced by an extractor, not yet checked."""

    name: Any
    quantity: Any = 1
    unit: Any = "item"
    price: Any = None
    category: Any = "Other"

    @classmethod
    def from_dict(cls, data: dict) -> RawLineItem:
        return cls(
            name=data.get("name"),
            quantity=data.get("quantity"),
            unit=data.get("unit"),
            price=data.get("price"),
            category=data.get("category"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ValidatedLineItem(RawLineItem):
    """A line item that passed FoodCategoryValidator."""

    name: str
    quantity: float = 1
    unit: str = "item"
    price: float | None = None
    category: str = "Other"


@dataclass
class BarcodeResult:
    type: ClassVar[str] = DocumentType.BARCODE.value

    barcode: str
    confidence: float
    product: dict | None = None
    note: str | None = None

    def to_dict(self) -> dict:
        data: dict = {
            "type": self.type,
            "barcode": self.barcode,
            "confidence": self.confidence,
        }
        if self.product is not None:
            data["product"] = self.product
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass
class ReceiptResult:
    type: ClassVar[str] = DocumentType.RECEIPT.value

    items: list[ValidatedLineItem] = field(default_factory=list)
    confidence: float = 0.8

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "items": [item.to_dict() for item in self.items],
            "confidence": self.confidence,
        }


@dataclass
class NoneResult:
    type: ClassVar[str] = DocumentType.NONE.value

    message: str

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message}


AnalysisResult = BarcodeResult | ReceiptResult | NoneResult
