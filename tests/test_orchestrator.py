"""Tests for the analysis orchestrator (fake collaborators)."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pantry.analysis.barcode import BarcodeExtractor
from pantry.analysis.models import (
    BarcodeCandidate,
    BarcodeResult,
    DocumentType,
    NoneResult,
    ReceiptResult,
)
from pantry.analysis.orchestrator import (
    NO_DETECTION_MESSAGE,
    PRODUCT_NOT_FOUND_NOTE,
    AnalysisOrchestrator,
)
from pantry.analysis.receipt import DelegatedLineItemExtractor, LocalLineItemExtractor
from pantry.errors import AnalysisInputError, UpstreamOCRError

WALMART_RECEIPT = (
    "WALMART\nBANANAS 1.2 lbs $0.71\nMILK 1 GAL $3.99\n"
    "SUBTOTAL $4.70\nTAX $0.38\nTOTAL $5.08\nTHANK YOU"
)

MIXED_LLM_RESPONSE = json.dumps([
    {"name": "Bananas", "quantity": 1.2, "unit": "lbs", "price": 0.71, "category": "Produce"},
    {"name": "AA Batteries", "quantity": 4, "unit": "item", "price": 5.99, "category": "Household"},
    {"name": "Shampoo", "quantity": 1, "unit": "item", "price": 6.99, "category": "Personal Care"},
    {"name": "Whole Milk", "quantity": 1, "unit": "item", "price": 3.99, "category": "Dairy"},
])


def _llm_extractor(response=None, side_effect=None):
    generator = AsyncMock()
    generator.generate.return_value = response
    generator.generate.side_effect = side_effect
    return DelegatedLineItemExtractor(generator), generator


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_empty_text_is_none(self):
        extractor = AsyncMock()
        orchestrator = AnalysisOrchestrator(extractor)
        result = await orchestrator.analyze("")
        assert isinstance(result, NoneResult)
        assert result.message == NO_DETECTION_MESSAGE
        extractor.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_walmart_receipt_with_local_parser(self):
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor())
        result = await orchestrator.analyze(WALMART_RECEIPT)

        assert isinstance(result, ReceiptResult)
        assert result.confidence == 0.8
        assert [i.price for i in result.items] == [0.71, 3.99]
        assert result.items[1].name == "Milk 1 Gal"
        assert result.items[1].category == "Dairy"

    @pytest.mark.asyncio
    async def test_barcode_only(self):
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor())
        result = await orchestrator.analyze("041196910756")

        assert isinstance(result, BarcodeResult)
        assert result.barcode == "041196910756"
        assert result.confidence == 0.9
        assert result.to_dict() == {
            "type": "barcode",
            "barcode": "041196910756",
            "confidence": 0.9,
        }

    @pytest.mark.asyncio
    async def test_llm_empty_array_is_none(self):
        extractor, generator = _llm_extractor("[]")
        orchestrator = AnalysisOrchestrator(extractor)
        result = await orchestrator.analyze(WALMART_RECEIPT)

        generator.generate.assert_awaited_once()
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_llm_items_are_validated(self):
        extractor, _ = _llm_extractor(MIXED_LLM_RESPONSE)
        orchestrator = AnalysisOrchestrator(extractor)
        result = await orchestrator.analyze(WALMART_RECEIPT)

        assert isinstance(result, ReceiptResult)
        assert [i.name for i in result.items] == ["Bananas", "Whole Milk"]
        assert result.to_dict()["items"][0] == {
            "name": "Bananas",
            "quantity": 1.2,
            "unit": "lbs",
            "price": 0.71,
            "category": "Produce",
        }

    @pytest.mark.asyncio
    async def test_all_items_dropped_is_none(self):
        response = json.dumps([
            {"name": "Detergent", "quantity": 1, "unit": "item", "price": 12.99, "category": "Household"},
        ])
        extractor, _ = _llm_extractor(response)
        result = await AnalysisOrchestrator(extractor).analyze(WALMART_RECEIPT)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_oversized_integer_quantity_is_dropped(self):
        response = (
            '[{"name": "Milk", "quantity": ' + "9" * 400
            + ', "unit": "item", "price": 1, "category": "Dairy"}]'
        )
        extractor, _ = _llm_extractor(response)
        result = await AnalysisOrchestrator(extractor).analyze("STORE\nMILK $3.99\nTOTAL $3.99")
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_nan_price_is_none(self):
        response = '[{"name": "Milk", "quantity": 1, "unit": "item", "price": NaN, "category": "Dairy"}]'
        extractor, _ = _llm_extractor(response)
        result = await AnalysisOrchestrator(extractor).analyze(WALMART_RECEIPT)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_malformed_llm_output_is_none(self):
        extractor, _ = _llm_extractor("I am unable to parse this receipt.")
        result = await AnalysisOrchestrator(extractor).analyze(WALMART_RECEIPT)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_llm_failure_is_none_without_fallback(self):
        extractor, _ = _llm_extractor(side_effect=RuntimeError("quota exceeded"))
        orchestrator = AnalysisOrchestrator(extractor)
        result = await orchestrator.analyze(WALMART_RECEIPT)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_missing_api_key_is_none(self):
        from pantry.llm.gemini import GeminiTextGenerator

        extractor = DelegatedLineItemExtractor(GeminiTextGenerator(api_key=""))
        result = await AnalysisOrchestrator(extractor).analyze(WALMART_RECEIPT)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_failed_receipt_does_not_fall_back_to_barcode(self):
        extractor, _ = _llm_extractor("[]")
        text = "TOTAL $5.08\nTAX $0.38\n041196910756"
        result = await AnalysisOrchestrator(extractor).analyze(text)
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_receipt_precedence_over_barcode(self):
        text = "STORE 7\nMILK $3.99\nEGGS $2.49\nTOTAL $6.48\n041196910756"
        result = await AnalysisOrchestrator(LocalLineItemExtractor()).analyze(text)
        assert isinstance(result, ReceiptResult)

    @pytest.mark.asyncio
    async def test_nothing_detected(self):
        result = await AnalysisOrchestrator(LocalLineItemExtractor()).analyze("hello")
        assert isinstance(result, NoneResult)
        assert "better lighting" in result.message
        assert result.to_dict() == {"type": "none", "message": NO_DETECTION_MESSAGE}

    @pytest.mark.asyncio
    async def test_uses_injected_classifier(self):
        classifier = MagicMock()
        classifier.detect.return_value = (DocumentType.BARCODE, BarcodeCandidate("12345 67890", 0.9))
        extractor = AsyncMock()
        orchestrator = AnalysisOrchestrator(extractor, classifier=classifier)

        result = await orchestrator.analyze("anything")

        classifier.detect.assert_called_once_with("anything")
        extractor.extract.assert_not_awaited()
        assert result.barcode == "12345 67890"

    @pytest.mark.asyncio
    async def test_barcode_extracted_once(self):
        barcodes = MagicMock(wraps=BarcodeExtractor())
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), barcodes=barcodes)

        result = await orchestrator.analyze("041196910756")

        assert isinstance(result, BarcodeResult)
        barcodes.extract.assert_called_once_with("041196910756")


class TestProductLookup:
    @pytest.mark.asyncio
    async def test_resolved_product(self):
        products = MagicMock()
        products.find_product_by_code.return_value = {"name": "Bananas", "upc_code": "041196910756"}
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), products=products)

        result = await orchestrator.analyze("041196910756")

        products.find_product_by_code.assert_called_once_with("041196910756")
        assert result.product["name"] == "Bananas"
        assert result.note is None
        assert result.to_dict()["product"]["name"] == "Bananas"

    @pytest.mark.asyncio
    async def test_lookup_uses_stripped_code(self):
        products = MagicMock()
        products.find_product_by_code.return_value = None
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), products=products)

        result = await orchestrator.analyze("87436 12389")

        products.find_product_by_code.assert_called_once_with("8743612389")
        assert result.barcode == "87436 12389"

    @pytest.mark.asyncio
    async def test_lookup_miss_is_annotated(self):
        products = MagicMock()
        products.find_product_by_code.return_value = None
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), products=products)

        result = await orchestrator.analyze("041196910756")

        assert isinstance(result, BarcodeResult)
        assert result.product is None
        assert result.note == PRODUCT_NOT_FOUND_NOTE
        assert result.to_dict()["note"] == PRODUCT_NOT_FOUND_NOTE

    @pytest.mark.asyncio
    async def test_lookup_error_is_annotated(self):
        products = MagicMock()
        products.find_product_by_code.side_effect = RuntimeError("database is locked")
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), products=products)

        result = await orchestrator.analyze("041196910756")

        assert isinstance(result, BarcodeResult)
        assert result.note == PRODUCT_NOT_FOUND_NOTE


class TestAnalyzeDocument:
    @pytest.mark.asyncio
    async def test_runs_ocr_then_analysis(self):
        ocr = AsyncMock()
        ocr.detect_text.return_value = "041196910756"
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), ocr=ocr)

        result = await orchestrator.analyze_document(b"\xff\xd8fake-jpeg")

        ocr.detect_text.assert_awaited_once_with(b"\xff\xd8fake-jpeg")
        assert isinstance(result, BarcodeResult)

    @pytest.mark.asyncio
    async def test_empty_image_rejected_before_ocr(self):
        ocr = AsyncMock()
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), ocr=ocr)

        with pytest.raises(AnalysisInputError):
            await orchestrator.analyze_document(b"")
        ocr.detect_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ocr_failure(self):
        ocr = AsyncMock()
        ocr.detect_text.side_effect = ConnectionError("unreachable")
        extractor = AsyncMock()
        orchestrator = AnalysisOrchestrator(extractor, ocr=ocr)

        with pytest.raises(UpstreamOCRError, match="unreachable"):
            await orchestrator.analyze_document(b"image")
        extractor.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_text_detected(self):
        ocr = AsyncMock()
        ocr.detect_text.return_value = ""
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor(), ocr=ocr)

        result = await orchestrator.analyze_document(b"image")
        assert isinstance(result, NoneResult)

    @pytest.mark.asyncio
    async def test_without_ocr_backend(self):
        orchestrator = AnalysisOrchestrator(LocalLineItemExtractor())
        with pytest.raises(UpstreamOCRError):
            await orchestrator.analyze_document(b"image")
