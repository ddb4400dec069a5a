"""Starlette app exposing image analysis and the inventory API."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .analysis import create_analysis_backend
from .db import InventoryDB, ProductDB
from .errors import AnalysisInputError, UpstreamOCRError

if TYPE_CHECKING:
    from .analysis import AnalysisBackend
    from .config import PantryConfig

logger = logging.getLogger(__name__)


def decode_image_data(image_data: str | None) -> bytes:
    """Decode a base64 payload, with or without a ``data:...;base64,`` prefix."""
    if not image_data:
        raise AnalysisInputError("No image data provided")
    payload = image_data.split(",", 1)[1] if image_data.startswith("data:") else image_data
    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AnalysisInputError("Image data is not valid base64") from exc
    if not decoded:
        raise AnalysisInputError("No image data provided")
    return decoded


def _parse_int(value: str | None, *, default: int, minimum: int, maximum: int) -> int:
    try:
        parsed = int(value) if value is not None else default
    except (TypeError, ValueError):
        parsed = default
    return max(minimum, min(parsed, maximum))


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be JSON") from exc
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def create_app(
    config: PantryConfig,
    *,
    backend: AnalysisBackend | None = None,
    db_path: str | None = None,
) -> Starlette:
    """Create the Starlette app.

    The analysis backend is selected once here unless one is injected.
    """
    path = db_path or config.database.path
    products = ProductDB(path)
    inventory = InventoryDB(path)
    if backend is None:
        backend = create_analysis_backend(config, products=products)
    logger.info("Using %s analysis backend", backend.name)

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "analysis_backend": backend.name})

    async def analyze_image(request: Request) -> JSONResponse:
        body = await _json_body(request)
        try:
            image_bytes = decode_image_data(body.get("imageData"))
            result = await backend.analyze_document(image_bytes)
        except AnalysisInputError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except UpstreamOCRError as exc:
            logger.error("Vision API error: %s", exc)
            return JSONResponse(
                {
                    "error": "Google Vision API error",
                    "type": "none",
                    "message": "Vision API error. Please try again or check your setup.",
                },
                status_code=500,
            )
        logger.info("Identified image as %s", result.type)
        return JSONResponse(result.to_dict())

    async def upc_lookup(request: Request) -> JSONResponse:
        product = products.find_product_by_code(request.path_params["code"])
        if product is None:
            raise HTTPException(status_code=404, detail="UPC code not found")
        return JSONResponse(product)

    async def list_items(_: Request) -> JSONResponse:
        return JSONResponse(inventory.list_items())

    async def add_item(request: Request) -> JSONResponse:
        body = await _json_body(request)
        try:
            item_id = inventory.add_item(
                body.get("name", ""),
                body.get("category") or "Other",
                body.get("expirationDate", ""),
                description=body.get("description"),
                upc_code=body.get("upcCode"),
                quantity=body.get("quantity", 1),
                unit=body.get("unit", "item"),
                price=body.get("price"),
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse({"id": item_id, "message": "Item added successfully"})

    async def update_quantity(request: Request) -> JSONResponse:
        item_id = request.path_params["item_id"]
        body = await _json_body(request)
        quantity = body.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            raise HTTPException(status_code=400, detail="quantity must be a number")
        if inventory.update_quantity(item_id, quantity):
            return JSONResponse({"message": "Item deleted (quantity reached 0)"})
        return JSONResponse({"message": "Quantity updated successfully"})

    async def delete_item(request: Request) -> JSONResponse:
        if not inventory.delete_item(request.path_params["item_id"]):
            raise HTTPException(status_code=404, detail="Item not found")
        return JSONResponse({"message": "Item deleted successfully"})

    async def categories(_: Request) -> JSONResponse:
        return JSONResponse(inventory.category_counts())

    async def expiring(request: Request) -> JSONResponse:
        days = _parse_int(request.query_params.get("days"), default=7, minimum=0, maximum=365)
        items = inventory.get_expiring(days=days)
        return JSONResponse({"count": len(items), "items": items})

    async def food_expiration(request: Request) -> JSONResponse:
        return JSONResponse(products.lookup_shelf_life(request.path_params["name"]))

    routes = [
        Route("/api/health", health, methods=["GET"]),
        Route("/api/analyze-image", analyze_image, methods=["POST"]),
        Route("/api/upc/{code:str}", upc_lookup, methods=["GET"]),
        Route("/api/items", list_items, methods=["GET"]),
        Route("/api/items", add_item, methods=["POST"]),
        Route("/api/items/{item_id:int}", delete_item, methods=["DELETE"]),
        Route("/api/items/{item_id:int}/quantity", update_quantity, methods=["PATCH"]),
        Route("/api/categories", categories, methods=["GET"]),
        Route("/api/expiring", expiring, methods=["GET"]),
        Route("/api/food-expiration/{name:str}", food_expiration, methods=["GET"]),
    ]

    app = Starlette(debug=False, routes=routes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.backend = backend
    app.state.inventory = inventory
    app.state.products = products
    return app
