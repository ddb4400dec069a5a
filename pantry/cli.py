"""CLI entry point for the pantry tracker."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .analysis import (
    AnalysisOrchestrator,
    ReceiptResult,
    create_analysis_backend,
    create_line_item_extractor,
)
from .config import load_config
from .db import InventoryDB, ProductDB
from .errors import AnalysisInputError, UpstreamOCRError


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pantry",
        description="Pantry tracker: scan barcodes and receipts into a food inventory",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # analyze
    analyze_parser = sub.add_parser("analyze", help="Analyze a barcode or receipt")
    source = analyze_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", type=str, help="Image file to run OCR on")
    source.add_argument("--text", type=str, help="OCR text to analyze directly")
    source.add_argument("--text-file", type=str, help="File containing OCR text")
    analyze_parser.add_argument("--json", action="store_true", help="Print JSON output")
    analyze_parser.add_argument(
        "--save", action="store_true", help="Add receipt items to the inventory"
    )

    # lookup
    lookup_parser = sub.add_parser("lookup", help="Look up a product by barcode")
    lookup_parser.add_argument("code", type=str)

    # items
    items_parser = sub.add_parser("items", help="List inventory items")
    items_parser.add_argument("--json", action="store_true", help="Print JSON output")

    # expiring
    expiring_parser = sub.add_parser("expiring", help="List items expiring soon")
    expiring_parser.add_argument("--days", type=int, default=7)

    # serve
    serve_parser = sub.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    load_dotenv()
    config = load_config(args.config)

    match args.command:
        case "analyze":
            asyncio.run(_cmd_analyze(config, args))
        case "lookup":
            _cmd_lookup(config, args)
        case "items":
            _cmd_items(config, args)
        case "expiring":
            _cmd_expiring(config, args)
        case "serve":
            _cmd_serve(config, args)


async def _cmd_analyze(config, args) -> None:
    products = ProductDB(config.database.path)

    try:
        if args.image:
            backend = create_analysis_backend(config, products=products)
            image_bytes = Path(args.image).read_bytes()
            result = await backend.analyze_document(image_bytes)
        else:
            text = args.text
            if args.text_file:
                text = Path(args.text_file).read_text(encoding="utf-8")
            orchestrator = AnalysisOrchestrator(
                create_line_item_extractor(config), products=products
            )
            result = await orchestrator.analyze(text)
    except (AnalysisInputError, UpstreamOCRError) as e:
        print(f"Analysis error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_result(result)

    if args.save and isinstance(result, ReceiptResult):
        inventory = InventoryDB(config.database.path)
        ids = inventory.add_line_items(result.items)
        inventory.close()
        print(f"Saved {len(ids)} items to the inventory")

    products.close()


def _print_result(result) -> None:
    match result.type:
        case "barcode":
            print(f"Barcode: {result.barcode} ({result.confidence:.0%})")
            if result.product:
                p = result.product
                print(f"  {p['name']} [{p['category']}] {p.get('size') or ''}".rstrip())
            elif result.note:
                print(f"  {result.note}")
        case "receipt":
            print(f"Receipt: {len(result.items)} items ({result.confidence:.0%})")
            for item in result.items:
                price = f"${item.price:.2f}" if isinstance(item.price, (int, float)) else "-"
                print(
                    f"  {item.name:<24} {item.quantity:g} {item.unit:<5} "
                    f"{price:>8}  [{item.category}]"
                )
        case _:
            print(result.message)


def _cmd_lookup(config, args) -> None:
    products = ProductDB(config.database.path)
    product = products.find_product_by_code(args.code)
    products.close()
    if product is None:
        print("UPC code not found", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(product, ensure_ascii=False, indent=2))


def _cmd_items(config, args) -> None:
    inventory = InventoryDB(config.database.path)
    items = inventory.list_items()
    inventory.close()

    if args.json:
        print(json.dumps(items, ensure_ascii=False, indent=2))
        return
    if not items:
        print("The inventory is empty.")
        return
    for item in items:
        print(
            f"  #{item['id']:<4} {item['name']:<24} {item['quantity']:g} {item['unit']:<5} "
            f"[{item['category']}] {item['days_left']} days left"
        )


def _cmd_expiring(config, args) -> None:
    inventory = InventoryDB(config.database.path)
    items = inventory.get_expiring(days=args.days)
    inventory.close()

    if not items:
        print(f"Nothing expires within {args.days} days.")
        return
    print(f"Expiring within {args.days} days: {len(items)} items")
    for item in items:
        print(f"  {item['name']:<24} [{item['category']}] {item['days_left']} days left")


def _cmd_serve(config, args) -> None:
    try:
        import uvicorn
    except ImportError:
        raise ImportError("uvicorn is required: pip install uvicorn") from None

    from .server import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
    )
