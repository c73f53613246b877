"""
Bulk Import Engine - command line entry point.

Usage:
    python main.py preview products export.csv
    python main.py preview orders orders.xlsx
    python main.py receive receipt.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import structlog

from config import settings
from exceptions import AppError
from models.stock_receipt import StockReceiptRequest
from services.import_service import IMPORT_TYPES, get_import_service
from services.stock_receipt_service import get_stock_receipt_service


def configure_logging() -> None:
    """Configure structured logging (JSON in production, console otherwise)."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if settings.is_production
                else structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


def _preview(args: argparse.Namespace) -> dict:
    path = Path(args.file)
    preview = get_import_service().preview(
        args.import_type,
        path.read_bytes(),
        path.name,
        cache=False,
    )
    return preview.to_dict()


def _receive(args: argparse.Namespace) -> dict:
    """Aggregate a receipt request without writing anything."""
    payload = json.loads(Path(args.file).read_text(encoding="utf-8"))
    request = StockReceiptRequest.model_validate(payload)
    aggregate = get_stock_receipt_service().plan(request)
    return {
        "totalUnits": aggregate.total_quantity,
        "totalValue": str(aggregate.total_cost),
        "entries": [
            {"productId": t.product_id, "units": t.quantity, "value": str(t.cost)}
            for t in aggregate.entry_totals
        ],
        "instructions": [
            instruction.model_dump(mode="json") for instruction in aggregate.instructions
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preview bulk imports and stock receipts")
    commands = parser.add_subparsers(dest="command", required=True)

    preview = commands.add_parser("preview", help="Reconcile an export and print the preview")
    preview.add_argument("import_type", choices=IMPORT_TYPES)
    preview.add_argument("file", help="CSV, XLSX or XLS export")
    preview.set_defaults(handler=_preview)

    receive = commands.add_parser("receive", help="Aggregate a stock receipt request (JSON)")
    receive.add_argument("file", help="JSON file with supplier_id, invoice and entries")
    receive.set_defaults(handler=_receive)

    return parser


def main(argv=None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        output = args.handler(args)
    except AppError as e:
        logger.error("command_failed", code=e.code, error=e.message)
        print(json.dumps(e.to_dict(), indent=2))
        return 1

    print(json.dumps(output, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
