"""
Business logic services.

Each service handles one stage or workflow of the import engine.
"""

from services.reconciler import (
    ReconcileResult,
    CatalogReconciler,
    OrderReconciler,
    reconcile_catalog,
    reconcile_orders,
)
from services.import_validator import validate_catalog, validate_orders
from services.import_summary import summarize
from services.import_service import ImportService, get_import_service
from services.stock_receipt_service import (
    StockReceiptService,
    get_stock_receipt_service,
    aggregate_receipt,
)
from services.writers import CatalogWriter, OrderWriter, StockWriter

__all__ = [
    "ReconcileResult",
    "CatalogReconciler",
    "OrderReconciler",
    "reconcile_catalog",
    "reconcile_orders",
    "validate_catalog",
    "validate_orders",
    "summarize",
    "ImportService",
    "get_import_service",
    "StockReceiptService",
    "get_stock_receipt_service",
    "aggregate_receipt",
    "CatalogWriter",
    "OrderWriter",
    "StockWriter",
]
