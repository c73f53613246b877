"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, ImportedSchema
from models.catalog import CatalogItem, ProductVariant
from models.order import (
    PaymentMethod,
    PaymentStatus,
    OrderStatus,
    INITIAL_ORDER_STATUS,
    LineItem,
    CommerceOrder,
)
from models.import_preview import (
    Diagnostic,
    ImportSummary,
    ImportPreview,
    CommitFailure,
    CommitResult,
)
from models.stock_receipt import (
    MovementType,
    ReceiptEntry,
    StockReceiptRequest,
    StockMovementInstruction,
    EntryTotal,
    ReceiptAggregate,
    InstructionOutcome,
    StockReceiptResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "ImportedSchema",

    # Catalog
    "CatalogItem",
    "ProductVariant",

    # Orders
    "PaymentMethod",
    "PaymentStatus",
    "OrderStatus",
    "INITIAL_ORDER_STATUS",
    "LineItem",
    "CommerceOrder",

    # Import preview
    "Diagnostic",
    "ImportSummary",
    "ImportPreview",
    "CommitFailure",
    "CommitResult",

    # Stock receipt
    "MovementType",
    "ReceiptEntry",
    "StockReceiptRequest",
    "StockMovementInstruction",
    "EntryTotal",
    "ReceiptAggregate",
    "InstructionOutcome",
    "StockReceiptResult",
]
