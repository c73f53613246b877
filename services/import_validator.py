"""
Import validator.

Scans reconciled catalog items or orders for structural defects and
returns diagnostics. Read-only: never mutates its input, never raises.
The caller decides whether to commit anyway.
"""

from typing import Iterable

import structlog

from models.catalog import CatalogItem
from models.import_preview import Diagnostic
from models.order import CommerceOrder

logger = structlog.get_logger(__name__)


def validate_catalog(items: Iterable[CatalogItem]) -> list[Diagnostic]:
    """
    Validate reconciled catalog items.

    Checks, per item in order:
    - repeated handle (first occurrence not flagged)
    - missing name
    - no variants
    - variant SKU already seen on any earlier variant
    """
    diagnostics: list[Diagnostic] = []
    seen_handles: set[str] = set()
    seen_skus: set[str] = set()

    for item in items:
        if item.handle in seen_handles:
            diagnostics.append(Diagnostic(message=f"Duplicate handle: {item.handle}"))
        seen_handles.add(item.handle)

        if not item.name:
            diagnostics.append(Diagnostic(message=f'Product "{item.handle}": Missing name'))

        if len(item.variants) == 0:
            diagnostics.append(Diagnostic(
                message=f'Product "{item.name or item.handle}": No variants with SKU found'
            ))

        for variant in item.variants:
            if variant.sku in seen_skus:
                diagnostics.append(Diagnostic(message=f"Duplicate SKU: {variant.sku}"))
            seen_skus.add(variant.sku)

    logger.debug("catalog_validated", diagnostics=len(diagnostics))
    return diagnostics


def validate_orders(orders: Iterable[CommerceOrder]) -> list[Diagnostic]:
    """
    Validate reconciled orders.

    Checks, per order in order:
    - repeated order number (first occurrence not flagged)
    - missing customer name
    - no line items
    """
    diagnostics: list[Diagnostic] = []
    seen_numbers: set[str] = set()

    for order in orders:
        if order.order_number in seen_numbers:
            diagnostics.append(Diagnostic(
                message=f"Duplicate order number: {order.order_number}"
            ))
        seen_numbers.add(order.order_number)

        if not order.customer_name:
            diagnostics.append(Diagnostic(
                message=f'Order "{order.order_number}": Missing customer name'
            ))

        if len(order.line_items) == 0:
            diagnostics.append(Diagnostic(
                message=f'Order "{order.order_number}": No line items found'
            ))

    logger.debug("orders_validated", diagnostics=len(diagnostics))
    return diagnostics
