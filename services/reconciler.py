"""
Hierarchical reconciler.

Folds flat export rows into parent + children aggregates:
- product rows grouped by Handle → CatalogItem with ProductVariants
- order rows grouped by Name → CommerceOrder with LineItems

Algorithm (single pass over the rows, explicit index):
1. Read the natural key. Empty key → diagnostic, row skipped.
2. New key → build the parent from this row (catalog rows must carry a
   Title, otherwise diagnostic and the row is skipped).
3. Known key → parent scalars are left alone (first row wins).
4. Row carries a child discriminator → append one child.

Parents come out in first-seen order; children keep row order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

import structlog

from config import settings
from models.catalog import CatalogItem, ProductVariant
from models.import_preview import Diagnostic
from models.order import CommerceOrder, LineItem
from parsers.column_normalizer import LineItemRow, VariantRow
from utils.text_utils import first_present, or_none, parse_decimal, parse_int

logger = structlog.get_logger(__name__)

# Data rows start on file row 2 (row 1 is the header)
HEADER_ROW_OFFSET = 2

RowT = TypeVar("RowT", VariantRow, LineItemRow)
ParentT = TypeVar("ParentT", CatalogItem, CommerceOrder)


@dataclass
class ReconcileResult(Generic[ParentT]):
    """Reconciled parents plus row-level diagnostics."""
    parents: list[ParentT] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    total_rows: int = 0
    children_found: int = 0
    # Next value for generated line item SKUs, for callers that continue numbering
    next_sku_counter: int = 0


class _HierarchyReconciler(ABC, Generic[RowT, ParentT]):
    """Shared grouping loop; subclasses describe one row kind."""

    key_label: str = ""

    @abstractmethod
    def key_of(self, row: RowT) -> str:
        """Natural key of the parent this row belongs to."""

    def missing_scalar(self, row: RowT, key: str) -> Optional[str]:
        """Return a message when the row cannot introduce a new parent."""
        return None

    @abstractmethod
    def build_parent(self, row: RowT, key: str) -> ParentT:
        """Parent built from the first row carrying its key."""

    @abstractmethod
    def build_child(self, row: RowT, child_counter: int):
        """Return a child for this row, or None when the row has none."""

    def attach(self, parent: ParentT, child) -> None:
        parent.children.append(child)

    def reconcile(self, rows: list[RowT], child_counter_start: int = 0) -> ReconcileResult[ParentT]:
        result: ReconcileResult[ParentT] = ReconcileResult(total_rows=len(rows))
        parents: dict[str, ParentT] = {}
        child_counter = child_counter_start

        for i in range(len(rows)):
            row = rows[i]
            row_num = i + HEADER_ROW_OFFSET

            key = self.key_of(row).strip()
            if not key:
                result.diagnostics.append(Diagnostic(
                    message=f"Row {row_num}: Missing {self.key_label}",
                    row=row_num,
                ))
                continue

            parent = parents.get(key)
            if parent is None:
                problem = self.missing_scalar(row, key)
                if problem:
                    result.diagnostics.append(Diagnostic(
                        message=f"Row {row_num}: {problem}",
                        row=row_num,
                    ))
                    continue
                parent = self.build_parent(row, key)
                parents[key] = parent

            child = self.build_child(row, child_counter)
            if child is not None:
                self.attach(parent, child)
                child_counter += 1

        result.parents = list(parents.values())
        result.children_found = child_counter - child_counter_start
        result.next_sku_counter = child_counter

        logger.info(
            "reconcile_complete",
            kind=type(self).__name__,
            total_rows=result.total_rows,
            parents=len(result.parents),
            children=result.children_found,
            diagnostics=len(result.diagnostics),
        )
        return result


class CatalogReconciler(_HierarchyReconciler[VariantRow, CatalogItem]):
    """Groups product export rows by Handle."""

    key_label = "Handle"

    def key_of(self, row: VariantRow) -> str:
        return row.handle

    def missing_scalar(self, row: VariantRow, key: str) -> Optional[str]:
        if not row.title.strip():
            return f'Missing Title for new product "{key}"'
        return None

    def build_parent(self, row: VariantRow, key: str) -> CatalogItem:
        return CatalogItem(
            handle=key,
            name=row.title.strip(),
            description=or_none(row.body),
            category=or_none(row.product_type),
            vendor=or_none(row.vendor),
        )

    def build_child(self, row: VariantRow, child_counter: int) -> Optional[ProductVariant]:
        sku = row.sku.strip()
        if not sku:
            return None

        return ProductVariant(
            sku=sku,
            color=or_none(row.color),
            size=or_none(row.size),
            cost_price=parse_decimal(row.cost),
            selling_price=parse_decimal(row.price),
            compare_at_price=parse_decimal(row.compare_at_price, default=None),
            stock_quantity=parse_int(row.inventory_qty),
        )


class OrderReconciler(_HierarchyReconciler[LineItemRow, CommerceOrder]):
    """Groups order export rows by order Name."""

    key_label = "Order Name"

    def __init__(self, sku_prefix: Optional[str] = None):
        self.sku_prefix = sku_prefix or settings.synthetic_sku_prefix

    def key_of(self, row: LineItemRow) -> str:
        return row.order_name

    def build_parent(self, row: LineItemRow, key: str) -> CommerceOrder:
        address_parts = [
            part for part in (row.shipping_address1, row.shipping_address2, row.shipping_street)
            if part
        ]
        shipping_address = ", ".join(address_parts) or row.shipping_name or "N/A"

        return CommerceOrder(
            order_number=key,
            customer_name=first_present(row.shipping_name, row.billing_name) or "Unknown",
            customer_email=or_none(row.email),
            customer_phone=first_present(row.shipping_phone, row.billing_phone),
            shipping_address=shipping_address,
            shipping_city=or_none(row.shipping_city),
            shipping_state=or_none(row.shipping_province),
            # Spreadsheet exports prefix zips with ' to keep leading zeros
            shipping_zip=or_none(row.shipping_zip.replace("'", "")),
            shipping_country=or_none(row.shipping_country),
            subtotal=parse_decimal(row.subtotal),
            shipping_cost=parse_decimal(row.shipping),
            discount=parse_decimal(row.discount_amount),
            taxes=parse_decimal(row.taxes),
            total_amount=parse_decimal(row.total),
            payment_method=row.payment_method,
            payment_status=row.payment_status,
            status=row.status,
            notes=or_none(row.notes),
            created_at=or_none(row.created_at),
        )

    def build_child(self, row: LineItemRow, child_counter: int) -> Optional[LineItem]:
        name = row.lineitem_name.strip()
        quantity = parse_int(row.lineitem_quantity)
        if not name or quantity <= 0:
            return None

        return LineItem(
            sku=row.lineitem_sku.strip() or f"{self.sku_prefix}-{child_counter}",
            product_name=name,
            quantity=quantity,
            price=parse_decimal(row.lineitem_price),
            compare_at_price=parse_decimal(row.lineitem_compare_at_price, default=None),
        )


def reconcile_catalog(rows: list[VariantRow]) -> ReconcileResult[CatalogItem]:
    """Group normalized product rows into catalog items."""
    return CatalogReconciler().reconcile(rows)


def reconcile_orders(
    rows: list[LineItemRow],
    sku_counter_start: int = 0,
    sku_prefix: Optional[str] = None,
) -> ReconcileResult[CommerceOrder]:
    """
    Group normalized order rows into orders.

    Args:
        rows: Normalized order rows in file order
        sku_counter_start: First number used for generated line item SKUs
        sku_prefix: Prefix for generated SKUs (defaults to settings)
    """
    return OrderReconciler(sku_prefix).reconcile(rows, child_counter_start=sku_counter_start)
