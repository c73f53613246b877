"""
In-memory persistence collaborators and file builders for tests.

Writers record every call and can be told to fail for specific keys.
"""

import csv
from io import BytesIO, StringIO
from typing import Optional

import pandas as pd

from models.catalog import CatalogItem
from models.order import CommerceOrder
from models.stock_receipt import StockMovementInstruction


# ===================
# IN-MEMORY WRITERS
# ===================

class InMemoryCatalogWriter:
    """Catalog writer that stores created items in a list."""

    def __init__(self, existing_skus: Optional[set] = None, fail_handles: Optional[set] = None):
        self._existing_skus = set(existing_skus or [])
        self._fail_handles = set(fail_handles or [])
        self.created: list[CatalogItem] = []

    def existing_skus(self) -> set[str]:
        return set(self._existing_skus)

    def create_catalog_item(self, item: CatalogItem) -> None:
        if item.handle in self._fail_handles:
            raise RuntimeError(f"insert failed for {item.handle}")
        self.created.append(item)


class InMemoryOrderWriter:
    """Order writer that stores created orders in a list."""

    def __init__(self, existing_orders: Optional[set] = None, fail_orders: Optional[set] = None):
        self._existing = set(existing_orders or [])
        self._fail_orders = set(fail_orders or [])
        self.created: list[CommerceOrder] = []

    def order_exists(self, order_number: str) -> bool:
        return order_number in self._existing

    def create_order(self, order: CommerceOrder) -> None:
        if order.order_number in self._fail_orders:
            raise RuntimeError(f"insert failed for {order.order_number}")
        self.created.append(order)
        self._existing.add(order.order_number)


class InMemoryStockWriter:
    """Stock writer keeping per-variant stock and ignoring re-issued instructions."""

    def __init__(self, fail_variants: Optional[set] = None):
        self._fail_variants = set(fail_variants or [])
        self.stock: dict[str, int] = {}
        self.applied: list[StockMovementInstruction] = []
        self._seen_keys: set[str] = set()

    def apply_movement(self, instruction: StockMovementInstruction) -> None:
        if instruction.variant_id in self._fail_variants:
            raise RuntimeError(f"variant {instruction.variant_id} not found")
        if instruction.dedupe_key in self._seen_keys:
            return
        self._seen_keys.add(instruction.dedupe_key)
        self.stock[instruction.variant_id] = (
            self.stock.get(instruction.variant_id, 0) + instruction.quantity
        )
        self.applied.append(instruction)


# ===================
# FILE BUILDERS
# ===================

def rows_to_csv_bytes(rows: list[dict], columns: Optional[list[str]] = None) -> bytes:
    """Build CSV bytes with a header row from dict rows."""
    if columns is None:
        columns = []
        for row in rows:
            for col in row:
                if col not in columns:
                    columns.append(col)

    output = StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({col: row.get(col, "") for col in columns})
    return output.getvalue().encode("utf-8")


def rows_to_xlsx_bytes(rows: list[dict], sheet_name: str = "Sheet1", extra_sheet: bool = False) -> bytes:
    """Build an in-memory .xlsx workbook from dict rows."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
        if extra_sheet:
            pd.DataFrame([{"Handle": "second-sheet", "Title": "Ignored"}]).to_excel(
                writer, sheet_name="Other", index=False
            )
    return output.getvalue()

