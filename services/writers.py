"""
Persistence collaborator protocols.

The engine never talks to storage itself. Commit operations call one of
these writers once per entity or instruction; any exception a writer
raises is recorded as a failure for that single item.
"""

from typing import Protocol, runtime_checkable

from models.catalog import CatalogItem
from models.order import CommerceOrder
from models.stock_receipt import StockMovementInstruction


@runtime_checkable
class CatalogWriter(Protocol):
    """Creates products with their variants."""

    def existing_skus(self) -> set[str]: ...

    def create_catalog_item(self, item: CatalogItem) -> None: ...


@runtime_checkable
class OrderWriter(Protocol):
    """Creates orders with their line items."""

    def order_exists(self, order_number: str) -> bool: ...

    def create_order(self, order: CommerceOrder) -> None: ...


@runtime_checkable
class StockWriter(Protocol):
    """
    Applies one stock movement: adjusts the variant's recorded stock and
    writes the movement row.

    Implementations should use instruction.dedupe_key to ignore re-issued
    instructions.
    """

    def apply_movement(self, instruction: StockMovementInstruction) -> None: ...
