"""
Stock receipt schemas.

A receipt request groups the quantities received per variant for several
products on one supplier invoice. It is translated into one inward
StockMovementInstruction per variant with a positive quantity.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from models.base import BaseSchema
from utils.text_utils import parse_decimal, parse_int


class MovementType(str, Enum):
    """Direction of a stock movement."""
    INWARD = "inward"
    OUTWARD = "outward"
    ADJUSTMENT = "adjustment"


class ReceiptEntry(BaseSchema):
    """
    Quantities received for one product.

    unit_cost accepts the raw form value; a missing or unparseable cost
    becomes 0 instead of rejecting the request.
    """

    product_id: str = Field(..., min_length=1, description="Product UUID")
    variant_quantities: dict[str, int] = Field(
        default_factory=dict,
        description="Variant UUID → quantity received"
    )
    unit_cost: Decimal = Field(default=Decimal("0"), description="Cost per unit")

    @field_validator("unit_cost", mode="before")
    @classmethod
    def lenient_cost(cls, v) -> Decimal:
        """Unparseable cost defaults to 0."""
        return parse_decimal(v, default=Decimal("0"))

    @field_validator("variant_quantities", mode="before")
    @classmethod
    def coerce_quantities(cls, v) -> dict:
        """Quantities typed into the receipt grid arrive as strings."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        return {
            str(variant_id): qty if isinstance(qty, int) else parse_int(qty)
            for variant_id, qty in v.items()
        }

    @field_validator("variant_quantities")
    @classmethod
    def non_negative(cls, v: dict[str, int]) -> dict[str, int]:
        """Quantities cannot be negative."""
        for variant_id, qty in v.items():
            if qty < 0:
                raise ValueError(f"Quantity for variant {variant_id} cannot be negative")
        return v


class StockReceiptRequest(BaseSchema):
    """Receipt submitted for one supplier invoice."""

    supplier_id: str = Field(..., min_length=1, description="Supplier UUID")
    invoice_number: Optional[str] = Field(None, max_length=100)
    invoice_date: Optional[date] = None
    entries: list[ReceiptEntry] = Field(default_factory=list)


class StockMovementInstruction(BaseSchema):
    """
    One inward quantity change for a single variant.

    Owned by the caller until handed to the stock writer; the engine keeps
    no reference to it.
    """

    variant_id: str
    product_id: str
    type: MovementType = MovementType.INWARD
    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Decimal("0")
    supplier_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    reason: Optional[str] = None

    @property
    def line_value(self) -> Decimal:
        return self.quantity * self.unit_cost

    @property
    def dedupe_key(self) -> str:
        """
        Identity of this instruction for the persistence layer.

        Re-issuing the same instruction produces the same key.
        """
        invoice = self.invoice_number or "N/A"
        invoice_date = self.invoice_date.isoformat() if self.invoice_date else ""
        return f"{self.supplier_id or ''}:{invoice}:{invoice_date}:{self.variant_id}:{self.type.value}:{self.quantity}"


class EntryTotal(BaseSchema):
    """Subtotal of one receipt entry (positive quantities only)."""

    product_id: str
    quantity: int = 0
    cost: Decimal = Decimal("0")


class ReceiptAggregate(BaseSchema):
    """Instructions plus per-entry and grand totals for a receipt."""

    instructions: list[StockMovementInstruction] = Field(default_factory=list)
    entry_totals: list[EntryTotal] = Field(default_factory=list)
    total_quantity: int = 0
    total_cost: Decimal = Decimal("0")


class InstructionOutcome(BaseSchema):
    """Result of applying one instruction."""

    variant_id: str
    quantity: int
    success: bool
    error: Optional[str] = None


class StockReceiptResult(BaseSchema):
    """
    Result of a receipt commit.

    Totals count only instructions the writer applied.
    """

    total_units: int = 0
    total_value: Decimal = Decimal("0")
    outcomes: list[InstructionOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    def to_dict(self) -> dict:
        return {
            "totalUnits": self.total_units,
            "totalValue": str(self.total_value),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "outcomes": [
                {
                    "variantId": o.variant_id,
                    "quantity": o.quantity,
                    "success": o.success,
                    "error": o.error,
                }
                for o in self.outcomes
            ],
        }
