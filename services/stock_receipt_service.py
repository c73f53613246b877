"""
Stock Receipt Service - batch receiving against a supplier invoice.

aggregate_receipt() is a pure transform: receipt entries → one inward
StockMovementInstruction per variant with a positive quantity, plus
grand totals. StockReceiptService.receive() hands each instruction to a
StockWriter and reports a per-instruction outcome; there is no
transaction across the batch.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

import structlog

from exceptions import ReceiptValidationError
from models.stock_receipt import (
    InstructionOutcome,
    MovementType,
    EntryTotal,
    ReceiptAggregate,
    ReceiptEntry,
    StockMovementInstruction,
    StockReceiptRequest,
    StockReceiptResult,
)
from services.writers import StockWriter

logger = structlog.get_logger(__name__)


def receipt_reason(invoice_number: Optional[str]) -> str:
    """Movement reason recorded with every received line."""
    return f"Stock received via invoice {invoice_number or 'N/A'}"


def aggregate_receipt(
    entries: Sequence[ReceiptEntry],
    supplier_id: Optional[str] = None,
    invoice_number: Optional[str] = None,
    invoice_date: Optional[date] = None,
) -> ReceiptAggregate:
    """
    Expand receipt entries into stock movement instructions.

    Zero quantities produce nothing and add nothing to the totals.

    Args:
        entries: Receipt entries (product, per-variant quantities, unit cost)
        supplier_id: Supplier the stock came from
        invoice_number: Supplier invoice reference
        invoice_date: Supplier invoice date

    Returns:
        ReceiptAggregate with instructions, one subtotal per entry, and
        the grand total quantity and cost
    """
    aggregate = ReceiptAggregate()
    reason = receipt_reason(invoice_number)

    for entry in entries:
        subtotal = EntryTotal(product_id=entry.product_id)

        for variant_id, quantity in entry.variant_quantities.items():
            if quantity <= 0:
                continue

            instruction = StockMovementInstruction(
                variant_id=variant_id,
                product_id=entry.product_id,
                type=MovementType.INWARD,
                quantity=quantity,
                unit_cost=entry.unit_cost,
                supplier_id=supplier_id,
                invoice_number=invoice_number,
                invoice_date=invoice_date,
                reason=reason,
            )
            aggregate.instructions.append(instruction)
            subtotal.quantity += quantity
            subtotal.cost += instruction.line_value

        aggregate.entry_totals.append(subtotal)
        aggregate.total_quantity += subtotal.quantity
        aggregate.total_cost += subtotal.cost

    return aggregate


class StockReceiptService:
    """
    Stock receiving business logic.

    Core methods:
    - plan: Validate a request and aggregate it without writing
    - receive: Apply every instruction through a StockWriter
    """

    def plan(self, request: StockReceiptRequest) -> ReceiptAggregate:
        """
        Aggregate a receipt request.

        Raises:
            ReceiptValidationError: No variant has a positive quantity
        """
        aggregate = aggregate_receipt(
            request.entries,
            supplier_id=request.supplier_id,
            invoice_number=request.invoice_number,
            invoice_date=request.invoice_date,
        )

        if not aggregate.instructions:
            raise ReceiptValidationError(
                message="Enter a quantity for at least one variant",
                field="entries",
            )

        return aggregate

    def receive(self, request: StockReceiptRequest, writer: StockWriter) -> StockReceiptResult:
        """
        Receive stock for a supplier invoice.

        Each instruction is applied with its own writer call. A failing
        instruction is recorded and the rest of the batch continues.

        Args:
            request: Validated receipt request
            writer: Persistence collaborator for stock movements

        Returns:
            StockReceiptResult with totals of applied instructions and
            one outcome per instruction

        Raises:
            ReceiptValidationError: No variant has a positive quantity
        """
        aggregate = self.plan(request)

        logger.info(
            "receiving_stock",
            supplier_id=request.supplier_id,
            invoice_number=request.invoice_number,
            instructions=len(aggregate.instructions),
            planned_units=aggregate.total_quantity,
            planned_value=float(aggregate.total_cost),
        )

        result = StockReceiptResult()

        for instruction in aggregate.instructions:
            try:
                writer.apply_movement(instruction)
            except Exception as e:
                logger.warning(
                    "stock_movement_failed",
                    variant_id=instruction.variant_id,
                    quantity=instruction.quantity,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.outcomes.append(InstructionOutcome(
                    variant_id=instruction.variant_id,
                    quantity=instruction.quantity,
                    success=False,
                    error=str(e),
                ))
                continue

            result.outcomes.append(InstructionOutcome(
                variant_id=instruction.variant_id,
                quantity=instruction.quantity,
                success=True,
            ))
            result.total_units += instruction.quantity
            result.total_value += instruction.line_value

        logger.info(
            "stock_received",
            supplier_id=request.supplier_id,
            invoice_number=request.invoice_number,
            total_units=result.total_units,
            total_value=float(result.total_value),
            succeeded=result.succeeded,
            failed=result.failed,
        )
        return result


# Singleton instance
_stock_receipt_service: Optional[StockReceiptService] = None


def get_stock_receipt_service() -> StockReceiptService:
    """Get or create StockReceiptService instance."""
    global _stock_receipt_service
    if _stock_receipt_service is None:
        _stock_receipt_service = StockReceiptService()
    return _stock_receipt_service
