"""
Commerce order schemas rebuilt from order export rows.

One CommerceOrder per order Name, one LineItem per row with a line item
name and a positive quantity.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import ImportedSchema


class PaymentMethod(str, Enum):
    """How the customer pays."""
    COD = "cod"
    PREPAID = "prepaid"


class PaymentStatus(str, Enum):
    """Whether payment has been received."""
    PENDING = "pending"
    PAID = "paid"


class OrderStatus(str, Enum):
    """Order workflow status."""
    PENDING = "pending"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"


# Imported orders always start here, whatever the export's fulfillment says
INITIAL_ORDER_STATUS = OrderStatus.PENDING


class LineItem(ImportedSchema):
    """A product line of an order."""

    sku: str = Field(..., description="Line item SKU, or a generated NOSKU-n")
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(default=Decimal("0"))
    compare_at_price: Optional[Decimal] = None


class CommerceOrder(ImportedSchema):
    """
    Order reconciled from one or more rows sharing a Name.

    Customer, address and payment fields come from the first row with the
    order name; line items are appended in row order.
    """

    order_number: str = Field(..., description="Natural key from the Name column")
    customer_name: str = Field(default="Unknown")
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    shipping_address: str = Field(default="N/A")
    shipping_city: Optional[str] = None
    shipping_state: Optional[str] = None
    shipping_zip: Optional[str] = None
    shipping_country: Optional[str] = None

    subtotal: Decimal = Field(default=Decimal("0"))
    shipping_cost: Decimal = Field(default=Decimal("0"))
    discount: Decimal = Field(default=Decimal("0"))
    taxes: Decimal = Field(default=Decimal("0"))
    total_amount: Decimal = Field(default=Decimal("0"))

    payment_method: PaymentMethod = PaymentMethod.PREPAID
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = INITIAL_ORDER_STATUS

    notes: Optional[str] = None
    created_at: Optional[str] = Field(None, description="Created at, verbatim from the export")
    line_items: list[LineItem] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return self.order_number

    @property
    def name(self) -> str:
        return self.customer_name

    @property
    def children(self) -> list[LineItem]:
        return self.line_items

    def to_dict(self) -> dict:
        """Convert to preview payload format."""
        return {
            "orderNumber": self.order_number,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "shippingAddress": self.shipping_address,
            "shippingCity": self.shipping_city,
            "shippingState": self.shipping_state,
            "shippingZip": self.shipping_zip,
            "shippingCountry": self.shipping_country,
            "subtotal": str(self.subtotal),
            "shippingCost": str(self.shipping_cost),
            "discount": str(self.discount),
            "taxes": str(self.taxes),
            "totalAmount": str(self.total_amount),
            "paymentMethod": self.payment_method.value,
            "paymentStatus": self.payment_status.value,
            "status": self.status.value,
            "notes": self.notes,
            "createdAt": self.created_at,
            "lineItems": [
                {
                    "sku": item.sku,
                    "productName": item.product_name,
                    "quantity": item.quantity,
                    "price": str(item.price),
                    "compareAtPrice": str(item.compare_at_price) if item.compare_at_price is not None else None,
                }
                for item in self.line_items
            ],
        }
