"""
Column normalizer for commerce platform exports.

Maps a flat row onto one canonical record per row kind:
- VariantRow: one row of a product export
- LineItemRow: one row of an order export

Known columns are looked up by exact (case-sensitive) name; absent
columns become "". Unknown columns are ignored.

Option-to-attribute mapping is best-effort: an option whose name does not
look like a color or a size is dropped silently.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from models.order import (
    INITIAL_ORDER_STATUS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

FlatRow = dict[str, str]

# Returns "color", "size" or None for an option name
OptionMatcher = Callable[[str], Optional[str]]

OPTION_COLUMN_PAIRS = [
    ("Option1 Name", "Option1 Value"),
    ("Option2 Name", "Option2 Value"),
    ("Option3 Name", "Option3 Value"),
]

COD_FINANCIAL_STATUSES = {"pending", "unpaid"}


@dataclass(frozen=True)
class VariantRow:
    """One product export row in canonical form."""
    handle: str = ""
    title: str = ""
    body: str = ""
    product_type: str = ""
    vendor: str = ""
    sku: str = ""
    color: str = ""
    size: str = ""
    price: str = ""
    compare_at_price: str = ""
    cost: str = ""
    inventory_qty: str = ""


@dataclass(frozen=True)
class LineItemRow:
    """One order export row in canonical form, with derived payment fields."""
    order_name: str = ""
    email: str = ""
    financial_status: str = ""

    shipping_name: str = ""
    shipping_address1: str = ""
    shipping_address2: str = ""
    shipping_street: str = ""
    shipping_city: str = ""
    shipping_zip: str = ""
    shipping_province: str = ""
    shipping_country: str = ""
    shipping_phone: str = ""
    billing_name: str = ""
    billing_phone: str = ""

    subtotal: str = ""
    shipping: str = ""
    taxes: str = ""
    total: str = ""
    discount_amount: str = ""
    notes: str = ""
    created_at: str = ""

    lineitem_name: str = ""
    lineitem_sku: str = ""
    lineitem_quantity: str = ""
    lineitem_price: str = ""
    lineitem_compare_at_price: str = ""

    payment_method: PaymentMethod = PaymentMethod.PREPAID
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = INITIAL_ORDER_STATUS


def _col(row: FlatRow, name: str) -> str:
    """Exact-name column lookup, "" when absent."""
    value = row.get(name)
    return "" if value is None else value


# ===================
# OPTION MATCHING
# ===================

def match_option_attribute(option_name: str) -> Optional[str]:
    """
    Default option matcher.

    "Color" / "Colour" / "Band colour" → "color"
    "Size" / "Shoe Size" → "size"
    anything else → None
    """
    name = option_name.lower()
    if "color" in name or "colour" in name:
        return "color"
    if "size" in name:
        return "size"
    return None


def extract_color_size(
    row: FlatRow,
    matcher: OptionMatcher = match_option_attribute,
) -> tuple[str, str]:
    """
    Scan the three option pairs for color and size.

    A pair counts only when both its name and value are present. A later
    matching pair overwrites an earlier one.
    """
    attrs = {"color": "", "size": ""}

    for name_col, value_col in OPTION_COLUMN_PAIRS:
        name = _col(row, name_col)
        value = _col(row, value_col)
        if not name or not value:
            continue
        attr = matcher(name)
        if attr in attrs:
            attrs[attr] = value

    return attrs["color"], attrs["size"]


# ===================
# PAYMENT DERIVATION
# ===================

def derive_payment(financial_status: str) -> tuple[PaymentMethod, PaymentStatus]:
    """
    Derive payment method and status from the export's Financial Status.

    pending/unpaid → cash on delivery; anything else (empty included) is
    prepaid. Only "paid" counts as paid.
    """
    status = (financial_status or "").lower()

    method = PaymentMethod.COD if status in COD_FINANCIAL_STATUSES else PaymentMethod.PREPAID
    payment_status = PaymentStatus.PAID if status == "paid" else PaymentStatus.PENDING
    return method, payment_status


# ===================
# ROW NORMALIZATION
# ===================

def normalize_variant_row(
    row: FlatRow,
    matcher: OptionMatcher = match_option_attribute,
) -> VariantRow:
    """Pick the product export columns out of a flat row."""
    color, size = extract_color_size(row, matcher)

    return VariantRow(
        handle=_col(row, "Handle"),
        title=_col(row, "Title"),
        body=_col(row, "Body (HTML)") or _col(row, "Body"),
        product_type=_col(row, "Type"),
        vendor=_col(row, "Vendor"),
        sku=_col(row, "Variant SKU"),
        color=color,
        size=size,
        price=_col(row, "Variant Price"),
        compare_at_price=_col(row, "Variant Compare at Price"),
        cost=_col(row, "Cost per item"),
        inventory_qty=_col(row, "Variant Inventory Qty"),
    )


def normalize_line_item_row(row: FlatRow) -> LineItemRow:
    """
    Pick the order export columns out of a flat row.

    The Fulfillment Status column is deliberately not read: imported
    orders always start at the initial workflow status.
    """
    financial_status = _col(row, "Financial Status")
    payment_method, payment_status = derive_payment(financial_status)

    return LineItemRow(
        order_name=_col(row, "Name"),
        email=_col(row, "Email"),
        financial_status=financial_status,
        shipping_name=_col(row, "Shipping Name"),
        shipping_address1=_col(row, "Shipping Address1"),
        shipping_address2=_col(row, "Shipping Address2"),
        shipping_street=_col(row, "Shipping Street"),
        shipping_city=_col(row, "Shipping City"),
        shipping_zip=_col(row, "Shipping Zip"),
        shipping_province=_col(row, "Shipping Province"),
        shipping_country=_col(row, "Shipping Country"),
        shipping_phone=_col(row, "Shipping Phone"),
        billing_name=_col(row, "Billing Name"),
        billing_phone=_col(row, "Billing Phone"),
        subtotal=_col(row, "Subtotal"),
        shipping=_col(row, "Shipping"),
        taxes=_col(row, "Taxes"),
        total=_col(row, "Total"),
        discount_amount=_col(row, "Discount Amount"),
        notes=_col(row, "Notes"),
        created_at=_col(row, "Created at"),
        lineitem_name=_col(row, "Lineitem name"),
        lineitem_sku=_col(row, "Lineitem sku"),
        lineitem_quantity=_col(row, "Lineitem quantity"),
        lineitem_price=_col(row, "Lineitem price"),
        lineitem_compare_at_price=_col(row, "Lineitem compare at price"),
        payment_method=payment_method,
        payment_status=payment_status,
        status=INITIAL_ORDER_STATUS,
    )


def normalize_variant_rows(
    rows: list[FlatRow],
    matcher: OptionMatcher = match_option_attribute,
) -> list[VariantRow]:
    return [normalize_variant_row(row, matcher) for row in rows]


def normalize_line_item_rows(rows: list[FlatRow]) -> list[LineItemRow]:
    return [normalize_line_item_row(row) for row in rows]
