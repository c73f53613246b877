"""
Shared test fixtures.

Persistence collaborators are replaced by in-memory writers that record
every call and can be told to fail for specific keys.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from services import preview_cache_service
from tests.fakes import (
    InMemoryCatalogWriter,
    InMemoryOrderWriter,
    InMemoryStockWriter,
)


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def clear_preview_cache():
    """Each test starts with an empty preview cache."""
    preview_cache_service.clear_previews()
    yield
    preview_cache_service.clear_previews()


@pytest.fixture
def catalog_writer() -> InMemoryCatalogWriter:
    return InMemoryCatalogWriter()


@pytest.fixture
def order_writer() -> InMemoryOrderWriter:
    return InMemoryOrderWriter()


@pytest.fixture
def stock_writer() -> InMemoryStockWriter:
    return InMemoryStockWriter()


@pytest.fixture
def sample_product_rows() -> list[dict]:
    """Two products, the first with two variants."""
    return [
        {
            "Handle": "shirt-1",
            "Title": "T-Shirt",
            "Body (HTML)": "<p>Soft cotton</p>",
            "Vendor": "Acme",
            "Type": "Tops",
            "Option1 Name": "Color",
            "Option1 Value": "Blue",
            "Option2 Name": "Size",
            "Option2 Value": "M",
            "Variant SKU": "SKU-1",
            "Variant Price": "499",
            "Cost per item": "200",
            "Variant Inventory Qty": "10",
        },
        {
            "Handle": "shirt-1",
            "Option1 Name": "Color",
            "Option1 Value": "Red",
            "Option2 Name": "Size",
            "Option2 Value": "L",
            "Variant SKU": "SKU-2",
            "Variant Price": "499",
            "Cost per item": "200",
            "Variant Inventory Qty": "4",
        },
        {
            "Handle": "mug-1",
            "Title": "Mug",
            "Variant SKU": "MUG-1",
            "Variant Price": "299.50",
            "Variant Inventory Qty": "0",
        },
    ]


@pytest.fixture
def sample_order_rows() -> list[dict]:
    """Order #1001 with two line items, order #1002 with one."""
    return [
        {
            "Name": "#1001",
            "Email": "asha@example.com",
            "Financial Status": "pending",
            "Fulfillment Status": "fulfilled",
            "Shipping Name": "Asha Rao",
            "Shipping Address1": "12 MG Road",
            "Shipping City": "Pune",
            "Shipping Zip": "'411001",
            "Shipping Province": "MH",
            "Shipping Country": "IN",
            "Shipping Phone": "9876543210",
            "Subtotal": "100",
            "Shipping": "10",
            "Taxes": "5",
            "Total": "115",
            "Lineitem name": "Widget",
            "Lineitem quantity": "2",
            "Lineitem price": "50",
            "Lineitem sku": "W-1",
        },
        {
            "Name": "#1001",
            "Lineitem name": "Gadget",
            "Lineitem quantity": "1",
            "Lineitem price": "0",
        },
        {
            "Name": "#1002",
            "Financial Status": "paid",
            "Billing Name": "Ravi K",
            "Billing Phone": "9000000000",
            "Lineitem name": "Widget",
            "Lineitem quantity": "3",
            "Lineitem price": "50",
            "Lineitem sku": "W-1",
        },
    ]
