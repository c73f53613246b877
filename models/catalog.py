"""
Catalog item schemas rebuilt from product export rows.

One CatalogItem per Handle, one ProductVariant per row carrying a
Variant SKU.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from models.base import ImportedSchema


class ProductVariant(ImportedSchema):
    """A sellable variant of a catalog item."""

    sku: str = Field(..., min_length=1, description="Variant SKU")
    color: Optional[str] = Field(None, description="Color option value")
    size: Optional[str] = Field(None, description="Size option value")
    cost_price: Decimal = Field(default=Decimal("0"), description="Cost per item")
    selling_price: Decimal = Field(default=Decimal("0"), description="Variant price")
    compare_at_price: Optional[Decimal] = Field(None, description="Variant compare-at price")
    stock_quantity: int = Field(default=0, description="Variant inventory quantity")


class CatalogItem(ImportedSchema):
    """
    Product reconciled from one or more rows sharing a Handle.

    Scalars come from the first row with the handle; variants are
    appended in row order.
    """

    handle: str = Field(..., description="Natural key from the Handle column")
    name: str = Field(default="", description="Title of the first row")
    description: Optional[str] = Field(None, description="Body (HTML)")
    category: Optional[str] = Field(None, description="Product type")
    vendor: Optional[str] = None
    variants: list[ProductVariant] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return self.handle

    @property
    def children(self) -> list[ProductVariant]:
        return self.variants

    def to_dict(self) -> dict:
        """Convert to preview payload format."""
        return {
            "handle": self.handle,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "vendor": self.vendor,
            "variants": [
                {
                    "sku": v.sku,
                    "color": v.color,
                    "size": v.size,
                    "costPrice": str(v.cost_price),
                    "sellingPrice": str(v.selling_price),
                    "compareAtPrice": str(v.compare_at_price) if v.compare_at_price is not None else None,
                    "stockQuantity": v.stock_quantity,
                }
                for v in self.variants
            ],
        }
