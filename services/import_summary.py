"""Preview counts for reconciled imports."""

from typing import Sequence, Union

from models.catalog import CatalogItem
from models.import_preview import ImportSummary
from models.order import CommerceOrder


def summarize(
    total_rows: int,
    parents: Sequence[Union[CatalogItem, CommerceOrder]],
) -> ImportSummary:
    """Count rows read, parents found and children across all parents."""
    return ImportSummary(
        total_rows=total_rows,
        entities_found=len(parents),
        children_found=sum(len(parent.children) for parent in parents),
    )
