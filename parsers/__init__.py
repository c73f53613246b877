"""
Export file parsers: ingestion and column normalization.
"""

from parsers.tabular_ingestor import (
    ingest,
    ingest_text,
    to_canonical_text,
    is_excel_file,
    IngestResult,
    FlatRow,
)
from parsers.column_normalizer import (
    VariantRow,
    LineItemRow,
    OptionMatcher,
    match_option_attribute,
    extract_color_size,
    derive_payment,
    normalize_variant_row,
    normalize_line_item_row,
    normalize_variant_rows,
    normalize_line_item_rows,
)

__all__ = [
    "ingest",
    "ingest_text",
    "to_canonical_text",
    "is_excel_file",
    "IngestResult",
    "FlatRow",
    "VariantRow",
    "LineItemRow",
    "OptionMatcher",
    "match_option_attribute",
    "extract_color_size",
    "derive_payment",
    "normalize_variant_row",
    "normalize_line_item_row",
    "normalize_variant_rows",
    "normalize_line_item_rows",
]
