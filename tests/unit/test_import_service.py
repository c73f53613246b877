"""
Unit tests for ImportService.

Preview runs the whole pipeline from file bytes; commit runs it again
from canonical text and persists through in-memory writers.
"""

import pytest

from config import settings
from exceptions import (
    PreviewNotFoundError,
    UnsupportedImportTypeError,
    ValidationError,
)
from services import preview_cache_service
from services.import_service import ImportService, get_import_service
from tests.factories import OrderRowFactory, ProductRowFactory
from tests.fakes import (
    InMemoryCatalogWriter,
    InMemoryOrderWriter,
    rows_to_csv_bytes,
    rows_to_xlsx_bytes,
)


@pytest.fixture
def service() -> ImportService:
    return ImportService()


def _csv_text(rows: list[dict]) -> str:
    return rows_to_csv_bytes(rows).decode("utf-8")


# ===================
# PREVIEW
# ===================

class TestPreview:
    """Tests for preview()."""

    def test_product_preview_from_csv(self, service, sample_product_rows):
        preview = service.preview_products(rows_to_csv_bytes(sample_product_rows), "products.csv")

        assert preview.import_type == "products"
        assert preview.summary.total_rows == 3
        assert preview.summary.entities_found == 2
        assert preview.summary.children_found == 3
        assert preview.diagnostics == []
        assert [item.handle for item in preview.entities] == ["shirt-1", "mug-1"]

    def test_product_preview_from_xlsx(self, service, sample_product_rows):
        preview = service.preview_products(rows_to_xlsx_bytes(sample_product_rows), "products.xlsx")

        assert preview.summary.entities_found == 2
        assert preview.summary.children_found == 3
        assert preview.canonical_text.startswith("Handle,")

    def test_order_preview(self, service, sample_order_rows):
        preview = service.preview_orders(rows_to_csv_bytes(sample_order_rows), "orders.csv")

        assert preview.summary.entities_found == 2
        assert preview.summary.children_found == 3
        assert preview.entities[0].line_items[1].sku == "NOSKU-1"

    def test_diagnostics_ordered_by_stage(self, service):
        """Decode diagnostics come first, then row diagnostics, then validation."""
        data = (
            b"Handle,Title,Variant SKU\n"
            b"shirt-1,T-Shirt,SKU-1\n"
            b",Orphan,SKU-X\n"
            b"bag-1,Bag,\n"
            b"shirt-1,T-Shirt,SKU-2,extra\n"
        )

        preview = service.preview_products(data, "products.csv")

        messages = [str(d) for d in preview.diagnostics]
        assert len(messages) == 3
        assert messages[0] == "Row 5: Too many fields: expected 3 fields but parsed 4"
        assert messages[1] == "Row 3: Missing Handle"
        assert messages[2] == 'Product "Bag": No variants with SKU found'

    def test_duplicate_sku_is_advisory(self, service):
        rows = [
            ProductRowFactory.create(handle="a", sku="X"),
            ProductRowFactory.create(handle="b", sku="X"),
        ]

        preview = service.preview_products(rows_to_csv_bytes(rows), "products.csv")

        assert [str(d) for d in preview.diagnostics] == ["Duplicate SKU: X"]
        assert preview.summary.entities_found == 2

    def test_corrupt_file_yields_single_diagnostic(self, service):
        preview = service.preview_products(b"not a workbook", "products.xlsx")

        assert preview.entities == []
        assert len(preview.diagnostics) == 1
        assert preview.summary.total_rows == 0
        assert preview.canonical_text == ""

    def test_preview_is_cached(self, service, sample_product_rows):
        preview = service.preview_products(rows_to_csv_bytes(sample_product_rows), "products.csv")

        assert preview.preview_id is not None
        assert preview_cache_service.retrieve_preview(preview.preview_id) is preview

    def test_preview_without_cache(self, service, sample_product_rows):
        preview = service.preview_products(
            rows_to_csv_bytes(sample_product_rows), "products.csv", cache=False
        )

        assert preview.preview_id is None

    def test_to_dict_payload(self, service, sample_product_rows):
        payload = service.preview_products(
            rows_to_csv_bytes(sample_product_rows), "products.csv"
        ).to_dict()

        assert payload["fileName"] == "products.csv"
        assert payload["importType"] == "products"
        assert payload["summary"] == {"totalRows": 3, "entitiesFound": 2, "childrenFound": 3}
        assert payload["entities"][0]["variants"][0]["sku"] == "SKU-1"
        assert payload["diagnostics"] == []

    def test_unsupported_import_type(self, service):
        with pytest.raises(UnsupportedImportTypeError):
            service.preview("customers", b"Name\nx\n", "customers.csv")

    def test_file_too_large(self, service, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_mb", 0)

        with pytest.raises(ValidationError) as exc_info:
            service.preview_products(b"Handle,Title\nh,T\n", "products.csv")

        assert exc_info.value.code == "FILE_TOO_LARGE"

    def test_singleton(self):
        assert get_import_service() is get_import_service()


# ===================
# COMMIT PRODUCTS
# ===================

class TestCommitProducts:
    """Tests for commit_products()."""

    def test_all_products_created(self, service, catalog_writer, sample_product_rows):
        result = service.commit_products(_csv_text(sample_product_rows), "products.csv", catalog_writer)

        assert result.success is True
        assert result.total_entities == 2
        assert result.imported_count == 2
        assert [item.handle for item in catalog_writer.created] == ["shirt-1", "mug-1"]
        assert len(catalog_writer.created[0].variants) == 2

    def test_sku_existing_in_database_rejects_product(self, service, sample_product_rows):
        writer = InMemoryCatalogWriter(existing_skus={"MUG-1"})

        result = service.commit_products(_csv_text(sample_product_rows), "products.csv", writer)

        assert result.imported_count == 1
        assert result.error_count == 1
        failure = result.error_details[0]
        assert failure.key == "mug-1"
        assert failure.error == "Duplicate SKU(s): MUG-1 (conflicts with existing database)"

    def test_sku_repeated_in_batch_rejects_later_product(self, service, catalog_writer):
        rows = [
            ProductRowFactory.create(handle="a", sku="X"),
            ProductRowFactory.create(handle="b", sku="X"),
        ]

        result = service.commit_products(_csv_text(rows), "products.csv", catalog_writer)

        assert [item.handle for item in catalog_writer.created] == ["a"]
        assert result.error_details[0].key == "b"
        assert result.error_details[0].error == 'Duplicate SKU(s): X (conflicts with product "a")'

    def test_product_without_variants_rejected(self, service, catalog_writer):
        rows = [ProductRowFactory.create(handle="lamp", sku="")]

        result = service.commit_products(_csv_text(rows), "products.csv", catalog_writer)

        assert result.imported_count == 0
        assert result.error_details[0].error == "No variants with SKU found"

    def test_writer_failure_does_not_abort_batch(self, service, sample_product_rows):
        writer = InMemoryCatalogWriter(fail_handles={"shirt-1"})

        result = service.commit_products(_csv_text(sample_product_rows), "products.csv", writer)

        assert result.imported_count == 1
        assert result.error_details[0].key == "shirt-1"
        assert "insert failed" in result.error_details[0].error
        assert [item.handle for item in writer.created] == ["mug-1"]

    def test_skipped_rows_reported_on_result(self, service, catalog_writer):
        rows = [
            ProductRowFactory.create(handle="lamp", title="", sku="L-1"),
            ProductRowFactory.create(handle="desk", sku="D-1"),
        ]

        result = service.commit_products(_csv_text(rows), "products.csv", catalog_writer)

        assert result.imported_count == 1
        assert [str(d) for d in result.row_diagnostics] == [
            'Row 2: Missing Title for new product "lamp"'
        ]
        assert result.to_dict()["rowDiagnostics"] == [
            'Row 2: Missing Title for new product "lamp"'
        ]

    def test_result_payload(self, service, catalog_writer, sample_product_rows):
        payload = service.commit_products(
            _csv_text(sample_product_rows), "products.csv", catalog_writer
        ).to_dict()

        assert payload["importedCount"] == 2
        assert payload["errorCount"] == 0
        assert payload["errorDetails"] == []


# ===================
# COMMIT ORDERS
# ===================

class TestCommitOrders:
    """Tests for commit_orders()."""

    def test_orders_created(self, service, order_writer, sample_order_rows):
        result = service.commit_orders(_csv_text(sample_order_rows), "orders.csv", order_writer)

        assert result.imported_count == 2
        assert [order.order_number for order in order_writer.created] == ["#1001", "#1002"]

    def test_existing_order_rejected(self, service, sample_order_rows):
        writer = InMemoryOrderWriter(existing_orders={"#1001"})

        result = service.commit_orders(_csv_text(sample_order_rows), "orders.csv", writer)

        assert result.imported_count == 1
        assert result.error_details[0].key == "#1001"
        assert result.error_details[0].error == "Order already exists"

    def test_order_without_line_items_rejected(self, service, order_writer):
        rows = [OrderRowFactory.create(name="#7", quantity="0")]

        result = service.commit_orders(_csv_text(rows), "orders.csv", order_writer)

        assert result.imported_count == 0
        assert result.error_details[0].error == "No line items found"
        assert order_writer.created == []

    def test_row_without_order_name_reported_on_result(self, service, order_writer):
        rows = [OrderRowFactory.create(name="#1"), OrderRowFactory.create(name="")]

        result = service.commit_orders(_csv_text(rows), "orders.csv", order_writer)

        assert result.imported_count == 1
        assert [d.row for d in result.row_diagnostics] == [3]

    def test_writer_failure_recorded(self, service, sample_order_rows):
        writer = InMemoryOrderWriter(fail_orders={"#1002"})

        result = service.commit_orders(_csv_text(sample_order_rows), "orders.csv", writer)

        assert result.imported_count == 1
        assert result.error_details[0].key == "#1002"


# ===================
# COMMIT PREVIEW
# ===================

class TestCommitPreview:
    """Tests for commit_preview()."""

    def test_commit_cached_product_preview(self, service, catalog_writer, sample_product_rows):
        preview = service.preview_products(rows_to_xlsx_bytes(sample_product_rows), "products.xlsx")

        result = service.commit_preview(preview.preview_id, catalog_writer)

        assert result.imported_count == 2
        assert preview_cache_service.retrieve_preview(preview.preview_id) is None

    def test_commit_cached_order_preview(self, service, order_writer, sample_order_rows):
        preview = service.preview_orders(rows_to_csv_bytes(sample_order_rows), "orders.csv")

        result = service.commit_preview(preview.preview_id, order_writer)

        assert result.import_type == "orders"
        assert result.imported_count == 2

    def test_unknown_preview(self, service, catalog_writer):
        with pytest.raises(PreviewNotFoundError):
            service.commit_preview("missing", catalog_writer)

    def test_preview_committed_once(self, service, catalog_writer, sample_product_rows):
        preview = service.preview_products(rows_to_csv_bytes(sample_product_rows), "products.csv")
        service.commit_preview(preview.preview_id, catalog_writer)

        with pytest.raises(PreviewNotFoundError):
            service.commit_preview(preview.preview_id, catalog_writer)
