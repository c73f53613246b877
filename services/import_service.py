"""
Import Service - preview and commit of product and order exports.

Preview: file bytes → ingest → normalize → reconcile → validate →
summarize. Nothing is persisted; diagnostics are advisory.

Commit: canonical CSV text → same pipeline → one writer call per
reconciled entity. There is no transaction across the batch; the result
reports every failure with its key.
"""

from typing import Optional, Union

import structlog

from config import settings
from exceptions import (
    OrderExistsError,
    PreviewNotFoundError,
    TabularFileError,
    UnsupportedImportTypeError,
    ValidationError,
)
from models.catalog import CatalogItem
from models.import_preview import CommitFailure, CommitResult, ImportPreview
from models.order import CommerceOrder
from parsers.column_normalizer import (
    OptionMatcher,
    match_option_attribute,
    normalize_line_item_rows,
    normalize_variant_rows,
)
from parsers.tabular_ingestor import FlatRow, ingest, ingest_text, to_canonical_text
from services import preview_cache_service
from services.import_summary import summarize
from services.import_validator import validate_catalog, validate_orders
from services.reconciler import ReconcileResult, reconcile_catalog, reconcile_orders
from services.writers import CatalogWriter, OrderWriter

logger = structlog.get_logger(__name__)

PRODUCTS = "products"
ORDERS = "orders"
IMPORT_TYPES = (PRODUCTS, ORDERS)


class ImportService:
    """
    Bulk import business logic.

    Core methods:
    - preview_products / preview_orders: Build the review payload
    - commit_products / commit_orders: Persist from canonical CSV text
    - commit_preview: Persist a cached preview by id
    """

    def __init__(self, option_matcher: OptionMatcher = match_option_attribute):
        self.option_matcher = option_matcher

    # ===================
    # PREVIEW
    # ===================

    def preview(
        self,
        import_type: str,
        file_bytes: bytes,
        file_name: str,
        cache: bool = True,
    ) -> ImportPreview:
        """
        Build an import preview.

        Args:
            import_type: "products" or "orders"
            file_bytes: Uploaded file content
            file_name: Original file name (extension selects the decoder)
            cache: Store the preview for a later commit_preview()

        Returns:
            ImportPreview with entities, diagnostics and summary

        Raises:
            UnsupportedImportTypeError: Unknown import type
            ValidationError: File larger than the upload limit
        """
        if import_type not in IMPORT_TYPES:
            raise UnsupportedImportTypeError(import_type)

        if len(file_bytes) > settings.max_upload_bytes:
            raise ValidationError(
                message=f"File exceeds the {settings.max_upload_mb} MB upload limit",
                code="FILE_TOO_LARGE",
                details={"file_name": file_name, "size": len(file_bytes)},
            )

        logger.info("building_import_preview", import_type=import_type, file_name=file_name)

        ingested = ingest(file_bytes, file_name)
        reconciled = self._reconcile(import_type, ingested.rows)

        if import_type == PRODUCTS:
            validation = validate_catalog(reconciled.parents)
        else:
            validation = validate_orders(reconciled.parents)

        canonical_text = ""
        if ingested.rows:
            try:
                canonical_text = to_canonical_text(file_bytes, file_name)
            except TabularFileError as e:
                logger.warning("canonical_text_failed", file_name=file_name, error=e.message)

        preview = ImportPreview(
            import_type=import_type,
            file_name=file_name,
            entities=reconciled.parents,
            diagnostics=ingested.diagnostics + reconciled.diagnostics + validation,
            summary=summarize(ingested.total_rows, reconciled.parents),
            canonical_text=canonical_text,
        )

        if cache:
            preview.preview_id = preview_cache_service.store_preview(preview)

        logger.info(
            "import_preview_ready",
            import_type=import_type,
            preview_id=preview.preview_id,
            total_rows=preview.summary.total_rows,
            entities=preview.summary.entities_found,
            children=preview.summary.children_found,
            diagnostics=len(preview.diagnostics),
        )
        return preview

    def preview_products(self, file_bytes: bytes, file_name: str, cache: bool = True) -> ImportPreview:
        return self.preview(PRODUCTS, file_bytes, file_name, cache=cache)

    def preview_orders(self, file_bytes: bytes, file_name: str, cache: bool = True) -> ImportPreview:
        return self.preview(ORDERS, file_bytes, file_name, cache=cache)

    # ===================
    # COMMIT
    # ===================

    def commit_products(
        self,
        csv_text: str,
        file_name: str,
        writer: CatalogWriter,
    ) -> CommitResult:
        """
        Create products from canonical CSV text.

        A product is rejected when any of its SKUs already exists in the
        database or belongs to an earlier product of the same batch, or
        when it has no variants. Each remaining product is created with
        its own writer call.
        """
        reconciled = self._reconcile(PRODUCTS, self._rows_from_text(csv_text, file_name))
        items = reconciled.parents
        result = self._new_result(PRODUCTS, reconciled, file_name)

        rejected = self._duplicate_sku_failures(items, writer.existing_skus())
        result.error_details.extend(rejected.values())

        for item in items:
            if item.handle in rejected:
                continue
            if not item.variants:
                result.error_details.append(
                    CommitFailure(key=item.handle, error="No variants with SKU found")
                )
                continue
            if self._write(item.handle, lambda: writer.create_catalog_item(item), result):
                result.imported_count += 1

        self._log_commit(result, file_name)
        return result

    def commit_orders(
        self,
        csv_text: str,
        file_name: str,
        writer: OrderWriter,
    ) -> CommitResult:
        """
        Create orders from canonical CSV text.

        Orders whose number already exists, and orders without line items,
        are rejected. Each remaining order is created with its own writer
        call.
        """
        reconciled = self._reconcile(ORDERS, self._rows_from_text(csv_text, file_name))
        orders = reconciled.parents
        result = self._new_result(ORDERS, reconciled, file_name)

        for order in orders:
            if not order.line_items:
                result.error_details.append(
                    CommitFailure(key=order.order_number, error="No line items found")
                )
                continue
            if self._write(order.order_number, lambda: self._create_order(order, writer), result):
                result.imported_count += 1

        self._log_commit(result, file_name)
        return result

    def commit_preview(
        self,
        preview_id: str,
        writer: Union[CatalogWriter, OrderWriter],
    ) -> CommitResult:
        """
        Commit a cached preview and evict it.

        Raises:
            PreviewNotFoundError: Preview expired or unknown
        """
        preview: Optional[ImportPreview] = preview_cache_service.retrieve_preview(preview_id)
        if preview is None:
            raise PreviewNotFoundError(preview_id)

        if preview.import_type == PRODUCTS:
            result = self.commit_products(preview.canonical_text, preview.file_name, writer)
        else:
            result = self.commit_orders(preview.canonical_text, preview.file_name, writer)

        preview_cache_service.delete_preview(preview_id)
        return result

    # ===================
    # HELPERS
    # ===================

    def _reconcile(self, import_type: str, rows: list[FlatRow]) -> ReconcileResult:
        if import_type == PRODUCTS:
            return reconcile_catalog(normalize_variant_rows(rows, self.option_matcher))
        return reconcile_orders(normalize_line_item_rows(rows))

    def _rows_from_text(self, csv_text: str, file_name: str) -> list[FlatRow]:
        ingested = ingest_text(csv_text)
        if ingested.diagnostics:
            logger.warning(
                "commit_text_diagnostics",
                file_name=file_name,
                diagnostics=[d.message for d in ingested.diagnostics],
            )
        return ingested.rows

    @staticmethod
    def _new_result(import_type: str, reconciled: ReconcileResult, file_name: str) -> CommitResult:
        """Start a commit result, keeping the rows the reconciler skipped."""
        if reconciled.diagnostics:
            logger.warning(
                "commit_row_diagnostics",
                import_type=import_type,
                file_name=file_name,
                diagnostics=[d.message for d in reconciled.diagnostics],
            )
        return CommitResult(
            import_type=import_type,
            total_entities=len(reconciled.parents),
            row_diagnostics=list(reconciled.diagnostics),
        )

    @staticmethod
    def _duplicate_sku_failures(
        items: list[CatalogItem],
        database_skus: set[str],
    ) -> dict[str, CommitFailure]:
        """Group SKU conflicts by handle, in batch order."""
        batch_sku_to_handle: dict[str, str] = {}
        conflicts: dict[str, list[str]] = {}

        for item in items:
            for variant in item.variants:
                sku = variant.sku
                if sku in database_skus:
                    conflicts.setdefault(item.handle, []).append(
                        f"{sku} (conflicts with existing database)"
                    )
                elif sku in batch_sku_to_handle:
                    conflicts.setdefault(item.handle, []).append(
                        f'{sku} (conflicts with product "{batch_sku_to_handle[sku]}")'
                    )
                else:
                    batch_sku_to_handle[sku] = item.handle

        return {
            handle: CommitFailure(key=handle, error=f"Duplicate SKU(s): {', '.join(skus)}")
            for handle, skus in conflicts.items()
        }

    @staticmethod
    def _create_order(order: CommerceOrder, writer: OrderWriter) -> None:
        if writer.order_exists(order.order_number):
            raise OrderExistsError(order.order_number)
        writer.create_order(order)

    @staticmethod
    def _write(key: str, write, result: CommitResult) -> bool:
        """Run one writer call, recording a failure instead of aborting the batch."""
        try:
            write()
        except Exception as e:
            logger.warning(
                "commit_item_failed",
                import_type=result.import_type,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            result.error_details.append(CommitFailure(key=key, error=str(e)))
            return False
        return True

    @staticmethod
    def _log_commit(result: CommitResult, file_name: str) -> None:
        logger.info(
            "import_committed",
            import_type=result.import_type,
            file_name=file_name,
            total=result.total_entities,
            imported=result.imported_count,
            errors=result.error_count,
        )


# Singleton instance
_import_service: Optional[ImportService] = None


def get_import_service() -> ImportService:
    """Get or create ImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService()
    return _import_service
