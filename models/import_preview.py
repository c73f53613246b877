"""
Import preview and commit result schemas.

A preview is built before anything is persisted: reconciled entities,
the advisory diagnostics and a summary. A commit result reports a
per-entity success/failure split.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.catalog import CatalogItem
from models.order import CommerceOrder


class Diagnostic(BaseModel):
    """Non-fatal, human-readable validation message."""

    model_config = ConfigDict(frozen=True)

    message: str
    row: Optional[int] = Field(None, description="File row number (header is row 1)")

    def __str__(self) -> str:
        return self.message


class ImportSummary(BaseModel):
    """Counts shown on the preview. Never mutated after computation."""

    model_config = ConfigDict(frozen=True)

    total_rows: int = Field(..., ge=0)
    entities_found: int = Field(..., ge=0)
    children_found: int = Field(..., ge=0)

    @property
    def parents_found(self) -> int:
        return self.entities_found

    def to_dict(self) -> dict:
        return {
            "totalRows": self.total_rows,
            "entitiesFound": self.entities_found,
            "childrenFound": self.children_found,
        }


class ImportPreview(BaseModel):
    """Everything the reviewer needs before deciding to commit."""

    import_type: str = Field(..., description="products or orders")
    file_name: str
    entities: list[Union[CatalogItem, CommerceOrder]] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    summary: ImportSummary
    canonical_text: str = Field(default="", description="CSV text sent on commit")
    preview_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to the payload consumed by the review screen."""
        return {
            "previewId": self.preview_id,
            "fileName": self.file_name,
            "importType": self.import_type,
            "entities": [entity.to_dict() for entity in self.entities],
            "diagnostics": [d.message for d in self.diagnostics],
            "summary": self.summary.to_dict(),
        }


class CommitFailure(BaseModel):
    """One entity that could not be persisted."""

    key: str
    error: str


class CommitResult(BaseModel):
    """Outcome of a commit. Partial success is a normal result."""

    import_type: str
    total_entities: int = 0
    imported_count: int = 0
    error_details: list[CommitFailure] = Field(default_factory=list)
    # Rows skipped by the reconciler
    row_diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.error_details)

    @property
    def success(self) -> bool:
        return self.error_count == 0

    def to_dict(self) -> dict:
        return {
            "importType": self.import_type,
            "totalEntities": self.total_entities,
            "importedCount": self.imported_count,
            "errorCount": self.error_count,
            "errorDetails": [
                {"key": f.key, "error": f.error} for f in self.error_details
            ],
            "rowDiagnostics": [d.message for d in self.row_diagnostics],
        }
