"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for request schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class ImportedSchema(BaseModel):
    """
    Base for entities rebuilt from imported rows.

    Values are kept verbatim (no whitespace trimming) so the preview shows
    exactly what the file contained.
    """
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True
    )
