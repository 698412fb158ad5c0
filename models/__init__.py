"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.catalog import (
    CategoryRef,
    CollectionRef,
    ProductOptionRef,
    ReferenceCatalogs,
)
from models.wizard import (
    WizardStage,
    UploadStatus,
    WIZARD_TRANSITIONS,
    is_valid_wizard_transition,
)
from models.bulk_upload import (
    Badge,
    ProductImportCreate,
    ReviewRow,
    ReviewResponse,
    UploadOutcomeResponse,
    UploadProgressResponse,
    ImageMatchResponse,
    WizardSessionResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Catalog
    "CategoryRef",
    "CollectionRef",
    "ProductOptionRef",
    "ReferenceCatalogs",

    # Wizard
    "WizardStage",
    "UploadStatus",
    "WIZARD_TRANSITIONS",
    "is_valid_wizard_transition",

    # Bulk upload
    "Badge",
    "ProductImportCreate",
    "ReviewRow",
    "ReviewResponse",
    "UploadOutcomeResponse",
    "UploadProgressResponse",
    "ImageMatchResponse",
    "WizardSessionResponse",
]
