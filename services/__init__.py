"""
Business logic services.

Each service handles one step of the bulk product upload.
"""

from services.catalog_service import CatalogService, get_catalog_service
from services.product_service import ProductService, get_product_service
from services.storage_service import StorageService, get_storage_service
from services.image_matcher_service import (
    ImageAsset,
    ImageMatchSummary,
    MatchedImageSet,
    ImageMatcherService,
    get_image_matcher_service,
)
from services.bulk_upload_service import (
    BulkUploadService,
    BulkUploadSummary,
    UploadOutcome,
    UploadProgress,
)
from services.template_service import generate_template, TEMPLATE_FILENAME
from services.wizard_service import (
    WizardSession,
    open_session,
    get_session,
    close_session,
)

__all__ = [
    "CatalogService",
    "get_catalog_service",
    "ProductService",
    "get_product_service",
    "StorageService",
    "get_storage_service",
    "ImageAsset",
    "ImageMatchSummary",
    "MatchedImageSet",
    "ImageMatcherService",
    "get_image_matcher_service",
    "BulkUploadService",
    "BulkUploadSummary",
    "UploadOutcome",
    "UploadProgress",
    "generate_template",
    "TEMPLATE_FILENAME",
    "WizardSession",
    "open_session",
    "get_session",
    "close_session",
]
