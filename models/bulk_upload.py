"""
Bulk product upload schemas.

Request/response models for the bulk upload API and the product insert
payload built by the upload orchestrator.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.wizard import WizardStage, UploadStatus


class Badge(str, Enum):
    """Storefront badge shown on a product card."""
    NEW = "new"
    SALE = "sale"
    TRENDING = "trending"


class ProductImportCreate(BaseSchema):
    """
    Product row to insert, assembled from one validated CSV record.

    Empty optional text fields are stored as NULL.
    """

    name: str = Field(..., min_length=1)
    sku: Optional[str] = None
    slug: str = Field(..., min_length=1)
    description: Optional[str] = None
    long_description: Optional[str] = None
    category_id: Optional[str] = None
    collection_id: Optional[str] = None
    price: float = Field(..., gt=0)
    original_price: Optional[float] = None
    material: Optional[str] = None
    care_instructions: Optional[str] = None
    stock_quantity: int = 0
    low_stock_threshold: int = 5
    badge: Optional[Badge] = None
    is_new_arrival: bool = False
    is_best_seller: bool = False
    is_celebrity_special: bool = False
    is_active: bool = True
    display_order: int = 0
    enabled_options: list[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    has_addons: bool = False


class ReviewRow(BaseSchema):
    """One CSV row as shown in the review table."""

    row: int
    name: str
    sku: str
    slug: str
    price: Optional[float] = None
    image_count: int = 0
    images: list[str] = Field(default_factory=list, description="Matched image filenames")
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ReviewResponse(BaseSchema):
    """Review table with aggregate counts."""

    valid_count: int
    error_count: int
    image_count: int
    rows: list[ReviewRow]


class UploadOutcomeResponse(BaseSchema):
    """Result for a single product upload."""

    row: int
    slug: str
    success: bool
    product_id: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class UploadProgressResponse(BaseSchema):
    """Live upload counters and, once complete, final totals."""

    current: int
    total: int
    status: UploadStatus
    succeeded: Optional[int] = None
    failed: Optional[int] = None
    outcomes: list[UploadOutcomeResponse] = Field(default_factory=list)


class ImageMatchResponse(BaseSchema):
    """Summary of one image batch."""

    matched: int
    unmatched: int
    rejected: int
    total_matched: int


class WizardSessionResponse(BaseSchema):
    """Current state of a bulk upload session."""

    session_id: str
    stage: WizardStage
    error: Optional[str] = None
    review: ReviewResponse
    progress: UploadProgressResponse
