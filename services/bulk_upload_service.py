"""
Bulk upload orchestrator.

Creates products from validated CSV records one at a time, in row order:

1. Upload the record's matched images (a failed image is skipped)
2. Resolve category/collection slugs to ids from the session snapshot
3. Split enabled_options on ";"
4. Insert the product (a failure marks only this record as failed)

The processed counter advances after every record, success or not.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional
import structlog

from models.bulk_upload import ProductImportCreate
from models.catalog import ReferenceCatalogs
from models.wizard import UploadStatus
from exceptions import NoEligibleProductsError
from parsers.product_csv_parser import ParsedProduct
from services.image_matcher_service import ImageAsset, MatchedImageSet
from services.product_service import ProductService, get_product_service
from services.storage_service import StorageService, get_storage_service

logger = structlog.get_logger(__name__)

OPTIONS_SEPARATOR = ";"


@dataclass
class UploadProgress:
    """Live counters for the progress step."""
    current: int = 0
    total: int = 0
    status: UploadStatus = UploadStatus.IDLE


@dataclass
class UploadOutcome:
    """Result of uploading one product."""
    row: int
    slug: str
    success: bool
    product_id: Optional[str] = None
    image_urls: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class BulkUploadSummary:
    """Aggregate result of an upload run."""
    succeeded: int = 0
    failed: int = 0
    outcomes: list[UploadOutcome] = field(default_factory=list)


ProgressCallback = Callable[[UploadProgress], None]


class BulkUploadService:
    """
    Sequential product creation with per-record failure isolation.

    Collaborators are injectable for tests; defaults are the shared
    Supabase-backed services.
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        products: Optional[ProductService] = None
    ):
        self.storage = storage or get_storage_service()
        self.products = products or get_product_service()

    def upload_products(
        self,
        products: list[ParsedProduct],
        images: MatchedImageSet,
        catalogs: ReferenceCatalogs,
        progress: Optional[UploadProgress] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> BulkUploadSummary:
        """
        Create every eligible product.

        Args:
            products: Parsed products; records with errors are skipped
            images: Matched images keyed by slug
            catalogs: Snapshot used during validation
            progress: Counters to update in place (created if omitted)
            on_progress: Called after each record

        Returns:
            BulkUploadSummary with succeeded/failed counts and per-record outcomes

        Raises:
            NoEligibleProductsError: If no record is error-free
        """
        eligible = [p for p in products if p.is_eligible]
        if not eligible:
            raise NoEligibleProductsError()

        progress = progress if progress is not None else UploadProgress()
        progress.current = 0
        progress.total = len(eligible)
        progress.status = UploadStatus.UPLOADING

        logger.info("bulk_upload_started", total=progress.total)

        summary = BulkUploadSummary()

        for product in eligible:
            outcome = self._upload_one(product, images.get(product.slug), catalogs)
            summary.outcomes.append(outcome)
            if outcome.success:
                summary.succeeded += 1
            else:
                summary.failed += 1

            progress.current += 1
            if on_progress is not None:
                on_progress(progress)

        progress.status = UploadStatus.COMPLETE

        logger.info(
            "bulk_upload_complete",
            succeeded=summary.succeeded,
            failed=summary.failed
        )

        return summary

    def _upload_one(
        self,
        product: ParsedProduct,
        assets: list[ImageAsset],
        catalogs: ReferenceCatalogs
    ) -> UploadOutcome:
        image_urls = self._upload_images(product, assets)

        try:
            data = build_import_payload(product, image_urls, catalogs)
            product_id = self.products.create_from_import(data)
        except Exception as e:
            # Images already stored for this row are not cleaned up
            logger.error(
                "bulk_upload_product_failed",
                row=product.row,
                slug=product.slug,
                error=str(e),
                error_type=type(e).__name__
            )
            return UploadOutcome(
                row=product.row,
                slug=product.slug,
                success=False,
                image_urls=image_urls,
                error=str(e)
            )

        return UploadOutcome(
            row=product.row,
            slug=product.slug,
            success=True,
            product_id=product_id,
            image_urls=image_urls
        )

    def _upload_images(self, product: ParsedProduct, assets: list[ImageAsset]) -> list[str]:
        urls: list[str] = []
        for asset in assets:
            try:
                urls.append(self.storage.upload_image(asset.content))
            except Exception as e:
                logger.warning(
                    "bulk_upload_image_skipped",
                    slug=product.slug,
                    filename=asset.filename,
                    error=str(e)
                )
        return urls


def split_options(enabled_options: str) -> list[str]:
    """Split a ";"-separated option id list, dropping empty tokens."""
    return [token.strip() for token in enabled_options.split(OPTIONS_SEPARATOR) if token.strip()]


def build_import_payload(
    product: ParsedProduct,
    image_urls: list[str],
    catalogs: ReferenceCatalogs
) -> ProductImportCreate:
    """Assemble the insert payload for one validated record."""
    category = catalogs.find_category(product.category_slug) if product.category_slug else None
    collection = catalogs.find_collection(product.collection_slug) if product.collection_slug else None

    return ProductImportCreate(
        name=product.name,
        sku=product.sku or None,
        slug=product.slug,
        description=product.description or None,
        long_description=product.long_description or None,
        category_id=category.id if category else None,
        collection_id=collection.id if collection else None,
        price=product.price,
        original_price=product.original_price,
        material=product.material or None,
        care_instructions=product.care_instructions or None,
        stock_quantity=product.stock_quantity,
        low_stock_threshold=product.low_stock_threshold,
        badge=product.badge or None,
        is_new_arrival=product.is_new_arrival,
        is_best_seller=product.is_best_seller,
        is_celebrity_special=product.is_celebrity_special,
        is_active=product.is_active,
        display_order=product.display_order,
        enabled_options=split_options(product.enabled_options),
        video_url=product.video_url or None,
        images=image_urls,
    )
