"""
Image matcher for bulk uploads.

Links loose image files to parsed products by filename:

    rose-ring_1.webp  -> token "rose-ring"
    SKU-001_2.webp    -> token "SKU-001"
    necklace.webp     -> token "necklace"

A token first matches a product whose slug or SKU equals it (case-insensitive).
Only if none does, a containment match in either direction is tried.
The first product in row order wins in both passes.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional
import structlog

from config import settings
from exceptions import ImageNotFoundError
from parsers.product_csv_parser import ParsedProduct

logger = structlog.get_logger(__name__)

INDEX_SEPARATOR = "_"


@dataclass
class ImageAsset:
    """One uploaded image file."""
    filename: str
    content: bytes
    content_type: Optional[str] = None
    token: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class ImageMatchSummary:
    """Counts for one batch of image files."""
    matched: int = 0
    unmatched: int = 0
    rejected: int = 0
    total_matched: int = 0


class MatchedImageSet:
    """
    Pending images per product slug.

    List order is upload order and becomes the product's image order.
    """

    def __init__(self):
        self._images: dict[str, list[ImageAsset]] = {}

    def add(self, slug: str, asset: ImageAsset) -> None:
        self._images.setdefault(slug, []).append(asset)

    def get(self, slug: str) -> list[ImageAsset]:
        return list(self._images.get(slug, []))

    def remove(self, slug: str, index: int) -> ImageAsset:
        """
        Drop one pending image; the others keep their order.

        Raises:
            ImageNotFoundError: If nothing is pending at (slug, index)
        """
        assets = self._images.get(slug)
        if not assets or not 0 <= index < len(assets):
            raise ImageNotFoundError(slug, index)

        removed = assets.pop(index)
        if not assets:
            del self._images[slug]
        return removed

    def slugs(self) -> list[str]:
        return list(self._images)

    @property
    def total(self) -> int:
        return sum(len(assets) for assets in self._images.values())

    def __contains__(self, slug: str) -> bool:
        return slug in self._images

    def __len__(self) -> int:
        return len(self._images)


class ImageMatcherService:
    """Validates image files and attaches them to products."""

    def __init__(
        self,
        allowed_extension: Optional[str] = None,
        allowed_content_type: Optional[str] = None,
        max_size_bytes: Optional[int] = None
    ):
        self.allowed_extension = (allowed_extension or settings.image_allowed_extension).lower()
        self.allowed_content_type = allowed_content_type or settings.image_allowed_content_type
        self.max_size_bytes = max_size_bytes or settings.image_max_size_bytes

    # ===================
    # VALIDATION
    # ===================

    def validate_asset(self, asset: ImageAsset) -> Optional[str]:
        """
        Check encoding and size.

        Returns:
            Rejection reason, or None if the asset is acceptable
        """
        type_ok = asset.content_type == self.allowed_content_type
        extension_ok = asset.filename.lower().endswith(self.allowed_extension)
        if not (type_ok or extension_ok):
            return "unsupported_format"
        if asset.size > self.max_size_bytes:
            return "too_large"
        return None

    # ===================
    # MATCHING
    # ===================

    def derive_token(self, filename: str) -> str:
        """
        Product identifier encoded in a filename.

        Strips the accepted extension and the trailing "_<index>" segment.
        """
        stem = filename
        if stem.lower().endswith(self.allowed_extension):
            stem = stem[:-len(self.allowed_extension)]

        parts = stem.split(INDEX_SEPARATOR)
        return INDEX_SEPARATOR.join(parts[:-1]) or stem

    def find_product(
        self,
        token: str,
        products: list[ParsedProduct]
    ) -> Optional[ParsedProduct]:
        """Exact slug/SKU match first, then containment either way."""
        needle = token.lower()
        if not needle:
            return None

        for product in products:
            if needle in _identifiers(product):
                return product

        for product in products:
            for identifier in _identifiers(product):
                if identifier in needle or needle in identifier:
                    return product

        return None

    def match_images(
        self,
        assets: Iterable[ImageAsset],
        products: list[ParsedProduct],
        existing: Optional[MatchedImageSet] = None
    ) -> tuple[MatchedImageSet, ImageMatchSummary]:
        """
        Attach a batch of image files to products.

        Args:
            assets: Uploaded files in upload order
            products: Parsed products (valid or not) in row order
            existing: Images matched by earlier batches; extended in place

        Returns:
            (image set, batch summary)
        """
        images = existing if existing is not None else MatchedImageSet()
        summary = ImageMatchSummary()

        for asset in assets:
            reason = self.validate_asset(asset)
            if reason:
                summary.rejected += 1
                logger.debug("image_rejected", filename=asset.filename, reason=reason)
                continue

            asset.token = self.derive_token(asset.filename)
            product = self.find_product(asset.token, products)
            if product is None:
                summary.unmatched += 1
                logger.debug("image_unmatched", filename=asset.filename, token=asset.token)
                continue

            images.add(product.slug, asset)
            summary.matched += 1

        summary.total_matched = images.total

        logger.info(
            "images_matched",
            matched=summary.matched,
            unmatched=summary.unmatched,
            rejected=summary.rejected,
            total_matched=summary.total_matched
        )

        return images, summary


def _identifiers(product: ParsedProduct) -> list[str]:
    """Lower-cased non-empty slug and SKU."""
    return [value.lower() for value in (product.slug, product.sku) if value]


_image_matcher_service: Optional[ImageMatcherService] = None


def get_image_matcher_service() -> ImageMatcherService:
    """Get or create ImageMatcherService instance."""
    global _image_matcher_service
    if _image_matcher_service is None:
        _image_matcher_service = ImageMatcherService()
    return _image_matcher_service
