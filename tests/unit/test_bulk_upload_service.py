"""
Unit tests for BulkUploadService.

Run: pytest tests/unit/test_bulk_upload_service.py -v
"""

import pytest
from unittest.mock import MagicMock

from services.bulk_upload_service import (
    BulkUploadService,
    UploadProgress,
    build_import_payload,
    split_options,
)
from services.image_matcher_service import MatchedImageSet
from models.bulk_upload import Badge
from models.wizard import UploadStatus
from exceptions import DatabaseError, NoEligibleProductsError, StorageError

from tests.factories import ParsedProductFactory, make_webp


@pytest.fixture
def storage():
    mock = MagicMock()
    mock.upload_image.return_value = "https://cdn.test/image.webp"
    return mock


@pytest.fixture
def product_writer():
    mock = MagicMock()
    mock.create_from_import.side_effect = lambda data: f"id-{data.slug}"
    return mock


@pytest.fixture
def service(storage, product_writer) -> BulkUploadService:
    return BulkUploadService(storage=storage, products=product_writer)


class TestUploadProducts:
    """Tests for BulkUploadService.upload_products()"""

    def test_uploads_only_eligible_in_row_order(self, service, product_writer, sample_catalogs):
        """Should skip records with errors and keep row order."""
        # Arrange
        products = [
            ParsedProductFactory.create(slug="a", row=2),
            ParsedProductFactory.create(slug="b", row=3, errors=["Valid price is required"]),
            ParsedProductFactory.create(slug="c", row=4),
        ]

        # Act
        summary = service.upload_products(products, MatchedImageSet(), sample_catalogs)

        # Assert
        assert summary.succeeded == 2
        assert summary.failed == 0
        assert [o.slug for o in summary.outcomes] == ["a", "c"]
        assert [o.product_id for o in summary.outcomes] == ["id-a", "id-c"]
        slugs = [c.args[0].slug for c in product_writer.create_from_import.call_args_list]
        assert slugs == ["a", "c"]

    def test_failed_insert_does_not_stop_run(self, service, product_writer, sample_catalogs):
        """Should record one failure and keep going."""
        # Arrange
        products = [ParsedProductFactory.create(slug=s) for s in ("a", "b", "c")]
        product_writer.create_from_import.side_effect = [
            "id-a",
            DatabaseError("insert", "duplicate key value violates unique constraint"),
            "id-c",
        ]
        progress = UploadProgress()
        seen = []

        # Act
        summary = service.upload_products(
            products,
            MatchedImageSet(),
            sample_catalogs,
            progress=progress,
            on_progress=lambda p: seen.append(p.current),
        )

        # Assert
        assert summary.succeeded == 2
        assert summary.failed == 1
        assert summary.outcomes[1].success is False
        assert "duplicate key" in summary.outcomes[1].error
        assert progress.current == 3
        assert progress.total == 3
        assert progress.status == UploadStatus.COMPLETE
        assert seen == [1, 2, 3]

    def test_failed_image_is_skipped(self, service, storage, sample_catalogs):
        """Should create the product with the images that did upload."""
        # Arrange
        product = ParsedProductFactory.create(slug="rose-ring")
        images = MatchedImageSet()
        images.add("rose-ring", make_webp("rose-ring_1.webp"))
        images.add("rose-ring", make_webp("rose-ring_2.webp"))
        storage.upload_image.side_effect = [StorageError("x.webp", "timeout"), "https://cdn.test/2.webp"]

        # Act
        summary = service.upload_products([product], images, sample_catalogs)

        # Assert
        outcome = summary.outcomes[0]
        assert outcome.success is True
        assert outcome.image_urls == ["https://cdn.test/2.webp"]

    def test_images_keep_upload_order(self, service, storage, product_writer, sample_catalogs):
        """Should pass image URLs in the order the files were matched."""
        # Arrange
        product = ParsedProductFactory.create(slug="rose-ring")
        images = MatchedImageSet()
        for name in ("rose-ring_2.webp", "rose-ring_1.webp"):
            images.add("rose-ring", make_webp(name))
        storage.upload_image.side_effect = ["u-first", "u-second"]

        # Act
        service.upload_products([product], images, sample_catalogs)

        # Assert
        payload = product_writer.create_from_import.call_args.args[0]
        assert payload.images == ["u-first", "u-second"]

    def test_no_eligible_products_raises(self, service, product_writer, sample_catalogs):
        """Should refuse to start when every record has errors."""
        products = [ParsedProductFactory.create(errors=["Name is required"])]

        with pytest.raises(NoEligibleProductsError) as exc_info:
            service.upload_products(products, MatchedImageSet(), sample_catalogs)

        assert exc_info.value.message == "No valid products to upload"
        product_writer.create_from_import.assert_not_called()

    def test_empty_list_raises(self, service, sample_catalogs):
        with pytest.raises(NoEligibleProductsError):
            service.upload_products([], MatchedImageSet(), sample_catalogs)


class TestBuildImportPayload:
    """Tests for build_import_payload()"""

    def test_resolves_reference_ids(self, sample_catalogs):
        """Should map slugs to ids from the snapshot."""
        product = ParsedProductFactory.create(slug="rose-ring", category_slug="rings", collection_slug="bridal")

        payload = build_import_payload(product, [], sample_catalogs)

        assert payload.category_id == "cat-rings"
        assert payload.collection_id == "col-bridal"

    def test_blank_text_becomes_none(self, sample_catalogs):
        product = ParsedProductFactory.create(sku="", description="", video_url="")

        payload = build_import_payload(product, [], sample_catalogs)

        assert payload.sku is None
        assert payload.description is None
        assert payload.video_url is None
        assert payload.category_id is None
        assert payload.badge is None

    def test_copies_flags_and_numbers(self, sample_catalogs):
        product = ParsedProductFactory.create(
            price=49.5,
            badge="sale",
            is_best_seller=True,
            is_active=False,
            stock_quantity=7,
            enabled_options="opt-size; opt-engraving;",
        )

        payload = build_import_payload(product, ["https://cdn.test/1.webp"], sample_catalogs)

        assert payload.price == 49.5
        assert payload.badge == Badge.SALE
        assert payload.is_best_seller is True
        assert payload.is_active is False
        assert payload.stock_quantity == 7
        assert payload.enabled_options == ["opt-size", "opt-engraving"]
        assert payload.images == ["https://cdn.test/1.webp"]
        assert payload.has_addons is False


class TestSplitOptions:
    """Tests for split_options()"""

    @pytest.mark.parametrize("value,expected", [
        ("", []),
        ("a", ["a"]),
        ("a;b", ["a", "b"]),
        (" a ; ;b;", ["a", "b"]),
    ])
    def test_split_options(self, value, expected):
        assert split_options(value) == expected
