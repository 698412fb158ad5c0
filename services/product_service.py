"""
Product service for catalog writes.

Only the insert used by bulk upload lives here; the admin CRUD screens
talk to the store directly.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.bulk_upload import ProductImportCreate
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product business logic.

    Handles creating products from imported rows.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    def create_from_import(self, data: ProductImportCreate) -> str:
        """
        Insert one product built from a CSV row.

        Args:
            data: Fully assembled product fields (ids resolved, image URLs set)

        Returns:
            Created product id

        Raises:
            DatabaseError: If the insert fails (duplicate slug, constraint, ...)
        """
        logger.info("creating_product", slug=data.slug, sku=data.sku)

        insert_data = data.model_dump(mode="json")

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )
        except Exception as e:
            logger.error(
                "create_product_failed",
                slug=data.slug,
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"slug": data.slug})

        if not result.data:
            raise DatabaseError("insert", "no row returned", details={"slug": data.slug})

        product_id = str(result.data[0]["id"])

        logger.info(
            "product_created",
            product_id=product_id,
            slug=data.slug,
            images=len(data.images)
        )

        return product_id


# Singleton instance for convenience
_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
