"""
Reference catalog service.

Loads the categories, collections, and product options a bulk upload
validates against, as one immutable snapshot.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.catalog import (
    CategoryRef,
    CollectionRef,
    ProductOptionRef,
    ReferenceCatalogs,
)
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class CatalogService:
    """
    Read-only access to reference catalogs.

    Includes inactive categories/collections, as the admin screens do.
    """

    def __init__(self):
        self.db = get_supabase_client()

    def _select_ordered(self, table: str, columns: str) -> list[dict]:
        try:
            result = (
                self.db.table(table)
                .select(columns)
                .order("display_order")
                .execute()
            )
            return result.data or []
        except Exception as e:
            logger.error(
                "reference_catalog_query_failed",
                table=table,
                error=str(e)
            )
            raise DatabaseError("select", str(e), details={"table": table})

    def load_snapshot(self) -> ReferenceCatalogs:
        """
        Query all reference tables once.

        Returns:
            ReferenceCatalogs snapshot

        Raises:
            DatabaseError: If any query fails
        """
        categories = self._select_ordered("categories", "id, slug, name")
        collections = self._select_ordered("collections", "id, slug, name")
        options = self._select_ordered("product_options", "id, name")

        snapshot = ReferenceCatalogs(
            categories=tuple(CategoryRef(**row) for row in categories),
            collections=tuple(CollectionRef(**row) for row in collections),
            options=tuple(ProductOptionRef(**row) for row in options),
        )

        logger.info(
            "reference_catalogs_loaded",
            categories=len(snapshot.categories),
            collections=len(snapshot.collections),
            options=len(snapshot.options)
        )

        return snapshot


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
