"""
Reference catalog schemas.

A ReferenceCatalogs instance is a read-only snapshot of the categories,
collections, and product options that exist when a bulk upload session
opens. Validation and upload both resolve slugs against the same snapshot.
"""

from pydantic import ConfigDict, Field
from typing import Optional

from models.base import BaseSchema


class CategoryRef(BaseSchema):
    """Category as seen by the importer."""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    id: str
    slug: str
    name: str = ""


class CollectionRef(BaseSchema):
    """Collection as seen by the importer."""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    id: str
    slug: str
    name: str = ""


class ProductOptionRef(BaseSchema):
    """Selectable product option (size, engraving, ...)."""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    id: str
    name: str


class ReferenceCatalogs(BaseSchema):
    """
    Immutable snapshot of reference data for one import session.

    Lists keep the store's display order; lookups are by exact slug.
    """

    model_config = ConfigDict(frozen=True)

    categories: tuple[CategoryRef, ...] = Field(default_factory=tuple)
    collections: tuple[CollectionRef, ...] = Field(default_factory=tuple)
    options: tuple[ProductOptionRef, ...] = Field(default_factory=tuple)

    def find_category(self, slug: str) -> Optional[CategoryRef]:
        return next((c for c in self.categories if c.slug == slug), None)

    def find_collection(self, slug: str) -> Optional[CollectionRef]:
        return next((c for c in self.collections if c.slug == slug), None)

    def option_ids(self) -> list[str]:
        return [o.id for o in self.options]
