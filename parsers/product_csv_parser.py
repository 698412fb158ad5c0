"""
Product CSV parser for bulk uploads.

Maps tokenized rows onto ParsedProduct records using the header row,
and validates each record against static rules and a ReferenceCatalogs
snapshot.

Missing header columns reject the whole file. Everything else is a
row-level error: collected on the record, never raised, and the record is
kept so the review table can show it.
"""

from dataclasses import dataclass, field
from typing import Optional
import math
import structlog

from exceptions import CSVParseError, MissingColumnsError
from models.bulk_upload import Badge
from models.catalog import ReferenceCatalogs
from parsers.csv_tokenizer import RawRow, read_csv_text, tokenize_csv
from utils.text_utils import slugify, parse_bool

logger = structlog.get_logger(__name__)


REQUIRED_COLUMNS = [
    "name",
    "sku",
    "slug",
    "description",
    "long_description",
    "category_slug",
    "collection_slug",
    "price",
    "original_price",
    "material",
    "care_instructions",
    "stock_quantity",
    "low_stock_threshold",
    "badge",
    "is_new_arrival",
    "is_best_seller",
    "is_celebrity_special",
    "is_active",
    "display_order",
    "enabled_options",
    "video_url",
]

BADGE_VALUES = [b.value for b in Badge]

DEFAULT_STOCK_QUANTITY = 0
DEFAULT_LOW_STOCK_THRESHOLD = 5
DEFAULT_DISPLAY_ORDER = 0


@dataclass
class ParsedProduct:
    """One CSV data row, typed and validated."""
    row: int
    name: str
    sku: str
    slug: str
    description: str = ""
    long_description: str = ""
    category_slug: str = ""
    collection_slug: str = ""
    price: Optional[float] = None
    original_price: Optional[float] = None
    material: str = ""
    care_instructions: str = ""
    stock_quantity: int = DEFAULT_STOCK_QUANTITY
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    badge: str = ""
    is_new_arrival: bool = False
    is_best_seller: bool = False
    is_celebrity_special: bool = False
    is_active: bool = True
    display_order: int = DEFAULT_DISPLAY_ORDER
    enabled_options: str = ""
    video_url: str = ""
    errors: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)

    @property
    def is_eligible(self) -> bool:
        """True if the record may be uploaded."""
        return len(self.errors) == 0


@dataclass
class ProductParseResult:
    """Result of parsing a product CSV."""
    headers: list[str] = field(default_factory=list)
    products: list[ParsedProduct] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for p in self.products if p.is_eligible)

    @property
    def error_count(self) -> int:
        return sum(1 for p in self.products if not p.is_eligible)

    def eligible(self) -> list[ParsedProduct]:
        """Error-free products in row order."""
        return [p for p in self.products if p.is_eligible]


def parse_product_csv(content: bytes, catalogs: ReferenceCatalogs) -> ProductParseResult:
    """
    Parse an uploaded product CSV file.

    Args:
        content: Raw file bytes
        catalogs: Reference data snapshot for slug validation

    Returns:
        ProductParseResult with every data row (valid or not)

    Raises:
        CSVParseError: If the file is not UTF-8 or has no header row
        MissingColumnsError: If required columns are absent
    """
    text = read_csv_text(content)
    return parse_product_rows(tokenize_csv(text), catalogs)


def parse_product_rows(rows: list[RawRow], catalogs: ReferenceCatalogs) -> ProductParseResult:
    """
    Build products from tokenized rows (comments already removed).

    The first row is the header. Column names are matched trimmed and
    case-insensitive; extra columns are ignored.
    """
    if not rows:
        raise CSVParseError(message="CSV file has no header row")

    headers = [h.strip().lower() for h in rows[0].fields]
    missing = [col for col in REQUIRED_COLUMNS if col not in headers]
    if missing:
        logger.warning("csv_missing_columns", missing=missing)
        raise MissingColumnsError(missing)

    header_index = _build_header_index(headers)
    result = ProductParseResult(headers=headers)

    for row in rows[1:]:
        product, errors = build_product(row, header_index, catalogs)
        if errors:
            logger.debug("csv_row_invalid", row=product.row, errors=errors)
        result.products.append(product)

    logger.info(
        "product_csv_parsed",
        rows=len(result.products),
        valid=result.valid_count,
        invalid=result.error_count
    )

    return result


def build_product(
    row: RawRow,
    header_index: dict[str, int],
    catalogs: ReferenceCatalogs
) -> tuple[ParsedProduct, list[str]]:
    """
    Map and validate a single data row.

    Pure: the same row, header, and catalogs always give the same
    record and errors. All applicable errors are collected.

    Returns:
        (product, errors) - errors is also stored on product.errors
    """
    def value(column: str) -> str:
        idx = header_index.get(column)
        return row.get(idx).strip() if idx is not None else ""

    errors: list[str] = []

    name = value("name")
    slug = value("slug") or slugify(name)

    if not name:
        errors.append("Name is required")
    elif not slug:
        errors.append("Slug could not be derived from name")

    price = _parse_float(value("price"))
    if price is None or price <= 0:
        errors.append("Valid price is required")

    category_slug = value("category_slug")
    if category_slug and catalogs.find_category(category_slug) is None:
        errors.append(f'Category "{category_slug}" not found')

    collection_slug = value("collection_slug")
    if collection_slug and catalogs.find_collection(collection_slug) is None:
        errors.append(f'Collection "{collection_slug}" not found')

    badge = value("badge").lower()
    if badge and badge not in BADGE_VALUES:
        errors.append(f"Badge must be: {', '.join(BADGE_VALUES)}, or empty")

    product = ParsedProduct(
        row=row.line,
        name=name,
        sku=value("sku"),
        slug=slug,
        description=value("description"),
        long_description=value("long_description"),
        category_slug=category_slug,
        collection_slug=collection_slug,
        price=price,
        original_price=_parse_float(value("original_price")),
        material=value("material"),
        care_instructions=value("care_instructions"),
        stock_quantity=_parse_int(value("stock_quantity"), DEFAULT_STOCK_QUANTITY),
        low_stock_threshold=_parse_int(value("low_stock_threshold"), DEFAULT_LOW_STOCK_THRESHOLD),
        badge=badge,
        is_new_arrival=parse_bool(value("is_new_arrival")),
        is_best_seller=parse_bool(value("is_best_seller")),
        is_celebrity_special=parse_bool(value("is_celebrity_special")),
        is_active=parse_bool(value("is_active"), default=True),
        display_order=_parse_int(value("display_order"), DEFAULT_DISPLAY_ORDER),
        enabled_options=value("enabled_options"),
        video_url=value("video_url"),
        errors=errors,
    )

    return product, errors


# ===================
# HELPER FUNCTIONS
# ===================

def _build_header_index(headers: list[str]) -> dict[str, int]:
    """Map column name to position; the first occurrence wins."""
    index: dict[str, int] = {}
    for position, name in enumerate(headers):
        index.setdefault(name, position)
    return index


def _parse_float(value: str) -> Optional[float]:
    """Parse a finite number, or None."""
    if not value:
        return None
    try:
        num = float(value)
    except ValueError:
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def _parse_int(value: str, default: int) -> int:
    """Parse an integer ("12" or "12.0"), or return default."""
    num = _parse_float(value)
    if num is None:
        return default
    return int(num)
