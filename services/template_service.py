"""
Bulk upload CSV template.

Header row, one example row, and "#" comment lines listing the current
reference data. The tokenizer drops the comment lines on re-upload.
"""

from models.catalog import ReferenceCatalogs
from parsers.csv_tokenizer import quote_field
from parsers.product_csv_parser import REQUIRED_COLUMNS, BADGE_VALUES

TEMPLATE_FILENAME = "product_bulk_upload_template.csv"


def generate_template(catalogs: ReferenceCatalogs) -> str:
    """
    Build the downloadable template.

    Args:
        catalogs: Reference data to embed as example values and comments

    Returns:
        CSV text
    """
    category_slug = catalogs.categories[0].slug if catalogs.categories else "category-slug"
    collection_slug = catalogs.collections[0].slug if catalogs.collections else "collection-slug"

    example_row = [
        "Example Product Name",
        "SKU-001",
        "example-product-name",
        "Short description of the product",
        "Detailed long description with all product information",
        category_slug,
        collection_slug,
        "1999",
        "2499",
        "Cotton",
        "Hand wash only",
        "100",
        "10",
        "new",
        "true",
        "false",
        "false",
        "true",
        "1",
        ";".join(catalogs.option_ids()),
        "",
    ]

    lines = [
        ",".join(REQUIRED_COLUMNS),
        ",".join(quote_field(v) for v in example_row),
        "",
        "# REFERENCE DATA (Delete these lines before uploading)",
        "# Categories: " + ", ".join(c.slug for c in catalogs.categories),
        "# Collections: " + ", ".join(c.slug for c in catalogs.collections),
        "# Product Options (IDs): " + ", ".join(f"{o.name}: {o.id}" for o in catalogs.options),
        f"# Badge values: {', '.join(BADGE_VALUES)} (or leave empty)",
        "# Boolean values: true or false",
        "# enabled_options: semicolon-separated option IDs",
    ]

    return "\n".join(lines) + "\n"
