"""
CSV parsers module.

Tokenizer plus the product record builder/validator for bulk uploads.
"""

from parsers.csv_tokenizer import (
    RawRow,
    read_csv_text,
    tokenize_csv,
    quote_field,
)
from parsers.product_csv_parser import (
    REQUIRED_COLUMNS,
    ParsedProduct,
    ProductParseResult,
    parse_product_csv,
    parse_product_rows,
    build_product,
)

__all__ = [
    "RawRow",
    "read_csv_text",
    "tokenize_csv",
    "quote_field",
    "REQUIRED_COLUMNS",
    "ParsedProduct",
    "ProductParseResult",
    "parse_product_csv",
    "parse_product_rows",
    "build_product",
]
