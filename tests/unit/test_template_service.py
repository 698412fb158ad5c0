"""
Unit tests for the CSV template generator.
"""

from models.catalog import ReferenceCatalogs
from parsers.csv_tokenizer import tokenize_csv
from parsers.product_csv_parser import REQUIRED_COLUMNS, parse_product_csv
from services.template_service import generate_template


class TestGenerateTemplate:
    """Tests for generate_template()"""

    def test_tokenizes_to_header_and_example(self, sample_catalogs):
        """Should leave only the header and example row once comments are dropped."""
        rows = tokenize_csv(generate_template(sample_catalogs))

        assert len(rows) == 2
        assert rows[0].fields == REQUIRED_COLUMNS
        assert len(rows[1].fields) == len(REQUIRED_COLUMNS)

    def test_example_row_is_valid(self, sample_catalogs):
        """Should produce a file that parses to one valid product."""
        # Act
        content = generate_template(sample_catalogs).encode("utf-8")
        result = parse_product_csv(content, sample_catalogs)

        # Assert
        assert result.valid_count == 1
        product = result.products[0]
        assert product.category_slug == "rings"
        assert product.collection_slug == "bridal"
        assert product.enabled_options == "opt-size;opt-engraving"

    def test_lists_reference_data(self, sample_catalogs):
        text = generate_template(sample_catalogs)

        assert "# Categories: rings, necklaces" in text
        assert "# Collections: bridal" in text
        assert "Ring Size: opt-size" in text

    def test_empty_catalogs_use_placeholders(self):
        """Should fall back to placeholder slugs without reference data."""
        rows = tokenize_csv(generate_template(ReferenceCatalogs()))

        example = dict(zip(rows[0].fields, rows[1].fields))
        assert example["category_slug"] == "category-slug"
        assert example["collection_slug"] == "collection-slug"
        assert example["enabled_options"] == ""
