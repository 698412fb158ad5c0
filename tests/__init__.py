"""
Test suite for Catalog Bulk Import.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_product_csv_parser.py -v
"""
