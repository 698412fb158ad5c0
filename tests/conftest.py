"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator

from models.catalog import (
    CategoryRef,
    CollectionRef,
    ProductOptionRef,
    ReferenceCatalogs,
)

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None, inserted: list = None):
        self._data = data or []
        self._count = count
        self._error = error
        self._inserted = inserted

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        rows = []
        for item in data:
            row = dict(item)
            row["id"] = f"product-{len(self._inserted) + len(rows) + 1}" if self._inserted is not None else "test-uuid-123"
            row["created_at"] = datetime.now(timezone.utc).isoformat()
            rows.append(row)
        self._data = rows
        return self

    def eq(self, column, value):
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        if self._inserted is not None:
            self._inserted.extend(self._data)
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None, inserted: list = None):
        self._data = data or []
        self._count = count
        self._error = error
        self._inserted = inserted

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count, self._error)

    def insert(self, data):
        query = MockSupabaseQuery([], None, self._error, self._inserted)
        return query.insert(data)


class MockStorageBucket:
    """Mock storage bucket recording uploads."""

    def __init__(self, name: str, uploads: list, fail_attempts: set):
        self.name = name
        self._uploads = uploads
        self._fail_attempts = fail_attempts

    def upload(self, path, file, file_options=None):
        if len(self._uploads) + 1 in self._fail_attempts:
            self._uploads.append(None)
            raise RuntimeError("storage unavailable")
        self._uploads.append({"bucket": self.name, "path": path, "size": len(file), "options": file_options})
        return {"path": path}

    def get_public_url(self, path):
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"


class MockStorage:
    """Mock Supabase storage namespace."""

    def __init__(self):
        self.uploads: list = []
        # 1-based upload attempts that should raise
        self.fail_uploads: set[int] = set()

    def from_(self, bucket: str) -> MockStorageBucket:
        return MockStorageBucket(bucket, self.uploads, self.fail_uploads)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.inserted: dict[str, list] = {}
        self.storage = MockStorage()

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables.setdefault(table_name, {})
        self._tables[table_name].update({"data": data, "count": count})

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self._tables.setdefault(table_name, {"data": [], "count": None})
        self._tables[table_name]["error"] = error

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(
            config.get("data", []),
            config.get("count"),
            config.get("error"),
            self.inserted.setdefault(name, [])
        )


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("categories", [
                {"id": "1", "slug": "rings", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("categories", [...])
            # Now any service using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.catalog_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.product_service.get_supabase_client", return_value=mock_supabase):
                with patch("services.storage_service.get_supabase_client", return_value=mock_supabase):
                    yield mock_supabase


@pytest.fixture(autouse=True)
def reset_wizard_sessions():
    """Each test starts without open bulk upload sessions."""
    from services import wizard_service
    wizard_service._sessions.clear()
    yield
    wizard_service._sessions.clear()


@pytest.fixture
def sample_catalogs() -> ReferenceCatalogs:
    """Reference data snapshot used across tests."""
    return ReferenceCatalogs(
        categories=(
            CategoryRef(id="cat-rings", slug="rings", name="Rings"),
            CategoryRef(id="cat-necklaces", slug="necklaces", name="Necklaces"),
        ),
        collections=(
            CollectionRef(id="col-bridal", slug="bridal", name="Bridal"),
        ),
        options=(
            ProductOptionRef(id="opt-size", name="Ring Size"),
            ProductOptionRef(id="opt-engraving", name="Engraving"),
        ),
    )


@pytest.fixture
def sample_catalog_rows() -> dict[str, list[dict]]:
    """Raw table rows matching sample_catalogs."""
    return {
        "categories": [
            {"id": "cat-rings", "slug": "rings", "name": "Rings", "display_order": 1, "is_active": True},
            {"id": "cat-necklaces", "slug": "necklaces", "name": "Necklaces", "display_order": 2, "is_active": False},
        ],
        "collections": [
            {"id": "col-bridal", "slug": "bridal", "name": "Bridal", "display_order": 1},
        ],
        "product_options": [
            {"id": "opt-size", "name": "Ring Size", "type": "select", "display_order": 1},
            {"id": "opt-engraving", "name": "Engraving", "type": "text", "display_order": 2},
        ],
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db, mock_supabase, sample_catalog_rows):
    """
    Create FastAPI test client with mocked database.

    Reference tables are pre-loaded from sample_catalog_rows.
    """
    from fastapi.testclient import TestClient
    from main import app
    from services import catalog_service, product_service, storage_service

    for table, rows in sample_catalog_rows.items():
        mock_supabase.set_table_data(table, rows)

    # Singletons may hold a client from an earlier test
    catalog_service._catalog_service = None
    product_service._product_service = None
    storage_service._storage_service = None

    yield TestClient(app)

    catalog_service._catalog_service = None
    product_service._product_service = None
    storage_service._storage_service = None
