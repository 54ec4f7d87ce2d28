import pytest

from sarasva.stores import open_stores


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_sarasva.db")
    return db_path


@pytest.fixture
def stores(tmp_db):
    """Stores for a single test user on a fresh database."""
    return open_stores(tmp_db, "student")
