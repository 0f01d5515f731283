"""
Pytest configuration and fixtures.
"""
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from series_engine.db.database import Database


@pytest.fixture
def db(tmp_path):
    """Connected SQLite database with the cache and analysis tables."""
    database = Database(str(tmp_path / "test.db"))
    database.connect()
    database.ensure_cache_tables()
    database.ensure_analysis_tables()
    yield database
    database.close()
