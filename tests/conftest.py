"""
Pytest fixtures for analyzer and API testing.
"""

import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
import pandas as pd
from sqlalchemy import create_engine

# api.main reads settings on import; DATABASE_URL has no default
os.environ.setdefault("DATABASE_URL", "sqlite://")

from analyzer.models import Household, HouseholdMember
from api.config import Settings


# Fixed reference time for the upcoming-moves check
NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_household():
    """
    Factory for households with sensible defaults.
    """
    def _make(id, move_date, name=None, size=2, old_address=None, new_address=None, emails=()):
        return Household(
            id=id,
            name=name or f"Haushalt {id}",
            move_date=move_date,
            household_size=size,
            old_address=old_address,
            new_address=new_address,
            members=[HouseholdMember(name=f"Mitglied {e}", email=e) for e in emails]
        )
    return _make


@pytest.fixture
def database_url(tmp_path):
    """
    SQLite database with households and household_members tables.
    """
    url = f"sqlite:///{tmp_path / 'households.db'}"
    engine = create_engine(url)

    pd.DataFrame({
        'id': ['A', 'B', 'C'],
        'name': ['Familie Müller', 'WG Schmidt', 'Familie Weber'],
        'move_date': ['2025-06-10', '2025-06-10', '2025-08-20'],
        'household_size': [4, 3, 2],
        'old_address': ['Hauptstraße 5', 'Main St 1', None],
        'new_address': ['Main St 1', 'Bahnhofstraße 9', 'Gartenweg 3'],
    }).to_sql('households', engine, index=False)

    pd.DataFrame({
        'household_id': ['A', 'B', 'C'],
        'name': ['Anna Müller', 'Anna M.', 'Jonas Weber'],
        'email': ['anna@example.com', 'ANNA@example.com', 'jonas@example.com'],
        'role': ['owner', 'member', 'owner'],
    }).to_sql('household_members', engine, index=False)

    engine.dispose()
    return url


@pytest.fixture
def client(database_url):
    """
    FastAPI test client.
    """
    # Override settings
    from api.main import app
    from api.dependencies import get_settings

    def get_settings_override():
        return Settings(
            database_url=database_url,
            debug=True,
            max_households_per_request=10
        )

    app.dependency_overrides[get_settings] = get_settings_override

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
