"""
Tests for loading households from the database.
"""

import pytest

from analyzer.database import HouseholdLoader, get_loader


def test_load_all_households(database_url):
    loader = HouseholdLoader(database_url)

    households = loader.load_households()

    assert [h.id for h in households] == ['A', 'B', 'C']
    assert households[0].name == 'Familie Müller'
    assert households[0].household_size == 4
    assert households[2].old_address is None
    assert [m.name for m in households[0].members] == ['Anna Müller']
    assert households[1].member_emails() == ['anna@example.com']


def test_load_selected_households(database_url):
    loader = HouseholdLoader(database_url)

    households = loader.load_households(['C', 'A'])

    assert [h.id for h in households] == ['A', 'C']


def test_missing_members_table(tmp_path):
    import pandas as pd
    from sqlalchemy import create_engine

    url = f"sqlite:///{tmp_path / 'bare.db'}"
    engine = create_engine(url)
    pd.DataFrame({
        'id': ['A'], 'name': ['Solo'], 'move_date': ['2025-06-10'], 'household_size': [1]
    }).to_sql('households', engine, index=False)
    engine.dispose()

    households = HouseholdLoader(url).load_households()

    assert len(households) == 1
    assert households[0].members == []


def test_missing_households_table(tmp_path):
    loader = HouseholdLoader(f"sqlite:///{tmp_path / 'empty.db'}")

    with pytest.raises(ValueError):
        loader.load_households()


def test_requires_connection_string(monkeypatch):
    monkeypatch.delenv('DATABASE_URL', raising=False)

    with pytest.raises(ValueError):
        HouseholdLoader()


def test_unreachable_database():
    with pytest.raises(RuntimeError):
        HouseholdLoader("sqlite:////nonexistent-dir/households.db")


def test_get_loader_is_cached(database_url):
    assert get_loader(database_url) is get_loader(database_url)
