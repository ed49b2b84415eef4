"""
Database connection and household loading.

Reads households and their members from the application's data store.

Tables:
- households: id, name, move_date, household_size, old_address,
  new_address, parent_household_id
- household_members: household_id, name, email, role
"""

import os
import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd
from sqlalchemy import create_engine, text, inspect

from .models import Household, HouseholdMember

logger = logging.getLogger(__name__)


def _records(df: pd.DataFrame) -> List[dict]:
    """DataFrame rows as dicts with nulls mapped to None"""
    if df.empty:
        return []
    return df.astype(object).where(pd.notna(df), None).to_dict(orient='records')


class HouseholdLoader:
    """
    Loads households from database.

    Members are optional: a missing members table yields households
    without members.
    """

    HOUSEHOLDS_TABLE = 'households'
    MEMBERS_TABLE = 'household_members'

    def __init__(self, connection_string: Optional[str] = None):
        """
        Initialize database connection.

        Args:
            connection_string: SQLAlchemy connection string.
                              If None, uses DATABASE_URL environment variable.
        """
        if connection_string is None:
            connection_string = os.getenv('DATABASE_URL')
            if not connection_string:
                raise ValueError(
                    "No database connection string provided. "
                    "Set DATABASE_URL environment variable or pass connection_string."
                )

        self.connection_string = connection_string
        self.engine = create_engine(connection_string)
        self._verify_connection()
        logger.info("Database connection established")

    def _verify_connection(self):
        """Verify database connection works"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            raise RuntimeError(f"Failed to connect to database: {e}")

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in database"""
        inspector = inspect(self.engine)
        return table_name in inspector.get_table_names()

    def _load_table(self, table_name: str) -> pd.DataFrame:
        """Load a single table from database"""
        return pd.read_sql_table(table_name, self.engine)

    def load_households(self, household_ids: Optional[Iterable[str]] = None) -> List[Household]:
        """
        Load households with their members.

        Args:
            household_ids: Restrict to these ids. If None, loads all households.

        Returns:
            List of Household objects in table order
        """
        if not self.table_exists(self.HOUSEHOLDS_TABLE):
            raise ValueError(f"Table '{self.HOUSEHOLDS_TABLE}' not found")

        households_df = self._load_table(self.HOUSEHOLDS_TABLE)
        households_df['id'] = households_df['id'].astype(str)

        if household_ids is not None:
            wanted = {str(i) for i in household_ids}
            households_df = households_df[households_df['id'].isin(wanted)]

        members_by_household: Dict[str, List[HouseholdMember]] = {}
        if self.table_exists(self.MEMBERS_TABLE):
            members_df = self._load_table(self.MEMBERS_TABLE)
            for row in _records(members_df):
                members_by_household.setdefault(str(row['household_id']), []).append(
                    HouseholdMember.from_dict(row)
                )
        else:
            logger.warning(f"Table '{self.MEMBERS_TABLE}' not found, loading households without members")

        households = []
        for row in _records(households_df):
            row['members'] = members_by_household.get(row['id'], [])
            households.append(Household.from_dict(row))

        logger.info(f"Loaded {len(households)} households")
        return households


# Global cached loader instance
_loader_cache: Dict[str, HouseholdLoader] = {}


def get_loader(connection_string: Optional[str] = None) -> HouseholdLoader:
    """
    Get a cached HouseholdLoader instance.

    Args:
        connection_string: Database connection string

    Returns:
        Cached HouseholdLoader instance
    """
    cache_key = connection_string or os.getenv('DATABASE_URL', 'default')

    if cache_key not in _loader_cache:
        _loader_cache[cache_key] = HouseholdLoader(connection_string)

    return _loader_cache[cache_key]
