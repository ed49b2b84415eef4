"""
FastAPI Dependencies

Shared dependencies for dependency injection.
"""

import logging
from typing import Annotated
from fastapi import Depends, HTTPException

from analyzer.database import HouseholdLoader, get_loader
from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_household_loader(
    settings: Annotated[Settings, Depends(get_settings)]
) -> HouseholdLoader:
    """
    Get cached HouseholdLoader instance.

    The loader is created once per database URL and reused for all requests.
    """
    try:
        return get_loader(settings.database_url)
    except (ValueError, RuntimeError) as e:
        logger.error(f"Household store unavailable: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to connect to database: {str(e)}"
        )
