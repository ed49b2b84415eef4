"""
Health check and system status endpoints.
"""

from typing import Annotated
from fastapi import APIRouter, Depends

from ..models import HealthResponse
from ..config import Settings, get_settings
from analyzer.database import get_loader


router = APIRouter(
    prefix="/api/v1",
    tags=["health"]
)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)]
):
    """
    Health check endpoint.

    Returns the health status of the API and database connection.
    Analysis of posted households works without a database.
    """
    try:
        loader = get_loader(settings.database_url)
        loader._verify_connection()

        return HealthResponse(
            status="healthy",
            version=settings.app_version,
            database="connected"
        )
    except Exception as e:
        return HealthResponse(
            status="unhealthy",
            version=settings.app_version,
            database=f"disconnected: {str(e)}"
        )
