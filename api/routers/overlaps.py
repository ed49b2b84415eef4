"""
Household overlap endpoints.
"""

import logging
from datetime import datetime
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ..models import (
    AnalyzeOverlapsRequest,
    OverlapAnalysisResponse,
    ResolveOverlapRequest,
    ResolveOverlapResponse,
    TimelineRequest,
    TimelineResponse,
)
from ..dependencies import get_household_loader, get_settings
from ..config import Settings
from analyzer.analysis import OverlapAnalyzer, generate_overlap_summary
from analyzer.database import HouseholdLoader
from analyzer.resolution import select_households, resolve_overlap
from analyzer.timeline import build_timeline

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/api/v1/overlaps",
    tags=["overlaps"]
)


def _check_limit(count: int, settings: Settings):
    if count > settings.max_households_per_request:
        raise HTTPException(
            status_code=400,
            detail=f"Household count exceeds maximum of {settings.max_households_per_request} per request"
        )


@router.post("/analyze", response_model=OverlapAnalysisResponse)
async def analyze_overlaps(
    request: AnalyzeOverlapsRequest,
    settings: Annotated[Settings, Depends(get_settings)]
):
    """
    Analyze posted households for overlaps.

    ## Checks (in this order)

    - **move_date_conflict**: neighbouring move dates on the same day (critical)
      or less than 3 days apart (high)
    - **address_overlap**: one household moves into the address another leaves
    - **member_duplicate**: the same member email in several households
    - **timeline_conflict**: more than 2 moves within the next 30 days
    - **resource_conflict**: more than 10 people moving in the same ISO week

    ## Example Request
```json
    {
      "households": [
        {"id": "A", "name": "Familie Müller", "move_date": "2025-06-10", "new_address": "Main St 1", "household_size": 4},
        {"id": "B", "name": "WG Schmidt", "move_date": "2025-06-10", "old_address": "Main St 1", "household_size": 3}
      ]
    }
```
    """
    _check_limit(len(request.households), settings)

    households = select_households(
        [h.to_household() for h in request.households],
        selected_ids=request.selected_household_ids,
        show_all=request.show_all
    )

    analysis = OverlapAnalyzer(now=request.now).analyze(households)

    return OverlapAnalysisResponse.from_analysis(
        analysis,
        summary=generate_overlap_summary(analysis),
        household_count=len(households)
    )


@router.get("", response_model=OverlapAnalysisResponse)
async def analyze_stored_overlaps(
    settings: Annotated[Settings, Depends(get_settings)],
    loader: Annotated[HouseholdLoader, Depends(get_household_loader)],
    household_ids: Optional[List[str]] = Query(None, description="Restrict to these household ids"),
    now: Optional[datetime] = Query(None, description="Reference time (default: current time)")
):
    """
    Analyze households stored in the database.

    Without `household_ids` every stored household is analyzed.
    """
    try:
        households = loader.load_households(household_ids)
    except ValueError as e:
        raise HTTPException(
            status_code=404,
            detail=f"No data found: {str(e)}"
        )
    except Exception as e:
        logger.error(f"Loading households failed: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Loading households failed: {str(e)}"
        )

    _check_limit(len(households), settings)

    analysis = OverlapAnalyzer(now=now).analyze(households)

    return OverlapAnalysisResponse.from_analysis(
        analysis,
        summary=generate_overlap_summary(analysis),
        household_count=len(households)
    )


@router.post("/resolve", response_model=ResolveOverlapResponse)
async def resolve(request: ResolveOverlapRequest):
    """
    Propose an automatic fix for an overlap.

    Returns the household list with the fix applied. Nothing is persisted.
    Timeline and resource conflicts are never resolved automatically.
    """
    resolution = resolve_overlap(
        request.overlap.to_overlap(),
        [h.to_household() for h in request.households]
    )
    return ResolveOverlapResponse.from_resolution(resolution)


@router.post("/timeline", response_model=TimelineResponse)
async def timeline(
    request: TimelineRequest,
    settings: Annotated[Settings, Depends(get_settings)]
):
    """
    Analyze households and place moves and overlaps on a timeline.
    """
    _check_limit(len(request.households), settings)

    households = [h.to_household() for h in request.households]
    analysis = OverlapAnalyzer(now=request.now).analyze(households)

    return TimelineResponse.from_timeline(build_timeline(households, analysis.overlaps))
