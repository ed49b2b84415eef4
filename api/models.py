"""
Pydantic models for API requests and responses.

These models define the structure of data sent to and from the API and
convert to and from the analyzer's dataclasses.
"""

from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from analyzer.models import (
    Household,
    HouseholdMember,
    HouseholdOverlap,
    OverlapAnalysis,
    OverlapType,
    Severity,
)
from analyzer.resolution import OverlapResolution
from analyzer.timeline import OverlapTimeline


# ============================================================================
# SHARED MODELS
# ============================================================================

class HouseholdMemberModel(BaseModel):
    """Member of a household"""

    name: str = Field(..., description="Member display name")
    email: Optional[str] = Field(None, description="Email address, used to detect duplicates")
    role: Optional[str] = Field(None, description="Role within the household")


class HouseholdModel(BaseModel):
    """A planned move"""

    id: str = Field(..., description="Unique household identifier")
    name: str = Field(..., description="Household display name")
    move_date: Optional[str] = Field(
        None,
        description="Move date (ISO-8601). Unparsable values are ignored by date-based checks",
        examples=["2025-06-10"]
    )
    household_size: int = Field(1, description="Number of people moving", ge=1)
    old_address: Optional[str] = Field(None, description="Address being vacated")
    new_address: Optional[str] = Field(None, description="Address being moved into")
    members: List[HouseholdMemberModel] = Field(default_factory=list, description="Registered members")
    parent_household_id: Optional[str] = Field(None, description="Parent move this household belongs to")

    def to_household(self) -> Household:
        return Household(
            id=self.id,
            name=self.name,
            move_date=self.move_date,
            household_size=self.household_size,
            old_address=self.old_address,
            new_address=self.new_address,
            members=[HouseholdMember(name=m.name, email=m.email, role=m.role) for m in self.members],
            parent_household_id=self.parent_household_id
        )

    @classmethod
    def from_household(cls, household: Household) -> 'HouseholdModel':
        return cls(**household.to_dict())

    class Config:
        json_schema_extra = {
            "example": {
                "id": "A",
                "name": "Familie Müller",
                "move_date": "2025-06-10",
                "household_size": 4,
                "old_address": "Hauptstraße 5",
                "new_address": "Main St 1",
                "members": [{"name": "Anna Müller", "email": "anna@example.com"}]
            }
        }


class OverlapModel(BaseModel):
    """A detected overlap between households"""

    type: OverlapType = Field(..., description="Overlap category")
    severity: Severity = Field(..., description="low, medium, high or critical")
    title: str = Field(..., description="Short German title")
    description: str = Field(..., description="German description")
    affected_households: List[str] = Field(..., description="Ids of the households involved")
    suggested_action: Optional[str] = Field(None, description="Suggested remediation")
    data: Optional[Dict[str, Any]] = Field(None, description="Detail payload for display")

    @classmethod
    def from_overlap(cls, overlap: HouseholdOverlap) -> 'OverlapModel':
        return cls(
            type=overlap.type,
            severity=overlap.severity,
            title=overlap.title,
            description=overlap.description,
            affected_households=list(overlap.affected_households),
            suggested_action=overlap.suggested_action,
            data=overlap.data
        )

    def to_overlap(self) -> HouseholdOverlap:
        return HouseholdOverlap(
            type=self.type,
            severity=self.severity,
            title=self.title,
            description=self.description,
            affected_households=list(self.affected_households),
            suggested_action=self.suggested_action,
            data=self.data
        )


# ============================================================================
# REQUEST MODELS
# ============================================================================

class AnalyzeOverlapsRequest(BaseModel):
    """Request model for analyzing households"""

    households: List[HouseholdModel] = Field(..., description="Households to analyze")
    selected_household_ids: Optional[List[str]] = Field(
        None,
        description="Only analyze these households (ignored when show_all is set)"
    )
    show_all: bool = Field(False, description="Analyze all households regardless of selection")
    now: Optional[datetime] = Field(
        None,
        description="Reference time for the upcoming-moves check (default: current time)"
    )

    @validator('households')
    def validate_unique_ids(cls, v):
        """Ensure household ids are unique"""
        ids = [h.id for h in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Household ids must be unique")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "households": [
                    {"id": "A", "name": "Familie Müller", "move_date": "2025-06-10",
                     "new_address": "Main St 1", "household_size": 4},
                    {"id": "B", "name": "WG Schmidt", "move_date": "2025-06-10",
                     "old_address": "Main St 1", "household_size": 3}
                ]
            }
        }


class ResolveOverlapRequest(BaseModel):
    """Request model for resolving an overlap"""

    overlap: OverlapModel = Field(..., description="Overlap to resolve")
    households: List[HouseholdModel] = Field(..., description="Current households")


class TimelineRequest(BaseModel):
    """Request model for building an overlap timeline"""

    households: List[HouseholdModel] = Field(..., description="Households to place on the timeline")
    now: Optional[datetime] = Field(None, description="Reference time for the analysis")


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class OverlapAnalysisResponse(BaseModel):
    """Response model for an overlap analysis"""

    overlaps: List[OverlapModel] = Field(..., description="Detected overlaps in detector order")
    has_conflicts: bool = Field(..., description="True if any overlap was found")
    critical_issues: int = Field(..., description="Number of critical overlaps")
    warnings: int = Field(..., description="Number of high and medium overlaps")
    recommendations: List[str] = Field(..., description="One hint per affected category")
    summary: str = Field(..., description="Rendered German text summary")
    household_count: int = Field(..., description="Number of households analyzed")
    analyzed_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Analysis timestamp (UTC)"
    )

    @classmethod
    def from_analysis(cls, analysis: OverlapAnalysis, summary: str, household_count: int) -> 'OverlapAnalysisResponse':
        return cls(
            overlaps=[OverlapModel.from_overlap(o) for o in analysis.overlaps],
            has_conflicts=analysis.has_conflicts,
            critical_issues=analysis.critical_issues,
            warnings=analysis.warnings,
            recommendations=list(analysis.recommendations),
            summary=summary,
            household_count=household_count
        )


class ResolveOverlapResponse(BaseModel):
    """Response model for an overlap resolution"""

    resolved: bool = Field(..., description="Whether a fix was applied")
    message: str = Field(..., description="German description of the outcome")
    changed_household_id: Optional[str] = Field(None, description="Household that was changed")
    households: List[HouseholdModel] = Field(..., description="Households with the fix applied")

    @classmethod
    def from_resolution(cls, resolution: OverlapResolution) -> 'ResolveOverlapResponse':
        return cls(
            resolved=resolution.resolved,
            message=resolution.message,
            changed_household_id=resolution.changed_household_id,
            households=[HouseholdModel.from_household(h) for h in resolution.households]
        )


class TimelineEventModel(BaseModel):
    """Single timeline event"""

    date: datetime
    type: str = Field(..., description="move or overlap")
    position: float = Field(..., description="Percentage along the timeline range")
    household_id: Optional[str] = None
    overlap: Optional[OverlapModel] = None


class TimelineResponse(BaseModel):
    """Response model for an overlap timeline"""

    events: List[TimelineEventModel]
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_timeline(cls, timeline: OverlapTimeline) -> 'TimelineResponse':
        return cls(
            events=[
                TimelineEventModel(
                    date=e.date,
                    type=e.type,
                    position=timeline.position(e.date),
                    household_id=e.household.id if e.household else None,
                    overlap=OverlapModel.from_overlap(e.overlap) if e.overlap else None
                )
                for e in timeline.events
            ],
            start=timeline.start,
            end=timeline.end
        )


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Health status: healthy or unhealthy")
    version: str = Field(..., description="API version")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Check timestamp (UTC)"
    )
