"""
Household Overlap Analyzer Package

Detects conflicts between planned residential moves: close move dates,
address hand-offs, duplicate members, dense timelines and weekly
resource contention.
"""

from .analysis import OverlapAnalyzer, analyze_household_overlaps, generate_overlap_summary
from .models import (
    Household,
    HouseholdMember,
    HouseholdOverlap,
    OverlapAnalysis,
    OverlapType,
    Severity,
    parse_move_date,
)
from .detectors import (
    analyze_move_date_overlaps,
    analyze_address_overlaps,
    analyze_member_overlaps,
    analyze_timeline_overlaps,
    analyze_resource_overlaps,
)
from .resolution import (
    OverlapResolution,
    select_households,
    households_for_overlap,
    resolve_overlap,
)
from .timeline import OverlapTimeline, TimelineEvent, build_timeline
from .database import HouseholdLoader, get_loader

__version__ = "1.0.0"

__all__ = [
    # Main entry points
    'OverlapAnalyzer',
    'analyze_household_overlaps',
    'generate_overlap_summary',

    # Data models
    'Household',
    'HouseholdMember',
    'HouseholdOverlap',
    'OverlapAnalysis',
    'parse_move_date',

    # Enums
    'OverlapType',
    'Severity',

    # Detectors
    'analyze_move_date_overlaps',
    'analyze_address_overlaps',
    'analyze_member_overlaps',
    'analyze_timeline_overlaps',
    'analyze_resource_overlaps',

    # Resolution & timeline
    'OverlapResolution',
    'select_households',
    'households_for_overlap',
    'resolve_overlap',
    'OverlapTimeline',
    'TimelineEvent',
    'build_timeline',

    # Database
    'HouseholdLoader',
    'get_loader',
]
