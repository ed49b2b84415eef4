"""
Overlap timeline.

Places every move and every overlap on a common date axis. An overlap is
dated by the earliest move date among its affected households.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import Household, HouseholdOverlap

TIMELINE_PADDING = timedelta(days=7)


@dataclass
class TimelineEvent:
    """A move or an overlap on the timeline"""
    date: datetime
    type: str  # "move" or "overlap"
    position: int
    household: Optional[Household] = None
    overlap: Optional[HouseholdOverlap] = None

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'type': self.type,
            'position': self.position,
            'household': self.household.to_dict() if self.household else None,
            'overlap': self.overlap.to_dict() if self.overlap else None,
        }


@dataclass
class OverlapTimeline:
    events: List[TimelineEvent] = field(default_factory=list)
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def position(self, moment: datetime) -> float:
        """Percentage (0-100) of `moment` along the padded range"""
        if self.start is None or self.end is None:
            return 0.0
        total = self.end - self.start
        if total <= timedelta(0):
            return 0.0
        return (moment - self.start) / total * 100

    def to_dict(self) -> dict:
        return {
            'events': [e.to_dict() for e in self.events],
            'start': self.start.isoformat() if self.start else None,
            'end': self.end.isoformat() if self.end else None,
        }


def build_timeline(
    households: Sequence[Household],
    overlaps: Sequence[HouseholdOverlap]
) -> OverlapTimeline:
    """
    Build a date-sorted timeline of moves and overlaps.

    Households with an unparsable move date are left out, as are overlaps
    none of whose households has a usable date.
    """
    events = []
    dates_by_id = {}

    for index, household in enumerate(households):
        move_date = household.parsed_move_date()
        if move_date is None:
            continue
        dates_by_id.setdefault(household.id, move_date)
        events.append(TimelineEvent(date=move_date, type='move', position=index, household=household))

    for index, overlap in enumerate(overlaps):
        affected_dates = [dates_by_id[hid] for hid in overlap.affected_households if hid in dates_by_id]
        if not affected_dates:
            continue
        events.append(TimelineEvent(
            date=min(affected_dates),
            type='overlap',
            position=len(households) + index,
            overlap=overlap
        ))

    events.sort(key=lambda e: e.date)

    if not events:
        return OverlapTimeline()

    return OverlapTimeline(
        events=events,
        start=events[0].date - TIMELINE_PADDING,
        end=events[-1].date + TIMELINE_PADDING
    )
