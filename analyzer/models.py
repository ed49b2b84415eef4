"""
Data models for household overlap analysis.

Defines the household records read by the analyzer and the overlap
structures it produces.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Union
from enum import Enum

logger = logging.getLogger(__name__)


class OverlapType(Enum):
    """Kinds of conflicts detected between households"""
    MOVE_DATE_CONFLICT = "move_date_conflict"
    ADDRESS_OVERLAP = "address_overlap"
    MEMBER_DUPLICATE = "member_duplicate"
    TIMELINE_CONFLICT = "timeline_conflict"
    RESOURCE_CONFLICT = "resource_conflict"


class Severity(Enum):
    """Severity of an overlap (low < medium < high < critical)"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


MoveDate = Union[str, date, datetime, None]


def parse_move_date(value: MoveDate) -> Optional[datetime]:
    """
    Parse a move date into an aware UTC datetime.

    Date-only values map to midnight UTC, naive datetimes are taken as UTC.
    Anything that cannot be parsed yields None so callers can skip it.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparsable move date: {value!r}")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class HouseholdMember:
    """A person registered in a household"""
    name: str
    email: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'HouseholdMember':
        return cls(
            name=data.get('name') or '',
            email=data.get('email'),
            role=data.get('role'),
        )

    def to_dict(self) -> dict:
        return {'name': self.name, 'email': self.email, 'role': self.role}


@dataclass
class Household:
    """
    One planned residential move.

    Addresses are free text and compared case-insensitively after trimming.
    A missing address is unknown and never matches anything.
    """
    id: str
    name: str
    move_date: MoveDate
    household_size: int = 1
    old_address: Optional[str] = None
    new_address: Optional[str] = None
    members: List[HouseholdMember] = field(default_factory=list)
    parent_household_id: Optional[str] = None

    def parsed_move_date(self) -> Optional[datetime]:
        """Move date as UTC datetime, or None if malformed"""
        return parse_move_date(self.move_date)

    def member_emails(self) -> List[str]:
        """Lower-cased emails of all members that have one"""
        return [m.email.lower() for m in self.members if m.email]

    @classmethod
    def from_dict(cls, data: dict) -> 'Household':
        """Build a household from a data store row (members optional)"""
        return cls(
            id=str(data['id']),
            name=data.get('name') or '',
            move_date=data.get('move_date'),
            household_size=int(data.get('household_size') or 1),
            old_address=data.get('old_address'),
            new_address=data.get('new_address'),
            members=[
                m if isinstance(m, HouseholdMember) else HouseholdMember.from_dict(m)
                for m in (data.get('members') or [])
            ],
            parent_household_id=data.get('parent_household_id'),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        move_date = self.move_date
        if isinstance(move_date, (date, datetime)):
            move_date = move_date.isoformat()
        return {
            'id': self.id,
            'name': self.name,
            'move_date': move_date,
            'household_size': self.household_size,
            'old_address': self.old_address,
            'new_address': self.new_address,
            'members': [m.to_dict() for m in self.members],
            'parent_household_id': self.parent_household_id,
        }


@dataclass
class HouseholdOverlap:
    """A conflict or coincidence between two or more households"""
    type: OverlapType
    severity: Severity
    title: str
    description: str
    affected_households: List[str]
    suggested_action: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'severity': self.severity.value,
            'title': self.title,
            'description': self.description,
            'affected_households': list(self.affected_households),
            'suggested_action': self.suggested_action,
            'data': self.data,
        }


@dataclass
class OverlapAnalysis:
    """
    Result of one analysis call.

    `warnings` counts high and medium overlaps only; low severity is
    excluded from both counters.
    """
    overlaps: List[HouseholdOverlap] = field(default_factory=list)
    has_conflicts: bool = False
    critical_issues: int = 0
    warnings: int = 0
    recommendations: List[str] = field(default_factory=list)

    def by_type(self, overlap_type: OverlapType) -> List[HouseholdOverlap]:
        """All overlaps of the given type"""
        return [o for o in self.overlaps if o.type == overlap_type]

    def by_severity(self, severity: Severity) -> List[HouseholdOverlap]:
        """All overlaps of the given severity"""
        return [o for o in self.overlaps if o.severity == severity]

    def to_dict(self) -> dict:
        return {
            'overlaps': [o.to_dict() for o in self.overlaps],
            'has_conflicts': self.has_conflicts,
            'critical_issues': self.critical_issues,
            'warnings': self.warnings,
            'recommendations': list(self.recommendations),
        }
