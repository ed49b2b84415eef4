"""
Household selection, overlap queries and automatic resolution proposals.

Resolution never touches the households it is given: it returns a new
list with the proposed change applied. Persisting the change is up to
the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from .models import Household, HouseholdOverlap, OverlapType

logger = logging.getLogger(__name__)


@dataclass
class OverlapResolution:
    """Outcome of an automatic resolution attempt"""
    resolved: bool
    message: str
    households: List[Household] = field(default_factory=list)
    changed_household_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'resolved': self.resolved,
            'message': self.message,
            'households': [h.to_dict() for h in self.households],
            'changed_household_id': self.changed_household_id,
        }


def select_households(
    households: Sequence[Household],
    selected_ids: Optional[Iterable[str]] = None,
    show_all: bool = False
) -> List[Household]:
    """
    Pick the households to analyze.

    All households are returned when show_all is set or no ids are
    selected. Input order is preserved.
    """
    selected = set(selected_ids or [])
    if show_all or not selected:
        return list(households)
    return [h for h in households if h.id in selected]


def households_for_overlap(
    overlap: HouseholdOverlap,
    households: Sequence[Household]
) -> List[Household]:
    """Households named by an overlap, in input order"""
    affected = set(overlap.affected_households)
    return [h for h in households if h.id in affected]


def _shift_move_date(household: Household, days: int = 1) -> Optional[Household]:
    """Copy of the household with its move date moved by `days`, as an ISO date"""
    move_date = household.parsed_move_date()
    if move_date is None:
        return None
    new_date: date = (move_date + timedelta(days=days)).date()
    return replace(household, move_date=new_date.isoformat(), members=list(household.members))


def _remove_member(household: Household, email: str) -> Household:
    email = email.lower()
    members = [m for m in household.members if not (m.email and m.email.lower() == email)]
    return replace(household, members=members)


def resolve_overlap(
    overlap: HouseholdOverlap,
    households: Sequence[Household]
) -> OverlapResolution:
    """
    Propose an automatic fix for an overlap.

    - move_date_conflict: the second affected household moves one day later
    - address_overlap: the first affected household moves one day later
    - member_duplicate: the duplicated member is removed from the second
      affected household
    - timeline and resource conflicts cannot be resolved automatically

    Args:
        overlap: Overlap to resolve
        households: Current household list. Never modified.

    Returns:
        OverlapResolution with the updated household list
    """
    result = list(households)
    by_id = {}
    for i, h in enumerate(result):
        by_id.setdefault(h.id, i)
    affected = overlap.affected_households

    if len(affected) < 2:
        return OverlapResolution(
            resolved=False,
            message='Überlappung betrifft weniger als zwei Haushalte',
            households=result
        )

    if overlap.type == OverlapType.MOVE_DATE_CONFLICT:
        target_id = affected[1]
    elif overlap.type == OverlapType.ADDRESS_OVERLAP:
        target_id = affected[0]
    elif overlap.type == OverlapType.MEMBER_DUPLICATE:
        target_id = affected[1]
    else:
        logger.info(f"No automatic resolution for overlap type {overlap.type.value}")
        return OverlapResolution(
            resolved=False,
            message=f'Automatische Lösung für {overlap.type.value} nicht verfügbar',
            households=result
        )

    index = by_id.get(target_id)
    if index is None:
        return OverlapResolution(
            resolved=False,
            message=f'Haushalt {target_id} nicht gefunden',
            households=result
        )

    target = result[index]

    if overlap.type == OverlapType.MEMBER_DUPLICATE:
        email = (overlap.data or {}).get('email')
        if not email:
            return OverlapResolution(
                resolved=False,
                message='Keine E-Mail-Adresse für das doppelte Mitglied vorhanden',
                households=result
            )
        result[index] = _remove_member(target, email)
        message = f'Mitglied {email} aus {target.name} entfernt'
    else:
        shifted = _shift_move_date(target)
        if shifted is None:
            return OverlapResolution(
                resolved=False,
                message=f'Ungültiges Umzugsdatum für {target.name}',
                households=result
            )
        result[index] = shifted
        message = f'Umzug von {target.name} auf {shifted.move_date} verschoben'

    logger.info(f"Resolved {overlap.type.value} for household {target_id}")

    return OverlapResolution(
        resolved=True,
        message=message,
        households=result,
        changed_household_id=target_id
    )
