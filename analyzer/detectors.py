"""
Overlap detectors.

Each detector is a pure function taking the household list and returning
the overlaps it finds. Detectors never mutate their input and never raise
for malformed move dates: comparisons involving an unparsable date are
treated as non-matches.

Detectors:
1. Move-date proximity (adjacent pairs in date order)
2. Address hand-off (all pairs)
3. Member duplicates (by email)
4. Timeline density (upcoming 30 days)
5. Weekly resource contention (ISO weeks)
"""

import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Household, HouseholdOverlap, OverlapType, Severity

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

# Business thresholds
SAME_DAY_LIMIT_DAYS = 1
CLOSE_DATES_LIMIT_DAYS = 3
TIMELINE_WINDOW_DAYS = 30
TIMELINE_MAX_MOVES = 2
WEEKLY_MAX_PEOPLE = 10


def _days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up"""
    return math.ceil((end - start) / ONE_DAY)


def _normalize_address(address: Optional[str]) -> str:
    return address.strip().lower() if address else ''


# =============================================================================
# 1. MOVE DATE PROXIMITY
# =============================================================================

def analyze_move_date_overlaps(households: Sequence[Household]) -> List[HouseholdOverlap]:
    """
    Flag households whose move dates are too close together.

    Only neighbours in date order are compared. Households with an
    unparsable move date sort last and are never flagged.
    """
    overlaps = []

    dated = [(h, h.parsed_move_date()) for h in households]
    dated.sort(key=lambda item: (item[1] is None, item[1] or datetime.min.replace(tzinfo=timezone.utc)))

    for (current, current_date), (nxt, next_date) in zip(dated, dated[1:]):
        if current_date is None or next_date is None:
            continue

        days_diff = _days_between(current_date, next_date)

        if days_diff < SAME_DAY_LIMIT_DAYS:
            overlaps.append(HouseholdOverlap(
                type=OverlapType.MOVE_DATE_CONFLICT,
                severity=Severity.CRITICAL,
                title='Umzüge am gleichen Tag',
                description=f'{current.name} und {nxt.name} sind für den gleichen Tag geplant',
                affected_households=[current.id, nxt.id],
                suggested_action='Verschieben Sie einen der Umzüge um mindestens einen Tag',
                data={'days_diff': days_diff, 'current_date': current_date, 'next_date': next_date}
            ))
        elif days_diff < CLOSE_DATES_LIMIT_DAYS:
            overlaps.append(HouseholdOverlap(
                type=OverlapType.MOVE_DATE_CONFLICT,
                severity=Severity.HIGH,
                title='Sehr enge Umzugstermine',
                description=f'{current.name} und {nxt.name} sind nur {days_diff} Tage auseinander',
                affected_households=[current.id, nxt.id],
                suggested_action='Erwägen Sie mehr Zeit zwischen den Umzügen',
                data={'days_diff': days_diff, 'current_date': current_date, 'next_date': next_date}
            ))

    return overlaps


# =============================================================================
# 2. ADDRESS HAND-OFF
# =============================================================================

def analyze_address_overlaps(households: Sequence[Household]) -> List[HouseholdOverlap]:
    """
    Flag pairs where one household moves into the address another leaves.

    Every unordered pair (i < j) is checked once, comparing the new address
    of the first with the old address of the second. A pair yields exactly
    one overlap: critical when the first household's move date is later
    than the second's, medium otherwise (including unparsable dates).
    """
    overlaps = []

    for i, household1 in enumerate(households):
        new_address = _normalize_address(household1.new_address)
        if not new_address:
            continue

        for household2 in households[i + 1:]:
            if new_address != _normalize_address(household2.old_address):
                continue

            household1_date = household1.parsed_move_date()
            household2_date = household2.parsed_move_date()
            data = {
                'household1_date': household1_date,
                'household2_date': household2_date,
                'address': household1.new_address,
            }

            if household1_date is not None and household2_date is not None and household1_date > household2_date:
                overlaps.append(HouseholdOverlap(
                    type=OverlapType.ADDRESS_OVERLAP,
                    severity=Severity.CRITICAL,
                    title='Auszug vor Einzug',
                    description=(
                        f'{household1.name} zieht in die Wohnung ein, '
                        f'aus der {household2.name} noch nicht ausgezogen ist'
                    ),
                    affected_households=[household1.id, household2.id],
                    suggested_action=(
                        f'Verschieben Sie den Einzug von {household1.name} '
                        f'nach dem Auszug von {household2.name}'
                    ),
                    data=data
                ))
            else:
                overlaps.append(HouseholdOverlap(
                    type=OverlapType.ADDRESS_OVERLAP,
                    severity=Severity.MEDIUM,
                    title='Adress-Überlappung erkannt',
                    description=f'{household1.name} und {household2.name} teilen sich eine Adresse',
                    affected_households=[household1.id, household2.id],
                    suggested_action='Bestätigen Sie, dass dies korrekt ist',
                    data=data
                ))

    return overlaps


# =============================================================================
# 3. MEMBER DUPLICATES
# =============================================================================

def analyze_member_overlaps(households: Sequence[Household]) -> List[HouseholdOverlap]:
    """
    Flag member emails registered more than once.

    Entries are not de-duplicated: an email listed twice in the same
    household reports that household id twice.
    """
    overlaps = []
    member_map: Dict[str, List[Tuple[str, str]]] = {}

    for household in households:
        for member in household.members:
            if not member.email:
                continue
            member_map.setdefault(member.email.lower(), []).append((household.id, member.name))

    for email, entries in member_map.items():
        if len(entries) < 2:
            continue

        member_names = ', '.join(name for _, name in entries)
        overlaps.append(HouseholdOverlap(
            type=OverlapType.MEMBER_DUPLICATE,
            severity=Severity.HIGH,
            title='Doppelte Mitglieder gefunden',
            description=f'{member_names} ist in mehreren Haushalten registriert',
            affected_households=[household_id for household_id, _ in entries],
            suggested_action='Entscheiden Sie, in welchem Haushalt das Mitglied bleiben soll',
            data={
                'email': email,
                'entries': [{'household_id': hid, 'member_name': name} for hid, name in entries]
            }
        ))

    return overlaps


# =============================================================================
# 4. TIMELINE DENSITY
# =============================================================================

def analyze_timeline_overlaps(
    households: Sequence[Household],
    now: Optional[datetime] = None
) -> List[HouseholdOverlap]:
    """
    Flag too many moves within the next 30 days.

    Args:
        households: Households to check (original order is kept)
        now: Reference time. Defaults to the current UTC time.

    Returns:
        At most one timeline overlap
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    upcoming = []
    for household in households:
        move_date = household.parsed_move_date()
        if move_date is not None and move_date > now:
            upcoming.append((household, move_date))

    if len(upcoming) <= TIMELINE_MAX_MOVES:
        return []

    next_30_days = [
        household for household, move_date in upcoming
        if _days_between(now, move_date) <= TIMELINE_WINDOW_DAYS
    ]

    if len(next_30_days) <= TIMELINE_MAX_MOVES:
        return []

    return [HouseholdOverlap(
        type=OverlapType.TIMELINE_CONFLICT,
        severity=Severity.MEDIUM,
        title='Viele Umzüge in kurzer Zeit',
        description=f'{len(next_30_days)} Umzüge sind in den nächsten 30 Tagen geplant',
        affected_households=[h.id for h in next_30_days],
        suggested_action='Erwägen Sie, einige Umzüge zu verschieben',
        data={'upcoming_moves': len(next_30_days), 'total_moves': len(upcoming)}
    )]


# =============================================================================
# 5. WEEKLY RESOURCE CONTENTION
# =============================================================================

def week_key(moment: datetime) -> str:
    """ISO-8601 week key, e.g. '2025-W24'"""
    iso_year, iso_week, _ = moment.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def analyze_resource_overlaps(households: Sequence[Household]) -> List[HouseholdOverlap]:
    """
    Flag ISO weeks where several households with more than 10 people
    in total move at once.
    """
    overlaps = []
    weekly_groups: Dict[str, List[Household]] = defaultdict(list)

    for household in households:
        move_date = household.parsed_move_date()
        if move_date is None:
            logger.warning(f"Skipping household {household.id} with invalid move date: {household.move_date!r}")
            continue
        weekly_groups[week_key(move_date)].append(household)

    for key, households_in_week in weekly_groups.items():
        if len(households_in_week) < 2:
            continue

        total_people = sum(h.household_size or 0 for h in households_in_week)
        if total_people <= WEEKLY_MAX_PEOPLE:
            continue

        overlaps.append(HouseholdOverlap(
            type=OverlapType.RESOURCE_CONFLICT,
            severity=Severity.MEDIUM,
            title='Hohe Umzugsbelastung',
            description=(
                f'{len(households_in_week)} Haushalte mit {total_people} Personen '
                f'ziehen in der gleichen Woche um'
            ),
            affected_households=[h.id for h in households_in_week],
            suggested_action='Erwägen Sie, Umzugsunternehmen frühzeitig zu buchen',
            data={'week_key': key, 'household_count': len(households_in_week), 'total_people': total_people}
        ))

    return overlaps
