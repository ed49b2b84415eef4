"""
Household overlap analysis pipeline.

Runs the five detectors in a fixed order:
1. Move-date proximity
2. Address hand-off
3. Member duplicates
4. Timeline density
5. Weekly resource contention

and aggregates their results into an OverlapAnalysis.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from .models import Household, HouseholdOverlap, OverlapAnalysis, Severity
from .detectors import (
    analyze_move_date_overlaps,
    analyze_address_overlaps,
    analyze_member_overlaps,
    analyze_timeline_overlaps,
    analyze_resource_overlaps,
)

logger = logging.getLogger(__name__)

SINGLE_HOUSEHOLD_RECOMMENDATION = 'Keine Überlappungen bei einem einzelnen Haushalt'
MOVE_DATE_RECOMMENDATION = 'Überprüfen Sie die Umzugstermine auf logische Abfolge'
ADDRESS_RECOMMENDATION = 'Stellen Sie sicher, dass Auszug vor Einzug stattfindet'
MEMBER_RECOMMENDATION = 'Lösen Sie doppelte Mitglieder-Einträge auf'

NO_CONFLICTS_SUMMARY = '✅ Keine Überlappungen oder Konflikte gefunden'

SEVERITY_ICONS = {
    Severity.CRITICAL: '🚨',
    Severity.HIGH: '⚠️',
    Severity.MEDIUM: '⚡',
    Severity.LOW: 'ℹ️',
}


class OverlapAnalyzer:
    """
    Reusable analyzer with an optional fixed reference time.

    The reference time only affects the timeline density check. Without
    one, every call uses the current time.
    """

    def __init__(self, now: Optional[datetime] = None):
        self.now = now

    def analyze(self, households: Sequence[Household]) -> OverlapAnalysis:
        """
        Analyze a list of households for overlaps.

        Args:
            households: Households to compare. Never modified.

        Returns:
            OverlapAnalysis with overlaps in detector order
        """
        if len(households) < 2:
            return OverlapAnalysis(
                overlaps=[],
                has_conflicts=False,
                critical_issues=0,
                warnings=0,
                recommendations=[SINGLE_HOUSEHOLD_RECOMMENDATION]
            )

        move_date_overlaps = analyze_move_date_overlaps(households)
        address_overlaps = analyze_address_overlaps(households)
        member_overlaps = analyze_member_overlaps(households)
        timeline_overlaps = analyze_timeline_overlaps(households, now=self.now)
        resource_overlaps = analyze_resource_overlaps(households)

        overlaps: List[HouseholdOverlap] = (
            move_date_overlaps
            + address_overlaps
            + member_overlaps
            + timeline_overlaps
            + resource_overlaps
        )

        logger.debug(
            f"Detector results: dates={len(move_date_overlaps)}, "
            f"addresses={len(address_overlaps)}, members={len(member_overlaps)}, "
            f"timeline={len(timeline_overlaps)}, resources={len(resource_overlaps)}"
        )

        # Timeline and resource findings have no canned recommendation
        recommendations = []
        if move_date_overlaps:
            recommendations.append(MOVE_DATE_RECOMMENDATION)
        if address_overlaps:
            recommendations.append(ADDRESS_RECOMMENDATION)
        if member_overlaps:
            recommendations.append(MEMBER_RECOMMENDATION)

        critical_issues = sum(1 for o in overlaps if o.severity == Severity.CRITICAL)
        warnings = sum(1 for o in overlaps if o.severity in (Severity.HIGH, Severity.MEDIUM))

        logger.info(
            f"Analyzed {len(households)} households: "
            f"{len(overlaps)} overlaps ({critical_issues} critical, {warnings} warnings)"
        )

        return OverlapAnalysis(
            overlaps=overlaps,
            has_conflicts=len(overlaps) > 0,
            critical_issues=critical_issues,
            warnings=warnings,
            recommendations=recommendations
        )


def analyze_household_overlaps(
    households: Sequence[Household],
    now: Optional[datetime] = None
) -> OverlapAnalysis:
    """Analyze households for overlaps (see OverlapAnalyzer.analyze)"""
    return OverlapAnalyzer(now=now).analyze(households)


def generate_overlap_summary(analysis: OverlapAnalysis) -> str:
    """Render an analysis as a German bullet-style text block"""
    if not analysis.has_conflicts:
        return NO_CONFLICTS_SUMMARY

    lines = [f'⚠️ {analysis.critical_issues} kritische und {analysis.warnings} Warnungen gefunden:', '']

    for overlap in analysis.overlaps:
        lines.append(f'{SEVERITY_ICONS.get(overlap.severity, "ℹ️")} {overlap.title}')
        lines.append(f'   {overlap.description}')
        if overlap.suggested_action:
            lines.append(f'   💡 {overlap.suggested_action}')
        lines.append('')

    return '\n'.join(lines) + '\n'
