from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, Sequence

from carescore.utils.dates import parse_iso_datetime

logger = logging.getLogger(__name__)

TrendDirection = Literal["improving", "stable", "deteriorating"]

# Braden totals rise as risk falls, so a positive change means improvement.
TREND_THRESHOLD = 2

TREND_GUIDANCE: dict[str, str] = {
    "improving": (
        "Patient risk is decreasing. Continue current prevention protocol. Consider step-down "
        "of interventions if improvement sustained."
    ),
    "deteriorating": (
        "ALERT: Patient risk is increasing. Intensify prevention measures immediately. "
        "Re-evaluate care plan and consider specialist consultation."
    ),
    "stable": (
        "Risk level stable. Maintain current prevention measures. Continue regular monitoring."
    ),
}


class ScoredAssessment(Protocol):
    date: str
    total_score: int


@dataclass(frozen=True)
class ScorePoint:
    """Bare (date, total) pair for histories that do not come from the repository."""

    date: str
    total_score: int


@dataclass(frozen=True)
class TrendResult:
    trend: TrendDirection
    percentage_change: float
    overall_change: int
    recent_change: int
    assessment_count: int
    last_assessment_date: str
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "trend": self.trend,
            "percentage_change": self.percentage_change,
            "overall_change": self.overall_change,
            "recent_change": self.recent_change,
            "assessment_count": self.assessment_count,
            "last_assessment_date": self.last_assessment_date,
            "recommendation": self.recommendation,
        }


def classify_change(overall_change: int) -> TrendDirection:
    if overall_change > TREND_THRESHOLD:
        return "improving"
    if overall_change < -TREND_THRESHOLD:
        return "deteriorating"
    return "stable"


def analyze_trend(history: Sequence[ScoredAssessment]) -> Optional[TrendResult]:
    """Compare the newest Braden total with the oldest one in ``history``.

    Returns None when fewer than two assessments exist. ``recent_change``
    (newest minus second newest) is reported but does not affect the trend.
    """
    if len(history) < 2:
        return None

    ordered = sorted(history, key=lambda item: parse_iso_datetime(item.date), reverse=True)
    current = ordered[0].total_score
    previous = ordered[1].total_score
    oldest = ordered[-1].total_score

    overall_change = current - oldest
    percentage_change = (overall_change / oldest) * 100.0 if oldest else 0.0
    trend = classify_change(overall_change)
    logger.debug(
        "trend: n=%d current=%d oldest=%d trend=%s", len(ordered), current, oldest, trend
    )
    return TrendResult(
        trend=trend,
        percentage_change=percentage_change,
        overall_change=overall_change,
        recent_change=current - previous,
        assessment_count=len(history),
        last_assessment_date=ordered[0].date,
        recommendation=TREND_GUIDANCE[trend],
    )
