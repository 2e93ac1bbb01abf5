from __future__ import annotations

"""
Wells DVT criteria, signed total score and two-tier probability.

All criteria add one point except "alternative diagnosis at least as likely",
which subtracts two, so totals may be negative.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Literal

from carescore.internal_core.contracts import WellsProbability

from .base import RiskTier, classify_score, validate_tier_table

logger = logging.getLogger(__name__)

ThreeTierProbability = Literal["low", "moderate", "high"]


@dataclass(frozen=True)
class WellsCriterion:
    id: str
    name: str
    points: int
    description: str


@dataclass(frozen=True)
class WellsTier(RiskTier):
    dvt_prevalence: str
    next_step: str


WELLS_CRITERIA: tuple[WellsCriterion, ...] = (
    WellsCriterion(
        "active_cancer", "Active cancer", 1, "Treatment or palliation within 6 months"
    ),
    WellsCriterion(
        "bedridden",
        "Bedridden recently >3 days or major surgery within 12 weeks",
        1,
        "Recently bedridden for more than 3 days, or major surgery requiring general or "
        "regional anesthesia in the past 12 weeks",
    ),
    WellsCriterion(
        "calf_swelling",
        "Calf swelling >3 cm compared to the other leg",
        1,
        "Measured 10 cm below tibial tuberosity",
    ),
    WellsCriterion(
        "collateral_veins",
        "Collateral (non-varicose) superficial veins present",
        1,
        "Non-varicose superficial veins visible",
    ),
    WellsCriterion("entire_leg_swollen", "Entire leg swollen", 1, "Unilateral leg swelling"),
    WellsCriterion(
        "localized_tenderness",
        "Localized tenderness along the deep venous system",
        1,
        "Tenderness along the distribution of the deep venous system",
    ),
    WellsCriterion(
        "pitting_edema",
        "Pitting edema, confined to symptomatic leg",
        1,
        "Greater in the symptomatic leg",
    ),
    WellsCriterion(
        "paralysis_paresis",
        "Paralysis, paresis, or recent plaster immobilization of the lower extremity",
        1,
        "Recent immobilization of the lower extremities",
    ),
    WellsCriterion(
        "previously_documented_dvt",
        "Previously documented DVT",
        1,
        "History of documented DVT",
    ),
    WellsCriterion(
        "alternative_diagnosis",
        "Alternative diagnosis to DVT as likely or more likely",
        -2,
        "Alternative diagnosis is at least as likely (SUBTRACT 2 points)",
    ),
)

_CRITERIA_BY_ID = {criterion.id: criterion for criterion in WELLS_CRITERIA}

ACTIVE_CANCER_ID = "active_cancer"
PRIOR_DVT_ID = "previously_documented_dvt"
PARALYSIS_ID = "paralysis_paresis"
BEDRIDDEN_ID = "bedridden"
ALTERNATIVE_DIAGNOSIS_ID = "alternative_diagnosis"

WELLS_TIERS: tuple[WellsTier, ...] = (
    WellsTier(
        level="unlikely",
        label="DVT Unlikely",
        description="Low probability of DVT",
        score_range="≤1",
        lower=None,
        upper=1,
        dvt_prevalence="~6%",
        next_step="D-dimer testing recommended. If negative, DVT is ruled out.",
    ),
    WellsTier(
        level="likely",
        label="DVT Likely",
        description="Moderate to high probability of DVT",
        score_range="≥2",
        lower=2,
        upper=None,
        dvt_prevalence="~28%",
        next_step=(
            "Compression ultrasound recommended. Consider empiric anticoagulation while "
            "awaiting results."
        ),
    ),
)

# Traditional three-tier Wells model, kept for reference reporting.
WELLS_THREE_TIERS: tuple[RiskTier, ...] = (
    RiskTier("low", "Low Probability", "Score 0 or less", "≤0", None, 0),
    RiskTier("moderate", "Moderate Probability", "Score 1-2", "1-2", 1, 2),
    RiskTier("high", "High Probability", "Score 3 or more", "≥3", 3, None),
)

validate_tier_table(WELLS_TIERS)
validate_tier_table(WELLS_THREE_TIERS)

WELLS_CLASSIFICATIONS: dict[str, WellsTier] = {tier.level: tier for tier in WELLS_TIERS}


def get_criterion(criterion_id: str) -> WellsCriterion | None:
    return _CRITERIA_BY_ID.get(criterion_id)


def calculate_wells_score(selected_criteria_ids: Iterable[str]) -> int:
    total = 0
    for criterion_id in selected_criteria_ids:
        criterion = _CRITERIA_BY_ID.get(criterion_id)
        if criterion is None:
            logger.debug("wells: unknown criterion id=%s contributes 0", criterion_id)
            continue
        total += criterion.points
    return total


def calculate_wells_probability(score: int) -> WellsProbability:
    return classify_score(WELLS_TIERS, score).level  # type: ignore[return-value]


def calculate_wells_probability_3tier(score: int) -> ThreeTierProbability:
    return classify_score(WELLS_THREE_TIERS, score).level  # type: ignore[return-value]


def get_selected_criteria_names(selected_criteria_ids: Iterable[str]) -> list[str]:
    return [
        _CRITERIA_BY_ID[criterion_id].name
        for criterion_id in selected_criteria_ids
        if criterion_id in _CRITERIA_BY_ID
    ]
