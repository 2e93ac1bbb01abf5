from __future__ import annotations

"""
Braden Scale reference tables, total score and risk tier.

Design intent:
- Keep subscale wording verbatim from the published instrument.
- Treat a 0 sub-score as "not yet assessed"; callers must not score it.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Union

from carescore.internal_core.contracts import BradenRiskLevel, BradenScores

from .base import RiskTier, classify_score, validate_tier_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubscaleOption:
    score: int
    label: str
    description: str


@dataclass(frozen=True)
class Subscale:
    id: str
    name: str
    description: str
    max_score: int
    options: tuple[SubscaleOption, ...]


BRADEN_SUBSCALES: tuple[Subscale, ...] = (
    Subscale(
        id="sensory_perception",
        name="Sensory Perception",
        description="Ability to respond meaningfully to pressure-related discomfort",
        max_score=4,
        options=(
            SubscaleOption(
                1,
                "Completely Limited",
                "Unresponsive (does not moan, flinch, or grasp) to painful stimuli, due to "
                "diminished level of consciousness or sedation. OR limited ability to feel "
                "pain over most of body surface.",
            ),
            SubscaleOption(
                2,
                "Very Limited",
                "Responds only to painful stimuli. Cannot communicate discomfort except by "
                "moaning or restlessness. OR has a sensory impairment which limits the ability "
                "to feel pain or discomfort over 1/2 of body.",
            ),
            SubscaleOption(
                3,
                "Slightly Limited",
                "Responds to verbal commands, but cannot always communicate discomfort or need "
                "to be turned. OR has some sensory impairment which limits ability to feel pain "
                "or discomfort in 1 or 2 extremities.",
            ),
            SubscaleOption(
                4,
                "No Impairment",
                "Responds to verbal commands. Has no sensory deficit which would limit ability "
                "to feel or voice pain or discomfort.",
            ),
        ),
    ),
    Subscale(
        id="moisture",
        name="Moisture",
        description="Degree to which skin is exposed to moisture",
        max_score=4,
        options=(
            SubscaleOption(
                1,
                "Constantly Moist",
                "Skin is kept moist almost constantly by perspiration, urine, etc. Dampness is "
                "detected every time patient is moved or turned.",
            ),
            SubscaleOption(
                2,
                "Very Moist",
                "Skin is often, but not always moist. Linen must be changed at least once a shift.",
            ),
            SubscaleOption(
                3,
                "Occasionally Moist",
                "Skin is occasionally moist, requiring an extra linen change approximately once a day.",
            ),
            SubscaleOption(
                4,
                "Rarely Moist",
                "Skin is usually dry, linen only requires changing at routine intervals.",
            ),
        ),
    ),
    Subscale(
        id="activity",
        name="Activity",
        description="Degree of physical activity",
        max_score=4,
        options=(
            SubscaleOption(1, "Bedfast", "Confined to bed."),
            SubscaleOption(
                2,
                "Chairfast",
                "Ability to walk severely limited or non-existent. Cannot bear own weight and/or "
                "must be assisted into chair or wheelchair.",
            ),
            SubscaleOption(
                3,
                "Walks Occasionally",
                "Walks occasionally during day, but for very short distances, with or without "
                "assistance. Spends majority of each shift in bed or chair.",
            ),
            SubscaleOption(
                4,
                "Walks Frequently",
                "Walks outside the room at least twice a day and inside room at least once every "
                "2 hours during waking hours.",
            ),
        ),
    ),
    Subscale(
        id="mobility",
        name="Mobility",
        description="Ability to change and control body position",
        max_score=4,
        options=(
            SubscaleOption(
                1,
                "Completely Immobile",
                "Does not make even slight changes in body or extremity position without assistance.",
            ),
            SubscaleOption(
                2,
                "Very Limited",
                "Makes occasional slight changes in body or extremity position but unable to make "
                "frequent or significant changes independently.",
            ),
            SubscaleOption(
                3,
                "Slightly Limited",
                "Makes frequent though slight changes in body or extremity position independently.",
            ),
            SubscaleOption(
                4,
                "No Limitations",
                "Makes major and frequent changes in position without assistance.",
            ),
        ),
    ),
    Subscale(
        id="nutrition",
        name="Nutrition",
        description="Usual food intake pattern",
        max_score=4,
        options=(
            SubscaleOption(
                1,
                "Very Poor",
                "Never eats a complete meal. Rarely eats more than 1/3 of any food offered. Eats 2 "
                "servings or less of protein (meat or dairy products) per day. Takes fluids poorly. "
                "Does not take a liquid dietary supplement. OR is NPO and/or maintained on clear "
                "liquids or IVs for more than 5 days.",
            ),
            SubscaleOption(
                2,
                "Probably Inadequate",
                "Rarely eats a complete meal and generally eats only about 1/2 of any food offered. "
                "Protein intake includes only 3 servings of meat or dairy products per day. "
                "Occasionally will take a dietary supplement. OR receives less than optimum amount "
                "of liquid diet or tube feeding.",
            ),
            SubscaleOption(
                3,
                "Adequate",
                "Eats over half of most meals. Eats a total of 4 servings of protein (meat, dairy "
                "products) each day. Occasionally will refuse a meal, but will usually take a "
                "supplement if offered. OR is on a tube feeding or TPN regimen which probably meets "
                "most of nutritional needs.",
            ),
            SubscaleOption(
                4,
                "Excellent",
                "Eats most of every meal. Never refuses a meal. Usually eats a total of 4 or more "
                "servings of meat and dairy products. Occasionally eats between meals. Does not "
                "require supplementation.",
            ),
        ),
    ),
    Subscale(
        id="friction_shear",
        name="Friction & Shear",
        description=(
            "Friction occurs when skin moves against support surfaces. Shear occurs when skin "
            "and bone move in opposite directions."
        ),
        max_score=3,
        options=(
            SubscaleOption(
                1,
                "Problem",
                "Requires moderate to maximum assistance in moving. Complete lifting without "
                "sliding against sheets is impossible. Frequently slides down in bed or chair, "
                "requiring frequent repositioning with maximum assistance. Spasticity, contractures "
                "or agitation leads to almost constant friction.",
            ),
            SubscaleOption(
                2,
                "Potential Problem",
                "Moves feebly or requires minimum assistance. During a move skin probably slides to "
                "some extent against sheets, chair, restraints or other devices. Maintains "
                "relatively good position in chair or bed most of the time but occasionally slides down.",
            ),
            SubscaleOption(
                3,
                "No Apparent Problem",
                "Moves in bed and in chair independently and has sufficient muscle strength to lift "
                "up completely during move. Maintains good position in bed or chair at all times.",
            ),
        ),
    ),
)

_SUBSCALES_BY_ID = {item.id: item for item in BRADEN_SUBSCALES}

MIN_BRADEN_SCORE = 6  # 1+1+1+1+1+1
MAX_BRADEN_SCORE = 23  # 4+4+4+4+4+3

BRADEN_RISK_TIERS: tuple[RiskTier, ...] = (
    RiskTier(
        level="veryHigh",
        label="Very High Risk",
        description=(
            "Immediate intervention required. Implement comprehensive pressure injury "
            "prevention protocol."
        ),
        score_range="≤ 9",
        lower=None,
        upper=9,
    ),
    RiskTier(
        level="high",
        label="High Risk",
        description="High priority for prevention measures. Frequent reassessment needed.",
        score_range="10-12",
        lower=10,
        upper=12,
    ),
    RiskTier(
        level="moderate",
        label="Moderate Risk",
        description="Prevention measures recommended. Regular monitoring required.",
        score_range="13-14",
        lower=13,
        upper=14,
    ),
    RiskTier(
        level="mild",
        label="Mild Risk",
        description="Standard preventive care. Continue regular assessment.",
        score_range="15-18",
        lower=15,
        upper=18,
    ),
    RiskTier(
        level="none",
        label="No Risk",
        description="Continue routine skin assessment and care.",
        score_range="> 18",
        lower=19,
        upper=None,
    ),
)

validate_tier_table(BRADEN_RISK_TIERS)

RISK_CLASSIFICATIONS: dict[str, RiskTier] = {tier.level: tier for tier in BRADEN_RISK_TIERS}

BradenScoreInput = Union[BradenScores, Mapping[str, int]]


def get_subscale(subscale_id: str) -> Subscale | None:
    return _SUBSCALES_BY_ID.get(subscale_id)


def _as_mapping(scores: BradenScoreInput) -> dict[str, int]:
    if isinstance(scores, BradenScores):
        return scores.as_mapping()
    mapping: dict[str, int] = {}
    for key, value in scores.items():
        if key not in _SUBSCALES_BY_ID:
            logger.warning("braden: ignoring unknown subscale id=%s", key)
            continue
        mapping[key] = int(value)
    return mapping


def is_complete(scores: BradenScoreInput) -> bool:
    mapping = _as_mapping(scores)
    return all(mapping.get(item.id, 0) > 0 for item in BRADEN_SUBSCALES)


def calculate_total_score(scores: BradenScoreInput) -> int:
    return sum(_as_mapping(scores).values())


def calculate_risk_level(total_score: int) -> BradenRiskLevel:
    return classify_score(BRADEN_RISK_TIERS, total_score).level  # type: ignore[return-value]
