from __future__ import annotations

"""
Caprini VTE risk factor tables, total score and risk tier.

Factors fall into four weight classes (1, 2, 3 and 5 points). Unknown factor
ids contribute nothing and are dropped from name lookups.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Optional

from carescore.internal_core.contracts import CapriniRiskLevel

from .base import RiskTier, classify_score, validate_tier_table

logger = logging.getLogger(__name__)

FactorCategory = Literal["clinical", "surgical", "medical", "hematologic"]


@dataclass(frozen=True)
class RiskFactor:
    id: str
    name: str
    points: int
    category: FactorCategory
    description: Optional[str] = None


@dataclass(frozen=True)
class CapriniRiskTier(RiskTier):
    vte_risk: str
    prophylaxis: str


CAPRINI_1_POINT: tuple[RiskFactor, ...] = (
    RiskFactor("age_41_60", "Age 41-60 years", 1, "clinical"),
    RiskFactor("minor_surgery", "Minor surgery planned", 1, "surgical"),
    RiskFactor("history_major_surgery", "History of major surgery (<1 month)", 1, "surgical"),
    RiskFactor("varicose_veins", "Varicose veins", 1, "clinical"),
    RiskFactor("ibd", "Inflammatory bowel disease", 1, "medical"),
    RiskFactor("swollen_legs", "Swollen legs (current)", 1, "clinical"),
    RiskFactor("obesity_bmi_25", "Obesity (BMI > 25)", 1, "clinical"),
    RiskFactor("ami", "Acute myocardial infarction", 1, "medical"),
    RiskFactor("chf", "Congestive heart failure (<1 month)", 1, "medical"),
    RiskFactor("sepsis", "Sepsis (<1 month)", 1, "medical"),
    RiskFactor("lung_disease", "Serious lung disease incl. pneumonia (<1 month)", 1, "medical"),
    RiskFactor("copd", "COPD", 1, "medical"),
    RiskFactor("oral_contraceptives", "Oral contraceptives or HRT", 1, "medical"),
    RiskFactor("pregnant", "Pregnancy or postpartum (<1 month)", 1, "clinical"),
    RiskFactor(
        "unexplained_stillborn",
        "History of unexplained stillborn, miscarriage (≥3), premature birth with toxemia "
        "or growth-restricted infant",
        1,
        "medical",
    ),
)

CAPRINI_2_POINTS: tuple[RiskFactor, ...] = (
    RiskFactor("age_61_74", "Age 61-74 years", 2, "clinical"),
    RiskFactor("arthroscopic_surgery", "Arthroscopic surgery", 2, "surgical"),
    RiskFactor("major_surgery_45min", "Major surgery (>45 min)", 2, "surgical"),
    RiskFactor("laparoscopic_surgery", "Laparoscopic surgery (>45 min)", 2, "surgical"),
    RiskFactor("malignancy", "Malignancy (present or previous)", 2, "medical"),
    RiskFactor("confined_bed", "Confined to bed (>72 hours)", 2, "clinical"),
    RiskFactor("immobilizing_cast", "Immobilizing plaster cast (<1 month)", 2, "clinical"),
    RiskFactor("central_venous", "Central venous access", 2, "medical"),
)

CAPRINI_3_POINTS: tuple[RiskFactor, ...] = (
    RiskFactor("age_75", "Age ≥75 years", 3, "clinical"),
    RiskFactor("history_dvt_pe", "History of DVT/PE", 3, "hematologic"),
    RiskFactor("family_history_vte", "Family history of VTE", 3, "hematologic"),
    RiskFactor("factor_v_leiden", "Factor V Leiden", 3, "hematologic"),
    RiskFactor("prothrombin", "Prothrombin 20210A", 3, "hematologic"),
    RiskFactor("lupus_anticoagulant", "Lupus anticoagulant", 3, "hematologic"),
    RiskFactor("anticardiolipin", "Anticardiolipin antibodies", 3, "hematologic"),
    RiskFactor("homocysteine", "Elevated serum homocysteine", 3, "hematologic"),
    RiskFactor(
        "heparin_thrombocytopenia", "Heparin-induced thrombocytopenia (HIT)", 3, "hematologic"
    ),
    RiskFactor(
        "other_thrombophilia", "Other congenital or acquired thrombophilia", 3, "hematologic"
    ),
)

CAPRINI_5_POINTS: tuple[RiskFactor, ...] = (
    RiskFactor("stroke", "Stroke (<1 month)", 5, "medical"),
    RiskFactor("elective_arthroplasty", "Elective major lower extremity arthroplasty", 5, "surgical"),
    RiskFactor("hip_pelvis_leg_fracture", "Hip, pelvis, or leg fracture (<1 month)", 5, "surgical"),
    RiskFactor("acute_spinal_cord", "Acute spinal cord injury (paralysis) (<1 month)", 5, "medical"),
    RiskFactor("multiple_trauma", "Multiple trauma (<1 month)", 5, "surgical"),
)

ALL_CAPRINI_FACTORS: tuple[RiskFactor, ...] = (
    CAPRINI_1_POINT + CAPRINI_2_POINTS + CAPRINI_3_POINTS + CAPRINI_5_POINTS
)

CAPRINI_CATEGORIES: tuple[tuple[str, str, tuple[RiskFactor, ...]], ...] = (
    ("1_point", "1 Point Each", CAPRINI_1_POINT),
    ("2_points", "2 Points Each", CAPRINI_2_POINTS),
    ("3_points", "3 Points Each", CAPRINI_3_POINTS),
    ("5_points", "5 Points Each", CAPRINI_5_POINTS),
)

_FACTORS_BY_ID = {factor.id: factor for factor in ALL_CAPRINI_FACTORS}

# Identifier groups consulted by the recommendation rules.
HIT_FACTOR_ID = "heparin_thrombocytopenia"
PRIOR_VTE_FACTOR_ID = "history_dvt_pe"
FAMILY_VTE_FACTOR_ID = "family_history_vte"
MALIGNANCY_FACTOR_ID = "malignancy"
THROMBOPHILIA_MARKER_IDS = frozenset(
    {"factor_v_leiden", "prothrombin", "lupus_anticoagulant", "anticardiolipin"}
)
THROMBOPHILIA_FACTOR_IDS = frozenset({"other_thrombophilia"})
MAJOR_ORTHOPEDIC_FACTOR_IDS = frozenset({"elective_arthroplasty", "hip_pelvis_leg_fracture"})

CAPRINI_RISK_TIERS: tuple[CapriniRiskTier, ...] = (
    CapriniRiskTier(
        level="veryLow",
        label="Very Low Risk",
        description="Minimal risk of VTE",
        score_range="0",
        lower=None,
        upper=0,
        vte_risk="<0.5%",
        prophylaxis="Early ambulation",
    ),
    CapriniRiskTier(
        level="low",
        label="Low Risk",
        description="Low risk of VTE",
        score_range="1-2",
        lower=1,
        upper=2,
        vte_risk="~1.5%",
        prophylaxis="Mechanical prophylaxis (IPC or GCS)",
    ),
    CapriniRiskTier(
        level="moderate",
        label="Moderate Risk",
        description="Moderate risk - prophylaxis recommended",
        score_range="3-4",
        lower=3,
        upper=4,
        vte_risk="~3%",
        prophylaxis="Pharmacological prophylaxis ± mechanical",
    ),
    CapriniRiskTier(
        level="high",
        label="High Risk",
        description="High risk - pharmacologic prophylaxis required",
        score_range="5-8",
        lower=5,
        upper=8,
        vte_risk="~6%",
        prophylaxis="Pharmacological prophylaxis + mechanical",
    ),
    CapriniRiskTier(
        level="highest",
        label="Highest Risk",
        description="Highest risk - aggressive prophylaxis required",
        score_range="≥9",
        lower=9,
        upper=None,
        vte_risk=">10%",
        prophylaxis="Extended pharmacological prophylaxis (up to 30 days)",
    ),
)

validate_tier_table(CAPRINI_RISK_TIERS)

CAPRINI_RISK_CLASSIFICATIONS: dict[str, CapriniRiskTier] = {
    tier.level: tier for tier in CAPRINI_RISK_TIERS
}


def get_factor(factor_id: str) -> RiskFactor | None:
    return _FACTORS_BY_ID.get(factor_id)


def calculate_caprini_score(selected_factor_ids: Iterable[str]) -> int:
    total = 0
    for factor_id in selected_factor_ids:
        factor = _FACTORS_BY_ID.get(factor_id)
        if factor is None:
            logger.debug("caprini: unknown factor id=%s contributes 0", factor_id)
            continue
        total += factor.points
    return total


def calculate_caprini_risk_level(score: int) -> CapriniRiskLevel:
    return classify_score(CAPRINI_RISK_TIERS, score).level  # type: ignore[return-value]


def get_selected_factor_names(selected_factor_ids: Iterable[str]) -> list[str]:
    return [
        _FACTORS_BY_ID[factor_id].name
        for factor_id in selected_factor_ids
        if factor_id in _FACTORS_BY_ID
    ]
