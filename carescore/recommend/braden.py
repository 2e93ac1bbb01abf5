from __future__ import annotations

"""
Build a pressure-injury prevention plan from a Braden assessment.

Design intent:
- Fire one rule block per low subscale (score 2 or below; friction/shear only at 1).
- Always append support surface, skin protection and reassessment items.
- Collect escalation reasons into a single specialist-referral sentence.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from carescore.internal_core.contracts import (
    BradenAssessment,
    BradenRiskLevel,
    BradenScores,
    CareSetting,
    Patient,
)

from .base import PatientAttributes, Priority, Recommendation, sort_by_priority

logger = logging.getLogger(__name__)

BRADEN_DISCLAIMER = (
    "This AI-generated care plan is intended as clinical decision support only. It does not "
    "replace professional clinical judgment. All recommendations should be validated by "
    "qualified healthcare providers and adapted to individual patient needs and institutional "
    "protocols."
)

GERIATRIC_ESCALATION_AGE = 80

_REASSESSMENT_FREQUENCY: dict[str, str] = {
    "veryHigh": "daily",
    "high": "every 48 hours",
    "moderate": "twice weekly",
    "mild": "weekly",
}


@dataclass(frozen=True)
class BradenContext:
    scores: BradenScores
    total_score: int
    risk_level: BradenRiskLevel
    patient: PatientAttributes

    @classmethod
    def from_assessment(cls, assessment: BradenAssessment, patient: Patient) -> "BradenContext":
        return cls(
            scores=assessment.scores,
            total_score=assessment.total_score,
            risk_level=assessment.risk_level,
            patient=PatientAttributes(age=patient.age, care_setting=patient.care_setting),
        )


@dataclass(frozen=True)
class BradenAnalysis:
    overall_risk: BradenRiskLevel
    total_score: int
    primary_concerns: list[str]
    recommendations: list[Recommendation]
    repositioning_frequency: str
    mattress_recommendation: str
    escalation_needed: bool
    escalation_reason: str | None
    disclaimer: str = field(default=BRADEN_DISCLAIMER)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_risk": self.overall_risk,
            "total_score": self.total_score,
            "primary_concerns": list(self.primary_concerns),
            "recommendations": [item.to_dict() for item in self.recommendations],
            "repositioning_frequency": self.repositioning_frequency,
            "mattress_recommendation": self.mattress_recommendation,
            "escalation_needed": self.escalation_needed,
            "escalation_reason": self.escalation_reason,
            "disclaimer": self.disclaimer,
        }


def generate_braden_recommendations(context: BradenContext) -> BradenAnalysis:
    scores = context.scores
    risk_level = context.risk_level
    if not scores.is_complete():
        logger.warning(
            "braden: generating plan from incomplete sub-scores total=%s", context.total_score
        )

    recommendations: list[Recommendation] = []
    primary_concerns: list[str] = []

    _sensory_rules(scores, primary_concerns, recommendations)
    _moisture_rules(scores, primary_concerns, recommendations)
    _activity_rules(scores, primary_concerns, recommendations)
    _mobility_rules(scores, risk_level, primary_concerns, recommendations)
    _nutrition_rules(scores, primary_concerns, recommendations)
    _friction_shear_rules(scores, primary_concerns, recommendations)

    mattress = _support_surface_recommendation(risk_level, scores, context.patient.care_setting)
    recommendations.append(mattress)
    recommendations.append(_skin_protection_recommendation(risk_level, scores))

    escalation_reason = _escalation_reason(risk_level, scores, context.patient)
    if escalation_reason:
        recommendations.append(
            Recommendation(
                category="Escalation",
                priority="critical",
                recommendation=escalation_reason,
                rationale="Specialist intervention may prevent pressure injury development",
                icon="alert-triangle",
            )
        )

    recommendations.append(
        Recommendation(
            category="Documentation",
            priority="medium",
            recommendation=(
                f"Reassess Braden Score {get_reassessment_frequency(risk_level)}. "
                "Document all preventive interventions."
            ),
            rationale="Regular reassessment identifies changes in risk status early",
            icon="file-text",
        )
    )

    logger.debug(
        "braden: risk=%s concerns=%d recommendations=%d escalation=%s",
        risk_level,
        len(primary_concerns),
        len(recommendations),
        bool(escalation_reason),
    )
    return BradenAnalysis(
        overall_risk=risk_level,
        total_score=context.total_score,
        primary_concerns=primary_concerns,
        recommendations=sort_by_priority(recommendations),
        repositioning_frequency=get_repositioning_frequency(risk_level, scores.mobility),
        mattress_recommendation=mattress.recommendation,
        escalation_needed=escalation_reason is not None,
        escalation_reason=escalation_reason,
    )


def _sensory_rules(
    scores: BradenScores, concerns: list[str], out: list[Recommendation]
) -> None:
    if scores.sensory_perception > 2:
        return
    concerns.append("Impaired sensory perception")
    out.append(
        Recommendation(
            category="Sensory Care",
            priority="critical" if scores.sensory_perception == 1 else "high",
            recommendation="Implement regular skin inspection protocol (every shift minimum)",
            rationale="Patient cannot adequately perceive pressure-related discomfort",
            icon="eye",
        )
    )
    out.append(
        Recommendation(
            category="Positioning",
            priority="high",
            recommendation="Use visual repositioning schedule at bedside",
            rationale="Patient may not request position changes independently",
            icon="clock",
        )
    )


def _moisture_rules(scores: BradenScores, concerns: list[str], out: list[Recommendation]) -> None:
    if scores.moisture > 2:
        return
    concerns.append("Excessive moisture exposure")
    constantly_moist = scores.moisture == 1
    out.append(
        Recommendation(
            category="Moisture Management",
            priority="critical" if constantly_moist else "high",
            recommendation=(
                "Apply barrier cream after each incontinence episode. Consider moisture-wicking pads."
                if constantly_moist
                else "Use absorbent underpads. Change linens immediately when damp."
            ),
            rationale="Excessive moisture increases friction and skin breakdown risk",
            icon="droplets",
        )
    )
    if constantly_moist:
        out.append(
            Recommendation(
                category="Incontinence Care",
                priority="high",
                recommendation=(
                    "Evaluate for incontinence management program. Consider indwelling "
                    "catheter assessment."
                ),
                rationale="Constant moisture significantly elevates pressure injury risk",
                icon="shield",
            )
        )


def _activity_rules(scores: BradenScores, concerns: list[str], out: list[Recommendation]) -> None:
    if scores.activity > 2:
        return
    concerns.append("Limited physical activity")
    out.append(
        Recommendation(
            category="Activity Enhancement",
            priority="high",
            recommendation=(
                "Initiate bed mobility exercises. Consult physical therapy for safe mobilization plan."
                if scores.activity == 1
                else "Assist to chair for meals when possible. Encourage any tolerated activity."
            ),
            rationale="Immobility is a primary risk factor for pressure injuries",
            icon="activity",
        )
    )


def _mobility_rules(
    scores: BradenScores,
    risk_level: BradenRiskLevel,
    concerns: list[str],
    out: list[Recommendation],
) -> None:
    if scores.mobility > 2:
        return
    concerns.append("Impaired mobility")
    frequency = get_repositioning_frequency(risk_level, scores.mobility)
    out.append(
        Recommendation(
            category="Repositioning",
            priority="critical",
            recommendation=(
                f"Reposition every {frequency}. Use 30-degree lateral positioning. "
                "Avoid positioning on existing pressure areas."
            ),
            rationale="Frequent repositioning redistributes pressure and maintains tissue perfusion",
            icon="rotate-ccw",
        )
    )
    out.append(
        Recommendation(
            category="Positioning Aids",
            priority="high",
            recommendation=(
                "Use pillows or foam wedges to maintain positions. Elevate heels off bed surface."
            ),
            rationale="Proper positioning devices reduce pressure concentration",
            icon="layers",
        )
    )


def _nutrition_rules(scores: BradenScores, concerns: list[str], out: list[Recommendation]) -> None:
    if scores.nutrition > 2:
        return
    concerns.append("Nutritional deficit")
    very_poor = scores.nutrition == 1
    out.append(
        Recommendation(
            category="Nutrition",
            priority="critical" if very_poor else "high",
            recommendation=(
                "URGENT: Consult dietitian. Consider nutritional supplements. Evaluate for "
                "enteral feeding if oral intake inadequate."
                if very_poor
                else "Offer high-protein supplements between meals. Monitor meal intake percentages."
            ),
            rationale="Adequate protein and calories are essential for tissue integrity and healing",
            icon="utensils",
        )
    )
    out.append(
        Recommendation(
            category="Nutrition Monitoring",
            priority="medium",
            recommendation="Obtain weekly weights. Monitor serum albumin and pre-albumin if available.",
            rationale="Objective measures help track nutritional status improvement",
            icon="trending-up",
        )
    )


def _friction_shear_rules(
    scores: BradenScores, concerns: list[str], out: list[Recommendation]
) -> None:
    # Range is 1-3, so only the minimum counts as a problem.
    if scores.friction_shear != 1:
        return
    concerns.append("Friction and shear forces")
    out.append(
        Recommendation(
            category="Transfer Technique",
            priority="critical",
            recommendation=(
                "Use lift sheets for repositioning. Never drag patient. Ensure adequate staff "
                "for safe transfers."
            ),
            rationale="Friction and shear cause direct tissue damage",
            icon="move",
        )
    )
    out.append(
        Recommendation(
            category="Bed Position",
            priority="high",
            recommendation=(
                "Keep head of bed at lowest safe angle (≤30° unless contraindicated). "
                "Use knee gatch to prevent sliding."
            ),
            rationale="Elevated head positions increase shear forces on sacrum and heels",
            icon="bed",
        )
    )


def get_repositioning_frequency(risk_level: BradenRiskLevel, mobility_score: int) -> str:
    if risk_level == "veryHigh" or mobility_score == 1:
        return "2 hours (or more frequently if on specialty surface)"
    if risk_level == "high" or mobility_score == 2:
        return "2-3 hours"
    if risk_level == "moderate":
        return "3-4 hours"
    return "4 hours or as needed"


def get_reassessment_frequency(risk_level: BradenRiskLevel) -> str:
    return _REASSESSMENT_FREQUENCY.get(risk_level, "weekly or with significant condition change")


def _support_surface_recommendation(
    risk_level: BradenRiskLevel,
    scores: BradenScores,
    care_setting: CareSetting,
) -> Recommendation:
    priority: Priority
    if risk_level == "veryHigh" or (scores.mobility == 1 and scores.activity == 1):
        text = (
            "ALTERNATING PRESSURE MATTRESS (APM) or LOW AIR LOSS surface required. Consider "
            "air-fluidized bed if multiple stage III/IV pressure injuries present."
        )
        priority = "critical"
    elif risk_level == "high":
        text = (
            "Pressure redistribution mattress required (foam with density ≥1.3 lb/ft³ or "
            "alternating pressure overlay). Standard hospital mattress inadequate."
        )
        priority = "high"
    elif risk_level == "moderate":
        text = "High-specification foam mattress recommended. Evaluate current surface adequacy."
        priority = "medium"
    else:
        text = "Standard pressure-redistribution mattress adequate. Ensure mattress is not bottomed out."
        priority = "low"

    if care_setting == "homeCare":
        text += (
            " For home care: Assess home bed suitability. Arrange rental of appropriate "
            "surface if needed."
        )

    return Recommendation(
        category="Support Surface",
        priority=priority,
        recommendation=text,
        rationale=(
            "Appropriate support surfaces redistribute pressure and reduce tissue interface pressure"
        ),
        icon="bed",
    )


def _skin_protection_recommendation(
    risk_level: BradenRiskLevel, scores: BradenScores
) -> Recommendation:
    priority: Priority
    if risk_level in ("veryHigh", "high"):
        text = (
            "Apply prophylactic foam dressings to sacrum and heels. Use silicone-bordered "
            "dressings for high-friction areas. Inspect all bony prominences each shift."
        )
        priority = "high"
    elif risk_level == "moderate":
        text = (
            "Consider prophylactic dressings for sacrum if patient is incontinent or has limited "
            "mobility. Apply heel protectors during sleep."
        )
        priority = "medium"
    else:
        text = (
            "Maintain skin hydration with appropriate moisturizers. Perform routine skin "
            "inspection during care activities."
        )
        priority = "low"

    if scores.moisture <= 2:
        text += " Apply moisture barrier products to perineal area and skin folds."

    return Recommendation(
        category="Skin Protection",
        priority=priority,
        recommendation=text,
        rationale="Protective dressings reduce friction, shear, and moisture exposure at high-risk areas",
        icon="shield-check",
    )


def _escalation_reason(
    risk_level: BradenRiskLevel, scores: BradenScores, patient: PatientAttributes
) -> str | None:
    reasons: list[str] = []
    if risk_level == "veryHigh":
        reasons.append("Consult wound care specialist for comprehensive prevention plan")
    if scores.nutrition == 1:
        reasons.append("Urgent dietitian referral for nutritional intervention")
    if scores.mobility == 1 and scores.activity == 1:
        reasons.append("Physical/occupational therapy consult for mobility optimization")
    if patient.age >= GERIATRIC_ESCALATION_AGE and risk_level not in ("none", "mild"):
        reasons.append("Consider geriatric consultation given advanced age and elevated risk")
    if not reasons:
        return None
    return ". ".join(reasons)
