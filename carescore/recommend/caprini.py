from __future__ import annotations

"""
Build a VTE prophylaxis plan from a Caprini assessment.

The tier selects one prophylaxis block; a heparin-induced thrombocytopenia
history swaps every heparin regimen for fondaparinux-based wording. Factor
specific add-ons and the monitoring/bleeding-risk items are independent.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from carescore.internal_core.contracts import CapriniAssessment, CapriniRiskLevel, Patient
from carescore.scales.caprini import (
    CAPRINI_RISK_CLASSIFICATIONS,
    FAMILY_VTE_FACTOR_ID,
    HIT_FACTOR_ID,
    MAJOR_ORTHOPEDIC_FACTOR_IDS,
    MALIGNANCY_FACTOR_ID,
    PRIOR_VTE_FACTOR_ID,
    THROMBOPHILIA_FACTOR_IDS,
    THROMBOPHILIA_MARKER_IDS,
    get_selected_factor_names,
)

from .base import PatientAttributes, Recommendation, sort_by_priority

logger = logging.getLogger(__name__)

CAPRINI_DISCLAIMER = (
    "This AI-generated VTE prophylaxis plan is intended as clinical decision support only. It "
    "does not replace professional clinical judgment. All recommendations should be validated "
    "by qualified healthcare providers, considering individual patient factors, bleeding risk, "
    "and institutional protocols."
)

CAPRINI_ESCALATION_REASON = (
    "Hematology or vascular medicine consultation recommended for optimal VTE prevention strategy."
)

HIT_CONTRAINDICATION = "Heparin-induced thrombocytopenia - avoid heparin products"

_HIGH_TIER_ESCALATION_IDS = THROMBOPHILIA_FACTOR_IDS | {HIT_FACTOR_ID, PRIOR_VTE_FACTOR_ID}


@dataclass(frozen=True)
class CapriniContext:
    selected_factor_ids: tuple[str, ...]
    total_score: int
    risk_level: CapriniRiskLevel
    patient: PatientAttributes | None = None

    @classmethod
    def from_assessment(
        cls, assessment: CapriniAssessment, patient: Patient | None = None
    ) -> "CapriniContext":
        return cls(
            selected_factor_ids=tuple(assessment.selected_factors),
            total_score=assessment.total_score,
            risk_level=assessment.risk_level,
            patient=(
                PatientAttributes(age=patient.age, care_setting=patient.care_setting)
                if patient is not None
                else None
            ),
        )


@dataclass(frozen=True)
class CapriniAnalysis:
    overall_risk: CapriniRiskLevel
    total_score: int
    vte_incidence: str
    primary_risk_factors: list[str]
    recommendations: list[Recommendation]
    prophylaxis_recommendation: str
    duration: str
    contraindications: list[str]
    escalation_needed: bool
    escalation_reason: str | None
    disclaimer: str = field(default=CAPRINI_DISCLAIMER)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_risk": self.overall_risk,
            "total_score": self.total_score,
            "vte_incidence": self.vte_incidence,
            "primary_risk_factors": list(self.primary_risk_factors),
            "recommendations": [item.to_dict() for item in self.recommendations],
            "prophylaxis_recommendation": self.prophylaxis_recommendation,
            "duration": self.duration,
            "contraindications": list(self.contraindications),
            "escalation_needed": self.escalation_needed,
            "escalation_reason": self.escalation_reason,
            "disclaimer": self.disclaimer,
        }


@dataclass(frozen=True)
class _ProphylaxisBlock:
    regimen: str
    duration: str
    recommendations: tuple[Recommendation, ...]


def generate_caprini_recommendations(context: CapriniContext) -> CapriniAnalysis:
    selected = set(context.selected_factor_ids)
    risk_level = context.risk_level
    has_hit = HIT_FACTOR_ID in selected

    contraindications: list[str] = []
    if has_hit:
        contraindications.append(HIT_CONTRAINDICATION)

    block = _prophylaxis_block(risk_level, has_hit)
    recommendations: list[Recommendation] = list(block.recommendations)
    recommendations.extend(_factor_specific_recommendations(selected))
    recommendations.append(
        Recommendation(
            category="Monitoring",
            priority="medium",
            recommendation=(
                "Monitor for signs/symptoms of DVT (leg swelling, pain, warmth) and PE (dyspnea, "
                "chest pain, tachycardia). Reassess Caprini score if clinical status changes."
            ),
            rationale="Early detection of breakthrough VTE allows prompt treatment",
            icon="eye",
        )
    )
    recommendations.append(
        Recommendation(
            category="Bleeding Risk",
            priority="medium",
            recommendation=(
                "Before initiating pharmacological prophylaxis, assess bleeding risk: active "
                "bleeding, severe thrombocytopenia, recent CNS surgery/hemorrhage, or planned "
                "spinal procedure."
            ),
            rationale="Bleeding risk must be balanced against VTE prevention benefit",
            icon="alert-circle",
        )
    )

    escalation_needed = is_caprini_escalation_needed(risk_level, context.selected_factor_ids)
    logger.debug(
        "caprini: risk=%s factors=%d hit=%s escalation=%s",
        risk_level,
        len(selected),
        has_hit,
        escalation_needed,
    )
    return CapriniAnalysis(
        overall_risk=risk_level,
        total_score=context.total_score,
        vte_incidence=CAPRINI_RISK_CLASSIFICATIONS[risk_level].vte_risk,
        primary_risk_factors=get_selected_factor_names(context.selected_factor_ids),
        recommendations=sort_by_priority(recommendations),
        prophylaxis_recommendation=block.regimen,
        duration=block.duration,
        contraindications=contraindications,
        escalation_needed=escalation_needed,
        escalation_reason=CAPRINI_ESCALATION_REASON if escalation_needed else None,
    )


def is_caprini_escalation_needed(
    risk_level: CapriniRiskLevel, selected_factor_ids: Sequence[str]
) -> bool:
    if risk_level == "highest":
        return True
    if risk_level != "high":
        return False
    return any(factor_id in _HIGH_TIER_ESCALATION_IDS for factor_id in selected_factor_ids)


def _prophylaxis_block(risk_level: CapriniRiskLevel, has_hit: bool) -> _ProphylaxisBlock:
    if risk_level == "veryLow":
        return _ProphylaxisBlock(
            regimen=(
                "No specific pharmacological prophylaxis required. Encourage early and "
                "frequent ambulation."
            ),
            duration="Until fully ambulatory",
            recommendations=(
                Recommendation(
                    category="Mobilization",
                    priority="medium",
                    recommendation=(
                        "Encourage early ambulation within 24 hours of surgery or admission if "
                        "no contraindications."
                    ),
                    rationale="Early mobilization is the primary preventive measure for very low-risk patients",
                    icon="activity",
                ),
            ),
        )

    if risk_level == "low":
        return _ProphylaxisBlock(
            regimen=(
                "Mechanical prophylaxis recommended: Intermittent pneumatic compression (IPC) or "
                "graduated compression stockings (GCS)."
            ),
            duration="Throughout hospitalization until fully ambulatory",
            recommendations=(
                Recommendation(
                    category="Mechanical Prophylaxis",
                    priority="high",
                    recommendation=(
                        "Apply intermittent pneumatic compression (IPC) devices. Alternative: "
                        "Graduated compression stockings (18-23 mmHg)."
                    ),
                    rationale="Mechanical prophylaxis reduces venous stasis without bleeding risk",
                    icon="shield",
                ),
                Recommendation(
                    category="Mobilization",
                    priority="medium",
                    recommendation="Encourage early and frequent ambulation.",
                    rationale="Ambulation complements mechanical prophylaxis",
                    icon="activity",
                ),
            ),
        )

    if risk_level == "moderate":
        return _ProphylaxisBlock(
            regimen=(
                "Fondaparinux 2.5mg SC daily (avoid heparin products due to HIT history). "
                "Consider mechanical prophylaxis as adjunct."
                if has_hit
                else "Low-molecular-weight heparin (LMWH) OR low-dose unfractionated heparin "
                "(LDUH) OR fondaparinux. Consider mechanical prophylaxis as adjunct."
            ),
            duration="Throughout hospitalization; consider extended prophylaxis for high-risk surgery",
            recommendations=(
                Recommendation(
                    category="Pharmacological Prophylaxis",
                    priority="critical",
                    recommendation=(
                        "Initiate Fondaparinux 2.5mg SC once daily (avoid all heparin products)."
                        if has_hit
                        else "Initiate LMWH (e.g., Enoxaparin 40mg SC daily) OR UFH 5000 units SC "
                        "q8-12h OR Fondaparinux 2.5mg SC daily."
                    ),
                    rationale=(
                        "Pharmacological prophylaxis significantly reduces VTE risk in "
                        "moderate-risk patients"
                    ),
                    icon="syringe",
                ),
                Recommendation(
                    category="Mechanical Prophylaxis",
                    priority="high",
                    recommendation=(
                        "Add intermittent pneumatic compression (IPC) for combined prophylaxis approach."
                    ),
                    rationale=(
                        "Combined mechanical and pharmacological prophylaxis provides optimal protection"
                    ),
                    icon="shield",
                ),
            ),
        )

    if risk_level == "high":
        return _ProphylaxisBlock(
            regimen=(
                "Fondaparinux 2.5mg SC daily with mechanical prophylaxis. Consider direct oral "
                "anticoagulants (DOACs) based on surgical context."
                if has_hit
                else "LMWH (higher prophylactic dose) OR fondaparinux PLUS mechanical prophylaxis "
                "(IPC). Extended prophylaxis may be indicated."
            ),
            duration=(
                "Throughout hospitalization; extended prophylaxis (up to 35 days) for major "
                "orthopedic or cancer surgery"
            ),
            recommendations=(
                Recommendation(
                    category="Pharmacological Prophylaxis",
                    priority="critical",
                    recommendation=(
                        "Fondaparinux 2.5mg SC daily. Consider Rivaroxaban or Apixaban if "
                        "appropriate for indication."
                        if has_hit
                        else "Initiate Enoxaparin 40mg SC daily (or 30mg SC q12h for higher risk). "
                        "Alternative: Fondaparinux 2.5mg SC daily."
                    ),
                    rationale="High-risk patients require aggressive pharmacological prophylaxis",
                    icon="syringe",
                ),
                Recommendation(
                    category="Combined Prophylaxis",
                    priority="high",
                    recommendation=(
                        "Apply IPC devices continuously when patient is immobile. Combine with "
                        "pharmacological prophylaxis."
                    ),
                    rationale="Dual prophylaxis provides synergistic VTE risk reduction",
                    icon="layers",
                ),
                Recommendation(
                    category="Extended Prophylaxis",
                    priority="high",
                    recommendation=(
                        "Consider extended prophylaxis post-discharge (up to 35 days) for major "
                        "abdominal/pelvic cancer surgery or major orthopedic surgery."
                    ),
                    rationale="VTE risk remains elevated for weeks after major surgery",
                    icon="calendar",
                ),
            ),
        )

    return _ProphylaxisBlock(
        regimen=(
            "Fondaparinux or DOAC with continuous mechanical prophylaxis. Mandatory extended "
            "prophylaxis post-discharge."
            if has_hit
            else "Aggressive pharmacological prophylaxis (LMWH preferred) PLUS continuous "
            "mechanical prophylaxis. Extended prophylaxis (up to 30 days) is mandatory."
        ),
        duration="Extended prophylaxis: 28-35 days post-operatively or post-discharge",
        recommendations=(
            Recommendation(
                category="Pharmacological Prophylaxis",
                priority="critical",
                recommendation=(
                    "URGENT: Fondaparinux 2.5mg SC daily. Hematology consultation recommended "
                    "for optimal anticoagulation strategy."
                    if has_hit
                    else "URGENT: Initiate Enoxaparin 40mg SC daily (or 30mg SC q12h). Start "
                    "within 12 hours of surgery if hemostasis achieved."
                ),
                rationale="Highest-risk patients have >10% VTE incidence without prophylaxis",
                icon="alert-triangle",
            ),
            Recommendation(
                category="Mechanical Prophylaxis",
                priority="critical",
                recommendation=(
                    "Apply bilateral IPC devices. Ensure continuous use when patient is in bed."
                ),
                rationale=(
                    "Maximum mechanical prophylaxis complements aggressive pharmacological approach"
                ),
                icon="shield",
            ),
            Recommendation(
                category="Extended Prophylaxis",
                priority="critical",
                recommendation=(
                    "MANDATORY extended thromboprophylaxis for minimum 28-35 days. Provide "
                    "discharge prescription for LMWH or transition to DOAC."
                ),
                rationale="Most VTE events in highest-risk patients occur after hospital discharge",
                icon="calendar",
            ),
            Recommendation(
                category="Specialist Consultation",
                priority="high",
                recommendation="Consider hematology consultation for optimization of prophylaxis strategy.",
                rationale=(
                    "Complex thrombophilia or multiple risk factors may benefit from specialist input"
                ),
                icon="user-md",
            ),
        ),
    )


def _factor_specific_recommendations(selected: set[str]) -> list[Recommendation]:
    out: list[Recommendation] = []
    if MALIGNANCY_FACTOR_ID in selected:
        out.append(
            Recommendation(
                category="Cancer-Associated VTE",
                priority="high",
                recommendation=(
                    "For cancer patients: LMWH preferred over UFH. Consider extended prophylaxis "
                    "during chemotherapy."
                ),
                rationale=(
                    "Cancer significantly increases VTE risk; LMWH shows better outcomes in "
                    "cancer patients"
                ),
                icon="activity",
            )
        )

    if PRIOR_VTE_FACTOR_ID in selected or FAMILY_VTE_FACTOR_ID in selected:
        out.append(
            Recommendation(
                category="History of VTE",
                priority="high",
                recommendation=(
                    "Consider thrombophilia workup if not previously completed. Extended "
                    "prophylaxis strongly recommended."
                ),
                rationale="Prior VTE significantly increases recurrence risk",
                icon="file-text",
            )
        )

    if selected & THROMBOPHILIA_MARKER_IDS:
        out.append(
            Recommendation(
                category="Thrombophilia",
                priority="high",
                recommendation=(
                    "Known thrombophilia present. Hematology consultation recommended for "
                    "perioperative management."
                ),
                rationale=(
                    "Inherited or acquired thrombophilia requires specialized anticoagulation planning"
                ),
                icon="alert-triangle",
            )
        )

    if selected & MAJOR_ORTHOPEDIC_FACTOR_IDS:
        out.append(
            Recommendation(
                category="Orthopedic Surgery",
                priority="critical",
                recommendation=(
                    "Major orthopedic surgery: Extended prophylaxis (minimum 10-14 days, preferably "
                    "35 days) with LMWH, Fondaparinux, Rivaroxaban, Apixaban, or Dabigatran."
                ),
                rationale=(
                    "Major orthopedic surgery carries highest VTE risk; extended prophylaxis is "
                    "standard of care"
                ),
                icon="bone",
            )
        )
    return out
