from __future__ import annotations

"""
Build a DVT diagnostic pathway from a Wells assessment.

Design intent:
- Probability picks the pathway (D-dimer first when unlikely, imaging first
  when likely).
- Criterion add-ons contribute recommendations and treatment considerations.
- Treatment, compression and PE-warning items are always present.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from carescore.internal_core.contracts import Patient, WellsAssessment, WellsProbability
from carescore.scales.wells import (
    ACTIVE_CANCER_ID,
    BEDRIDDEN_ID,
    PARALYSIS_ID,
    PRIOR_DVT_ID,
    WELLS_CLASSIFICATIONS,
    get_selected_criteria_names,
)

from .base import PatientAttributes, Recommendation, sort_by_priority

logger = logging.getLogger(__name__)

WELLS_DISCLAIMER = (
    "This AI-generated DVT assessment is intended as clinical decision support only. It does "
    "not replace professional clinical judgment. The Wells score is a pre-test probability "
    "tool and must be combined with appropriate diagnostic testing. All recommendations "
    "should be validated by qualified healthcare providers."
)

WELLS_ESCALATION_REASON = (
    "Vascular medicine or hematology consultation recommended for confirmed DVT or complex cases."
)

AGE_ADJUSTED_D_DIMER_MIN_AGE = 50
HIGH_SUSPICION_SCORE = 3

UNLIKELY_PATHWAY = "D-dimer → If negative, DVT ruled out. If positive, proceed to ultrasound."
LIKELY_PATHWAY = (
    "Compression ultrasound → If positive, treat. If negative but high suspicion, repeat in "
    "5-7 days or consider D-dimer/whole-leg ultrasound."
)


@dataclass(frozen=True)
class WellsContext:
    selected_criteria_ids: tuple[str, ...]
    total_score: int
    probability: WellsProbability
    patient: Optional[PatientAttributes] = None

    @classmethod
    def from_assessment(
        cls, assessment: WellsAssessment, patient: Optional[Patient] = None
    ) -> "WellsContext":
        return cls(
            selected_criteria_ids=tuple(assessment.selected_criteria),
            total_score=assessment.total_score,
            probability=assessment.probability,
            patient=(
                PatientAttributes(age=patient.age, care_setting=patient.care_setting)
                if patient is not None
                else None
            ),
        )


@dataclass(frozen=True)
class WellsAnalysis:
    probability: WellsProbability
    total_score: int
    dvt_likelihood: str
    selected_criteria: list[str]
    recommendations: list[Recommendation]
    diagnostic_pathway: str
    d_dimer_indicated: bool
    ultrasound_indicated: bool
    treatment_considerations: list[str]
    escalation_needed: bool
    escalation_reason: Optional[str]
    disclaimer: str = field(default=WELLS_DISCLAIMER)

    def to_dict(self) -> dict[str, Any]:
        return {
            "probability": self.probability,
            "total_score": self.total_score,
            "dvt_likelihood": self.dvt_likelihood,
            "selected_criteria": list(self.selected_criteria),
            "recommendations": [item.to_dict() for item in self.recommendations],
            "diagnostic_pathway": self.diagnostic_pathway,
            "d_dimer_indicated": self.d_dimer_indicated,
            "ultrasound_indicated": self.ultrasound_indicated,
            "treatment_considerations": list(self.treatment_considerations),
            "escalation_needed": self.escalation_needed,
            "escalation_reason": self.escalation_reason,
            "disclaimer": self.disclaimer,
        }


def age_adjusted_d_dimer_cutoff(age: int) -> Optional[int]:
    """Return the age-adjusted cutoff in ng/mL, or None when the standard 500 applies."""
    if age > AGE_ADJUSTED_D_DIMER_MIN_AGE:
        return age * 10
    return None


def generate_wells_recommendations(context: WellsContext) -> WellsAnalysis:
    selected = set(context.selected_criteria_ids)
    recommendations: list[Recommendation] = []
    treatment_considerations: list[str] = []

    if context.probability == "unlikely":
        d_dimer_indicated, ultrasound_indicated = True, False
        diagnostic_pathway = UNLIKELY_PATHWAY
        recommendations.extend(_unlikely_pathway(context.patient))
    else:
        d_dimer_indicated, ultrasound_indicated = False, True
        diagnostic_pathway = LIKELY_PATHWAY
        recommendations.extend(_likely_pathway(context.total_score))

    if ACTIVE_CANCER_ID in selected:
        recommendations.append(
            Recommendation(
                category="Cancer-Associated DVT",
                priority="high",
                recommendation=(
                    "Active cancer present. If DVT confirmed, LMWH or DOAC (edoxaban, rivaroxaban) "
                    "preferred over warfarin for cancer-associated VTE."
                ),
                rationale=(
                    "Cancer patients have higher recurrence risk; LMWH/DOACs show better outcomes "
                    "than VKA"
                ),
                icon="activity",
            )
        )
        treatment_considerations.append(
            "Prefer LMWH or edoxaban/rivaroxaban for cancer-associated DVT"
        )

    if PRIOR_DVT_ID in selected:
        recommendations.append(
            Recommendation(
                category="Recurrent DVT",
                priority="high",
                recommendation=(
                    "History of prior DVT. If new DVT confirmed, consider extended or indefinite "
                    "anticoagulation. Thrombophilia workup may be indicated."
                ),
                rationale="Recurrent VTE suggests underlying prothrombotic state",
                icon="repeat",
            )
        )
        treatment_considerations.append("Consider extended anticoagulation for recurrent DVT")
        treatment_considerations.append("Evaluate for underlying thrombophilia")

    if PARALYSIS_ID in selected:
        recommendations.append(
            Recommendation(
                category="Immobility-Related DVT",
                priority="medium",
                recommendation=(
                    "Paralysis or recent immobilization present. Ensure ongoing VTE prophylaxis is "
                    "in place. Physical therapy for early mobilization when appropriate."
                ),
                rationale="Immobility significantly increases DVT risk and recurrence",
                icon="move",
            )
        )

    if BEDRIDDEN_ID in selected:
        recommendations.append(
            Recommendation(
                category="Post-Surgical/Bedridden",
                priority="medium",
                recommendation=(
                    "Recent surgery or prolonged bed rest. Ensure appropriate VTE prophylaxis "
                    "was/is provided. Early mobilization is key for prevention."
                ),
                rationale="Surgery and immobility are major VTE risk factors",
                icon="bed",
            )
        )

    recommendations.extend(_always_present())

    escalation_needed = is_wells_escalation_needed(
        context.probability, context.total_score, context.selected_criteria_ids
    )
    logger.debug(
        "wells: probability=%s score=%d recommendations=%d escalation=%s",
        context.probability,
        context.total_score,
        len(recommendations),
        escalation_needed,
    )
    return WellsAnalysis(
        probability=context.probability,
        total_score=context.total_score,
        dvt_likelihood=WELLS_CLASSIFICATIONS[context.probability].dvt_prevalence,
        selected_criteria=get_selected_criteria_names(context.selected_criteria_ids),
        recommendations=sort_by_priority(recommendations),
        diagnostic_pathway=diagnostic_pathway,
        d_dimer_indicated=d_dimer_indicated,
        ultrasound_indicated=ultrasound_indicated,
        treatment_considerations=treatment_considerations,
        escalation_needed=escalation_needed,
        escalation_reason=WELLS_ESCALATION_REASON if escalation_needed else None,
    )


def is_wells_escalation_needed(
    probability: WellsProbability, total_score: int, selected_criteria_ids: Sequence[str]
) -> bool:
    return (
        probability == "likely"
        or ACTIVE_CANCER_ID in selected_criteria_ids
        or total_score >= HIGH_SUSPICION_SCORE
    )


def _d_dimer_interpretation_text(patient: Optional[PatientAttributes]) -> str:
    text = (
        "Use age-adjusted D-dimer cutoff for patients >50 years: Age × 10 ng/mL "
        "(e.g., 600 ng/mL for 60-year-old)."
    )
    cutoff = age_adjusted_d_dimer_cutoff(patient.age) if patient is not None else None
    if cutoff is not None:
        text += f" For this {patient.age}-year-old patient, the cutoff is {cutoff} ng/mL."
    return text


def _unlikely_pathway(patient: Optional[PatientAttributes]) -> list[Recommendation]:
    return [
        Recommendation(
            category="Diagnostic Pathway",
            priority="high",
            recommendation=(
                "Order high-sensitivity D-dimer test. If D-dimer is negative (<500 ng/mL or "
                "age-adjusted cutoff), DVT can be safely ruled out without imaging."
            ),
            rationale=(
                "In low probability patients, negative D-dimer has >99% negative predictive "
                "value for DVT"
            ),
            icon="test-tube",
        ),
        Recommendation(
            category="D-dimer Interpretation",
            priority="medium",
            recommendation=_d_dimer_interpretation_text(patient),
            rationale=(
                "Age-adjusted cutoffs improve specificity while maintaining sensitivity in "
                "elderly patients"
            ),
            icon="calculator",
        ),
        Recommendation(
            category="If D-dimer Positive",
            priority="high",
            recommendation=(
                "If D-dimer is elevated, proceed to compression ultrasonography of the "
                "symptomatic leg."
            ),
            rationale="Positive D-dimer in low-probability patients still requires imaging to rule out DVT",
            icon="scan",
        ),
        Recommendation(
            category="Clinical Re-evaluation",
            priority="medium",
            recommendation=(
                "If D-dimer negative and DVT ruled out, consider alternative diagnoses: muscle "
                "strain, Baker's cyst, cellulitis, superficial thrombophlebitis, lymphedema."
            ),
            rationale="Low Wells score suggests alternative diagnosis may be more likely",
            icon="search",
        ),
    ]


def _likely_pathway(total_score: int) -> list[Recommendation]:
    items = [
        Recommendation(
            category="Urgent Imaging",
            priority="critical",
            recommendation=(
                "Order compression ultrasonography (CUS) of the symptomatic leg as first-line "
                "imaging. Proximal CUS is standard; consider whole-leg ultrasound if available."
            ),
            rationale="In DVT-likely patients, imaging should not be delayed for D-dimer testing",
            icon="scan",
        ),
        Recommendation(
            category="Empiric Anticoagulation",
            priority="critical",
            recommendation=(
                "If ultrasound will be delayed >4 hours, consider empiric anticoagulation (LMWH "
                "or DOAC) while awaiting definitive imaging."
            ),
            rationale="DVT-likely patients have ~28% prevalence; delay in treatment risks PE",
            icon="syringe",
        ),
        Recommendation(
            category="If Ultrasound Negative",
            priority="high",
            recommendation=(
                "If initial CUS is negative but clinical suspicion remains high: (1) Repeat CUS "
                "in 5-7 days, OR (2) Perform D-dimer - if negative, DVT unlikely; if positive, "
                "repeat imaging, OR (3) Consider whole-leg ultrasound or CT/MR venography."
            ),
            rationale="Single negative proximal CUS may miss isolated calf DVT or early proximal DVT",
            icon="refresh-cw",
        ),
    ]
    if total_score >= HIGH_SUSPICION_SCORE:
        items.append(
            Recommendation(
                category="High Clinical Suspicion",
                priority="critical",
                recommendation=(
                    "Very high clinical probability (score ≥3). Even with initial negative "
                    "ultrasound, strongly consider repeat imaging or alternative modalities. Do "
                    "not dismiss DVT without thorough workup."
                ),
                rationale=(
                    "High Wells score patients have significant DVT risk even with initially "
                    "negative imaging"
                ),
                icon="alert-triangle",
            )
        )
    return items


def _always_present() -> list[Recommendation]:
    return [
        Recommendation(
            category="Treatment if DVT Confirmed",
            priority="high",
            recommendation=(
                "If DVT confirmed: Initiate anticoagulation immediately (DOAC preferred for most "
                "patients: Rivaroxaban 15mg BID × 21 days then 20mg daily, OR Apixaban 10mg BID "
                "× 7 days then 5mg BID). Duration: minimum 3 months, longer for unprovoked DVT."
            ),
            rationale="Prompt anticoagulation prevents clot extension and PE",
            icon="pill",
        ),
        Recommendation(
            category="Compression Therapy",
            priority="medium",
            recommendation=(
                "If DVT confirmed in proximal veins, consider graduated compression stockings "
                "(30-40 mmHg) for prevention of post-thrombotic syndrome. Early ambulation is "
                "encouraged."
            ),
            rationale=(
                "Compression may reduce risk of post-thrombotic syndrome; bed rest is not indicated"
            ),
            icon="shield",
        ),
        Recommendation(
            category="PE Warning Signs",
            priority="critical",
            recommendation=(
                "Assess for pulmonary embolism symptoms: dyspnea, chest pain, tachycardia, "
                "hypoxia, syncope. If present, urgent PE workup required (CTPA or V/Q scan)."
            ),
            rationale="DVT and PE often coexist; PE requires emergent diagnosis and treatment",
            icon="alert-triangle",
        ),
    ]
