from __future__ import annotations

"""
Record and analyze assessments against an injected repository.

Design intent:
- Compute score and tier before building the immutable record.
- Refuse to persist a Braden assessment with unset sub-scores.
- Leave an audit trail of ids and counts, never free-text notes.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional
from uuid import uuid4

from carescore.internal_core.assessment_store import AssessmentRepository
from carescore.internal_core.audit import log_event
from carescore.internal_core.config import CarescoreConfig, load_config
from carescore.internal_core.contracts import (
    AuditEventType,
    BradenAssessment,
    BradenScores,
    CapriniAssessment,
    CareSetting,
    Patient,
    Sex,
    WellsAssessment,
)
from carescore.recommend.braden import BradenContext
from carescore.recommend.caprini import CapriniContext
from carescore.recommend.wells import WellsContext
from carescore.scales.braden import BradenScoreInput
from carescore.trend import TrendResult, analyze_trend
from carescore.utils.dates import DateInput, age_from_date_of_birth

from .dispatch import AnalysisResult, classify_tier, compute_score, generate_recommendations

logger = logging.getLogger(__name__)


class IncompleteAssessmentError(ValueError):
    """Raised when a Braden assessment still has unset (0) sub-scores."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Braden assessment incomplete; unset subscales: {', '.join(missing)}")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def _audit(
    repo: AssessmentRepository,
    cfg: CarescoreConfig,
    subject_id: str,
    event_type: AuditEventType,
    code: str,
    detail: str,
) -> None:
    if not cfg.CARESCORE_AUDIT_ENABLED:
        return
    log_event(
        repo,
        subject_id,
        event_type,
        code,
        detail,
        max_chars=cfg.CARESCORE_AUDIT_DETAIL_MAX_CHARS,
    )


def create_patient(
    repo: AssessmentRepository,
    *,
    name: str,
    date_of_birth: str,
    sex: Sex,
    care_setting: CareSetting = "hospital",
    admission_date: Optional[str] = None,
    medical_record_number: Optional[str] = None,
    diagnosis: Optional[str] = None,
    room_number: Optional[str] = None,
    notes: Optional[str] = None,
    today: Optional[DateInput] = None,
    config: Optional[CarescoreConfig] = None,
) -> Patient:
    cfg = config or load_config()
    stamp = _now_iso()
    patient = Patient(
        id=_new_id("patient"),
        name=name,
        date_of_birth=date_of_birth,
        age=age_from_date_of_birth(date_of_birth, today),
        sex=sex,
        care_setting=care_setting,
        admission_date=admission_date or stamp[:10],
        medical_record_number=medical_record_number,
        diagnosis=diagnosis,
        room_number=room_number,
        notes=notes,
        created_at=stamp,
        updated_at=stamp,
    )
    repo.add_patient(patient)
    _audit(repo, cfg, patient.id, "PATIENT_CREATED", "created", f"care_setting={care_setting}")
    logger.info("workflow: created patient id=%s", patient.id)
    return patient


def update_patient(
    repo: AssessmentRepository,
    patient_id: str,
    updates: Dict[str, Any],
    *,
    today: Optional[DateInput] = None,
    config: Optional[CarescoreConfig] = None,
) -> Patient:
    cfg = config or load_config()
    changes = dict(updates)
    if "date_of_birth" in changes and "age" not in changes:
        changes["age"] = age_from_date_of_birth(changes["date_of_birth"], today)
    patient = repo.update_patient(patient_id, changes)
    _audit(repo, cfg, patient_id, "PATIENT_UPDATED", "updated", f"fields={sorted(changes)}")
    return patient


def delete_patient(
    repo: AssessmentRepository, patient_id: str, *, config: Optional[CarescoreConfig] = None
) -> None:
    cfg = config or load_config()
    removed = len(repo.list_assessments(patient_id))
    repo.delete_patient(patient_id)
    _audit(repo, cfg, patient_id, "PATIENT_DELETED", "deleted", f"assessments_removed={removed}")
    logger.info("workflow: deleted patient id=%s assessments=%d", patient_id, removed)


def record_braden_assessment(
    repo: AssessmentRepository,
    patient_id: str,
    scores: BradenScoreInput,
    *,
    date: Optional[str] = None,
    notes: Optional[str] = None,
    assessed_by: Optional[str] = None,
    config: Optional[CarescoreConfig] = None,
) -> BradenAssessment:
    cfg = config or load_config()
    repo.get_patient(patient_id)
    if isinstance(scores, BradenScores):
        braden_scores = scores
    else:
        braden_scores = BradenScores.model_validate(dict(scores))
    missing = [key for key, value in braden_scores.as_mapping().items() if value == 0]
    if missing:
        _audit(
            repo, cfg, patient_id, "ASSESSMENT_REJECTED", "braden_incomplete", f"missing={missing}"
        )
        logger.warning(
            "workflow: rejected incomplete braden patient=%s missing=%s", patient_id, missing
        )
        raise IncompleteAssessmentError(missing)

    total = compute_score("braden", braden_scores)
    assessment = BradenAssessment(
        id=_new_id("braden"),
        patient_id=patient_id,
        date=date or _now_iso(),
        scores=braden_scores,
        total_score=total,
        risk_level=classify_tier("braden", total),
        notes=notes,
        assessed_by=assessed_by,
    )
    return _persist(repo, cfg, assessment, f"total={total} tier={assessment.risk_level}")


def record_caprini_assessment(
    repo: AssessmentRepository,
    patient_id: str,
    selected_factors: Iterable[str],
    *,
    date: Optional[str] = None,
    notes: Optional[str] = None,
    assessed_by: Optional[str] = None,
    config: Optional[CarescoreConfig] = None,
) -> CapriniAssessment:
    cfg = config or load_config()
    repo.get_patient(patient_id)
    factors = list(selected_factors)
    total = compute_score("caprini", factors)
    assessment = CapriniAssessment(
        id=_new_id("caprini"),
        patient_id=patient_id,
        date=date or _now_iso(),
        selected_factors=factors,
        total_score=total,
        risk_level=classify_tier("caprini", total),
        notes=notes,
        assessed_by=assessed_by,
    )
    return _persist(
        repo, cfg, assessment, f"factors={len(factors)} total={total} tier={assessment.risk_level}"
    )


def record_wells_assessment(
    repo: AssessmentRepository,
    patient_id: str,
    selected_criteria: Iterable[str],
    *,
    date: Optional[str] = None,
    notes: Optional[str] = None,
    assessed_by: Optional[str] = None,
    config: Optional[CarescoreConfig] = None,
) -> WellsAssessment:
    cfg = config or load_config()
    repo.get_patient(patient_id)
    criteria = list(selected_criteria)
    total = compute_score("wells", criteria)
    assessment = WellsAssessment(
        id=_new_id("wells"),
        patient_id=patient_id,
        date=date or _now_iso(),
        selected_criteria=criteria,
        total_score=total,
        probability=classify_tier("wells", total),
        notes=notes,
        assessed_by=assessed_by,
    )
    return _persist(
        repo, cfg, assessment, f"criteria={len(criteria)} total={total} tier={assessment.probability}"
    )


def _persist(repo: AssessmentRepository, cfg: CarescoreConfig, assessment: Any, detail: str) -> Any:
    repo.add_assessment(assessment)
    _audit(repo, cfg, assessment.patient_id, "ASSESSMENT_RECORDED", assessment.instrument, detail)
    logger.info(
        "workflow: recorded %s assessment id=%s patient=%s",
        assessment.instrument,
        assessment.id,
        assessment.patient_id,
    )
    return assessment


def delete_assessment(
    repo: AssessmentRepository, assessment_id: str, *, config: Optional[CarescoreConfig] = None
) -> None:
    cfg = config or load_config()
    assessment = repo.get_assessment(assessment_id)
    repo.delete_assessment(assessment_id)
    _audit(
        repo,
        cfg,
        assessment.patient_id,
        "ASSESSMENT_DELETED",
        assessment.instrument,
        f"assessment_id={assessment_id}",
    )


def analyze_assessment(
    repo: AssessmentRepository, assessment_id: str, *, config: Optional[CarescoreConfig] = None
) -> AnalysisResult:
    cfg = config or load_config()
    assessment = repo.get_assessment(assessment_id)
    patient = repo.get_patient(assessment.patient_id)
    if isinstance(assessment, BradenAssessment):
        context: Any = BradenContext.from_assessment(assessment, patient)
    elif isinstance(assessment, CapriniAssessment):
        context = CapriniContext.from_assessment(assessment, patient)
    else:
        context = WellsContext.from_assessment(assessment, patient)
    result = generate_recommendations(assessment.instrument, context)
    _audit(
        repo,
        cfg,
        patient.id,
        "ANALYSIS_COMPUTED",
        assessment.instrument,
        f"assessment_id={assessment_id} recommendations={len(result.recommendations)} "
        f"escalation={result.escalation_needed}",
    )
    return result


def analyze_patient_trend(
    repo: AssessmentRepository, patient_id: str, *, config: Optional[CarescoreConfig] = None
) -> Optional[TrendResult]:
    cfg = config or load_config()
    repo.get_patient(patient_id)
    history = repo.list_assessments(patient_id, instrument="braden")
    result = analyze_trend(history)
    if result is not None:
        _audit(
            repo,
            cfg,
            patient_id,
            "TREND_COMPUTED",
            result.trend,
            f"assessments={result.assessment_count} change={result.overall_change}",
        )
    return result
