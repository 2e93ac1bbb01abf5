from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, List, Optional, Protocol

from .contracts import Assessment, AuditEvent, Instrument, Patient


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AssessmentRepository(Protocol):
    """Storage seam used by the workflow layer; scoring code never touches it."""

    def add_patient(self, patient: Patient) -> None: ...

    def get_patient(self, patient_id: str) -> Patient: ...

    def list_patients(self) -> List[Patient]: ...

    def update_patient(self, patient_id: str, updates: Dict[str, Any]) -> Patient: ...

    def delete_patient(self, patient_id: str) -> None: ...

    def add_assessment(self, assessment: Assessment) -> None: ...

    def get_assessment(self, assessment_id: str) -> Assessment: ...

    def delete_assessment(self, assessment_id: str) -> None: ...

    def list_assessments(
        self, patient_id: str, instrument: Optional[Instrument] = None
    ) -> List[Assessment]: ...

    def append_audit_event(self, event: AuditEvent) -> None: ...

    def list_audit_events(self, subject_id: Optional[str] = None) -> List[AuditEvent]: ...


class InMemoryAssessmentStore:
    def __init__(self) -> None:
        self._lock = RLock()
        self._patients: Dict[str, Patient] = {}
        self._assessments: Dict[str, Assessment] = {}
        self._audit_events: List[AuditEvent] = []

    def add_patient(self, patient: Patient) -> None:
        with self._lock:
            if patient.id in self._patients:
                raise ValueError(f"Duplicate patient_id: {patient.id}")
            self._patients[patient.id] = patient

    def get_patient(self, patient_id: str) -> Patient:
        with self._lock:
            patient = self._patients.get(patient_id)
            if patient is None:
                raise KeyError(f"Unknown patient_id: {patient_id}")
            return patient

    def list_patients(self) -> List[Patient]:
        with self._lock:
            return list(self._patients.values())

    def update_patient(self, patient_id: str, updates: Dict[str, Any]) -> Patient:
        blocked = {"id", "created_at"} & set(updates)
        if blocked:
            raise ValueError(f"Immutable patient fields: {sorted(blocked)}")
        with self._lock:
            current = self.get_patient(patient_id)
            merged = current.model_dump()
            merged.update(updates)
            merged["updated_at"] = _utc_now_iso()
            # Re-validate instead of model_copy so bad updates are rejected.
            updated = Patient.model_validate(merged)
            self._patients[patient_id] = updated
            return updated

    def delete_patient(self, patient_id: str) -> None:
        with self._lock:
            if self._patients.pop(patient_id, None) is None:
                raise KeyError(f"Unknown patient_id: {patient_id}")
            orphaned = [
                assessment_id
                for assessment_id, item in self._assessments.items()
                if item.patient_id == patient_id
            ]
            for assessment_id in orphaned:
                del self._assessments[assessment_id]

    def add_assessment(self, assessment: Assessment) -> None:
        with self._lock:
            if assessment.patient_id not in self._patients:
                raise KeyError(f"Unknown patient_id: {assessment.patient_id}")
            if assessment.id in self._assessments:
                raise ValueError(f"Duplicate assessment_id: {assessment.id}")
            self._assessments[assessment.id] = assessment

    def get_assessment(self, assessment_id: str) -> Assessment:
        with self._lock:
            assessment = self._assessments.get(assessment_id)
            if assessment is None:
                raise KeyError(f"Unknown assessment_id: {assessment_id}")
            return assessment

    def delete_assessment(self, assessment_id: str) -> None:
        with self._lock:
            if self._assessments.pop(assessment_id, None) is None:
                raise KeyError(f"Unknown assessment_id: {assessment_id}")

    def list_assessments(
        self, patient_id: str, instrument: Optional[Instrument] = None
    ) -> List[Assessment]:
        with self._lock:
            return [
                item
                for item in self._assessments.values()
                if item.patient_id == patient_id
                and (instrument is None or item.instrument == instrument)
            ]

    def append_audit_event(self, event: AuditEvent) -> None:
        with self._lock:
            self._audit_events.append(event)

    def list_audit_events(self, subject_id: Optional[str] = None) -> List[AuditEvent]:
        with self._lock:
            return [
                event
                for event in self._audit_events
                if subject_id is None or event.subject_id == subject_id
            ]
