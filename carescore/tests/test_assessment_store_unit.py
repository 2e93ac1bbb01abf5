import pytest
from pydantic import ValidationError

from carescore.internal_core.assessment_store import InMemoryAssessmentStore
from carescore.internal_core.audit import log_event
from carescore.internal_core.contracts import (
    BradenAssessment,
    BradenScores,
    CapriniAssessment,
    Patient,
)


def _patient(patient_id: str = "p1") -> Patient:
    return Patient(
        id=patient_id,
        name="Test Patient",
        date_of_birth="1950-01-01",
        age=74,
        sex="female",
        admission_date="2024-01-01",
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


def _braden(assessment_id: str, patient_id: str = "p1") -> BradenAssessment:
    return BradenAssessment(
        id=assessment_id,
        patient_id=patient_id,
        date="2024-01-02T00:00:00+00:00",
        scores=BradenScores(
            sensory_perception=2, moisture=2, activity=2, mobility=2, nutrition=2, friction_shear=2
        ),
        total_score=12,
        risk_level="high",
    )


def test_store_rejects_unknown_and_duplicate_ids() -> None:
    store = InMemoryAssessmentStore()
    store.add_patient(_patient())

    with pytest.raises(ValueError):
        store.add_patient(_patient())
    with pytest.raises(KeyError):
        store.get_patient("missing")
    with pytest.raises(KeyError):
        store.add_assessment(_braden("a1", patient_id="missing"))

    store.add_assessment(_braden("a1"))
    with pytest.raises(ValueError):
        store.add_assessment(_braden("a1"))
    with pytest.raises(KeyError):
        store.delete_assessment("nope")


def test_list_assessments_filters_by_instrument() -> None:
    store = InMemoryAssessmentStore()
    store.add_patient(_patient())
    store.add_assessment(_braden("a1"))
    store.add_assessment(
        CapriniAssessment(
            id="c1",
            patient_id="p1",
            date="2024-01-02",
            selected_factors=["copd"],
            total_score=1,
            risk_level="low",
        )
    )
    assert {a.id for a in store.list_assessments("p1")} == {"a1", "c1"}
    assert [a.id for a in store.list_assessments("p1", instrument="braden")] == ["a1"]


def test_deleting_patient_cascades_to_assessments() -> None:
    store = InMemoryAssessmentStore()
    store.add_patient(_patient("p1"))
    store.add_patient(_patient("p2"))
    store.add_assessment(_braden("a1", "p1"))
    store.add_assessment(_braden("a2", "p2"))

    store.delete_patient("p1")

    assert [p.id for p in store.list_patients()] == ["p2"]
    with pytest.raises(KeyError):
        store.get_assessment("a1")
    assert store.get_assessment("a2").patient_id == "p2"


def test_update_patient_revalidates_and_blocks_identity_fields() -> None:
    store = InMemoryAssessmentStore()
    store.add_patient(_patient())

    updated = store.update_patient("p1", {"room_number": "12B"})
    assert updated.room_number == "12B"
    assert updated.updated_at != "2024-01-01T00:00:00+00:00"

    with pytest.raises(ValueError):
        store.update_patient("p1", {"id": "other"})
    with pytest.raises(ValidationError):
        store.update_patient("p1", {"care_setting": "spaceStation"})
    assert store.get_patient("p1").care_setting == "hospital"


def test_records_are_immutable_and_braden_record_requires_all_subscales() -> None:
    record = _braden("a1")
    with pytest.raises(ValidationError):
        record.total_score = 20  # type: ignore[misc]
    with pytest.raises(ValidationError):
        BradenAssessment(
            id="x",
            patient_id="p1",
            date="2024-01-02",
            scores=BradenScores(sensory_perception=4),
            total_score=6,
            risk_level="veryHigh",
        )
    with pytest.raises(ValidationError):
        BradenScores(friction_shear=4)


def test_log_event_truncates_detail() -> None:
    store = InMemoryAssessmentStore()
    log_event(store, "p1", "ANALYSIS_COMPUTED", "braden", "x" * 50 + "\nmore", max_chars=20)
    log_event(store, "p2", "PATIENT_CREATED", "created", "ok")

    events = store.list_audit_events("p1")
    assert len(events) == 1
    assert events[0].detail == "x" * 20 + "..."
    assert len(store.list_audit_events()) == 2
