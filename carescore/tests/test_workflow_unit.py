import pytest

from carescore.engine.workflow import (
    IncompleteAssessmentError,
    analyze_assessment,
    analyze_patient_trend,
    create_patient,
    delete_assessment,
    delete_patient,
    record_braden_assessment,
    record_caprini_assessment,
    record_wells_assessment,
    update_patient,
)
from carescore.internal_core.assessment_store import InMemoryAssessmentStore
from carescore.internal_core.config import CarescoreConfig
from carescore.recommend.braden import BradenAnalysis
from carescore.recommend.caprini import CapriniAnalysis
from carescore.recommend.wells import WellsAnalysis

CONFIG = CarescoreConfig(
    CARESCORE_LOG_LEVEL="INFO",
    CARESCORE_FACILITY_NAME="Test Ward",
    CARESCORE_AUDIT_ENABLED=True,
    CARESCORE_AUDIT_DETAIL_MAX_CHARS=200,
)

ALL_TWOS = {
    "sensory_perception": 2,
    "moisture": 2,
    "activity": 2,
    "mobility": 2,
    "nutrition": 2,
    "friction_shear": 2,
}


def _setup(age_dob: str = "1940-02-01"):
    store = InMemoryAssessmentStore()
    patient = create_patient(
        store,
        name="Ada Example",
        date_of_birth=age_dob,
        sex="female",
        care_setting="nursingHome",
        today="2024-02-01",
        config=CONFIG,
    )
    return store, patient


def test_create_patient_computes_age_and_audits() -> None:
    store, patient = _setup()

    assert patient.age == 84
    assert store.get_patient(patient.id) == patient
    assert [e.type for e in store.list_audit_events(patient.id)] == ["PATIENT_CREATED"]


def test_update_patient_recomputes_age_from_new_birth_date() -> None:
    store, patient = _setup()
    updated = update_patient(
        store, patient.id, {"date_of_birth": "1960-03-01"}, today="2024-02-01", config=CONFIG
    )
    assert updated.age == 63
    assert store.list_audit_events(patient.id)[-1].type == "PATIENT_UPDATED"


def test_record_braden_computes_score_and_tier() -> None:
    store, patient = _setup()
    assessment = record_braden_assessment(store, patient.id, ALL_TWOS, config=CONFIG)

    assert assessment.total_score == 12
    assert assessment.risk_level == "high"
    assert store.get_assessment(assessment.id) == assessment
    assert store.list_audit_events(patient.id)[-1].type == "ASSESSMENT_RECORDED"


def test_incomplete_braden_is_rejected_and_not_stored() -> None:
    store, patient = _setup()
    partial = dict(ALL_TWOS, nutrition=0)

    with pytest.raises(IncompleteAssessmentError) as excinfo:
        record_braden_assessment(store, patient.id, partial, config=CONFIG)

    assert excinfo.value.missing == ["nutrition"]
    assert store.list_assessments(patient.id) == []
    assert store.list_audit_events(patient.id)[-1].type == "ASSESSMENT_REJECTED"


def test_recording_for_unknown_patient_raises_key_error() -> None:
    store, _ = _setup()
    with pytest.raises(KeyError):
        record_caprini_assessment(store, "ghost", ["copd"], config=CONFIG)


def test_analyze_assessment_dispatches_per_instrument() -> None:
    store, patient = _setup()
    braden = record_braden_assessment(store, patient.id, ALL_TWOS, config=CONFIG)
    caprini = record_caprini_assessment(
        store, patient.id, ["age_75", "heparin_thrombocytopenia"], config=CONFIG
    )
    wells = record_wells_assessment(store, patient.id, ["active_cancer", "bedridden"], config=CONFIG)

    braden_result = analyze_assessment(store, braden.id, config=CONFIG)
    caprini_result = analyze_assessment(store, caprini.id, config=CONFIG)
    wells_result = analyze_assessment(store, wells.id, config=CONFIG)

    assert isinstance(braden_result, BradenAnalysis)
    # Age 84 with a high tier triggers the geriatric referral.
    assert "geriatric consultation" in (braden_result.escalation_reason or "")
    assert isinstance(caprini_result, CapriniAnalysis)
    assert caprini_result.overall_risk == "high"
    assert caprini_result.escalation_needed is True
    assert isinstance(wells_result, WellsAnalysis)
    assert wells_result.probability == "likely"
    computed = [e for e in store.list_audit_events(patient.id) if e.type == "ANALYSIS_COMPUTED"]
    assert len(computed) == 3


def test_patient_trend_uses_braden_history_only() -> None:
    store, patient = _setup()
    record_braden_assessment(
        store, patient.id, ALL_TWOS, date="2024-01-01T08:00:00Z", config=CONFIG
    )
    assert analyze_patient_trend(store, patient.id, config=CONFIG) is None

    record_caprini_assessment(store, patient.id, ["copd"], date="2024-01-02", config=CONFIG)
    record_braden_assessment(
        store,
        patient.id,
        dict(ALL_TWOS, sensory_perception=4, moisture=4, activity=3),
        date="2024-01-05T08:00:00Z",
        config=CONFIG,
    )
    trend = analyze_patient_trend(store, patient.id, config=CONFIG)

    assert trend is not None
    assert trend.assessment_count == 2
    assert trend.overall_change == 5
    assert trend.trend == "improving"


def test_delete_flows_and_audit_toggle() -> None:
    store, patient = _setup()
    quiet = CarescoreConfig(
        CARESCORE_LOG_LEVEL="INFO",
        CARESCORE_FACILITY_NAME="Test Ward",
        CARESCORE_AUDIT_ENABLED=False,
        CARESCORE_AUDIT_DETAIL_MAX_CHARS=200,
    )
    wells = record_wells_assessment(store, patient.id, [], config=quiet)
    before = len(store.list_audit_events())

    delete_assessment(store, wells.id, config=quiet)
    assert len(store.list_audit_events()) == before

    record_wells_assessment(store, patient.id, ["calf_swelling"], config=CONFIG)
    delete_patient(store, patient.id, config=CONFIG)
    assert store.list_patients() == []
    assert store.list_audit_events(patient.id)[-1].detail == "assessments_removed=1"


def test_unparseable_assessment_date_is_rejected_before_storing() -> None:
    store, patient = _setup()
    record_braden_assessment(
        store, patient.id, ALL_TWOS, date="2024-03-01T08:00:00Z", config=CONFIG
    )

    with pytest.raises(ValueError):
        record_braden_assessment(store, patient.id, ALL_TWOS, date="yesterday", config=CONFIG)
    with pytest.raises(ValueError):
        record_caprini_assessment(store, patient.id, ["copd"], date="03/01/2024", config=CONFIG)

    assert len(store.list_assessments(patient.id)) == 1
    assert analyze_patient_trend(store, patient.id, config=CONFIG) is None


def test_duplicate_wells_criteria_count_as_given() -> None:
    store, patient = _setup()
    assessment = record_wells_assessment(
        store, patient.id, ["alternative_diagnosis", "alternative_diagnosis"], config=CONFIG
    )

    assert assessment.total_score == -4
    assert assessment.probability == "unlikely"
    assert assessment.selected_criteria == ["alternative_diagnosis", "alternative_diagnosis"]
    assert store.get_assessment(assessment.id) == assessment
