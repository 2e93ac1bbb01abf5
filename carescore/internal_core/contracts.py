from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from carescore.utils.dates import parse_iso_datetime

Instrument = Literal["braden", "caprini", "wells"]

CareSetting = Literal["hospital", "nursingHome", "homeCare"]

Sex = Literal["male", "female", "other"]

BradenRiskLevel = Literal["veryHigh", "high", "moderate", "mild", "none"]

CapriniRiskLevel = Literal["veryLow", "low", "moderate", "high", "highest"]

WellsProbability = Literal["unlikely", "likely"]


def _check_iso_timestamp(value: str) -> str:
    try:
        parse_iso_datetime(value)
    except ValueError as exc:
        raise ValueError(f"date must be an ISO-8601 timestamp, got {value!r}") from exc
    return value


class Patient(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str = Field(min_length=1)
    date_of_birth: str
    age: int = Field(ge=0)
    sex: Sex
    care_setting: CareSetting = "hospital"
    admission_date: str
    medical_record_number: Optional[str] = None
    diagnosis: Optional[str] = None
    room_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class BradenScores(BaseModel):
    """Six Braden sub-scores; 0 marks a subscale that has not been assessed yet."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sensory_perception: int = Field(default=0, ge=0, le=4)
    moisture: int = Field(default=0, ge=0, le=4)
    activity: int = Field(default=0, ge=0, le=4)
    mobility: int = Field(default=0, ge=0, le=4)
    nutrition: int = Field(default=0, ge=0, le=4)
    friction_shear: int = Field(default=0, ge=0, le=3)

    def as_mapping(self) -> Dict[str, int]:
        return {
            "sensory_perception": self.sensory_perception,
            "moisture": self.moisture,
            "activity": self.activity,
            "mobility": self.mobility,
            "nutrition": self.nutrition,
            "friction_shear": self.friction_shear,
        }

    def is_complete(self) -> bool:
        return all(score > 0 for score in self.as_mapping().values())


class BradenAssessment(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    instrument: Literal["braden"] = "braden"
    id: str
    patient_id: str
    date: str
    scores: BradenScores
    total_score: int = Field(ge=6, le=23)
    risk_level: BradenRiskLevel
    notes: Optional[str] = None
    assessed_by: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        return _check_iso_timestamp(value)

    @model_validator(mode="after")
    def _validate_complete(self) -> "BradenAssessment":
        if not self.scores.is_complete():
            raise ValueError("BradenAssessment requires all six sub-scores to be selected")
        return self


class CapriniAssessment(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    instrument: Literal["caprini"] = "caprini"
    id: str
    patient_id: str
    date: str
    selected_factors: List[str] = Field(default_factory=list)
    total_score: int = Field(ge=0)
    risk_level: CapriniRiskLevel
    notes: Optional[str] = None
    assessed_by: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        return _check_iso_timestamp(value)


class WellsAssessment(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    instrument: Literal["wells"] = "wells"
    id: str
    patient_id: str
    date: str
    selected_criteria: List[str] = Field(default_factory=list)
    total_score: int
    probability: WellsProbability
    notes: Optional[str] = None
    assessed_by: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        return _check_iso_timestamp(value)


Assessment = Union[BradenAssessment, CapriniAssessment, WellsAssessment]


AuditEventType = Literal[
    "PATIENT_CREATED",
    "PATIENT_UPDATED",
    "PATIENT_DELETED",
    "ASSESSMENT_RECORDED",
    "ASSESSMENT_REJECTED",
    "ASSESSMENT_DELETED",
    "ANALYSIS_COMPUTED",
    "TREND_COMPUTED",
]


class AuditEvent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    ts_iso: str
    subject_id: str
    type: AuditEventType
    code: str
    detail: str
