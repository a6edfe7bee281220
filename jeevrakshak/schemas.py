"""
schemas.py
==========
Pydantic models used for validating incoming requests and
structuring outgoing API responses. Field names are camelCase on the wire.
"""

import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import Criticality, DoctorRequest, normalize_criticality, normalize_type


class DoctorRequestCreate(BaseModel):
    """Body of a new SOS / book-now request."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, pattern=r"^[A-Za-z0-9_-]{1,32}$")
    patient_name: Optional[str] = Field(default=None, alias="patientName")
    reason: str
    criticality: Criticality
    type: Optional[str] = None

    @field_validator("patient_name")
    @classmethod
    def name_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("patientName must not be empty")
        return v.strip() if v else v

    @field_validator("criticality", mode="before")
    @classmethod
    def fold_criticality(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("criticality is required")
        return normalize_criticality(v)

    @field_validator("type", mode="before")
    @classmethod
    def fold_type(cls, v):
        return normalize_type(v).value


class DoctorRequestOut(BaseModel):
    """A pending request as returned to clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    patient_name: str = Field(serialization_alias="patientName")
    patient_id: Optional[str] = Field(default=None, serialization_alias="patientId")
    reason: str
    type: str
    criticality: Optional[str] = None
    timestamp: datetime.datetime

    @classmethod
    def from_snapshot(cls, request: DoctorRequest) -> "DoctorRequestOut":
        return cls(
            id=request.id,
            patient_name=request.patient_name,
            patient_id=request.patient_id,
            reason=request.reason,
            type=request.type.value,
            criticality=request.criticality.value if request.criticality else None,
            timestamp=request.timestamp,
        )


class LoginRequest(BaseModel):
    id: str = Field(min_length=1)
    password: str
    role: str

    @field_validator("role")
    @classmethod
    def known_role(cls, v):
        if v not in ("staff", "patient"):
            raise ValueError("role must be 'staff' or 'patient'")
        return v


class TokenResponse(BaseModel):
    token: str
    role: str
    id: str


class HealthGoals(BaseModel):
    steps: int = Field(default=7500, ge=0)
    water: int = Field(default=6, ge=0)
    sleep: int = Field(default=7, ge=0)


class GoalsUpdate(BaseModel):
    """Partial update; omitted goals keep their stored value."""
    model_config = ConfigDict(extra="forbid")

    steps: Optional[int] = Field(default=None, ge=0)
    water: Optional[int] = Field(default=None, ge=0)
    sleep: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def unwrap_goals(cls, data):
        # dashboards send {"goals": {...}}
        if isinstance(data, dict) and isinstance(data.get("goals"), dict):
            return {**{k: v for k, v in data.items() if k != "goals"}, **data["goals"]}
        return data


class PatientCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: str = Field(alias="patientId", min_length=1)
    name: str = Field(min_length=1)
    password: Optional[str] = None
    ward: str = "General"
    condition: str = "Stable"
    age: Optional[int] = Field(default=None, ge=0)


class PatientOut(BaseModel):
    patient_id: str = Field(serialization_alias="patientId")
    name: str
    ward: Optional[str] = None
    condition: Optional[str] = None
    age: Optional[int] = None
    health_goals: HealthGoals = Field(serialization_alias="healthGoals")

    @classmethod
    def from_orm_patient(cls, patient) -> "PatientOut":
        return cls(
            patient_id=patient.patient_id,
            name=patient.name,
            ward=patient.ward,
            condition=patient.condition,
            age=patient.age,
            health_goals=HealthGoals(
                steps=patient.goal_steps if patient.goal_steps is not None else 7500,
                water=patient.goal_water if patient.goal_water is not None else 6,
                sleep=patient.goal_sleep if patient.goal_sleep is not None else 7,
            ),
        )


class StaffOut(BaseModel):
    staff_id: str = Field(serialization_alias="staffId")
    name: str
    role: str
    shift: str
    shift_status: str = Field(serialization_alias="shiftStatus")
    contact: Optional[str] = None


class StaffRoster(BaseModel):
    doctors: int
    nurses: int
    admins: int
    staff: List[StaffOut]


class DashboardSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_patients: int = Field(serialization_alias="totalPatients")
    critical_patients: int = Field(serialization_alias="criticalPatients")
    stable_patients: int = Field(serialization_alias="stablePatients")
    doctor_requests: int = Field(serialization_alias="doctorRequests")


class OxygenRequest(BaseModel):
    quantity: int = Field(ge=1)
