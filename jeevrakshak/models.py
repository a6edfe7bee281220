"""
models.py
=========
Domain types and SQLAlchemy ORM models for the Jeevrakshak hospital backend.
Contains:
 - RequestType / Criticality variants and their ingestion normalizers
 - DoctorRequest, the immutable snapshot handed to triage and presentation
 - Tables for patients, staff and pending doctor requests
"""

import datetime
import enum
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

# SQLAlchemy Base class
Base = declarative_base()

# ---------------------------------------------------------------------------
# ENUM DEFINITIONS
# ---------------------------------------------------------------------------

class RequestType(str, enum.Enum):
    """Kind of doctor request. Anything that is not an SOS is a queued booking."""
    SOS = "SOS"
    BOOK_NOW = "BOOK_NOW"


class Criticality(str, enum.Enum):
    """Three-level urgency of a request."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


def normalize_type(value) -> RequestType:
    """Case-fold a raw type. Unset, DOCTOR_CONNECT and unknown values are BOOK_NOW."""
    if isinstance(value, RequestType):
        return value
    if value and str(value).strip().upper() == RequestType.SOS.value:
        return RequestType.SOS
    return RequestType.BOOK_NOW


def normalize_criticality(value) -> Optional[Criticality]:
    """
    Case-fold a raw criticality.
    Returns None when unset; raises ValueError for an unknown level.
    """
    if value is None or isinstance(value, Criticality):
        return value
    text = str(value).strip().upper()
    if not text:
        return None
    return Criticality(text)


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# DOMAIN SNAPSHOT
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DoctorRequest:
    """A pending request as seen by readers. Never mutated after creation."""
    patient_name: str
    id: Optional[str] = None
    reason: str = ""
    type: RequestType = RequestType.BOOK_NOW
    criticality: Optional[Criticality] = None
    timestamp: Optional[datetime.datetime] = None
    patient_id: Optional[str] = None


# ---------------------------------------------------------------------------
# TABLE DEFINITIONS
# ---------------------------------------------------------------------------

class Patient(Base):
    """Admitted patient with login credentials and daily health goals."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    patient_id = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    ward = Column(String, default="General")
    condition = Column(String, default="Stable")
    age = Column(Integer)
    goal_steps = Column(Integer, default=7500)
    goal_water = Column(Integer, default=6)
    goal_sleep = Column(Integer, default=7)
    admitted_at = Column(DateTime, default=utcnow)


class Staff(Base):
    """Hospital staff member shown on the roster."""
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True)
    staff_id = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, default="")
    password_hash = Column(String, nullable=True)
    role = Column(String, default="Nurse")
    shift = Column(String, default="Day")
    contact = Column(String, nullable=True)


class RequestRecord(Base):
    """Row backing one live doctor request. Deleted on resolution."""
    __tablename__ = "doctor_requests"

    id = Column(String(32), primary_key=True)
    patient_name = Column(String, nullable=False)
    patient_id = Column(String, nullable=True)
    reason = Column(Text, default="")
    type = Column(String, default=RequestType.BOOK_NOW.value)
    criticality = Column(String, nullable=True)
    timestamp = Column(DateTime, nullable=False)

    def to_snapshot(self) -> DoctorRequest:
        return DoctorRequest(
            patient_name=self.patient_name,
            id=self.id,
            reason=self.reason or "",
            type=normalize_type(self.type),
            criticality=Criticality(self.criticality) if self.criticality in Criticality.__members__ else None,
            timestamp=self.timestamp,
            patient_id=self.patient_id,
        )
