"""
presentation.py
===============
Turns a triaged snapshot into what the staff dashboard shows:
relative ages ("5 mins ago"), display criticality and placeholder reasons.
Computed at render time; nothing is stored.
"""

import datetime
import math
from typing import Iterable, Optional

from .models import Criticality, DoctorRequest, utcnow
from .triage import triage

SOS_DEFAULT_CRITICALITY = Criticality.HIGH
QUEUE_DISPLAY_DEFAULT = Criticality.LOW

SOS_REASON_PLACEHOLDER = "Immediate Assistance Required"
QUEUE_REASON_PLACEHOLDER = "Standard Consultation"
UNKNOWN_PATIENT = "Unknown Patient"


def _as_naive_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def format_age(timestamp: Optional[datetime.datetime], now: Optional[datetime.datetime] = None) -> str:
    """
    Relative age label of ``timestamp`` as seen at ``now``.
    Future timestamps (clock skew) read as "just now".
    """
    if timestamp is None:
        return "just now"
    now = now or utcnow()
    elapsed = math.floor((_as_naive_utc(now) - _as_naive_utc(timestamp)).total_seconds())

    if elapsed < 10:
        return "just now"
    if elapsed < 60:
        return f"{elapsed} secs ago"
    if elapsed < 3600:
        return f"{elapsed // 60} mins ago"
    hours = elapsed // 3600
    return f"{hours} hr ago" if hours == 1 else f"{hours} hrs ago"


def _display_criticality(request: DoctorRequest, default: Criticality) -> str:
    value = request.criticality
    if value is None or value == "":
        return default.value
    return value.value if isinstance(value, Criticality) else str(value).upper()


def present_request(request: DoctorRequest, now: datetime.datetime, sos: bool) -> dict:
    """Display row for a single request."""
    if sos:
        criticality = _display_criticality(request, SOS_DEFAULT_CRITICALITY)
        reason = request.reason or SOS_REASON_PLACEHOLDER
    else:
        criticality = _display_criticality(request, QUEUE_DISPLAY_DEFAULT)
        reason = request.reason or QUEUE_REASON_PLACEHOLDER
    return {
        "id": request.id,
        "patientName": request.patient_name or UNKNOWN_PATIENT,
        "reason": reason,
        "type": request.type.value if hasattr(request.type, "value") else request.type,
        "criticality": criticality,
        "timestamp": request.timestamp,
        "age": format_age(request.timestamp, now),
    }


def present_dashboard(requests: Iterable[DoctorRequest], now: Optional[datetime.datetime] = None) -> dict:
    """
    Triage ``requests`` and render both panels of the staff dashboard.
    Queue rows carry their 1-based position.
    """
    now = now or utcnow()
    result = triage(requests)
    sos_rows = [present_request(r, now, sos=True) for r in result.sos_alerts]
    queue_rows = []
    for position, request in enumerate(result.queued_requests, start=1):
        row = present_request(request, now, sos=False)
        row["position"] = position
        queue_rows.append(row)
    return {
        "sosAlerts": sos_rows,
        "queuedRequests": queue_rows,
        "summary": {"sosCount": len(sos_rows), "queueCount": len(queue_rows)},
    }
