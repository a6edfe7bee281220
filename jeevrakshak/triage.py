"""
triage.py
=========
Partitions pending requests into SOS alerts and the ranked doctor queue.

Every SOS is maximal priority and is returned in input order. The queue is
ordered by criticality (HIGH > MEDIUM > LOW > unrecognized), then first come
first served. Nothing here touches the store or mutates its input.
"""

from typing import Iterable, List, NamedTuple

from .models import Criticality, DoctorRequest, RequestType

CRITICALITY_RANK = {
    Criticality.HIGH.value: 3,
    Criticality.MEDIUM.value: 2,
    Criticality.LOW.value: 1,
}

# Unset criticality sorts as LOW in the queue.
QUEUE_DEFAULT_CRITICALITY = Criticality.LOW


class TriageResult(NamedTuple):
    sos_alerts: List[DoctorRequest]
    queued_requests: List[DoctorRequest]


def criticality_rank(criticality) -> int:
    if criticality is None or criticality == "":
        criticality = QUEUE_DEFAULT_CRITICALITY
    key = criticality.value if isinstance(criticality, Criticality) else str(criticality).strip().upper()
    return CRITICALITY_RANK.get(key, 0)


def is_sos(request: DoctorRequest) -> bool:
    kind = request.type
    if isinstance(kind, RequestType):
        return kind is RequestType.SOS
    return bool(kind) and str(kind).strip().upper() == RequestType.SOS.value


def _queue_key(request: DoctorRequest):
    # timestamp missing only for hand-built snapshots; those go last in their band
    stamp = request.timestamp
    return (-criticality_rank(request.criticality), stamp is None, stamp or 0)


def triage(requests: Iterable[DoctorRequest]) -> TriageResult:
    """Split ``requests`` into (sos_alerts, queued_requests)."""
    snapshot = list(requests)
    sos_alerts = [r for r in snapshot if is_sos(r)]
    queued = sorted((r for r in snapshot if not is_sos(r)), key=_queue_key)
    return TriageResult(sos_alerts, queued)
