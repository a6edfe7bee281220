"""
test_resolution.py
==================
At-most-once resolution of pending requests.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from jeevrakshak.models import Criticality, DoctorRequest, RequestType
from jeevrakshak.resolution import ResolutionResult, resolve
from jeevrakshak.triage import triage


def test_second_resolve_reports_not_found(store):
    request_id = store.insert(DoctorRequest(patient_name="Manish R.", criticality=Criticality.HIGH))
    assert resolve(store, request_id) is ResolutionResult.RESOLVED
    assert resolve(store, request_id) is ResolutionResult.NOT_FOUND


def test_unknown_id_is_not_found(store):
    assert resolve(store, "never-existed") is ResolutionResult.NOT_FOUND


def test_concurrent_resolution_has_a_single_winner(store):
    request_id = store.insert(DoctorRequest(patient_name="Karan S.", type=RequestType.SOS))
    other_id = store.insert(DoctorRequest(patient_name="Ria V."))
    workers = 8
    barrier = threading.Barrier(workers)

    def attempt(_):
        barrier.wait()
        return resolve(store, request_id)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count(ResolutionResult.RESOLVED) == 1
    assert results.count(ResolutionResult.NOT_FOUND) == workers - 1
    assert [r.id for r in store.list()] == [other_id]


def test_resolved_request_leaves_next_triage(store, clock):
    store.insert(DoctorRequest(patient_name="Karan S.", type=RequestType.SOS, criticality=Criticality.HIGH))
    clock.advance(minutes=5)
    store.insert(DoctorRequest(patient_name="Ria V.", criticality=Criticality.LOW))
    clock.advance(minutes=1)
    manish = store.insert(DoctorRequest(patient_name="Manish R.", criticality=Criticality.HIGH))

    _, queued = triage(store.list())
    assert [r.patient_name for r in queued] == ["Manish R.", "Ria V."]

    assert resolve(store, manish) is ResolutionResult.RESOLVED
    sos, queued = triage(store.list())
    assert [r.patient_name for r in sos] == ["Karan S."]
    assert [r.patient_name for r in queued] == ["Ria V."]
    assert resolve(store, manish) is ResolutionResult.NOT_FOUND
