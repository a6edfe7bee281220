"""
test_triage.py
==============
Partitioning and ordering of pending requests.
"""

import datetime

from jeevrakshak.models import Criticality, DoctorRequest, RequestType
from jeevrakshak.triage import criticality_rank, triage

T0 = datetime.datetime(2024, 3, 1, 9, 0, 0)


def req(name, kind=RequestType.BOOK_NOW, criticality=None, minutes=0):
    return DoctorRequest(
        patient_name=name,
        id=name.lower().replace(" ", "-"),
        type=kind,
        criticality=criticality,
        timestamp=T0 + datetime.timedelta(minutes=minutes),
    )


def names(requests):
    return [r.patient_name for r in requests]


def test_sos_requests_never_enter_the_queue():
    requests = [
        req("Karan S.", RequestType.SOS, Criticality.HIGH),
        req("Ria V.", criticality=Criticality.LOW, minutes=1),
        req("Asha P.", RequestType.SOS, Criticality.LOW, minutes=2),
    ]
    sos, queued = triage(requests)
    assert names(sos) == ["Karan S.", "Asha P."]
    assert names(queued) == ["Ria V."]


def test_queue_ranks_criticality_then_arrival():
    requests = [
        req("Low early", criticality=Criticality.LOW, minutes=0),
        req("High late", criticality=Criticality.HIGH, minutes=9),
        req("Medium", criticality=Criticality.MEDIUM, minutes=3),
        req("High early", criticality=Criticality.HIGH, minutes=1),
    ]
    _, queued = triage(requests)
    assert names(queued) == ["High early", "High late", "Medium", "Low early"]

    for a, b in zip(queued, queued[1:]):
        ra, rb = criticality_rank(a.criticality), criticality_rank(b.criticality)
        assert ra > rb or (ra == rb and a.timestamp <= b.timestamp)


def test_unset_criticality_sorts_as_low():
    requests = [
        req("Unset early", criticality=None, minutes=0),
        req("Low later", criticality=Criticality.LOW, minutes=5),
        req("Medium", criticality=Criticality.MEDIUM, minutes=8),
    ]
    _, queued = triage(requests)
    assert names(queued) == ["Medium", "Unset early", "Low later"]


def test_unrecognized_criticality_ranks_last():
    assert criticality_rank("URGENT") == 0
    requests = [
        req("Odd", criticality="URGENT", minutes=0),
        req("Low", criticality=Criticality.LOW, minutes=5),
    ]
    _, queued = triage(requests)
    assert names(queued) == ["Low", "Odd"]


def test_raw_type_strings_are_case_folded():
    requests = [
        req("Lower sos", kind="sos"),
        req("Connect", kind="DOCTOR_CONNECT"),
        req("Blank", kind=""),
    ]
    sos, queued = triage(requests)
    assert names(sos) == ["Lower sos"]
    assert sorted(names(queued)) == ["Blank", "Connect"]


def test_triage_is_pure_and_repeatable():
    requests = [
        req("B", criticality=Criticality.LOW, minutes=2),
        req("A", criticality=Criticality.HIGH, minutes=1),
        req("S", RequestType.SOS),
    ]
    before = list(requests)
    first = triage(requests)
    second = triage(requests)
    assert requests == before
    assert first == second


def test_end_to_end_scenario_ordering():
    requests = [
        req("Karan S.", RequestType.SOS, Criticality.HIGH, minutes=0),
        req("Ria V.", RequestType.BOOK_NOW, Criticality.LOW, minutes=5),
        req("Manish R.", RequestType.BOOK_NOW, Criticality.HIGH, minutes=6),
    ]
    result = triage(requests)
    assert names(result.sos_alerts) == ["Karan S."]
    assert names(result.queued_requests) == ["Manish R.", "Ria V."]


def test_empty_input():
    sos, queued = triage([])
    assert sos == [] and queued == []
