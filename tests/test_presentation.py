"""
test_presentation.py
====================
Relative age labels and dashboard display rows.
"""

import datetime

import pytest

from jeevrakshak.models import Criticality, DoctorRequest, RequestType
from jeevrakshak.presentation import format_age, present_dashboard

NOW = datetime.datetime(2024, 3, 1, 12, 0, 0)


def ago(**delta):
    return NOW - datetime.timedelta(**delta)


@pytest.mark.parametrize("timestamp, expected", [
    (NOW, "just now"),
    (ago(seconds=9), "just now"),
    (ago(seconds=10), "10 secs ago"),
    (ago(seconds=59), "59 secs ago"),
    (ago(seconds=60), "1 mins ago"),
    (ago(seconds=3599), "59 mins ago"),
    (ago(seconds=3600), "1 hr ago"),
    (ago(seconds=7199), "1 hr ago"),
    (ago(seconds=7200), "2 hrs ago"),
    (ago(hours=30), "30 hrs ago"),
])
def test_format_age_buckets(timestamp, expected):
    assert format_age(timestamp, NOW) == expected


def test_future_timestamp_reads_just_now():
    assert format_age(NOW + datetime.timedelta(minutes=5), NOW) == "just now"


def test_aware_and_naive_timestamps_mix():
    aware_now = NOW.replace(tzinfo=datetime.timezone.utc)
    assert format_age(ago(minutes=3), aware_now) == "3 mins ago"
    ist = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
    stamp = (NOW - datetime.timedelta(minutes=20)).replace(tzinfo=datetime.timezone.utc).astimezone(ist)
    assert format_age(stamp, NOW) == "20 mins ago"


def test_missing_timestamp_does_not_raise():
    assert format_age(None, NOW) == "just now"


def test_dashboard_rows_use_path_specific_defaults():
    requests = [
        DoctorRequest(patient_name="Karan S.", id="a", type=RequestType.SOS, timestamp=ago(minutes=7)),
        DoctorRequest(patient_name="", id="b", timestamp=ago(seconds=30)),
        DoctorRequest(patient_name="Manish R.", id="c", reason="Chest pain",
                      criticality=Criticality.HIGH, timestamp=ago(seconds=5)),
    ]
    dashboard = present_dashboard(requests, now=NOW)

    [sos] = dashboard["sosAlerts"]
    assert sos["criticality"] == "HIGH"
    assert sos["reason"] == "Immediate Assistance Required"
    assert sos["age"] == "7 mins ago"

    first, second = dashboard["queuedRequests"]
    assert (first["position"], first["patientName"], first["criticality"]) == (1, "Manish R.", "HIGH")
    assert first["age"] == "just now"
    assert (second["position"], second["patientName"]) == (2, "Unknown Patient")
    assert second["criticality"] == "LOW"
    assert second["reason"] == "Standard Consultation"
    assert second["age"] == "30 secs ago"

    assert dashboard["summary"] == {"sosCount": 1, "queueCount": 2}
