"""
test_health.py
==============
BMI calculation, goal progress and roster grouping.
"""

from types import SimpleNamespace

import pytest

from jeevrakshak.errors import InvalidBMIInput
from jeevrakshak.health import bmi_category, calculate_bmi, goal_progress
from jeevrakshak.roster import build_roster, role_category


@pytest.mark.parametrize("bmi, category", [
    (17.0, "Underweight"),
    (18.5, "Normal weight"),
    (24.95, "Normal weight"),
    (25.0, "Overweight"),
    (29.95, "Overweight"),
    (30.0, "Obesity"),
])
def test_bmi_category_bands(bmi, category):
    assert bmi_category(bmi) == category


def test_calculate_bmi_uses_centimetres():
    assert calculate_bmi(70, 175) == (22.86, "Normal weight")


@pytest.mark.parametrize("weight, height", [
    (0, 170), (70, 0), (-5, 170), (None, 170),
    (float("nan"), 170), (float("inf"), 170), (70, float("nan")), (70, 1e-200), (1e308, 1e-2),
])
def test_calculate_bmi_rejects_invalid_measurements(weight, height):
    with pytest.raises(InvalidBMIInput):
        calculate_bmi(weight, height)


def test_goal_progress_caps_and_averages():
    progress = goal_progress({"steps": 15000, "water": 4, "sleep": 6})
    assert progress == {"steps": 100, "water": 50, "sleep": 75, "overall": 75}


def test_role_categories():
    assert role_category("Emergency Physician") == "doctor"
    assert role_category("Cardiologist") == "doctor"
    assert role_category("ICU Nurse") == "nurse"
    assert role_category("Admissions") == "admin"
    assert role_category("Porter") == "other"


def test_build_roster_counts_and_shift_labels():
    staff = [
        SimpleNamespace(staff_id="S1", name="Dr. A", role="Surgeon", shift="Night", contact="x1"),
        SimpleNamespace(staff_id="S2", name="Nurse B", role="Floor Nurse", shift="Day", contact=None),
    ]
    counts, rows = build_roster(staff)
    assert counts["doctor"] == 1 and counts["nurse"] == 1 and counts["admin"] == 0
    assert [r["shift_status"] for r in rows] == ["On Duty (Night)", "On Duty (Day)"]
