"""
health.py
=========
Patient self-service calculations: BMI and daily goal progress.
"""

import math
from typing import Dict, Tuple

from .errors import InvalidBMIInput

GOAL_TARGETS = {"steps": 10000, "water": 8, "sleep": 8}
DEFAULT_GOALS = {"steps": 7500, "water": 6, "sleep": 7}


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obesity"


def calculate_bmi(weight_kg: float, height_cm: float) -> Tuple[float, str]:
    """Return (bmi rounded to 2 dp, category). Height is in centimetres."""
    if weight_kg is None or height_cm is None:
        raise InvalidBMIInput("Please enter valid weight and height.")
    if not (math.isfinite(weight_kg) and math.isfinite(height_cm)) or weight_kg <= 0 or height_cm <= 0:
        raise InvalidBMIInput("Please enter valid weight and height.")
    height_m = height_cm / 100
    try:
        bmi = weight_kg / (height_m * height_m)
    except (ZeroDivisionError, OverflowError):
        raise InvalidBMIInput("Please enter valid weight and height.")
    if not math.isfinite(bmi):
        raise InvalidBMIInput("Please enter valid weight and height.")
    return round(bmi, 2), bmi_category(bmi)


def goal_progress(goals: Dict[str, int]) -> Dict[str, int]:
    """Per-goal percentage (capped at 100) plus the rounded overall average."""
    progress = {}
    for key, target in GOAL_TARGETS.items():
        value = goals.get(key) or 0
        progress[key] = min(100, round(value / target * 100))
    progress["overall"] = round(sum(progress[k] for k in GOAL_TARGETS) / len(GOAL_TARGETS))
    return progress
