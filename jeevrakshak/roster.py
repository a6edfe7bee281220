"""
roster.py
=========
Staff roster grouping for the staffing report.
"""

DOCTOR_MARKERS = ("Doctor", "Physician", "Surgeon", "ologist")
NURSE_MARKERS = ("Nurse",)
ADMIN_MARKERS = ("Admin", "Admissions")


def role_category(role: str) -> str:
    """One of 'doctor', 'nurse', 'admin' or 'other'."""
    role = role or ""
    if any(m in role for m in DOCTOR_MARKERS):
        return "doctor"
    if any(m in role for m in NURSE_MARKERS):
        return "nurse"
    if any(m in role for m in ADMIN_MARKERS):
        return "admin"
    return "other"


def shift_status(shift: str) -> str:
    return "On Duty (Day)" if shift == "Day" else "On Duty (Night)"


def build_roster(staff):
    """Counts per category plus one display row per staff member."""
    counts = {"doctor": 0, "nurse": 0, "admin": 0, "other": 0}
    rows = []
    for s in staff:
        counts[role_category(s.role)] += 1
        rows.append({
            "staff_id": s.staff_id,
            "name": s.name,
            "role": s.role,
            "shift": s.shift,
            "shift_status": shift_status(s.shift),
            "contact": s.contact,
        })
    return counts, rows
