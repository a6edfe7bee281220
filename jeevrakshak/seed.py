"""
seed.py
=======
Creates demo staff and patient accounts when the database is empty.
"""

import logging

from .auth import hash_password
from .models import Patient, Staff

logger = logging.getLogger(__name__)

DEFAULT_STAFF_PASSWORD = "staff123"
DEFAULT_PATIENT_PASSWORD = "patient123"

DEMO_STAFF = [
    {"staff_id": "HOSP001", "name": "Admin Desk", "role": "Admin", "shift": "Day", "contact": "x100"},
    {"staff_id": "S201", "name": "Dr. Priya Mehta", "role": "Cardiologist", "shift": "Day", "contact": "x201"},
    {"staff_id": "S202", "name": "Dr. Amit Singh", "role": "Emergency Physician", "shift": "Night", "contact": "x202"},
    {"staff_id": "S305", "name": "Nurse Rina Das", "role": "Charge Nurse", "shift": "Day", "contact": "x305"},
    {"staff_id": "S311", "name": "Nurse Kevin J.", "role": "Floor Nurse", "shift": "Day", "contact": "x311"},
    {"staff_id": "S312", "name": "Nurse Jane Doe", "role": "ICU Nurse", "shift": "Night", "contact": "x312"},
    {"staff_id": "S501", "name": "Admin Ali Khan", "role": "Admissions", "shift": "Day", "contact": "x501"},
]

DEMO_PATIENTS = [
    {"patient_id": "P1001", "name": "Karan S.", "age": 34, "ward": "A-101", "condition": "Critical"},
    {"patient_id": "P1002", "name": "Ria V.", "age": 67, "ward": "B-205", "condition": "Stable"},
    {"patient_id": "P1003", "name": "Manish R.", "age": 55, "ward": "C-310", "condition": "Serious"},
]


def seed_database(db):
    """Insert demo accounts into empty staff / patient tables."""
    if db.query(Staff).count() == 0:
        logger.info("No staff found. Seeding default roster...")
        staff_hash = hash_password(DEFAULT_STAFF_PASSWORD)
        db.add_all([Staff(password_hash=staff_hash, **s) for s in DEMO_STAFF])
        db.commit()
        logger.info("Seeded %d staff members (login HOSP001).", len(DEMO_STAFF))
    else:
        logger.info("%d staff members already exist.", db.query(Staff).count())

    if db.query(Patient).count() == 0:
        patient_hash = hash_password(DEFAULT_PATIENT_PASSWORD)
        db.add_all([Patient(password_hash=patient_hash, **p) for p in DEMO_PATIENTS])
        db.commit()
        logger.info("Seeded patients: %s", ", ".join(p["name"] for p in DEMO_PATIENTS))
