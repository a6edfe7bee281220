"""Jeevrakshak hospital backend: doctor-request triage, patients and staff rosters."""

__version__ = "1.0.0"
