"""
poller.py
=========
Staff-side polling client. Re-fetches the pending requests on a fixed
interval, triages them locally and prints the dashboard.

When the backend cannot be reached the last good snapshot is kept and marked
stale; an invalid session stops the loop so the user can log in again.

Usage:
    python -m jeevrakshak.poller --url http://localhost:8000 --staff-id HOSP001 --password staff123
"""

import argparse
import datetime
import logging
import os
import time
from typing import List, Optional

import requests
from dotenv import load_dotenv

from .models import DoctorRequest, normalize_criticality, normalize_type, utcnow
from .presentation import present_dashboard

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 15.0


class SessionInvalid(Exception):
    """The backend rejected the staff credential (401/403)."""


def parse_request(item: dict) -> DoctorRequest:
    """Build a snapshot from one JSON item of GET /api/requests."""
    try:
        criticality = normalize_criticality(item.get("criticality"))
    except ValueError:
        criticality = item.get("criticality")
    stamp = item.get("timestamp")
    if isinstance(stamp, str):
        try:
            stamp = datetime.datetime.fromisoformat(stamp.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp %r on request %s", stamp, item.get("id"))
            stamp = None
    elif not isinstance(stamp, datetime.datetime):
        stamp = None
    return DoctorRequest(
        patient_name=item.get("patientName") or "",
        id=item.get("id"),
        reason=item.get("reason") or "",
        type=normalize_type(item.get("type")),
        criticality=criticality,
        timestamp=stamp,
        patient_id=item.get("patientId"),
    )


class StaffPoller:
    """Fetch-and-triage loop over the request list endpoint."""

    def __init__(self, base_url: str, token: str, session: Optional[requests.Session] = None,
                 interval: float = DEFAULT_INTERVAL, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.interval = interval
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})
        self.last_requests: List[DoctorRequest] = []
        self.stale = False

    @classmethod
    def login(cls, base_url: str, staff_id: str, password: str, **kwargs) -> "StaffPoller":
        session = kwargs.pop("session", None) or requests.Session()
        resp = session.post(f"{base_url.rstrip('/')}/api/auth/login",
                            json={"id": staff_id, "password": password, "role": "staff"}, timeout=10)
        if resp.status_code != 200:
            raise SessionInvalid(f"Login failed ({resp.status_code}): {resp.text}")
        return cls(base_url, resp.json()["token"], session=session, **kwargs)

    def fetch(self) -> List[DoctorRequest]:
        resp = self.session.get(f"{self.base_url}/api/requests", timeout=self.timeout)
        if resp.status_code in (401, 403):
            raise SessionInvalid("Access denied or session expired.")
        resp.raise_for_status()
        return [parse_request(item) for item in resp.json()]

    def poll_once(self, now: Optional[datetime.datetime] = None) -> dict:
        """
        One poll cycle. Transport failures keep the previous snapshot.
        Raises SessionInvalid on 401/403.
        """
        try:
            self.last_requests = self.fetch()
            self.stale = False
        except requests.RequestException as e:
            logger.warning("Fetching requests failed, showing last snapshot: %s", e)
            self.stale = True
        dashboard = present_dashboard(self.last_requests, now=now or utcnow())
        dashboard["stale"] = self.stale
        return dashboard

    def resolve(self, request_id: str) -> bool:
        """True if resolved, False if it was already gone."""
        resp = self.session.put(f"{self.base_url}/api/doctor-request/{request_id}/resolve", timeout=self.timeout)
        if resp.status_code in (401, 403):
            raise SessionInvalid("Access denied or session expired.")
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    def run(self, cycles: Optional[int] = None):
        done = 0
        while cycles is None or done < cycles:
            print(render(self.poll_once()))
            done += 1
            if cycles is None or done < cycles:
                time.sleep(self.interval)


def render(dashboard: dict) -> str:
    lines = []
    if dashboard.get("stale"):
        lines.append("(backend unreachable, showing last known state)")
    sos = dashboard["sosAlerts"]
    if sos:
        for alert in sos:
            lines.append(f"SOS! {alert['patientName']} - {alert['criticality']} PRIORITY "
                         f"| {alert['reason']} | {alert['age']} | id={alert['id']}")
    else:
        lines.append("All critical patients stable. No new SOS alerts.")
    queue = dashboard["queuedRequests"]
    lines.append(f"Doctor requests ({len(queue)}):")
    if not queue:
        lines.append("  No pending doctor requests.")
    for row in queue:
        lines.append(f"  {row['position']}. {row['patientName']} [{row['criticality']}] "
                     f"{row['reason']} | {row['age']} | id={row['id']}")
    return "\n".join(lines)


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(description="Poll the Jeevrakshak request queue from a staff terminal.")
    parser.add_argument("--url", default=os.getenv("API_BASE_URL", "http://localhost:8000"))
    parser.add_argument("--staff-id", default=os.getenv("STAFF_ID", "HOSP001"))
    parser.add_argument("--password", default=os.getenv("STAFF_PASSWORD", "staff123"))
    parser.add_argument("--interval", type=float, default=float(os.getenv("POLL_INTERVAL", DEFAULT_INTERVAL)))
    parser.add_argument("--cycles", type=int, default=None, help="stop after N polls")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        poller = StaffPoller.login(args.url, args.staff_id, args.password, interval=args.interval)
        poller.run(cycles=args.cycles)
    except SessionInvalid as e:
        logger.error("%s Please log in again.", e)
        return 1
    except requests.RequestException as e:
        logger.error("Could not reach %s: %s", args.url, e)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
