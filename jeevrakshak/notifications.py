"""
notifications.py
=================
Optional push paths for staff dashboards:
 - Pushover notification when an SOS arrives
 - WebSocket fan-out telling connected dashboards the pending set changed

Dashboards that are not connected still see every change on their next poll.
"""

import logging
from typing import List

import requests
from fastapi import WebSocket

logger = logging.getLogger(__name__)

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"

# ---------------------------------------------------------------------------
# Pushover Notification (optional)
# ---------------------------------------------------------------------------

def send_pushover(token: str, user_key: str, title: str, message: str) -> bool:
    """
    Sends a push notification using the Pushover API.
    Requires PUSHOVER_TOKEN and PUSHOVER_USER to be configured.
    Returns True when Pushover accepted the message.
    """
    if not token or not user_key:
        logger.debug("Pushover not configured, skipping notification.")
        return False

    try:
        resp = requests.post(
            PUSHOVER_URL,
            data={"token": token, "user": user_key, "title": title, "message": message, "priority": 1},
            timeout=5,
        )
    except requests.RequestException as e:
        logger.warning("Pushover send failed: %s", e)
        return False
    if resp.status_code != 200:
        logger.warning("Pushover error: %s", resp.text)
        return False
    return True


# ---------------------------------------------------------------------------
# WebSocket Registry
# ---------------------------------------------------------------------------

class DashboardHub:
    """Connected staff dashboard sockets."""

    def __init__(self):
        self._sockets: List[WebSocket] = []

    def __len__(self):
        return len(self._sockets)

    def register(self, ws: WebSocket):
        self._sockets.append(ws)
        logger.info("Staff dashboard connected (%d active).", len(self._sockets))

    def unregister(self, ws: WebSocket):
        self._sockets = [w for w in self._sockets if w is not ws]
        logger.info("Staff dashboard disconnected (%d active).", len(self._sockets))

    async def broadcast(self, data: dict):
        """Send a JSON message to every dashboard; drop sockets that fail."""
        for ws in list(self._sockets):
            try:
                await ws.send_json(data)
            except Exception as e:
                logger.warning("Failed to notify dashboard, dropping socket: %s", e)
                self.unregister(ws)
