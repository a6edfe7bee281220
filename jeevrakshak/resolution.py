"""
resolution.py
=============
Resolves a pending request: removes it from the store exactly once.
"""

import enum
import logging

from .request_store import RequestStore

logger = logging.getLogger(__name__)


class ResolutionResult(str, enum.Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"


def resolve(store: RequestStore, request_id: str) -> ResolutionResult:
    """
    Remove ``request_id`` from the store.

    Concurrent calls for one id get exactly one RESOLVED; the others, and any
    later call, get NOT_FOUND. Callers re-list the store to see the new state.
    """
    if store.delete_by_id(request_id):
        logger.info("Request %s resolved", request_id)
        return ResolutionResult.RESOLVED
    logger.info("Request %s not found (already resolved or unknown)", request_id)
    return ResolutionResult.NOT_FOUND
