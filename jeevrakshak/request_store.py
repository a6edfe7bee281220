"""
request_store.py
================
The shared store of pending doctor requests.

 - insert: stores a new request and assigns its id and timestamp
 - list: snapshot of every live request, in no particular order
 - delete_by_id: removes one request; reports whether it existed

Every mutation is a single statement in its own transaction, so the
database serializes concurrent writers on the same row.
"""

import logging
import threading
import uuid
from typing import Callable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .errors import DuplicateRequestError, StoreUnavailableError
from .models import DoctorRequest, RequestRecord, normalize_criticality, normalize_type, utcnow

logger = logging.getLogger(__name__)


def new_request_id() -> str:
    return uuid.uuid4().hex


class RequestStore:
    """
    Database-backed set of live requests.
    One instance is created per application and shared by all handlers.
    """

    def __init__(self, session_factory: sessionmaker, clock: Callable = utcnow):
        self._session_factory = session_factory
        self._clock = clock
        # writers in this process take turns; the database covers other processes
        self._write_lock = threading.Lock()

    def insert(self, request: DoctorRequest) -> str:
        """Store ``request`` and return its id."""
        return self.add(request).id

    def add(self, request: DoctorRequest) -> DoctorRequest:
        """
        Store ``request`` and return the stored snapshot.
        The store stamps the creation time; any timestamp on ``request`` is ignored.
        """
        request_id = request.id or new_request_id()
        record = RequestRecord(
            id=request_id,
            patient_name=request.patient_name,
            patient_id=request.patient_id,
            reason=request.reason or "",
            type=normalize_type(request.type).value,
            criticality=_criticality_value(request.criticality),
            timestamp=self._clock(),
        )
        with self._write_lock, self._session_factory() as db:
            try:
                db.add(record)
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateRequestError(request_id)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Failed to store request for %s: %s", request.patient_name, e)
                raise StoreUnavailableError("could not store request") from e

        logger.info("Request %s queued (%s, %s) for %s",
                    request_id, record.type, record.criticality or "unset", request.patient_name)
        return record.to_snapshot()

    def list(self) -> List[DoctorRequest]:
        """Return copies of all live requests."""
        with self._session_factory() as db:
            try:
                rows = db.execute(select(RequestRecord)).scalars().all()
            except SQLAlchemyError as e:
                raise StoreUnavailableError("could not list requests") from e
            return [row.to_snapshot() for row in rows]

    def get(self, request_id: str) -> Optional[DoctorRequest]:
        with self._session_factory() as db:
            try:
                row = db.get(RequestRecord, request_id)
            except SQLAlchemyError as e:
                raise StoreUnavailableError("could not read request") from e
            return row.to_snapshot() if row else None

    def delete_by_id(self, request_id: str) -> bool:
        """
        Remove the request if present.
        Returns False for an unknown or already removed id.
        """
        with self._write_lock, self._session_factory() as db:
            try:
                result = db.execute(delete(RequestRecord).where(RequestRecord.id == request_id))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreUnavailableError("could not delete request") from e
        return result.rowcount == 1


def _criticality_value(value) -> Optional[str]:
    criticality = normalize_criticality(value)
    return criticality.value if criticality else None

