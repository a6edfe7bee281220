"""
errors.py
=========
Typed failures raised by the request core and mapped to HTTP responses in main.py.
"""


class JeevrakshakError(Exception):
    """Base class for service errors."""


class DuplicateRequestError(JeevrakshakError):
    """A caller-supplied request id is already live."""

    def __init__(self, request_id: str):
        super().__init__(f"Request {request_id} already exists")
        self.request_id = request_id


class StoreUnavailableError(JeevrakshakError):
    """The storage layer could not complete an operation."""


class InvalidBMIInput(JeevrakshakError, ValueError):
    """Weight or height was not a positive number."""
