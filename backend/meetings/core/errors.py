"""
Centralized error handling for the meeting engine.
Domain exceptions plus a rule table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Domain errors: all client-recoverable. Storage failures are never wrapped.
# ---------------------------------------------------------------------------


class MeetingError(Exception):
    """Base for errors the caller can fix by retrying with different input."""

    code = "meeting_error"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.detail}


class ValidationError(MeetingError):
    """Missing or malformed input; rejected before any write."""

    code = "validation_error"


class StateConflictError(MeetingError):
    """Transition not allowed from the current status, or not allowed for this actor."""

    code = "state_conflict"


class SlotConflictError(MeetingError):
    """Slot already held by one of the participants (pre-check or lock insert)."""

    code = "slot_conflict"


class NotFoundError(MeetingError):
    """Unknown meeting, actor or event id."""

    code = "not_found"


# ---------------------------------------------------------------------------
# HTTP status codes for known error categories
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409

# List of (exception type, status_code). First match wins.
MEETING_ERROR_RULES: list[tuple[type[MeetingError], int]] = [
    (ValidationError, STATUS_BAD_REQUEST),
    (NotFoundError, STATUS_NOT_FOUND),
    (StateConflictError, STATUS_CONFLICT),
    (SlotConflictError, STATUS_CONFLICT),
]


def meeting_error_to_http(exc: MeetingError) -> HTTPException:
    """
    Map a domain error into an HTTPException carrying the error's detail dict.
    Unknown subclasses fall back to 400 since every MeetingError is client-recoverable.
    """
    for exc_type, status_code in MEETING_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=exc.to_dict())
    return HTTPException(status_code=STATUS_BAD_REQUEST, detail=exc.to_dict())
