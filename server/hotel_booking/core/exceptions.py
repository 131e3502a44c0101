"""Booking errors as RFC 9457 Problem Details, each carrying a machine-readable code."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class ProblemDetailsException(HTTPException):
    """
    Base exception following RFC 9457 Problem Details for HTTP APIs.

    Every subclass sets ``code``, which is also written into the problem body
    so clients can branch on it (for example redirect-to-rebook on EXPIRED)
    and show ``detail`` otherwise.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    code: str = "INTERNAL"

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.message = detail or title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
            "code": self.code,
        }

        if detail:
            self.problem_details["detail"] = detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class AuthenticationError(ProblemDetailsException):
    """The caller could not be resolved to a known user."""

    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "User not found. Please sign in."):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri="https://example.com/problems/unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """The resolved caller lacks permission for the hotel, booking or action."""

    code = "FORBIDDEN"

    def __init__(self, detail: str = "You do not have permission to perform this action."):
        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri="https://example.com/problems/forbidden",
        )


class NotFoundError(ProblemDetailsException):
    """A referenced room, hotel or booking does not exist or is soft-deleted."""

    code = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"{resource_type.capitalize()} not found."

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/not-found",
            extensions=extensions,
        )


class ValidationError(ProblemDetailsException):
    """Malformed or out-of-policy input."""

    code = "INVALID_INPUT"

    def __init__(self, detail: str = "The request data failed validation", field: Optional[str] = None):
        super().__init__(
            status_code=400,
            title="Invalid Input",
            detail=detail,
            type_uri="https://example.com/problems/invalid-input",
            extensions={"field": field} if field else None,
        )


class RoomUnavailableError(ProblemDetailsException):
    """The room's operational status does not allow new bookings."""

    code = "UNAVAILABLE"

    def __init__(self, room_id: str, operational_status: str):
        super().__init__(
            status_code=409,
            title="Room Unavailable",
            detail=f"Room is currently {operational_status} and cannot be booked.",
            type_uri="https://example.com/problems/room-unavailable",
            extensions={
                "room_id": room_id,
                "operational_status": operational_status,
            },
        )


class ConflictError(ProblemDetailsException):
    """An active booking already covers part of the requested date range."""

    code = "CONFLICT"

    def __init__(
        self,
        detail: str = "Room is not available for the selected dates. Please choose different dates.",
        conflicting_resource: Optional[Dict[str, Any]] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Booking Conflict",
            detail=detail,
            type_uri="https://example.com/problems/booking-conflict",
            extensions=extensions,
        )


class InvalidStateError(ProblemDetailsException):
    """The action is not legal from the booking's current status."""

    code = "INVALID_STATE"

    def __init__(
        self,
        detail: str,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
    ):
        extensions = {}
        if current_status:
            extensions["current_status"] = current_status
        if requested_status:
            extensions["requested_status"] = requested_status

        super().__init__(
            status_code=409,
            title="Invalid Booking State",
            detail=detail,
            type_uri="https://example.com/problems/invalid-state",
            extensions=extensions,
        )


class HoldExpiredError(ProblemDetailsException):
    """The hold lapsed before the customer confirmed it."""

    code = "EXPIRED"

    def __init__(self, booking_id: str, expired_at: datetime):
        super().__init__(
            status_code=410,
            title="Hold Expired",
            detail="Your hold has expired. Please create a new booking.",
            type_uri="https://example.com/problems/hold-expired",
            extensions={
                "booking_id": booking_id,
                "expired_at": expired_at.isoformat() + "Z",
            },
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """Render a Problem Details exception as its JSON body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert unhandled exceptions to a Problem Details 500 response.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    problem_details = {
        "type": "https://example.com/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "code": "INTERNAL",
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": str(uuid.uuid4()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(status_code=500, content=problem_details)
