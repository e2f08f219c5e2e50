"""
Booking API error types.

Backend errors are opaque: their message is shown to the user as-is.
Service wrappers run their calls inside api_errors() so that every failure
reaching a route is an ApiError with a usable message.
"""
from contextlib import contextmanager
from typing import Any, Optional

import httpx


class ApiError(Exception):
    """Error returned by (or while reaching) the booking API."""

    def __init__(self, message: str = "", status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        return self.message


class MembershipSuspendedError(ApiError):
    """403 raised by the API when the organization's membership is suspended."""

    def __init__(self, message: str = "", organization_id: Optional[str] = None, payload: Any = None):
        super().__init__(message, status_code=403, payload=payload)
        self.organization_id = organization_id


class SessionExpiredError(ApiError):
    """401 from the API: the bearer token expired or is invalid."""

    def __init__(self, message: str = "", payload: Any = None):
        super().__init__(message, status_code=401, payload=payload)


class EmployeeRequiredError(Exception):
    """A reservation cannot be approved until an employee is assigned."""

    def __init__(self, reservation_id: Optional[str]):
        super().__init__(f"Reservation {reservation_id} has no employee assigned")
        self.reservation_id = reservation_id


@contextmanager
def api_errors(default_message: str):
    """
    Normalize failures of a booking API call.

    - ApiError without a backend message gets default_message.
    - Transport errors (timeouts, refused connections) become ApiError(default_message).
    """
    try:
        yield
    except ApiError as e:
        if not e.message:
            e.message = default_message
            e.args = (default_message,)
        raise
    except httpx.HTTPError as e:
        raise ApiError(default_message) from e
