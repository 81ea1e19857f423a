"""Exception hierarchy shared by the user service, the gate and the poller."""

from typing import Mapping


class PeopleCountError(Exception):
    """Base exception carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = dict(headers) if headers else None


class ValidationError(PeopleCountError):
    """Malformed, missing or weak input."""

    status_code = 400


class AuthError(PeopleCountError):
    """Rejected gate, superuser or old-password credentials (401/403)."""

    status_code = 401


class NotFoundError(PeopleCountError):
    """No user matched the given email."""

    status_code = 404


class ConflictError(PeopleCountError):
    """A user with the given email already exists."""

    status_code = 409


class StoreError(PeopleCountError):
    """Document store I/O failed."""

    status_code = 500


class TransportError(PeopleCountError):
    """Device request failed at the network or HTTP level."""

    status_code = 502
