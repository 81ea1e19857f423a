"""Security checks for the FastAPI application.

Two independent policies guard the service:

- the access gate (client origin allow-list, then static basic auth),
  applied as HTTP middleware to every request before routing;
- the superuser policy, checked inside the forced password reset on top
  of the gate.
"""

import base64
import binascii
import logging
import secrets
from typing import Iterable

from fastapi import Request
from fastapi.responses import PlainTextResponse

from peoplecount.config import SuperUserConfig, get_settings
from peoplecount.errors import AuthError

logger = logging.getLogger(__name__)

IPV4_MAPPED_PREFIX = "::ffff:"
BASIC_SCHEME = "Basic "


def _matches(supplied: str, expected: str) -> bool:
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def is_allowed_origin(host: str | None, allowed_prefixes: Iterable[str]) -> bool:
    """Return True if the client address starts with an allowed prefix.

    IPv4-mapped IPv6 addresses are compared in their IPv4 form.
    """
    if not host:
        return False
    if host.startswith(IPV4_MAPPED_PREFIX):
        host = host[len(IPV4_MAPPED_PREFIX):]
    return any(host.startswith(prefix) for prefix in allowed_prefixes)


def verify_client_origin(request: Request) -> None:
    """Reject requests from outside loopback and the local network."""
    settings = get_settings()
    host = request.client.host if request.client else None

    if not is_allowed_origin(host, settings.app.allowed_client_prefixes):
        logger.warning("Rejected request from external address %s", host)
        raise AuthError("Forbidden: external access denied", status_code=403)


def verify_basic_auth(authorization: str | None) -> str:
    """Check a basic-auth header against the configured service credentials.

    Returns:
        The authenticated username.
    """
    if not authorization or not authorization.startswith(BASIC_SCHEME):
        raise AuthError(
            "Auth required",
            status_code=401,
            headers={"WWW-Authenticate": "Basic"},
        )

    try:
        decoded = base64.b64decode(authorization[len(BASIC_SCHEME):]).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        decoded = ""
    username, _, password = decoded.partition(":")

    settings = get_settings()
    user_ok = _matches(username, settings.server.user)
    pass_ok = _matches(password, settings.server.password)
    if not (user_ok and pass_ok):
        logger.warning("Rejected basic auth for user %s", username)
        raise AuthError("Forbidden: wrong credentials", status_code=403)

    return username


async def access_gate(request: Request, call_next):
    """HTTP middleware running both gate checks before any route or body parsing."""
    try:
        verify_client_origin(request)
        verify_basic_auth(request.headers.get("Authorization"))
    except AuthError as exc:
        return PlainTextResponse(
            exc.message,
            status_code=exc.status_code,
            headers=exc.headers,
        )
    return await call_next(request)


class SuperUserPolicy:
    """Static superuser credentials compared on every forced reset."""

    def __init__(self, email: str, password: str):
        self.email = email
        self.password = password

    @classmethod
    def from_config(cls, config: SuperUserConfig) -> "SuperUserPolicy":
        return cls(email=config.email, password=config.password)

    def authorize(self, email: object, password: object) -> None:
        """Raise AuthError (401) unless both values match exactly."""
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthError("Unauthorized superUser credentials")
        email_ok = _matches(email, self.email)
        password_ok = _matches(password, self.password)
        if not (email_ok and password_ok):
            logger.warning("Rejected superuser credentials for %s", email)
            raise AuthError("Unauthorized superUser credentials")


def get_superuser_policy() -> SuperUserPolicy:
    """FastAPI dependency building the superuser policy from settings."""
    return SuperUserPolicy.from_config(get_settings().superuser)
