"""Input checks applied to user payloads."""

import re
from typing import Any, Iterable, Mapping

MIN_PASSWORD_LENGTH = 8

PASSWORD_RULE_MESSAGE = (
    "Password must be at least 8 characters, include one uppercase letter "
    "and one number"
)

_UPPERCASE = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")


def is_strong_password(password: str) -> bool:
    """Return True if the password has 8+ chars, an uppercase letter and a digit."""
    return (
        len(password) >= MIN_PASSWORD_LENGTH
        and _UPPERCASE.search(password) is not None
        and _DIGIT.search(password) is not None
    )


def is_present(value: Any) -> bool:
    """A field counts as present when it is neither missing, None nor ""."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def missing_fields(payload: Mapping[str, Any], required: Iterable[str]) -> list[str]:
    """List the required field names absent from ``payload``, in declared order."""
    return [name for name in required if not is_present(payload.get(name))]
