"""User directory workflows: register, list, update, delete and forced reset.

Each function validates its payload, talks to the store adapter and raises
a ``PeopleCountError`` subclass on failure; the HTTP layer turns those into
status codes.
"""

import logging
from typing import Any, Mapping

from peoplecount.errors import AuthError, ConflictError, NotFoundError, ValidationError
from peoplecount.models.user import User
from peoplecount.security import SuperUserPolicy
from peoplecount.services.passwords import hash_password, verify_password
from peoplecount.services.user_store import UserStore
from peoplecount.validation import (
    PASSWORD_RULE_MESSAGE,
    is_present,
    is_strong_password,
    missing_fields,
)

logger = logging.getLogger(__name__)

REGISTER_REQUIRED = ("name", "email", "password")
RESET_REQUIRED = ("email", "newPassword", "superUserEmail", "superUserPassword")

NEW_PASSWORD_RULE_MESSAGE = "New password must be 8+ chars, with uppercase and number"

# Fields a merge-patch may never overwrite.
IMMUTABLE_FIELDS = ("_id", "createdAt")


def register_user(store: UserStore, payload: Mapping[str, Any]) -> User:
    """Create a new user from a registration payload.

    Args:
        store: User store adapter.
        payload: name, email, password and optional company, telnummer,
            clientID.

    Returns:
        The stored user document (password hashed).

    Raises:
        ValidationError: Missing fields or weak password.
        ConflictError: Email already registered.
    """
    missing = missing_fields(payload, REGISTER_REQUIRED)
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    if not is_strong_password(payload["password"]):
        raise ValidationError(PASSWORD_RULE_MESSAGE)

    email = payload["email"]
    if store.exists_by_email(email):
        raise ConflictError("Email already exists")

    user = User(
        name=payload["name"],
        email=email,
        password=hash_password(payload["password"]),
        company=payload.get("company") or None,
        telnummer=payload.get("telnummer") or None,
        clientID=payload.get("clientID") or None,
    )
    store.insert(user)
    return user


def list_users(store: UserStore) -> list[dict[str, Any]]:
    """Return all users without their password hashes."""
    users = store.list_all()
    logger.debug("Listing %d users", len(users))
    return users


def update_user(store: UserStore, email: str | None, updates: Any) -> None:
    """Merge-patch a user's fields, re-hashing the password when it changes.

    A password change needs ``updates["oldPassword"]`` matching the stored
    hash. ``oldPassword`` itself is never persisted.

    Raises:
        ValidationError: Bad payload, missing old password or weak new one.
        NotFoundError: No user with this email.
        AuthError: Old password does not match (403).
        ConflictError: The patch moves the user onto a taken email.
    """
    if not is_present(email) or not isinstance(updates, dict):
        raise ValidationError("Invalid payload. Expected email and updates object.")

    user = store.find_by_email(email)
    if user is None:
        raise NotFoundError("User not found")

    patch = dict(updates)

    if is_present(patch.get("password")):
        old_password = patch.get("oldPassword")
        if not is_present(old_password):
            raise ValidationError("Old password required for update")
        if not isinstance(old_password, str) or not verify_password(
            old_password, user.get("password")
        ):
            logger.info("Rejected password change for %s: old password mismatch", email)
            raise AuthError("Old password incorrect", status_code=403)

        new_password = patch["password"]
        if not isinstance(new_password, str) or not is_strong_password(new_password):
            raise ValidationError(NEW_PASSWORD_RULE_MESSAGE)
        patch["password"] = hash_password(new_password)
    else:
        # Drop empty password values instead of wiping the stored hash
        patch.pop("password", None)

    patch.pop("oldPassword", None)
    for field in IMMUTABLE_FIELDS:
        patch.pop(field, None)

    new_email = patch.get("email")
    if new_email is not None and new_email != email and store.exists_by_email(new_email):
        raise ConflictError("Email already exists")

    if not patch:
        logger.info("Update for %s carried no changes", email)
        return

    if store.update_by_email(email, patch) == 0:
        raise NotFoundError("User not found")

    logger.info("Updated user %s (fields: %s)", email, ", ".join(sorted(patch)))


def delete_user(store: UserStore, email: str | None) -> None:
    """Hard-delete a user by email.

    Raises:
        ValidationError: No email given.
        NotFoundError: Nothing was deleted.
    """
    if not is_present(email):
        raise ValidationError("Email required to delete user")

    if store.delete_by_email(email) == 0:
        raise NotFoundError("User not found")

    logger.info("Deleted user %s", email)


def force_reset_password(
    store: UserStore,
    policy: SuperUserPolicy,
    payload: Mapping[str, Any],
) -> None:
    """Overwrite a user's password on behalf of the superuser.

    Skips the old-password check; instead the payload must carry the
    superuser credentials and a truthy ``force`` flag.

    Raises:
        ValidationError: Missing fields, missing force flag or weak password.
        AuthError: Superuser credentials rejected (401).
        NotFoundError: No user with this email.
    """
    if missing_fields(payload, RESET_REQUIRED) or not payload.get("force"):
        raise ValidationError("Missing required fields or force flag")

    policy.authorize(payload["superUserEmail"], payload["superUserPassword"])

    new_password = payload["newPassword"]
    if not is_strong_password(new_password):
        raise ValidationError(
            "New password must be 8+ chars, have 1 uppercase letter and 1 number"
        )

    email = payload["email"]
    matched = store.update_by_email(email, {"password": hash_password(new_password)})
    if matched == 0:
        raise NotFoundError("User not found")

    logger.warning("Superuser forced a password reset for %s", email)
