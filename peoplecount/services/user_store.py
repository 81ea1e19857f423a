"""Store adapter translating user directory operations into MongoDB calls.

Every method works on a single collection keyed by ``email``. Driver
failures are logged with context and re-raised as ``StoreError`` so the
HTTP layer can answer with a generic 500.
"""

import logging
from typing import Any

from fastapi import Request
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from peoplecount.errors import ConflictError, StoreError
from peoplecount.models.user import User

logger = logging.getLogger(__name__)

PASSWORD_FIELD = "password"


class UserStore:
    """Thin CRUD wrapper around the users collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        """Fetch the full user document (hash included) or None."""
        try:
            return self.collection.find_one({"email": email})
        except PyMongoError as e:
            logger.error("Find user %s failed: %s", email, e, exc_info=True)
            raise StoreError("DB error") from e

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def insert(self, user: User) -> str:
        """Insert a new user.

        Args:
            user: User document with an already hashed password.

        Returns:
            String form of the inserted document id.

        Raises:
            ConflictError: If a user with the same email exists.
            StoreError: If the insert fails.
        """
        if self.exists_by_email(user.email):
            raise ConflictError("Email already exists")

        try:
            result = self.collection.insert_one(user.model_dump(by_alias=True))
        except DuplicateKeyError as e:
            logger.warning("Concurrent registration for %s rejected", user.email)
            raise ConflictError("Email already exists") from e
        except PyMongoError as e:
            logger.error("Insert user %s failed: %s", user.email, e, exc_info=True)
            raise StoreError("DB error") from e

        logger.info("Created user %s", user.email)
        return str(result.inserted_id)

    def update_by_email(self, email: str, fields: dict[str, Any]) -> int:
        """Merge-patch the given fields into the user document.

        Returns:
            Number of documents matched (0 or 1).
        """
        try:
            result = self.collection.update_one({"email": email}, {"$set": fields})
        except DuplicateKeyError as e:
            raise ConflictError("Email already exists") from e
        except PyMongoError as e:
            logger.error("Update user %s failed: %s", email, e, exc_info=True)
            raise StoreError("DB error") from e

        logger.debug(
            "Update for %s matched %d, modified %d",
            email,
            result.matched_count,
            result.modified_count,
        )
        return result.matched_count

    def delete_by_email(self, email: str) -> int:
        """Hard-delete the user document; returns the deleted count."""
        try:
            result = self.collection.delete_one({"email": email})
        except PyMongoError as e:
            logger.error("Delete user %s failed: %s", email, e, exc_info=True)
            raise StoreError("DB error") from e
        return result.deleted_count

    def list_all(self) -> list[dict[str, Any]]:
        """Return every user with the password field stripped."""
        try:
            documents = list(self.collection.find({}, {PASSWORD_FIELD: 0}))
        except PyMongoError as e:
            logger.error("Fetch users failed: %s", e, exc_info=True)
            raise StoreError("DB error") from e

        users = []
        for document in documents:
            if "_id" in document:
                document["_id"] = str(document["_id"])
            users.append(document)
        return users

    def ping(self) -> None:
        """Round-trip to the server, raising StoreError if unreachable."""
        try:
            self.collection.database.command("ping")
        except PyMongoError as e:
            raise StoreError("MongoDB error") from e


def get_user_store(request: Request) -> UserStore:
    """FastAPI dependency returning the store built at startup."""
    store = getattr(request.app.state, "user_store", None)
    if store is None:
        logger.error("User store requested before MongoDB was initialised")
        raise StoreError("MongoDB error")
    return store
