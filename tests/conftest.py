"""Pytest configuration and fixtures for testing."""

import base64
import copy
import os
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from peoplecount.main import app
from peoplecount.services.user_store import UserStore, get_user_store

GATE_USER = "AdminHS"
GATE_PASSWORD = "SecurePassword"
SUPERUSER_EMAIL = "root@peoplecount.ch"
SUPERUSER_PASSWORD = "RootSecret1"


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables before any tests run."""
    # MongoDB Configuration
    os.environ["MONGO_INITDB_ROOT_USERNAME"] = "root"
    os.environ["MONGO_INITDB_ROOT_PASSWORD"] = "example"

    # Gate Configuration
    os.environ["EXPRESS_USER"] = GATE_USER
    os.environ["EXPRESS_PASS"] = GATE_PASSWORD
    os.environ["ALLOWED_CLIENT_PREFIXES"] = '["127.0.0.1", "::1", "testclient"]'

    # Superuser Configuration
    os.environ["SUPERUSER_EMAIL"] = SUPERUSER_EMAIL
    os.environ["SUPERUSER_PASSWORD"] = SUPERUSER_PASSWORD

    # Application Configuration
    os.environ["ENV"] = "dev"
    os.environ["LOG_LEVEL"] = "INFO"

    yield


class FakeCollection:
    """In-memory stand-in for the pymongo collection calls the store makes."""

    def __init__(self):
        self.documents: list[dict] = []

    @staticmethod
    def _matches(document: dict, query: dict) -> bool:
        return all(document.get(key) == value for key, value in query.items())

    def find_one(self, query: dict):
        for document in self.documents:
            if self._matches(document, query):
                return copy.deepcopy(document)
        return None

    def find(self, query: dict, projection: dict | None = None):
        excluded = {key for key, value in (projection or {}).items() if not value}
        return [
            {k: copy.deepcopy(v) for k, v in document.items() if k not in excluded}
            for document in self.documents
            if self._matches(document, query)
        ]

    def insert_one(self, document: dict):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def update_one(self, query: dict, update: dict):
        for document in self.documents:
            if self._matches(document, query):
                changes = update["$set"]
                modified = any(document.get(k) != v for k, v in changes.items())
                document.update(copy.deepcopy(changes))
                return SimpleNamespace(matched_count=1, modified_count=int(modified))
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, query: dict):
        for index, document in enumerate(self.documents):
            if self._matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def create_index(self, *args, **kwargs):
        return kwargs.get("name", "index")


@pytest.fixture
def users_collection():
    """Empty in-memory users collection."""
    return FakeCollection()


@pytest.fixture
def user_store(users_collection):
    """User store adapter over the in-memory collection."""
    return UserStore(users_collection)


@pytest.fixture
def auth_headers():
    """Basic-auth header accepted by the access gate."""
    token = base64.b64encode(f"{GATE_USER}:{GATE_PASSWORD}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def test_client(user_store, auth_headers):
    """Create a test client wired to the in-memory store, authenticated."""
    app.dependency_overrides[get_user_store] = lambda: user_store

    client = TestClient(app, headers=auth_headers)

    yield client

    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(user_store):
    """Test client without credentials."""
    app.dependency_overrides[get_user_store] = lambda: user_store

    yield TestClient(app)

    app.dependency_overrides.clear()
