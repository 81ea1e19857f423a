"""Tests for the MongoDB user store adapter."""

import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from peoplecount.errors import ConflictError, StoreError
from peoplecount.models.user import User
from peoplecount.services.user_store import UserStore


def make_user(email="test@user.ch"):
    return User(name="Test User", email=email, password="hashed")


def test_insert_and_find(user_store):
    user_store.insert(make_user())

    document = user_store.find_by_email("test@user.ch")
    assert document["name"] == "Test User"
    assert document["clientID"] is None
    assert "createdAt" in document
    assert user_store.exists_by_email("test@user.ch")
    assert not user_store.exists_by_email("other@user.ch")


def test_insert_duplicate_conflicts(user_store, users_collection):
    user_store.insert(make_user())

    with pytest.raises(ConflictError):
        user_store.insert(make_user())
    assert len(users_collection.documents) == 1


def test_duplicate_key_from_index_conflicts(users_collection, monkeypatch):
    def raise_duplicate(document):
        raise DuplicateKeyError("E11000 duplicate key error")

    monkeypatch.setattr(users_collection, "insert_one", raise_duplicate)

    with pytest.raises(ConflictError):
        UserStore(users_collection).insert(make_user())


def test_update_merges_only_given_fields(user_store):
    user_store.insert(make_user())

    assert user_store.update_by_email("test@user.ch", {"company": "HS"}) == 1
    document = user_store.find_by_email("test@user.ch")
    assert document["company"] == "HS"
    assert document["name"] == "Test User"

    assert user_store.update_by_email("ghost@user.ch", {"company": "HS"}) == 0


def test_delete_counts(user_store):
    user_store.insert(make_user())

    assert user_store.delete_by_email("test@user.ch") == 1
    assert user_store.delete_by_email("test@user.ch") == 0


def test_list_all_strips_passwords(user_store):
    user_store.insert(make_user("a@user.ch"))
    user_store.insert(make_user("b@user.ch"))

    users = user_store.list_all()
    assert [user["email"] for user in users] == ["a@user.ch", "b@user.ch"]
    assert all("password" not in user for user in users)
    assert all(isinstance(user["_id"], str) for user in users)


def test_driver_failure_becomes_store_error(users_collection, monkeypatch):
    def unreachable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    for method in ("find_one", "find", "update_one", "delete_one"):
        monkeypatch.setattr(users_collection, method, unreachable)

    store = UserStore(users_collection)
    with pytest.raises(StoreError):
        store.find_by_email("test@user.ch")
    with pytest.raises(StoreError):
        store.list_all()
    with pytest.raises(StoreError):
        store.update_by_email("test@user.ch", {"name": "x"})
    with pytest.raises(StoreError):
        store.delete_by_email("test@user.ch")


def test_store_failure_returns_generic_500(test_client, users_collection, monkeypatch):
    def unreachable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(users_collection, "find", unreachable)

    response = test_client.get("/api/users")
    assert response.status_code == 500
    assert response.text == "DB error"
