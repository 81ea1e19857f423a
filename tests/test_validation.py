"""Unit tests for password rules, field checks and the password hasher."""

from datetime import datetime, timezone

import bcrypt
import pytest

from peoplecount.models.user import swiss_timestamp
from peoplecount.services.passwords import (
    PASSWORD_HASH_ROUNDS,
    hash_password,
    verify_password,
)
from peoplecount.validation import is_strong_password, missing_fields


@pytest.mark.parametrize(
    "password, expected",
    [
        ("Password1", True),
        ("ABCDEFG1", True),
        ("aaaaaaA1", True),
        ("Passw0r", False),
        ("password1", False),
        ("Password", False),
        ("PASSWORD", False),
        ("12345678", False),
        ("", False),
        ("Ünïcödé12", False),
        ("pässwörT1", True),
    ],
)
def test_is_strong_password(password, expected):
    assert is_strong_password(password) is expected


def test_missing_fields_keeps_declared_order():
    payload = {"email": "a@b.ch", "name": "", "password": None, "extra": 1}
    assert missing_fields(payload, ("name", "email", "password")) == ["name", "password"]


def test_missing_fields_accepts_non_string_values():
    assert missing_fields({"force": True, "count": 0}, ("force", "count")) == []


def test_hash_round_trip():
    digest = hash_password("Password1")
    assert digest != "Password1"
    assert f"${PASSWORD_HASH_ROUNDS}$" in digest
    assert verify_password("Password1", digest)
    assert not verify_password("Password2", digest)


def test_hash_is_salted():
    assert hash_password("Password1") != hash_password("Password1")


@pytest.mark.parametrize("digest", ["not-a-hash", "", None])
def test_verify_malformed_digest_fails(digest):
    assert verify_password("Password1", digest) is False


def test_swiss_timestamp_format():
    moment = datetime(2025, 6, 3, 12, 5, 9, tzinfo=timezone.utc)
    # Zurich is UTC+2 in summer
    assert swiss_timestamp(moment) == "03.06.2025 14:05:09"


def test_verify_legacy_bcrypt_digest():
    digest = bcrypt.hashpw(b"Password1", bcrypt.gensalt(rounds=4)).decode()
    assert verify_password("Password1", digest)
    assert not verify_password("Password2", digest)
