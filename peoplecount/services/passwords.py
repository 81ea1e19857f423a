"""One-way password hashing for stored user credentials.

New digests use pbkdf2_sha256. Users registered by the earlier service still
carry bcrypt (cost 10) digests; those are verified as a legacy scheme and
replaced by a pbkdf2 digest the next time the password changes.
"""

import logging

import bcrypt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Fixed work factor for every stored digest
PASSWORD_HASH_ROUNDS = 29000

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a plaintext password with a random salt.

    Args:
        password: Plaintext password.

    Returns:
        Encoded digest including scheme, rounds and salt.
    """
    return pwd_context.hash(password)


def is_legacy_hash(password_hash: str) -> bool:
    return password_hash.startswith(BCRYPT_PREFIXES)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plaintext password against a stored digest.

    A malformed or missing digest is treated as a failed verification.
    """
    if not password_hash:
        return False
    try:
        if is_legacy_hash(password_hash):
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError) as exc:
        logger.warning("Stored password hash could not be verified: %s", exc)
        return False
