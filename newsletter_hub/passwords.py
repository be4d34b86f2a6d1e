"""
Salted one-way password credentials.

Credentials are stored as ``"<salt>:<hash>"`` where the hash is a hex-encoded
PBKDF2-HMAC-SHA512 digest.
"""

from __future__ import annotations

import hashlib
import hmac
import uuid

HASH_NAME = "sha512"
ITERATIONS = 100_000
KEY_LENGTH = 64


def _derive(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        HASH_NAME,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        ITERATIONS,
        dklen=KEY_LENGTH,
    ).hex()


def hash_password(password: str) -> str:
    """
    Raises ``ValueError`` for passwords that are not encodable as UTF-8
    (e.g. lone surrogates decoded from JSON escapes).
    """
    salt = uuid.uuid4().hex
    return f"{salt}:{_derive(password, salt)}"


def verify_password(password: str, credential: str) -> bool:
    """
    Check ``password`` against a stored credential.

    Malformed credentials or unencodable passwords never raise; they simply
    fail verification.
    """
    if not isinstance(password, str) or not isinstance(credential, str):
        return False
    salt, sep, expected = credential.partition(":")
    if not sep or not salt or not expected:
        return False
    try:
        derived = _derive(password, salt)
        # compare_digest only accepts ASCII str, so compare bytes.
        return hmac.compare_digest(
            derived.encode("ascii"), expected.encode("utf-8", "surrogatepass")
        )
    except ValueError:
        return False
