"""
admin_password.py

Shared secret gating destructive master data operations (project removal).

Hashes use PBKDF2-HMAC-SHA256 from ``cryptography`` and are stored as
``pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>`` in
``[Security] admin_password_hash``. Without a configured hash the built-in
site secret is accepted.
"""
from __future__ import annotations

import base64
import binascii
import hmac
import os
from typing import Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SCHEME = "pbkdf2_sha256"
ITERATIONS = 390_000
DEFAULT_SECRET = "4043"


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)


def hash_password(password: str, *, iterations: int = ITERATIONS, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = _kdf(salt, iterations).derive(password.encode("utf-8"))
    return "$".join([
        SCHEME,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ])


def verify_password(password: str, encoded: str) -> bool:
    """False for wrong passwords and for malformed hashes."""
    try:
        scheme, iterations, salt_b64, digest_b64 = encoded.split("$")
        if scheme != SCHEME:
            return False
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        _kdf(salt, int(iterations)).verify(password.encode("utf-8"), expected)
    except (ValueError, binascii.Error, InvalidKey):
        return False
    return True


class AdminPasswordVerifier:
    """Checks the admin secret against a configured hash (or the default)."""

    def __init__(self, password_hash: str = "") -> None:
        self._hash = (password_hash or "").strip()

    @property
    def uses_default(self) -> bool:
        return not self._hash

    def verify(self, password: Optional[str]) -> bool:
        if not password:
            return False
        if self.uses_default:
            return hmac.compare_digest(password.encode("utf-8"), DEFAULT_SECRET.encode("utf-8"))
        return verify_password(password, self._hash)
