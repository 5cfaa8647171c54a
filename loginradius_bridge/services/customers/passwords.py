"""Local customer passwords."""

import hashlib
import secrets
from base64 import b64decode, b64encode

from ...exceptions import AuthenticationFailed

SALT_BYTES = 8


def _hash_salt_and_password(salt: bytes, password: str) -> bytes:
    return hashlib.sha256(salt + b'-' + password.encode('utf-8')).digest()


def generate_password() -> str:
    """A random password for a customer who will never type it."""
    return secrets.token_urlsafe(16)


def hash_password(password: str) -> str:
    """Generate a secure hash of a password."""
    salt = secrets.token_bytes(SALT_BYTES)
    hashed = _hash_salt_and_password(salt, password)
    return b64encode(salt + hashed).decode('ascii')


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against an encrypted hash."""
    try:
        decoded = b64decode(encrypted.encode('ascii'))
    except ValueError as e:
        raise AuthenticationFailed('Malformed password hash') from e
    salt = decoded[:SALT_BYTES]
    enc_hashed = decoded[SALT_BYTES:]
    if not secrets.compare_digest(_hash_salt_and_password(salt, password),
                                  enc_hashed):
        raise AuthenticationFailed('Incorrect password')
    return True
