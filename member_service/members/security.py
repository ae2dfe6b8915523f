"""Password hashing for member credentials.

Each member row stores a random salt next to the passlib hash of password + salt.
"""

from __future__ import annotations

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_password(password: str, salt: str) -> str:
    return pwd_context.hash(password + salt)


def verify_password(password: str, salt: str, hashed: str) -> bool:
    return pwd_context.verify(password + salt, hashed)
