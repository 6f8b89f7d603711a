"""Password hashing and the password policy.

Uses the ``bcrypt`` library directly (>=4.0); passlib is unmaintained and
incompatible with bcrypt >= 4.
"""

import re

import bcrypt

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def password_policy_violation(plain: str) -> str | None:
    """First rule the password breaks, or None.

    Rules: 8..128 characters, at least one uppercase, one lowercase, one digit.
    """
    if not MIN_PASSWORD_LENGTH <= len(plain) <= MAX_PASSWORD_LENGTH:
        return f"Password must be {MIN_PASSWORD_LENGTH}..{MAX_PASSWORD_LENGTH} characters"
    if not re.search(r"[A-Z]", plain):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", plain):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"\d", plain):
        return "Password must contain at least one digit"
    return None
