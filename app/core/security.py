"""Password hashing, password strength rules, reset tokens, and JWT creation/verification."""

import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Min/max lengths for name and password validation.
FULL_NAME_MIN_LEN = 3
FULL_NAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Reset tokens are 32 random bytes rendered as 64 hex characters.
RESET_TOKEN_BYTES = 32


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def password_strength_errors(password: str) -> list[str]:
    """
    Return the list of unmet password rules (empty when the password is acceptable).

    Rules: at least 8 characters, one uppercase letter, one lowercase letter, one digit.
    """
    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LEN:
        errors.append(f"La contraseña debe tener al menos {PASSWORD_MIN_LEN} caracteres")
    if len(password) > PASSWORD_MAX_LEN:
        errors.append(f"La contraseña no puede exceder {PASSWORD_MAX_LEN} caracteres")
    if not re.search(r"[A-Z]", password):
        errors.append("La contraseña debe contener al menos una letra mayúscula")
    if not re.search(r"[a-z]", password):
        errors.append("La contraseña debe contener al menos una letra minúscula")
    if not re.search(r"[0-9]", password):
        errors.append("La contraseña debe contener al menos un número")
    return errors


def generate_reset_token() -> str:
    """Random hex token for password recovery links."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def create_access_token(sub: str | int, role: str) -> str:
    """Create a JWT access token with sub (account id), role, and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, role, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )
