"""
Password hashing and JWT session tokens.

Passwords are hashed with bcrypt; the salt (and cost) is embedded in the
stored hash.  Session tokens are HS256 JWTs carrying the user id in
``sub``; they travel in an HTTP-only cookie or a bearer header.
"""
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from webblog.config import Settings, settings as default_settings


def hash_password(password: str, settings: Settings = default_settings) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: int, settings: Settings = default_settings) -> str:
    """
    Create a signed access token for *user_id*.

    The token expires after ``settings.ACCESS_TOKEN_EXPIRE_MINUTES``.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings = default_settings) -> dict:
    """
    Decode and validate *token*.

    Raises:
        jose.JWTError if the token is invalid or expired
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
