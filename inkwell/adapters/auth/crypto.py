"""
Password hashing and session token signing.

Passwords are hashed with argon2 through passlib. Session tokens are HS256
JWTs carrying ``sub`` (the user id), an optional ``email``, ``iat`` and ``exp``.
"""

import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt
from passlib.context import CryptContext

ALGORITHM = "HS256"
DEFAULT_SECRET = "dev-secret-unsafe"

_pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def resolve_secret(secret_key: str | None) -> str:
    return secret_key or os.environ.get("INKWELL_SECRET_KEY") or DEFAULT_SECRET


def sign_token(
    claims: dict[str, Any],
    expires_in: timedelta,
    secret_key: str | None = None,
    now_utc: datetime | None = None,
) -> str:
    issued_at = now_utc if now_utc is not None else datetime.now(UTC)
    payload = {**claims, "iat": issued_at, "exp": issued_at + expires_in}
    return cast(str, jwt.encode(payload, resolve_secret(secret_key), algorithm=ALGORITHM))


def read_token(token: str, secret_key: str | None = None) -> dict[str, Any] | None:
    """Claims of a well-signed, unexpired token. None for anything else."""
    try:
        payload = jwt.decode(token, resolve_secret(secret_key), algorithms=[ALGORITHM])
    except JWTError:
        return None
    return cast(dict[str, Any], payload)


class JWTAuthAdapter:
    """AuthAdapterPort backed by argon2 hashes and locally signed JWTs."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._secret_key = secret_key

    def hash_password(self, password: str) -> str:
        return cast(str, _pwd_context.hash(password))

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            return bool(_pwd_context.verify(plain, hashed))
        except ValueError:
            # Unrecognised hash format, e.g. a disabled-account placeholder.
            return False

    def create_token(self, user_id: Any, ttl_minutes: int, email: str | None = None) -> str:
        claims: dict[str, Any] = {"sub": str(user_id)}
        if email:
            claims["email"] = email
        return sign_token(claims, timedelta(minutes=ttl_minutes), secret_key=self._secret_key)
