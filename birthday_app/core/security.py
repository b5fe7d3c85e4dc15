"""Password hashing and session token helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import secrets

import jwt

from birthday_app.constants.auth_constants import AUTH_COOKIE_MAX_AGE, SESSION_ALGORITHM
from birthday_app.core.errors import Unauthenticated


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return sha256_hex(password)


def verify_password(password: str, password_hash: str) -> bool:
    return secrets.compare_digest(hash_password(password), password_hash)


def shared_cookie_value(shared_password: str | None) -> str:
    """Value of the invitation cookie: the sha256 hex digest of the shared password."""
    return sha256_hex(shared_password or "")


def create_guest_token(
    guest_name: str,
    secret: str,
    ttl_seconds: int = AUTH_COOKIE_MAX_AGE,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": guest_name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=SESSION_ALGORITHM)


def decode_guest_token(token: str | None, secret: str) -> str:
    """Return the guest name carried by a session token."""
    if not token:
        raise Unauthenticated("Guest session missing.")
    try:
        payload = jwt.decode(token, secret, algorithms=[SESSION_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise Unauthenticated("Guest session invalid or expired.") from exc
    guest_name = payload.get("sub")
    if not isinstance(guest_name, str) or not guest_name:
        raise Unauthenticated("Guest session carries no name.")
    return guest_name
