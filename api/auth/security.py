"""
Auth security helpers.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import bcrypt
import jwt

from core import settings

DEFAULT_JWT_SECRET = "dev-change-this-secret"

# 60 days, matching the lifetime of the tokens issued at login.
DEFAULT_ACCESS_TOKEN_EXPIRE_MIN = 60 * 24 * 60

logger = logging.getLogger(__name__)

_warned_default_secret = False


class AuthSecurityError(RuntimeError):
    pass


class TokenExpiredError(AuthSecurityError):
    pass


class InvalidTokenError(AuthSecurityError):
    pass


def jwt_secret() -> str:
    global _warned_default_secret
    secret = settings.env_str("JWT_SECRET", DEFAULT_JWT_SECRET)
    if secret == DEFAULT_JWT_SECRET and not _warned_default_secret:
        # Local default keeps development simple. In production, set JWT_SECRET.
        logger.warning("JWT_SECRET is not set; using the built-in development secret.")
        _warned_default_secret = True
    return secret


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return settings.env_int("ACCESS_TOKEN_EXPIRE_MIN", DEFAULT_ACCESS_TOKEN_EXPIRE_MIN)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(
    *,
    user_id: int,
    is_admin: bool = False,
    expires_in_s: int | None = None,
) -> str:
    issued_at = now_epoch_s()
    if expires_in_s is None:
        expires_in_s = access_token_expire_minutes() * 60

    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "is_admin": bool(is_admin),
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + expires_in_s,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Expiry is reported separately from every other failure so callers can
    answer 401 for a stale token and 403 for a forged one.
    """
    raw = (token or "").strip()
    if not raw:
        raise InvalidTokenError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise InvalidTokenError("Token is not an access token.")

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise InvalidTokenError("Invalid access token subject.")
    payload["user_id"] = int(subject)
    payload["is_admin"] = bool(payload.get("is_admin", False))

    return payload
