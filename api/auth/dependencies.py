"""
Auth dependencies for protected FastAPI routes.

The bearer check only verifies the signed token; it never touches the
database. Decoded claims are stored on `request.state.user` and returned.
"""

from __future__ import annotations

from fastapi import Depends, Header, Request

from core import errors

from . import security

TOKEN_REQUIRED = "Authentication token is required"
TOKEN_EXPIRED = "Token has expired"
TOKEN_INVALID = "Invalid token"


def _extract_bearer_token(authorization: str | None) -> str:
    parts = (authorization or "").strip().split()
    if len(parts) < 2 or not parts[1]:
        raise errors.Unauthenticated(TOKEN_REQUIRED)

    scheme, token = parts[0].lower(), parts[1]
    if scheme != "bearer":
        raise errors.Forbidden(TOKEN_INVALID)
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(request: Request, access_token: str = Depends(get_bearer_token)) -> dict:
    try:
        claims = security.decode_access_token(access_token)
    except security.TokenExpiredError as exc:
        raise errors.Unauthenticated(TOKEN_EXPIRED) from exc
    except security.AuthSecurityError as exc:
        raise errors.Forbidden(TOKEN_INVALID) from exc

    request.state.user = claims
    return claims


async def get_admin_user(current_user: dict = Depends(get_current_user)) -> dict:
    if not current_user.get("is_admin"):
        raise errors.Forbidden("Admin privileges required")
    return current_user
