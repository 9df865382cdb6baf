# =============================================================================
# Request Principal
# =============================================================================
#
# Decodes a bearer JWT into the principal the access guard inspects.
# The translator never issues tokens; the host CMS does.
#
# Claims read:
#   sub   -> Principal.id
#   email -> Principal.email
#   role  -> single role string
#   roles -> list of role strings
#
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from autolocale.config import get_settings
from autolocale.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


@dataclass
class Principal:
    """The authenticated user behind a request."""

    id: str
    email: str | None = None
    role: str | None = None
    roles: list[str] = field(default_factory=list)

    @property
    def all_roles(self) -> set[str]:
        """`role` and `roles` combined."""
        combined = set(self.roles)
        if self.role:
            combined.add(self.role)
        return combined

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Principal:
        roles = claims.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            id=str(claims["sub"]),
            email=claims.get("email"),
            role=claims.get("role"),
            roles=list(roles),
        )


# =============================================================================
# Token handling
# =============================================================================


class TokenError(Exception):
    """Token is invalid, expired or malformed."""
    pass


def decode_principal(token: str) -> Principal:
    """
    Decode and validate a JWT into a principal.

    Raises:
        TokenError: the token cannot be trusted
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if not claims.get("sub"):
        raise TokenError("Token has no subject")
    return Principal.from_claims(claims)


def create_token(
    user_id: str,
    role: str | None = None,
    roles: list[str] | None = None,
    email: str | None = None,
    expires_minutes: int = 60,
) -> str:
    """Issue a token for local development and tests."""
    settings = get_settings()
    now = utc_now()
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "jti": generate_id("tok"),
    }
    if role:
        payload["role"] = role
    if roles:
        payload["roles"] = roles
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


# =============================================================================
# FastAPI dependency
# =============================================================================

# Missing credentials are not an error here; the guard denies them
optional_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> Principal | None:
    """Resolve the request principal, or None for anonymous/invalid tokens."""
    if not credentials:
        return None
    try:
        return decode_principal(credentials.credentials)
    except TokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
