"""
Identity tokens

Issues and verifies the HS256 bearer tokens that bind a request to an
account. The cloud cart routes resolve the account subject from the
``Authorization: Bearer <token>`` header.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request

from ..config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def issue_token(subject: str, settings: Optional[Settings] = None) -> str:
    """Issue an access token for an account subject"""
    settings = settings or default_settings
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + timedelta(minutes=settings.token_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Optional[Settings] = None) -> str:
    """
    Verify an access token and return its subject.

    Raises:
        jwt.PyJWTError: If the token is invalid, expired or has no subject
    """
    settings = settings or default_settings
    claims = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    return claims["sub"]


class IdentityDependency:
    """
    FastAPI dependency resolving the caller's account subject.

    With ``required=False`` anonymous requests resolve to None instead of
    being rejected.
    """

    def __init__(self, required: bool = True):
        self.required = required

    async def __call__(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("Authorization")

        if not authorization:
            if self.required:
                raise HTTPException(status_code=401, detail="Authentication required")
            return None

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise HTTPException(status_code=401, detail="Bearer token required")

        try:
            return verify_token(token.strip())
        except jwt.PyJWTError as e:
            logger.warning(f"Rejected access token: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")


# Dependency instances
require_identity = IdentityDependency(required=True)
optional_identity = IdentityDependency(required=False)
