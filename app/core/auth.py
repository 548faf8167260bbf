# app/core/auth.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

import jwt
from jwt import InvalidTokenError
from fastapi import Header

from app.core.config import settings
from app.core.errors import Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    subject_id: str
    name: str | None = None
    email: str | None = None


def create_session_token(
    subject_id: str,
    name: str | None = None,
    email: str | None = None,
    ttl: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (ttl if ttl is not None else timedelta(hours=settings.session_ttl_hours))
    payload = {"sub": subject_id, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
    if name:
        payload["name"] = name
    if email:
        payload["email"] = email
    return jwt.encode(
        payload, settings.session_secret.get_secret_value(), algorithm=settings.session_alg
    )


def decode_session_token(token: str) -> AuthenticatedIdentity:
    try:
        data = jwt.decode(
            token,
            settings.session_secret.get_secret_value(),
            algorithms=[settings.session_alg],
            options={"require": ["sub", "exp"]},
        )
    except InvalidTokenError as e:
        logger.info("Rejected session token: %s", e)
        raise Unauthorized() from e

    sub = data.get("sub")
    if not isinstance(sub, str) or not sub:
        raise Unauthorized()
    return AuthenticatedIdentity(subject_id=sub, name=data.get("name"), email=data.get("email"))


async def get_identity(authorization: str | None = Header(default=None)) -> AuthenticatedIdentity:
    """Dependencia FastAPI: identidad autenticada a partir de 'Authorization: Bearer ...'."""
    if not authorization:
        raise Unauthorized()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized()
    return decode_session_token(token.strip())
