from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Header, HTTPException, status

from resume_enricher.core.config import settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def credentials_match(username: str, password: str) -> bool:
    if not settings.auth_username or not settings.auth_password:
        return False
    user_ok = hmac.compare_digest(username.encode("utf-8"), settings.auth_username.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), settings.auth_password.encode("utf-8"))
    return user_ok and password_ok


def create_access_token(username: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])


def require_bearer_token(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    token = None
    if authorization:
        parts = authorization.split(" ")
        if len(parts) > 1 and parts[0].lower() == "bearer":
            token = parts[1].strip()

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: No token provided",
        )

    try:
        return decode_access_token(token)
    except jwt.InvalidTokenError as exc:
        logger.info("jwt_verification_failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Invalid token",
        ) from exc
