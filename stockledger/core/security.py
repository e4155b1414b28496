from __future__ import annotations

import hmac
from typing import Optional

import jwt
from fastapi import HTTPException, status

from stockledger.config import get_settings


def _load_api_keys() -> set[str]:
    settings = get_settings()
    keys = set()
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys.add(value)
    return keys


def _get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _matches_api_key(api_key: str, keys: set[str]) -> bool:
    return any(hmac.compare_digest(api_key, key) for key in keys)


def _decode_jwt(token: str) -> dict:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )

    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except jwt.PyJWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        ) from exc


def authenticate_request(
    api_key: Optional[str],
    authorization: Optional[str],
) -> dict:
    """Resolve the caller identity or raise 401.

    An API key from ``API_KEYS`` wins; otherwise a bearer JWT signed with
    ``JWT_SECRET`` is required. Nothing configured means nobody gets in.
    """
    if api_key:
        if _matches_api_key(api_key.strip(), _load_api_keys()):
            return {"auth_type": "api_key"}
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )

    token = _get_bearer_token(authorization)
    if token:
        payload = _decode_jwt(token)
        return {"auth_type": "jwt", "subject": payload.get("sub"), "payload": payload}

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
    )
