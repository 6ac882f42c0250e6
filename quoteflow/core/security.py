# quoteflow/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from quoteflow.core.config import get_settings

if TYPE_CHECKING:
    from quoteflow.policies.rbac import Principal

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TYPE_ACCESS = "access"


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    return pwd_context.verify(raw, hashed)


def issue_access_token(principal: "Principal", expires_minutes: Optional[int] = None) -> str:
    """
    Bearer token for an authenticated user: sub = user id, plus role / display name.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.jwt_access_token_minutes)
    payload: Dict[str, Any] = {
        "sub": principal.user_id,
        "typ": TOKEN_TYPE_ACCESS,
        "role": principal.role.value,
        "display_name": principal.display_name,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """Raises jose.JWTError on a bad signature, expiry or wrong token type."""
    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("typ") != TOKEN_TYPE_ACCESS:
        raise JWTError("Not an access token.")
    return payload
