#quoteflow/core/auth_deps.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from quoteflow.core.security import decode_token
from quoteflow.models.enums import UserRole
from quoteflow.policies.rbac import Principal, is_authorized_admin, require_action

bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - JWT is valid
    - sub (user id) and role are present
    - role is a valid UserRole
    """
    if creds is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    user_id = payload.get("sub")
    role = payload.get("role")
    display_name = payload.get("display_name") or "Unknown"

    if not role or not user_id:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    try:
        role_enum = UserRole(role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid role in token.")

    principal = Principal(
        user_id=str(user_id),
        role=role_enum,
        display_name=str(display_name),
    )

    # downstream handlers / logging
    request.state.principal = principal

    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not is_authorized_admin(principal):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return principal


def require(action: str):
    """Dependency factory: principal must be allowed `action` (403 otherwise)."""

    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        try:
            require_action(principal, action)
        except PermissionError as exc:
            raise HTTPException(status_code=403, detail=str(exc))
        return principal

    return _dep
