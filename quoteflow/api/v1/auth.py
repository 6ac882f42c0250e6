#quoteflow/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from quoteflow.core.auth_deps import get_current_principal
from quoteflow.core.security import issue_access_token
from quoteflow.db.session import get_db
from quoteflow.policies.rbac import Principal
from quoteflow.schemas.auth import LoginRequest, TokenResponse
from quoteflow.services.auth_service import authenticate

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    principal = authenticate(db, req.username, req.password)
    if not principal:
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    return TokenResponse(access_token=issue_access_token(principal))


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal)):
    return {
        "userId": principal.user_id,
        "role": principal.role.value,
        "displayName": principal.display_name,
    }
