"""
Authentication router.

Handles admin login and auth status.
"""

import hmac
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from api.auth import create_access_token, CurrentUser, get_optional_user
from api.config import SITE_CONFIG, is_password_required
from api.models.auth import LoginRequest, LoginResponse, AuthStatusResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """Authenticate with the admin password and receive a JWT token."""
    password = SITE_CONFIG.get('password', '')
    if not password:
        # No password required, hand out a token for no-auth mode
        token = create_access_token({'sub': '_anonymous', 'role': 'admin'})
        return LoginResponse(access_token=token)

    if not hmac.compare_digest(body.password.encode(), password.encode()):
        raise HTTPException(status_code=401, detail="Invalid password")

    token = create_access_token({'sub': 'admin', 'role': 'admin'})
    return LoginResponse(access_token=token)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(user: Optional[CurrentUser] = Depends(get_optional_user)):
    """Report whether the caller is logged in."""
    return AuthStatusResponse(
        authenticated=user is not None,
        password_required=is_password_required(),
    )
