"""
JWT authentication for the FastAPI API server.

Single admin password from folio_config.json (site.password). With no
password configured, every request is treated as the admin.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api import config as api_config


# --- JWT TOKEN MANAGEMENT ---

_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=api_config.JWT_EXPIRY_HOURS))
    to_encode['exp'] = expire
    to_encode['iat'] = datetime.now(timezone.utc)
    return jwt.encode(to_encode, api_config.JWT_SECRET, algorithm=api_config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode a JWT access token. Returns None if invalid."""
    try:
        return jwt.decode(token, api_config.JWT_SECRET, algorithms=[api_config.JWT_ALGORITHM])
    except (jwt.InvalidTokenError, jwt.ExpiredSignatureError):
        return None


# --- USER INFO FROM TOKEN ---

class CurrentUser:
    """Represents the current authenticated user."""
    __slots__ = ('user_id', 'role')

    def __init__(self, user_id=None, role='admin'):
        self.user_id = user_id
        self.role = role

    @property
    def is_admin(self):
        return self.role == 'admin'


# --- DEPENDENCY INJECTION ---

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[CurrentUser]:
    """Extract user from JWT token if present, without requiring auth."""
    if credentials is None:
        # No password mode: everyone is the admin
        if not api_config.is_password_required():
            return CurrentUser(user_id='_anonymous')
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        return None
    return CurrentUser(user_id=payload.get('sub'), role=payload.get('role', 'admin'))


async def require_admin(
    user: Optional[CurrentUser] = Depends(get_optional_user),
) -> CurrentUser:
    """Require an authenticated admin. Raises 401/403 otherwise."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
