"""
Brand authentication routes.
Uses a single brand password from environment; no password means dev mode.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .settings import get_settings

router = APIRouter(prefix="/api/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)

# Simple in-memory token store (in production use Redis or DB)
_tokens: dict[str, datetime] = {}

TOKEN_EXPIRY_HOURS = 24


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    token: str
    expires_at: str


@dataclass(frozen=True)
class RequestAuth:
    """Session/auth answer for the current request."""
    authenticated: bool

    def is_authenticated(self) -> bool:
        return self.authenticated


def _hash_password(password: str) -> str:
    """Hash password with SHA256."""
    return hashlib.sha256(password.encode()).hexdigest()


def _generate_token() -> str:
    """Generate a secure random token."""
    return secrets.token_urlsafe(32)


def _cleanup_expired_tokens():
    """Remove expired tokens from memory."""
    now = datetime.utcnow()
    expired = [t for t, exp in _tokens.items() if exp < now]
    for t in expired:
        del _tokens[t]


def _dev_mode() -> bool:
    return not get_settings().admin_password


def _token_valid(credentials: Optional[HTTPAuthorizationCredentials]) -> bool:
    if not credentials:
        return False
    _cleanup_expired_tokens()
    return credentials.credentials in _tokens


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """
    Login with the brand password.
    Returns a bearer token valid for 24 hours.
    """
    admin_password = get_settings().admin_password

    if admin_password and not secrets.compare_digest(
        _hash_password(request.password), _hash_password(admin_password)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password"
        )

    _cleanup_expired_tokens()

    token = _generate_token()
    expires_at = datetime.utcnow() + timedelta(hours=TOKEN_EXPIRY_HOURS)
    _tokens[token] = expires_at

    return LoginResponse(
        token=token,
        expires_at=expires_at.isoformat()
    )


@router.post("/logout")
async def logout(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Invalidate current token."""
    if credentials and credentials.credentials in _tokens:
        del _tokens[credentials.credentials]
    return {"status": "logged out"}


@router.get("/me")
async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Check if current token is valid."""
    if not _token_valid(credentials):
        raise HTTPException(status_code=401, detail="Not authenticated")

    return {
        "authenticated": True,
        "expires_at": _tokens[credentials.credentials].isoformat()
    }


def get_request_auth(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> RequestAuth:
    """Dependency that reports whether the caller is signed in (always true in dev mode)."""
    return RequestAuth(authenticated=_dev_mode() or _token_valid(credentials))


def require_auth(credentials: HTTPAuthorizationCredentials = Depends(security)) -> bool:
    """Dependency that requires authentication."""
    if _dev_mode():
        return True

    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    if not _token_valid(credentials):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return True
