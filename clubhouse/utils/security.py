"""
Security utilities: session resolution, admin checks and rate limiting
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import secrets
import time
from collections import defaultdict

from clubhouse.core.config import settings
from clubhouse.schemas.session import SessionContext
from clubhouse.utils.responses import forbidden_error, unauthorized_error

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer(auto_error=False)

def get_reservation_store(request: Request):
    return request.app.state.reservation_store

def get_member_store(request: Request):
    return request.app.state.member_store

def get_session_registry(request: Request):
    return request.app.state.session_registry

def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    """Session token from the bearer header, falling back to the session cookie"""
    if credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)

def get_optional_session(
    token: Optional[str] = Depends(get_session_token),
    registry=Depends(get_session_registry)
) -> Optional[SessionContext]:
    return registry.get(token)

def require_session(session: Optional[SessionContext] = Depends(get_optional_session)) -> SessionContext:
    """Member session required"""
    if session is None:
        unauthorized_error("Introduce tu código de acceso")
    return session

def is_admin_token(token: Optional[str]) -> bool:
    return bool(token) and secrets.compare_digest(token, settings.ADMIN_TOKEN)

def require_admin(
    token: Optional[str] = Depends(get_session_token),
    session: Optional[SessionContext] = Depends(get_optional_session)
) -> Optional[SessionContext]:
    """Admin member session, or the back-office admin token"""
    if is_admin_token(token):
        return session
    if session is None:
        unauthorized_error("Introduce tu código de acceso")
    if not session.is_admin:
        forbidden_error("Solo para administradores")
    return session

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    # Check limit
    if len(rate_limiter[client_ip]) >= limit:
        return False

    # Add current request
    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"
