"""
FastAPI Dependencies for Authentication, Authorization and Rate Limiting.

Key patterns:
1. get_current_user: Extracts and validates JWT + login session, returns User
2. User-scoped queries: All lookups filter by user_id at the SQL level
3. No global "current user" state - always pass user explicitly

Security model:
- JWT stored in HttpOnly cookie or sent as Authorization: Bearer
- Every JWT carries a jti naming a row in user_sessions, so logout and
  refresh can revoke a token before it expires
- Passwords are bcrypt hashes (passlib)
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.hash import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.config import get_settings
from questlog.db.models import LoginSession, User
from questlog.db.session import get_db
from questlog.services.kv_store import KeyValueStore, as_utc

logger = logging.getLogger(__name__)
settings = get_settings()

RATE_LIMIT_NAMESPACE = "rate_limit"


# =============================================================================
# PASSWORDS
# =============================================================================


def hash_password(password: str) -> str:
    return bcrypt.using(rounds=settings.password_hash_rounds).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # Not a bcrypt hash (e.g. a placeholder on an imported account)
        return False


# =============================================================================
# JWT UTILITIES
# =============================================================================


@dataclass(frozen=True)
class TokenClaims:
    """The parts of a decoded access token we rely on."""

    user_id: UUID
    session_id: UUID


def create_access_token(user_id: UUID, session_id: UUID, expires_at: datetime) -> str:
    """
    Create a JWT access token for a login session.

    Token payload contains:
    - sub: user_id as string (standard JWT subject claim)
    - jti: the user_sessions row id
    - exp: expiration timestamp

    We do NOT store sensitive data in the JWT (email, name, etc.).
    """
    payload = {
        "sub": str(user_id),
        "jti": str(session_id),
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims | None:
    """
    Decode and validate a JWT access token.

    Returns claims if valid, None if invalid/expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        user_id_str = payload.get("sub")
        session_id_str = payload.get("jti")
        if user_id_str is None or session_id_str is None:
            return None
        return TokenClaims(user_id=UUID(user_id_str), session_id=UUID(session_id_str))
    except (JWTError, ValueError):
        return None


async def open_login_session(
    db: AsyncSession,
    user: User,
    *,
    user_agent: str = "",
    ip_address: str = "unknown",
) -> tuple[str, LoginSession]:
    """Create a user_sessions row and the JWT that refers to it."""
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    login = LoginSession(
        user_id=user.id,
        expires_at=expires_at,
        user_agent=user_agent[:512],
        ip_address=ip_address[:64],
    )
    db.add(login)
    await db.flush()
    return create_access_token(user.id, login.id, expires_at), login


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Extract JWT token from request.

    Supports two methods (in order of preference):
    1. Authorization header: 'Bearer <token>' (API clients)
    2. HttpOnly cookie named 'access_token' (browser)
    """
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    if access_token:
        return access_token

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_login(
    token: Annotated[str, Depends(get_token_from_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LoginSession:
    """
    Validate JWT and return the active login session it names.

    Raises 401 if:
    - Token is missing, invalid, or expired
    - The login session was revoked or has expired
    - The user no longer exists or is deactivated
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_access_token(token)
    if claims is None:
        raise credentials_exception

    result = await db.execute(
        select(LoginSession).where(
            LoginSession.id == claims.session_id,
            LoginSession.user_id == claims.user_id,
        )
    )
    login = result.scalar_one_or_none()
    if login is None or not login.is_active:
        raise credentials_exception

    now = datetime.now(timezone.utc)
    if as_utc(login.expires_at) < now:
        login.is_active = False
        # Persist the deactivation even though this request fails
        await db.commit()
        logger.info("Login session %s expired", login.id)
        raise credentials_exception

    login.last_used_at = now
    return login


async def get_current_user(
    login: Annotated[LoginSession, Depends(get_current_login)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Return the current authenticated user.

    This is the primary authentication dependency. Use it in route handlers:

        @router.get("/subjects")
        async def list_subjects(user: CurrentUser):
            ...
    """
    user = await db.get(User, login.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# Type aliases for dependency injection
CurrentLogin = Annotated[LoginSession, Depends(get_current_login)]
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


# =============================================================================
# RATE LIMITING
# =============================================================================


def client_address(request: Request) -> str:
    """Best-effort client address: proxy headers first, then the socket peer."""
    forwarded = request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(request: Request, db: DbSession) -> None:
    """
    Fixed-window request counter per client address.

    Counters live in the KV store and expire with their window.
    """
    window = settings.rate_limit_window_seconds
    now = time.time()
    window_start = int(now // window) * window
    address = client_address(request)

    store = KeyValueStore(db, RATE_LIMIT_NAMESPACE)
    count = await store.increment(f"{address}:{window_start}", ttl_seconds=window)
    if count > settings.rate_limit_requests:
        retry_after = max(1, int(window_start + window - now))
        logger.warning("Rate limit exceeded for %s (%d requests)", address, count)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )
    await db.commit()


RateLimited = Depends(enforce_rate_limit)


# =============================================================================
# QUERY HELPERS (enforce user scoping at query level)
# =============================================================================


async def get_user_resource_or_404(
    db: AsyncSession,
    model: type,
    resource_id: UUID | str,
    user_id: UUID,
):
    """
    Generic helper to fetch a user-owned resource by ID.

    Usage:
        goal = await get_user_resource_or_404(db, Goal, goal_id, current_user.id)

    This enforces user scoping at the SQL level (WHERE user_id = ...).
    Returns 404 for both missing and not-owned resources.
    """
    result = await db.execute(
        select(model).where(model.id == resource_id, model.user_id == user_id)
    )
    resource = result.scalar_one_or_none()

    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{model.__name__} not found",
        )

    return resource
