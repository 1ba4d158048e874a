"""
Authentication Routes

Endpoints:
- POST /auth/register - Create an account (seeds starter subjects)
- POST /auth/login - Exchange email + password for a session token
- POST /auth/logout - Revoke the presented session
- POST /auth/refresh - Rotate the presented session
- GET /auth/me - Current user profile with study totals
- PATCH /auth/me - Update display name, avatar, preferences
- GET /auth/users - Active users, for the account switcher

Auth Flow:
1. Client POSTs email + password to /auth/login
2. Backend verifies the bcrypt hash and opens a user_sessions row
3. Backend returns a JWT naming that row (in cookie and response body)
4. Client sends the JWT as Authorization: Bearer on later requests
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, Response, status
from sqlalchemy import func, select

from questlog.api.deps import (
    CurrentLogin,
    CurrentUser,
    DbSession,
    client_address,
    hash_password,
    open_login_session,
    verify_password,
)
from questlog.config import get_settings
from questlog.db.models import LoginSession, StudySession, Subject, User
from questlog.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from questlog.schemas.user import PublicUser, UserProfile, UserRead, UserUpdate
from questlog.services.leveling import level_from_xp
from questlog.services.subjects import seed_default_subjects

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _set_auth_cookie(response: Response, token: str, max_age: int) -> None:
    # For cross-domain deployments, use samesite="none" + secure=True
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
        max_age=max_age,
    )


def _clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
    )


async def _issue_token(
    db: DbSession, user: User, request: Request, response: Response
) -> TokenResponse:
    token, login = await open_login_session(
        db,
        user,
        user_agent=request.headers.get("User-Agent", ""),
        ip_address=client_address(request),
    )
    expires_in = settings.jwt_expire_minutes * 60
    _set_auth_cookie(response, token, expires_in)
    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
        expires_at=login.expires_at,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: DbSession) -> RegisterResponse:
    """Create an account and seed the starter subjects."""
    email = data.email.lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    user = User(
        email=email,
        display_name=data.display_name,
        password_hash=hash_password(data.password),
        preferences={"dark": False},
    )
    db.add(user)
    await db.flush()  # Get user.id

    await seed_default_subjects(db, user.id)
    await db.commit()

    logger.info("Registered user %s", user.id)
    return RegisterResponse(user_id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """
    Exchange email + password for a session JWT.

    Unknown email and wrong password both return 401 with the same message.
    """
    result = await db.execute(
        select(User).where(User.email == data.email.lower(), User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("Failed login for %s", data.email.lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login_at = datetime.now(timezone.utc)
    token = await _issue_token(db, user, request, response)
    await db.commit()
    return token


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(login: CurrentLogin, response: Response, db: DbSession) -> None:
    """Revoke the presented session and clear the cookie."""
    login.is_active = False
    await db.commit()
    _clear_auth_cookie(response)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    login: CurrentLogin,
    current_user: CurrentUser,
    request: Request,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Swap the presented session for a fresh one; the old token stops working."""
    login.is_active = False
    token = await _issue_token(db, current_user, request, response)
    await db.commit()
    return token


@router.get("/me", response_model=UserProfile)
async def get_me(current_user: CurrentUser, db: DbSession) -> UserProfile:
    """Get the current user's profile with totals across subjects."""
    totals = (
        await db.execute(
            select(
                func.coalesce(func.sum(Subject.total_minutes), 0).label("minutes"),
                func.coalesce(func.sum(Subject.total_xp), 0).label("xp"),
                func.coalesce(func.max(Subject.current_streak), 0).label("current_streak"),
                func.coalesce(func.max(Subject.longest_streak), 0).label("longest_streak"),
                func.max(Subject.last_study_date).label("last_study_date"),
            ).where(Subject.user_id == current_user.id)
        )
    ).one()
    session_count = await db.scalar(
        select(func.count()).select_from(StudySession).where(StudySession.user_id == current_user.id)
    )

    return UserProfile(
        **UserRead.model_validate(current_user).model_dump(),
        total_minutes=totals.minutes,
        total_sessions=session_count or 0,
        total_xp=totals.xp,
        current_streak=totals.current_streak,
        longest_streak=totals.longest_streak,
        last_study_date=totals.last_study_date,
        level=level_from_xp(totals.xp),
    )


@router.patch("/me", response_model=UserRead)
async def update_me(data: UserUpdate, current_user: CurrentUser, db: DbSession) -> UserRead:
    """Update profile fields. Preferences are merged, not replaced."""
    updates = data.model_dump(exclude_unset=True)
    preferences = updates.pop("preferences", None)
    for key, value in updates.items():
        setattr(current_user, key, value)
    if preferences is not None:
        current_user.preferences = {**(current_user.preferences or {}), **preferences}
    await db.commit()
    await db.refresh(current_user)
    return UserRead.model_validate(current_user)


@router.get("/users", response_model=list[PublicUser])
async def list_users(current_user: CurrentUser, db: DbSession) -> list[PublicUser]:
    """Active accounts, for switching between users on a shared device."""
    result = await db.execute(
        select(User).where(User.is_active.is_(True)).order_by(User.display_name)
    )
    return [PublicUser.model_validate(u) for u in result.scalars()]
