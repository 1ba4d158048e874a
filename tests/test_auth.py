"""Tests for registration, login sessions and the user profile."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select

from questlog.api.deps import create_access_token
from questlog.db.models import LoginSession

from conftest import PASSWORD


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_register_seeds_default_subjects(client, auth_headers):
    response = await client.get("/subjects/", headers=auth_headers)
    assert response.status_code == 200
    ids = [s["config"]["id"] for s in response.json()]
    assert sorted(ids) == ["japanese", "math", "programming"]
    assert all(s["total_minutes"] == 0 and s["last_study_date"] is None for s in response.json())


async def test_register_duplicate_email_is_conflict(client, auth_headers):
    response = await client.post(
        "/auth/register",
        json={"email": "ADA@questlog.dev", "password": PASSWORD, "display_name": "Other"},
    )
    assert response.status_code == 409


async def test_register_validates_input(client):
    response = await client.post(
        "/auth/register",
        json={"email": "not-an-email", "password": "short", "display_name": ""},
    )
    assert response.status_code == 422


async def test_login_wrong_password(client, auth_headers):
    response = await client.post(
        "/auth/login", json={"email": "ada@questlog.dev", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


async def test_login_unknown_email(client):
    response = await client.post(
        "/auth/login", json={"email": "nobody@questlog.dev", "password": PASSWORD}
    )
    assert response.status_code == 401


async def test_login_sets_cookie_and_returns_user(client):
    await client.post(
        "/auth/register",
        json={"email": "ada@questlog.dev", "password": PASSWORD, "display_name": "Ada"},
    )
    response = await client.post("/auth/login", json={"email": "ada@questlog.dev", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["display_name"] == "Ada"
    assert "access_token" in response.cookies

    # Cookie alone authenticates
    me = await client.get("/auth/me")
    assert me.status_code == 200


async def test_requests_without_token_are_rejected(client):
    response = await client.get("/subjects/")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_garbage_token_is_rejected(client):
    response = await client.get("/subjects/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_logout_revokes_token(client, auth_headers):
    response = await client.post("/auth/logout", headers=auth_headers)
    assert response.status_code == 204

    response = await client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 401


async def test_refresh_rotates_token(client, auth_headers):
    response = await client.post("/auth/refresh", headers=auth_headers)
    assert response.status_code == 200
    client.cookies.clear()
    new_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    assert (await client.get("/auth/me", headers=auth_headers)).status_code == 401
    assert (await client.get("/auth/me", headers=new_headers)).status_code == 200


async def test_expired_login_session_is_deactivated(client, auth_headers, db):
    user_id = UUID((await client.get("/auth/me", headers=auth_headers)).json()["id"])
    login = LoginSession(
        user_id=user_id,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    db.add(login)
    await db.commit()
    login_id = login.id

    # JWT itself still valid; only the stored session has expired
    token = create_access_token(user_id, login_id, datetime.now(timezone.utc) + timedelta(hours=1))
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

    db.expire_all()
    result = await db.execute(select(LoginSession.is_active).where(LoginSession.id == login_id))
    assert result.scalar_one() is False


async def test_me_reports_totals_and_level(client, auth_headers):
    for day, quest in [("2024-01-10", "hard"), ("2024-01-11", "hard"), ("2024-01-11", "medium")]:
        response = await client.post(
            "/sessions/",
            headers=auth_headers,
            json={"subject_id": "math", "duration": 60, "date": day, "quest_type": quest},
        )
        assert response.status_code == 201

    profile = (await client.get("/auth/me", headers=auth_headers)).json()
    assert profile["total_minutes"] == 180
    assert profile["total_sessions"] == 3
    assert profile["total_xp"] == 125
    assert profile["current_streak"] == 2
    assert profile["longest_streak"] == 2
    assert profile["last_study_date"] == "2024-01-11"
    assert profile["level"] == {"level": 2, "current_xp": 25, "xp_for_next_level": 282}


async def test_update_me_merges_preferences(client, auth_headers):
    response = await client.patch(
        "/auth/me",
        headers=auth_headers,
        json={"display_name": "Ada L.", "preferences": {"sound": False}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["display_name"] == "Ada L."
    assert body["preferences"] == {"dark": False, "sound": False}


async def test_list_users(client, other_headers):
    response = await client.get("/auth/users", headers=other_headers)
    assert response.status_code == 200
    names = [u["display_name"] for u in response.json()]
    assert names == ["Ada", "Grace"]
    assert "email" not in response.json()[0]
