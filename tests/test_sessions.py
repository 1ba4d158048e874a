"""Tests for recording sessions and quick pips through the API."""

import pytest


def session_body(day: str, quest_type: str = "medium", duration: int = 30, subject_id: str = "japanese") -> dict:
    return {
        "subject_id": subject_id,
        "duration": duration,
        "date": day,
        "notes": "",
        "quest_type": quest_type,
    }


async def test_record_session_updates_progress(client, auth_headers):
    response = await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-10"))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["session"]["xp_earned"] == 25
    assert body["session"]["id"].startswith("session-")

    subject = body["subject"]
    assert subject["total_minutes"] == 30
    assert subject["current_streak"] == 1
    assert subject["longest_streak"] == 1
    assert subject["achievement_level"] == 0
    assert subject["last_study_date"] == "2024-01-10"
    assert subject["total_xp"] == 25

    stored = (await client.get("/subjects/japanese", headers=auth_headers)).json()
    assert stored == subject


async def test_streak_across_days_and_reset(client, auth_headers):
    for day in ["2024-01-10", "2024-01-11", "2024-01-12"]:
        response = await client.post("/sessions/", headers=auth_headers, json=session_body(day))
    subject = response.json()["subject"]
    assert subject["current_streak"] == 3
    assert subject["achievement_level"] == 1

    response = await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-20"))
    subject = response.json()["subject"]
    assert subject["current_streak"] == 1
    assert subject["longest_streak"] == 3
    # Level is recomputed from the reset streak
    assert subject["achievement_level"] == 0


async def test_achievement_event_on_unlock(client, auth_headers):
    for day in ["2024-01-10", "2024-01-11"]:
        await client.post("/sessions/", headers=auth_headers, json=session_body(day))
    response = await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-12"))
    events = response.json()["events"]
    assert [e["kind"] for e in events] == ["achievement_unlocked"]
    assert events[0]["achievement"]["id"] == "on_fire"


async def test_milestone_event(client, auth_headers):
    response = await client.post(
        "/sessions/", headers=auth_headers, json=session_body("2024-01-10", quest_type="hard", duration=75)
    )
    events = response.json()["events"]
    assert [(e["kind"], e["minutes"]) for e in events] == [("milestone_reached", 60)]


async def test_unknown_quest_type_earns_no_xp(client, auth_headers):
    response = await client.post(
        "/sessions/", headers=auth_headers, json=session_body("2024-01-10", quest_type="reading")
    )
    assert response.status_code == 201
    assert response.json()["session"]["xp_earned"] == 0
    assert response.json()["subject"]["total_xp"] == 0
    assert response.json()["subject"]["total_minutes"] == 30


async def test_record_session_unknown_subject(client, auth_headers):
    response = await client.post(
        "/sessions/", headers=auth_headers, json=session_body("2024-01-10", subject_id="nope")
    )
    assert response.status_code == 404


@pytest.mark.parametrize(
    "override",
    [{"duration": 0}, {"duration": -5}, {"date": "2024-13-40"}, {"date": "yesterday"}, {"quest_type": ""}],
)
async def test_record_session_validation(client, auth_headers, override):
    body = {**session_body("2024-01-10"), **override}
    response = await client.post("/sessions/", headers=auth_headers, json=body)
    assert response.status_code == 422


async def test_xp_earned_is_kept_when_quest_types_change(client, auth_headers):
    response = await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-10"))
    session_id = response.json()["session"]["id"]

    await client.patch(
        "/subjects/japanese",
        headers=auth_headers,
        json={"quest_types": [{"id": "medium", "name": "Medium", "duration": 30, "xp": 999}]},
    )

    stored = (await client.get(f"/sessions/{session_id}", headers=auth_headers)).json()
    assert stored["xp_earned"] == 25


async def test_quick_pip(client, auth_headers):
    response = await client.post(
        "/sessions/pip", headers=auth_headers, json={"subject_id": "japanese", "date": "2024-01-10"}
    )
    assert response.status_code == 201
    body = response.json()
    # japanese pip_amount is 15; lowest-effort quest is "easy"
    assert body["session"]["duration"] == 15
    assert body["session"]["quest_type"] == "easy"
    assert body["session"]["notes"] == "Quick add"
    assert body["session"]["xp_earned"] == 10
    assert body["subject"]["total_minutes"] == 15
    assert body["pip_count"] == 1

    pips = (await client.get("/pips/", headers=auth_headers)).json()
    assert pips == {"2024-01-10": {"japanese": 1}}


async def test_quick_pip_daily_cap(client, auth_headers):
    body = {"subject_id": "japanese", "date": "2024-01-10"}
    for expected in (1, 2, 3):
        response = await client.post("/sessions/pip", headers=auth_headers, json=body)
        assert response.json()["pip_count"] == expected

    response = await client.post("/sessions/pip", headers=auth_headers, json=body)
    assert response.status_code == 409

    # Another day is fine
    response = await client.post(
        "/sessions/pip", headers=auth_headers, json={**body, "date": "2024-01-11"}
    )
    assert response.status_code == 201
    assert response.json()["subject"]["total_minutes"] == 60


async def test_list_sessions_filters_and_order(client, auth_headers):
    await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-10"))
    await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-12"))
    await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-11", subject_id="math"))

    sessions = (await client.get("/sessions/", headers=auth_headers)).json()
    assert [s["date"] for s in sessions] == ["2024-01-12", "2024-01-11", "2024-01-10"]

    japanese = (await client.get("/sessions/", headers=auth_headers, params={"subject_id": "japanese"})).json()
    assert {s["subject_id"] for s in japanese} == {"japanese"}

    ranged = (
        await client.get(
            "/sessions/", headers=auth_headers, params={"date_from": "2024-01-11", "date_to": "2024-01-11"}
        )
    ).json()
    assert [s["subject_id"] for s in ranged] == ["math"]

    limited = (await client.get("/sessions/", headers=auth_headers, params={"limit": 1})).json()
    assert len(limited) == 1

    response = await client.get("/sessions/", headers=auth_headers, params={"limit": 5000})
    assert response.status_code == 422


async def test_sessions_are_scoped_per_user(client, auth_headers, other_headers):
    response = await client.post("/sessions/", headers=auth_headers, json=session_body("2024-01-10"))
    session_id = response.json()["session"]["id"]

    assert (await client.get(f"/sessions/{session_id}", headers=other_headers)).status_code == 404
    assert (await client.get("/sessions/", headers=other_headers)).json() == []
