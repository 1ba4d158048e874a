"""Tests for subject CRUD routes."""

import pytest

NEW_SUBJECT = {
    "id": "guitar",
    "name": "Guitar",
    "emoji": "🎸",
    "color": "#AA33FF",
    "pip_amount": 10,
}


async def test_create_subject_with_defaults(client, auth_headers):
    response = await client.post("/subjects/", headers=auth_headers, json=NEW_SUBJECT)
    assert response.status_code == 201
    body = response.json()
    assert body["config"]["id"] == "guitar"
    assert [q["id"] for q in body["config"]["quest_types"]] == ["easy", "medium", "hard"]
    assert body["config"]["achievements"][0]["streak_required"] == 0
    assert body["total_minutes"] == 0
    assert body["current_streak"] == 0
    assert body["achievement_level"] == 0


async def test_create_subject_without_id_slugifies_name(client, auth_headers):
    response = await client.post("/subjects/", headers=auth_headers, json={"name": "Music Theory!"})
    assert response.status_code == 201
    assert response.json()["config"]["id"] == "music-theory"

    # Name collision gets a suffix rather than a conflict
    response = await client.post("/subjects/", headers=auth_headers, json={"name": "Music theory"})
    assert response.status_code == 201
    assert response.json()["config"]["id"].startswith("music-theory-")


async def test_create_duplicate_id_conflicts(client, auth_headers):
    response = await client.post("/subjects/", headers=auth_headers, json={"id": "math", "name": "Math 2"})
    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Bad color", "color": "red"},
        {"name": "Bad pip", "pip_amount": 0},
        {"id": "has space", "name": "Bad id"},
        {"name": ""},
    ],
)
async def test_create_subject_validation(client, auth_headers, payload):
    response = await client.post("/subjects/", headers=auth_headers, json=payload)
    assert response.status_code == 422


async def test_get_subject_and_404(client, auth_headers):
    response = await client.get("/subjects/japanese", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["config"]["name"] == "Japanese"

    response = await client.get("/subjects/nope", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Subject not found"


async def test_subjects_are_scoped_per_user(client, auth_headers, other_headers):
    await client.post("/subjects/", headers=auth_headers, json=NEW_SUBJECT)

    assert (await client.get("/subjects/guitar", headers=other_headers)).status_code == 404
    # Same id is free for another user
    response = await client.post("/subjects/", headers=other_headers, json=NEW_SUBJECT)
    assert response.status_code == 201


async def test_patch_updates_config_only(client, auth_headers):
    await client.post(
        "/sessions/",
        headers=auth_headers,
        json={"subject_id": "math", "duration": 30, "date": "2024-03-01", "quest_type": "medium"},
    )

    response = await client.patch(
        "/subjects/math",
        headers=auth_headers,
        json={
            "name": "Maths",
            "pip_amount": 7,
            "achievements": [
                {"id": "b", "name": "Week", "streak_required": 7},
                {"id": "a", "name": "Start", "streak_required": 0},
            ],
            "total_minutes": 9999,
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["config"]["name"] == "Maths"
    assert body["config"]["pip_amount"] == 7
    assert [t["id"] for t in body["config"]["achievements"]] == ["a", "b"]
    assert body["total_minutes"] == 30
    assert body["total_xp"] == 25
    # Untouched fields survive
    assert body["config"]["emoji"] == "🧮"


async def test_patch_achievements_rederives_level(client, auth_headers):
    for day in ["2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04"]:
        await client.post(
            "/sessions/",
            headers=auth_headers,
            json={"subject_id": "math", "duration": 15, "date": day, "quest_type": "easy"},
        )
    before = (await client.get("/subjects/math", headers=auth_headers)).json()
    assert (before["current_streak"], before["achievement_level"]) == (4, 1)

    response = await client.patch(
        "/subjects/math",
        headers=auth_headers,
        json={"achievements": [{"id": "only", "name": "Only", "streak_required": 0}]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["achievement_level"] == 0
    assert body["achievement_level"] < len(body["config"]["achievements"])

    response = await client.patch(
        "/subjects/math",
        headers=auth_headers,
        json={
            "achievements": [
                {"id": "t0", "name": "Start", "streak_required": 0},
                {"id": "t2", "name": "Two", "streak_required": 2},
                {"id": "t4", "name": "Four", "streak_required": 4},
                {"id": "t9", "name": "Nine", "streak_required": 9},
            ]
        },
    )
    assert response.json()["achievement_level"] == 2

    # Other edits leave the stored level alone
    response = await client.patch("/subjects/math", headers=auth_headers, json={"name": "Maths"})
    assert response.json()["achievement_level"] == 2
    assert response.json()["current_streak"] == 4


async def test_delete_subject_cascades(client, auth_headers):
    await client.post(
        "/sessions/",
        headers=auth_headers,
        json={"subject_id": "math", "duration": 30, "date": "2024-03-01", "quest_type": "medium"},
    )
    await client.post("/sessions/pip", headers=auth_headers, json={"subject_id": "math", "date": "2024-03-01"})
    await client.post(
        "/goals/",
        headers=auth_headers,
        json={"title": "Calc", "subject_id": "math", "target": 60, "start_date": "2024-03-01"},
    )

    response = await client.delete("/subjects/math", headers=auth_headers)
    assert response.status_code == 204

    assert (await client.get("/subjects/math", headers=auth_headers)).status_code == 404
    assert (await client.get("/sessions/", headers=auth_headers, params={"subject_id": "math"})).json() == []
    assert (await client.get("/goals/", headers=auth_headers)).json() == []
    assert (await client.get("/pips/", headers=auth_headers)).json() == {}
