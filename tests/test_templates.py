"""Tests for user template routes."""

TEMPLATE = {
    "name": "Language sprint",
    "description": "Two languages, one month",
    "category": "language",
    "subjects": [
        {"id": "japanese", "name": "Japanese (template)"},
        {
            "id": "korean",
            "name": "Korean",
            "emoji": "🇰🇷",
            "pip_amount": 10,
            "quest_types": [{"id": "drill", "name": "Drill", "duration": 10, "xp": 5}],
        },
    ],
    "default_goals": [
        {"title": "30 hours", "target": 1800, "start_date": "2024-05-01"},
        {"title": "Daily habit", "type": "sessions", "target": 30},
    ],
}


async def test_upsert_get_list_delete(client, auth_headers):
    response = await client.put("/templates/sprint", headers=auth_headers, json=TEMPLATE)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "sprint"
    assert body["version"] == "1.0.0"
    assert [s["id"] for s in body["subjects"]] == ["japanese", "korean"]

    response = await client.put(
        "/templates/sprint", headers=auth_headers, json={**TEMPLATE, "name": "Renamed", "version": "1.1.0"}
    )
    assert response.json()["name"] == "Renamed"

    listed = (await client.get("/templates/", headers=auth_headers)).json()
    assert [(t["id"], t["version"]) for t in listed] == [("sprint", "1.1.0")]
    assert (await client.get("/templates/", headers=auth_headers, params={"category": "math"})).json() == []

    assert (await client.delete("/templates/sprint", headers=auth_headers)).status_code == 204
    assert (await client.get("/templates/sprint", headers=auth_headers)).status_code == 404


async def test_apply_creates_missing_subjects_only(client, auth_headers):
    await client.post(
        "/sessions/",
        headers=auth_headers,
        json={"subject_id": "japanese", "duration": 30, "date": "2024-01-10", "quest_type": "medium"},
    )
    await client.put("/templates/sprint", headers=auth_headers, json=TEMPLATE)

    response = await client.post(
        "/templates/sprint/apply", headers=auth_headers, params={"start_date": "2024-06-01"}
    )
    assert response.status_code == 200
    applied = response.json()
    assert applied["created"] == ["korean"]
    assert applied["skipped"] == ["japanese"]
    assert len(applied["goals"]) == 2

    japanese = (await client.get("/subjects/japanese", headers=auth_headers)).json()
    assert japanese["config"]["name"] == "Japanese"
    assert japanese["total_minutes"] == 30

    korean = (await client.get("/subjects/korean", headers=auth_headers)).json()
    assert korean["total_minutes"] == 0
    assert [q["id"] for q in korean["config"]["quest_types"]] == ["drill"]
    # Empty achievement ladder falls back to the defaults
    assert korean["config"]["achievements"][0]["streak_required"] == 0

    goals = {g["title"]: g for g in (await client.get("/goals/", headers=auth_headers)).json()}
    assert goals["30 hours"]["start_date"] == "2024-05-01"
    assert goals["Daily habit"]["start_date"] == "2024-06-01"
    assert goals["Daily habit"]["type"] == "sessions"


async def test_apply_twice_creates_nothing_new(client, auth_headers):
    await client.put("/templates/sprint", headers=auth_headers, json={**TEMPLATE, "default_goals": []})
    await client.post("/templates/sprint/apply", headers=auth_headers)
    applied = (await client.post("/templates/sprint/apply", headers=auth_headers)).json()
    assert applied["created"] == []
    assert sorted(applied["skipped"]) == ["japanese", "korean"]


async def test_templates_are_scoped_per_user(client, auth_headers, other_headers):
    await client.put("/templates/sprint", headers=auth_headers, json=TEMPLATE)
    assert (await client.get("/templates/sprint", headers=other_headers)).status_code == 404
    assert (await client.post("/templates/sprint/apply", headers=other_headers)).status_code == 404
