"""Tests for pip counter routes."""


async def test_set_and_list_pips(client, auth_headers):
    for subject_id, day, count in [("japanese", "2024-01-10", 2), ("math", "2024-01-10", 1), ("math", "2024-01-12", 3)]:
        response = await client.put(
            "/pips/", headers=auth_headers, json={"subject_id": subject_id, "date": day, "count": count}
        )
        assert response.status_code == 200

    pips = (await client.get("/pips/", headers=auth_headers)).json()
    assert pips == {
        "2024-01-10": {"japanese": 2, "math": 1},
        "2024-01-12": {"math": 3},
    }

    ranged = (await client.get("/pips/", headers=auth_headers, params={"date_from": "2024-01-11"})).json()
    assert ranged == {"2024-01-12": {"math": 3}}


async def test_setting_pips_does_not_change_progress(client, auth_headers):
    await client.put("/pips/", headers=auth_headers, json={"subject_id": "math", "date": "2024-01-10", "count": 3})
    subject = (await client.get("/subjects/math", headers=auth_headers)).json()
    assert subject["total_minutes"] == 0


async def test_reset_pip_count_allows_more_quick_adds(client, auth_headers):
    body = {"subject_id": "math", "date": "2024-01-10"}
    for _ in range(3):
        await client.post("/sessions/pip", headers=auth_headers, json=body)
    assert (await client.post("/sessions/pip", headers=auth_headers, json=body)).status_code == 409

    await client.put("/pips/", headers=auth_headers, json={**body, "count": 0})
    assert (await client.post("/sessions/pip", headers=auth_headers, json=body)).status_code == 201


async def test_pip_validation(client, auth_headers):
    response = await client.put(
        "/pips/", headers=auth_headers, json={"subject_id": "math", "date": "2024-01-10", "count": -1}
    )
    assert response.status_code == 422

    response = await client.put(
        "/pips/", headers=auth_headers, json={"subject_id": "nope", "date": "2024-01-10", "count": 1}
    )
    assert response.status_code == 404
