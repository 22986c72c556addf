"""Tests for session generation, drill completion and star payout."""

from httpx import AsyncClient


async def _generate(client: AsyncClient, child_id: str, duration: str | None = "15") -> dict:
    body = {"childId": child_id}
    if duration is not None:
        body["durationMinutes"] = duration
    response = await client.post("/api/v1/sessions", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["session"]


async def _child_stars(client: AsyncClient, child_id: str) -> tuple[int, int]:
    child = (await client.get(f"/api/v1/children/{child_id}")).json()["data"]["child"]
    return child["availableStars"], child["totalStars"]


class TestGenerateSession:
    async def test_duration_buckets(self, authed_client: AsyncClient, child: dict):
        for duration, expected in (("10", 2), ("15", 3), ("20", 4)):
            session = await _generate(authed_client, child["id"], duration)
            assert len(session["drills"]) == expected

    async def test_default_bucket_is_fifteen(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"], None)
        assert len(session["drills"]) == 3

    async def test_session_shape(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"])
        assert session["childId"] == child["id"]
        assert session["status"] == "IN_PROGRESS"
        assert session["totalStarsEarned"] == 0
        assert session["completedAt"] is None
        assert [d["order"] for d in session["drills"]] == [1, 2, 3]
        assert len({d["drill"]["id"] for d in session["drills"]}) == 3
        for session_drill in session["drills"]:
            assert session_drill["completed"] is False
            assert session_drill["starsEarned"] == 0
            assert set(session_drill["drill"]) == {"id", "title", "skillCategory", "durationMinutes"}

    async def test_drills_match_age_band(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"], "20")
        for session_drill in session["drills"]:
            drill = (await authed_client.get(f"/api/v1/drills/{session_drill['drill']['id']}")).json()["data"]
            assert drill["drill"]["ageBand"] == "AGE_4_6"

    async def test_small_catalogue_uses_every_drill(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/v1/children", json={"name": "Kim", "ageBand": "AGE_8_10"})
        session = await _generate(authed_client, response.json()["data"]["child"]["id"], "20")
        assert len(session["drills"]) == 3

    async def test_no_drills_for_age_band(self, authed_client: AsyncClient, child: dict, db_session):
        from sqlalchemy import delete

        from jgp.db.models import Drill

        await db_session.execute(delete(Drill).where(Drill.age_band == "AGE_4_6"))
        await db_session.commit()

        response = await authed_client.post("/api/v1/sessions", json={"childId": child["id"]})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_DRILLS_AVAILABLE"

    async def test_invalid_bucket(self, authed_client: AsyncClient, child: dict):
        response = await authed_client.post("/api/v1/sessions", json={"childId": child["id"], "durationMinutes": "30"})
        assert response.status_code == 400

    async def test_unknown_child(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/v1/sessions", json={"childId": "missing"})
        assert response.status_code == 404


class TestCompletion:
    async def test_full_scenario_pays_six_stars(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"], "15")
        running = 0
        for session_drill in session["drills"]:
            response = await authed_client.patch(
                f"/api/v1/sessions/{session['id']}/drills/{session_drill['id']}", json={"starsEarned": 3}
            )
            assert response.status_code == 200
            running += 2
            updated = response.json()["data"]["session"]
            assert updated["totalStarsEarned"] == running
            done = next(d for d in updated["drills"] if d["id"] == session_drill["id"])
            assert done["completed"] is True
            assert done["starsEarned"] == 2
            assert done["verifiedAt"] is not None

        assert await _child_stars(authed_client, child["id"]) == (0, 0)

        response = await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")
        assert response.status_code == 200
        closed = response.json()["data"]["session"]
        assert closed["status"] == "COMPLETED"
        assert closed["completedAt"] is not None
        assert await _child_stars(authed_client, child["id"]) == (6, 6)

    async def test_complete_twice_does_not_double_credit(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"], "10")
        for session_drill in session["drills"]:
            await authed_client.patch(f"/api/v1/sessions/{session['id']}/drills/{session_drill['id']}")
        await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")

        again = await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "SESSION_CLOSED"
        assert await _child_stars(authed_client, child["id"]) == (4, 4)

    async def test_partial_session_pays_what_was_earned(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"], "20")
        first = session["drills"][0]
        await authed_client.patch(f"/api/v1/sessions/{session['id']}/drills/{first['id']}")
        await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")
        assert await _child_stars(authed_client, child["id"]) == (2, 2)

    async def test_drill_already_completed(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"])
        url = f"/api/v1/sessions/{session['id']}/drills/{session['drills'][0]['id']}"
        await authed_client.patch(url)
        response = await authed_client.patch(url)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_COMPLETED"

    async def test_drill_on_closed_session(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"])
        await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")
        response = await authed_client.patch(
            f"/api/v1/sessions/{session['id']}/drills/{session['drills'][0]['id']}"
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SESSION_CLOSED"

    async def test_drill_from_another_session(self, authed_client: AsyncClient, child: dict):
        first = await _generate(authed_client, child["id"])
        second = await _generate(authed_client, child["id"])
        response = await authed_client.patch(
            f"/api/v1/sessions/{first['id']}/drills/{second['drills'][0]['id']}"
        )
        assert response.status_code == 404


class TestListAndOwnership:
    async def test_list_newest_first_with_filters(self, authed_client: AsyncClient, child: dict):
        older = await _generate(authed_client, child["id"])
        newer = await _generate(authed_client, child["id"])
        await authed_client.post(f"/api/v1/sessions/{older['id']}/complete")

        data = (await authed_client.get("/api/v1/sessions")).json()["data"]
        assert [s["id"] for s in data["sessions"]] == [newer["id"], older["id"]]
        assert data["total"] == 2

        completed = (await authed_client.get("/api/v1/sessions", params={"status": "COMPLETED"})).json()["data"]
        assert [s["id"] for s in completed["sessions"]] == [older["id"]]

        by_child = (await authed_client.get("/api/v1/sessions", params={"childId": child["id"], "limit": 1})).json()
        assert len(by_child["data"]["sessions"]) == 1
        assert by_child["data"]["total"] == 2

    async def test_get_session(self, authed_client: AsyncClient, child: dict):
        session = await _generate(authed_client, child["id"])
        response = await authed_client.get(f"/api/v1/sessions/{session['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["session"]["id"] == session["id"]

    async def test_other_parent_cannot_touch_session(self, authed_client: AsyncClient, child: dict, register_parent):
        session = await _generate(authed_client, child["id"])
        other = await register_parent("b@x.com")
        headers = {"Authorization": f"Bearer {other['access_token']}"}

        assert (await authed_client.get(f"/api/v1/sessions/{session['id']}", headers=headers)).status_code == 404
        complete = await authed_client.post(f"/api/v1/sessions/{session['id']}/complete", headers=headers)
        assert complete.status_code == 404
        generate = await authed_client.post("/api/v1/sessions", json={"childId": child["id"]}, headers=headers)
        assert generate.status_code == 404
        listing = await authed_client.get("/api/v1/sessions", headers=headers)
        assert listing.json()["data"]["total"] == 0
