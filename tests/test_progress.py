"""Tests for progress statistics and streak endpoints."""

from httpx import AsyncClient


async def _play(client: AsyncClient, child_id: str, drills_done: int, duration: str = "15") -> dict:
    response = await client.post("/api/v1/sessions", json={"childId": child_id, "durationMinutes": duration})
    session = response.json()["data"]["session"]
    for session_drill in session["drills"][:drills_done]:
        await client.patch(f"/api/v1/sessions/{session['id']}/drills/{session_drill['id']}")
    return session


class TestStats:
    async def test_empty_stats(self, authed_client: AsyncClient, child: dict):
        response = await authed_client.get(f"/api/v1/progress/{child['id']}")
        assert response.status_code == 200
        stats = response.json()["data"]["stats"]
        assert stats == {
            "childId": child["id"],
            "name": "Sam",
            "totalStars": 0,
            "availableStars": 0,
            "totalSessions": 0,
            "completedSessions": 0,
            "averageStarsPerSession": 0.0,
            "skillProgress": {},
        }

    async def test_stats_after_sessions(self, authed_client: AsyncClient, child: dict):
        first = await _play(authed_client, child["id"], 3)
        await authed_client.post(f"/api/v1/sessions/{first['id']}/complete")
        second = await _play(authed_client, child["id"], 1, "10")
        await authed_client.post(f"/api/v1/sessions/{second['id']}/complete")
        await _play(authed_client, child["id"], 2)

        stats = (await authed_client.get(f"/api/v1/progress/{child['id']}")).json()["data"]["stats"]
        assert stats["totalStars"] == 8
        assert stats["availableStars"] == 8
        assert stats["totalSessions"] == 3
        assert stats["completedSessions"] == 2
        assert stats["averageStarsPerSession"] == 4.0
        assert sum(stats["skillProgress"].values()) == 8

    async def test_skill_progress_by_category(self, authed_client: AsyncClient, child: dict):
        session = await _play(authed_client, child["id"], 3)
        await authed_client.post(f"/api/v1/sessions/{session['id']}/complete")

        expected: dict[str, int] = {}
        for session_drill in session["drills"]:
            category = session_drill["drill"]["skillCategory"]
            expected[category] = expected.get(category, 0) + 2

        stats = (await authed_client.get(f"/api/v1/progress/{child['id']}")).json()["data"]["stats"]
        assert stats["skillProgress"] == expected

    async def test_other_parent_gets_not_found(self, authed_client: AsyncClient, child: dict, register_parent):
        other = await register_parent("b@x.com")
        response = await authed_client.get(
            f"/api/v1/progress/{child['id']}", headers={"Authorization": f"Bearer {other['access_token']}"}
        )
        assert response.status_code == 404


class TestStreakEndpoints:
    async def test_initial_streak(self, authed_client: AsyncClient, child: dict):
        response = await authed_client.get(f"/api/v1/progress/{child['id']}/streak")
        assert response.status_code == 200
        streak = response.json()["data"]["streak"]
        assert streak["childId"] == child["id"]
        assert streak["currentStreak"] == 0
        assert streak["longestStreak"] == 0
        assert streak["weeklySessionCount"] == 0
        assert streak["weeklyGoal"] == 3
        assert streak["goalMet"] is False
        assert streak["lastSessionDate"] is None

    async def test_default_goal_needs_three_sessions(self, authed_client: AsyncClient, child: dict):
        url = f"/api/v1/progress/{child['id']}/streak"
        for expected_count, expected_streak in ((1, 0), (2, 0), (3, 1)):
            streak = (await authed_client.post(url)).json()["data"]["streak"]
            assert streak["weeklySessionCount"] == expected_count
            assert streak["currentStreak"] == expected_streak
        assert streak["goalMet"] is True
        assert streak["longestStreak"] == 1

        fetched = (await authed_client.get(url)).json()["data"]["streak"]
        assert fetched["weeklySessionCount"] == 3

    async def test_goal_follows_settings(self, authed_client: AsyncClient, child: dict):
        response = await authed_client.patch("/api/v1/settings", json={"streakGoal": "TWO_PER_WEEK"})
        assert response.status_code == 200

        url = f"/api/v1/progress/{child['id']}/streak"
        await authed_client.post(url)
        streak = (await authed_client.post(url)).json()["data"]["streak"]
        assert streak["weeklyGoal"] == 2
        assert streak["currentStreak"] == 1

    async def test_unknown_child(self, authed_client: AsyncClient):
        assert (await authed_client.post("/api/v1/progress/missing/streak")).status_code == 404
        assert (await authed_client.get("/api/v1/progress/missing/streak")).status_code == 404

    async def test_streak_writes_lock_the_child(self, authed_client: AsyncClient, child: dict, monkeypatch):
        from jgp.children.service import get_owned_child
        from jgp.progress import streak_service

        locks: list[bool] = []

        async def recording(*args, **kwargs):
            locks.append(kwargs.get("for_update", False))
            return await get_owned_child(*args, **kwargs)

        monkeypatch.setattr(streak_service, "get_owned_child", recording)
        url = f"/api/v1/progress/{child['id']}/streak"
        await authed_client.get(url)
        await authed_client.post(url)
        assert locks == [True, True]
