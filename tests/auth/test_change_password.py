"""Tests for password change and sign-out-everywhere."""

from httpx import AsyncClient

from tests.conftest import PARENT_EMAIL, PARENT_PASSWORD


class TestChangePassword:
    async def test_change_password_success(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PARENT_PASSWORD, "newPassword": "NewPass99"},
        )
        assert response.status_code == 200

        old = await authed_client.post("/api/v1/auth/login", json={"email": PARENT_EMAIL, "password": PARENT_PASSWORD})
        assert old.status_code == 401
        new = await authed_client.post("/api/v1/auth/login", json={"email": PARENT_EMAIL, "password": "NewPass99"})
        assert new.status_code == 200

    async def test_change_password_revokes_refresh_tokens(self, authed_client: AsyncClient, registered_parent: dict):
        await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PARENT_PASSWORD, "newPassword": "NewPass99"},
        )
        response = await authed_client.post(
            "/api/v1/auth/refresh", json={"refreshToken": registered_parent["refresh_token"]}
        )
        assert response.status_code == 401

    async def test_wrong_current_password(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": "Wrong1234", "newPassword": "NewPass99"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INCORRECT_PASSWORD"

    async def test_weak_new_password(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PARENT_PASSWORD, "newPassword": "weak"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PARENT_PASSWORD, "newPassword": "NewPass99"},
        )
        assert response.status_code == 401


class TestLogoutAll:
    async def test_logout_all_revokes_every_session(self, authed_client: AsyncClient, registered_parent: dict):
        second = await authed_client.post(
            "/api/v1/auth/login", json={"email": PARENT_EMAIL, "password": PARENT_PASSWORD}
        )
        second_refresh = second.json()["data"]["tokens"]["refreshToken"]

        response = await authed_client.post("/api/v1/auth/logout-all")
        assert response.status_code == 200
        assert response.json()["data"]["revokedCount"] == 2

        for token in (registered_parent["refresh_token"], second_refresh):
            refresh = await authed_client.post("/api/v1/auth/refresh", json={"refreshToken": token})
            assert refresh.status_code == 401
