"""Login, registration and user administration over HTTP."""

from __future__ import annotations

from httpx import AsyncClient


class TestLogin:
    async def test_admin_bootstrapped_and_can_login(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "admin"
        assert data["user"]["is_admin"] is True
        assert data["expires_in"] == 24 * 60 * 60

    async def test_wrong_password(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"username": "admin", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
        assert response.status_code == 401

    async def test_me(self, client: AsyncClient, user_headers):
        response = await client.get("/api/auth/me", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["username"] == "warden"
        assert response.json()["is_admin"] is False

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code in (401, 403)

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401


class TestRegistration:
    async def test_register_provisions_store(self, client: AsyncClient, admin_headers, settings):
        response = await client.post(
            "/api/auth/register",
            json={"username": "warden", "password": "secret1"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["username"] == "warden"
        assert data["database_name"] == f"user_{data['user']['id']}"
        assert (settings.data_path / f"{data['database_name']}.db").exists()

    async def test_duplicate_username(self, client: AsyncClient, admin_headers, user_headers):
        response = await client.post(
            "/api/auth/register",
            json={"username": "warden", "password": "secret1"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Username already exists"

    async def test_short_password(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/auth/register",
            json={"username": "warden", "password": "abc"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_non_admin_forbidden(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/auth/register",
            json={"username": "intruder", "password": "secret1"},
            headers=user_headers,
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"


class TestUserAdministration:
    async def test_list_users_with_database_names(self, client: AsyncClient, admin_headers, user_headers):
        response = await client.get("/api/auth/users", headers=admin_headers)
        assert response.status_code == 200
        users = {u["username"]: u for u in response.json()["users"]}
        assert set(users) == {"admin", "warden"}
        assert users["warden"]["database_name"] == f"user_{users['warden']['id']}"

    async def test_update_user_password(self, client: AsyncClient, admin_headers, user_headers):
        users = (await client.get("/api/auth/users", headers=admin_headers)).json()["users"]
        warden = next(u for u in users if u["username"] == "warden")

        response = await client.put(
            f"/api/auth/users/{warden['id']}",
            json={"username": "warden2", "password": "newsecret"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["username"] == "warden2"

        login = await client.post("/api/auth/login", json={"username": "warden2", "password": "newsecret"})
        assert login.status_code == 200

    async def test_update_missing_user(self, client: AsyncClient, admin_headers):
        response = await client.put("/api/auth/users/999", json={"username": "nobody"}, headers=admin_headers)
        assert response.status_code == 404

    async def test_delete_user(self, client: AsyncClient, admin_headers, user_headers):
        users = (await client.get("/api/auth/users", headers=admin_headers)).json()["users"]
        warden = next(u for u in users if u["username"] == "warden")

        response = await client.delete(f"/api/auth/users/{warden['id']}", headers=admin_headers)
        assert response.status_code == 200

        # The deleted user's token no longer resolves.
        assert (await client.get("/api/players", headers=user_headers)).status_code == 401

    async def test_admin_cannot_be_deleted(self, client: AsyncClient, admin_headers):
        me = (await client.get("/api/auth/me", headers=admin_headers)).json()
        response = await client.delete(f"/api/auth/users/{me['id']}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete admin user"

    async def test_new_user_never_reuses_deleted_id(self, client: AsyncClient, admin_headers, user_headers):
        created = await client.post("/api/players", json={"name": "Hidden Blade"}, headers=user_headers)
        assert created.status_code == 201

        users = (await client.get("/api/auth/users", headers=admin_headers)).json()["users"]
        warden = next(u for u in users if u["username"] == "warden")
        assert (await client.delete(f"/api/auth/users/{warden['id']}", headers=admin_headers)).status_code == 200

        response = await client.post(
            "/api/auth/register",
            json={"username": "scout", "password": "secret1"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        scout = response.json()
        assert scout["user"]["id"] != warden["id"]
        assert scout["database_name"] != warden["database_name"]

        # The old token must not resolve to the newcomer.
        assert (await client.get("/api/auth/me", headers=user_headers)).status_code == 401

        login = await client.post("/api/auth/login", json={"username": "scout", "password": "secret1"})
        scout_headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        players = (await client.get("/api/players", headers=scout_headers)).json()["players"]
        assert players == []
