from typing import Dict

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.time_utils import utcnow
from storefront.db.models import UserSession

API = "/api/auth"


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_signup_success(self, client: AsyncClient):
        response = await client.post(f"{API}/signup", json={"email": "New@Example.com", "password": "secret1"})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["role"] == "user"
        assert body["token"]

    @pytest.mark.asyncio
    async def test_signup_duplicate_email(self, client: AsyncClient):
        payload = {"email": "dup@example.com", "password": "secret1"}
        await client.post(f"{API}/signup", json=payload)

        response = await client.post(f"{API}/signup", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"] == "A user with this email already exists"

    @pytest.mark.asyncio
    async def test_signup_short_password(self, client: AsyncClient):
        response = await client.post(f"{API}/signup", json={"email": "short@example.com", "password": "abc"})

        assert response.status_code == 400
        assert "Password must be at least 6 characters long" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_signup_invalid_email(self, client: AsyncClient):
        response = await client.post(f"{API}/signup", json={"email": "not-an-email", "password": "secret1"})

        assert response.status_code == 400
        assert "email" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_signin_success(self, client: AsyncClient):
        await client.post(f"{API}/signup", json={"email": "login@example.com", "password": "secret1"})

        response = await client.post(f"{API}/signin", json={"email": "login@example.com", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "login@example.com"

    @pytest.mark.asyncio
    async def test_signin_wrong_password(self, client: AsyncClient):
        await client.post(f"{API}/signup", json={"email": "login@example.com", "password": "secret1"})

        response = await client.post(f"{API}/signin", json={"email": "login@example.com", "password": "wrong!!"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_signin_unknown_email(self, client: AsyncClient):
        response = await client.post(f"{API}/signin", json={"email": "ghost@example.com", "password": "secret1"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_current_user(self, client: AsyncClient, user_headers: Dict[str, str]):
        response = await client.get(f"{API}/current-user", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "shopper@example.com"
        assert "password_hash" not in response.json()

    @pytest.mark.asyncio
    async def test_current_user_without_token(self, client: AsyncClient):
        response = await client.get(f"{API}/current-user")

        assert response.status_code == 401
        assert response.json()["detail"] == "No token provided"

    @pytest.mark.asyncio
    async def test_is_admin(self, client: AsyncClient, admin_headers: Dict[str, str], user_headers: Dict[str, str]):
        assert (await client.get(f"{API}/is-admin", headers=admin_headers)).json() == {"isAdmin": True}
        assert (await client.get(f"{API}/is-admin", headers=user_headers)).json() == {"isAdmin": False}
        assert (await client.get(f"{API}/is-admin")).json() == {"isAdmin": False}

        response = await client.get(f"{API}/is-admin", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 200
        assert response.json() == {"isAdmin": False}

    @pytest.mark.asyncio
    async def test_signout_revokes_token(self, client: AsyncClient, user_headers: Dict[str, str]):
        response = await client.post(f"{API}/signout", headers=user_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Successfully signed out"}

        response = await client.get(f"{API}/current-user", headers=user_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_signout_without_token(self, client: AsyncClient):
        response = await client.post(f"{API}/signout")

        assert response.status_code == 400
        assert response.json()["detail"] == "No token provided"

    @pytest.mark.asyncio
    async def test_expired_session_is_rejected(
        self, client: AsyncClient, db_session: AsyncSession, user_token: str, user_headers: Dict[str, str]
    ):
        await db_session.execute(
            update(UserSession).where(UserSession.token == user_token).values(expires_at=utcnow())
        )
        await db_session.commit()

        response = await client.get(f"{API}/current-user", headers=user_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"
