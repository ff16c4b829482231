"""
Tests for authentication endpoints, including two-factor login
"""

import pyotp
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User

from conftest import TEST_PASSWORD


def _signup(**overrides):
    data = {
        "email": "new.player@example.com",
        "password": "goal-keeper-9",
        "confirm_password": "goal-keeper-9",
        "full_name": "New Player",
        "user_type": "player",
    }
    data.update(overrides)
    return data


async def _login(client: AsyncClient, email: str, password: str = TEST_PASSWORD):
    return await client.post(
        "/api/v1/auth/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )


@pytest.mark.integration
class TestSignup:
    """Signup gating and account creation"""

    @pytest.mark.asyncio
    async def test_signup_success(self, client: AsyncClient, db_session):
        response = await client.post("/api/v1/auth/signup", json=_signup())
        assert response.status_code == 201
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"]["email"] == "new.player@example.com"
        assert data["user"]["role"] == "player"

        profile = (await db_session.execute(select(Profile))).scalar_one()
        assert profile.full_name == "New Player"
        assert profile.onboarding_completed is False

    @pytest.mark.asyncio
    async def test_owner_signup_gets_owner_role(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/signup",
            json=_signup(email="owner@example.com", user_type="owner")
        )
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "owner"

    @pytest.mark.asyncio
    async def test_short_password_creates_nothing(self, client: AsyncClient, db_session):
        response = await client.post(
            "/api/v1/auth/signup",
            json=_signup(password="short", confirm_password="short")
        )
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["fields"]["password"] == "Password must be at least 8 characters"

        count = (await db_session.execute(select(func.count(User.id)))).scalar()
        assert count == 0

    @pytest.mark.asyncio
    async def test_password_mismatch(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/signup", json=_signup(confirm_password="different-9"))
        assert response.status_code == 422
        assert "confirm_password" in response.json()["error"]["details"]["fields"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, test_player: User):
        response = await client.post("/api/v1/auth/signup", json=_signup(email=test_player.email))
        assert response.status_code == 422
        assert "email" in response.json()["error"]["details"]["fields"]


@pytest.mark.integration
class TestLogin:
    """Password login, tokens and logout"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_player: User):
        response = await _login(client, test_player.email)
        assert response.status_code == 200
        data = response.json()
        assert data["mfa_required"] is False
        assert data["access_token"]
        assert data["user"]["id"] == str(test_player.id)

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, client: AsyncClient, test_player: User):
        wrong_password = await _login(client, test_player.email, "WrongPassword123!")
        unknown = await _login(client, "nobody@example.com")

        assert wrong_password.status_code == unknown.status_code == 401
        assert wrong_password.json()["error"]["message"] == "Invalid email or password"
        assert unknown.json()["error"]["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, test_player: User, player_headers):
        response = await client.get("/api/v1/auth/me", headers=player_headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_player.email

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client: AsyncClient, player_headers):
        response = await client.post("/api/v1/auth/logout", headers=player_headers)
        assert response.status_code == 200

        response = await client.get("/api/v1/auth/me", headers=player_headers)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_rotates_tokens(self, client: AsyncClient, test_player: User):
        tokens = (await _login(client, test_player.email)).json()

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["access_token"]

        reused = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert reused.status_code == 401

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, client: AsyncClient, test_player: User):
        tokens = (await _login(client, test_player.email)).json()
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_change_password(self, client: AsyncClient, test_player: User, player_headers):
        response = await client.post(
            "/api/v1/auth/change-password",
            json={
                "current_password": TEST_PASSWORD,
                "new_password": "brand-new-pass-1",
                "confirm_password": "brand-new-pass-1",
            },
            headers=player_headers
        )
        assert response.status_code == 200

        assert (await _login(client, test_player.email)).status_code == 401
        assert (await _login(client, test_player.email, "brand-new-pass-1")).status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_checks_current(self, client: AsyncClient, player_headers):
        response = await client.post(
            "/api/v1/auth/change-password",
            json={
                "current_password": "not-my-password",
                "new_password": "brand-new-pass-1",
                "confirm_password": "brand-new-pass-1",
            },
            headers=player_headers
        )
        assert response.status_code == 422
        assert "current_password" in response.json()["error"]["details"]["fields"]


@pytest.mark.integration
class TestTwoFactor:
    """TOTP enrolment and the two-step login"""

    async def _enable(self, client: AsyncClient, headers) -> tuple:
        setup = await client.post("/api/v1/auth/2fa/setup", headers=headers)
        assert setup.status_code == 200
        secret = setup.json()["secret"]
        assert setup.json()["qr_code"].startswith("data:image/png;base64,")

        verify = await client.post(
            "/api/v1/auth/2fa/verify-setup",
            json={"code": pyotp.TOTP(secret).now()},
            headers=headers
        )
        assert verify.status_code == 200
        return secret, verify.json()["backup_codes"]

    @pytest.mark.asyncio
    async def test_enable_returns_backup_codes(self, client: AsyncClient, player_headers):
        _, backup_codes = await self._enable(client, player_headers)
        assert len(backup_codes) == 10
        assert all(len(code) == 9 and code[4] == "-" for code in backup_codes)

        me = await client.get("/api/v1/auth/me", headers=player_headers)
        assert me.json()["two_factor_enabled"] is True

    @pytest.mark.asyncio
    async def test_wrong_setup_code(self, client: AsyncClient, player_headers):
        await client.post("/api/v1/auth/2fa/setup", headers=player_headers)
        response = await client.post(
            "/api/v1/auth/2fa/verify-setup",
            json={"code": "000000"},
            headers=player_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login_requires_second_factor(self, client: AsyncClient, test_player: User, player_headers):
        secret, _ = await self._enable(client, player_headers)

        login = await _login(client, test_player.email)
        assert login.status_code == 200
        data = login.json()
        assert data["mfa_required"] is True
        assert data["access_token"] is None

        response = await client.post(
            "/api/v1/auth/mfa/verify",
            json={"challenge_token": data["challenge_token"], "code": pyotp.TOTP(secret).now()}
        )
        assert response.status_code == 200
        assert response.json()["access_token"]

    @pytest.mark.asyncio
    async def test_backup_code_works_once(self, client: AsyncClient, test_player: User, player_headers):
        _, backup_codes = await self._enable(client, player_headers)

        challenge = (await _login(client, test_player.email)).json()["challenge_token"]
        first = await client.post(
            "/api/v1/auth/mfa/verify",
            json={"challenge_token": challenge, "code": backup_codes[0]}
        )
        assert first.status_code == 200

        challenge = (await _login(client, test_player.email)).json()["challenge_token"]
        second = await client.post(
            "/api/v1/auth/mfa/verify",
            json={"challenge_token": challenge, "code": backup_codes[0]}
        )
        assert second.status_code == 401

    @pytest.mark.asyncio
    async def test_challenge_cannot_be_replayed(self, client: AsyncClient, test_player: User, player_headers):
        secret, _ = await self._enable(client, player_headers)
        challenge = (await _login(client, test_player.email)).json()["challenge_token"]

        code = pyotp.TOTP(secret).now()
        first = await client.post("/api/v1/auth/mfa/verify", json={"challenge_token": challenge, "code": code})
        second = await client.post("/api/v1/auth/mfa/verify", json={"challenge_token": challenge, "code": code})
        assert first.status_code == 200
        assert second.status_code == 401

    @pytest.mark.asyncio
    async def test_disable_needs_password(self, client: AsyncClient, player_headers):
        await self._enable(client, player_headers)

        wrong = await client.post("/api/v1/auth/2fa/disable", json={"password": "nope"}, headers=player_headers)
        assert wrong.status_code == 422

        response = await client.post(
            "/api/v1/auth/2fa/disable",
            json={"password": TEST_PASSWORD},
            headers=player_headers
        )
        assert response.status_code == 200
        assert response.json()["enabled"] is False
