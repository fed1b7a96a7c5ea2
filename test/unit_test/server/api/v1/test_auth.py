from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from fauxdash.core.database import utc_now
from fauxdash.core.database.entities import PasswordResetToken, Setting
from fauxdash.core.database.repositories import PasswordResetTokenRepository
from fauxdash.server.security.passwords import verify_password
from fauxdash.server.services.settings_service import global_settings_cache

pytestmark = pytest.mark.asyncio

ADMIN_EMAIL = "admin@fauxdash.net"
ADMIN_PASSWORD = "Adm1n-Passw0rd"


async def _configure_smtp(session):
    session.add_all(
        [
            Setting(key="smtpHost", value="smtp.mock"),
            Setting(key="smtpFromEmail", value="noreply@fauxdash.net"),
        ]
    )
    await session.commit()
    global_settings_cache.invalidate()


class TestLogin:
    async def test_login_success_returns_user(self, client: AsyncClient, admin_user, login):
        response = await login(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == ADMIN_EMAIL
        assert data["is_admin"] is True
        assert "password_hash" not in data

    async def test_login_is_case_insensitive_on_email(self, client: AsyncClient, admin_user, login):
        response = await login(ADMIN_EMAIL.upper(), ADMIN_PASSWORD)
        assert response.status_code == 200

    async def test_wrong_password(self, client: AsyncClient, admin_user, login):
        response = await login(ADMIN_EMAIL, "wrong-password")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_unknown_email_gets_same_message(self, client: AsyncClient, admin_user, login):
        response = await login("nobody@fauxdash.net", ADMIN_PASSWORD)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_remember_days_out_of_range(self, client: AsyncClient, admin_user, login):
        response = await login(ADMIN_EMAIL, ADMIN_PASSWORD, remember_days=31)
        assert response.status_code == 422

    async def test_disabled_password_login(self, client: AsyncClient, session, admin_user, login):
        session.add(Setting(key="disablePasswordLogin", value="true"))
        await session.commit()

        response = await login(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert response.status_code == 403
        assert response.json()["detail"] == "Password login is disabled"

    async def test_rate_limited_after_five_attempts(self, client: AsyncClient, admin_user, login):
        for _ in range(5):
            response = await login(ADMIN_EMAIL, "wrong-password")
            assert response.status_code == 401

        response = await login(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.headers["X-RateLimit-Remaining"] == "0"


class TestSession:
    async def test_me_requires_session(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_me_after_login(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/v1/auth/me")
        assert response.status_code == 200
        assert response.json()["email"] == ADMIN_EMAIL

    async def test_logout_clears_session(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/v1/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Signed out"}

        response = await admin_client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_deleted_user_loses_session(self, admin_client: AsyncClient, session, admin_user):
        await session.delete(admin_user)
        await session.commit()

        response = await admin_client.get("/api/v1/auth/me")
        assert response.status_code == 401


class TestForgotPassword:
    async def test_smtp_not_configured(self, client: AsyncClient, admin_user):
        response = await client.post("/api/v1/auth/forgot-password", json={"email": ADMIN_EMAIL})
        assert response.status_code == 503

    async def test_sends_reset_link(self, client: AsyncClient, session, admin_user, outbox):
        await _configure_smtp(session)

        response = await client.post("/api/v1/auth/forgot-password", json={"email": ADMIN_EMAIL})
        assert response.status_code == 200
        assert response.json()["message"].startswith("If an account exists")

        assert len(outbox) == 1
        email = outbox[0]
        assert email.to == ADMIN_EMAIL
        assert email.subject == "Reset your Faux|Dash password"
        assert "/reset-password?token=" in email.text
        assert "Choose a new password" in email.html_body

        tokens = (await session.execute(select(PasswordResetToken))).scalars().all()
        assert len(tokens) == 1
        assert tokens[0].token in email.text
        assert len(tokens[0].token) == 64

    async def test_unknown_account_gets_generic_answer(self, client: AsyncClient, session, outbox):
        await _configure_smtp(session)

        response = await client.post("/api/v1/auth/forgot-password", json={"email": "ghost@fauxdash.net"})
        assert response.status_code == 200
        assert response.json()["message"].startswith("If an account exists")
        assert outbox == []

    async def test_rate_limited_after_three_requests(self, client: AsyncClient, session, outbox):
        await _configure_smtp(session)
        for _ in range(3):
            response = await client.post("/api/v1/auth/forgot-password", json={"email": "ghost@fauxdash.net"})
            assert response.status_code == 200

        response = await client.post("/api/v1/auth/forgot-password", json={"email": "ghost@fauxdash.net"})
        assert response.status_code == 429


class TestResetPassword:
    async def test_check_token(self, client: AsyncClient, session, admin_user):
        token = await PasswordResetTokenRepository(session).issue(admin_user.id)

        response = await client.get("/api/v1/auth/reset-password", params={"token": token.token})
        assert response.json() == {"valid": True}

        response = await client.get("/api/v1/auth/reset-password", params={"token": "nope"})
        assert response.json() == {"valid": False}

    async def test_reset_consumes_token(self, client: AsyncClient, session, admin_user, login):
        token = await PasswordResetTokenRepository(session).issue(admin_user.id)

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": token.token, "new_password": "brand-new-secret"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset. You can now sign in."
        assert verify_password("brand-new-secret", admin_user.password_hash)

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": token.token, "new_password": "another-secret"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired reset token"

        response = await login(ADMIN_EMAIL, "brand-new-secret")
        assert response.status_code == 200

    async def test_expired_token_rejected(self, client: AsyncClient, session, admin_user):
        token = await PasswordResetTokenRepository(session).issue(admin_user.id)
        token.expires_at = utc_now() - timedelta(minutes=1)
        session.add(token)
        await session.commit()

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": token.token, "new_password": "brand-new-secret"},
        )
        assert response.status_code == 400

    async def test_short_password_rejected(self, client: AsyncClient, session, admin_user):
        token = await PasswordResetTokenRepository(session).issue(admin_user.id)

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": token.token, "new_password": "short"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Password must be at least 8 characters"


class TestSmtpStatus:
    async def test_not_configured(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/smtp-status")
        assert response.status_code == 200
        assert response.json() == {"configured": False}

    async def test_configured(self, client: AsyncClient, session):
        await _configure_smtp(session)

        response = await client.get("/api/v1/auth/smtp-status")
        assert response.json() == {"configured": True}
