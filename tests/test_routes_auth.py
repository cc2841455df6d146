"""
Integration tests for the account pages.
"""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from realty.models.user import User
from realty.repositories.user import UserRepository
from tests.conftest import CSRF_TOKEN, DEFAULT_PASSWORD, UserFactory, sign_in


def register_data(**overrides) -> dict:
    data = {
        "name": "Ana",
        "email": "ana@example.com",
        "password": "secret1",
        "repeat_password": "secret1",
        "_csrf": CSRF_TOKEN,
    }
    data.update(overrides)
    return data


class TestRegister:
    """Test account registration."""

    async def test_register_sends_confirmation(
        self, client: AsyncClient, user_repository: UserRepository, mailer
    ):
        response = await client.post("/auth/register", data=register_data())

        assert response.status_code == 200
        assert "confirmation email" in response.text

        user = await user_repository.get_by_email("ana@example.com")
        assert user.confirmed is False
        assert len(mailer.sent) == 1
        to_email, subject, body = mailer.sent[0]
        assert to_email == "ana@example.com"
        assert f"/auth/confirm/{user.token}" in body

    async def test_register_duplicate_email(self, client: AsyncClient, owner: User, mailer):
        response = await client.post("/auth/register", data=register_data(email="owner@example.com"))

        assert response.status_code == 200
        assert "This email is already registered" in response.text
        assert mailer.sent == []

    async def test_register_password_mismatch(self, client: AsyncClient, mailer):
        response = await client.post("/auth/register", data=register_data(repeat_password="other1"))

        assert "Passwords do not match" in response.text
        assert mailer.sent == []

    async def test_register_requires_csrf_token(self, client: AsyncClient):
        data = register_data()
        del data["_csrf"]

        response = await client.post("/auth/register", data=data)

        assert response.status_code == 403

    async def test_confirm_link(self, client: AsyncClient, db_session: AsyncSession, user_repository: UserRepository):
        user = await UserFactory.create_user(
            user_repository, email="new@example.com", confirmed=False, token="confirm-me"
        )

        response = await client.get("/auth/confirm/confirm-me")

        assert response.status_code == 200
        assert "Account confirmed" in response.text
        await db_session.refresh(user)
        assert user.confirmed is True
        assert user.token is None

    async def test_confirm_unknown_token(self, client: AsyncClient):
        response = await client.get("/auth/confirm/unknown")

        assert "Account not confirmed" in response.text


class TestLogin:
    """Test sign-in and sign-out."""

    async def test_login_sets_session_cookie(self, client: AsyncClient, owner: User):
        response = await client.post("/auth/login", data={
            "email": "owner@example.com",
            "password": DEFAULT_PASSWORD,
            "_csrf": CSRF_TOKEN,
        })

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"
        assert "_token" in response.cookies

    async def test_unconfirmed_account(self, client: AsyncClient, user_repository: UserRepository):
        await UserFactory.create_user(user_repository, email="new@example.com", confirmed=False)

        response = await client.post("/auth/login", data={
            "email": "new@example.com",
            "password": DEFAULT_PASSWORD,
            "_csrf": CSRF_TOKEN,
        })

        assert response.status_code == 200
        assert "Your account has not been confirmed" in response.text

    async def test_wrong_password(self, client: AsyncClient, owner: User):
        response = await client.post("/auth/login", data={
            "email": "owner@example.com",
            "password": "wrong-password",
            "_csrf": CSRF_TOKEN,
        })

        assert response.status_code == 200
        assert "Incorrect password" in response.text
        assert "_token" not in response.cookies

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post("/auth/login", data={
            "email": "nobody@example.com",
            "password": DEFAULT_PASSWORD,
            "_csrf": CSRF_TOKEN,
        })

        assert "User does not exist" in response.text

    async def test_logout_clears_session(self, client: AsyncClient, owner: User):
        sign_in(client, owner)

        response = await client.post("/auth/logout", data={"_csrf": CSRF_TOKEN})

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login"
        assert response.headers["set-cookie"].startswith("_token=")
        assert "Max-Age=0" in response.headers["set-cookie"]


class TestPasswordRecovery:
    """Test the forgotten password pages."""

    async def test_forgot_password_sends_link(
        self, client: AsyncClient, db_session: AsyncSession, owner: User, mailer
    ):
        response = await client.post("/auth/forgot-password", data={
            "email": "owner@example.com",
            "_csrf": CSRF_TOKEN,
        })

        assert response.status_code == 200
        await db_session.refresh(owner)
        assert owner.token
        assert f"/auth/reset-password/{owner.token}" in mailer.sent[0][2]

    async def test_forgot_password_unknown_email(self, client: AsyncClient, mailer):
        response = await client.post("/auth/forgot-password", data={
            "email": "nobody@example.com",
            "_csrf": CSRF_TOKEN,
        })

        assert "This email does not belong to any user" in response.text
        assert mailer.sent == []

    async def test_reset_password(
        self, client: AsyncClient, db_session: AsyncSession, user_repository: UserRepository
    ):
        user = await UserFactory.create_user(user_repository, email="reset@example.com", token="reset-me")

        form_page = await client.get("/auth/reset-password/reset-me")
        assert form_page.status_code == 200

        response = await client.post("/auth/reset-password/reset-me", data={
            "password": "newpass",
            "repeat_password": "newpass",
            "_csrf": CSRF_TOKEN,
        })

        assert "Password saved" in response.text
        await db_session.refresh(user)
        assert user.token is None
        assert user.verify_password("newpass")

    async def test_reset_with_unknown_token(self, client: AsyncClient):
        response = await client.get("/auth/reset-password/unknown")

        assert "Password not reset" in response.text
