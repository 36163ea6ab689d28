from datetime import timedelta

import pytest

from bom_service.app.core.exceptions import AlreadyExistsError, UnauthorizedError
from bom_service.app.core.security import SecurityUtils
from bom_service.app.models.user import Session
from bom_service.app.schemas.user import UserLoginRequest, UserRegistrationRequest
from bom_service.app.services.auth_service import AuthService


class TestAuthService:
    """Registration, login and session lifetime against a real SQLite database."""

    @pytest.fixture
    def auth_service(self, db_session):
        return AuthService(db_session)

    @pytest.fixture
    async def registered(self, auth_service):
        return await auth_service.register_user(
            UserRegistrationRequest(
                email="Jane@Example.com", password="strongpassword123", username="jane"
            )
        )

    async def test_register_user_hashes_password(self, registered):
        assert registered.email == "jane@example.com"
        assert registered.password_hash != "strongpassword123"
        assert SecurityUtils.verify_password(
            "strongpassword123", registered.password_hash
        )
        assert registered.role == "user"

    async def test_register_duplicate_email(self, auth_service, registered):
        with pytest.raises(AlreadyExistsError) as exc_info:
            await auth_service.register_user(
                UserRegistrationRequest(
                    email="jane@example.com", password="anotherpassword"
                )
            )

        assert exc_info.value.message == "Email already registered"

    async def test_register_duplicate_username(self, auth_service, registered):
        with pytest.raises(AlreadyExistsError):
            await auth_service.register_user(
                UserRegistrationRequest(
                    email="other@example.com",
                    password="anotherpassword",
                    username="jane",
                )
            )

    async def test_login_with_wrong_password(self, auth_service, registered):
        with pytest.raises(UnauthorizedError) as exc_info:
            await auth_service.login(
                UserLoginRequest(email="jane@example.com", password="wrong-password")
            )

        assert exc_info.value.status_code == 401

    async def test_login_unknown_email(self, auth_service):
        with pytest.raises(UnauthorizedError):
            await auth_service.login(
                UserLoginRequest(email="nobody@example.com", password="whatever1")
            )

    async def test_login_creates_session(self, auth_service, registered):
        token, login_session, user = await auth_service.login(
            UserLoginRequest(email="jane@example.com", password="strongpassword123")
        )

        assert user.id == registered.id
        assert login_session.id == SecurityUtils.session_id_from_token(token)
        assert login_session.id != token
        assert len(login_session.id) == 64

        found = await auth_service.validate_session_token(token)
        assert found is not None
        assert found[1].id == registered.id

    async def test_unknown_token_is_rejected(self, auth_service):
        assert await auth_service.validate_session_token("not-a-token") is None

    async def test_expired_session_is_deleted(
        self, auth_service, db_session, registered
    ):
        token = SecurityUtils.generate_session_token()
        login_session = await auth_service.create_session(token, registered.id)
        session_id = login_session.id

        later = login_session.expires_at + timedelta(seconds=1)
        assert await auth_service.validate_session_token(token, now=later) is None
        assert await db_session.get(Session, session_id) is None

    async def test_session_renewed_when_close_to_expiry(
        self, auth_service, registered
    ):
        token = SecurityUtils.generate_session_token()
        login_session = await auth_service.create_session(token, registered.id)

        now = login_session.expires_at - timedelta(days=10)
        renewed, _ = await auth_service.validate_session_token(token, now=now)

        assert renewed.expires_at == now + timedelta(days=30)

    async def test_session_not_renewed_when_fresh(self, auth_service, registered):
        token = SecurityUtils.generate_session_token()
        login_session = await auth_service.create_session(token, registered.id)
        original_expiry = login_session.expires_at

        now = original_expiry - timedelta(days=20)
        found, _ = await auth_service.validate_session_token(token, now=now)

        assert found.expires_at == original_expiry

    async def test_logout_invalidates_session(self, auth_service, registered):
        token, _, _ = await auth_service.login(
            UserLoginRequest(email="jane@example.com", password="strongpassword123")
        )

        await auth_service.logout(token)

        assert await auth_service.validate_session_token(token) is None

    async def test_get_user(self, auth_service, registered):
        user = await auth_service.get_user(registered.id)
        assert user.email == "jane@example.com"

        with pytest.raises(UnauthorizedError):
            await auth_service.get_user(registered.id + 100)
