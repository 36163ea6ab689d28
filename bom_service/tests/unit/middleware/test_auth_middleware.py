"""
Unit tests for BOM Service Session Authentication Middleware
Tests cookie handling, user context population, and route guards.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, Request, Response

from bom_service.app.core.exceptions import ForbiddenError, UnauthorizedError
from bom_service.app.middleware.auth.auth_middleware import (
    AuthenticatedUser,
    SessionAuthMiddleware,
    optional_user,
    setup_bom_auth_middleware,
)

MODULE = "bom_service.app.middleware.auth.auth_middleware"


class TestSessionAuthMiddleware:
    """Test cases for session authentication middleware"""

    @pytest.fixture
    def auth_middleware(self):
        return SessionAuthMiddleware(app=FastAPI(), exclude_paths=["/health", "/docs"])

    @pytest.fixture
    def mock_request(self):
        request = MagicMock(spec=Request)
        request.url.path = "/api/v1/categories"
        request.method = "GET"
        request.cookies = {}
        request.headers = {}
        request.state = SimpleNamespace()
        return request

    @pytest.fixture
    def mock_database_manager(self):
        manager = MagicMock()
        manager.async_session_maker.return_value = MagicMock()
        return manager

    def test_should_skip_auth_excluded_paths(self, auth_middleware):
        assert auth_middleware._should_skip_auth("/health")
        assert auth_middleware._should_skip_auth("/docs/oauth2-redirect")
        assert not auth_middleware._should_skip_auth("/healthz")
        assert not auth_middleware._should_skip_auth("/api/v1/categories")

    async def test_missing_cookie(self, auth_middleware, mock_request):
        result = await auth_middleware._authenticate_request(mock_request)

        assert result == {"authenticated": False, "reason": "missing_session_cookie"}

    async def test_placeholder_cookie(self, auth_middleware, mock_request):
        mock_request.cookies = {"auth-session": "undefined"}

        result = await auth_middleware._authenticate_request(mock_request)

        assert result["reason"] == "empty_session_cookie"

    async def test_valid_cookie(
        self, auth_middleware, mock_request, mock_database_manager
    ):
        mock_request.cookies = {"auth-session": "token-value"}
        user = SimpleNamespace(id=5, role="admin")

        with patch(
            f"{MODULE}.get_database_manager", return_value=mock_database_manager
        ), patch(f"{MODULE}.AuthService") as auth_service_class:
            auth_service_class.return_value.validate_session_token = AsyncMock(
                return_value=(MagicMock(), user)
            )
            result = await auth_middleware._authenticate_request(mock_request)

        auth_service_class.return_value.validate_session_token.assert_awaited_once_with(
            "token-value"
        )
        assert result == {"authenticated": True, "user_id": 5, "user_role": "admin"}

    async def test_invalid_cookie(
        self, auth_middleware, mock_request, mock_database_manager
    ):
        mock_request.cookies = {"auth-session": "expired"}

        with patch(
            f"{MODULE}.get_database_manager", return_value=mock_database_manager
        ), patch(f"{MODULE}.AuthService") as auth_service_class:
            auth_service_class.return_value.validate_session_token = AsyncMock(
                return_value=None
            )
            result = await auth_middleware._authenticate_request(mock_request)

        assert result["authenticated"] is False
        assert result["reason"] == "invalid_session_cookie"

    async def test_dispatch_populates_state(self, auth_middleware, mock_request):
        call_next = AsyncMock(return_value=Response("ok"))
        auth_middleware._authenticate_request = AsyncMock(
            return_value={"authenticated": True, "user_id": 3, "user_role": "user"}
        )

        response = await auth_middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        assert mock_request.state.user_id == 3
        assert mock_request.state.user_role == "user"
        assert mock_request.state.correlation_id
        call_next.assert_awaited_once_with(mock_request)

    async def test_dispatch_anonymous_request_continues(
        self, auth_middleware, mock_request
    ):
        call_next = AsyncMock(return_value=Response("ok"))

        response = await auth_middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        assert mock_request.state.user_id is None
        call_next.assert_awaited_once()

    async def test_dispatch_clears_stale_cookie(self, auth_middleware, mock_request):
        call_next = AsyncMock(return_value=Response("ok"))
        auth_middleware._authenticate_request = AsyncMock(
            return_value={"authenticated": False, "reason": "invalid_session_cookie"}
        )

        response = await auth_middleware.dispatch(mock_request, call_next)

        cookies = response.headers.getlist("set-cookie")
        assert response.status_code == 200
        assert mock_request.state.user_id is None
        assert len(cookies) == 1
        assert cookies[0].startswith("auth-session=")
        assert "Max-Age=0" in cookies[0]

    async def test_dispatch_keeps_cookie_set_by_route(
        self, auth_middleware, mock_request
    ):
        login_response = Response("ok")
        login_response.set_cookie("auth-session", "fresh-token")
        call_next = AsyncMock(return_value=login_response)
        auth_middleware._authenticate_request = AsyncMock(
            return_value={"authenticated": False, "reason": "invalid_session_cookie"}
        )

        response = await auth_middleware.dispatch(mock_request, call_next)

        assert response.headers.getlist("set-cookie") == [
            login_response.headers["set-cookie"]
        ]
        assert "fresh-token" in response.headers["set-cookie"]

    async def test_dispatch_missing_cookie_sets_no_cookie(
        self, auth_middleware, mock_request
    ):
        call_next = AsyncMock(return_value=Response("ok"))

        response = await auth_middleware.dispatch(mock_request, call_next)

        assert response.headers.getlist("set-cookie") == []

    async def test_dispatch_keeps_incoming_correlation_id(
        self, auth_middleware, mock_request
    ):
        mock_request.headers = {"X-Correlation-ID": "abc-123"}
        call_next = AsyncMock(return_value=Response("ok"))

        await auth_middleware.dispatch(mock_request, call_next)

        assert mock_request.state.correlation_id == "abc-123"

    async def test_dispatch_authentication_failure(
        self, auth_middleware, mock_request
    ):
        call_next = AsyncMock()
        auth_middleware._authenticate_request = AsyncMock(
            side_effect=RuntimeError("database down")
        )

        response = await auth_middleware.dispatch(mock_request, call_next)

        assert response.status_code == 500
        call_next.assert_not_called()

    def test_setup_bom_auth_middleware(self):
        app = FastAPI()

        setup_bom_auth_middleware(app)

        assert any(m.cls is SessionAuthMiddleware for m in app.user_middleware)


class TestAuthenticatedUser:
    def _request(self, user_id=None, user_role=None):
        request = MagicMock(spec=Request)
        request.state = SimpleNamespace(user_id=user_id, user_role=user_role)
        return request

    async def test_anonymous_request_rejected(self):
        with pytest.raises(UnauthorizedError):
            await AuthenticatedUser()(self._request())

    async def test_authenticated_user(self):
        current = await AuthenticatedUser()(self._request(4, "user"))

        assert current.user_id == 4
        assert current.is_admin is False

    async def test_admin_role_required(self):
        with pytest.raises(ForbiddenError):
            await AuthenticatedUser(required_role="admin")(self._request(4, "user"))

        admin = await AuthenticatedUser(required_role="admin")(
            self._request(1, "admin")
        )
        assert admin.is_admin is True

    async def test_optional_user(self):
        assert await optional_user(self._request()) is None

        current = await optional_user(self._request(9, "user"))
        assert current.user_id == 9
