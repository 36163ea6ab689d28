import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bom_service.app.core.database import get_database_manager
from bom_service.app.core.exceptions import ForbiddenError, UnauthorizedError
from bom_service.app.core.settings import get_settings
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.auth_service import AuthService
from bom_service.app.utils.logging import setup_bom_logging
from bom_service.app.utils.session_cookie import delete_session_cookie

logger = setup_bom_logging("bom_service_auth")
settings = get_settings()

DEFAULT_EXCLUDE_PATHS = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Resolve the session cookie of each request into a user context.

    A request without a usable cookie continues anonymously; routes that need
    a user reject it through ``AuthenticatedUser``.
    """

    def __init__(self, app: Any, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDE_PATHS
        self.cookie_name = settings.SESSION_COOKIE_NAME

    def _should_skip_auth(self, path: str) -> bool:
        """Check if the request path should skip authentication."""

        for exclude_path in self.exclude_paths:
            if path == exclude_path or path.startswith(exclude_path + "/"):
                return True
        return False

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-ID")
            or request.headers.get("x-request-id")
            or str(uuid.uuid4())
        )
        request.state.correlation_id = correlation_id
        request.state.user_id = None
        request.state.user_role = None

        if self._should_skip_auth(request.url.path):
            return await call_next(request)

        try:
            auth_result = await self._authenticate_request(request)
        except Exception as e:
            logger.error(
                f"Authentication error: {str(e)}",
                extra={
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "service": "bom_service",
                    "event_type": "auth_error",
                },
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "type": "authentication_system_error",
                        "message": "Authentication system error",
                        "correlation_id": correlation_id,
                    }
                },
            )

        if auth_result["authenticated"]:
            request.state.user_id = auth_result["user_id"]
            request.state.user_role = auth_result["user_role"]
            logger.debug(
                "Request authenticated",
                extra={
                    "correlation_id": correlation_id,
                    "user_id": auth_result["user_id"],
                    "user_role": auth_result["user_role"],
                    "path": request.url.path,
                    "method": request.method,
                    "event_type": "auth_success",
                },
            )
        elif auth_result["reason"] != "missing_session_cookie":
            logger.info(
                f"Session rejected: {auth_result['reason']}",
                extra={
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "reason": auth_result["reason"],
                    "event_type": "auth_failed",
                },
            )
            if auth_result["reason"] == "invalid_session_cookie":
                response = await call_next(request)
                if not self._sets_session_cookie(response):
                    delete_session_cookie(response)
                return response

        return await call_next(request)

    def _sets_session_cookie(self, response: Response) -> bool:
        prefix = f"{self.cookie_name}="
        return any(
            header.startswith(prefix)
            for header in response.headers.getlist("set-cookie")
        )

    async def _authenticate_request(self, request: Request) -> Dict[str, Any]:
        """Validate the session cookie against the sessions table."""

        token = request.cookies.get(self.cookie_name)
        if not token:
            return {"authenticated": False, "reason": "missing_session_cookie"}
        if token in ("null", "undefined") or token.strip() == "":
            return {"authenticated": False, "reason": "empty_session_cookie"}

        async with get_database_manager().async_session_maker() as session:
            found = await AuthService(session).validate_session_token(token)

        if found is None:
            return {"authenticated": False, "reason": "invalid_session_cookie"}

        _, user = found
        return {
            "authenticated": True,
            "user_id": user.id,
            "user_role": user.role,
        }


class AuthenticatedUser:
    """Dependency to get authenticated user info from request."""

    def __init__(self, required_role: Optional[str] = None):
        self.required_role = required_role

    async def __call__(self, request: Request) -> CurrentUser:
        user_id = getattr(request.state, "user_id", None)
        user_role = getattr(request.state, "user_role", None) or "user"

        if not user_id:
            raise UnauthorizedError("Authentication required")

        if self.required_role and user_role != self.required_role:
            raise ForbiddenError(f"Required role: {self.required_role}")

        return CurrentUser(user_id=user_id, role=user_role)


async def optional_user(request: Request) -> Optional[CurrentUser]:
    """The caller's identity, or ``None`` for an anonymous request."""

    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        return None
    return CurrentUser(
        user_id=user_id, role=getattr(request.state, "user_role", None) or "user"
    )


def setup_bom_auth_middleware(
    app: FastAPI,
    exclude_paths: Optional[list[str]] = None,
) -> None:
    """Setup session authentication middleware for the BOM Service."""

    if exclude_paths is None:
        exclude_paths = DEFAULT_EXCLUDE_PATHS

    app.add_middleware(SessionAuthMiddleware, exclude_paths=exclude_paths)

    logger.info(
        "BOM Service authentication middleware configured",
        extra={
            "service": "bom_service",
            "excluded_paths": exclude_paths,
            "event_type": "auth_middleware_setup",
        },
    )


authenticated_user = AuthenticatedUser()
admin_user = AuthenticatedUser(required_role="admin")
