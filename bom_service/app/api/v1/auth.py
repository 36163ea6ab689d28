from typing import Optional

from fastapi import APIRouter, Request, Response, status

from bom_service.app.api.dependencies import (
    AuthenticatedUserDep,
    AuthServiceDep,
    CorrelationIdDep,
)
from bom_service.app.core.settings import get_settings
from bom_service.app.schemas.user import (
    CurrentUser,
    UserLoginRequest,
    UserLoginResponse,
    UserLogoutResponse,
    UserRegistrationRequest,
    UserResponse,
)
from bom_service.app.services.auth_service import AuthService
from bom_service.app.utils.logging import setup_bom_logging
from bom_service.app.utils.session_cookie import (
    delete_session_cookie,
    set_session_cookie,
)

logger = setup_bom_logging("auth_api")
settings = get_settings()
router = APIRouter(prefix="/auth")


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    data: UserRegistrationRequest,
    service: AuthService = AuthServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> UserResponse:
    user = await service.register_user(data)
    logger.info(
        f"User registered successfully: {user.email}",
        extra={"correlation_id": correlation_id},
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserLoginResponse, status_code=status.HTTP_200_OK)
async def login(
    response: Response,
    data: UserLoginRequest,
    service: AuthService = AuthServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> UserLoginResponse:
    token, login_session, user = await service.login(data)
    set_session_cookie(response, token, login_session.expires_at)
    logger.info(
        f"User login successful: {user.id}",
        extra={"correlation_id": correlation_id},
    )
    return UserLoginResponse(
        user=UserResponse.model_validate(user), expires_at=login_session.expires_at
    )


@router.post(
    "/logout", response_model=UserLogoutResponse, status_code=status.HTTP_200_OK
)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser = AuthenticatedUserDep,
    service: AuthService = AuthServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> UserLogoutResponse:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        await service.logout(token)
    delete_session_cookie(response)
    logger.info(
        f"User logout successful: {current_user.user_id}",
        extra={"correlation_id": correlation_id},
    )
    return UserLogoutResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: CurrentUser = AuthenticatedUserDep,
    service: AuthService = AuthServiceDep,
) -> UserResponse:
    return UserResponse.model_validate(await service.get_user(current_user.user_id))
