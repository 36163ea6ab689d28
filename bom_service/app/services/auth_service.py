from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AlreadyExistsError, UnauthorizedError
from ..core.security import SecurityUtils
from ..core.settings import get_settings
from ..models.base import utcnow
from ..models.user import Session, User
from ..repository.user_repository import SessionRepository, UserRepository
from ..schemas.user import UserLoginRequest, UserRegistrationRequest
from ..utils.logging import setup_bom_logging as setup_logging
from .transaction import transaction

settings = get_settings()
logger = setup_logging("bom_service.auth", log_level=settings.LOG_LEVEL)


class AuthService:
    """Accounts and cookie sessions.

    A session lives ``SESSION_TTL_DAYS`` days and is pushed out to a fresh
    lifetime whenever it is used with fewer than ``SESSION_RENEW_WITHIN_DAYS``
    days left. Expired sessions are deleted when they are presented.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)
        self.session_repository = SessionRepository(session)
        self.session_ttl = timedelta(days=settings.SESSION_TTL_DAYS)
        self.renew_within = timedelta(days=settings.SESSION_RENEW_WITHIN_DAYS)

    async def register_user(self, data: UserRegistrationRequest) -> User:
        """Register a new user"""
        email = data.email.lower()
        if await self.user_repository.query_email(email):
            logger.warning(
                "Registration failed, email already exists", extra={"email": email}
            )
            raise AlreadyExistsError("Email already registered")
        if data.username and await self.user_repository.query_username(data.username):
            raise AlreadyExistsError("Username already taken")

        user = User(
            email=email,
            username=data.username,
            full_name=data.full_name,
            password_hash=SecurityUtils.hash_password(data.password),
        )
        async with transaction(self.session, "Email or username already registered"):
            await self.user_repository.create(user)

        logger.info("User registered", extra={"user_id": user.id, "email": email})
        return user

    async def login(self, data: UserLoginRequest) -> Tuple[str, Session, User]:
        """Check credentials and open a new session; returns the cookie token."""
        user = await self.user_repository.query_email(data.email)
        if (
            user is None
            or not user.is_active
            or not SecurityUtils.verify_password(data.password, user.password_hash)
        ):
            logger.warning("Login failed", extra={"email": data.email})
            raise UnauthorizedError("Invalid email or password")

        token = SecurityUtils.generate_session_token()
        login_session = await self.create_session(token, user.id)
        logger.info("User logged in", extra={"user_id": user.id})
        return token, login_session, user

    async def create_session(self, token: str, user_id: int) -> Session:
        async with transaction(self.session):
            login_session = await self.session_repository.create(
                SecurityUtils.session_id_from_token(token),
                user_id,
                utcnow() + self.session_ttl,
            )
        return login_session

    async def validate_session_token(
        self, token: str, now: Optional[datetime] = None
    ) -> Optional[Tuple[Session, User]]:
        """Resolve a cookie token to its session and user, or ``None``."""
        now = now or utcnow()
        session_id = SecurityUtils.session_id_from_token(token)
        found = await self.session_repository.query_with_user(session_id)
        if found is None:
            return None

        login_session, user = found
        if now >= login_session.expires_at:
            async with transaction(self.session):
                await self.session_repository.delete(session_id)
            logger.info("Expired session removed", extra={"user_id": user.id})
            return None
        if not user.is_active:
            return None

        if now >= login_session.expires_at - self.renew_within:
            async with transaction(self.session):
                login_session.expires_at = now + self.session_ttl
            logger.debug("Session renewed", extra={"user_id": user.id})
        return login_session, user

    async def invalidate_session(self, session_id: str) -> None:
        async with transaction(self.session):
            await self.session_repository.delete(session_id)

    async def logout(self, token: str) -> None:
        await self.invalidate_session(SecurityUtils.session_id_from_token(token))

    async def get_user(self, user_id: int) -> User:
        """The active user behind an authenticated request."""
        user = await self.user_repository.query_id(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found")
        return user
