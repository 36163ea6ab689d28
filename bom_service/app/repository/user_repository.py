from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import Session, User


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def query_id(self, user_id: int) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def query_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def query_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user


class SessionRepository:
    """Login sessions, keyed by the digest of their cookie token."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, session_id: str, user_id: int, expires_at: datetime
    ) -> Session:
        login_session = Session(id=session_id, user_id=user_id, expires_at=expires_at)
        self.session.add(login_session)
        await self.session.flush()
        return login_session

    async def query_with_user(self, session_id: str) -> Optional[Tuple[Session, User]]:
        result = await self.session.execute(
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.id == session_id)
        )
        row = result.first()
        return (row[0], row[1]) if row else None

    async def delete(self, session_id: str) -> None:
        await self.session.execute(delete(Session).where(Session.id == session_id))
