from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import translate_integrity_error


@asynccontextmanager
async def transaction(
    db: AsyncSession, already_exists_message: str = "Record already exists"
) -> AsyncIterator[AsyncSession]:
    """Commit the work done inside the block, or roll all of it back.

    Integrity errors are re-raised as domain errors. ORM objects loaded
    before a rollback are expired and must not be read afterwards.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, already_exists_message) from e
    except BaseException:
        await db.rollback()
        raise
