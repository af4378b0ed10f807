"""
FastAPI dependencies for database sessions and error translation.
"""

from typing import Annotated, AsyncGenerator, NoReturn

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sentence_quest.database import async_session_maker
from sentence_quest.engines.progression.errors import (
    ConflictError,
    NotFoundError,
    ProgressionError,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a database session, committed when the request succeeds."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


def raise_for_progression_error(exc: ProgressionError) -> NoReturn:
    """Translate an engine error into the matching HTTP error."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        # InvalidInputError and any other engine error
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc
