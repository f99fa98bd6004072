"""
FastAPI dependencies following kkb_fastapi pattern.
"""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.session_manager.db_session import Database


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session, committed when the request succeeds."""
    async with Database() as session:
        yield session
