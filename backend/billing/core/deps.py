"""Dependencies"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from billing.db import session as db_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session for one request
    """
    async with db_session.SessionLocal() as session:
        yield session
