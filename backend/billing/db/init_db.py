import asyncio

from billing.db.session import engine
from billing.db.base import Base

# Import every model so its table is registered on Base.metadata
import billing.models  # noqa: F401


async def ensure_tables_exist() -> None:
    """
    Create missing tables (called at application startup)
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    asyncio.run(ensure_tables_exist())
