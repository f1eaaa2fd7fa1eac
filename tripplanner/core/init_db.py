from sqlalchemy.ext.asyncio import AsyncEngine

from tripplanner.core.database import engine as default_engine, Base
import tripplanner.models  # noqa: F401  registers every table on Base.metadata


async def init_db(engine: AsyncEngine = None):
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
