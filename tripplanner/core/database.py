from datetime import datetime, timezone
import uuid

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tripplanner.core.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=False)
SessionLocal = sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession
)

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable on every backend we run against."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        # a failed request never leaves half a mutation behind
        await db.rollback()
        raise
    finally:
        await db.close()
