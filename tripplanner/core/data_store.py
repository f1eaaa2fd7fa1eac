from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from fastapi import Depends
from sqlalchemy import delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripplanner.core.database import Base, get_db, utcnow
from tripplanner.core.exceptions import InvalidArgument
from tripplanner.models.trips.trip_model import Trip

ModelT = TypeVar("ModelT", bound=Base)


class TripDataStore:
    """The one persistence capability handed to services.

    Wraps the request session with typed get / query / insert / patch /
    delete helpers. Nothing is committed until ``commit()``, so a service
    that raises halfway leaves the database untouched once the session
    rolls back.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        # set while this transaction holds a trip lock; reads then overwrite loaded rows
        self.locked = False

    async def get(self, model: Type[ModelT], id: Any) -> Optional[ModelT]:
        if id is None:
            return None
        return await self.db.get(model, id, populate_existing=self.locked)

    async def query(
        self,
        model: Type[ModelT],
        *criteria,
        order_by: Optional[Sequence] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelT]:
        stmt = select(model).where(*criteria)
        if self.locked:
            stmt = stmt.execution_options(populate_existing=True)
        if order_by is not None:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def first(self, model: Type[ModelT], *criteria, order_by: Optional[Sequence] = None) -> Optional[ModelT]:
        rows = await self.query(model, *criteria, order_by=order_by, limit=1)
        return rows[0] if rows else None

    async def by_ids(self, model: Type[ModelT], ids) -> Dict[Any, ModelT]:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return {}
        rows = await self.query(model, model.id.in_(wanted))
        return {row.id: row for row in rows}

    async def count(self, model: Type[ModelT], *criteria) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*criteria))
        return int(result.scalar_one())

    async def insert(self, obj: ModelT) -> ModelT:
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def insert_all(self, objs: Sequence[ModelT]) -> List[ModelT]:
        self.db.add_all(objs)
        await self.db.flush()
        return list(objs)

    async def patch(self, obj: ModelT, **fields) -> ModelT:
        mapper = inspect(type(obj))
        columns = mapper.column_attrs.keys()
        unknown = set(fields) - set(columns)
        if unknown:
            raise AttributeError(f"{type(obj).__name__} has no field(s) {sorted(unknown)}")
        required = sorted(k for k, v in fields.items() if v is None and not mapper.columns[k].nullable)
        if required:
            raise InvalidArgument(f"{', '.join(required)} cannot be null")

        for key, value in fields.items():
            setattr(obj, key, value)
        if "updated_at" in columns and "updated_at" not in fields:
            obj.updated_at = utcnow()
        if "revision" in columns:
            obj.revision = (obj.revision or 0) + 1
        await self.db.flush()
        return obj

    async def delete(self, obj: ModelT) -> None:
        await self.db.delete(obj)
        await self.db.flush()

    async def delete_where(self, model: Type[ModelT], *criteria) -> int:
        result = await self.db.execute(
            delete(model).where(*criteria).execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def lock_trip(self, trip_id: str) -> Optional[Trip]:
        """Row-lock the aggregate root for the rest of the transaction.

        Rows loaded before the lock may be stale. Every read after it
        overwrites them with the committed values, and callers that loaded
        their target first re-read it with :meth:`reload`.
        """
        result = await self.db.execute(
            select(Trip)
            .where(Trip.id == trip_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        trip = result.scalar_one_or_none()
        self.locked = True
        return trip

    async def reload(self, obj: ModelT) -> Optional[ModelT]:
        """Re-read a row from the database, or None if it is gone."""
        identity = inspect(obj).identity
        if identity is None:
            return None
        return await self.db.get(type(obj), identity[0], populate_existing=True)

    async def commit(self) -> None:
        await self.db.commit()
        self.locked = False

    async def rollback(self) -> None:
        await self.db.rollback()
        self.locked = False


async def get_store(db: AsyncSession = Depends(get_db)) -> TripDataStore:
    return TripDataStore(db)
