from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class SqlalchemyRepository(Generic[ModelT]):
    """
    CRUD primitives over the request's ``AsyncSession``.

    Writes are only staged here: ``insert``, ``mark_modified`` and
    ``delete`` touch the session's unit of work, and ``save`` flushes
    everything staged so far.  The surrounding transaction is committed
    by the ``get_db`` dependency, so every write in a request lands
    together or not at all.
    """

    model: Type[ModelT]

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def exists(self, entity_id: int) -> bool:
        q = select(exists().where(self.model.id == entity_id))
        return bool((await self.db.execute(q)).scalar())

    async def get_by_id(self, entity_id: int) -> Optional[ModelT]:
        return await self.db.get(self.model, entity_id)

    async def list_all(self) -> List[ModelT]:
        result = await self.db.execute(select(self.model).order_by(self.model.id))
        return list(result.scalars().all())

    async def insert(self, entity: ModelT) -> None:
        self.db.add(entity)

    async def mark_modified(self, entity: ModelT) -> bool:
        """
        Stage an update of *entity*.

        Instances already tracked by the session are dirty-tracked as-is.
        Detached or freshly built instances are merged onto the stored row;
        returns False when no row with that id exists.
        """
        if entity in self.db:
            return True
        if entity.id is None or await self.db.get(self.model, entity.id) is None:
            return False
        await self.db.merge(entity)
        return True

    async def delete(self, entity_id: int) -> None:
        entity = await self.db.get(self.model, entity_id)
        if entity is not None:
            await self.db.delete(entity)

    async def save(self) -> None:
        await self.db.flush()
