from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.orm import selectinload

from webblog.models import Tag
from webblog.repositories.base import SqlalchemyRepository


class TagRepository(SqlalchemyRepository[Tag]):
    model = Tag

    async def get_by_name(self, name: str) -> Optional[Tag]:
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        condition = Tag.name == name
        if exclude_id is not None:
            condition = condition & (Tag.id != exclude_id)
        return bool((await self.db.execute(select(exists().where(condition)))).scalar())

    async def list_all(self, include_articles: bool = False) -> List[Tag]:
        q = select(Tag).order_by(Tag.name)
        if include_articles:
            q = q.options(selectinload(Tag.articles))
        result = await self.db.execute(q)
        return list(result.scalars().all())
