from typing import List, Optional

from sqlalchemy import select

from webblog.models import Role
from webblog.repositories.base import SqlalchemyRepository


class RoleRepository(SqlalchemyRepository[Role]):
    model = Role

    async def get_by_name(self, name: str) -> Optional[Role]:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Role]:
        result = await self.db.execute(select(Role).order_by(Role.security_level.desc()))
        return list(result.scalars().all())
