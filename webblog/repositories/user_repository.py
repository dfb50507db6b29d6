from typing import List, Optional

from sqlalchemy import select

from webblog.models import User
from webblog.repositories.base import SqlalchemyRepository


class UserRepository(SqlalchemyRepository[User]):
    model = User

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.username.asc()))
        return list(result.scalars().all())
