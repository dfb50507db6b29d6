from typing import List

from sqlalchemy import select

from webblog.models import Comment
from webblog.repositories.base import SqlalchemyRepository


class CommentRepository(SqlalchemyRepository[Comment]):
    model = Comment

    async def list_by_article(self, article_id: int) -> List[Comment]:
        q = (
            select(Comment)
            .where(Comment.article_id == article_id)
            .order_by(Comment.created_at)
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())
