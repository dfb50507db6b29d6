from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import joinedload, selectinload

from webblog.models import Article
from webblog.repositories.base import SqlalchemyRepository

# Everything an article view needs, loaded up front: author is many-to-one
# (JOIN), tags and comments are collections (one extra SELECT each).
_ARTICLE_LOAD_OPTIONS = (
    joinedload(Article.author),
    selectinload(Article.tags),
    selectinload(Article.comments),
)


class ArticleRepository(SqlalchemyRepository[Article]):
    model = Article

    async def get_by_id(self, article_id: int) -> Optional[Article]:
        q = select(Article).where(Article.id == article_id).options(*_ARTICLE_LOAD_OPTIONS)
        result = await self.db.execute(q)
        return result.unique().scalar_one_or_none()

    async def list_all(self) -> List[Article]:
        q = (
            select(Article)
            .options(*_ARTICLE_LOAD_OPTIONS)
            .order_by(Article.created_at.desc())
        )
        result = await self.db.execute(q)
        return list(result.unique().scalars().all())

    async def list_by_author(self, author_id: int) -> List[Article]:
        q = (
            select(Article)
            .where(Article.author_id == author_id)
            .options(*_ARTICLE_LOAD_OPTIONS)
            .order_by(Article.created_at.desc())
        )
        result = await self.db.execute(q)
        return list(result.unique().scalars().all())

    async def delete(self, article_id: int) -> None:
        # Tags and comments must be loaded so the unit of work removes the
        # article_tags rows and the owned comments along with the article.
        q = (
            select(Article)
            .where(Article.id == article_id)
            .options(selectinload(Article.tags), selectinload(Article.comments))
            .execution_options(populate_existing=True)
        )
        article = (await self.db.execute(q)).scalar_one_or_none()
        if article is not None:
            await self.db.delete(article)

    async def increment_views(self, article_id: int) -> None:
        q = (
            update(Article)
            .where(Article.id == article_id)
            .values(view_count=Article.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(q)
