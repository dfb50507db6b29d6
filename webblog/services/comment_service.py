"""
Comment service — comments attached to an Article.

A comment always belongs to an existing article and to the user who wrote
it.  Edits replace title and content; deleting an article removes its
comments through the database cascade.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.exceptions import EntityNotFoundError, UpdateFailedError
from webblog.models import Comment, User
from webblog.repositories import ArticleRepository, CommentRepository
from webblog.schemas import CommentCreate, CommentUpdate

logger = logging.getLogger(__name__)


async def get_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    return await CommentRepository(db).get_by_id(comment_id)


async def list_comments(db: AsyncSession) -> list[Comment]:
    return await CommentRepository(db).list_all()


async def list_comments_for_article(db: AsyncSession, article_id: int) -> list[Comment]:
    return await CommentRepository(db).list_by_article(article_id)


async def add_comment(db: AsyncSession, data: CommentCreate, user: User) -> Comment:
    """
    Append a comment by *user* to ``data.article_id``.

    Raises:
        EntityNotFoundError: the target article does not exist.
    """
    if not await ArticleRepository(db).exists(data.article_id):
        raise EntityNotFoundError("Article", data.article_id)

    comments = CommentRepository(db)
    comment = Comment(
        title=data.title,
        content=data.content,
        article_id=data.article_id,
        author_id=user.id,
    )
    await comments.insert(comment)
    await comments.save()

    logger.info("Comment %s added to article %s", comment.id, comment.article_id)
    return comment


async def update_comment(db: AsyncSession, data: CommentUpdate) -> Comment:
    """
    Replace title and content of ``data.comment_id``.

    Raises:
        EntityNotFoundError: no comment with that id.
        UpdateFailedError: the comment could not be attached for update.
    """
    comments = CommentRepository(db)
    if not await comments.exists(data.comment_id):
        raise EntityNotFoundError("Comment", data.comment_id)

    changes = Comment(id=data.comment_id, title=data.title, content=data.content)
    if not await comments.mark_modified(changes):
        raise UpdateFailedError(f"Comment {data.comment_id} could not be updated")
    await comments.save()

    logger.info("Comment %s edited", data.comment_id)
    return await comments.get_by_id(data.comment_id)


async def delete_comment(db: AsyncSession, comment_id: int) -> bool:
    """Returns False when the comment does not exist or the delete failed."""
    comments = CommentRepository(db)
    try:
        if not await comments.exists(comment_id):
            return False
        await comments.delete(comment_id)
        await comments.save()
    except SQLAlchemyError:
        logger.exception("Failed to delete comment %s", comment_id)
        await db.rollback()
        return False

    logger.info("Comment %s deleted", comment_id)
    return True
