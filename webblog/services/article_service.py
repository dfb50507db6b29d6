"""
Article service — business logic for the Article aggregate.

Design notes
------------
- Tag policy is the same for create and edit: a selected tag name with no
  matching Tag row creates the Tag in the same transaction.
- Ownership is the article's ``author_id``; authorisation checks compare
  it with the acting user rather than recording per-article claims.
- Edits are guarded by the ``version_id`` optimistic concurrency token.
  A ``StaleDataError`` on flush means the row changed or vanished under
  us: a vanished row is reported as not-found, anything else surfaces as
  ``ConcurrencyConflictError`` (HTTP 409).  Nothing is retried.
- Service functions flush through the repositories but do not commit;
  the transaction boundary is owned by the ``get_db`` dependency.
"""
import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from webblog.exceptions import ConcurrencyConflictError, EntityNotFoundError
from webblog.models import Article, Tag, User
from webblog.repositories import ArticleRepository, TagRepository, UserRepository
from webblog.schemas import ArticleCreate, ArticleUpdate, TagChoice

logger = logging.getLogger(__name__)

SORT_TITLE = "Title"
SORT_AUTHOR = "Author"
SORT_CREATED = "DateCreation"


# ---------------------------------------------------------------------------
# Tag resolution helper (used by create / edit)
# ---------------------------------------------------------------------------

async def _resolve_tag(tags: TagRepository, name: str) -> Tag:
    """Return the Tag named *name*, staging a new one if none exists."""
    tag = await tags.get_by_name(name)
    if tag is None:
        tag = Tag(name=name)
        await tags.insert(tag)
        await tags.save()
        logger.info("Tag '%s' created", name)
    return tag


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_article(db: AsyncSession, article_id: int) -> Article | None:
    return await ArticleRepository(db).get_by_id(article_id)


async def list_articles(db: AsyncSession) -> list[Article]:
    return await ArticleRepository(db).list_all()


async def list_articles_by_author(db: AsyncSession, author_id: int) -> list[Article]:
    return await ArticleRepository(db).list_by_author(author_id)


def sort_articles(articles: Iterable[Article], sort_order: str | None) -> list[Article]:
    """
    Order *articles* by one of ``Title``, ``Author`` (author e-mail) or
    ``DateCreation``.  Anything else falls back to newest first.
    """
    if sort_order == SORT_TITLE:
        return sorted(articles, key=lambda a: a.title)
    if sort_order == SORT_AUTHOR:
        return sorted(articles, key=lambda a: a.author.email if a.author else "")
    return sorted(articles, key=lambda a: a.created_at, reverse=True)


async def get_tag_choices(db: AsyncSession) -> list[TagChoice]:
    """All known tags, unselected, for the article creation form."""
    tags = await TagRepository(db).list_all()
    return [TagChoice(id=t.id, name=t.name) for t in tags]


async def get_edit_form(db: AsyncSession, article_id: int) -> tuple[Article, list[TagChoice]] | None:
    """
    Return the article together with every known tag, each flagged as
    selected when it is currently attached to the article.

    Returns None when the article does not exist.
    """
    article = await ArticleRepository(db).get_by_id(article_id)
    if article is None:
        return None
    attached = {t.id for t in article.tags}
    choices = [
        TagChoice(id=t.id, name=t.name, is_selected=t.id in attached)
        for t in await TagRepository(db).list_all()
    ]
    return article, choices


async def increment_view_count(db: AsyncSession, article_id: int) -> bool:
    """Best effort: a failed counter update is logged and ignored."""
    try:
        await ArticleRepository(db).increment_views(article_id)
        return True
    except SQLAlchemyError:
        logger.exception("Failed to increment view count of article %s", article_id)
        await db.rollback()
        return False


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def add_article(db: AsyncSession, data: ArticleCreate, user: User) -> Article | None:
    """
    Create an article for ``data.author_id`` (defaults to *user*) with the
    checked tags attached, creating any tag that does not exist yet.

    Raises:
        EntityNotFoundError: the author does not exist.

    Returns None when the database rejects the write; the error is logged
    and the transaction rolled back.
    """
    author_id = data.author_id if data.author_id is not None else user.id
    author = await UserRepository(db).get_by_id(author_id)
    if author is None:
        raise EntityNotFoundError("User", author_id)

    articles = ArticleRepository(db)
    tags = TagRepository(db)
    try:
        checked = [t.name for t in data.tags if t.is_checked]
        # Tags first: resolving one may flush, and the article joins the
        # session only through insert().
        resolved = [await _resolve_tag(tags, name) for name in dict.fromkeys(checked)]
        article = Article(
            title=data.title,
            content=data.content,
            author_id=author.id,
            author=author,
            comments=[],
            tags=resolved,
        )
        await articles.insert(article)
        await articles.save()
    except SQLAlchemyError:
        logger.exception("Failed to add article '%s'", data.title)
        await db.rollback()
        return None

    logger.info("Article %s '%s' added by user %s", article.id, article.title, user.id)
    return article


async def edit_article(db: AsyncSession, data: ArticleUpdate) -> Article | None:
    """
    Replace title and content of ``data.article_id`` and reconcile its tags.

    For every tag in the request: selected and not attached -> attach
    (looked up or created by name); unselected and attached -> detach.
    Tags not mentioned in the request are left alone.

    Returns None when the article does not exist (or disappeared while the
    edit was being saved).

    Raises:
        ConcurrencyConflictError: ``data.version`` is stale, or another
            request updated the row before this one was flushed.
    """
    articles = ArticleRepository(db)
    tags = TagRepository(db)

    article = await articles.get_by_id(data.article_id)
    if article is None:
        return None
    if data.version is not None and data.version != article.version_id:
        raise ConcurrencyConflictError("Article", data.article_id)

    try:
        article.title = data.title
        if data.content is not None:
            article.content = data.content

        for requested in data.tags:
            attached = next((t for t in article.tags if t.name == requested.name), None)
            if requested.is_selected and attached is None:
                article.tags.append(await _resolve_tag(tags, requested.name))
            elif not requested.is_selected and attached is not None:
                article.tags.remove(attached)

        if not await articles.mark_modified(article):
            return None
        await articles.save()
    except StaleDataError:
        await db.rollback()
        if not await articles.exists(data.article_id):
            logger.info("Article %s was deleted during edit", data.article_id)
            return None
        logger.warning("Concurrent edit of article %s rejected", data.article_id)
        raise ConcurrencyConflictError("Article", data.article_id)

    logger.info("Article %s '%s' edited", article.id, article.title)
    return article


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    """
    Delete *article_id* together with its comments and tag links.

    Returns True on success, False when the article does not exist or the
    database refused the delete (logged).
    """
    articles = ArticleRepository(db)
    try:
        if not await articles.exists(article_id):
            return False
        await articles.delete(article_id)
        await articles.save()
    except SQLAlchemyError:
        logger.exception("Failed to delete article %s", article_id)
        await db.rollback()
        return False

    logger.info("Article %s deleted", article_id)
    return True
